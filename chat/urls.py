from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import InboxAPIView, MessageViewSet, SupportContactAPIView, UnreadCountAPIView

router = DefaultRouter()
router.register(r"messages", MessageViewSet, basename="message")

urlpatterns = [
    path("", include(router.urls)),
    path("support-contact/", SupportContactAPIView.as_view(), name="support-contact"),
    path("unread-count/", UnreadCountAPIView.as_view(), name="unread-count"),
    path("inbox/", InboxAPIView.as_view(), name="inbox"),
]
