from django.urls import path

from .views import GlobalConfigAPIView

urlpatterns = [
    path("", GlobalConfigAPIView.as_view(), name="global-config"),
]
