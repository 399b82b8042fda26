from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import JoinRequestViewSet, TournamentViewSet

router = DefaultRouter()
router.register(r"tournaments", TournamentViewSet, basename="tournament")
router.register(r"join-requests", JoinRequestViewSet, basename="join-request")

urlpatterns = [
    path("", include(router.urls)),
]
