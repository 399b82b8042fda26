from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    CooldownAPIView,
    TransactionViewSet,
    WalletAddRequestViewSet,
    WithdrawalRequestViewSet,
)

router = DefaultRouter()
router.register(r"deposits", WalletAddRequestViewSet, basename="deposit")
router.register(r"withdrawals", WithdrawalRequestViewSet, basename="withdrawal")
router.register(r"transactions", TransactionViewSet, basename="transaction")

urlpatterns = [
    path("", include(router.urls)),
    path("cooldown/", CooldownAPIView.as_view(), name="cooldown"),
]
