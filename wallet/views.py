from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework.response import Response

from common.responses import success_response
from common.throttles import MediumThrottle, StrictThrottle, VeryStrictThrottle
from users.permissions import IsAdminRole
from users.services import ensure_active

from .models import Transaction, WalletAddRequest, WithdrawalRequest
from .serializers import (
    CooldownSerializer,
    CreateWalletAddRequestSerializer,
    CreateWithdrawalRequestSerializer,
    TransactionSerializer,
    WalletAddRequestSerializer,
    WithdrawalRequestSerializer,
)
from .services import (
    check_cooldown,
    request_deposit,
    request_withdrawal,
    resolve_deposit,
    resolve_withdrawal,
)

ADMIN_ACTIONS = ("approve", "reject", "pay")


class OwnedRequestViewSetMixin:
    """
    Admins see every request; players only their own. Admin transitions are
    throttled separately from player submissions.
    """

    filterset_fields = ["status", "user"]

    def get_queryset(self):
        queryset = super().get_queryset().select_related("user")
        if not self.request.user.is_admin:
            queryset = queryset.filter(user=self.request.user)
        return queryset

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAdminRole()]
        return [IsAuthenticated()]

    def get_throttles(self):
        if self.action == "create":
            self.throttle_classes = [VeryStrictThrottle]
        elif self.action in ADMIN_ACTIONS:
            self.throttle_classes = [StrictThrottle]
        else:
            self.throttle_classes = [MediumThrottle]
        return super().get_throttles()


class WalletAddRequestViewSet(
    OwnedRequestViewSetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = WalletAddRequest.objects.all()
    serializer_class = WalletAddRequestSerializer

    @extend_schema(request=CreateWalletAddRequestSerializer, responses=WalletAddRequestSerializer)
    def create(self, request, *args, **kwargs):
        serializer = CreateWalletAddRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deposit = request_deposit(request.user, **serializer.validated_data)
        return success_response(
            "Deposit request submitted for verification.",
            status=status.HTTP_201_CREATED,
            request=WalletAddRequestSerializer(deposit).data,
        )

    @extend_schema(request=None, responses=WalletAddRequestSerializer)
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        deposit = resolve_deposit(request.user, pk, approve=True)
        return success_response(
            "Deposit approved and credited.",
            request=WalletAddRequestSerializer(deposit).data,
        )

    @extend_schema(request=None, responses=WalletAddRequestSerializer)
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        deposit = resolve_deposit(request.user, pk, approve=False)
        return success_response(
            "Deposit rejected.",
            request=WalletAddRequestSerializer(deposit).data,
        )


class WithdrawalRequestViewSet(
    OwnedRequestViewSetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = WithdrawalRequest.objects.all()
    serializer_class = WithdrawalRequestSerializer

    @extend_schema(request=CreateWithdrawalRequestSerializer, responses=WithdrawalRequestSerializer)
    def create(self, request, *args, **kwargs):
        serializer = CreateWithdrawalRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        withdrawal = request_withdrawal(request.user, **serializer.validated_data)
        return success_response(
            "Withdrawal requested. The amount has been held from your wallet.",
            status=status.HTTP_201_CREATED,
            request=WithdrawalRequestSerializer(withdrawal).data,
        )

    @extend_schema(request=None, responses=WithdrawalRequestSerializer)
    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        withdrawal = resolve_withdrawal(request.user, pk, paid=True)
        return success_response(
            "Withdrawal marked as paid.",
            request=WithdrawalRequestSerializer(withdrawal).data,
        )

    @extend_schema(request=None, responses=WithdrawalRequestSerializer)
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        withdrawal = resolve_withdrawal(request.user, pk, paid=False)
        return success_response(
            "Withdrawal rejected and refunded.",
            request=WithdrawalRequestSerializer(withdrawal).data,
        )


class TransactionViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Transaction.objects.all()
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]
    throttle_classes = [MediumThrottle]
    filterset_fields = ["kind", "user"]

    def get_queryset(self):
        qs = super().get_queryset().select_related("user")
        if not self.request.user.is_admin:
            qs = qs.filter(user=self.request.user)
        return qs.order_by("-timestamp", "-id")


class CooldownAPIView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [MediumThrottle]

    @extend_schema(responses=CooldownSerializer)
    def get(self, request, *args, **kwargs):
        cooldown = check_cooldown(ensure_active(request.user))
        seconds_left = (
            int(cooldown.time_left.total_seconds()) if cooldown.time_left else 0
        )
        return Response(
            CooldownSerializer(
                {"can_proceed": cooldown.can_proceed, "time_left_seconds": seconds_left}
            ).data
        )
