from drf_spectacular.utils import extend_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView

from common.throttles import MediumThrottle, StrictThrottle, VeryStrictThrottle
from wallet.serializers import TransactionSerializer
from wallet.services import admin_adjust_balance, wallet_summary

from .models import User
from .permissions import IsAdminRole
from .serializers import (
    BalanceAdjustmentSerializer,
    CustomTokenObtainPairSerializer,
    RegisterSerializer,
    UserSerializer,
)
from .services import (
    ensure_active,
    list_users,
    register_user,
    toggle_chat_block,
    toggle_user_block,
)


class CustomTokenObtainPairView(TokenObtainPairView):
    throttle_classes = [VeryStrictThrottle]
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)

        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class RegisterView(generics.GenericAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    throttle_classes = [StrictThrottle]

    @extend_schema(responses=UserSerializer)
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = register_user(**serializer.validated_data)
        return Response(
            {
                "success": True,
                "detail": "Registration successful!",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MeView(generics.GenericAPIView):
    """
    The caller's profile plus the server-side cooldown state. Clients should
    treat their own countdown as advisory and poll this endpoint.
    """

    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]
    throttle_classes = [MediumThrottle]

    def get(self, request, *args, **kwargs):
        user = ensure_active(request.user)
        data = UserSerializer(user).data
        summary = wallet_summary(user)
        data["can_transact"] = summary["can_transact"]
        data["cooldown_seconds_left"] = summary["cooldown_seconds_left"]
        return Response(data)


class UserViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Admin-only user management.
    """

    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]
    throttle_classes = [MediumThrottle]
    filterset_fields = ["role", "is_blocked", "is_chat_blocked"]

    def get_queryset(self):
        return list_users(self.request.user)

    @action(detail=True, methods=["post"], url_path="toggle-block")
    def toggle_block(self, request, pk=None):
        user = toggle_user_block(request.user, pk)
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=["post"], url_path="toggle-chat-block")
    def toggle_chat_block(self, request, pk=None):
        user = toggle_chat_block(request.user, pk)
        return Response(UserSerializer(user).data)

    @extend_schema(request=BalanceAdjustmentSerializer, responses=TransactionSerializer)
    @action(detail=True, methods=["post"], url_path="adjust-balance")
    def adjust_balance(self, request, pk=None):
        serializer = BalanceAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = admin_adjust_balance(
            request.user,
            pk,
            serializer.validated_data["amount"],
            serializer.validated_data.get("description", ""),
        )
        return Response(
            {
                "success": True,
                "detail": "Balance updated.",
                "transaction": TransactionSerializer(entry).data,
            }
        )
