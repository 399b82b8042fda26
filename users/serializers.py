from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from common.exceptions import AccountBlocked
from common.fields import AmountField

from .models import User
from .services import normalize_username


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Logs in by case-insensitive username and refuses suspended accounts."""

    def validate(self, attrs):
        attrs[self.username_field] = normalize_username(attrs.get(self.username_field))
        data = super().validate(attrs)
        if self.user.is_blocked:
            raise AccountBlocked()
        data["user"] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=6, max_length=128, write_only=True)


class UserReadOnlySerializer(serializers.ModelSerializer):
    """Public profile (read-only)."""

    class Meta:
        model = User
        fields = ("id", "username", "role")
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Full view for the owner and for admins."""

    wallet_balance = AmountField(read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "role",
            "wallet_balance",
            "is_blocked",
            "is_chat_blocked",
            "last_tx_at",
            "date_joined",
        )
        read_only_fields = fields


class BalanceAdjustmentSerializer(serializers.Serializer):
    amount = AmountField(allow_negative=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
