from rest_framework import serializers

from common.fields import AmountField
from users.serializers import UserReadOnlySerializer

from .models import Transaction, WalletAddRequest, WithdrawalRequest


class TransactionSerializer(serializers.ModelSerializer):
    amount = AmountField(read_only=True)
    balance_after = AmountField(read_only=True)

    class Meta:
        model = Transaction
        fields = (
            "id",
            "user",
            "amount",
            "balance_after",
            "kind",
            "description",
            "timestamp",
        )
        read_only_fields = fields


class WalletAddRequestSerializer(serializers.ModelSerializer):
    user = UserReadOnlySerializer(read_only=True)
    amount = AmountField(read_only=True)

    class Meta:
        model = WalletAddRequest
        fields = (
            "id",
            "user",
            "amount",
            "utr",
            "status",
            "created_at",
            "resolved_at",
        )
        read_only_fields = fields


class CreateWalletAddRequestSerializer(serializers.Serializer):
    amount = AmountField()
    utr = serializers.CharField(max_length=64)


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    user = UserReadOnlySerializer(read_only=True)
    amount = AmountField(read_only=True)

    class Meta:
        model = WithdrawalRequest
        fields = (
            "id",
            "user",
            "amount",
            "upi_id",
            "status",
            "created_at",
            "resolved_at",
        )
        read_only_fields = fields


class CreateWithdrawalRequestSerializer(serializers.Serializer):
    amount = AmountField()
    upi_id = serializers.CharField(max_length=100)


class CooldownSerializer(serializers.Serializer):
    can_proceed = serializers.BooleanField()
    time_left_seconds = serializers.IntegerField()
