from rest_framework import serializers

from .models import GlobalConfig


class GlobalConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = GlobalConfig
        fields = ("upi_id", "qr_url", "chat_disabled", "auto_payment_enabled", "updated_at")
        read_only_fields = ("updated_at",)

    def validate_upi_id(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("UPI id cannot be blank.")
        return value
