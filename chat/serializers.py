from rest_framework import serializers

from users.models import User
from users.serializers import UserReadOnlySerializer

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    """Serializer for the Message model."""

    sender = UserReadOnlySerializer(read_only=True)
    receiver = UserReadOnlySerializer(read_only=True)

    class Meta:
        model = Message
        fields = ("id", "sender", "receiver", "text", "timestamp", "is_read")
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    receiver_id = serializers.IntegerField()
    text = serializers.CharField(trim_whitespace=False)


class InboxEntrySerializer(serializers.ModelSerializer):
    unread = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "username", "role", "unread")
        read_only_fields = fields
