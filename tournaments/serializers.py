from rest_framework import serializers

from common.fields import AmountField
from users.serializers import UserReadOnlySerializer

from .models import JoinRequest, Participant, Tournament


class ParticipantSerializer(serializers.ModelSerializer):
    """Serializer for a taken slot."""

    user = UserReadOnlySerializer(read_only=True)

    class Meta:
        model = Participant
        fields = ("id", "user", "ff_name", "ff_uid", "slot_no", "joined_at")
        read_only_fields = fields


class TournamentCreateUpdateSerializer(serializers.ModelSerializer):
    """Serializer for creating and updating tournaments."""

    entry_fee = AmountField(allow_zero=True, required=False)
    prize_pool = AmountField(allow_zero=True, required=False)

    class Meta:
        model = Tournament
        fields = (
            "name",
            "game_name",
            "mode",
            "rules",
            "banner_url",
            "date",
            "time",
            "day",
            "entry_fee",
            "prize_pool",
            "max_slots",
        )

    def validate_max_slots(self, value):
        if value < 1:
            raise serializers.ValidationError("A tournament needs at least one slot.")
        if self.instance is not None and value < self.instance.participants.count():
            raise serializers.ValidationError(
                "Cannot shrink below the number of joined participants."
            )
        return value


class TournamentReadOnlySerializer(serializers.ModelSerializer):
    """
    Serializer for reading tournament data. Room credentials are only
    revealed to admins and to participants, and only while the match is live.
    """

    entry_fee = AmountField(read_only=True)
    prize_pool = AmountField(read_only=True)
    participants = ParticipantSerializer(many=True, read_only=True)
    winner = UserReadOnlySerializer(read_only=True)
    filled_slots = serializers.SerializerMethodField()
    room_id = serializers.SerializerMethodField()
    room_password = serializers.SerializerMethodField()

    class Meta:
        model = Tournament
        fields = (
            "id",
            "name",
            "game_name",
            "mode",
            "rules",
            "banner_url",
            "date",
            "time",
            "day",
            "entry_fee",
            "prize_pool",
            "max_slots",
            "filled_slots",
            "status",
            "room_id",
            "room_password",
            "winner",
            "participants",
            "created_at",
        )
        read_only_fields = fields

    def get_filled_slots(self, obj) -> int:
        return len(obj.participants.all())

    def _can_see_room(self, obj) -> bool:
        if obj.status != Tournament.Status.LIVE:
            return False
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return False
        if user.is_admin:
            return True
        return any(p.user_id == user.pk for p in obj.participants.all())

    def get_room_id(self, obj):
        return obj.room_id if self._can_see_room(obj) else None

    def get_room_password(self, obj):
        return obj.room_password if self._can_see_room(obj) else None


class JoinTournamentSerializer(serializers.Serializer):
    pay_via_wallet = serializers.BooleanField(default=True)
    ff_name = serializers.CharField(max_length=100)
    ff_uid = serializers.CharField(max_length=100)
    utr_number = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs["pay_via_wallet"] and not attrs.get("utr_number", "").strip():
            raise serializers.ValidationError(
                {"utr_number": "A UTR number is required when paying outside the wallet."}
            )
        return attrs


class GoLiveSerializer(serializers.Serializer):
    room_id = serializers.CharField(max_length=100)
    room_password = serializers.CharField(max_length=100)


class SetWinnerSerializer(serializers.Serializer):
    winner_id = serializers.IntegerField()


class JoinRequestSerializer(serializers.ModelSerializer):
    user = UserReadOnlySerializer(read_only=True)
    tournament_name = serializers.CharField(source="tournament.name", read_only=True)

    class Meta:
        model = JoinRequest
        fields = (
            "id",
            "tournament",
            "tournament_name",
            "user",
            "ff_name",
            "ff_uid",
            "utr_number",
            "status",
            "created_at",
            "resolved_at",
        )
        read_only_fields = fields
