from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from simple_history.models import HistoricalRecords

from wallet.models import RequestStatus


class Tournament(models.Model):
    class Status(models.TextChoices):
        UPCOMING = "UPCOMING", "Upcoming"
        LIVE = "LIVE", "Live"
        COMPLETED = "COMPLETED", "Completed"

    name = models.CharField(max_length=100)
    game_name = models.CharField(max_length=100, default="Free Fire")
    mode = models.CharField(max_length=50, default="Solo")
    rules = models.TextField(blank=True)
    banner_url = models.TextField(blank=True)
    date = models.DateField(null=True, blank=True, db_index=True)
    time = models.TimeField(null=True, blank=True)
    day = models.CharField(max_length=20, blank=True)
    entry_fee = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    prize_pool = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    max_slots = models.PositiveIntegerField(default=48)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.UPCOMING, db_index=True
    )
    room_id = models.CharField(max_length=100, blank=True)
    room_password = models.CharField(max_length=100, blank=True)
    winner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="won_tournaments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]

    def clean(self):
        super().clean()
        if self.entry_fee is not None and self.entry_fee < 0:
            raise ValidationError("Entry fee cannot be negative.")
        if self.prize_pool is not None and self.prize_pool < 0:
            raise ValidationError("Prize pool cannot be negative.")
        if self.max_slots is not None and self.max_slots < 1:
            raise ValidationError("A tournament needs at least one slot.")

    def __str__(self):
        return self.name

    @property
    def is_full(self):
        return self.participants.count() >= self.max_slots


class Participant(models.Model):
    tournament = models.ForeignKey(
        Tournament, on_delete=models.CASCADE, related_name="participants"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tournament_entries",
    )
    ff_name = models.CharField(max_length=100, help_text="In-game name")
    ff_uid = models.CharField(max_length=100, help_text="In-game UID")
    slot_no = models.PositiveIntegerField()
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["slot_no"]
        unique_together = (("tournament", "user"), ("tournament", "slot_no"))

    def __str__(self):
        return f"{self.ff_name} (slot {self.slot_no}) in {self.tournament}"


class JoinRequest(models.Model):
    """A proof-of-payment entry waiting for an admin to verify the UTR."""

    STATUS_CHOICES = (
        (RequestStatus.PENDING, "Pending"),
        (RequestStatus.APPROVED, "Approved"),
        (RequestStatus.REJECTED, "Rejected"),
    )
    tournament = models.ForeignKey(
        Tournament, on_delete=models.CASCADE, related_name="join_requests"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="join_requests",
    )
    ff_name = models.CharField(max_length=100)
    ff_uid = models.CharField(max_length=100)
    utr_number = models.CharField(max_length=64)
    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=RequestStatus.PENDING, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    history = HistoricalRecords()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["tournament", "user"],
                condition=models.Q(status="PENDING"),
                name="tournaments_one_pending_join_request",
            ),
        ]

    def __str__(self):
        return f"Join request by {self.user} for {self.tournament}"
