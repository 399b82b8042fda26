from django.conf import settings
from django.db import models
from simple_history.models import HistoricalRecords


class Transaction(models.Model):
    """One row per successful balance mutation; the wallet's audit ledger."""

    class Kind(models.TextChoices):
        DEPOSIT = "deposit", "Deposit"
        WITHDRAWAL = "withdrawal", "Withdrawal"
        WITHDRAWAL_REFUND = "withdrawal_refund", "Withdrawal Refund"
        ENTRY_FEE = "entry_fee", "Entry Fee"
        PRIZE = "prize", "Prize"
        ADJUSTMENT = "adjustment", "Manual Adjustment"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, help_text="Signed: credits > 0, debits < 0."
    )
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)
    kind = models.CharField(max_length=20, choices=Kind.choices, db_index=True)
    description = models.CharField(max_length=255, blank=True)
    timestamp = models.DateTimeField(db_index=True)

    class Meta:
        app_label = "wallet"
        ordering = ["-timestamp", "-id"]

    def __str__(self):
        return f"{self.user} - {self.kind} - {self.amount}"


class RequestStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    PAID = "PAID", "Paid"
    REJECTED = "REJECTED", "Rejected"


class WalletAddRequest(models.Model):
    """A deposit: the player paid externally and quotes the UTR as proof."""

    STATUS_CHOICES = (
        (RequestStatus.PENDING, "Pending"),
        (RequestStatus.APPROVED, "Approved"),
        (RequestStatus.REJECTED, "Rejected"),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="wallet_add_requests",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    utr = models.CharField(max_length=64, help_text="Payment reference number")
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
        app_label = "wallet"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Deposit request by {self.user} for {self.amount}"


class WithdrawalRequest(models.Model):
    """
    A payout to the player's UPI id. The amount leaves the wallet when the
    request is created; rejection refunds it.
    """

    STATUS_CHOICES = (
        (RequestStatus.PENDING, "Pending"),
        (RequestStatus.PAID, "Paid"),
        (RequestStatus.REJECTED, "Rejected"),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="withdrawal_requests",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    upi_id = models.CharField(max_length=100, help_text="Destination UPI id")
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
        app_label = "wallet"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Withdrawal request by {self.user} for {self.amount}"
