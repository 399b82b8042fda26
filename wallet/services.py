import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import InvalidOperation
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from common.exceptions import (
    CooldownActive,
    InsufficientFunds,
    InvalidAmount,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
)
from common.validators import MAX_AMOUNT, parse_amount, validate_reference
from users.models import User
from users.services import ensure_active, require_admin

from .models import RequestStatus, Transaction, WalletAddRequest, WithdrawalRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CooldownStatus:
    can_proceed: bool
    time_left: Optional[timedelta] = None


def adjust_balance(
    user_id,
    delta,
    kind=Transaction.Kind.ADJUSTMENT,
    description: str = "",
    now=None,
) -> Transaction:
    """
    The only sanctioned way to change a wallet balance.

    Runs a single conditional UPDATE: debits carry a `wallet_balance >= -delta`
    predicate, so two concurrent debits can never both pass the zero floor.
    Credits carry the matching ceiling so the column never overflows.
    On success the balance and `last_tx_at` are written together and a ledger
    row is appended in the same database transaction. Credits arm the
    cooldown too.

    Raises InvalidAmount, NotFound, InsufficientFunds or PersistenceFailure;
    on any of them nothing is written.
    """
    delta = parse_amount(delta, allow_negative=True)
    now = now or timezone.now()

    try:
        with transaction.atomic():
            queryset = User.objects.filter(pk=user_id)
            if delta < 0:
                queryset = queryset.filter(wallet_balance__gte=-delta)
            else:
                queryset = queryset.filter(wallet_balance__lte=MAX_AMOUNT - delta)
            updated = queryset.update(
                wallet_balance=F("wallet_balance") + delta,
                last_tx_at=now,
            )

            if not updated:
                if not User.objects.filter(pk=user_id).exists():
                    raise NotFound("User not found.")
                if delta > 0:
                    logger.warning(
                        "Refused credit of %s for user %s: balance ceiling.",
                        delta,
                        user_id,
                    )
                    raise InvalidAmount(
                        f"This credit would take the balance above {MAX_AMOUNT}."
                    )
                logger.warning(
                    "Refused debit of %s for user %s: insufficient funds.",
                    -delta,
                    user_id,
                )
                raise InsufficientFunds()

            balance_after = User.objects.values_list(
                "wallet_balance", flat=True
            ).get(pk=user_id)
            entry = Transaction.objects.create(
                user_id=user_id,
                amount=delta,
                balance_after=balance_after,
                kind=kind,
                description=description[:255],
                timestamp=now,
            )
    except (DatabaseError, InvalidOperation) as exc:
        logger.error("Balance update for user %s failed: %s", user_id, exc)
        raise PersistenceFailure() from exc

    logger.info(
        "Balance of user %s changed by %s (%s); now %s.",
        user_id,
        delta,
        kind,
        balance_after,
    )
    return entry


def check_cooldown(user, now=None) -> CooldownStatus:
    """
    Decides whether `user` may start a new deposit or withdrawal.

    Admins are exempt. Everyone else must wait WALLET_TX_COOLDOWN after their
    last balance mutation. Pass a freshly loaded user; this function does not
    cache anything.
    """
    if user.role == User.Role.ADMIN:
        return CooldownStatus(can_proceed=True)
    if user.last_tx_at is None:
        return CooldownStatus(can_proceed=True)

    now = now or timezone.now()
    window = settings.WALLET_TX_COOLDOWN
    elapsed = now - user.last_tx_at
    if elapsed < window:
        return CooldownStatus(can_proceed=False, time_left=window - elapsed)
    return CooldownStatus(can_proceed=True)


def ensure_cooldown_elapsed(user, now=None):
    status = check_cooldown(user, now=now)
    if not status.can_proceed:
        logger.warning(
            "User %s refused by cooldown, %s left.", user.pk, status.time_left
        )
        raise CooldownActive(status.time_left)


def lock_user(user) -> User:
    """Re-reads `user` with a row lock held until the enclosing transaction ends."""
    return User.objects.select_for_update().get(pk=user.pk)


def lock_pending_request(model, request_id):
    try:
        instance = model.objects.select_for_update().get(pk=request_id)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{model._meta.verbose_name.capitalize()} not found.")
    if instance.status != RequestStatus.PENDING:
        logger.warning(
            "Refused transition of %s %s: already %s.",
            model.__name__,
            instance.pk,
            instance.status,
        )
        raise InvalidTransition(
            f"This request is already {instance.status.lower()}."
        )
    return instance


def mark_request_resolved(instance, status, admin, now):
    instance.status = status
    instance.resolved_at = now
    instance.resolved_by = admin
    instance._history_user = admin
    instance.save(update_fields=["status", "resolved_at", "resolved_by"])


# --- Deposits ---


def request_deposit(user, amount, utr) -> WalletAddRequest:
    user = ensure_active(user)
    amount = parse_amount(amount)
    utr = validate_reference(utr, "UTR number")

    with transaction.atomic():
        user = lock_user(user)
        ensure_cooldown_elapsed(user)
        deposit = WalletAddRequest.objects.create(user=user, amount=amount, utr=utr)

    logger.info("Deposit request %s created by user %s for %s.", deposit.pk, user.pk, amount)
    return deposit


def resolve_deposit(actor, request_id, approve: bool) -> WalletAddRequest:
    """
    PENDING -> APPROVED credits the amount; PENDING -> REJECTED has no balance
    effect. If the credit fails the request stays PENDING.
    """
    admin = require_admin(actor)
    now = timezone.now()

    with transaction.atomic():
        deposit = lock_pending_request(WalletAddRequest, request_id)
        if approve:
            adjust_balance(
                deposit.user_id,
                deposit.amount,
                kind=Transaction.Kind.DEPOSIT,
                description=f"Deposit request #{deposit.pk} (UTR {deposit.utr})",
                now=now,
            )
            new_status = RequestStatus.APPROVED
        else:
            new_status = RequestStatus.REJECTED
        mark_request_resolved(deposit, new_status, admin, now)

    logger.info("Deposit request %s %s by admin %s.", deposit.pk, new_status, admin.pk)
    return deposit


# --- Withdrawals ---


def request_withdrawal(user, amount, upi_id) -> WithdrawalRequest:
    """
    Debits the wallet immediately and records a PENDING payout. If the debit
    fails no request is created.
    """
    user = ensure_active(user)
    amount = parse_amount(amount)
    upi_id = validate_reference(upi_id, "UPI id")

    with transaction.atomic():
        user = lock_user(user)
        ensure_cooldown_elapsed(user)
        if amount > user.wallet_balance:
            raise InsufficientFunds(
                f"Insufficient wallet balance: {user.wallet_balance} available."
            )
        adjust_balance(
            user.pk,
            -amount,
            kind=Transaction.Kind.WITHDRAWAL,
            description=f"Withdrawal to {upi_id}",
        )
        withdrawal = WithdrawalRequest.objects.create(
            user=user, amount=amount, upi_id=upi_id
        )

    logger.info("Withdrawal request %s created by user %s for %s.", withdrawal.pk, user.pk, amount)
    return withdrawal


def resolve_withdrawal(actor, request_id, paid: bool) -> WithdrawalRequest:
    """
    PENDING -> PAID is a pure status change (money already left the wallet).
    PENDING -> REJECTED refunds the amount first; if the refund fails the
    request stays PENDING.
    """
    admin = require_admin(actor)
    now = timezone.now()

    with transaction.atomic():
        withdrawal = lock_pending_request(WithdrawalRequest, request_id)
        if paid:
            new_status = RequestStatus.PAID
        else:
            adjust_balance(
                withdrawal.user_id,
                withdrawal.amount,
                kind=Transaction.Kind.WITHDRAWAL_REFUND,
                description=f"Refund of rejected withdrawal #{withdrawal.pk}",
                now=now,
            )
            new_status = RequestStatus.REJECTED
        mark_request_resolved(withdrawal, new_status, admin, now)

    logger.info("Withdrawal request %s %s by admin %s.", withdrawal.pk, new_status, admin.pk)
    return withdrawal


# --- Admin ---


def admin_adjust_balance(actor, user_id, delta, description: str = "") -> Transaction:
    admin = require_admin(actor)
    delta = parse_amount(delta, allow_negative=True)
    return adjust_balance(
        user_id,
        delta,
        kind=Transaction.Kind.ADJUSTMENT,
        description=description or f"Manual adjustment by {admin.username}",
    )


def wallet_summary(user) -> dict:
    status = check_cooldown(user)
    return {
        "wallet_balance": user.wallet_balance,
        "can_transact": status.can_proceed,
        "cooldown_seconds_left": (
            int(status.time_left.total_seconds()) if status.time_left else 0
        ),
    }
