from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone

from common.exceptions import (
    AccountBlocked,
    CooldownActive,
    InsufficientFunds,
    InvalidAmount,
    InvalidReference,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    Unauthorized,
)
from common.validators import MAX_AMOUNT
from users.models import User
from users.services import ensure_active
from wallet.models import RequestStatus, Transaction, WalletAddRequest, WithdrawalRequest
from wallet.services import (
    adjust_balance,
    admin_adjust_balance,
    check_cooldown,
    request_deposit,
    request_withdrawal,
    resolve_deposit,
    resolve_withdrawal,
    wallet_summary,
)


def _refresh(user):
    user.refresh_from_db()
    return user


# --- adjust_balance ---


@pytest.mark.django_db
def test_adjust_balance_credit_updates_balance_and_stamps_last_tx(player):
    now = timezone.now()
    entry = adjust_balance(player.pk, Decimal("25.50"), kind=Transaction.Kind.PRIZE, now=now)

    player = _refresh(player)
    assert player.wallet_balance == Decimal("125.50")
    assert player.last_tx_at == now
    assert entry.amount == Decimal("25.50")
    assert entry.balance_after == Decimal("125.50")
    assert entry.kind == Transaction.Kind.PRIZE


@pytest.mark.django_db
def test_adjust_balance_debit_to_exactly_zero(player):
    adjust_balance(player.pk, Decimal("-100"))
    assert _refresh(player).wallet_balance == Decimal("0.00")


@pytest.mark.django_db
def test_adjust_balance_refuses_overdraft_and_leaves_state_unchanged(player):
    with pytest.raises(InsufficientFunds):
        adjust_balance(player.pk, Decimal("-100.01"))

    player = _refresh(player)
    assert player.wallet_balance == Decimal("100.00")
    assert player.last_tx_at is None
    assert not Transaction.objects.filter(user=player).exists()


@pytest.mark.django_db
def test_balance_never_negative_over_a_sequence(player):
    deltas = ["-30", "-30", "-30", "-30", "15.25", "-25.25", "-0.01"]
    for delta in deltas:
        try:
            adjust_balance(player.pk, delta)
        except InsufficientFunds:
            pass
        assert _refresh(player).wallet_balance >= 0

    # 100 - 30*3 = 10; -30 refused; +15.25 = 25.25; -25.25 = 0; -0.01 refused
    assert player.wallet_balance == Decimal("0.00")
    assert Transaction.objects.filter(user=player).count() == 5


@pytest.mark.django_db
def test_adjust_balance_unknown_user():
    with pytest.raises(NotFound):
        adjust_balance(999999, "10")


@pytest.mark.django_db
@pytest.mark.parametrize("delta", ["0", "abc", 1.5, "10.001"])
def test_adjust_balance_rejects_invalid_amounts(player, delta):
    with pytest.raises(InvalidAmount):
        adjust_balance(player.pk, delta)
    assert _refresh(player).wallet_balance == Decimal("100.00")


@pytest.mark.django_db
def test_adjust_balance_storage_failure_rolls_back(player):
    with patch(
        "wallet.services.Transaction.objects.create",
        side_effect=DatabaseError("disk full"),
    ):
        with pytest.raises(PersistenceFailure):
            adjust_balance(player.pk, "-10")

    player = _refresh(player)
    assert player.wallet_balance == Decimal("100.00")
    assert player.last_tx_at is None


@pytest.mark.django_db
def test_adjust_balance_refuses_credit_past_column_ceiling(player):
    User.objects.filter(pk=player.pk).update(wallet_balance=Decimal("9999999990.00"))

    with pytest.raises(InvalidAmount):
        adjust_balance(player.pk, "20")

    player = _refresh(player)
    assert player.wallet_balance == Decimal("9999999990.00")
    assert player.last_tx_at is None
    assert not Transaction.objects.filter(user=player).exists()

    adjust_balance(player.pk, "9.99")
    assert _refresh(player).wallet_balance == MAX_AMOUNT


@pytest.mark.django_db
def test_adjust_balance_refuses_oversized_delta(player):
    with pytest.raises(InvalidAmount):
        adjust_balance(player.pk, Decimal("123456789012345"))
    assert _refresh(player).wallet_balance == Decimal("100.00")


# --- check_cooldown ---


@pytest.mark.django_db
def test_cooldown_allows_user_without_history(player):
    assert check_cooldown(player).can_proceed is True


@pytest.mark.django_db
def test_cooldown_denies_inside_window_with_time_left(player):
    now = timezone.now()
    player.last_tx_at = now - timedelta(hours=2)

    status = check_cooldown(player, now=now)

    assert status.can_proceed is False
    assert status.time_left == timedelta(hours=3)


@pytest.mark.django_db
def test_cooldown_allows_once_window_elapsed(player):
    now = timezone.now()
    player.last_tx_at = now - timedelta(hours=5)
    assert check_cooldown(player, now=now).can_proceed is True


@pytest.mark.django_db
def test_cooldown_exempts_admins(admin_user):
    now = timezone.now()
    admin_user.last_tx_at = now - timedelta(minutes=1)
    assert check_cooldown(admin_user, now=now).can_proceed is True


@pytest.mark.django_db
def test_cooldown_window_follows_settings(player, settings):
    settings.WALLET_TX_COOLDOWN = timedelta(minutes=10)
    now = timezone.now()
    player.last_tx_at = now - timedelta(minutes=11)
    assert check_cooldown(player, now=now).can_proceed is True


# --- deposits ---


@pytest.mark.django_db
def test_deposit_creation_has_no_balance_effect(player):
    deposit = request_deposit(player, "25", "UTR0001")

    assert deposit.status == RequestStatus.PENDING
    assert deposit.amount == Decimal("25.00")
    player = _refresh(player)
    assert player.wallet_balance == Decimal("100.00")
    assert player.last_tx_at is None


@pytest.mark.django_db
def test_deposit_requires_reference(player):
    with pytest.raises(InvalidReference):
        request_deposit(player, "25", "  ")
    assert not WalletAddRequest.objects.exists()


@pytest.mark.django_db
def test_deposit_refused_for_blocked_user(user_factory):
    blocked = user_factory(username="blocked", is_blocked=True)
    with pytest.raises(AccountBlocked):
        request_deposit(blocked, "25", "UTR0001")


@pytest.mark.django_db
def test_deposit_refused_during_cooldown(player):
    player.last_tx_at = timezone.now() - timedelta(hours=1)
    player.save(update_fields=["last_tx_at"])

    with pytest.raises(CooldownActive) as exc_info:
        request_deposit(player, "25", "UTR0001")
    assert exc_info.value.time_left > timedelta(hours=3, minutes=59)


@pytest.mark.django_db
def test_approve_deposit_credits_once(user_factory, admin_user):
    user = user_factory(username="depositor", wallet_balance=Decimal("10.00"))
    deposit = request_deposit(user, "25", "UTR0001")

    resolve_deposit(admin_user, deposit.pk, approve=True)

    deposit.refresh_from_db()
    user = _refresh(user)
    assert user.wallet_balance == Decimal("35.00")
    assert deposit.status == RequestStatus.APPROVED
    assert deposit.resolved_by == admin_user
    assert user.last_tx_at is not None

    with pytest.raises(InvalidTransition):
        resolve_deposit(admin_user, deposit.pk, approve=True)
    assert _refresh(user).wallet_balance == Decimal("35.00")
    assert Transaction.objects.filter(user=user, kind=Transaction.Kind.DEPOSIT).count() == 1


@pytest.mark.django_db
def test_reject_deposit_has_no_balance_effect(player, admin_user):
    deposit = request_deposit(player, "25", "UTR0001")

    resolve_deposit(admin_user, deposit.pk, approve=False)

    deposit.refresh_from_db()
    assert deposit.status == RequestStatus.REJECTED
    assert _refresh(player).wallet_balance == Decimal("100.00")


@pytest.mark.django_db
def test_failed_credit_keeps_deposit_pending(player, admin_user):
    deposit = request_deposit(player, "25", "UTR0001")

    with patch("wallet.services.adjust_balance", side_effect=PersistenceFailure()):
        with pytest.raises(PersistenceFailure):
            resolve_deposit(admin_user, deposit.pk, approve=True)

    deposit.refresh_from_db()
    assert deposit.status == RequestStatus.PENDING


@pytest.mark.django_db
def test_players_cannot_resolve_deposits(player, other_player):
    deposit = request_deposit(player, "25", "UTR0001")
    with pytest.raises(Unauthorized):
        resolve_deposit(other_player, deposit.pk, approve=True)


@pytest.mark.django_db
def test_role_is_read_from_the_database(player, admin_user):
    deposit = request_deposit(player, "25", "UTR0001")
    # A stale in-memory object claiming admin does not grant the role.
    player.role = "ADMIN"
    with pytest.raises(Unauthorized):
        resolve_deposit(player, deposit.pk, approve=True)


@pytest.mark.django_db
def test_resolve_missing_deposit(admin_user):
    with pytest.raises(NotFound):
        resolve_deposit(admin_user, 424242, approve=True)


# --- withdrawals ---


@pytest.mark.django_db
def test_withdrawal_debits_at_creation_and_refund_on_reject(player, admin_user):
    withdrawal = request_withdrawal(player, "40", "player@upi")

    assert withdrawal.status == RequestStatus.PENDING
    assert _refresh(player).wallet_balance == Decimal("60.00")

    resolve_withdrawal(admin_user, withdrawal.pk, paid=False)

    withdrawal.refresh_from_db()
    assert withdrawal.status == RequestStatus.REJECTED
    assert _refresh(player).wallet_balance == Decimal("100.00")
    kinds = list(
        Transaction.objects.filter(user=player).order_by("id").values_list("kind", flat=True)
    )
    assert kinds == [Transaction.Kind.WITHDRAWAL, Transaction.Kind.WITHDRAWAL_REFUND]


@pytest.mark.django_db
def test_paid_withdrawal_keeps_debit(player, admin_user):
    withdrawal = request_withdrawal(player, "40", "player@upi")

    resolve_withdrawal(admin_user, withdrawal.pk, paid=True)

    withdrawal.refresh_from_db()
    assert withdrawal.status == RequestStatus.PAID
    assert _refresh(player).wallet_balance == Decimal("60.00")

    with pytest.raises(InvalidTransition):
        resolve_withdrawal(admin_user, withdrawal.pk, paid=False)
    assert _refresh(player).wallet_balance == Decimal("60.00")


@pytest.mark.django_db
def test_withdrawal_over_balance_creates_nothing(player):
    with pytest.raises(InsufficientFunds):
        request_withdrawal(player, "100.01", "player@upi")

    assert not WithdrawalRequest.objects.exists()
    assert _refresh(player).wallet_balance == Decimal("100.00")


@pytest.mark.django_db
def test_withdrawal_fails_whole_when_debit_loses_race(player):
    # The balance drops between the pre-check and the conditional update.
    with patch(
        "wallet.services.adjust_balance", side_effect=InsufficientFunds()
    ):
        with pytest.raises(InsufficientFunds):
            request_withdrawal(player, "40", "player@upi")
    assert not WithdrawalRequest.objects.exists()


@pytest.mark.django_db
def test_withdrawal_arms_cooldown(player):
    request_withdrawal(player, "10", "player@upi")

    with pytest.raises(CooldownActive):
        request_withdrawal(player, "10", "player@upi")
    with pytest.raises(CooldownActive):
        request_deposit(player, "10", "UTR0001")
    assert WithdrawalRequest.objects.count() == 1


@pytest.mark.django_db
def test_withdrawal_cooldown_is_checked_on_the_locked_row(player):
    # Another withdrawal commits after the caller was loaded but before the
    # row lock is taken.
    def load_then_commit_other_withdrawal(user):
        loaded = ensure_active(user)
        adjust_balance(user.pk, "-40", kind=Transaction.Kind.WITHDRAWAL)
        return loaded

    with patch(
        "wallet.services.ensure_active", side_effect=load_then_commit_other_withdrawal
    ):
        with pytest.raises(CooldownActive):
            request_withdrawal(player, "40", "player@upi")

    assert _refresh(player).wallet_balance == Decimal("60.00")
    assert not WithdrawalRequest.objects.exists()


@pytest.mark.django_db
def test_deposit_cooldown_is_checked_on_the_locked_row(player):
    def load_then_commit_other_withdrawal(user):
        loaded = ensure_active(user)
        adjust_balance(user.pk, "-40", kind=Transaction.Kind.WITHDRAWAL)
        return loaded

    with patch(
        "wallet.services.ensure_active", side_effect=load_then_commit_other_withdrawal
    ):
        with pytest.raises(CooldownActive):
            request_deposit(player, "25", "UTR0001")

    assert not WalletAddRequest.objects.exists()


@pytest.mark.django_db
def test_approving_deposit_past_balance_ceiling_stays_pending(player, admin_user):
    deposit = request_deposit(player, "50", "UTR0001")
    User.objects.filter(pk=player.pk).update(wallet_balance=Decimal("9999999990.00"))

    with pytest.raises(InvalidAmount):
        resolve_deposit(admin_user, deposit.pk, approve=True)

    deposit.refresh_from_db()
    assert deposit.status == RequestStatus.PENDING
    assert _refresh(player).wallet_balance == Decimal("9999999990.00")


@pytest.mark.django_db
def test_failed_refund_keeps_withdrawal_pending(player, admin_user):
    withdrawal = request_withdrawal(player, "40", "player@upi")

    with patch("wallet.services.adjust_balance", side_effect=PersistenceFailure()):
        with pytest.raises(PersistenceFailure):
            resolve_withdrawal(admin_user, withdrawal.pk, paid=False)

    withdrawal.refresh_from_db()
    assert withdrawal.status == RequestStatus.PENDING
    assert _refresh(player).wallet_balance == Decimal("60.00")


# --- admin adjustment and summary ---


@pytest.mark.django_db
def test_admin_adjustment_writes_ledger(player, admin_user):
    entry = admin_adjust_balance(admin_user, player.pk, "-20", "Chargeback")

    assert entry.kind == Transaction.Kind.ADJUSTMENT
    assert entry.description == "Chargeback"
    assert _refresh(player).wallet_balance == Decimal("80.00")


@pytest.mark.django_db
def test_admin_adjustment_requires_admin(player, other_player):
    with pytest.raises(Unauthorized):
        admin_adjust_balance(other_player, player.pk, "20")


@pytest.mark.django_db
def test_wallet_summary_reports_cooldown(player):
    adjust_balance(player.pk, "5")
    summary = wallet_summary(_refresh(player))

    assert summary["wallet_balance"] == Decimal("105.00")
    assert summary["can_transact"] is False
    assert 0 < summary["cooldown_seconds_left"] <= 5 * 3600
