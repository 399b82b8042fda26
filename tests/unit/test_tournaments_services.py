from decimal import Decimal

import pytest

from common.exceptions import (
    AccountBlocked,
    AlreadyJoined,
    InsufficientFunds,
    InvalidTransition,
    NotFound,
    SlotFull,
    TournamentClosed,
    Unauthorized,
)
from tournaments.models import JoinRequest, Participant, Tournament
from tournaments.services import (
    approve_join_request,
    create_join_request,
    go_live,
    join_with_wallet,
    reject_join_request,
    set_winner,
)
from wallet.models import RequestStatus, Transaction


@pytest.fixture
def full_tournament(tournament_factory, user_factory):
    tournament = tournament_factory(name="Tiny Cup", max_slots=2)
    for slot in (1, 2):
        Participant.objects.create(
            tournament=tournament,
            user=user_factory(username=f"seed{slot}"),
            ff_name=f"Seed{slot}",
            ff_uid=f"{slot}000",
            slot_no=slot,
        )
    return tournament


@pytest.mark.django_db
def test_wallet_join_debits_fee_and_takes_first_slot(player, tournament):
    participant = join_with_wallet(player, tournament.pk, "Sniper", "123456")

    player.refresh_from_db()
    assert participant.slot_no == 1
    assert participant.user == player
    assert player.wallet_balance == Decimal("70.00")
    assert Transaction.objects.get(user=player).kind == Transaction.Kind.ENTRY_FEE


@pytest.mark.django_db
def test_slots_are_assigned_sequentially(player, other_player, tournament):
    first = join_with_wallet(player, tournament.pk, "One", "1")
    second = join_with_wallet(other_player, tournament.pk, "Two", "2")
    assert (first.slot_no, second.slot_no) == (1, 2)


@pytest.mark.django_db
def test_wallet_join_with_insufficient_funds_creates_nothing(user_factory, tournament_factory):
    broke = user_factory(username="broke")
    tournament = tournament_factory(entry_fee=Decimal("50.00"))

    with pytest.raises(InsufficientFunds):
        join_with_wallet(broke, tournament.pk, "Broke", "999")

    broke.refresh_from_db()
    assert broke.wallet_balance == Decimal("0.00")
    assert not Participant.objects.filter(tournament=tournament).exists()


@pytest.mark.django_db
def test_free_tournament_join_has_no_ledger_entry(player, tournament_factory):
    tournament = tournament_factory(entry_fee=Decimal("0.00"))
    join_with_wallet(player, tournament.pk, "Free", "1")
    assert not Transaction.objects.filter(user=player).exists()


@pytest.mark.django_db
def test_full_tournament_refuses_both_entry_modes(player, full_tournament):
    with pytest.raises(SlotFull):
        join_with_wallet(player, full_tournament.pk, "Late", "1")
    with pytest.raises(SlotFull):
        create_join_request(player, full_tournament.pk, "Late", "1", "UTR1")

    player.refresh_from_db()
    assert player.wallet_balance == Decimal("100.00")
    assert not JoinRequest.objects.exists()


@pytest.mark.django_db
def test_user_cannot_hold_two_slots(player, tournament):
    join_with_wallet(player, tournament.pk, "Sniper", "1")

    with pytest.raises(AlreadyJoined):
        join_with_wallet(player, tournament.pk, "Sniper", "1")
    with pytest.raises(AlreadyJoined):
        create_join_request(player, tournament.pk, "Sniper", "1", "UTR1")

    assert Participant.objects.filter(tournament=tournament, user=player).count() == 1
    player.refresh_from_db()
    assert player.wallet_balance == Decimal("70.00")


@pytest.mark.django_db
def test_pending_request_blocks_second_entry(player, tournament):
    create_join_request(player, tournament.pk, "Sniper", "1", "UTR1")

    with pytest.raises(AlreadyJoined):
        join_with_wallet(player, tournament.pk, "Sniper", "1")
    with pytest.raises(AlreadyJoined):
        create_join_request(player, tournament.pk, "Sniper", "1", "UTR2")


@pytest.mark.django_db
def test_blocked_user_cannot_join(user_factory, tournament):
    blocked = user_factory(username="blocked", is_blocked=True, wallet_balance=Decimal("100"))
    with pytest.raises(AccountBlocked):
        join_with_wallet(blocked, tournament.pk, "X", "1")


@pytest.mark.django_db
def test_join_refused_once_live(player, tournament):
    tournament.status = Tournament.Status.LIVE
    tournament.save()
    with pytest.raises(TournamentClosed):
        join_with_wallet(player, tournament.pk, "X", "1")


@pytest.mark.django_db
def test_join_unknown_tournament(player):
    with pytest.raises(NotFound):
        join_with_wallet(player, 31337, "X", "1")


@pytest.mark.django_db
def test_proof_entry_then_approval_inserts_participant(player, admin_user, tournament):
    join_request = create_join_request(player, tournament.pk, "Sniper", "123", "UTR777")
    player.refresh_from_db()
    assert join_request.status == RequestStatus.PENDING
    assert player.wallet_balance == Decimal("100.00")

    participant = approve_join_request(admin_user, join_request.pk)

    join_request.refresh_from_db()
    player.refresh_from_db()
    assert join_request.status == RequestStatus.APPROVED
    assert participant.user == player
    assert participant.ff_name == "Sniper"
    assert player.wallet_balance == Decimal("100.00")

    with pytest.raises(InvalidTransition):
        approve_join_request(admin_user, join_request.pk)


@pytest.mark.django_db
def test_approval_refused_when_full(player, admin_user, tournament_factory, other_player):
    tournament = tournament_factory(max_slots=1)
    join_request = create_join_request(player, tournament.pk, "A", "1", "UTR1")
    join_with_wallet(other_player, tournament.pk, "B", "2")

    with pytest.raises(SlotFull):
        approve_join_request(admin_user, join_request.pk)
    join_request.refresh_from_db()
    assert join_request.status == RequestStatus.PENDING


@pytest.mark.django_db
def test_reject_join_request(player, admin_user, tournament):
    join_request = create_join_request(player, tournament.pk, "A", "1", "UTR1")

    reject_join_request(admin_user, join_request.pk)

    join_request.refresh_from_db()
    assert join_request.status == RequestStatus.REJECTED
    assert not Participant.objects.exists()
    # A rejected request no longer blocks a fresh attempt.
    assert create_join_request(player, tournament.pk, "A", "1", "UTR2").pk != join_request.pk


@pytest.mark.django_db
def test_join_request_transitions_are_admin_only(player, other_player, tournament):
    join_request = create_join_request(player, tournament.pk, "A", "1", "UTR1")
    with pytest.raises(Unauthorized):
        approve_join_request(other_player, join_request.pk)
    with pytest.raises(Unauthorized):
        reject_join_request(other_player, join_request.pk)


@pytest.mark.django_db
def test_join_request_history_records_admin(player, admin_user, tournament):
    join_request = create_join_request(player, tournament.pk, "A", "1", "UTR1")
    approve_join_request(admin_user, join_request.pk)

    latest = join_request.history.first()
    assert latest.status == RequestStatus.APPROVED
    assert latest.history_user == admin_user


@pytest.mark.django_db
def test_go_live_publishes_room(admin_user, tournament):
    go_live(admin_user, tournament.pk, "ROOM42", "secret")

    tournament.refresh_from_db()
    assert tournament.status == Tournament.Status.LIVE
    assert (tournament.room_id, tournament.room_password) == ("ROOM42", "secret")


@pytest.mark.django_db
def test_go_live_requires_admin(player, tournament):
    with pytest.raises(Unauthorized):
        go_live(player, tournament.pk, "ROOM42", "secret")


@pytest.mark.django_db
def test_set_winner_credits_prize_once(player, admin_user, tournament):
    join_with_wallet(player, tournament.pk, "Sniper", "1")
    go_live(admin_user, tournament.pk, "ROOM42", "secret")

    set_winner(admin_user, tournament.pk, player.pk)

    tournament.refresh_from_db()
    player.refresh_from_db()
    assert tournament.status == Tournament.Status.COMPLETED
    assert tournament.winner == player
    assert player.wallet_balance == Decimal("570.00")

    with pytest.raises(InvalidTransition):
        set_winner(admin_user, tournament.pk, player.pk)
    player.refresh_from_db()
    assert player.wallet_balance == Decimal("570.00")


@pytest.mark.django_db
def test_set_winner_requires_live_tournament(player, admin_user, tournament):
    join_with_wallet(player, tournament.pk, "Sniper", "1")
    with pytest.raises(InvalidTransition):
        set_winner(admin_user, tournament.pk, player.pk)


@pytest.mark.django_db
def test_winner_must_be_participant(player, admin_user, tournament):
    go_live(admin_user, tournament.pk, "ROOM42", "secret")
    with pytest.raises(NotFound):
        set_winner(admin_user, tournament.pk, player.pk)
    tournament.refresh_from_db()
    assert tournament.winner is None
