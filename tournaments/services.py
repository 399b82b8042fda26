import logging

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from common.exceptions import (
    AlreadyJoined,
    InvalidTransition,
    NotFound,
    SlotFull,
    TournamentClosed,
)
from common.validators import validate_reference
from users.models import User
from users.services import ensure_active, get_user, require_admin
from wallet.models import RequestStatus, Transaction
from wallet.services import adjust_balance, lock_pending_request, mark_request_resolved

from .models import JoinRequest, Participant, Tournament

logger = logging.getLogger(__name__)


def _lock_tournament(tournament_id) -> Tournament:
    try:
        return Tournament.objects.select_for_update().get(pk=tournament_id)
    except (Tournament.DoesNotExist, ValueError, TypeError):
        raise NotFound("Tournament not found.")


def _ensure_has_free_slot(tournament: Tournament):
    if tournament.participants.count() >= tournament.max_slots:
        raise SlotFull()


def _ensure_can_enter(tournament: Tournament, user: User):
    """
    Checks that must pass before either entry mode proceeds. Capacity is
    checked first so a full tournament always answers SlotFull.
    """
    _ensure_has_free_slot(tournament)
    if tournament.status != Tournament.Status.UPCOMING:
        raise TournamentClosed()
    if tournament.participants.filter(user=user).exists():
        raise AlreadyJoined("You have already joined this tournament.")
    if tournament.join_requests.filter(
        user=user, status=RequestStatus.PENDING
    ).exists():
        raise AlreadyJoined("Your join request for this tournament is still pending.")


def _add_participant(tournament: Tournament, user_id, ff_name, ff_uid) -> Participant:
    """Inserts a Participant in the next free slot. The tournament row must be locked."""
    last_slot = tournament.participants.aggregate(last=Max("slot_no"))["last"] or 0
    try:
        with transaction.atomic():
            return Participant.objects.create(
                tournament=tournament,
                user_id=user_id,
                ff_name=ff_name,
                ff_uid=ff_uid,
                slot_no=last_slot + 1,
            )
    except IntegrityError:
        raise AlreadyJoined("You have already joined this tournament.")


def join_with_wallet(user, tournament_id, ff_name, ff_uid) -> Participant:
    """
    Wallet-funded entry: debit the entry fee and take a slot in one database
    transaction. A failed debit leaves no Participant behind.
    """
    user = ensure_active(user)
    ff_name = validate_reference(ff_name, "in-game name")
    ff_uid = validate_reference(ff_uid, "in-game UID")

    with transaction.atomic():
        tournament = _lock_tournament(tournament_id)
        _ensure_can_enter(tournament, user)
        if tournament.entry_fee > 0:
            adjust_balance(
                user.pk,
                -tournament.entry_fee,
                kind=Transaction.Kind.ENTRY_FEE,
                description=f"Entry fee for tournament: {tournament.name}",
            )
        participant = _add_participant(tournament, user.pk, ff_name, ff_uid)

    logger.info(
        "User %s joined tournament %s in slot %s (wallet).",
        user.pk,
        tournament.pk,
        participant.slot_no,
    )
    return participant


def create_join_request(user, tournament_id, ff_name, ff_uid, utr_number) -> JoinRequest:
    """Proof-of-payment entry: record the UTR for admin verification."""
    user = ensure_active(user)
    ff_name = validate_reference(ff_name, "in-game name")
    ff_uid = validate_reference(ff_uid, "in-game UID")
    utr_number = validate_reference(utr_number, "UTR number")

    with transaction.atomic():
        tournament = _lock_tournament(tournament_id)
        _ensure_can_enter(tournament, user)
        try:
            with transaction.atomic():
                join_request = JoinRequest.objects.create(
                    tournament=tournament,
                    user=user,
                    ff_name=ff_name,
                    ff_uid=ff_uid,
                    utr_number=utr_number,
                )
        except IntegrityError:
            raise AlreadyJoined("Your join request for this tournament is still pending.")

    logger.info(
        "Join request %s created by user %s for tournament %s.",
        join_request.pk,
        user.pk,
        tournament.pk,
    )
    return join_request


def approve_join_request(actor, request_id) -> Participant:
    admin = require_admin(actor)
    now = timezone.now()

    with transaction.atomic():
        join_request = lock_pending_request(JoinRequest, request_id)
        tournament = _lock_tournament(join_request.tournament_id)
        _ensure_has_free_slot(tournament)
        if tournament.status == Tournament.Status.COMPLETED:
            raise TournamentClosed("This tournament has already been completed.")
        participant = _add_participant(
            tournament, join_request.user_id, join_request.ff_name, join_request.ff_uid
        )
        mark_request_resolved(join_request, RequestStatus.APPROVED, admin, now)

    logger.info(
        "Join request %s approved by admin %s; slot %s.",
        join_request.pk,
        admin.pk,
        participant.slot_no,
    )
    return participant


def reject_join_request(actor, request_id) -> JoinRequest:
    admin = require_admin(actor)
    now = timezone.now()

    with transaction.atomic():
        join_request = lock_pending_request(JoinRequest, request_id)
        mark_request_resolved(join_request, RequestStatus.REJECTED, admin, now)

    logger.info("Join request %s rejected by admin %s.", join_request.pk, admin.pk)
    return join_request


def go_live(actor, tournament_id, room_id, room_password) -> Tournament:
    """Publishes room credentials; UPCOMING -> LIVE. Credentials may be re-issued while LIVE."""
    require_admin(actor)
    room_id = validate_reference(room_id, "room id")
    room_password = validate_reference(room_password, "room password")

    with transaction.atomic():
        tournament = _lock_tournament(tournament_id)
        if tournament.status == Tournament.Status.COMPLETED:
            raise InvalidTransition("This tournament has already been completed.")
        tournament.room_id = room_id
        tournament.room_password = room_password
        tournament.status = Tournament.Status.LIVE
        tournament.save(update_fields=["room_id", "room_password", "status"])

    logger.info("Tournament %s is live.", tournament.pk)
    return tournament


def set_winner(actor, tournament_id, winner_id) -> Tournament:
    """
    Declares the winner, credits the prize pool and completes the tournament.
    One-shot: a tournament that already has a winner is refused.
    """
    admin = require_admin(actor)

    with transaction.atomic():
        tournament = _lock_tournament(tournament_id)
        if tournament.winner_id is not None:
            raise InvalidTransition("A winner has already been declared.")
        if tournament.status not in (Tournament.Status.LIVE, Tournament.Status.COMPLETED):
            raise InvalidTransition("Only a live tournament can be settled.")
        winner = get_user(winner_id)
        if not tournament.participants.filter(user=winner).exists():
            raise NotFound("The winner must be a participant of this tournament.")

        if tournament.prize_pool > 0:
            adjust_balance(
                winner.pk,
                tournament.prize_pool,
                kind=Transaction.Kind.PRIZE,
                description=f"Prize for winning tournament: {tournament.name}",
            )
        tournament.status = Tournament.Status.COMPLETED
        tournament.winner = winner
        tournament.save(update_fields=["status", "winner"])

    logger.info(
        "Tournament %s settled by admin %s; winner %s received %s.",
        tournament.pk,
        admin.pk,
        winner.pk,
        tournament.prize_pool,
    )
    return tournament
