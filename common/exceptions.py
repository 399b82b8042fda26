import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """
    Base class for every refused business operation.

    `code` is the machine-readable reason surfaced to clients; `message` is the
    human-readable explanation of which precondition failed.
    """

    code = "application_error"
    default_message = "The operation could not be completed."
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, code=None, status_code=None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def as_payload(self):
        return {
            "success": False,
            "code": self.code,
            "detail": self.message,
            "status_code": self.status_code,
        }


class InsufficientFunds(ApplicationError):
    code = "insufficient_funds"
    default_message = "Insufficient wallet balance."


class AlreadyJoined(ApplicationError):
    code = "already_joined"
    default_message = "You already hold a slot or a pending request for this tournament."
    status_code = status.HTTP_409_CONFLICT


class SlotFull(ApplicationError):
    code = "slot_full"
    default_message = "This tournament is full."
    status_code = status.HTTP_409_CONFLICT


class CooldownActive(ApplicationError):
    code = "cooldown_active"
    default_message = "A wallet transaction was made recently. Please wait for the cooldown to end."
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, time_left, message=None):
        self.time_left = time_left
        super().__init__(message)

    def as_payload(self):
        payload = super().as_payload()
        payload["time_left_seconds"] = int(self.time_left.total_seconds())
        return payload


class AccountBlocked(ApplicationError):
    code = "account_blocked"
    default_message = "This account has been suspended."
    status_code = status.HTTP_403_FORBIDDEN


class ChatBlocked(ApplicationError):
    code = "chat_blocked"
    default_message = "Messaging is disabled for this account."
    status_code = status.HTTP_403_FORBIDDEN


class InvalidAmount(ApplicationError):
    code = "invalid_amount"
    default_message = "Amount must be a positive number with at most two decimal places."


class InvalidReference(ApplicationError):
    code = "invalid_reference"
    default_message = "A non-empty payment reference is required."


class NotFound(ApplicationError):
    code = "not_found"
    default_message = "The requested record does not exist."
    status_code = status.HTTP_404_NOT_FOUND


class Unauthorized(ApplicationError):
    code = "unauthorized"
    default_message = "Only administrators may perform this action."
    status_code = status.HTTP_403_FORBIDDEN


class PersistenceFailure(ApplicationError):
    code = "persistence_failure"
    default_message = "The change could not be saved. Nothing was modified."
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class InvalidTransition(ApplicationError):
    code = "invalid_transition"
    default_message = "This request has already been resolved."
    status_code = status.HTTP_409_CONFLICT


class TournamentClosed(ApplicationError):
    code = "tournament_closed"
    default_message = "Registration for this tournament is closed."
    status_code = status.HTTP_409_CONFLICT


class UsernameTaken(ApplicationError):
    code = "username_taken"
    default_message = "Username already exists."
    status_code = status.HTTP_409_CONFLICT


def custom_exception_handler(exc, context):
    if isinstance(exc, ApplicationError):
        return Response(exc.as_payload(), status=exc.status_code)

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict):
            response.data["status_code"] = response.status_code
        return response

    logger.exception("Unhandled error in %s", context.get("view").__class__.__name__)
    return Response(
        {"detail": "An unexpected error occurred."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
