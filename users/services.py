import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from common.exceptions import (
    AccountBlocked,
    ApplicationError,
    NotFound,
    Unauthorized,
    UsernameTaken,
)

from .models import User

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def get_user(user_id) -> User:
    try:
        return User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("User not found.")


def ensure_active(user) -> User:
    """
    Re-reads the caller from the database and refuses blocked accounts.

    Callers hand in whatever user object the request carried; the persisted
    row is the one that is trusted.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthorized("Authentication is required.")
    fresh = get_user(user.pk)
    if fresh.is_blocked:
        raise AccountBlocked()
    return fresh


def require_admin(actor) -> User:
    """Authorizes a privileged transition against the persisted role."""
    fresh = ensure_active(actor)
    if fresh.role != User.Role.ADMIN:
        logger.warning("User %s attempted an admin-only action.", fresh.pk)
        raise Unauthorized()
    return fresh


def register_user(username: str, password: str) -> User:
    clean_username = normalize_username(username)
    if not clean_username:
        raise ApplicationError("Username is required.", code="invalid_username")
    if clean_username in settings.RESERVED_USERNAMES:
        raise UsernameTaken("Username reserved.")
    if User.objects.filter(username=clean_username).exists():
        raise UsernameTaken()

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=clean_username,
                password=password,
                role=User.Role.PLAYER,
            )
    except IntegrityError:
        raise UsernameTaken()
    logger.info("Registered player %s (id=%s).", user.username, user.pk)
    return user


def list_users(actor):
    require_admin(actor)
    return User.objects.order_by("username")


def toggle_user_block(actor, user_id) -> User:
    require_admin(actor)
    with transaction.atomic():
        try:
            target = User.objects.select_for_update().get(pk=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound("User not found.")
        if target.role == User.Role.ADMIN:
            raise Unauthorized("Administrators cannot be blocked.")
        target.is_blocked = not target.is_blocked
        target.save(update_fields=["is_blocked"])
    logger.info("User %s is_blocked set to %s.", target.pk, target.is_blocked)
    return target


def toggle_chat_block(actor, user_id) -> User:
    require_admin(actor)
    with transaction.atomic():
        try:
            target = User.objects.select_for_update().get(pk=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound("User not found.")
        target.is_chat_blocked = not target.is_chat_blocked
        target.save(update_fields=["is_chat_blocked"])
    logger.info("User %s is_chat_blocked set to %s.", target.pk, target.is_chat_blocked)
    return target
