import logging

from django.db.models import Count, Q

from common.exceptions import ApplicationError, ChatBlocked, Unauthorized
from siteconfig.services import get_config
from users.models import User
from users.services import ensure_active, get_user

from .models import Message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def get_support_contact() -> User:
    """The admin account players write to."""
    admin = (
        User.objects.filter(role=User.Role.ADMIN, is_blocked=False)
        .order_by("id")
        .first()
    )
    if admin is None:
        raise ApplicationError("Support is not available right now.", code="no_support")
    return admin


def send_message(sender, receiver_id, text) -> Message:
    """
    Players may only write to admins; admins may write to anyone. While chat is
    disabled in the global configuration only admins can send.
    """
    sender = ensure_active(sender)
    text = (text or "").strip()
    if not text:
        raise ApplicationError("Message cannot be empty.", code="empty_message")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ApplicationError(
            f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters.",
            code="message_too_long",
        )

    if not sender.is_admin:
        if sender.is_chat_blocked:
            raise ChatBlocked()
        if get_config().chat_disabled:
            raise ChatBlocked("Chat is currently disabled.")

    receiver = get_user(receiver_id)
    if receiver.pk == sender.pk:
        raise ApplicationError("You cannot message yourself.", code="invalid_receiver")
    if not sender.is_admin and not receiver.is_admin:
        raise Unauthorized("Players can only message support.")

    message = Message.objects.create(sender=sender, receiver=receiver, text=text)
    logger.info("Message %s sent from %s to %s.", message.pk, sender.pk, receiver.pk)
    return message


def get_conversation(viewer, other_user_id):
    """
    Messages between `viewer` and another user, oldest first. Incoming
    messages are marked read as a side effect.
    """
    viewer = ensure_active(viewer)
    other = get_user(other_user_id)
    if not viewer.is_admin and not other.is_admin:
        raise Unauthorized("Players can only read their support conversation.")

    Message.objects.filter(sender=other, receiver=viewer, is_read=False).update(
        is_read=True
    )
    return (
        Message.objects.filter(
            Q(sender=viewer, receiver=other) | Q(sender=other, receiver=viewer)
        )
        .select_related("sender", "receiver")
        .order_by("timestamp", "id")
    )


def unread_count(user) -> int:
    return Message.objects.filter(receiver=user, is_read=False).count()


def inbox(viewer):
    """Users the viewer has exchanged messages with, annotated with `unread`."""
    viewer = ensure_active(viewer)
    partner_ids = set(
        Message.objects.filter(receiver=viewer).values_list("sender_id", flat=True)
    ) | set(Message.objects.filter(sender=viewer).values_list("receiver_id", flat=True))
    return (
        User.objects.filter(pk__in=partner_ids)
        .annotate(
            unread=Count(
                "sent_messages",
                filter=Q(sent_messages__receiver=viewer, sent_messages__is_read=False),
            )
        )
        .order_by("username")
    )
