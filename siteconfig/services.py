import logging

from django.conf import settings

from users.services import require_admin

from .models import GlobalConfig

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("upi_id", "qr_url", "chat_disabled", "auto_payment_enabled")


def get_config() -> GlobalConfig:
    config, created = GlobalConfig.objects.get_or_create(
        pk=GlobalConfig.SINGLETON_PK,
        defaults={"upi_id": settings.DEFAULT_UPI_ID},
    )
    if created:
        logger.info("Created default global configuration.")
    return config


def update_config(actor, **changes) -> GlobalConfig:
    admin = require_admin(actor)
    config = get_config()
    update_fields = []
    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(config, field, changes[field])
            update_fields.append(field)
    if update_fields:
        config.save(update_fields=update_fields + ["updated_at"])
        logger.info("Admin %s updated config fields: %s", admin.pk, ", ".join(update_fields))
    return config
