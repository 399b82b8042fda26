from decimal import Decimal

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class ArenaUserManager(UserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        PLAYER = "PLAYER", "Player"

    role = models.CharField(
        max_length=10, choices=Role.choices, default=Role.PLAYER, db_index=True
    )
    wallet_balance = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    is_blocked = models.BooleanField(
        default=False, help_text="Hard suspension: no login, no wallet actions."
    )
    is_chat_blocked = models.BooleanField(
        default=False, help_text="Messaging-only suspension."
    )
    last_tx_at = models.DateTimeField(
        null=True, blank=True, help_text="Time of the most recent balance mutation."
    )

    objects = ArenaUserManager()

    class Meta(AbstractUser.Meta):
        constraints = [
            models.CheckConstraint(
                condition=models.Q(wallet_balance__gte=0),
                name="users_wallet_balance_non_negative",
            ),
        ]

    def __str__(self):
        return self.username

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN
