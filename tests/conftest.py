"""
Shared fixtures for the test suite.
Fixtures defined here are available to all tests in the project.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from tournaments.models import Tournament

User = get_user_model()


@pytest.fixture(autouse=True)
def override_settings(settings):
    """Fast hashing and a fixed five-hour cooldown for every test."""
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]
    settings.WALLET_TX_COOLDOWN = timedelta(hours=5)


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    """DRF throttles count requests in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """A pytest fixture that provides an instance of DRF's APIClient."""
    return APIClient()


@pytest.fixture
def user_factory(db):
    """A pytest fixture (factory) to create a user."""

    def _create_user(**kwargs):
        defaults = {
            "username": f"player{User.objects.count() + 1}",
            "password": "password",
        }
        defaults.update(kwargs)
        return User.objects.create_user(**defaults)

    return _create_user


@pytest.fixture
def player(user_factory):
    """A player with 100.00 in the wallet and no recent transaction."""
    return user_factory(username="player", wallet_balance=Decimal("100.00"))


@pytest.fixture
def other_player(user_factory):
    return user_factory(username="other", wallet_balance=Decimal("100.00"))


@pytest.fixture
def admin_user(user_factory):
    """A fixture to create an admin (role ADMIN) user."""
    return user_factory(username="support", role=User.Role.ADMIN)


@pytest.fixture
def player_client(api_client, player):
    """A pytest fixture for an authenticated client with a standard user."""
    api_client.force_authenticate(user=player)
    return api_client


@pytest.fixture
def admin_client(admin_user):
    """A separate client authenticated as the admin."""
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def tournament_factory(db):
    def _create_tournament(**kwargs):
        defaults = {
            "name": "Friday Clash",
            "entry_fee": Decimal("30.00"),
            "prize_pool": Decimal("500.00"),
            "max_slots": 48,
        }
        defaults.update(kwargs)
        return Tournament.objects.create(**defaults)

    return _create_tournament


@pytest.fixture
def tournament(tournament_factory):
    return tournament_factory()
