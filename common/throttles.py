from rest_framework.throttling import UserRateThrottle


class VeryStrictThrottle(UserRateThrottle):
    """
    Used for money-moving submissions: deposits, withdrawals and login.
    """
    scope = 'very_strict'


class StrictThrottle(UserRateThrottle):
    """
    Used for tournament joins and admin approval actions.
    """
    scope = 'strict'


class MediumThrottle(UserRateThrottle):
    """
    Used for the polled list endpoints (requests, ledger, messages).
    """
    scope = 'medium'


class RelaxedThrottle(UserRateThrottle):
    """
    Used for public, read-only endpoints such as the tournament list.
    """
    scope = 'relaxed'
