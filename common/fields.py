from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .exceptions import InvalidAmount
from .validators import parse_amount


@extend_schema_field(OpenApiTypes.DECIMAL)
class AmountField(serializers.Field):
    """
    Currency amount parsed with `parse_amount`: malformed values are rejected
    instead of being coerced. JSON numbers are accepted through their shortest
    decimal representation.
    """

    default_error_messages = {
        "invalid_amount": InvalidAmount.default_message,
    }

    def __init__(self, allow_negative=False, allow_zero=False, **kwargs):
        self.allow_negative = allow_negative
        self.allow_zero = allow_zero
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, float):
            data = repr(data)
        try:
            return parse_amount(
                data, allow_negative=self.allow_negative, allow_zero=self.allow_zero
            )
        except InvalidAmount as exc:
            raise serializers.ValidationError(exc.message, code=exc.code)

    def to_representation(self, value):
        return f"{value:.2f}"
