from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.core.utils.currency import format_amount

User = get_user_model()


class TimestampedModelSerializer(serializers.ModelSerializer):
    class Meta:
        abstract = True

    created_at = serializers.DateTimeField(read_only=True, required=False)
    updated_at = serializers.DateTimeField(read_only=True, required=False)


class UserShortSerializer(serializers.ModelSerializer):
    """Short representation of a player."""

    class Meta:
        model = User
        fields = ["id", "mc_username"]


class FormattedPriceMixin:
    """Adds `format_price(amount, currency)` for SerializerMethodFields."""

    @staticmethod
    def format_price(amount, currency) -> str:
        return format_amount(amount, currency)
