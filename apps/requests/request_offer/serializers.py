from rest_framework import serializers

from apps.core.serializers import (
    FormattedPriceMixin,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.core.utils.currency import Currency
from apps.requests.request_base.models import Request
from apps.requests.request_offer.models import OfferStatus, RequestOffer


class RequestOfferSerializer(FormattedPriceMixin, TimestampedModelSerializer):
    """Offer as shown on a request page"""

    offerer = UserShortSerializer(read_only=True)
    formatted_price = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    status_variant = serializers.SerializerMethodField()

    class Meta:
        model = RequestOffer
        fields = [
            "id",
            "request",
            "offerer",
            "offered_price",
            "currency",
            "formatted_price",
            "message",
            "status",
            "status_display",
            "status_variant",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_formatted_price(self, obj) -> str:
        return self.format_price(obj.offered_price, obj.currency)

    def get_status_variant(self, obj) -> str:
        return obj.status_config["variant"]


class RequestOfferCreateSerializer(serializers.Serializer):
    offered_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    currency = serializers.ChoiceField(choices=Currency.choices, default=Currency.EMERALDS)
    message = serializers.CharField(required=False, allow_blank=True, default="")


class OfferTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            OfferStatus.ACCEPTED,
            OfferStatus.REJECTED,
            OfferStatus.WITHDRAWN,
        ]
    )


class OfferRequestBriefSerializer(serializers.ModelSerializer):
    requester = UserShortSerializer(read_only=True)

    class Meta:
        model = Request
        fields = ["id", "title", "status", "requester"]


class AcceptedOfferSerializer(RequestOfferSerializer):
    """Accepted offer with the request and negotiation it belongs to"""

    request = OfferRequestBriefSerializer(read_only=True)
    negotiation_id = serializers.SerializerMethodField()
    negotiation_status = serializers.SerializerMethodField()
    last_activity = serializers.DateTimeField(read_only=True, required=False)

    class Meta(RequestOfferSerializer.Meta):
        fields = RequestOfferSerializer.Meta.fields + [
            "negotiation_id",
            "negotiation_status",
            "last_activity",
        ]
        read_only_fields = fields

    def _negotiation(self, obj):
        return getattr(obj, "negotiation", None)

    def get_negotiation_id(self, obj) -> str | None:
        negotiation = self._negotiation(obj)
        return str(negotiation.id) if negotiation else None

    def get_negotiation_status(self, obj) -> str | None:
        negotiation = self._negotiation(obj)
        return negotiation.status if negotiation else None
