from rest_framework import serializers

from apps.core.serializers import (
    FormattedPriceMixin,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.core.utils.currency import Currency, format_with_rate
from apps.items.serializers import ItemShortSerializer
from apps.requests.request_base.models import Request, RequestStatus, RequestType
from apps.requests.request_negotiation.serializers import RequestNegotiationSerializer
from apps.requests.request_offer.serializers import RequestOfferSerializer


class RequestSerializer(FormattedPriceMixin, TimestampedModelSerializer):
    requester = UserShortSerializer(read_only=True)
    item = ItemShortSerializer(read_only=True)
    formatted_price = serializers.SerializerMethodField()
    formatted_price_with_rate = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    status_variant = serializers.SerializerMethodField()
    request_type_display = serializers.CharField(
        source="get_request_type_display", read_only=True
    )
    offer_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Request
        fields = [
            "id",
            "title",
            "description",
            "request_type",
            "request_type_display",
            "item",
            "item_quantity",
            "suggested_price",
            "currency",
            "formatted_price",
            "formatted_price_with_rate",
            "status",
            "status_display",
            "status_variant",
            "requester",
            "offer_count",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_formatted_price(self, obj) -> str:
        return self.format_price(obj.suggested_price, obj.currency)

    def get_formatted_price_with_rate(self, obj) -> str:
        return format_with_rate(obj.suggested_price, obj.currency)

    def get_status_variant(self, obj) -> str:
        return obj.status_config["variant"]


class RequestCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=1000)
    request_type = serializers.ChoiceField(
        choices=RequestType.choices, default=RequestType.GENERAL
    )
    item_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    item_quantity = serializers.IntegerField(required=False, allow_null=True)
    suggested_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    currency = serializers.ChoiceField(choices=Currency.choices, default=Currency.EMERALDS)


class RequestUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(max_length=1000, required=False)
    suggested_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    status = serializers.ChoiceField(choices=RequestStatus.choices, required=False)


class RequestDetailsSerializer(serializers.Serializer):
    request = RequestSerializer(read_only=True)
    offers = RequestOfferSerializer(many=True, read_only=True)
    negotiation = RequestNegotiationSerializer(read_only=True, allow_null=True)


class RequestStatsSerializer(serializers.Serializer):
    total_requests = serializers.IntegerField()
    open_requests = serializers.IntegerField()
    completed_requests = serializers.IntegerField()
    offers_made = serializers.IntegerField()
    accepted_offers = serializers.IntegerField()
