from rest_framework import serializers

from apps.core.serializers import (
    FormattedPriceMixin,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.core.utils.currency import Currency, format_amount, format_with_rate
from apps.requests.request_negotiation.models import (
    MessageType,
    NegotiationMessage,
    RequestNegotiation,
)
from apps.requests.request_negotiation.resolver import terms_in
from apps.requests.request_negotiation.services import stored_state
from apps.requests.request_offer.serializers import RequestOfferSerializer


class NegotiationMessageSerializer(FormattedPriceMixin, TimestampedModelSerializer):
    sender = UserShortSerializer(read_only=True)
    formatted_price = serializers.SerializerMethodField()
    message_type_display = serializers.CharField(
        source="get_message_type_display", read_only=True
    )

    class Meta:
        model = NegotiationMessage
        fields = [
            "id",
            "sender",
            "message_type",
            "message_type_display",
            "content",
            "price_offer",
            "currency",
            "formatted_price",
            "sequence",
            "created_at",
        ]
        read_only_fields = fields

    def get_formatted_price(self, obj) -> str | None:
        if obj.price_offer is None:
            return None
        return self.format_price(obj.price_offer, obj.currency or Currency.EMERALDS)


class NegotiationMessageCreateSerializer(serializers.Serializer):
    message_type = serializers.ChoiceField(choices=MessageType.choices)
    content = serializers.CharField(max_length=500, trim_whitespace=True)
    price_offer = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    currency = serializers.ChoiceField(
        choices=Currency.choices, required=False, allow_null=True, allow_blank=True
    )


class RequestNegotiationSerializer(FormattedPriceMixin, TimestampedModelSerializer):
    """Negotiation with its full log and the terms currently on the table"""

    requester = UserShortSerializer(source="request.requester", read_only=True)
    offerer = UserShortSerializer(source="accepted_offer.offerer", read_only=True)
    accepted_offer = RequestOfferSerializer(read_only=True)
    messages = serializers.SerializerMethodField()
    terms = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    status_variant = serializers.SerializerMethodField()
    current_user_accepted = serializers.SerializerMethodField()
    can_respond = serializers.SerializerMethodField()

    class Meta:
        model = RequestNegotiation
        fields = [
            "id",
            "request",
            "requester",
            "offerer",
            "accepted_offer",
            "status",
            "status_display",
            "status_variant",
            "terms",
            "current_user_accepted",
            "can_respond",
            "messages",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _state(self, obj):
        state = getattr(obj, "terms_state", None)
        return state if state is not None else stored_state(obj)

    def _viewer(self):
        request = self.context.get("request")
        return getattr(request, "user", None)

    def get_messages(self, obj) -> list:
        messages = sorted(obj.messages.all(), key=lambda m: (m.created_at, m.sequence))
        return NegotiationMessageSerializer(messages, many=True).data

    def get_terms(self, obj) -> dict:
        state = self._state(obj)
        terms = state.terms
        formatted = self.format_price(terms.price, terms.currency or Currency.EMERALDS)
        return {
            "price": str(terms.price) if terms.price is not None else None,
            "currency": terms.currency,
            "formatted": formatted,
            "formatted_with_rate": (
                format_with_rate(terms.price, terms.currency) if terms.currency else formatted
            ),
            "requester_accepted": state.requester_accepted,
            "offerer_accepted": state.offerer_accepted,
            "agreed": state.agreed,
            "in_request_currency": self._in_request_currency(obj, state),
        }

    def _in_request_currency(self, obj, state):
        if state.terms.is_empty or not state.terms.currency:
            return None
        converted = terms_in(state, obj.request.currency)
        return format_amount(converted.price, converted.currency)

    def get_status_variant(self, obj) -> str:
        return obj.status_config["variant"]

    def get_current_user_accepted(self, obj) -> bool:
        viewer = self._viewer()
        if viewer is None or not obj.is_participant(viewer):
            return False
        state = self._state(obj)
        if viewer.pk == obj.request.requester_id:
            return state.requester_accepted
        return state.offerer_accepted

    def get_can_respond(self, obj) -> bool:
        viewer = self._viewer()
        return obj.is_active and viewer is not None and obj.is_participant(viewer)
