import logging

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.views import BaseViewSet
from apps.requests.request_negotiation.models import RequestNegotiation
from apps.requests.request_negotiation.serializers import (
    NegotiationMessageCreateSerializer,
    NegotiationMessageSerializer,
    RequestNegotiationSerializer,
)
from apps.requests.request_negotiation.services import NegotiationService
from apps.requests.utils.rate_limiting import (
    NegotiationMessageRateThrottle,
    NegotiationRateThrottle,
)

logger = logging.getLogger("negotiation_performance")


@extend_schema(tags=["Negotiations"])
class RequestNegotiationViewSet(BaseViewSet):
    queryset = RequestNegotiation.objects.all()
    serializer_class = RequestNegotiationSerializer
    permission_classes = [IsAuthenticated]
    throttle_classes = [NegotiationRateThrottle]

    def retrieve(self, request, pk=None):
        result = NegotiationService.get_negotiation(pk, request.user)
        return self.result_response(
            result,
            serialize=lambda negotiation: RequestNegotiationSerializer(
                negotiation, context=self.serializer_context()
            ).data,
        )

    @extend_schema(
        request=NegotiationMessageCreateSerializer,
        responses=NegotiationMessageSerializer,
    )
    @action(
        detail=True,
        methods=["post"],
        url_path="messages",
        throttle_classes=[NegotiationMessageRateThrottle],
    )
    def messages(self, request, pk=None):
        """Post a chat line, counter-offer, acceptance or rejection."""
        start_time = timezone.now()
        data, error = self.validated_input(NegotiationMessageCreateSerializer)
        if error:
            return error

        result = NegotiationService.post_negotiation_message(
            pk,
            request.user,
            message_type=data["message_type"],
            content=data["content"],
            price_offer=data.get("price_offer"),
            currency=data.get("currency") or None,
        )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Negotiation message request handled in {duration:.2f}ms")
        return self.result_response(
            result,
            serialize=lambda message: NegotiationMessageSerializer(message).data,
            message="Message sent",
            status_code=status.HTTP_201_CREATED,
        )
