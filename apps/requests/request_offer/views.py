from drf_spectacular.utils import extend_schema
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.views import BaseViewSet
from apps.requests.request_offer.models import RequestOffer
from apps.requests.request_offer.serializers import (
    AcceptedOfferSerializer,
    OfferTransitionSerializer,
    RequestOfferSerializer,
)
from apps.requests.request_offer.services import OfferService
from apps.requests.utils.rate_limiting import OfferTransitionRateThrottle

TRANSITION_MESSAGES = {
    "ACCEPTED": "Offer accepted, negotiation started",
    "REJECTED": "Offer rejected",
    "WITHDRAWN": "Offer withdrawn",
}


@extend_schema(tags=["Offers"])
class RequestOfferViewSet(BaseViewSet):
    queryset = RequestOffer.objects.all()
    serializer_class = RequestOfferSerializer
    permission_classes = [IsAuthenticated]

    @extend_schema(request=OfferTransitionSerializer, responses=RequestOfferSerializer)
    @action(
        detail=True,
        methods=["post"],
        url_path="transition",
        throttle_classes=[OfferTransitionRateThrottle],
    )
    def transition(self, request, pk=None):
        """
        Accept, reject or withdraw a pending offer. Accepting opens the
        negotiation and rejects every other pending offer on the request.
        """
        data, error = self.validated_input(OfferTransitionSerializer)
        if error:
            return error

        target = data["status"]
        result = OfferService.transition_offer(pk, request.user, target)
        return self.result_response(
            result,
            serialize=lambda offer: RequestOfferSerializer(
                offer, context=self.serializer_context()
            ).data,
            message=TRANSITION_MESSAGES[target],
        )

    @extend_schema(responses=AcceptedOfferSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="accepted")
    def accepted(self, request):
        """Offers of the current player that were accepted, with their negotiations."""
        result = OfferService.list_accepted_offers(request.user)
        return self.result_response(
            result,
            serialize=lambda offers: AcceptedOfferSerializer(
                offers, many=True, context=self.serializer_context()
            ).data,
        )
