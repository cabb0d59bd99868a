import logging

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.core.views import BaseViewSet
from apps.requests.request_base.models import Request
from apps.requests.request_base.schema import (
    CREATE_REQUEST,
    LIST_REQUESTS,
    SEARCH_REQUESTS,
    UPDATE_REQUEST,
)
from apps.requests.request_base.serializers import (
    RequestCreateSerializer,
    RequestDetailsSerializer,
    RequestSerializer,
    RequestStatsSerializer,
    RequestUpdateSerializer,
)
from apps.requests.request_base.services import RequestService
from apps.requests.request_negotiation.serializers import RequestNegotiationSerializer
from apps.requests.request_negotiation.services import NegotiationService
from apps.requests.request_offer.serializers import (
    RequestOfferCreateSerializer,
    RequestOfferSerializer,
)
from apps.requests.request_offer.services import OfferService
from apps.requests.utils.rate_limiting import (
    NegotiationRateThrottle,
    OfferCreateRateThrottle,
    RequestCreateRateThrottle,
    RequestListRateThrottle,
    RequestUpdateRateThrottle,
)

logger = logging.getLogger("requests_performance")

LIST_FILTER_PARAMS = ("status", "request_type", "requester_id", "item_id", "min_price", "max_price")


@extend_schema(tags=["Requests"])
class RequestViewSet(BaseViewSet):
    """Request board: post, browse, edit and close requests and make offers on them"""

    queryset = Request.objects.all()
    serializer_class = RequestSerializer
    permission_classes = [IsAuthenticated]

    public_actions = ("list", "retrieve", "search")
    action_throttles = {
        "list": [RequestListRateThrottle],
        "search": [RequestListRateThrottle],
        "create": [RequestCreateRateThrottle],
        "partial_update": [RequestUpdateRateThrottle],
        "cancel": [RequestUpdateRateThrottle],
        "negotiation": [NegotiationRateThrottle],
    }

    def get_permissions(self):
        if self.action in self.public_actions:
            return [AllowAny()]
        if self.action == "offers" and self.request.method == "GET":
            return [AllowAny()]
        return super().get_permissions()

    def get_throttles(self):
        if self.action == "offers":
            if self.request.method == "POST":
                return [OfferCreateRateThrottle()]
            return [RequestListRateThrottle()]
        throttles = self.action_throttles.get(self.action)
        if throttles is not None:
            return [throttle() for throttle in throttles]
        return super().get_throttles()

    def _serialize_page(self, page):
        return {
            "requests": RequestSerializer(
                page["requests"], many=True, context=self.serializer_context()
            ).data,
            "total": page["total"],
            "has_more": page["has_more"],
        }

    def _serialize_request(self, request_obj):
        return RequestSerializer(request_obj, context=self.serializer_context()).data

    @LIST_REQUESTS
    def list(self, request):
        start_time = timezone.now()
        params = request.query_params
        filters = {key: params.get(key) for key in LIST_FILTER_PARAMS if params.get(key)}

        result = RequestService.list_requests(
            filters=filters,
            limit=params.get("limit"),
            offset=params.get("offset"),
            order_by=params.get("order_by", "created_at"),
            order_direction=params.get("order_direction", "desc"),
        )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Request list served in {duration:.2f}ms")
        return self.result_response(result, serialize=self._serialize_page)

    @CREATE_REQUEST
    def create(self, request):
        data, error = self.validated_input(RequestCreateSerializer)
        if error:
            return error

        result = RequestService.create_request(user=request.user, **data)
        return self.result_response(
            result,
            serialize=self._serialize_request,
            message="Request created",
            status_code=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        result = RequestService.get_request_details(pk, request.user)
        return self.result_response(
            result,
            serialize=lambda details: RequestDetailsSerializer(
                details, context=self.serializer_context()
            ).data,
        )

    @UPDATE_REQUEST
    def partial_update(self, request, pk=None):
        data, error = self.validated_input(RequestUpdateSerializer)
        if error:
            return error

        result = RequestService.update_request(pk, request.user, dict(data))
        return self.result_response(
            result, serialize=self._serialize_request, message="Request updated"
        )

    def destroy(self, request, pk=None):
        result = RequestService.delete_request(pk, request.user)
        return self.result_response(result, message="Request deleted")

    @SEARCH_REQUESTS
    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        params = request.query_params
        result = RequestService.search_requests(
            query=params.get("q"),
            request_type=params.get("request_type"),
            limit=params.get("limit"),
            offset=params.get("offset"),
        )
        return self.result_response(result, serialize=self._serialize_page)

    @extend_schema(responses=RequestStatsSerializer)
    @action(detail=False, methods=["get"], url_path="my-stats")
    def my_stats(self, request):
        result = RequestService.get_user_request_stats(request.user)
        return self.result_response(
            result, serialize=lambda stats: RequestStatsSerializer(stats).data
        )

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        result = RequestService.complete_request(pk, request.user)
        return self.result_response(
            result, serialize=self._serialize_request, message="Request completed"
        )

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        result = RequestService.cancel_request(pk, request.user)
        return self.result_response(
            result, serialize=self._serialize_request, message="Request cancelled"
        )

    @extend_schema(responses=RequestNegotiationSerializer)
    @action(detail=True, methods=["get"], url_path="negotiation")
    def negotiation(self, request, pk=None):
        result = NegotiationService.get_negotiation_for_request(pk, request.user)
        return self.result_response(
            result,
            serialize=lambda negotiation: RequestNegotiationSerializer(
                negotiation, context=self.serializer_context()
            ).data,
        )

    @extend_schema(request=RequestOfferCreateSerializer, responses=RequestOfferSerializer)
    @action(detail=True, methods=["get", "post"], url_path="offers")
    def offers(self, request, pk=None):
        """List the offers on a request, or make a new one."""
        if request.method == "GET":
            result = OfferService.list_offers(pk)
            return self.result_response(
                result,
                serialize=lambda offers: RequestOfferSerializer(
                    offers, many=True, context=self.serializer_context()
                ).data,
            )

        data, error = self.validated_input(RequestOfferCreateSerializer)
        if error:
            return error

        result = OfferService.create_offer(
            pk,
            request.user,
            offered_price=data.get("offered_price"),
            currency=data.get("currency"),
            message=data.get("message"),
        )
        return self.result_response(
            result,
            serialize=lambda offer: RequestOfferSerializer(
                offer, context=self.serializer_context()
            ).data,
            message="Offer submitted",
            status_code=status.HTTP_201_CREATED,
        )
