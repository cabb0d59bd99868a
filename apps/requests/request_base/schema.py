from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema

from apps.requests.request_base.serializers import (
    RequestCreateSerializer,
    RequestUpdateSerializer,
)

PAGINATION_PARAMETERS = [
    OpenApiParameter(name="limit", type=OpenApiTypes.INT, description="1 to 50, default 20"),
    OpenApiParameter(name="offset", type=OpenApiTypes.INT, description="Rows to skip"),
]

LIST_REQUESTS = extend_schema(
    parameters=[
        OpenApiParameter(name="status", type=OpenApiTypes.STR),
        OpenApiParameter(name="request_type", type=OpenApiTypes.STR),
        OpenApiParameter(name="requester_id", type=OpenApiTypes.UUID),
        OpenApiParameter(name="item_id", type=OpenApiTypes.STR),
        OpenApiParameter(name="min_price", type=OpenApiTypes.DECIMAL),
        OpenApiParameter(name="max_price", type=OpenApiTypes.DECIMAL),
        OpenApiParameter(
            name="order_by",
            type=OpenApiTypes.STR,
            enum=["created_at", "updated_at", "suggested_price"],
        ),
        OpenApiParameter(name="order_direction", type=OpenApiTypes.STR, enum=["asc", "desc"]),
        *PAGINATION_PARAMETERS,
    ]
)

SEARCH_REQUESTS = extend_schema(
    parameters=[
        OpenApiParameter(name="q", type=OpenApiTypes.STR, required=True),
        OpenApiParameter(name="request_type", type=OpenApiTypes.STR),
        *PAGINATION_PARAMETERS,
    ]
)

CREATE_REQUEST = extend_schema(request=RequestCreateSerializer)

UPDATE_REQUEST = extend_schema(request=RequestUpdateSerializer)
