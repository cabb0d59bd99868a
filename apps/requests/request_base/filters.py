import django_filters

from apps.requests.request_base.models import Request, RequestStatus, RequestType


class RequestFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=RequestStatus.choices)
    request_type = django_filters.ChoiceFilter(choices=RequestType.choices)
    requester_id = django_filters.UUIDFilter(field_name="requester_id")
    item_id = django_filters.CharFilter(field_name="item_id")
    min_price = django_filters.NumberFilter(field_name="suggested_price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="suggested_price", lookup_expr="lte")

    class Meta:
        model = Request
        fields = ["status", "request_type"]
