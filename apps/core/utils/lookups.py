from django.core.exceptions import ValidationError

from apps.core.exceptions import NotFound


def get_or_not_found(queryset, pk, message="Not found"):
    """Fetch one row by primary key, raising ``NotFound`` for unknown or malformed ids."""
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValidationError, ValueError):
        raise NotFound(message)
