from django.apps import AppConfig


class RequestNegotiationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.requests.request_negotiation"
    label = "request_negotiation"
    verbose_name = "Request negotiations"
