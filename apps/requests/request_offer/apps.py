from django.apps import AppConfig


class RequestOfferConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.requests.request_offer"
    label = "request_offer"
    verbose_name = "Request offers"
