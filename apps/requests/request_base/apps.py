from django.apps import AppConfig


class RequestBaseConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.requests.request_base"
    label = "request_base"
    verbose_name = "Requests"
