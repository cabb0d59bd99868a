from django.conf import settings
from drf_spectacular.extensions import OpenApiAuthenticationExtension


class CookieJWTAuthenticationExtension(OpenApiAuthenticationExtension):
    target_class = "apps.core.authentication.CookieJWTAuthentication"
    name = "playerCookieAuth"

    def get_security_definition(self, auto_schema):
        cookie_name = getattr(settings, "JWT_AUTH_COOKIE", "access_token")

        return {
            "type": "apiKey",
            "in": "cookie",
            "name": cookie_name,
            "description": "Access token issued by /api/v1/auth/token/. "
            "An 'Authorization: Bearer <token>' header is accepted as well.",
        }
