from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


class CookieJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that reads the access token from the player's cookie
    first and falls back to the Authorization header.
    """

    def authenticate(self, request):
        access_token = request.COOKIES.get(settings.JWT_AUTH_COOKIE)

        if not access_token:
            return super().authenticate(request)

        validated_token = self.get_validated_token(access_token)
        user = self.get_user(validated_token)
        return user, validated_token
