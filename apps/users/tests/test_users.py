import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()


@pytest.mark.django_db
class TestCustomUserManager:
    def test_create_user(self):
        user = User.objects.create_user("Steve", password="pw", email="Steve@EXAMPLE.com")

        assert user.mc_username == "Steve"
        assert user.email == "Steve@example.com"
        assert user.check_password("pw")
        assert not user.is_staff
        assert str(user) == "Steve"

    def test_username_is_required(self):
        with pytest.raises(ValueError):
            User.objects.create_user("", password="pw")

    def test_create_superuser(self):
        admin = User.objects.create_superuser("Notch", password="pw")

        assert admin.is_staff
        assert admin.is_superuser

    def test_superuser_flags_cannot_be_cleared(self):
        with pytest.raises(ValueError):
            User.objects.create_superuser("Notch", password="pw", is_staff=False)


@pytest.mark.django_db
class TestCookieAuthentication:
    def test_access_token_cookie_authenticates(self, settings):
        User.objects.create_user("Steve", password="hunter22")
        client = APIClient()

        tokens = client.post(
            reverse("token_obtain_pair"),
            {"mc_username": "Steve", "password": "hunter22"},
            format="json",
        )
        assert tokens.status_code == status.HTTP_200_OK

        client.cookies[settings.JWT_AUTH_COOKIE] = tokens.data["access"]
        response = client.get(reverse("request-my-stats"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["total_requests"] == 0

    def test_bad_cookie_is_refused(self, settings):
        client = APIClient()
        client.cookies[settings.JWT_AUTH_COOKIE] = "not-a-token"

        response = client.get(reverse("request-my-stats"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
