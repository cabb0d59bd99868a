from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.core.utils.currency import Currency
from apps.items.models import MinecraftItem
from apps.requests.request_base.services import RequestService
from apps.requests.request_offer.models import OfferStatus
from apps.requests.request_offer.services import OfferService

User = get_user_model()


@pytest.fixture
def requester(db):
    return User.objects.create_user(mc_username="Steve", password="creeper123")


@pytest.fixture
def offerer(db):
    return User.objects.create_user(mc_username="Alex", password="creeper123")


@pytest.fixture
def second_offerer(db):
    return User.objects.create_user(mc_username="Herobrine", password="creeper123")


@pytest.fixture
def stranger(db):
    return User.objects.create_user(mc_username="Notch", password="creeper123")


@pytest.fixture
def diamond(db):
    return MinecraftItem.objects.create(
        id="minecraft:diamond", name_en="Diamond", name_de="Diamant", filename="diamond.png"
    )


@pytest.fixture
def open_request(requester):
    return RequestService.create_request(
        requester,
        title="Need building help",
        description="Looking for someone to help build a castle",
        suggested_price=Decimal("10"),
        currency=Currency.EMERALDS,
    ).unwrap()


@pytest.fixture
def make_offer():
    def _make_offer(request, offerer, price=Decimal("12"), currency=Currency.EMERALDS, message=""):
        return OfferService.create_offer(
            request.id, offerer, offered_price=price, currency=currency, message=message
        ).unwrap()

    return _make_offer


@pytest.fixture
def offer(open_request, offerer, make_offer):
    return make_offer(open_request, offerer)


@pytest.fixture
def negotiation(offer, requester):
    """Negotiation opened by accepting `offer`."""
    accepted = OfferService.transition_offer(offer.id, requester, OfferStatus.ACCEPTED).unwrap()
    return accepted.negotiation


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client_for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client_for
