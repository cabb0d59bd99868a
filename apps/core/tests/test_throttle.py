import pytest
from django.core.cache import cache
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory, force_authenticate

from apps.core.throttle import BaseCacheThrottle


class TwoPerMinuteThrottle(BaseCacheThrottle):
    scope = "test_scope"
    rate = "2/min"


class FakeUser:
    pk = "player-1"
    is_authenticated = True


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


def make_request():
    django_request = APIRequestFactory().post("/api/v1/requests/")
    force_authenticate(django_request, user=FakeUser())
    return Request(django_request)


def test_sliding_window_blocks_after_limit():
    throttle = TwoPerMinuteThrottle()
    request = make_request()

    assert throttle.allow_request(request, None) is True
    assert throttle.allow_request(request, None) is True
    assert throttle.allow_request(request, None) is False
    assert throttle.wait() > 0


def test_key_is_scoped_per_player():
    request = make_request()

    assert TwoPerMinuteThrottle().get_cache_key(request, None) == "throttle_test_scope_player-1"
