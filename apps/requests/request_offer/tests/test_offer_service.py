from contextlib import ExitStack, contextmanager
from decimal import Decimal
from unittest.mock import patch

import pytest

from apps.core.exceptions import ErrorKind
from apps.core.utils.currency import Currency
from apps.requests.request_base.models import Request, RequestStatus
from apps.requests.request_base.services import RequestService
from apps.requests.request_negotiation.models import MessageType, NegotiationStatus
from apps.requests.request_negotiation.services import NegotiationService
from apps.requests.request_offer.models import OfferStatus, RequestOffer
from apps.requests.request_offer.services import OfferService


@pytest.mark.django_db
class TestCreateOffer:
    def test_create(self, open_request, offerer):
        result = OfferService.create_offer(
            open_request.id,
            offerer,
            offered_price="3",
            currency=Currency.EMERALD_BLOCKS,
            message="I can do it",
        )

        assert result.success
        offer = result.data
        assert offer.status == OfferStatus.PENDING
        assert offer.offered_price == Decimal("3")
        assert offer.currency == Currency.EMERALD_BLOCKS

    def test_price_is_optional(self, open_request, offerer):
        offer = OfferService.create_offer(open_request.id, offerer).unwrap()

        assert offer.offered_price is None
        assert offer.message == ""

    def test_same_offerer_may_offer_twice(self, open_request, offerer, make_offer):
        make_offer(open_request, offerer, price=Decimal("5"))
        make_offer(open_request, offerer, price=Decimal("6"))

        assert RequestOffer.objects.filter(offerer=offerer, status=OfferStatus.PENDING).count() == 2

    def test_self_offer(self, open_request, requester):
        result = OfferService.create_offer(open_request.id, requester, offered_price="1")

        assert result.error == ErrorKind.SELF_OFFER

    def test_request_must_be_open(self, negotiation, second_offerer):
        result = OfferService.create_offer(negotiation.request_id, second_offerer, offered_price="1")

        assert result.error == ErrorKind.REQUEST_NOT_OPEN

    def test_unknown_request(self, offerer):
        result = OfferService.create_offer("3f1d9a52-7a7e-4e71-8c55-2b7f1b2b6a10", offerer)

        assert result.error == ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("price", ["-0.01", "1000000"])
    def test_price_range(self, open_request, offerer, price):
        result = OfferService.create_offer(open_request.id, offerer, offered_price=price)

        assert result.error == ErrorKind.INVALID_PRICE

    def test_message_length(self, open_request, offerer):
        result = OfferService.create_offer(open_request.id, offerer, message="m" * 501)

        assert result.error == ErrorKind.INVALID_OFFER

    def test_unknown_currency(self, open_request, offerer):
        result = OfferService.create_offer(open_request.id, offerer, offered_price="1", currency="gold")

        assert result.error == ErrorKind.INVALID_CURRENCY


@pytest.mark.django_db
class TestListOffers:
    def test_newest_first(self, open_request, offerer, second_offerer, make_offer):
        older = make_offer(open_request, offerer)
        newer = make_offer(open_request, second_offerer)
        RequestOffer.objects.filter(pk=older.pk).update(created_at=newer.created_at.replace(year=2020))

        offers = OfferService.list_offers(open_request.id).unwrap()

        assert [o.pk for o in offers] == [newer.pk, older.pk]


@pytest.mark.django_db
class TestTransitionOffer:
    def test_accept_rejects_siblings_and_opens_negotiation(
        self, open_request, requester, offerer, second_offerer, make_offer
    ):
        chosen = make_offer(open_request, offerer)
        sibling = make_offer(open_request, second_offerer)
        withdrawn = make_offer(open_request, second_offerer)
        OfferService.transition_offer(withdrawn.id, second_offerer, OfferStatus.WITHDRAWN).unwrap()

        accepted = OfferService.transition_offer(chosen.id, requester, OfferStatus.ACCEPTED).unwrap()

        sibling.refresh_from_db()
        withdrawn.refresh_from_db()
        open_request.refresh_from_db()
        assert accepted.status == OfferStatus.ACCEPTED
        assert sibling.status == OfferStatus.REJECTED
        assert withdrawn.status == OfferStatus.WITHDRAWN
        assert open_request.status == RequestStatus.IN_NEGOTIATION
        assert accepted.negotiation.status == NegotiationStatus.IN_PROGRESS
        assert accepted.negotiation.message_count == 0
        assert not accepted.negotiation.messages.exists()

    def test_only_requester_accepts(self, offer, offerer):
        result = OfferService.transition_offer(offer.id, offerer, OfferStatus.ACCEPTED)

        assert result.error == ErrorKind.FORBIDDEN

    def test_reject(self, offer, requester):
        rejected = OfferService.transition_offer(offer.id, requester, OfferStatus.REJECTED).unwrap()

        assert rejected.status == OfferStatus.REJECTED

    def test_only_offerer_withdraws(self, offer, requester):
        result = OfferService.transition_offer(offer.id, requester, OfferStatus.WITHDRAWN)

        assert result.error == ErrorKind.FORBIDDEN

    def test_offers_are_immutable_once_decided(self, offer, requester, offerer):
        OfferService.transition_offer(offer.id, offerer, OfferStatus.WITHDRAWN).unwrap()

        result = OfferService.transition_offer(offer.id, requester, OfferStatus.REJECTED)

        assert result.error == ErrorKind.INVALID_TRANSITION

    def test_pending_is_not_a_target(self, offer, requester):
        result = OfferService.transition_offer(offer.id, requester, OfferStatus.PENDING)

        assert result.error == ErrorKind.INVALID_TRANSITION

    def test_cancelled_request_leaves_offers_pending(self, open_request, requester, offer):
        RequestService.cancel_request(open_request.id, requester).unwrap()

        offer.refresh_from_db()
        assert offer.status == OfferStatus.PENDING
        result = OfferService.transition_offer(offer.id, requester, OfferStatus.ACCEPTED)
        assert result.error == ErrorKind.REQUEST_NOT_OPEN


@pytest.mark.django_db
class TestAcceptedOffers:
    def test_lists_accepted_offers_with_negotiation(self, negotiation, offerer, offer, requester):
        NegotiationService.post_negotiation_message(
            negotiation.id, requester, MessageType.MESSAGE, "welcome"
        ).unwrap()

        offers = OfferService.list_accepted_offers(offerer).unwrap()

        assert [o.pk for o in offers] == [offer.pk]
        assert offers[0].negotiation.pk == negotiation.pk
        assert offers[0].last_activity is not None

    def test_other_players_see_nothing(self, negotiation, second_offerer):
        assert OfferService.list_accepted_offers(second_offerer).unwrap() == []


@contextmanager
def recorded_row_locks():
    """Record which tables are read with select_for_update, in call order."""
    taken = []
    with ExitStack() as stack:
        for name, manager in (("request", Request.objects), ("offer", RequestOffer.objects)):
            original = manager.select_for_update

            def select_for_update(*args, _name=name, _original=original, **kwargs):
                taken.append(_name)
                return _original(*args, **kwargs)

            stack.enter_context(patch.object(manager, "select_for_update", side_effect=select_for_update))
        yield taken


@pytest.mark.django_db
class TestRowLocking:
    def test_accept_locks_request_before_offer(self, offer, requester):
        with recorded_row_locks() as taken:
            OfferService.transition_offer(offer.id, requester, OfferStatus.ACCEPTED).unwrap()

        assert taken == ["request", "offer"]

    def test_withdraw_locks_request_before_offer(self, offer, offerer):
        with recorded_row_locks() as taken:
            OfferService.transition_offer(offer.id, offerer, OfferStatus.WITHDRAWN).unwrap()

        assert taken == ["request", "offer"]

    def test_create_offer_locks_the_request(self, open_request, offerer):
        with recorded_row_locks() as taken:
            OfferService.create_offer(open_request.id, offerer, offered_price="4").unwrap()

        assert taken == ["request"]

    def test_offer_after_acceptance_leaves_no_pending_offers(
        self, open_request, requester, offerer, second_offerer, make_offer
    ):
        chosen = make_offer(open_request, offerer)
        OfferService.transition_offer(chosen.id, requester, OfferStatus.ACCEPTED).unwrap()

        late = OfferService.create_offer(open_request.id, second_offerer, offered_price="1")

        assert late.error == ErrorKind.REQUEST_NOT_OPEN
        assert not RequestOffer.objects.filter(
            request=open_request, status=OfferStatus.PENDING
        ).exists()
