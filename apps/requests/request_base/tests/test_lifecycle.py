from decimal import Decimal

import pytest
from django.db import transaction

from apps.core.exceptions import (
    ErrorKind,
    Forbidden,
    InvalidTransition,
    NotAgreed,
    RequestNotOpen,
)
from apps.core.utils.currency import Currency
from apps.requests.request_base.lifecycle import RequestLifecycle
from apps.requests.request_base.models import Request, RequestStatus
from apps.requests.request_base.services import RequestService
from apps.requests.request_negotiation.models import MessageType, RequestNegotiation
from apps.requests.request_negotiation.services import NegotiationService
from apps.requests.request_offer.models import OfferStatus, RequestOffer
from apps.requests.request_offer.services import OfferService


def agree(negotiation, requester, offerer):
    for sender in (requester, offerer):
        NegotiationService.post_negotiation_message(
            negotiation.id, sender, MessageType.ACCEPT, "deal"
        ).unwrap()


@pytest.mark.django_db
class TestOpenNegotiation:
    def test_seeds_terms_from_offer(self, open_request, offer):
        negotiation = RequestLifecycle.open_negotiation(open_request, offer)

        assert negotiation.current_price == Decimal("12")
        assert negotiation.current_currency == Currency.EMERALDS
        assert negotiation.opening_price == Decimal("12")
        assert Request.objects.get(pk=open_request.pk).status == RequestStatus.IN_NEGOTIATION

    def test_seeds_terms_from_suggested_price_when_offer_has_none(
        self, open_request, offerer, make_offer
    ):
        offer = make_offer(open_request, offerer, price=None)

        negotiation = RequestLifecycle.open_negotiation(open_request, offer)

        assert negotiation.current_price == Decimal("10")

    def test_stale_request_status_is_refused(self, open_request, offer):
        # another writer moved the request on after we read it
        Request.objects.filter(pk=open_request.pk).update(status=RequestStatus.CANCELLED)

        with pytest.raises(RequestNotOpen):
            RequestLifecycle.open_negotiation(open_request, offer)
        assert not RequestNegotiation.objects.filter(request=open_request).exists()


@pytest.mark.django_db
class TestExclusiveAcceptance:
    def test_second_acceptance_fails(self, open_request, requester, offerer, second_offerer, make_offer):
        first = make_offer(open_request, offerer)
        second = make_offer(open_request, second_offerer)

        assert OfferService.transition_offer(first.id, requester, OfferStatus.ACCEPTED).success
        result = OfferService.transition_offer(second.id, requester, OfferStatus.ACCEPTED)

        assert result.error == ErrorKind.REQUEST_NOT_OPEN
        assert RequestOffer.objects.filter(status=OfferStatus.ACCEPTED).count() == 1
        assert RequestNegotiation.objects.count() == 1

    def test_lost_race_rolls_back_everything(self, open_request, requester, offerer, second_offerer, make_offer):
        first = make_offer(open_request, offerer)
        sibling = make_offer(open_request, second_offerer)

        # the request left OPEN between the read and the conditional update
        stale = Request.objects.get(pk=open_request.pk)
        Request.objects.filter(pk=open_request.pk).update(status=RequestStatus.IN_NEGOTIATION)
        with pytest.raises(RequestNotOpen):
            with transaction.atomic():
                RequestOffer.objects.filter(pk=first.pk).update(status=OfferStatus.ACCEPTED)
                RequestLifecycle.open_negotiation(stale, first)

        first.refresh_from_db()
        sibling.refresh_from_db()
        assert first.status == OfferStatus.PENDING
        assert sibling.status == OfferStatus.PENDING
        assert not RequestNegotiation.objects.exists()


@pytest.mark.django_db
class TestComplete:
    def test_requester_cannot_complete(self, negotiation, requester, offerer):
        agree(negotiation, requester, offerer)

        with pytest.raises(Forbidden):
            RequestLifecycle.complete(negotiation.request_id, requester)

    def test_stranger_cannot_complete(self, negotiation, stranger):
        with pytest.raises(Forbidden):
            RequestLifecycle.complete(negotiation.request_id, stranger)

    def test_not_agreed_yet(self, negotiation, offerer):
        with pytest.raises(NotAgreed):
            RequestLifecycle.complete(negotiation.request_id, offerer)

    def test_offerer_completes_once(self, negotiation, requester, offerer):
        agree(negotiation, requester, offerer)

        request = RequestLifecycle.complete(negotiation.request_id, offerer)

        assert request.status == RequestStatus.COMPLETED
        assert request.completed_at is not None
        negotiation.refresh_from_db()
        assert negotiation.completed_at == request.completed_at

        with pytest.raises(InvalidTransition):
            RequestLifecycle.complete(negotiation.request_id, offerer)

    def test_service_wraps_errors(self, negotiation, offerer):
        result = RequestService.complete_request(negotiation.request_id, offerer)

        assert not result.success
        assert result.error == ErrorKind.NOT_AGREED


@pytest.mark.django_db
class TestCancel:
    def test_requester_cancels_open_request(self, open_request, requester):
        request = RequestLifecycle.cancel(open_request, requester)

        assert request.status == RequestStatus.CANCELLED

    def test_only_requester(self, open_request, stranger):
        with pytest.raises(Forbidden):
            RequestLifecycle.cancel(open_request, stranger)

    def test_only_open_requests(self, negotiation, requester):
        request = Request.objects.get(pk=negotiation.request_id)

        with pytest.raises(InvalidTransition):
            RequestLifecycle.cancel(request, requester)
