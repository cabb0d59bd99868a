from decimal import Decimal
from functools import reduce

import pytest

from apps.core.utils.currency import Currency
from apps.requests.request_negotiation.payloads import Accept, ChatMessage, CounterOffer, Reject
from apps.requests.request_negotiation.resolver import (
    NO_TERMS,
    LogEntry,
    NegotiationLogError,
    Participants,
    Terms,
    apply_message,
    fallback_terms,
    initial_state,
    resolve,
    terms_in,
)

REQUESTER = 1
OFFERER = 2
PARTIES = Participants(requester_id=REQUESTER, offerer_id=OFFERER)
FALLBACK = Terms(price=Decimal("12"), currency=Currency.EMERALDS)


def log(*entries):
    return [
        LogEntry(sender_id=sender, payload=payload, sequence=index)
        for index, (sender, payload) in enumerate(entries, start=1)
    ]


def counter(price, currency=Currency.EMERALDS):
    return CounterOffer(price=Decimal(price), currency=currency)


def fold(messages, fallback=FALLBACK):
    return reduce(
        lambda state, message: apply_message(state, message, PARTIES),
        messages,
        initial_state(fallback),
    )


class TestResolve:
    def test_counter_offer_then_both_accept(self):
        messages = log(
            (OFFERER, counter("9.5")),
            (REQUESTER, Accept()),
            (OFFERER, Accept()),
        )

        state = resolve(messages, PARTIES, FALLBACK)

        assert state.terms == Terms(price=Decimal("9.5"), currency=Currency.EMERALDS)
        assert state.pivot_sequence == 1
        assert state.agreed is True
        assert fold(messages) == state

    def test_empty_log_uses_fallback_terms(self):
        state = resolve([], PARTIES, FALLBACK)

        assert state.terms == FALLBACK
        assert state.requester_accepted is False
        assert state.offerer_accepted is False
        assert state.pivot_sequence is None
        assert state.agreed is False

    def test_accepts_without_counter_offer_all_count(self):
        state = resolve(
            log((OFFERER, ChatMessage()), (REQUESTER, Accept()), (OFFERER, Accept())),
            PARTIES,
            FALLBACK,
        )

        assert state.terms == FALLBACK
        assert state.agreed is True

    def test_latest_counter_offer_is_the_pivot(self):
        state = resolve(
            log((REQUESTER, counter("15")), (OFFERER, counter("14"))),
            PARTIES,
            FALLBACK,
        )

        assert state.terms == Terms(price=Decimal("14"), currency=Currency.EMERALDS)
        assert state.pivot_sequence == 2

    def test_counter_offer_voids_earlier_acceptances(self):
        # A accepts 15, then B counters with 20: A's acceptance no longer counts
        state = resolve(
            log(
                (OFFERER, counter("15")),
                (REQUESTER, Accept()),
                (OFFERER, counter("20")),
                (OFFERER, Accept()),
            ),
            PARTIES,
            FALLBACK,
        )

        assert state.terms.price == Decimal("20")
        assert state.requester_accepted is False
        assert state.offerer_accepted is True
        assert state.agreed is False

    def test_no_stale_agreement(self):
        # R accepts 12, O counters 13, O accepts: not agreed at 12 or 13
        state = resolve(
            log((REQUESTER, Accept()), (OFFERER, counter("13")), (OFFERER, Accept())),
            PARTIES,
            FALLBACK,
        )

        assert state.agreed is False
        assert state.terms.price == Decimal("13")

    def test_reject_and_chat_do_not_change_terms(self):
        state = resolve(
            log((REQUESTER, counter("9")), (OFFERER, ChatMessage()), (REQUESTER, Reject())),
            PARTIES,
            FALLBACK,
        )

        assert state.terms.price == Decimal("9")
        assert state.requester_accepted is False
        assert state.offerer_accepted is False

    def test_unknown_sender_aborts(self):
        with pytest.raises(NegotiationLogError):
            resolve(log((99, ChatMessage())), PARTIES, FALLBACK)

    def test_participants_must_differ(self):
        with pytest.raises(NegotiationLogError):
            Participants(requester_id=1, offerer_id=1)


class TestIncrementalFold:
    @pytest.mark.parametrize(
        "entries",
        [
            [],
            [(OFFERER, Accept())],
            [(REQUESTER, Accept()), (OFFERER, Accept())],
            [(REQUESTER, counter("15")), (OFFERER, Accept()), (REQUESTER, counter("16"))],
            [
                (OFFERER, counter("2", Currency.EMERALD_BLOCKS)),
                (REQUESTER, ChatMessage()),
                (REQUESTER, Accept()),
                (OFFERER, Accept()),
            ],
            [(REQUESTER, Accept()), (OFFERER, counter("13")), (OFFERER, Accept()), (REQUESTER, Reject())],
        ],
    )
    def test_fold_matches_full_resolution(self, entries):
        messages = log(*entries)

        assert fold(messages) == resolve(messages, PARTIES, FALLBACK)

    def test_fold_rejects_unknown_sender(self):
        with pytest.raises(NegotiationLogError):
            apply_message(initial_state(FALLBACK), LogEntry(7, ChatMessage(), 1), PARTIES)


class TestTerms:
    def test_fallback_prefers_offer_price(self):
        terms = fallback_terms(Decimal("5"), Currency.EMERALD_BLOCKS, Decimal("40"), Currency.EMERALDS)

        assert terms == Terms(price=Decimal("5"), currency=Currency.EMERALD_BLOCKS)

    def test_fallback_uses_suggested_price_without_offer_price(self):
        terms = fallback_terms(None, Currency.EMERALDS, Decimal("40"), Currency.EMERALDS)

        assert terms == Terms(price=Decimal("40"), currency=Currency.EMERALDS)

    def test_fallback_without_any_price(self):
        assert fallback_terms(None, Currency.EMERALDS, None, Currency.EMERALDS) == NO_TERMS

    def test_terms_in_converts_for_display(self):
        state = initial_state(Terms(price=Decimal("2"), currency=Currency.EMERALD_BLOCKS))

        converted = terms_in(state, Currency.EMERALDS)

        assert converted == Terms(price=Decimal("18"), currency=Currency.EMERALDS)
        assert state.terms.currency == Currency.EMERALD_BLOCKS

    def test_terms_in_leaves_empty_terms_alone(self):
        assert terms_in(initial_state(), Currency.EMERALDS) == NO_TERMS
