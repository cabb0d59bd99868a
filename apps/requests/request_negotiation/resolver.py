"""
Acceptance resolution for negotiation logs.

Given the ordered messages of a negotiation, work out which terms are on the
table and which party has accepted them. Only acceptances sent after the most
recent counter-offer (the pivot) count; a new counter-offer therefore voids
every earlier acceptance.

``resolve`` scans a complete log. ``apply_message`` folds a single message
into an existing state and is what the services use at write time. Folding a
whole log with ``apply_message`` gives the same state as ``resolve``.

Nothing here touches the database.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Optional

from apps.core.utils.currency import convert, validate_currency
from apps.requests.request_negotiation.payloads import Accept, CounterOffer


class NegotiationLogError(AssertionError):
    """The log contains a message no participant could have sent."""


@dataclass(frozen=True)
class Participants:
    requester_id: object
    offerer_id: object

    def __post_init__(self):
        if self.requester_id == self.offerer_id:
            raise NegotiationLogError("Requester and offerer must differ")

    def role_of(self, sender_id) -> str:
        if sender_id == self.requester_id:
            return "requester"
        if sender_id == self.offerer_id:
            return "offerer"
        raise NegotiationLogError(f"Sender {sender_id} is not part of this negotiation")


@dataclass(frozen=True)
class Terms:
    price: Optional[Decimal] = None
    currency: Optional[str] = None

    @property
    def is_empty(self):
        return self.price is None

    def in_currency(self, currency) -> "Terms":
        """Same value expressed in `currency`, for display."""
        if self.price is None or self.currency is None:
            return self
        return Terms(
            price=convert(self.price, self.currency, currency),
            currency=validate_currency(currency),
        )


NO_TERMS = Terms()


@dataclass(frozen=True)
class AcceptanceState:
    terms: Terms = NO_TERMS
    requester_accepted: bool = False
    offerer_accepted: bool = False
    # sequence of the latest counter-offer, None while the fallback applies
    pivot_sequence: Optional[int] = None

    @property
    def agreed(self) -> bool:
        return self.requester_accepted and self.offerer_accepted

    def accepted_by(self, role: str) -> bool:
        return self.requester_accepted if role == "requester" else self.offerer_accepted


@dataclass(frozen=True)
class LogEntry:
    """Minimal view of a stored message; model instances fit this shape too."""

    sender_id: object
    payload: object
    sequence: int


def fallback_terms(offer_price=None, offer_currency=None, suggested_price=None, suggested_currency=None) -> Terms:
    """
    Terms before any counter-offer: the accepted offer's price when it has
    one, otherwise the request's suggested price.
    """
    if offer_price is not None:
        return Terms(price=offer_price, currency=offer_currency)
    if suggested_price is not None:
        return Terms(price=suggested_price, currency=suggested_currency)
    return NO_TERMS


def initial_state(fallback: Terms = NO_TERMS) -> AcceptanceState:
    return AcceptanceState(terms=fallback)


def apply_message(state: AcceptanceState, message, participants: Participants) -> AcceptanceState:
    role = participants.role_of(message.sender_id)
    payload = message.payload

    if isinstance(payload, CounterOffer):
        return AcceptanceState(
            terms=Terms(price=payload.price, currency=payload.currency),
            requester_accepted=False,
            offerer_accepted=False,
            pivot_sequence=message.sequence,
        )
    if isinstance(payload, Accept):
        if role == "requester":
            return replace(state, requester_accepted=True)
        return replace(state, offerer_accepted=True)
    return state


def resolve(messages: Iterable, participants: Participants, fallback: Terms = NO_TERMS) -> AcceptanceState:
    """Resolve the acceptance state of a complete, ordered log."""
    log = list(messages)
    for message in log:
        participants.role_of(message.sender_id)

    pivot_index = None
    for index in range(len(log) - 1, -1, -1):
        if isinstance(log[index].payload, CounterOffer):
            pivot_index = index
            break

    if pivot_index is None:
        terms, relevant, pivot_sequence = fallback, log, None
    else:
        pivot = log[pivot_index]
        terms = Terms(price=pivot.payload.price, currency=pivot.payload.currency)
        relevant = log[pivot_index + 1:]
        pivot_sequence = pivot.sequence

    accepting = {
        participants.role_of(m.sender_id)
        for m in relevant
        if isinstance(m.payload, Accept)
    }
    return AcceptanceState(
        terms=terms,
        requester_accepted="requester" in accepting,
        offerer_accepted="offerer" in accepting,
        pivot_sequence=pivot_sequence,
    )


def terms_in(state: AcceptanceState, currency) -> Terms:
    return state.terms.in_currency(currency)
