from apps.core.throttle import BaseCacheThrottle


class RequestListRateThrottle(BaseCacheThrottle):
    scope = "request_list"


class RequestCreateRateThrottle(BaseCacheThrottle):
    """Limits how fast a player can post new requests"""

    scope = "request_create"


class RequestUpdateRateThrottle(BaseCacheThrottle):
    scope = "request_update"


class OfferCreateRateThrottle(BaseCacheThrottle):
    """Limits how fast a player can make offers"""

    scope = "offer_create"


class OfferTransitionRateThrottle(BaseCacheThrottle):
    scope = "offer_transition"


class NegotiationRateThrottle(BaseCacheThrottle):
    scope = "negotiation"


class NegotiationMessageRateThrottle(BaseCacheThrottle):
    """Limits chat and counter-offer spam inside a negotiation"""

    scope = "negotiation_message"
