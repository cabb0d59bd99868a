from rest_framework.routers import DefaultRouter

from apps.requests.request_base.views import RequestViewSet
from apps.requests.request_negotiation.views import RequestNegotiationViewSet
from apps.requests.request_offer.views import RequestOfferViewSet

router = DefaultRouter()
router.register(r"requests", RequestViewSet, basename="request")
router.register(r"offers", RequestOfferViewSet, basename="offer")
router.register(r"negotiations", RequestNegotiationViewSet, basename="negotiation")

urlpatterns = router.urls
