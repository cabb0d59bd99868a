import logging

from django.core.management.base import BaseCommand

from apps.requests.request_negotiation.models import NegotiationStatus, RequestNegotiation
from apps.requests.request_negotiation.services import resolve_negotiation, stored_state

logger = logging.getLogger("request_lifecycle")


class Command(BaseCommand):
    help = (
        "Recompute the terms of negotiations from their message logs and report "
        "any that disagree with the stored terms."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--all",
            action="store_true",
            help="Check finished negotiations too, not only those in progress.",
        )

    def handle(self, *args, **options):
        negotiations = RequestNegotiation.objects.select_related(
            "request", "accepted_offer", "pivot_message"
        )
        if not options["all"]:
            negotiations = negotiations.filter(status=NegotiationStatus.IN_PROGRESS)

        checked = mismatched = 0
        for negotiation in negotiations.iterator():
            checked += 1
            if resolve_negotiation(negotiation) != stored_state(negotiation):
                mismatched += 1
                logger.error(f"Negotiation {negotiation.pk} terms disagree with its log")
                self.stdout.write(self.style.WARNING(f"Mismatch: {negotiation.pk}"))

        self.stdout.write(f"Checked {checked} negotiations, {mismatched} mismatched.")
