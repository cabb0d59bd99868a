import pytest
from django.urls import reverse
from rest_framework import status

from apps.core.exceptions import ErrorKind
from apps.requests.request_negotiation.models import MessageType, NegotiationStatus


@pytest.mark.django_db
class TestNegotiationEndpoints:
    def test_participant_reads_negotiation(self, client_for, negotiation, requester, offerer):
        response = client_for(offerer).get(reverse("negotiation-detail", args=[negotiation.id]))

        assert response.status_code == status.HTTP_200_OK
        data = response.data["data"]
        assert data["status"] == NegotiationStatus.IN_PROGRESS
        assert data["requester"]["mc_username"] == requester.mc_username
        assert data["offerer"]["mc_username"] == offerer.mc_username
        assert data["can_respond"] is True
        assert data["current_user_accepted"] is False
        assert data["messages"] == []

    def test_outsider_is_forbidden(self, client_for, negotiation, stranger):
        response = client_for(stranger).get(reverse("negotiation-detail", args=[negotiation.id]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_lookup_through_request(self, client_for, negotiation, requester):
        response = client_for(requester).get(
            reverse("request-negotiation", args=[negotiation.request_id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["id"] == str(negotiation.id)

    def test_counter_offer_then_terms(self, client_for, negotiation, requester, offerer):
        url = reverse("negotiation-messages", args=[negotiation.id])
        response = client_for(requester).post(
            url,
            {
                "message_type": MessageType.COUNTER_OFFER,
                "content": "How about two blocks?",
                "price_offer": "2",
                "currency": "emerald_blocks",
            },
            format="json",
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["data"]["formatted_price"] == "2.00 Emerald Blocks"

        client_for(offerer).post(
            url, {"message_type": MessageType.ACCEPT, "content": "Sure"}, format="json"
        )
        detail = client_for(offerer).get(reverse("negotiation-detail", args=[negotiation.id]))

        terms = detail.data["data"]["terms"]
        assert terms["formatted_with_rate"] == "2.00 Emerald Blocks (≈ 18.00 Emeralds)"
        assert terms["in_request_currency"] == "18.00 Emeralds"
        assert terms["offerer_accepted"] is True
        assert terms["requester_accepted"] is False
        assert detail.data["data"]["current_user_accepted"] is True
        assert [m["sequence"] for m in detail.data["data"]["messages"]] == [1, 2]

    def test_invalid_counter_offer(self, client_for, negotiation, requester):
        response = client_for(requester).post(
            reverse("negotiation-messages", args=[negotiation.id]),
            {"message_type": MessageType.COUNTER_OFFER, "content": "free?", "price_offer": "0"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"] == ErrorKind.INVALID_OFFER

    def test_message_after_rejection_conflicts(self, client_for, negotiation, requester, offerer):
        url = reverse("negotiation-messages", args=[negotiation.id])
        client_for(requester).post(
            url, {"message_type": MessageType.REJECT, "content": "No deal"}, format="json"
        )

        response = client_for(offerer).post(
            url, {"message_type": MessageType.MESSAGE, "content": "Wait!"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"] == ErrorKind.NEGOTIATION_CLOSED
