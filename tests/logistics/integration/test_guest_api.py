from protean import current_domain

from logistics.guest.storage import MemoryStorage
from logistics.guest.store import GuestQuoteStore
from logistics.pickup.pickup import PickupRequest
from logistics.quote.quote import Quote

FORM = {
    "originCountry": "Senegal",
    "originCity": "Dakar",
    "destinationCountry": "Mali",
    "destinationCity": "Bamako",
    "weight": 80.0,
    "transportMode": ["ROAD"],
}
RESULT = {"estimatedCost": 95000.0, "currency": "XOF", "estimatedDeliveryDays": 3}


def _candidates(count=1):
    store = GuestQuoteStore(MemoryStorage(), ttl_days=7, limit=20)
    for _ in range(count):
        store.add(FORM, RESULT)
    return [quote.model_dump(mode="json", by_alias=True) for quote in store.load().quotes]


class TestReconcileEndpoint:
    def test_attach_guest_quotes(self, client, headers):
        candidates = _candidates(2)

        response = client.post("/guest-quotes/reconcile", json={"candidates": candidates}, headers=headers["client"])

        assert response.status_code == 200
        body = response.json()
        assert len(body["attached"]) == 2
        assert body["skipped"] == []
        assert sorted(body["settled_ids"]) == sorted(candidate["id"] for candidate in candidates)
        quote = current_domain.repository_for(Quote).get(body["attached"][0]["quote_id"])
        assert quote.client_id == "client-acme"

    def test_replay_is_settled_without_a_second_quote(self, client, headers):
        candidates = _candidates()
        client.post("/guest-quotes/reconcile", json={"candidates": candidates}, headers=headers["client"])

        response = client.post("/guest-quotes/reconcile", json={"candidates": candidates}, headers=headers["client"])

        body = response.json()
        assert body["attached"] == []
        assert body["skipped"][0]["reason_code"] == "DUPLICATE"
        assert body["settled_ids"] == [candidates[0]["id"]]
        assert len(current_domain.repository_for(Quote)._dao.query.all().items) == 1

    def test_staff_keep_their_candidates(self, client, headers):
        candidates = _candidates()

        response = client.post("/guest-quotes/reconcile", json={"candidates": candidates}, headers=headers["ops"])

        body = response.json()
        assert body["skipped"][0]["reason_code"] == "FORBIDDEN"
        assert body["skipped"][0]["retryable"] is True
        assert body["settled_ids"] == []

    def test_requires_identity(self, client):
        assert client.post("/guest-quotes/reconcile", json={"candidates": []}).status_code == 401


class TestAttachGuestRecordsEndpoint:
    def test_claims_matching_guest_pickup(self, client, headers):
        created = client.post(
            "/pickups/guest",
            json={
                "contact_email": "Buyer@Acme.test",
                "pickup_address": "Plateau",
                "pickup_city": "Dakar",
                "pickup_country": "Senegal",
            },
        ).json()

        response = client.post("/guest-records/attach", headers=headers["client"])

        assert response.status_code == 200
        assert response.json() == {
            "attached": [{"family": "PICKUP", "entity_id": created["id"], "matched_by": "email"}],
            "failed": [],
        }
        assert current_domain.repository_for(PickupRequest).get(created["id"]).client_id == "client-acme"
