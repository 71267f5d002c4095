"""Integration tests for the shipment, pickup and purchase endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain

from logistics.pickup.pickup import PickupRequest
from logistics.purchase.purchase import PurchaseRequest
from logistics.shipment.shipment import Shipment

SHIPMENT = {
    "client_id": "client-acme",
    "origin_city": "Dakar",
    "origin_country": "Senegal",
    "destination_city": "Bamako",
    "destination_country": "Mali",
    "weight": 42.5,
    "package_count": 2,
    "transport_modes": ["ROAD"],
}

PICKUP = {
    "client_id": "client-acme",
    "contact_name": "Awa Diop",
    "contact_email": "awa@example.com",
    "pickup_address": "Zone industrielle, lot 4",
    "pickup_city": "Dakar",
    "pickup_country": "Senegal",
}

PURCHASE = {
    "client_id": "client-acme",
    "contact_email": "buyer@acme.test",
    "product_name": "Solar inverter",
    "quantity": 2,
    "delivery_address": "Rue 10",
    "delivery_city": "Abidjan",
    "delivery_country": "Ivory Coast",
}


def _move(client, path, headers, target, **body):
    response = client.put(f"{path}/status", json={"target_status": target, **body}, headers=headers)
    assert response.status_code == 200, response.json()
    return response


class TestShipmentEndpoints:
    @pytest.fixture()
    def shipment(self, client, headers):
        response = client.post("/shipments", json=SHIPMENT, headers=headers["ops"])
        assert response.status_code == 201
        return response.json()

    def test_create(self, shipment):
        assert shipment["number"].startswith("SHP-")
        assert current_domain.repository_for(Shipment).get(shipment["id"]).status == "DRAFT"

    def test_add_tracking_point(self, client, headers, shipment):
        path = f"/shipments/{shipment['id']}"
        for target in ("PENDING_APPROVAL", "APPROVED", "PICKED_UP"):
            _move(client, path, headers["ops"], target)

        response = client.post(
            f"{path}/tracking-points",
            json={"location": "Dakar port", "latitude": 14.68, "longitude": -17.43},
            headers=headers["ops"],
        )

        assert response.status_code == 201
        assert response.json()["tracking_point_id"]

    def test_clients_cannot_add_tracking_points(self, client, headers, shipment):
        response = client.post(
            f"/shipments/{shipment['id']}/tracking-points", json={"location": "Kayes"}, headers=headers["client"]
        )
        assert response.status_code == 403

    def test_coordinates_are_validated(self, client, headers, shipment):
        response = client.post(
            f"/shipments/{shipment['id']}/tracking-points",
            json={"location": "Nowhere", "latitude": 120.0},
            headers=headers["ops"],
        )
        assert response.status_code == 422

    def test_client_sees_own_history(self, client, headers, shipment):
        response = client.get(f"/shipments/{shipment['id']}/history", headers=headers["client"])
        assert response.status_code == 200
        assert response.json()["events"][0]["event_type"] == "CREATED"


class TestPickupEndpoints:
    @pytest.fixture()
    def pickup_id(self, client, headers):
        response = client.post("/pickups", json=PICKUP, headers=headers["client"])
        assert response.status_code == 201
        return response.json()["id"]

    def test_schedule_then_reschedule(self, client, headers, pickup_id):
        first = (datetime.now(UTC) + timedelta(days=1)).isoformat()
        second = (datetime.now(UTC) + timedelta(days=2)).isoformat()

        response = client.post(
            f"/pickups/{pickup_id}/schedule",
            json={"scheduled_date": first, "time_slot": "MORNING"},
            headers=headers["ops"],
        )
        assert response.status_code == 200

        response = client.put(f"/pickups/{pickup_id}/schedule", json={"scheduled_date": second}, headers=headers["ops"])
        assert response.status_code == 200

        pickup = current_domain.repository_for(PickupRequest).get(pickup_id)
        assert pickup.status == "SCHEDULED"
        assert pickup.scheduled_date.date() == (datetime.now(UTC) + timedelta(days=2)).date()

    def test_client_cannot_schedule(self, client, headers, pickup_id):
        response = client.post(
            f"/pickups/{pickup_id}/schedule",
            json={"scheduled_date": datetime.now(UTC).isoformat()},
            headers=headers["client"],
        )
        assert response.status_code == 403

    def test_assign_driver(self, client, headers, pickup_id):
        response = client.put(
            f"/pickups/{pickup_id}/driver",
            json={"driver_id": "driver-7", "driver_name": "Moussa"},
            headers=headers["ops"],
        )
        assert response.status_code == 200
        assert current_domain.repository_for(PickupRequest).get(pickup_id).driver_id == "driver-7"

    def test_client_cancels_own_request(self, client, headers, pickup_id):
        _move(client, f"/pickups/{pickup_id}", headers["client"], "CANCELED", notes="No longer needed")
        assert current_domain.repository_for(PickupRequest).get(pickup_id).status == "CANCELED"

    def test_other_tenant_cannot_see_it(self, client, headers, pickup_id):
        assert client.get(f"/pickups/{pickup_id}/history", headers=headers["other_client"]).status_code == 404

    def test_guest_request(self, client):
        response = client.post("/pickups/guest", json={**PICKUP, "client_id": "client-globex"})

        assert response.status_code == 201
        pickup = current_domain.repository_for(PickupRequest).get(response.json()["id"])
        assert pickup.client_id is None
        assert pickup.user_id is None

    def test_guest_request_needs_a_contact(self, client):
        body = {**PICKUP, "contact_email": None}
        response = client.post("/pickups/guest", json=body)
        assert response.status_code == 422
        assert response.json()["reason_code"] == "VALIDATION_FAILED"


class TestPurchaseEndpoints:
    @pytest.fixture()
    def purchase_id(self, client, headers):
        response = client.post("/purchases", json=PURCHASE, headers=headers["client"])
        assert response.status_code == 201
        assert response.json()["number"].startswith("PUR-")
        return response.json()["id"]

    def test_costs(self, client, headers, purchase_id):
        response = client.put(
            f"/purchases/{purchase_id}/costs",
            json={"actual_product_cost": 400000.0, "delivery_cost": 35000.0, "service_fee": 15000.0},
            headers=headers["finance"],
        )
        assert response.status_code == 200
        purchase = current_domain.repository_for(PurchaseRequest).get(purchase_id)
        assert purchase.total_cost == 450000.0

    def test_clients_cannot_set_costs(self, client, headers, purchase_id):
        response = client.put(f"/purchases/{purchase_id}/costs", json={"service_fee": 1.0}, headers=headers["client"])
        assert response.status_code == 403

    def test_back_office_moves_it_forward(self, client, headers, purchase_id):
        path = f"/purchases/{purchase_id}"
        _move(client, path, headers["ops"], "IN_PROGRESS")
        _move(client, path, headers["ops"], "DELIVERED")

        body = {"target_status": "CANCELLED", "notes": "Supplier refund"}
        response = client.put(f"{path}/status", json=body, headers=headers["ops"])
        assert response.status_code == 400
        assert response.json()["reason_code"] == "TERMINAL_STATE"

    def test_guest_purchase(self, client):
        response = client.post("/purchases/guest", json={**PURCHASE, "contact_phone": "+2250700000000"})
        assert response.status_code == 201
        assert current_domain.repository_for(PurchaseRequest).get(response.json()["id"]).client_id is None
