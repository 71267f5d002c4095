"""Claiming guest pickups and purchases by contact email or phone."""

from unittest.mock import patch

import pytest
from protean import current_domain

from logistics.audit.writer import history
from logistics.guest.attachment import attach_guest_records
from logistics.pickup.pickup import PickupRequest
from logistics.purchase.purchase import PurchaseRequest
from logistics.shared.actor import Actor


@pytest.fixture()
def system():
    return Actor.system()


def _guest_pickup(make_pickup, system, **contact):
    fields = {"contact_email": None, **contact}
    return make_pickup(system, client_id=None, is_guest=True, **fields)["id"]


class TestAttachGuestRecords:
    def test_email_match_claims_pickups_and_purchases(self, system, client_actor, make_pickup, make_purchase):
        pickup_id = _guest_pickup(make_pickup, system, contact_email="Buyer@Acme.test")
        purchase_id = make_purchase(system, client_id=None, is_guest=True)["id"]

        report = attach_guest_records(client_actor)

        assert {(item["family"], item["entity_id"]) for item in report.attached} == {
            ("PICKUP", pickup_id),
            ("PURCHASE", purchase_id),
        }
        pickup = current_domain.repository_for(PickupRequest).get(pickup_id)
        assert pickup.client_id == "client-acme"
        assert pickup.user_id == "user-client-1"
        purchase = current_domain.repository_for(PurchaseRequest).get(purchase_id)
        assert purchase.client_id == "client-acme"

    def test_attachment_is_logged_with_the_match(self, system, client_actor, make_pickup):
        pickup_id = _guest_pickup(make_pickup, system, contact_email="buyer@acme.test")
        attach_guest_records(client_actor)

        last = history(pickup_id)[-1]
        assert last.event_type == "ATTACHED_TO_ACCOUNT"
        assert last.new_status is None
        assert last.metadata == {
            "user_id": "user-client-1",
            "matched_by": "email",
            "client_id": "client-acme",
            "email": "buyer@acme.test",
        }

    def test_every_matching_record_is_claimed_across_pages(self, system, client_actor, make_pickup):
        pickup_ids = {_guest_pickup(make_pickup, system, contact_email="buyer@acme.test") for _ in range(5)}

        with patch("logistics.utils.paging.PAGE_SIZE", 2):
            report = attach_guest_records(client_actor)

        assert {item["entity_id"] for item in report.attached} == pickup_ids
        assert report.failed == []

    def test_phone_match(self, system, client_actor, make_pickup):
        pickup_id = _guest_pickup(make_pickup, system, contact_phone="+221700000001")
        [attached] = attach_guest_records(client_actor).attached
        assert attached["entity_id"] == pickup_id
        assert attached["matched_by"] == "phone"

    def test_email_takes_precedence_over_phone(self, system, client_actor, make_pickup):
        _guest_pickup(make_pickup, system, contact_email="buyer@acme.test", contact_phone="+221700000001")
        [attached] = attach_guest_records(client_actor).attached
        assert attached["matched_by"] == "email"

    def test_owned_records_are_left_alone(self, ops, client_actor, make_pickup):
        pickup_id = make_pickup(ops, client_id="client-globex", contact_email="buyer@acme.test")["id"]
        assert attach_guest_records(client_actor).attached == []
        assert current_domain.repository_for(PickupRequest).get(pickup_id).client_id == "client-globex"

    def test_second_run_attaches_nothing(self, system, client_actor, make_pickup):
        _guest_pickup(make_pickup, system, contact_email="buyer@acme.test")
        attach_guest_records(client_actor)
        report = attach_guest_records(client_actor)
        assert report.attached == []
        assert report.failed == []

    def test_unrelated_contacts_do_not_match(self, system, client_actor, make_pickup):
        _guest_pickup(make_pickup, system, contact_email="someone@else.test")
        assert attach_guest_records(client_actor).attached == []

    def test_actor_without_contact_gets_empty_report(self, system, make_pickup):
        _guest_pickup(make_pickup, system, contact_email="buyer@acme.test")
        actor = Actor.build("user-client-3", "CLIENT", client_id="client-acme")
        assert attach_guest_records(actor).to_dict() == {"attached": [], "failed": []}

    def test_staff_cannot_claim(self, system, make_pickup):
        _guest_pickup(make_pickup, system, contact_email="ops@freightline.test")
        ops = Actor.build("user-ops-9", "OPERATIONS_MANAGER", email="ops@freightline.test")
        assert attach_guest_records(ops).attached == []
