"""Scoped listing and tracking-number existence checks against the repositories."""

from logistics.access.resolver import list_scoped
from logistics.lifecycle.service import request_transition
from logistics.lifecycle.statuses import EntityFamily
from logistics.pickup.pickup import PickupRequest
from logistics.shared.actor import Actor
from logistics.tracking.projection import tracking_number_exists


class TestListScoped:
    def test_tenant_rows_only(self, ops, client_actor, make_pickup):
        own = make_pickup(ops)["id"]
        make_pickup(ops, client_id="client-globex")

        assert [str(row.id) for row in list_scoped(client_actor, PickupRequest)] == [own]

    def test_staff_see_every_tenant(self, ops, make_pickup):
        make_pickup(ops)
        make_pickup(ops, client_id="client-globex")

        assert len(list_scoped(ops, PickupRequest)) == 2

    def test_filters_narrow_the_scope(self, ops, make_pickup):
        make_pickup(ops)
        cancelled = make_pickup(ops)["id"]
        request_transition(ops, EntityFamily.PICKUP, cancelled, "CANCELED", notes="Duplicate")

        rows = list_scoped(ops, PickupRequest, status="CANCELED")
        assert [str(row.id) for row in rows] == [cancelled]

    def test_tenant_actor_without_tenant_sees_nothing(self, ops, make_pickup):
        make_pickup(ops)
        orphan = Actor.build("user-client-9", "CLIENT")

        assert list_scoped(orphan, PickupRequest) == []

    def test_anonymous_sees_nothing(self, ops, make_pickup):
        make_pickup(ops)
        assert list_scoped(None, PickupRequest) == []


class TestTrackingNumberExists:
    def test_public_shipment(self, ops, make_shipment):
        shipment = make_shipment(ops)
        assert request_transition(ops, EntityFamily.SHIPMENT, shipment["id"], "PENDING_APPROVAL").ok
        assert tracking_number_exists(shipment["number"])

    def test_draft_shipment_is_hidden(self, ops, make_shipment):
        assert not tracking_number_exists(make_shipment(ops)["number"])

    def test_malformed_and_unknown(self):
        assert not tracking_number_exists("SHP-1")
        assert not tracking_number_exists("SHP-20260101-00042")
        assert not tracking_number_exists(None)
