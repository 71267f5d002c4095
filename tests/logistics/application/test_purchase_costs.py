from protean import current_domain

from logistics.audit.writer import history
from logistics.lifecycle.service import request_transition, run_entity_command
from logistics.lifecycle.statuses import EntityFamily
from logistics.purchase.costs import UpdatePurchaseCosts
from logistics.purchase.purchase import PurchaseRequest


def _update_costs(actor, purchase_id, **costs):
    command = UpdatePurchaseCosts(purchase_id=purchase_id, **costs, **actor.as_command_fields())
    return run_entity_command(EntityFamily.PURCHASE, purchase_id, command)


class TestPurchaseCosts:
    def test_finance_updates_costs(self, ops, finance, make_purchase):
        purchase_id = make_purchase(ops)["id"]
        result = _update_costs(finance, purchase_id, actual_product_cost=180000.0, delivery_cost=15000.0)
        assert result.ok
        assert result.data == 195000.0

        last = history(purchase_id)[-1]
        assert last.event_type == "COSTS_UPDATED"
        assert last.metadata == {"actual_product_cost": 180000.0, "delivery_cost": 15000.0, "total_cost": 195000.0}

    def test_client_cannot_update_costs(self, client_actor, make_purchase):
        purchase_id = make_purchase(client_actor, client_id=None)["id"]
        assert _update_costs(client_actor, purchase_id, service_fee=1.0).reason_code == "FORBIDDEN"

    def test_costs_frozen_after_delivery(self, ops, make_purchase):
        purchase_id = make_purchase(ops)["id"]
        for target in ("IN_PROGRESS", "DELIVERED"):
            assert request_transition(ops, EntityFamily.PURCHASE, purchase_id, target).ok

        assert _update_costs(ops, purchase_id, service_fee=5000.0).reason_code == "VALIDATION_FAILED"
        stored = current_domain.repository_for(PurchaseRequest).get(purchase_id)
        assert stored.delivered_at is not None
        assert stored.service_fee is None


class TestPurchaseLifecycle:
    def test_client_can_cancel_a_new_request(self, client_actor, make_purchase):
        purchase_id = make_purchase(client_actor, client_id=None)["id"]
        result = request_transition(
            client_actor, EntityFamily.PURCHASE, purchase_id, "CANCELLED", notes="Found it locally"
        )
        assert result.ok

    def test_only_back_office_starts_work(self, client_actor, make_purchase):
        purchase_id = make_purchase(client_actor, client_id=None)["id"]
        result = request_transition(client_actor, EntityFamily.PURCHASE, purchase_id, "IN_PROGRESS")
        assert result.reason_code == "ROLE_NOT_PERMITTED"
