"""Purchase cost updates and other non-status purchase actions."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.audit.event_types import PurchaseEventType
from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import load, log_free_activity, record_activity
from logistics.purchase.purchase import PurchaseRequest
from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError
from logistics.shared.roles import BACK_OFFICE


@logistics.command(part_of="PurchaseRequest")
class UpdatePurchaseCosts:
    purchase_id = Identifier(required=True)
    actual_product_cost = Float(min_value=0.0)
    delivery_cost = Float(min_value=0.0)
    service_fee = Float(min_value=0.0)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="PurchaseRequest")
class RecordPurchaseActivity:
    purchase_id = Identifier(required=True)
    event_type = String(required=True, max_length=50)
    event_metadata = Text()  # JSON object
    notes = Text()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command_handler(part_of=PurchaseRequest)
class PurchaseCostsHandler:
    @handle(UpdatePurchaseCosts)
    def update_purchase_costs(self, command):
        actor = Actor.from_command(command)
        if actor.role not in BACK_OFFICE:
            raise AuthorizationError("Only back-office staff can update purchase costs")

        purchase = load(PurchaseRequest, command.purchase_id)
        total = purchase.update_costs(
            actual_product_cost=command.actual_product_cost,
            delivery_cost=command.delivery_cost,
            service_fee=command.service_fee,
        )
        metadata = {
            "actual_product_cost": command.actual_product_cost,
            "delivery_cost": command.delivery_cost,
            "service_fee": command.service_fee,
            "total_cost": total,
        }
        record_activity(
            purchase,
            PurchaseEventType.COSTS_UPDATED,
            actor,
            metadata={key: value for key, value in metadata.items() if value is not None},
        )
        current_domain.repository_for(PurchaseRequest).add(purchase)
        return total

    @handle(RecordPurchaseActivity)
    def record_purchase_activity(self, command):
        log_free_activity(
            PurchaseRequest,
            EntityFamily.PURCHASE,
            command.purchase_id,
            command.event_type,
            Actor.from_command(command),
            metadata=json.loads(command.event_metadata) if command.event_metadata else None,
            notes=command.notes,
        )
