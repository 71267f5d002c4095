"""Purchase request creation — command and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import begin_lifecycle
from logistics.purchase.purchase import PurchaseRequest
from logistics.shared.actor import Actor


@logistics.command(part_of="PurchaseRequest")
class RequestPurchase:
    request_number = String(required=True, max_length=20)
    client_id = Identifier()
    contact_name = String(max_length=200)
    contact_email = String(max_length=254)
    contact_phone = String(max_length=30)
    product_name = String(required=True, max_length=300)
    product_url = String(max_length=1000)
    product_description = Text()
    quantity = Integer(default=1)
    estimated_price = Float()
    delivery_address = String(required=True, max_length=300)
    delivery_city = String(required=True, max_length=100)
    delivery_country = String(required=True, max_length=100)
    is_guest = Boolean(default=False)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command_handler(part_of=PurchaseRequest)
class RequestPurchaseHandler:
    @handle(RequestPurchase)
    def request_purchase(self, command):
        actor = Actor.from_command(command)
        guest = bool(command.is_guest)
        purchase = PurchaseRequest.create(
            request_number=command.request_number,
            product={
                "name": command.product_name,
                "url": command.product_url,
                "description": command.product_description,
                "quantity": command.quantity,
                "estimated_price": command.estimated_price,
            },
            delivery={
                "address": command.delivery_address,
                "city": command.delivery_city,
                "country": command.delivery_country,
            },
            contact={
                "name": command.contact_name,
                "email": command.contact_email,
                "phone": command.contact_phone,
            },
            client_id=None if guest else (command.client_id or actor.client_id),
            user_id=None if guest or not actor.client_id else actor.user_id,
        )
        metadata = {"number": purchase.request_number, "source": "guest" if guest else "dashboard"}
        begin_lifecycle(purchase, EntityFamily.PURCHASE, actor, metadata)
        current_domain.repository_for(PurchaseRequest).add(purchase)
        return str(purchase.id)
