import json

import pytest
from protean.integrations.pytest import DomainFixture

from logistics.lifecycle.service import create_entity
from logistics.lifecycle.statuses import EntityFamily
from logistics.shared.actor import Actor


@pytest.fixture(scope="session")
def logistics_bed():
    from logistics.domain import logistics

    bed = DomainFixture(logistics)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(logistics_bed):
    with logistics_bed.domain_context():
        yield


@pytest.fixture()
def ops():
    return Actor.build("user-ops-1", "OPERATIONS_MANAGER")


@pytest.fixture()
def finance():
    return Actor.build("user-fin-1", "FINANCE_MANAGER")


@pytest.fixture()
def admin():
    return Actor.build("user-admin-1", "ADMIN")


@pytest.fixture()
def viewer():
    return Actor.build("user-viewer-1", "VIEWER")


@pytest.fixture()
def client_actor():
    return Actor.build(
        "user-client-1", "CLIENT", client_id="client-acme", email="buyer@acme.test", phone="+221700000001"
    )


@pytest.fixture()
def other_client_actor():
    return Actor.build("user-client-2", "CLIENT", client_id="client-globex")


# ---------------------------------------------------------------------------
# Entity builders
# ---------------------------------------------------------------------------
def create_quote(actor, client_id="client-acme", **overrides):
    fields = {
        "client_id": client_id,
        "origin_country": "Senegal",
        "origin_city": "Dakar",
        "destination_country": "Mali",
        "destination_city": "Bamako",
        "weight": 120.0,
        "transport_modes": json.dumps(["ROAD"]),
        "estimated_cost": 185000.0,
        **overrides,
    }
    result = create_entity(actor, EntityFamily.QUOTE, **fields)
    assert result.ok, result.message
    return result.data


def create_shipment(actor, client_id="client-acme", **overrides):
    fields = {
        "client_id": client_id,
        "origin_city": "Dakar",
        "origin_country": "Senegal",
        "destination_city": "Bamako",
        "destination_country": "Mali",
        "weight": 42.5,
        "package_count": 2,
        "transport_modes": json.dumps(["ROAD"]),
        **overrides,
    }
    result = create_entity(actor, EntityFamily.SHIPMENT, **fields)
    assert result.ok, result.message
    return result.data


def create_pickup(actor, client_id="client-acme", **overrides):
    fields = {
        "client_id": client_id,
        "pickup_address": "Zone industrielle, lot 4",
        "pickup_city": "Dakar",
        "pickup_country": "Senegal",
        "contact_name": "Awa Diop",
        "contact_email": "awa@example.com",
        **overrides,
    }
    result = create_entity(actor, EntityFamily.PICKUP, **fields)
    assert result.ok, result.message
    return result.data


def create_purchase(actor, client_id="client-acme", **overrides):
    fields = {
        "client_id": client_id,
        "product_name": "Solar inverter",
        "quantity": 2,
        "delivery_address": "Rue 10",
        "delivery_city": "Abidjan",
        "delivery_country": "Ivory Coast",
        "contact_email": "buyer@acme.test",
        **overrides,
    }
    result = create_entity(actor, EntityFamily.PURCHASE, **fields)
    assert result.ok, result.message
    return result.data


@pytest.fixture()
def make_quote():
    return create_quote


@pytest.fixture()
def make_shipment():
    return create_shipment


@pytest.fixture()
def make_pickup():
    return create_pickup


@pytest.fixture()
def make_purchase():
    return create_purchase
