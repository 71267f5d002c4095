import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from logistics.api import routers
from logistics.api.errors import register_error_handlers

OPS = {"X-Actor-Id": "user-ops-1", "X-Actor-Role": "OPERATIONS_MANAGER"}
FINANCE = {"X-Actor-Id": "user-fin-1", "X-Actor-Role": "FINANCE_MANAGER"}
CLIENT = {
    "X-Actor-Id": "user-client-1",
    "X-Actor-Role": "CLIENT",
    "X-Client-Id": "client-acme",
    "X-Actor-Email": "buyer@acme.test",
}
OTHER_CLIENT = {"X-Actor-Id": "user-client-2", "X-Actor-Role": "CLIENT", "X-Client-Id": "client-globex"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in routers:
        app.include_router(router)
    return TestClient(app)


@pytest.fixture()
def headers():
    return {"ops": OPS, "finance": FINANCE, "client": CLIENT, "other_client": OTHER_CLIENT}
