"""Shared BDD fixtures and step definitions for the logistics domain."""

from datetime import UTC, datetime, timedelta

import pytest
from pytest_bdd import parsers, then


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def rewind(self, **kwargs):
        self.now = self.now - timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def clock():
    return FakeClock(datetime.now(UTC))


@pytest.fixture()
def actors(ops, finance, client_actor, other_client_actor):
    """Step wording mapped to the actor performing it."""
    return {
        "operations": ops,
        "finance": finance,
        "the client": client_actor,
        "another client": other_client_actor,
    }


@pytest.fixture()
def outcome():
    """Container for the last operation result."""
    return {"result": None}


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then("the request succeeds")
def _(outcome):
    assert outcome["result"].ok, outcome["result"].message


@then(parsers.cfparse('the request fails with "{reason_code}"'))
def _(outcome, reason_code):
    assert not outcome["result"].ok
    assert outcome["result"].reason_code == reason_code
