"""BDD tests for guest quotes kept on the visitor's device."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from logistics.guest.reconciliation import reconcile
from logistics.guest.storage import MemoryStorage
from logistics.guest.store import GuestQuoteStore
from logistics.quote.quote import Quote

scenarios("features/guest_quotes.feature")

FORM = {
    "originCountry": "Senegal",
    "originCity": "Dakar",
    "destinationCountry": "Mali",
    "destinationCity": "Bamako",
    "weight": 60.0,
    "transportMode": ["ROAD"],
}
RESULT = {"estimatedCost": 72000.0, "currency": "XOF", "estimatedDeliveryDays": 5}


@pytest.fixture()
def store(clock):
    return GuestQuoteStore(MemoryStorage(), clock=clock, ttl_days=7, limit=20)


@pytest.fixture()
def saved():
    """Guest quotes exactly as they were when first saved on the device."""
    return []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a guest saved a quote {days:d} days ago"))
def _(store, clock, saved, days):
    now = clock.now
    clock.rewind(days=days)
    state = store.add(FORM, RESULT)
    saved.append(state.quotes[-1].model_dump(mode="json", by_alias=True))
    clock.now = now


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the guest store is loaded")
def _(store):
    store.load()


@when(parsers.cfparse("{who} reconciles the saved quotes"))
def _(actors, store, clock, outcome, who):
    candidates = [quote.model_dump(mode="json", by_alias=True) for quote in store.load().quotes]
    report = reconcile(actors[who], candidates, now=clock())
    outcome["result"] = report


@when("the client reconciles the quotes as they were first saved")
def _(client_actor, saved, clock, outcome):
    outcome["result"] = reconcile(client_actor, saved, now=clock())


@when("the device drops the settled quotes")
def _(store, outcome):
    store.remove_many(outcome["result"].settled_ids)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the guest store holds {count:d} quote"))
def _(store, count):
    assert len(store.load()) == count


@then("the guest store is empty")
def _(store):
    assert len(store.load()) == 0


@then(parsers.cfparse('{count:d} quotes belong to "{client_id}"'))
def _(count, client_id):
    quotes = current_domain.repository_for(Quote)._dao.query.filter(client_id=client_id).all().items
    assert len(quotes) == count


@then(parsers.cfparse('the last reconciliation skipped "{reason_code}"'))
def _(outcome, reason_code):
    assert [item.reason_code for item in outcome["result"].skipped] == [reason_code]
