"""BDD tests for the pickup request lifecycle."""

from datetime import UTC, datetime, timedelta

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from logistics.audit.writer import history, replay_status
from logistics.lifecycle.service import request_transition, run_entity_command
from logistics.lifecycle.statuses import EntityFamily
from logistics.pickup.pickup import PickupRequest
from logistics.pickup.scheduling import SchedulePickup

scenarios("features/pickup_lifecycle.feature")


def _schedule(actor, pickup_id):
    command = SchedulePickup(
        pickup_id=pickup_id,
        scheduled_date=datetime.now(UTC) + timedelta(days=1),
        time_slot="MORNING",
        **actor.as_command_fields(),
    )
    return run_entity_command(EntityFamily.PICKUP, pickup_id, command)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a pickup request from "{client_id}"'), target_fixture="pickup_id")
def _(ops, make_pickup, client_id):
    return make_pickup(ops, client_id=client_id)["id"]


@given("the pickup was scheduled")
def _(ops, pickup_id):
    assert _schedule(ops, pickup_id).ok


@given("the pickup was completed")
def _(ops, pickup_id):
    assert _schedule(ops, pickup_id).ok
    for target in ("IN_PROGRESS", "COMPLETED"):
        assert request_transition(ops, EntityFamily.PICKUP, pickup_id, target).ok


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("{who} schedules the pickup for tomorrow"))
def _(actors, pickup_id, outcome, who):
    outcome["result"] = _schedule(actors[who], pickup_id)


@when(parsers.cfparse('{who} cancels the pickup with notes "{notes}"'))
def _(actors, pickup_id, outcome, who, notes):
    outcome["result"] = request_transition(actors[who], EntityFamily.PICKUP, pickup_id, "CANCELED", notes=notes)


@when(parsers.cfparse('{who} moves the pickup to "{status}"'))
def _(actors, pickup_id, outcome, who, status):
    outcome["result"] = request_transition(actors[who], EntityFamily.PICKUP, pickup_id, status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the pickup status is "{status}"'))
def _(pickup_id, status):
    assert current_domain.repository_for(PickupRequest).get(pickup_id).status == status


@then(parsers.cfparse("the pickup history has {count:d} events"))
def _(pickup_id, count):
    assert len(history(pickup_id)) == count


@then(parsers.cfparse('replaying the pickup history gives "{status}"'))
def _(pickup_id, status):
    assert replay_status(history(pickup_id)) == status
