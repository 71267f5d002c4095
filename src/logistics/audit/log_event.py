"""LogEvent aggregate — one immutable audit record of one entity.

The log is the only history of quotes, shipments, pickups and purchases.
Records are numbered per entity (``sequence`` 1..n) in the order their
writes were applied, so the ``new_status`` values of the status-bearing
records replay to the entity's current status.
"""

import json

from protean.exceptions import InvalidOperationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.utils.paging import fetch_all


@logistics.aggregate
class LogEvent:
    entity_family = String(required=True, max_length=20, choices=EntityFamily)
    entity_id = Identifier(required=True)
    sequence = Integer(required=True, min_value=1)
    event_type = String(required=True, max_length=50)
    old_status = String(max_length=50)
    new_status = String(max_length=50)
    actor_id = Identifier()
    event_metadata = Text()  # JSON object, shape documented per event kind
    notes = Text()
    created_at = DateTime(required=True)

    @property
    def metadata(self) -> dict:
        return json.loads(self.event_metadata) if self.event_metadata else {}

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "entity_family": self.entity_family,
            "entity_id": str(self.entity_id),
            "sequence": self.sequence,
            "event_type": self.event_type,
            "old_status": self.old_status,
            "new_status": self.new_status,
            "actor_id": str(self.actor_id) if self.actor_id else None,
            "metadata": self.metadata,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@logistics.repository(part_of=LogEvent)
class LogEventRepository:
    """Append-only access to the audit log.

    Callers write through ``append``; a record that already exists for the
    same entity and sequence is never overwritten.
    """

    def append(self, log_event: LogEvent) -> LogEvent:
        existing = self._dao.query.filter(
            entity_id=log_event.entity_id,
            sequence=log_event.sequence,
        ).all()
        if existing.total:
            raise InvalidOperationError(
                f"Log event {log_event.sequence} of {log_event.entity_id} is already recorded"
            )
        self.add(log_event)
        return log_event

    def for_entity(self, entity_id: str, page_size: int) -> list[LogEvent]:
        return fetch_all(self._dao.query.filter(entity_id=entity_id), order_by="sequence", page_size=page_size)
