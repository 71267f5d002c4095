"""Per-day business numbers: ``PREFIX-YYYYMMDD-NNNNN``.

Each (prefix, day) bucket owns one counter row. Increments are serialized
per bucket by an in-process lock. Across processes, a stale write raises
``ExpectedVersionError`` and a second insert of a new bucket row fails its
unique check. Both are retried on a fresh read.
"""

from datetime import UTC, date, datetime

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError, ValidationError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.shared.errors import ConflictError
from logistics.shared.results import is_duplicate_key
from logistics.utils.locks import bucket_locks

logger = structlog.get_logger(__name__)

PREFIXES = {
    EntityFamily.QUOTE: "QTE",
    EntityFamily.SHIPMENT: "SHP",
    EntityFamily.PICKUP: "GPK",
    EntityFamily.PURCHASE: "PUR",
}

_MAX_ATTEMPTS = 5


@logistics.aggregate
class SequenceCounter:
    bucket = String(identifier=True, max_length=32)  # "PREFIX:YYYYMMDD"
    value = Integer(default=0, min_value=0)

    def increment(self) -> int:
        self.value = (self.value or 0) + 1
        return self.value


def _bucket_key(prefix: str, day: date) -> str:
    return f"{prefix}:{day.strftime('%Y%m%d')}"


def format_number(prefix: str, day: date, count: int) -> str:
    return f"{prefix}-{day.strftime('%Y%m%d')}-{count:05d}"


def next_number(prefix: str, day: date | datetime | None = None) -> str:
    """Reserve the next number of ``prefix`` for ``day`` (UTC today by default).

    Must run outside a unit of work so the counter commits before the lock
    is released.
    """
    if not prefix or not prefix.isalpha() or not prefix.isupper() or len(prefix) != 3:
        raise ValueError(f"Number prefix must be three uppercase letters, got {prefix!r}")
    if day is None:
        day = datetime.now(UTC).date()
    elif isinstance(day, datetime):
        day = day.date()

    key = _bucket_key(prefix, day)
    repo = current_domain.repository_for(SequenceCounter)
    with bucket_locks.hold(key):
        for attempt in range(1, _MAX_ATTEMPTS + 1):
            try:
                counter = repo.get(key)
            except ObjectNotFoundError:
                counter = SequenceCounter(bucket=key, value=0)
            count = counter.increment()
            try:
                repo.add(counter)
            except ExpectedVersionError:
                logger.warning("Sequence counter raced", bucket=key, attempt=attempt)
                continue
            except (ValidationError, TransactionError) as exc:
                if not is_duplicate_key(exc, "bucket"):
                    raise
                logger.warning("Sequence bucket created concurrently", bucket=key, attempt=attempt)
                continue
            return format_number(prefix, day, count)

    raise ConflictError(f"Could not reserve a number in bucket {key}")


def next_number_for(family: EntityFamily, day: date | datetime | None = None) -> str:
    return next_number(PREFIXES[family], day)
