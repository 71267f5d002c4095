"""Quote expiry — sweep SENT quotes whose validity has lapsed.

Triggered periodically by an external scheduler through the maintenance
API. Each quote is expired in its own unit of work as the system actor, so
one failure does not stop the sweep.
"""

from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from logistics.lifecycle.service import request_transition
from logistics.lifecycle.statuses import EntityFamily, QuoteStatus
from logistics.quote.quote import Quote
from logistics.shared.actor import Actor
from logistics.shared.clock import as_utc
from logistics.utils.paging import fetch_all

logger = structlog.get_logger(__name__)


def lapsed_quotes(as_of: datetime) -> list[Quote]:
    query = current_domain.repository_for(Quote)._dao.query.filter(
        status=QuoteStatus.SENT.value,
        valid_until__lt=as_of,
    )
    return [quote for quote in fetch_all(query) if quote.valid_until and as_utc(quote.valid_until) < as_of]


def expire_quotes(as_of: datetime | None = None) -> dict:
    """Expire every lapsed SENT quote; returns the ids expired and those that failed."""
    as_of = as_utc(as_of or datetime.now(UTC))
    lapsed = lapsed_quotes(as_of)
    if not lapsed:
        logger.info("No lapsed quotes found", as_of=as_of.isoformat())
        return {"expired": [], "failed": []}

    system = Actor.system()
    expired, failed = [], []
    for quote in lapsed:
        result = request_transition(
            system,
            EntityFamily.QUOTE,
            str(quote.id),
            QuoteStatus.EXPIRED,
            metadata={"valid_until": as_utc(quote.valid_until).isoformat()},
            expected_status=QuoteStatus.SENT.value,
        )
        if result.ok:
            expired.append(str(quote.id))
        else:
            logger.warning(
                "Failed to expire quote",
                quote_id=str(quote.id),
                reason_code=result.reason_code,
                error=result.message,
            )
            failed.append({"quote_id": str(quote.id), "reason_code": result.reason_code})

    logger.info("Quote expiry sweep finished", expired=len(expired), candidates=len(lapsed))
    return {"expired": expired, "failed": failed}
