"""Client-held store of guest quotes.

The store keeps a bounded JSON array under one namespaced key. Every
operation reads the array, works on an immutable ``GuestQuoteState`` and
writes back only what survives: expired entries are dropped on load and
unparseable content is reset to an empty store instead of failing.
"""

import json
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from logistics.domain import custom_setting
from logistics.guest.models import GuestQuote, GuestQuoteFormData, GuestQuoteResult
from logistics.guest.storage import KeyValueStorage

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GuestQuoteState:
    version: int = 0
    quotes: tuple[GuestQuote, ...] = ()

    def __len__(self) -> int:
        return len(self.quotes)

    def get(self, quote_id: str) -> GuestQuote | None:
        return next((quote for quote in self.quotes if quote.id == quote_id), None)

    @property
    def ids(self) -> list[str]:
        return [quote.id for quote in self.quotes]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class GuestQuoteStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], datetime] = _utcnow,
        key: str | None = None,
        ttl_days: int | None = None,
        limit: int | None = None,
    ):
        self.storage = storage
        self.clock = clock
        self.key = key or custom_setting("GUEST_QUOTE_STORE_KEY", "freightline:guest-quotes:v1")
        self.ttl = timedelta(days=int(ttl_days or custom_setting("GUEST_QUOTE_TTL_DAYS", 7)))
        self.limit = int(limit or custom_setting("GUEST_QUOTE_STORE_LIMIT", 20))
        self._version = 0

    # -------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------
    def _read(self) -> list[GuestQuote]:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError("Guest quote store must hold a JSON array")
            return [GuestQuote.model_validate(entry) for entry in entries]
        except (ValueError, TypeError) as exc:
            # pydantic's ValidationError and JSONDecodeError are both ValueErrors
            logger.warning("Guest quote store reset", key=self.key, error=str(exc))
            self.storage.remove_item(self.key)
            self._version += 1
            return []

    def _write(self, quotes: list[GuestQuote]) -> GuestQuoteState:
        if quotes:
            payload = json.dumps([quote.model_dump(mode="json", by_alias=True) for quote in quotes])
            self.storage.set_item(self.key, payload)
        else:
            self.storage.remove_item(self.key)
        self._version += 1
        return GuestQuoteState(version=self._version, quotes=tuple(quotes))

    def load(self) -> GuestQuoteState:
        """Current unexpired quotes; prunes the stored array if anything expired."""
        quotes = self._read()
        now = self.clock()
        survivors = [quote for quote in quotes if not quote.is_expired(now)]
        if len(survivors) != len(quotes):
            logger.info("Expired guest quotes pruned", key=self.key, pruned=len(quotes) - len(survivors))
            return self._write(survivors)
        return GuestQuoteState(version=self._version, quotes=tuple(survivors))

    # -------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------
    def add(self, form_data: GuestQuoteFormData | dict, result: GuestQuoteResult | dict) -> GuestQuoteState:
        """Store a new computation with a fresh id and a fixed expiry."""
        now = self.clock()
        quote = GuestQuote(
            id=str(uuid.uuid4()),
            created_at=now,
            expires_at=now + self.ttl,
            form_data=GuestQuoteFormData.model_validate(form_data),
            result=GuestQuoteResult.model_validate(result),
        )
        quotes = [*self.load().quotes, quote]
        if len(quotes) > self.limit:
            quotes = quotes[len(quotes) - self.limit :]
        return self._write(quotes)

    def remove(self, quote_id: str) -> GuestQuoteState:
        state = self.load()
        return self._write([quote for quote in state.quotes if quote.id != quote_id])

    def remove_many(self, quote_ids) -> GuestQuoteState:
        """Drop every entry a reconciliation reported as attached or not retryable."""
        dropped = set(quote_ids)
        state = self.load()
        return self._write([quote for quote in state.quotes if quote.id not in dropped])

    def clear(self) -> GuestQuoteState:
        self.storage.remove_item(self.key)
        self._version += 1
        return GuestQuoteState(version=self._version)
