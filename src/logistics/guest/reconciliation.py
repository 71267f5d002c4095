"""Server-side reconciliation of guest quotes into an account.

When a visitor signs up or logs in, the client sends the quotes it still
holds locally. Each candidate becomes a DRAFT quote owned by the account,
created through the same validator and audit path as a dashboard quote and
tagged as attached from a guest quote. A candidate id that was already
reconciled is reported as a duplicate and never creates a second quote. The
guest quote id is unique on the quote, so a worker that loses a concurrent
reconciliation of the same candidate also reports a duplicate.

The stored computation is accepted as priced; it is not re-priced against
current rates.

Candidates are processed one at a time, each in its own unit of work, so one
failure never aborts the batch. Every skipped candidate carries a reason code
and a ``retryable`` flag that tells the client whether to keep it locally.
"""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import TransactionError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from pydantic import ValidationError as SnapshotValidationError

from logistics.access.resolver import can_read
from logistics.audit.event_types import QuoteEventType
from logistics.domain import logistics
from logistics.guest.models import GuestQuote
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import begin_lifecycle, record_activity
from logistics.numbering.sequence import next_number_for
from logistics.quote.creation import default_valid_until
from logistics.quote.quote import Quote
from logistics.shared.actor import Actor
from logistics.shared.errors import VALIDATION_FAILED, AuthorizationError, ConflictError
from logistics.shared.results import capture, is_duplicate_key
from logistics.shared.roles import Capability, capabilities_for
from logistics.utils.locks import entity_locks

logger = structlog.get_logger(__name__)

DUPLICATE = "DUPLICATE"
NOT_FOUND = "NOT_FOUND"
MATCHED_BY = "guest_quote"

# Skips the client should keep locally and present again later
RETRYABLE_REASONS = frozenset({"CONFLICT", "PERSISTENCE_FAILED", "FORBIDDEN"})


class DuplicateGuestQuoteError(ConflictError):
    reason_code = DUPLICATE


@dataclass(frozen=True)
class AttachedQuote:
    guest_quote_id: str
    quote_id: str
    quote_number: str


@dataclass(frozen=True)
class SkippedCandidate:
    guest_quote_id: str | None
    reason_code: str
    message: str
    retryable: bool = False
    existing_quote_id: str | None = None


@dataclass
class ReconciliationReport:
    attached: list[AttachedQuote] = field(default_factory=list)
    skipped: list[SkippedCandidate] = field(default_factory=list)

    @property
    def settled_ids(self) -> list[str]:
        """Candidate ids the client can drop from its local store."""
        ids = [item.guest_quote_id for item in self.attached]
        ids += [item.guest_quote_id for item in self.skipped if not item.retryable and item.guest_quote_id]
        return ids

    def to_dict(self) -> dict:
        return {
            "attached": [asdict(item) for item in self.attached],
            "skipped": [asdict(item) for item in self.skipped],
        }


@logistics.command(part_of="Quote")
class ReconcileGuestQuote:
    """Create an account-owned quote from one guest quote snapshot."""

    quote_number = String(required=True, max_length=20)
    guest_quote_id = String(required=True, max_length=64)
    snapshot = Text(required=True)  # GuestQuote JSON
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


def find_reconciled(guest_quote_id: str):
    """The quote already created from ``guest_quote_id``, if any."""
    return (
        current_domain.repository_for(Quote)._dao.query.filter(guest_quote_id=guest_quote_id).limit(1).all().first
    )


@logistics.command_handler(part_of=Quote)
class ReconcileGuestQuoteHandler:
    @handle(ReconcileGuestQuote)
    def reconcile_guest_quote(self, command):
        actor = Actor.from_command(command)
        if find_reconciled(command.guest_quote_id) is not None:
            raise DuplicateGuestQuoteError(f"Guest quote {command.guest_quote_id} is already attached")

        snapshot = GuestQuote.model_validate_json(command.snapshot)
        quote = Quote.create(
            quote_number=command.quote_number,
            route=snapshot.route(),
            cargo=snapshot.cargo(),
            client_id=actor.client_id,
            pricing=snapshot.pricing(),
            valid_until=default_valid_until(),
            guest_quote_id=snapshot.id,
        )
        begin_lifecycle(
            quote,
            EntityFamily.QUOTE,
            actor,
            {
                "number": quote.quote_number,
                "source": "guest",
                "attached_to_account": True,
                "guest_quote_id": snapshot.id,
            },
        )
        quote.attach_to_account(actor.user_id, actor.client_id, MATCHED_BY)
        record_activity(
            quote,
            QuoteEventType.ATTACHED_TO_ACCOUNT,
            actor,
            metadata={
                "user_id": actor.user_id,
                "matched_by": MATCHED_BY,
                "client_id": actor.client_id,
                "guest_quote_id": snapshot.id,
            },
        )
        current_domain.repository_for(Quote).add(quote)
        return str(quote.id)


def _candidate_id(candidate) -> str | None:
    if isinstance(candidate, GuestQuote):
        return candidate.id
    if isinstance(candidate, dict) and candidate.get("id"):
        return str(candidate["id"])
    return None


def _has_snapshot(candidate) -> bool:
    if isinstance(candidate, GuestQuote):
        return True
    return bool(candidate.get("formData") or candidate.get("form_data")) and bool(candidate.get("result"))


def _duplicate(actor: Actor, guest_quote_id: str, existing) -> SkippedCandidate:
    return SkippedCandidate(
        guest_quote_id=guest_quote_id,
        reason_code=DUPLICATE,
        message="Guest quote is already attached",
        existing_quote_id=str(existing.id) if can_read(actor, existing) else None,
    )


def _reconcile_one(actor: Actor, candidate, now: datetime) -> AttachedQuote | SkippedCandidate:
    guest_quote_id = _candidate_id(candidate)
    if guest_quote_id is None:
        return SkippedCandidate(None, VALIDATION_FAILED, "Guest quote has no id")

    with entity_locks.hold(f"GUEST_QUOTE:{guest_quote_id}"):
        existing = find_reconciled(guest_quote_id)
        if existing is not None:
            return _duplicate(actor, guest_quote_id, existing)

        if not _has_snapshot(candidate):
            return SkippedCandidate(guest_quote_id, NOT_FOUND, "Guest quote is no longer available")
        try:
            snapshot = candidate if isinstance(candidate, GuestQuote) else GuestQuote.model_validate(candidate)
        except SnapshotValidationError as exc:
            message = f"Invalid guest quote: {exc.error_count()} errors"
            return SkippedCandidate(guest_quote_id, VALIDATION_FAILED, message)
        if snapshot.is_expired(now):
            return SkippedCandidate(guest_quote_id, NOT_FOUND, "Guest quote has expired")

        def _create():
            quote_number = next_number_for(EntityFamily.QUOTE)
            try:
                quote_id = current_domain.process(
                    ReconcileGuestQuote(
                        quote_number=quote_number,
                        guest_quote_id=guest_quote_id,
                        snapshot=snapshot.model_dump_json(by_alias=True),
                        **actor.as_command_fields(),
                    ),
                    asynchronous=False,
                )
            except (ValidationError, TransactionError) as exc:
                if not is_duplicate_key(exc, "guest_quote_id"):
                    raise
                raise DuplicateGuestQuoteError(f"Guest quote {guest_quote_id} is already attached") from exc
            return AttachedQuote(guest_quote_id, quote_id, quote_number)

        result = capture(_create)

    if result.ok:
        return result.data
    if result.reason_code == DUPLICATE:
        existing = find_reconciled(guest_quote_id)
        if existing is not None:
            return _duplicate(actor, guest_quote_id, existing)
    return SkippedCandidate(
        guest_quote_id,
        result.reason_code,
        result.message,
        retryable=result.reason_code in RETRYABLE_REASONS,
    )


def reconcile(actor: Actor, candidates, now: datetime | None = None) -> ReconciliationReport:
    """Attach the caller's locally held guest quotes to its account.

    ``candidates`` are GuestQuote models or their raw JSON objects.
    """
    now = now or datetime.now(UTC)
    report = ReconciliationReport()
    candidates = list(candidates or [])

    if (
        Capability.CLAIM_GUEST_RECORDS not in capabilities_for(actor.role)
        or not actor.user_id
        or not actor.client_id
    ):
        error = AuthorizationError("Only a client account with a tenant can attach guest quotes")
        report.skipped = [
            SkippedCandidate(_candidate_id(candidate), error.reason_code, error.message, retryable=True)
            for candidate in candidates
        ]
        logger.info("Guest quote reconciliation refused", actor_id=actor.user_id, candidates=len(candidates))
        return report

    seen = set()
    for candidate in candidates:
        guest_quote_id = _candidate_id(candidate)
        if guest_quote_id is not None and guest_quote_id in seen:
            report.skipped.append(
                SkippedCandidate(guest_quote_id, DUPLICATE, "Guest quote was presented twice in one request")
            )
            continue
        seen.add(guest_quote_id)

        outcome = _reconcile_one(actor, candidate, now)
        if isinstance(outcome, AttachedQuote):
            report.attached.append(outcome)
        else:
            report.skipped.append(outcome)

    logger.info(
        "Guest quotes reconciled",
        actor_id=actor.user_id,
        client_id=actor.client_id,
        attached=len(report.attached),
        skipped=len(report.skipped),
    )
    return report
