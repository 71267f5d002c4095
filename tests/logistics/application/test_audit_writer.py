"""Tests for the append-only audit log writer."""

from unittest.mock import patch

import pytest
from protean import current_domain
from protean.exceptions import InvalidOperationError
from sqlalchemy.exc import OperationalError

from logistics.audit.event_types import QuoteEventType
from logistics.audit.log_event import LogEvent
from logistics.audit.writer import append_event, history, replay_status
from logistics.lifecycle.service import request_activity, request_transition
from logistics.lifecycle.statuses import EntityFamily, QuoteStatus
from logistics.quote.quote import Quote
from logistics.shared.errors import AuditContractError, PersistenceError, UnknownEventTypeError


def _detached_quote():
    return Quote.create(
        quote_number="QTE-20260302-00099",
        route={"origin_country": "Senegal", "destination_country": "Mali"},
        cargo={"weight": 1.0},
    )


class TestAppendEvent:
    def test_sequence_advances_per_entity(self):
        quote = _detached_quote()
        first = append_event(quote, QuoteEventType.CREATED, new_status=QuoteStatus.DRAFT)
        second = append_event(quote, QuoteEventType.COMMENT_ADDED, notes="Hello")
        assert (first.sequence, second.sequence) == (1, 2)
        assert quote.log_sequence == 2

    def test_enum_statuses_are_stored_as_values(self):
        quote = _detached_quote()
        event = append_event(quote, QuoteEventType.CREATED, new_status=QuoteStatus.DRAFT)
        assert event.new_status == "DRAFT"
        assert event.entity_family == "QUOTE"

    def test_missing_required_metadata(self):
        with pytest.raises(AuditContractError):
            append_event(_detached_quote(), QuoteEventType.PAYMENT_RECEIVED, metadata={"amount": 10.0})

    def test_unexpected_metadata(self):
        with pytest.raises(AuditContractError):
            append_event(_detached_quote(), QuoteEventType.CREATED, new_status="DRAFT", metadata={"colour": "red"})

    def test_notes_required(self):
        with pytest.raises(AuditContractError):
            append_event(_detached_quote(), QuoteEventType.SYSTEM_NOTE)

    def test_status_kinds_need_a_new_status(self):
        with pytest.raises(AuditContractError):
            append_event(_detached_quote(), QuoteEventType.SENT_TO_CLIENT)

    def test_activity_kinds_cannot_change_status(self):
        with pytest.raises(AuditContractError):
            append_event(_detached_quote(), QuoteEventType.COMMENT_ADDED, new_status="SENT", notes="x")

    def test_contract_failure_does_not_advance_sequence(self):
        quote = _detached_quote()
        with pytest.raises(AuditContractError):
            append_event(quote, QuoteEventType.SYSTEM_NOTE)
        assert quote.log_sequence == 0

    def test_non_audit_enum_is_a_programming_error(self):
        with pytest.raises(UnknownEventTypeError):
            append_event(_detached_quote(), QuoteStatus.DRAFT)


class TestRetries:
    def test_transient_failures_are_retried(self):
        repo = current_domain.repository_for(LogEvent)
        original = repo.append
        calls = []

        def flaky(log_event):
            calls.append(log_event.sequence)
            if len(calls) < 3:
                raise OperationalError("INSERT", {}, Exception("connection reset"))
            return original(log_event)

        with patch.object(type(repo), "append", side_effect=flaky):
            event = append_event(_detached_quote(), QuoteEventType.CREATED, new_status="DRAFT")

        assert len(calls) == 3
        assert event.sequence == 1

    def test_persistent_failure_becomes_persistence_error(self):
        repo = current_domain.repository_for(LogEvent)
        with patch.object(type(repo), "append", side_effect=ConnectionError("database unreachable")) as append:
            with pytest.raises(PersistenceError):
                append_event(_detached_quote(), QuoteEventType.CREATED, new_status="DRAFT")
        assert append.call_count == 3

    def test_persistence_failure_surfaces_as_result(self, ops, make_quote):
        quote_id = make_quote(ops)["id"]
        repo = current_domain.repository_for(LogEvent)
        with patch.object(type(repo), "append", side_effect=TimeoutError("slow disk")):
            result = request_transition(ops, EntityFamily.QUOTE, quote_id, "SUBMITTED")

        assert result.reason_code == "PERSISTENCE_FAILED"
        assert current_domain.repository_for(Quote).get(quote_id).status == "DRAFT"
        assert len(history(quote_id)) == 1


class TestAppendOnly:
    def test_duplicate_sequence_is_refused(self, ops, make_quote):
        quote_id = make_quote(ops)["id"]
        [created] = history(quote_id)
        duplicate = LogEvent(
            entity_family="QUOTE",
            entity_id=quote_id,
            sequence=1,
            event_type="SYSTEM_NOTE",
            notes="Overwrite attempt",
            created_at=created.created_at,
        )
        with pytest.raises(InvalidOperationError):
            current_domain.repository_for(LogEvent).append(duplicate)
        assert history(quote_id)[0].event_type == "CREATED"


class TestHistory:
    def test_history_is_complete_and_ordered_across_pages(self):
        quote = _detached_quote()
        append_event(quote, QuoteEventType.CREATED, new_status=QuoteStatus.DRAFT)
        for n in range(11):
            append_event(quote, QuoteEventType.COMMENT_ADDED, notes=f"Note {n}")

        events = current_domain.repository_for(LogEvent).for_entity(str(quote.id), page_size=5)

        assert [event.sequence for event in events] == list(range(1, 13))
        assert [event.sequence for event in history(quote.id)] == list(range(1, 13))


class TestReplay:
    def test_replay_matches_current_status(self, ops, make_quote):
        quote_id = make_quote(ops)["id"]
        request_transition(ops, EntityFamily.QUOTE, quote_id, "SUBMITTED")
        request_activity(ops, EntityFamily.QUOTE, quote_id, "COMMENT_ADDED", notes="Checking rates")
        request_transition(ops, EntityFamily.QUOTE, quote_id, "SENT")

        quote = current_domain.repository_for(Quote).get(quote_id)
        assert replay_status(history(quote_id)) == quote.status == "SENT"

    def test_replay_detects_a_broken_chain(self, ops, make_quote):
        quote_id = make_quote(ops)["id"]
        request_transition(ops, EntityFamily.QUOTE, quote_id, "SUBMITTED")
        events = history(quote_id)
        events[1].old_status = "SENT"

        with pytest.raises(AuditContractError):
            replay_status(events)

    def test_replay_of_empty_log(self):
        assert replay_status([]) is None
