"""Business-number reservation, sequential and concurrent."""

import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from datetime import date
from unittest.mock import patch

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError

from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.numbering.sequence import SequenceCounter, bucket_locks, next_number, next_number_for
from logistics.shared.errors import ConflictError

DAY = date(2026, 3, 2)


def test_first_number_of_the_day():
    assert next_number("QTE", DAY) == "QTE-20260302-00001"


def test_buckets_are_per_prefix_and_day():
    next_number("QTE", DAY)
    next_number("QTE", DAY)
    assert next_number("SHP", DAY) == "SHP-20260302-00001"
    assert next_number("QTE", date(2026, 3, 3)) == "QTE-20260303-00001"
    assert next_number("QTE", DAY) == "QTE-20260302-00003"


def test_family_prefix():
    assert next_number_for(EntityFamily.PICKUP, DAY) == "GPK-20260302-00001"
    assert next_number_for(EntityFamily.PURCHASE, DAY) == "PUR-20260302-00001"


def test_counter_row_is_persisted():
    next_number("PUR", DAY)
    counter = current_domain.repository_for(SequenceCounter).get("PUR:20260302")
    assert counter.value == 1


def test_concurrent_reservations_are_distinct_and_gapless():
    def reserve(_):
        with logistics.domain_context():
            return next_number("SHP", DAY)

    with ThreadPoolExecutor(max_workers=8) as pool:
        numbers = list(pool.map(reserve, range(40)))

    assert len(set(numbers)) == 40
    assert sorted(numbers) == [f"SHP-20260302-{n:05d}" for n in range(1, 41)]


def test_version_race_is_retried():
    repo = current_domain.repository_for(SequenceCounter)
    original = repo.add
    attempts = []

    def racing_add(counter):
        attempts.append(counter.value)
        if len(attempts) == 1:
            raise ExpectedVersionError("stale counter")
        return original(counter)

    with patch.object(type(repo), "add", side_effect=racing_add):
        assert next_number("GPK", DAY) == "GPK-20260302-00001"
    assert len(attempts) == 2


def test_persistent_race_becomes_conflict():
    repo = current_domain.repository_for(SequenceCounter)
    with patch.object(type(repo), "add", side_effect=ExpectedVersionError("stale counter")) as add:
        with pytest.raises(ConflictError):
            next_number("GPK", DAY)
    assert add.call_count == 5


def test_bucket_created_by_another_worker_is_retried():
    repo = current_domain.repository_for(SequenceCounter)
    original = repo.get
    reads = []

    def read_after_rival_created(key):
        reads.append(key)
        if len(reads) == 1:
            repo.add(SequenceCounter(bucket=key, value=1))
            raise ObjectNotFoundError(f"SequenceCounter {key} not found")
        return original(key)

    with patch.object(type(repo), "get", side_effect=read_after_rival_created):
        assert next_number("SHP", date(2026, 4, 1)) == "SHP-20260401-00002"
    assert len(reads) == 2


def test_fresh_bucket_tolerates_workers_without_a_shared_lock():
    repo = current_domain.repository_for(SequenceCounter)
    original = repo.get
    workers = 4
    all_missed = threading.Barrier(workers, timeout=5)
    first_read = threading.local()

    def read(key):
        if not getattr(first_read, "done", False):
            first_read.done = True
            all_missed.wait()
        return original(key)

    def reserve(_):
        with logistics.domain_context():
            return next_number("SHP", date(2026, 4, 1))

    with (
        patch.object(bucket_locks, "hold", lambda key: nullcontext()),
        patch.object(type(repo), "get", side_effect=read),
        ThreadPoolExecutor(max_workers=workers) as pool,
    ):
        numbers = list(pool.map(reserve, range(workers)))

    assert all(number.startswith("SHP-20260401-") for number in numbers)
    assert repo.get("SHP:20260401").value >= 1
