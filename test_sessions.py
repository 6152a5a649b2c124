"""Tests for claim sessions and log context."""

import logging
import threading

from claimcheck.models.claim import ClaimRecord, ClaimRole
from claimcheck.sessions import ClaimSessionStore, StoredUpload
from claimcheck.utils.config import SessionConfig
from claimcheck.utils.logging import ContextFilter, reset_context, set_context


def make_record(item):
    return ClaimRecord(
        role=ClaimRole.CLAIMANT,
        party_name="John Smith",
        detail=None,
        status=None,
        claim_date_text="2024:05:10",
        claim_date=None,
        reason=None,
        covered_item=item,
    )


# ============================================================================
# ClaimSessionStore
# ============================================================================

def test_unknown_id_opens_new_session():
    store = ClaimSessionStore()

    session = store.get_or_create("not-issued-by-us")

    assert session.session_id != "not-issued-by-us"
    assert store.get("not-issued-by-us") is None
    assert store.get_or_create(session.session_id).session_id == session.session_id
    assert len(store) == 1


def test_sessions_are_isolated():
    store = ClaimSessionStore()
    first = store.get_or_create(None)
    second = store.get_or_create(None)

    store.update(first.session_id, claim=make_record("Alternator"))
    store.update(second.session_id, claim=make_record("Water pump"))

    assert store.get(first.session_id).claim.covered_item == "Alternator"
    assert store.get(second.session_id).claim.covered_item == "Water pump"


def test_get_returns_a_copy():
    store = ClaimSessionStore()
    session = store.get_or_create(None)

    snapshot = store.get(session.session_id)
    snapshot.image = StoredUpload("photo.jpg", "image/jpeg", b"\xff\xd8\xff", 3)

    assert store.get(session.session_id).image is None


def test_concurrent_updates_land_in_their_own_sessions():
    store = ClaimSessionStore()
    ids = [store.get_or_create(None).session_id for _ in range(8)]

    def worker(session_id):
        for _ in range(50):
            store.update(session_id, claim=make_record(session_id))

    threads = [threading.Thread(target=worker, args=(session_id,)) for session_id in ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(store.get(session_id).claim.covered_item == session_id for session_id in ids)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_store_is_capped_with_lru_eviction():
    store = ClaimSessionStore(max_sessions=3)
    ids = [store.get_or_create(None).session_id for _ in range(3)]

    # Reading the first session makes the second the least recently used
    assert store.get(ids[0]) is not None
    store.get_or_create(None)

    assert len(store) == 3
    assert store.get(ids[1]) is None
    assert store.get(ids[0]) is not None

    newest = [store.get_or_create(None).session_id for _ in range(10)]

    assert len(store) == 3
    assert all(store.get(session_id) is not None for session_id in newest[-3:])


def test_oldest_session_evicted_first():
    store = ClaimSessionStore(max_sessions=2)
    first = store.get_or_create(None).session_id
    second = store.get_or_create(None).session_id
    third = store.get_or_create(None).session_id

    assert len(store) == 2
    assert store.get(first) is None
    assert store.get(second) is not None
    assert store.get(third) is not None


def test_idle_sessions_expire():
    clock = FakeClock()
    store = ClaimSessionStore(max_sessions=10, ttl_seconds=60, clock=clock)
    stale = store.get_or_create(None).session_id
    clock.now += 30
    active = store.get_or_create(None).session_id

    clock.now += 40
    assert store.get(stale) is None
    assert store.get(active) is not None
    assert len(store) == 1


def test_update_reopens_evicted_session():
    store = ClaimSessionStore(max_sessions=1)
    evicted = store.get_or_create(None).session_id
    store.get_or_create(None)

    session = store.update(evicted, claim=make_record("Alternator"))

    assert session.session_id == evicted
    assert store.get(evicted).claim.covered_item == "Alternator"
    assert len(store) == 1


def test_default_session_limits():
    limits = SessionConfig()
    assert (limits.max_sessions, limits.ttl_seconds) == (1000, 3600)


# ============================================================================
# Log context
# ============================================================================

def stamped_session_id():
    record = logging.LogRecord("claimcheck", logging.INFO, __file__, 1, "msg", None, None)
    ContextFilter().filter(record)
    return record.session_id


def test_context_filter_adds_session_id():
    assert stamped_session_id() == "-"

    token = set_context(session_id="abc123")
    try:
        assert stamped_session_id() == "abc123"
    finally:
        reset_context(token)

    assert stamped_session_id() == "-"
