from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.analytics.errors import SampleNotFoundError
from app.analytics.logstore import InMemoryLogStore, SqlLogStore, get_analytics_logstore
from app.analytics.retrieval import SqlSampleRetriever
from app.core import config
from app.models.assignment_restriction import AssignmentRestriction
from app.models.log_entry import LogEntry


def test_sql_retriever_resolves_every_kind(db, seed):
    retriever = SqlSampleRetriever(db)
    sample_id = seed["past_sub_id"]

    assert retriever.retrieve("assign_submission", sample_id).id == sample_id
    assert retriever.retrieve("assign", sample_id).id == seed["past_id"]
    assert retriever.retrieve("course", sample_id).id == seed["course_id"]
    assert retriever.retrieve("user", sample_id).id == seed["student_id"]

    enrol = retriever.retrieve("user_enrolments", sample_id)
    assert enrol.student_id == seed["student_id"]
    assert enrol.course_id == seed["course_id"]


def test_sql_retriever_rejects_unknown_lookups(db, seed):
    retriever = SqlSampleRetriever(db)

    with pytest.raises(SampleNotFoundError):
        retriever.retrieve("grade_items", seed["past_sub_id"])
    with pytest.raises(SampleNotFoundError):
        retriever.retrieve("assign", 999999)


def test_restricted_assignment_is_hidden_from_that_user_only(db, seed):
    retriever = SqlSampleRetriever(db)
    assert retriever.user_can_view(seed["past_id"], seed["student_id"])

    db.add(AssignmentRestriction(assignment_id=seed["past_id"], user_id=seed["student_id"]))
    db.commit()

    assert not retriever.user_can_view(seed["past_id"], seed["student_id"])
    assert retriever.user_can_view(seed["past_id"], seed["instructor_id"])
    assert retriever.user_can_view(seed["upcoming_id"], seed["student_id"])


def test_sql_log_store_orders_and_limits(db, seed):
    base = datetime.now(timezone.utc) - timedelta(days=10)
    for days in (3, 1, 2):
        db.add(LogEntry(
            event_name="\\core\\event\\course_viewed",
            crud="r",
            context_level=config.CONTEXT_MODULE,
            context_instance_id=seed["upcoming_id"],
            user_id=seed["student_id"],
            created_at=base + timedelta(days=days),
        ))
    db.commit()

    store = SqlLogStore(db)
    filters = {"event_name": "\\core\\event\\course_viewed", "user_id": seed["student_id"]}

    first = store.get_events_select(filters, "created_at ASC", 0, 1)
    assert len(first) == 1
    assert first[0].created_at.replace(tzinfo=None) == (base + timedelta(days=1)).replace(tzinfo=None)

    newest_two = store.get_events_select(filters, "created_at DESC", 0, 2)
    assert [e.created_at for e in newest_two] == sorted((e.created_at for e in newest_two), reverse=True)

    assert len(store.get_events_select(filters, "created_at ASC", 1)) == 2


def test_in_memory_log_store_offset_and_limit():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    entries = [SimpleNamespace(user_id=1, created_at=now + timedelta(minutes=m)) for m in (5, 1, 3)]
    store = InMemoryLogStore(entries)

    result = store.get_events_select({"user_id": 1}, "created_at ASC", offset=1, limit=1)
    assert [e.created_at for e in result] == [now + timedelta(minutes=3)]
    assert store.get_events_select({"user_id": 2}) == []


def test_log_store_can_be_switched_off(db, monkeypatch):
    assert isinstance(get_analytics_logstore(db), SqlLogStore)

    monkeypatch.setattr(config, "ANALYTICS_LOGSTORE", "")
    assert get_analytics_logstore(db) is None
