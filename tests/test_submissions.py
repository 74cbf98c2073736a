from app.core import config
from app.models.log_entry import LogEntry
from app.models.submission import Submission
from tests.conftest import TestingSessionLocal


def auth_header(user_id: int) -> dict:
    return {"X-User-Id": str(user_id)}


def test_submit_marks_submission_and_logs_event(client, seed):
    r = client.post(
        f"/assignments/{seed['upcoming_id']}/submissions",
        headers=auth_header(seed["student_id"]),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["id"] == seed["upcoming_sub_id"]
    assert body["status"] == "submitted"
    assert body["is_late"] is False

    db = TestingSessionLocal()
    try:
        logs = (
            db.query(LogEntry)
            .filter(
                LogEntry.event_name == config.SUBMISSION_EVENT_NAME,
                LogEntry.context_instance_id == seed["upcoming_id"],
                LogEntry.user_id == seed["student_id"],
            )
            .all()
        )
        assert len(logs) == 1
        assert logs[0].crud == "u"
    finally:
        db.close()


def test_late_submission_is_allowed_and_marked_late(client, seed):
    db = TestingSessionLocal()
    try:
        db.query(Submission).filter(Submission.id == seed["past_sub_id"]).delete()
        db.commit()
    finally:
        db.close()

    r = client.post(
        f"/assignments/{seed['past_id']}/submissions",
        headers=auth_header(seed["student_id"]),
    )
    assert r.status_code == 201, r.text
    assert r.json()["is_late"] is True


def test_submit_requires_enrolment(client, seed):
    r = client.post(
        f"/assignments/{seed['upcoming_id']}/submissions",
        headers=auth_header(seed["instructor_id"]),
    )
    assert r.status_code == 403


def test_submit_unknown_assignment(client, seed):
    r = client.post("/assignments/999999/submissions", headers=auth_header(seed["student_id"]))
    assert r.status_code == 404


def test_submit_requires_user_header(client, seed):
    r = client.post(f"/assignments/{seed['upcoming_id']}/submissions")
    assert r.status_code == 401
