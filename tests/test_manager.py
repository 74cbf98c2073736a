from datetime import datetime, timezone

import pytest

from app.analytics import manager
from app.analytics.errors import ModelConfigurationError
from app.models.analytics_model import AnalyticsModel
from app.models.assignment import Assignment
from app.models.submission import Submission
from app.models.user import User
from app.schemas.analytics import PredictionCreate


def fixed_clock():
    return datetime.now(timezone.utc)


def make_model(db, **overrides) -> AnalyticsModel:
    fields = dict(target="late_assign_submission", time_splitting="singlerange", enabled=True)
    fields.update(overrides)
    model = AnalyticsModel(**fields)
    db.add(model)
    db.commit()
    db.refresh(model)
    return model


def test_training_labels_closed_assignments(db, seed):
    model = make_model(db)

    run = manager.gather_training_samples(db, model, clock=fixed_clock)

    assert run.labels == {seed["past_id"]: {seed["past_sub_id"]: 0}}
    assert run.rejected == {seed["upcoming_id"]: "Still open"}
    assert model.last_analysis_at is not None


def test_prediction_lists_pending_samples(db, seed):
    model = make_model(db)

    run = manager.gather_prediction_samples(db, model, clock=fixed_clock)

    assert run.samples == {seed["upcoming_id"]: [seed["upcoming_sub_id"]]}
    assert run.rejected == {seed["past_id"]: "Past due date"}


def test_empty_run_keeps_last_analysis_time(db, seed):
    db.query(Assignment).update({Assignment.team_submission: True})
    db.commit()
    model = make_model(db)

    run = manager.gather_training_samples(db, model, clock=fixed_clock)

    assert run.labels == {}
    assert len(run.rejected) == 2
    assert model.last_analysis_at is None


def test_disabled_model_is_refused(db, seed):
    model = make_model(db, enabled=False)

    with pytest.raises(ModelConfigurationError):
        manager.gather_training_samples(db, model)


def test_future_time_splitting_is_refused(db, seed):
    model = make_model(db, time_splitting="upcomingweek")

    with pytest.raises(ModelConfigurationError):
        manager.gather_prediction_samples(db, model)


def test_insights_only_show_flagged_students(db, seed):
    model = make_model(db)
    manager.record_predictions(db, model, [
        PredictionCreate(sample_id=seed["upcoming_sub_id"], context_id=seed["upcoming_id"], prediction=1, score=0.8),
    ])
    # recording again updates the stored prediction
    manager.record_predictions(db, model, [
        PredictionCreate(sample_id=seed["upcoming_sub_id"], context_id=seed["upcoming_id"], prediction=1, score=0.9),
    ])

    assignment = db.query(Assignment).filter(Assignment.id == seed["upcoming_id"]).first()
    insight = manager.get_insights(db, model, assignment, seed["instructor_id"])

    assert insight.subject == "Students at risk of missing the deadline in Assignment: HW2"
    assert len(insight.predictions) == 1
    row = insight.predictions[0]
    assert row.student_id == seed["student_id"]
    assert row.prediction.score == 0.9
    assert row.actions[0].action_name == "studentmessage"
    assert f"user={seed['instructor_id']}" in row.actions[0].url

    manager.record_predictions(db, model, [
        PredictionCreate(sample_id=seed["upcoming_sub_id"], context_id=seed["upcoming_id"], prediction=0, score=0.7),
    ])
    assert manager.get_insights(db, model, assignment, seed["instructor_id"]).predictions == []


def add_unenrolled_submitter(db, assignment_id, status) -> int:
    outsider = User(email="outsider@example.com", full_name="Outsider", role="student")
    db.add(outsider)
    db.commit()
    sub = Submission(assignment_id=assignment_id, student_id=outsider.id, status=status)
    db.add(sub)
    db.commit()
    return sub.id


def test_unenrolled_submitter_is_not_a_training_sample(db, seed):
    add_unenrolled_submitter(db, seed["past_id"], "submitted")
    model = make_model(db)

    run = manager.gather_training_samples(db, model, clock=fixed_clock)

    assert run.labels == {seed["past_id"]: {seed["past_sub_id"]: 0}}


def test_unenrolled_submitter_is_not_a_prediction_sample(db, seed):
    add_unenrolled_submitter(db, seed["upcoming_id"], "new")
    model = make_model(db)

    run = manager.gather_prediction_samples(db, model, clock=fixed_clock)

    assert run.samples == {seed["upcoming_id"]: [seed["upcoming_sub_id"]]}
