"""Runs targets over the assignments stored in the database.

Model training itself happens elsewhere; this module gathers the labelled
samples a trainer needs, the samples still waiting for a prediction, and
turns recorded predictions into insights.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.analytics.analysable import AssignmentAnalysable
from app.analytics.errors import ModelConfigurationError
from app.analytics.logstore import get_analytics_logstore
from app.analytics.registry import get_target
from app.analytics.retrieval import SqlSampleRetriever
from app.analytics.target import SamplePrediction, Target
from app.analytics.timesplitting import TimeSplitting, get_time_splitting
from app.core.clock import Clock, system_clock
from app.models.analytics_model import AnalyticsModel
from app.models.assignment import Assignment
from app.models.enrollment import Enrollment
from app.models.prediction import Prediction
from app.models.submission import Submission
from app.schemas.analytics import InsightPrediction, InsightRead, PredictionCreate, PredictionRead

logger = logging.getLogger(__name__)


@dataclass
class TrainingRun:
    labels: dict[int, dict[int, int]] = field(default_factory=dict)
    rejected: dict[int, str] = field(default_factory=dict)


@dataclass
class PredictionRun:
    samples: dict[int, list[int]] = field(default_factory=dict)
    rejected: dict[int, str] = field(default_factory=dict)


def get_analysables(db: Session, course_id: int | None = None) -> list[AssignmentAnalysable]:
    q = db.query(Assignment)
    if course_id is not None:
        q = q.filter(Assignment.course_id == course_id)
    return [AssignmentAnalysable.from_assignment(a) for a in q.order_by(Assignment.id.asc()).all()]


def get_sample_ids(db: Session, analysable_id: int) -> list[int]:
    # only students enrolled in the course become samples
    rows = (
        db.query(Submission.id)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .join(
            Enrollment,
            and_(
                Enrollment.student_id == Submission.student_id,
                Enrollment.course_id == Assignment.course_id,
            ),
        )
        .filter(Submission.assignment_id == analysable_id)
        .order_by(Submission.id.asc())
        .all()
    )
    return [r.id for r in rows]


def build_target(db: Session, target_name: str, clock: Clock = system_clock) -> Target:
    return get_target(
        target_name,
        retriever=SqlSampleRetriever(db),
        logstore=get_analytics_logstore(db),
        clock=clock,
    )


def check_model(model: AnalyticsModel, target: Target) -> TimeSplitting:
    if not model.enabled:
        raise ModelConfigurationError(f"Model {model.id} is not enabled")

    try:
        timesplitting = get_time_splitting(model.time_splitting)
    except ValueError as e:
        raise ModelConfigurationError(str(e)) from e

    if not target.can_use_timesplitting(timesplitting):
        raise ModelConfigurationError(
            f"Target '{model.target}' can not use time splitting '{model.time_splitting}'"
        )
    return timesplitting


def _update_analysis_time(db: Session, model: AnalyticsModel, target: Target, processed: bool, clock: Clock) -> None:
    if not processed and not target.always_update_analysis_time():
        logger.info("Model %s: nothing processed, keeping last analysis time", model.id)
        return

    model.last_analysis_at = clock()
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def gather_training_samples(
    db: Session,
    model: AnalyticsModel,
    clock: Clock = system_clock,
    course_id: int | None = None,
) -> TrainingRun:
    target = build_target(db, model.target, clock)
    timesplitting = check_model(model, target)
    now = clock()

    run = TrainingRun()
    for analysable in get_analysables(db, course_id):
        valid = target.is_valid_analysable(analysable, fortraining=True)
        if valid is not True:
            run.rejected[analysable.id] = valid
            continue

        sample_ids = [
            s for s in get_sample_ids(db, analysable.id)
            if target.is_valid_sample(s, analysable, fortraining=True)
        ]
        starttime, endtime = timesplitting.get_range(analysable, now)
        run.labels[analysable.id] = target.calculate(sample_ids, analysable, starttime, endtime)

    logger.info(
        "Model %s training: %d analysables processed, %d rejected",
        model.id, len(run.labels), len(run.rejected),
    )
    _update_analysis_time(db, model, target, bool(run.labels), clock)
    return run


def gather_prediction_samples(
    db: Session,
    model: AnalyticsModel,
    clock: Clock = system_clock,
    course_id: int | None = None,
) -> PredictionRun:
    target = build_target(db, model.target, clock)
    check_model(model, target)

    run = PredictionRun()
    for analysable in get_analysables(db, course_id):
        valid = target.is_valid_analysable(analysable, fortraining=False)
        if valid is not True:
            run.rejected[analysable.id] = valid
            continue

        run.samples[analysable.id] = [
            s for s in get_sample_ids(db, analysable.id)
            if target.is_valid_sample(s, analysable, fortraining=False)
        ]

    logger.info(
        "Model %s prediction: %d analysables processed, %d rejected",
        model.id, len(run.samples), len(run.rejected),
    )
    _update_analysis_time(db, model, target, bool(run.samples), clock)
    return run


def record_predictions(db: Session, model: AnalyticsModel, rows: list[PredictionCreate]) -> list[Prediction]:
    saved = []
    for row in rows:
        existing = (
            db.query(Prediction)
            .filter(Prediction.model_id == model.id, Prediction.sample_id == row.sample_id)
            .first()
        )
        if existing:
            existing.context_id = row.context_id
            existing.prediction = row.prediction
            existing.score = row.score
            saved.append(existing)
            continue

        p = Prediction(
            model_id=model.id,
            sample_id=row.sample_id,
            context_id=row.context_id,
            prediction=row.prediction,
            score=row.score,
        )
        db.add(p)
        saved.append(p)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    for p in saved:
        db.refresh(p)
    return saved


def get_insights(
    db: Session,
    model: AnalyticsModel,
    assignment: Assignment,
    actor_id: int,
    lang: str = "en",
    clock: Clock = system_clock,
) -> InsightRead:
    context_id = assignment.id
    analysable = AssignmentAnalysable.from_assignment(assignment)
    target = build_target(db, model.target, clock)

    predictions = (
        db.query(Prediction)
        .filter(Prediction.model_id == model.id, Prediction.context_id == context_id)
        .order_by(Prediction.score.desc(), Prediction.id.asc())
        .all()
    )

    rows = []
    for p in predictions:
        if not target.triggers_callback(p.prediction):
            continue

        student = target.retrieve("user", p.sample_id)
        sample = SamplePrediction(
            id=p.id,
            sample_id=p.sample_id,
            context_id=p.context_id,
            value=p.prediction,
            score=p.score,
            sample_data={"user": student},
        )
        rows.append(InsightPrediction(
            prediction=PredictionRead.model_validate(p),
            student_id=student.id,
            actions=target.prediction_actions(sample, actor_id, includedetailsaction=True, lang=lang),
        ))

    return InsightRead(
        model_id=model.id,
        context_id=context_id,
        subject=target.get_insight_subject(model.id, analysable.context_name, lang),
        predictions=rows,
    )
