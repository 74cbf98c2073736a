from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.analytics import manager
from app.analytics.analysable import AssignmentAnalysable
from app.analytics.errors import ModelConfigurationError, SampleNotFoundError
from app.analytics.late_submission import LateSubmissionTarget
from app.analytics.registry import TARGETS
from app.analytics.timesplitting import TIME_SPLITTINGS
from app.core.config import DEFAULT_LANG
from app.core.deps import get_current_user, get_db
from app.core.permissions import require_instructor
from app.models.analytics_model import AnalyticsModel
from app.models.assignment import Assignment
from app.models.submission import Submission
from app.models.user import User
from app.schemas.analytics import (
    AnalysableValidity,
    AnalyticsModelCreate,
    AnalyticsModelRead,
    InsightRead,
    PredictionCreate,
    PredictionRead,
    PredictionRunRead,
    SampleLabel,
    SampleValidity,
    TrainingRunRead,
)

router = APIRouter()

Mode = Literal["training", "prediction"]


def _ensure_assignment_exists(db: Session, assignment_id: int) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return a


def _ensure_model_exists(db: Session, model_id: int) -> AnalyticsModel:
    model = db.query(AnalyticsModel).filter(AnalyticsModel.id == model_id).first()
    if not model:
        raise HTTPException(status_code=404, detail="Model not found")
    return model


def _sample_analysable(db: Session, sample_id: int) -> AssignmentAnalysable:
    sub = db.query(Submission).filter(Submission.id == sample_id).first()
    if not sub:
        raise HTTPException(status_code=404, detail="Sample not found")
    return AssignmentAnalysable.from_assignment(sub.assignment)


@router.get("/analysables/{assignment_id}", response_model=AnalysableValidity)
def analysable_validity(
    assignment_id: int,
    mode: Mode = "training",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysable = AssignmentAnalysable.from_assignment(_ensure_assignment_exists(db, assignment_id))
    target = manager.build_target(db, LateSubmissionTarget.name)

    valid = target.is_valid_analysable(analysable, fortraining=mode == "training")
    if valid is True:
        return AnalysableValidity(assignment_id=assignment_id, valid=True)
    return AnalysableValidity(assignment_id=assignment_id, valid=False, reason=valid)


@router.get("/samples/{sample_id}", response_model=SampleValidity)
def sample_validity(
    sample_id: int,
    mode: Mode = "training",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysable = _sample_analysable(db, sample_id)
    if analysable.end is None:
        raise HTTPException(status_code=400, detail="Assignment has no due date")
    target = manager.build_target(db, LateSubmissionTarget.name)

    try:
        valid = target.is_valid_sample(sample_id, analysable, fortraining=mode == "training")
    except SampleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return SampleValidity(sample_id=sample_id, valid=valid)


@router.get("/samples/{sample_id}/label", response_model=SampleLabel)
def sample_label(
    sample_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysable = _sample_analysable(db, sample_id)
    if analysable.end is None:
        raise HTTPException(status_code=400, detail="Assignment has no due date")
    target = manager.build_target(db, LateSubmissionTarget.name)

    return SampleLabel(sample_id=sample_id, label=target.calculate_sample(sample_id, analysable))


@router.post("/models", response_model=AnalyticsModelRead, status_code=status.HTTP_201_CREATED)
def create_model(
    payload: AnalyticsModelCreate,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    if payload.target not in TARGETS:
        raise HTTPException(status_code=400, detail=f"Unknown target '{payload.target}'")
    if payload.time_splitting not in TIME_SPLITTINGS:
        raise HTTPException(status_code=400, detail=f"Unknown time splitting '{payload.time_splitting}'")

    target_class = TARGETS[payload.target]
    timesplitting = TIME_SPLITTINGS[payload.time_splitting]()
    if not target_class.can_use_timesplitting(timesplitting):
        raise HTTPException(
            status_code=400,
            detail=f"Time splitting '{payload.time_splitting}' can not be used with this target",
        )

    model = AnalyticsModel(
        target=payload.target,
        time_splitting=payload.time_splitting,
        enabled=payload.enabled,
    )
    db.add(model)
    db.commit()
    db.refresh(model)
    return model


@router.get("/models/{model_id}", response_model=AnalyticsModelRead)
def get_model(
    model_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _ensure_model_exists(db, model_id)


@router.post("/models/{model_id}/train", response_model=TrainingRunRead)
def train_model(
    model_id: int,
    course_id: int | None = None,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    model = _ensure_model_exists(db, model_id)
    try:
        run = manager.gather_training_samples(db, model, course_id=course_id)
    except ModelConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TrainingRunRead(
        model_id=model.id,
        labels=run.labels,
        rejected=run.rejected,
        last_analysis_at=model.last_analysis_at,
    )


@router.post("/models/{model_id}/predict", response_model=PredictionRunRead)
def predict_model(
    model_id: int,
    course_id: int | None = None,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    model = _ensure_model_exists(db, model_id)
    try:
        run = manager.gather_prediction_samples(db, model, course_id=course_id)
    except ModelConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PredictionRunRead(
        model_id=model.id,
        samples=run.samples,
        rejected=run.rejected,
        last_analysis_at=model.last_analysis_at,
    )


@router.post(
    "/models/{model_id}/predictions",
    response_model=list[PredictionRead],
    status_code=status.HTTP_201_CREATED,
)
def record_predictions(
    model_id: int,
    payload: list[PredictionCreate],
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    model = _ensure_model_exists(db, model_id)
    for row in payload:
        _ensure_assignment_exists(db, row.context_id)
        sub = db.query(Submission).filter(Submission.id == row.sample_id).first()
        if not sub:
            raise HTTPException(status_code=404, detail=f"Sample {row.sample_id} not found")
        if sub.assignment_id != row.context_id:
            raise HTTPException(
                status_code=400,
                detail=f"Sample {row.sample_id} does not belong to assignment {row.context_id}",
            )
    return manager.record_predictions(db, model, payload)


@router.get("/models/{model_id}/insights", response_model=InsightRead)
def model_insights(
    model_id: int,
    context_id: int,
    lang: str = DEFAULT_LANG,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    model = _ensure_model_exists(db, model_id)
    assignment = _ensure_assignment_exists(db, context_id)

    try:
        return manager.get_insights(db, model, assignment, instructor.id, lang=lang)
    except SampleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
