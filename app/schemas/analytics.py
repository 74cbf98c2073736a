from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ActionIcon(BaseModel):
    pix: str
    alt: str


class PredictionAction(BaseModel):
    action_name: str
    prediction_id: int
    url: str
    icon: ActionIcon
    text: str
    primary: bool = True
    attributes: dict[str, str] = Field(default_factory=dict)


class AnalysableValidity(BaseModel):
    assignment_id: int
    valid: bool
    reason: Optional[str] = None


class SampleValidity(BaseModel):
    sample_id: int
    valid: bool


class SampleLabel(BaseModel):
    sample_id: int
    label: Optional[int] = None


class AnalyticsModelCreate(BaseModel):
    target: str = "late_assign_submission"
    time_splitting: str = "singlerange"
    enabled: bool = True


class AnalyticsModelRead(BaseModel):
    id: int
    target: str
    time_splitting: str
    enabled: bool
    last_analysis_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TrainingRunRead(BaseModel):
    model_id: int
    labels: dict[int, dict[int, int]]
    rejected: dict[int, str]
    last_analysis_at: Optional[datetime] = None


class PredictionRunRead(BaseModel):
    model_id: int
    samples: dict[int, list[int]]
    rejected: dict[int, str]
    last_analysis_at: Optional[datetime] = None


class PredictionCreate(BaseModel):
    sample_id: int
    context_id: int
    prediction: int = Field(ge=0, le=1)
    score: float = Field(ge=0, le=1)


class PredictionRead(BaseModel):
    id: int
    sample_id: int
    context_id: int
    prediction: int
    score: float
    created_at: datetime

    class Config:
        from_attributes = True


class InsightPrediction(BaseModel):
    prediction: PredictionRead
    student_id: int
    actions: list[PredictionAction]


class InsightRead(BaseModel):
    model_id: int
    context_id: int
    subject: str
    predictions: list[InsightPrediction]
