"""Prediction targets.

A target names what a model predicts and owns the rules that decide which
analysables and samples take part, plus how each sample gets its label.
"""

import abc
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.analytics.analysable import AssignmentAnalysable
from app.analytics.logstore import LogStore
from app.analytics.retrieval import SampleRetriever
from app.analytics.strings import get_string
from app.analytics.timesplitting import TimeSplitting
from app.core.clock import Clock, system_clock
from app.schemas.analytics import ActionIcon, PredictionAction

logger = logging.getLogger(__name__)


@dataclass
class SamplePrediction:
    id: int
    sample_id: int
    context_id: int
    value: int
    score: float
    sample_data: dict[str, Any] = field(default_factory=dict)

    def get_sample_data(self) -> dict[str, Any]:
        return self.sample_data


def build_action(
    action_name: str,
    prediction: SamplePrediction,
    url: str,
    pix: str,
    text: str,
    primary: bool = True,
    attributes: dict[str, str] | None = None,
) -> PredictionAction:
    return PredictionAction(
        action_name=action_name,
        prediction_id=prediction.id,
        url=url,
        icon=ActionIcon(pix=pix, alt=text),
        text=text,
        primary=primary,
        attributes=attributes or {},
    )


class Target(abc.ABC):
    name = ""

    def __init__(
        self,
        retriever: SampleRetriever,
        logstore: LogStore | None = None,
        clock: Clock = system_clock,
    ):
        self.retriever = retriever
        self.logstore = logstore
        self.clock = clock

    def now(self) -> datetime:
        return self.clock()

    def retrieve(self, kind: str, sample_id: int) -> Any:
        return self.retriever.retrieve(kind, sample_id)

    @classmethod
    @abc.abstractmethod
    def get_name(cls, lang: str = "en") -> str:
        ...

    @classmethod
    @abc.abstractmethod
    def classes_description(cls, lang: str = "en") -> list[str]:
        ...

    @abc.abstractmethod
    def is_valid_analysable(self, analysable: AssignmentAnalysable, fortraining: bool = True) -> bool | str:
        """Return True, or a reason string when the analysable is discarded."""

    def is_valid_sample(self, sample_id: int, analysable: AssignmentAnalysable, fortraining: bool = True) -> bool:
        return True

    @abc.abstractmethod
    def calculate_sample(
        self,
        sample_id: int,
        analysable: AssignmentAnalysable,
        starttime: datetime | None = None,
        endtime: datetime | None = None,
    ) -> int | None:
        """Label for one sample, None to leave it out."""

    def get_insight_subject(self, model_id: int, context_name: str, lang: str = "en") -> str:
        return get_string("insightmessagesubject", context_name, lang=lang)

    @classmethod
    def can_use_timesplitting(cls, timesplitting: TimeSplitting) -> bool:
        return True

    def always_update_analysis_time(self) -> bool:
        return True

    def triggers_callback(self, predicted_value: int) -> bool:
        return True

    def prediction_actions(
        self,
        prediction: SamplePrediction,
        actor_id: int,
        includedetailsaction: bool = False,
        isinsightuser: bool = False,
        lang: str = "en",
    ) -> list[PredictionAction]:
        actions = []

        if includedetailsaction and not isinsightuser:
            actions.append(build_action(
                "predictiondetails",
                prediction,
                f"/analytics/predictions/{prediction.id}",
                "t/preview",
                get_string("viewdetails", lang=lang),
            ))

        actions.append(build_action(
            "useful",
            prediction,
            f"/analytics/predictions/{prediction.id}/actions/useful",
            "t/check",
            get_string("useful", lang=lang),
            primary=False,
        ))
        actions.append(build_action(
            "notuseful",
            prediction,
            f"/analytics/predictions/{prediction.id}/actions/notuseful",
            "t/delete",
            get_string("notuseful", lang=lang),
            primary=False,
        ))
        return actions


class BinaryTarget(Target):
    """Targets with two classes, 0 and 1; class 1 is the one worth reporting."""

    @staticmethod
    def get_classes() -> list[int]:
        return [0, 1]

    @staticmethod
    def is_linear() -> bool:
        return False

    def ignored_predicted_classes(self) -> list[int]:
        return [0]

    def triggers_callback(self, predicted_value: int) -> bool:
        return predicted_value not in self.ignored_predicted_classes()

    def calculate(
        self,
        sample_ids,
        analysable: AssignmentAnalysable,
        starttime: datetime | None = None,
        endtime: datetime | None = None,
    ) -> dict[int, int]:
        labels = {}
        for sample_id in sample_ids:
            label = self.calculate_sample(sample_id, analysable, starttime, endtime)
            if label is None:
                logger.debug("Sample %s of analysable %s discarded", sample_id, analysable.id)
                continue
            labels[sample_id] = label
        return labels
