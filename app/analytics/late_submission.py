"""Target predicting students who will submit an assignment late or not at all."""

import logging
from datetime import datetime
from urllib.parse import urlencode

from app.analytics.analysable import AssignmentAnalysable
from app.analytics.errors import NoLogStoreError
from app.analytics.strings import get_string
from app.analytics.target import BinaryTarget, SamplePrediction, build_action
from app.analytics.timesplitting import BeforeNow, TimeSplitting
from app.core import config
from app.core.clock import as_utc
from app.schemas.analytics import PredictionAction

logger = logging.getLogger(__name__)


class LateSubmissionTarget(BinaryTarget):
    name = "late_assign_submission"

    @classmethod
    def get_name(cls, lang="en"):
        return get_string("lateassignsubmission", lang=lang)

    def get_insight_subject(self, model_id, context_name, lang="en"):
        return get_string("studentsatrisk", context_name, lang=lang)

    @classmethod
    def can_use_timesplitting(cls, timesplitting: TimeSplitting) -> bool:
        return isinstance(timesplitting, BeforeNow)

    @classmethod
    def classes_description(cls, lang="en"):
        return [
            get_string("no", lang=lang),
            get_string("atriskmissingsubmission", lang=lang),
        ]

    def always_update_analysis_time(self) -> bool:
        # Only when analysables were processed
        return False

    def prediction_actions(
        self,
        prediction: SamplePrediction,
        actor_id: int,
        includedetailsaction: bool = False,
        isinsightuser: bool = False,
        lang: str = "en",
    ) -> list[PredictionAction]:
        student_id = prediction.get_sample_data()["user"].id

        query = urlencode({"user": actor_id, "id": student_id})
        message = build_action(
            "studentmessage",
            prediction,
            f"{config.MESSAGE_URL}?{query}",
            "t/message",
            get_string("sendmessage", lang=lang),
            primary=False,
            attributes={"target": "_blank"},
        )

        return [message] + super().prediction_actions(
            prediction, actor_id, includedetailsaction, isinsightuser, lang
        )

    def is_valid_analysable(self, analysable: AssignmentAnalysable, fortraining: bool = True) -> bool | str:
        now = self.now()
        reason = None

        if not analysable.end:
            reason = "No due date"
        elif not analysable.visible:
            reason = "Course module not visible"
        elif analysable.start and analysable.start > now:
            reason = "Not yet started"
        elif analysable.start and analysable.start >= analysable.end:
            # Weird but possible
            reason = "Wrong dates"
        elif analysable.no_submissions:
            reason = "No submission types specified"
        elif analysable.team_submission:
            # Not every team member gets a submission log entry
            reason = "sorry, this model can't use team submissions assignments yet"
        elif fortraining and analysable.end > now:
            reason = "Still open"
        elif not fortraining and analysable.end < now:
            reason = "Past due date"

        if reason:
            logger.debug("Analysable %s discarded: %s", analysable.id, reason)
            return reason
        return True

    def is_valid_sample(self, sample_id: int, analysable: AssignmentAnalysable, fortraining: bool = True) -> bool:
        enrol = self.retrieve("user_enrolments", sample_id)
        course = self.retrieve("course", sample_id)
        assign = self.retrieve("assign", sample_id)
        submission = self.retrieve("assign_submission", sample_id)

        due = as_utc(assign.due_at) or analysable.end
        if due is None:
            return False

        if not fortraining and submission.status != "new":
            # Already submitted, still fine for training
            return False

        course_start = as_utc(course.starts_at)
        enrol_start = as_utc(enrol.starts_at)
        enrol_end = as_utc(enrol.ends_at)
        enrol_created = as_utc(enrol.created_at)

        if enrol_end and (course_start > enrol_end or due > enrol_end):
            # Leftover enrolments from previous course runs
            return False

        if (enrol_start and enrol_start > due) or enrol_created > due:
            # Enrolled after the due date; courses reused without updating dates
            return False

        limit = due - config.ENROLMENT_MAX_SPAN
        if (enrol_start and enrol_start < limit) or (not enrol_start and enrol_created < limit):
            # Enrolments spanning more than an academic year are reused ones
            return False

        return True

    def calculate_sample(
        self,
        sample_id: int,
        analysable: AssignmentAnalysable,
        starttime: datetime | None = None,
        endtime: datetime | None = None,
    ) -> int | None:
        if self.logstore is None:
            raise NoLogStoreError("No available log stores")

        submission = self.retrieve("assign_submission", sample_id)

        if not self.retriever.user_can_view(analysable.id, submission.student_id):
            return None

        filters = {
            "user_id": submission.student_id,
            "context_level": config.CONTEXT_MODULE,
            "context_instance_id": analysable.id,
            "crud": config.SUBMISSION_EVENT_CRUD,
            "event_name": config.SUBMISSION_EVENT_NAME,
        }
        logs = self.logstore.get_events_select(filters, "created_at ASC", 0, 1)
        if not logs:
            return 1

        submitted_at = as_utc(logs[0].created_at)

        if analysable.start and submitted_at < analysable.start:
            # Older enrolment or wrong assignment dates
            return None

        if submitted_at > analysable.end:
            return 1

        return 0
