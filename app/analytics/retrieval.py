"""Read-only access to the records behind a sample.

A sample is an assignment submission; its id is the submission id. The
target asks for related records by kind, the same way for every backend.
"""

from typing import Any, Protocol

from sqlalchemy.orm import Session

from app.analytics.errors import SampleNotFoundError
from app.models.assignment import Assignment
from app.models.assignment_restriction import AssignmentRestriction
from app.models.enrollment import Enrollment
from app.models.submission import Submission

SAMPLE_KINDS = ("user_enrolments", "course", "assign", "assign_submission", "user")


class SampleRetriever(Protocol):
    def retrieve(self, kind: str, sample_id: int) -> Any: ...

    def user_can_view(self, analysable_id: int, user_id: int) -> bool: ...


class SqlSampleRetriever:
    def __init__(self, db: Session):
        self.db = db

    def _submission(self, sample_id: int) -> Submission:
        sub = self.db.query(Submission).filter(Submission.id == sample_id).first()
        if not sub:
            raise SampleNotFoundError(f"Sample {sample_id} not found")
        return sub

    def retrieve(self, kind: str, sample_id: int) -> Any:
        if kind not in SAMPLE_KINDS:
            raise SampleNotFoundError(f"Unknown sample data kind '{kind}'")

        sub = self._submission(sample_id)
        if kind == "assign_submission":
            return sub
        if kind == "assign":
            return sub.assignment
        if kind == "course":
            return sub.assignment.course
        if kind == "user":
            return sub.student

        enrol = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.student_id == sub.student_id,
                Enrollment.course_id == sub.assignment.course_id,
            )
            .first()
        )
        if not enrol:
            raise SampleNotFoundError(f"No enrolment for sample {sample_id}")
        return enrol

    def user_can_view(self, analysable_id: int, user_id: int) -> bool:
        assignment = self.db.query(Assignment).filter(Assignment.id == analysable_id).first()
        if not assignment or not assignment.visible:
            return False

        restricted = (
            self.db.query(AssignmentRestriction)
            .filter(
                AssignmentRestriction.assignment_id == analysable_id,
                AssignmentRestriction.user_id == user_id,
            )
            .first()
            is not None
        )
        return not restricted


class InMemorySampleRetriever:
    """Sample data held in plain dicts, keyed by sample id then kind."""

    def __init__(self, samples: dict[int, dict[str, Any]] | None = None,
                 hidden: set[tuple[int, int]] | None = None):
        self.samples = samples or {}
        # (analysable_id, user_id) pairs the user cannot see
        self.hidden = hidden or set()

    def add(self, sample_id: int, **records: Any) -> None:
        self.samples.setdefault(sample_id, {}).update(records)

    def hide(self, analysable_id: int, user_id: int) -> None:
        self.hidden.add((analysable_id, user_id))

    def retrieve(self, kind: str, sample_id: int) -> Any:
        try:
            return self.samples[sample_id][kind]
        except KeyError:
            raise SampleNotFoundError(f"No '{kind}' data for sample {sample_id}") from None

    def user_can_view(self, analysable_id: int, user_id: int) -> bool:
        return (analysable_id, user_id) not in self.hidden
