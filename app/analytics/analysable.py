from dataclasses import dataclass
from datetime import datetime

from app.core.clock import as_utc
from app.models.assignment import Assignment


@dataclass(frozen=True)
class AssignmentAnalysable:
    """An assignment seen as a unit of analysis.

    ``start`` is when submissions open (the course start when the assignment
    does not say) and ``end`` is the due date, or the cut-off date when there
    is no due date.
    """

    id: int
    name: str
    course_id: int
    start: datetime | None
    end: datetime | None
    visible: bool = True
    no_submissions: bool = False
    team_submission: bool = False

    @classmethod
    def from_assignment(cls, assignment: Assignment) -> "AssignmentAnalysable":
        start = assignment.opens_at or assignment.course.starts_at
        end = assignment.due_at or assignment.cutoff_at
        return cls(
            id=assignment.id,
            name=assignment.name,
            course_id=assignment.course_id,
            start=as_utc(start),
            end=as_utc(end),
            visible=bool(assignment.visible),
            no_submissions=bool(assignment.no_submissions),
            team_submission=bool(assignment.team_submission),
        )

    @property
    def context_name(self) -> str:
        return f"Assignment: {self.name}"
