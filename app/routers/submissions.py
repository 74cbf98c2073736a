from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core import config
from app.core.clock import as_utc
from app.core.deps import get_current_user, get_db
from app.models.assignment import Assignment
from app.models.enrollment import Enrollment
from app.models.log_entry import LogEntry
from app.models.submission import Submission
from app.models.user import User
from app.schemas.submission import SubmissionRead

router = APIRouter()


def _ensure_assignment_exists(db: Session, assignment_id: int) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return a


def _ensure_student_enrolled(db: Session, course_id: int, student_id: int) -> None:
    enrolled = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
        .first()
        is not None
    )
    if not enrolled:
        raise HTTPException(status_code=403, detail="Not enrolled in this course")


def _is_late(assignment: Assignment, submitted_at: datetime) -> bool:
    due = as_utc(assignment.due_at or assignment.cutoff_at)
    if due is None:
        return False
    return as_utc(submitted_at) > due


@router.post(
    "/assignments/{assignment_id}/submissions",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_student_enrolled(db, assignment.course_id, me.id)

    if assignment.no_submissions:
        raise HTTPException(status_code=400, detail="Assignment does not accept submissions")

    now = datetime.now(timezone.utc)

    sub = (
        db.query(Submission)
        .filter(
            and_(
                Submission.assignment_id == assignment_id,
                Submission.student_id == me.id,
            )
        )
        .first()
    )
    if not sub:
        sub = Submission(assignment_id=assignment_id, student_id=me.id)
        db.add(sub)

    sub.status = "submitted"
    sub.submitted_at = now

    # the late submission target labels samples from this event
    db.add(
        LogEntry(
            event_name=config.SUBMISSION_EVENT_NAME,
            crud=config.SUBMISSION_EVENT_CRUD,
            context_level=config.CONTEXT_MODULE,
            context_instance_id=assignment.id,
            user_id=me.id,
            created_at=now,
        )
    )

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sub)

    # attach computed fields
    sub.is_late = _is_late(assignment, now)
    return sub
