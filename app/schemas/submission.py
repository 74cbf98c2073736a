from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    status: str
    created_at: datetime
    submitted_at: Optional[datetime] = None

    # computed against the assignment due date
    is_late: bool = False

    class Config:
        from_attributes = True
