from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint

from app.db.base_class import Base


class AssignmentRestriction(Base):
    """Hides an otherwise visible assignment from a single user."""

    __tablename__ = "assignment_restrictions"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("assignment_id", "user_id", name="uq_restriction_assignment_user"),
    )
