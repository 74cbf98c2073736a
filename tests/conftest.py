import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.deps import get_db
from app.db.base_class import Base
from app.db.init_db import init_db  # noqa: F401  registers every model
from app.main import app
from app.models.analytics_model import AnalyticsModel
from app.models.assignment import Assignment
from app.models.assignment_restriction import AssignmentRestriction
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.log_entry import LogEntry
from app.models.prediction import Prediction
from app.models.submission import Submission
from app.models.user import User
from app.core import config

TEST_DB_FILE = "test_late_submissions.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture()
def seed():
    """Seed a clean minimal dataset for each test and return the ids."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        for model in (
            Prediction, AnalyticsModel, LogEntry, AssignmentRestriction,
            Submission, Enrollment, Assignment, Course, User,
        ):
            db.query(model).delete()
        db.commit()

        now = datetime.now(timezone.utc)

        student = User(email="student1@example.com", full_name="Student One", role="student")
        instructor = User(email="instructor1@example.com", full_name="Instructor One", role="instructor")
        db.add_all([student, instructor])
        db.commit()

        course = Course(fullname="CS5004", starts_at=now - timedelta(days=60))
        db.add(course)
        db.commit()

        db.add(Enrollment(
            course_id=course.id,
            student_id=student.id,
            created_at=now - timedelta(days=40),
        ))

        # closed assignment, usable for training
        past = Assignment(
            course_id=course.id,
            name="HW1",
            opens_at=now - timedelta(days=30),
            due_at=now - timedelta(days=2),
        )
        # still open, usable for prediction
        upcoming = Assignment(
            course_id=course.id,
            name="HW2",
            opens_at=now - timedelta(days=5),
            due_at=now + timedelta(days=3),
        )
        db.add_all([past, upcoming])
        db.commit()

        past_sub = Submission(
            assignment_id=past.id,
            student_id=student.id,
            status="submitted",
            submitted_at=past.due_at - timedelta(days=1),
        )
        upcoming_sub = Submission(assignment_id=upcoming.id, student_id=student.id, status="new")
        db.add_all([past_sub, upcoming_sub])

        db.add(LogEntry(
            event_name=config.SUBMISSION_EVENT_NAME,
            crud=config.SUBMISSION_EVENT_CRUD,
            context_level=config.CONTEXT_MODULE,
            context_instance_id=past.id,
            user_id=student.id,
            created_at=past.due_at - timedelta(days=1),
        ))
        db.commit()

        yield {
            "student_id": student.id,
            "instructor_id": instructor.id,
            "course_id": course.id,
            "past_id": past.id,
            "upcoming_id": upcoming.id,
            "past_sub_id": past_sub.id,
            "upcoming_sub_id": upcoming_sub.id,
        }
    finally:
        db.close()


@pytest.fixture()
def db(seed):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(seed):
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
