from app.db.base_class import Base
from app.db.session import engine

# import models so SQLAlchemy registers them
from app.models import (  # noqa: F401
    analytics_model,
    assignment,
    assignment_restriction,
    course,
    enrollment,
    log_entry,
    prediction,
    submission,
    user,
)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
