from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class AnalyticsModel(Base):
    __tablename__ = "analytics_models"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    target: Mapped[str] = mapped_column(String(100), nullable=False)
    time_splitting: Mapped[str] = mapped_column(String(100), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_analysis_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    predictions = relationship(
        "Prediction", back_populates="model", cascade="all, delete-orphan"
    )
