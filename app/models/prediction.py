from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Prediction(Base):
    __tablename__ = "predictions"

    id = Column(Integer, primary_key=True, index=True)
    model_id = Column(Integer, ForeignKey("analytics_models.id", ondelete="CASCADE"), nullable=False, index=True)
    sample_id = Column(Integer, nullable=False)
    context_id = Column(Integer, nullable=False, index=True)

    prediction = Column(Integer, nullable=False)
    score = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("model_id", "sample_id", name="uq_prediction_model_sample"),
    )

    model = relationship("AnalyticsModel", back_populates="predictions")
