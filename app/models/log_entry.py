from sqlalchemy import Column, DateTime, Integer, String, func

from app.db.base_class import Base


class LogEntry(Base):
    __tablename__ = "log_entries"

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(255), nullable=False, index=True)
    crud = Column(String(1), nullable=False)
    context_level = Column(Integer, nullable=False)
    context_instance_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
