import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Activity(Base):
    """Co-curriculum activity logged for a student."""

    __tablename__ = "activities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    # Sports, Academic, Arts, Community Service, Leadership, Cultural, Technology, Other
    category = Column(String(50), nullable=False)
    date = Column(Date, nullable=False)
    added_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id])
    adder = relationship("User", foreign_keys=[added_by])
