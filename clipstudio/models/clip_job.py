"""
Clip job model: one invocation of the clip-generation pipeline.
"""
import uuid

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class ClipJob(Base):
    __tablename__ = "clip_jobs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    source_media_id = Column(String(36), ForeignKey("source_media.id"), nullable=False, index=True)
    status = Column(String(20), default="pending", index=True)  # pending, processing, completed, failed
    progress_percent = Column(Integer, default=0)  # 0-100
    current_step = Column(String(255), nullable=True)
    options = Column(JSON, nullable=True)
    total_clips = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="clip_jobs")
    clips = relationship("Clip", back_populates="job", order_by="Clip.position")

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "source_media_id": self.source_media_id,
            "status": self.status,
            "progress_percent": self.progress_percent,
            "current_step": self.current_step,
            "options": self.options,
            "total_clips": self.total_clips,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
