"""
Clip model: one segment rendered at one aspect ratio.
"""
import uuid

from sqlalchemy import Column, Integer, String, DateTime, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class Clip(Base):
    __tablename__ = "clips"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    source_media_id = Column(String(36), ForeignKey("source_media.id"), nullable=False, index=True)
    clip_job_id = Column(String(36), ForeignKey("clip_jobs.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # creation order within the job
    start_seconds = Column(Float, nullable=False)
    end_seconds = Column(Float, nullable=False)
    aspect_ratio = Column(String(10), nullable=False)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    status = Column(String(20), default="processing", index=True)  # processing, ready, failed
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    suggested_caption = Column(Text, nullable=True)
    virality_score = Column(Float, nullable=True)
    hook_score = Column(Float, nullable=True)
    transcript_snippet = Column(Text, nullable=True)
    template_id = Column(String(50), default="default")
    playback_url = Column(String(2000), nullable=True)
    thumbnail_url = Column(String(2000), nullable=True)
    stream_url = Column(String(2000), nullable=True)
    render_method = Column(String(20), nullable=True)  # stream, fragment
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    job = relationship("ClipJob", back_populates="clips")

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds

    def to_dict(self):
        return {
            "id": self.id,
            "clip_job_id": self.clip_job_id,
            "source_media_id": self.source_media_id,
            "start_seconds": self.start_seconds,
            "end_seconds": self.end_seconds,
            "duration": self.duration,
            "aspect_ratio": self.aspect_ratio,
            "width": self.width,
            "height": self.height,
            "status": self.status,
            "title": self.title,
            "description": self.description,
            "suggested_caption": self.suggested_caption,
            "virality_score": self.virality_score,
            "hook_score": self.hook_score,
            "transcript_snippet": self.transcript_snippet,
            "playback_url": self.playback_url,
            "thumbnail_url": self.thumbnail_url,
            "stream_url": self.stream_url,
            "render_method": self.render_method,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
