"""
Source media model: long-form assets that clips are cut from.

Rows are written by the ingestion side (upload, transcode, transcription);
the clip pipeline only reads them.
"""
import uuid

from sqlalchemy import Column, Integer, String, DateTime, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class SourceMedia(Base):
    __tablename__ = "source_media"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    status = Column(String(20), default="uploading", index=True)  # uploading, processing, ready, failed
    duration_seconds = Column(Float, nullable=True)
    transcript = Column(Text, nullable=True)
    file_url = Column(String(1000), nullable=True)
    download_url = Column(String(1000), nullable=True)  # preferred over file_url when present
    stream_uid = Column(String(64), nullable=True)  # Cloudflare Stream video UID
    thumbnail_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="media")

    @property
    def playable_url(self):
        return self.download_url or self.file_url

    def to_dict(self):
        return {
            "id": self.id,
            "file_name": self.file_name,
            "status": self.status,
            "duration_seconds": self.duration_seconds,
            "has_transcript": bool(self.transcript),
            "file_url": self.file_url,
            "download_url": self.download_url,
            "stream_uid": self.stream_uid,
            "thumbnail_url": self.thumbnail_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
