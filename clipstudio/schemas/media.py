from pydantic import BaseModel, Field
from typing import Literal, Optional

MediaStatus = Literal["uploading", "processing", "ready", "failed"]


class MediaCreate(BaseModel):
    file_name: str
    file_url: Optional[str] = None
    download_url: Optional[str] = None
    stream_uid: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    transcript: Optional[str] = None
    status: MediaStatus = "uploading"


class MediaUpdate(BaseModel):
    """Fields the ingestion side fills in as a source is processed."""
    status: Optional[MediaStatus] = None
    file_url: Optional[str] = None
    download_url: Optional[str] = None
    stream_uid: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    transcript: Optional[str] = None
