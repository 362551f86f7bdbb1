"""
Source media routes.

Ingestion registers a source here and marks it ready once it is
transcoded; clip generation only accepts ready sources.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ..database import get_db
from ..models.media import SourceMedia
from ..models.user import User
from ..auth import get_required_user
from ..responses import not_found
from ..schemas.media import MediaCreate, MediaUpdate

router = APIRouter(prefix="/api/media", tags=["media"])


def _get_owned_media(db: Session, media_id: str, user: User) -> SourceMedia:
    media = db.query(SourceMedia).filter(
        SourceMedia.id == media_id,
        SourceMedia.user_id == user.id,
    ).first()
    if not media:
        not_found("Source media", media_id)
    return media


@router.get("", response_model=List[dict])
def list_media(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """List the current user's source media, newest first."""
    query = db.query(SourceMedia).filter(SourceMedia.user_id == current_user.id)
    if status:
        query = query.filter(SourceMedia.status == status)
    return [m.to_dict() for m in query.order_by(SourceMedia.created_at.desc()).all()]


@router.get("/{media_id}", response_model=dict)
def get_media(
    media_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    return _get_owned_media(db, media_id, current_user).to_dict()


@router.post("", response_model=dict, status_code=201)
def create_media(
    media_data: MediaCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Register a source media record for the current user."""
    media = SourceMedia(user_id=current_user.id, **media_data.model_dump())
    db.add(media)
    db.commit()
    db.refresh(media)
    return media.to_dict()


@router.patch("/{media_id}", response_model=dict)
def update_media(
    media_id: str,
    media_data: MediaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Update ingestion fields (status, duration, transcript, URLs)."""
    media = _get_owned_media(db, media_id, current_user)
    for field, value in media_data.model_dump(exclude_unset=True).items():
        setattr(media, field, value)
    db.commit()
    db.refresh(media)
    return media.to_dict()
