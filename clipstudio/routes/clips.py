"""
Clip Generation API Routes
==========================
Start a clip-generation job and read back jobs and clips.
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..auth import get_required_user
from ..config import get_settings
from ..database import get_db
from ..limiter import limiter
from ..logging_config import get_logger
from ..models.clip import Clip
from ..models.clip_job import ClipJob
from ..models.user import User
from ..pipeline import (
    ClipGenerationJob,
    GenerationOptions,
    JobInputError,
    RenderStrategy,
    SegmentProposer,
)
from ..responses import ApiException, job_failed, not_found
from ..schemas.clips import GenerateClipsOptions, GenerateClipsRequest, GenerateClipsResponse

settings = get_settings()
logger = get_logger("clips")

router = APIRouter(prefix="/api/clips", tags=["clips"])


# ============================================================
# DEPENDENCIES
# ============================================================

def get_segment_proposer() -> SegmentProposer:
    return SegmentProposer.from_settings()


def get_render_strategy() -> RenderStrategy:
    return RenderStrategy.from_settings()


def _get_owned_job(db: Session, job_id: str, user: User) -> ClipJob:
    job = db.query(ClipJob).filter(ClipJob.id == job_id, ClipJob.user_id == user.id).first()
    if not job:
        not_found("Clip job", job_id)
    return job


def _get_owned_clip(db: Session, clip_id: str, user: User) -> Clip:
    clip = db.query(Clip).filter(
        Clip.id == clip_id,
        Clip.user_id == user.id,
        Clip.deleted_at.is_(None),
    ).first()
    if not clip:
        not_found("Clip", clip_id)
    return clip


# ============================================================
# GENERATION
# ============================================================

@router.post("/generate")
@limiter.limit(settings.generate_rate_limit)
def generate_clips(
    request: Request,
    body: GenerateClipsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
    proposer: SegmentProposer = Depends(get_segment_proposer),
    renderer: RenderStrategy = Depends(get_render_strategy),
):
    """Run the clip pipeline for one source media and return the job summary."""
    opts = body.options or GenerateClipsOptions()
    options = GenerationOptions.build(
        auto_hook_detection=opts.auto_hook_detection,
        speaker_detection=opts.speaker_detection,
        high_energy_moments=opts.high_energy_moments,
        export_formats=opts.export_formats,
    )
    logger.info(
        "generate_clips_requested",
        user_id=current_user.id,
        source_media_id=body.source_media_id,
        export_formats=options.export_formats,
    )

    job = ClipGenerationJob(db, proposer=proposer, renderer=renderer)
    try:
        outcome = job.run(current_user, body.source_media_id, options)
    except JobInputError as e:
        raise ApiException(e.status_code, str(e), e.error_code)
    except Exception as e:
        # Nothing was created if the job row itself could not be written
        logger.error("generate_clips_failed", error=e, user_id=current_user.id)
        return job_failed(str(e) or "Unknown error", None)

    if not outcome.succeeded:
        return job_failed(outcome.message, outcome.job_id)

    return GenerateClipsResponse(
        job_id=outcome.job_id,
        status=outcome.status.value,
        total_clips=outcome.total_clips,
        message=outcome.message,
    ).model_dump(by_alias=True)


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
def list_jobs(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """List the current user's clip jobs, newest first."""
    query = db.query(ClipJob).filter(ClipJob.user_id == current_user.id)
    if status:
        query = query.filter(ClipJob.status == status)
    jobs = query.order_by(ClipJob.created_at.desc()).limit(limit).all()
    return {"jobs": [job.to_dict() for job in jobs], "total": len(jobs)}


@router.get("/jobs/{job_id}")
def get_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    return _get_owned_job(db, job_id, current_user).to_dict()


@router.get("/jobs/{job_id}/clips")
def get_job_clips(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Clips of one job in creation order, including failed ones."""
    job = _get_owned_job(db, job_id, current_user)
    clips = [clip.to_dict() for clip in job.clips if clip.deleted_at is None]
    return {"job_id": job.id, "clips": clips, "total": len(clips)}


# ============================================================
# CLIPS
# ============================================================

@router.get("")
def list_clips(
    source_media_id: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """List the current user's clips, highest virality first."""
    query = db.query(Clip).filter(Clip.user_id == current_user.id, Clip.deleted_at.is_(None))
    if source_media_id:
        query = query.filter(Clip.source_media_id == source_media_id)
    if status:
        query = query.filter(Clip.status == status)
    clips = query.order_by(Clip.virality_score.desc(), Clip.position).all()
    return [clip.to_dict() for clip in clips]


@router.get("/{clip_id}")
def get_clip(
    clip_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    return _get_owned_clip(db, clip_id, current_user).to_dict()


@router.delete("/{clip_id}")
@limiter.limit("30/minute")
def delete_clip(
    request: Request,
    clip_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Soft-delete a clip; it disappears from listings but the row stays."""
    clip = _get_owned_clip(db, clip_id, current_user)
    clip.deleted_at = datetime.now(timezone.utc)
    db.commit()
    return {"status": "ok", "message": f"Clip {clip_id} deleted"}
