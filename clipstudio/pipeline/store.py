"""
Datastore writes made by the clip pipeline.

Every write commits on its own; a failed commit is rolled back and
re-raised so the session stays usable for the caller's next write.
"""
from dataclasses import asdict
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy.orm import Session

from ..logging_config import get_logger
from ..models.clip import Clip
from ..models.clip_job import ClipJob
from .render import RenderOutcome, dimensions_for
from .segments import Segment
from .states import ClipStatus, JobStatus, check_transition

if TYPE_CHECKING:
    from .job import GenerationOptions

logger = get_logger("pipeline.store")


def _now():
    return datetime.now(timezone.utc)


class ClipStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------

    def create_job(self, user_id: int, source_media_id: str, options: "GenerationOptions") -> ClipJob:
        job = ClipJob(
            user_id=user_id,
            source_media_id=source_media_id,
            status=JobStatus.PENDING.value,
            progress_percent=0,
            current_step="Initializing",
            options=asdict(options),
        )
        self.db.add(job)
        self._commit()
        self.db.refresh(job)
        logger.info("job_created", job_id=job.id, user_id=user_id, source_media_id=source_media_id)
        return job

    def update_job(self, job: ClipJob, progress: int, status: JobStatus, step: str):
        check_transition(JobStatus(job.status), status)
        if status == JobStatus.PROCESSING and job.started_at is None:
            job.started_at = _now()
        job.status = status.value
        job.progress_percent = progress
        job.current_step = step
        self._commit()

    def complete_job(self, job: ClipJob, total_clips: int):
        check_transition(JobStatus(job.status), JobStatus.COMPLETED)
        job.status = JobStatus.COMPLETED.value
        job.progress_percent = 100
        job.current_step = "Complete"
        job.total_clips = total_clips
        job.completed_at = _now()
        self._commit()
        logger.info("job_completed", job_id=job.id, total_clips=total_clips)

    def fail_job(self, job_id: str, message: str) -> Optional[ClipJob]:
        # Re-read: the failure may have left the in-memory row stale
        self.db.rollback()
        job = self.db.get(ClipJob, job_id)
        if job is None:
            return None
        check_transition(JobStatus(job.status), JobStatus.FAILED)
        job.status = JobStatus.FAILED.value
        job.error_message = message
        job.completed_at = _now()
        self._commit()
        logger.error("job_failed", job_id=job_id, error_message=message)
        return job

    # ------------------------------------------------------------
    # Clips
    # ------------------------------------------------------------

    def insert_clip(self, job: ClipJob, segment: Segment, aspect_ratio: str, position: int) -> Clip:
        width, height = dimensions_for(aspect_ratio)
        clip = Clip(
            user_id=job.user_id,
            source_media_id=job.source_media_id,
            clip_job_id=job.id,
            position=position,
            start_seconds=segment.start_time,
            end_seconds=segment.end_time,
            aspect_ratio=aspect_ratio,
            width=width,
            height=height,
            status=ClipStatus.PROCESSING.value,
            title=segment.title,
            description=segment.description,
            suggested_caption=segment.hook,
            virality_score=segment.virality_score,
            hook_score=segment.virality_score,
            transcript_snippet=segment.transcript_snippet or None,
        )
        self.db.add(clip)
        self._commit()
        self.db.refresh(clip)
        return clip

    def mark_clip_ready(self, clip: Clip, outcome: RenderOutcome):
        check_transition(ClipStatus(clip.status), ClipStatus.READY)
        clip.status = ClipStatus.READY.value
        clip.playback_url = outcome.playback_url
        clip.thumbnail_url = outcome.thumbnail_url
        clip.stream_url = outcome.stream_url
        clip.render_method = outcome.method
        self._commit()

    def mark_clip_failed(self, clip: Clip, message: str):
        self.db.refresh(clip)
        check_transition(ClipStatus(clip.status), ClipStatus.FAILED)
        clip.status = ClipStatus.FAILED.value
        clip.error_message = message
        self._commit()
