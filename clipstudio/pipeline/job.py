"""
Clip Generation Job
===================
Turns one ready source media asset into short clips:

1. Create the job row (pending)
2. Obtain a transcript (processing, 5%)
3. Ask the Segment Proposer for segments (20%)
4. Create one clip row per segment x export format (40% -> 70%)
5. Render every clip (70% -> 95%)
6. Finalize the job (completed, 100%)

Steps run strictly in order inside the caller's request. Insert and render
failures are isolated per item; anything else fails the job.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..config import get_settings
from ..logging_config import get_logger
from ..models.clip import Clip
from ..models.clip_job import ClipJob
from ..models.media import SourceMedia
from ..models.user import User
from .proposer import SegmentProposer
from .render import RenderStrategy
from .segments import Segment
from .states import JobStatus
from .store import ClipStore
from .transcript import Transcriber, obtain_transcript

logger = get_logger("pipeline.job")

CREATE_PHASE = (40, 30)  # start percent, span
RENDER_PHASE = (70, 25)


# ============================================================
# INPUT
# ============================================================

@dataclass
class GenerationOptions:
    auto_hook_detection: bool = True
    speaker_detection: bool = True
    high_energy_moments: bool = True
    export_formats: List[str] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        auto_hook_detection: Optional[bool] = None,
        speaker_detection: Optional[bool] = None,
        high_energy_moments: Optional[bool] = None,
        export_formats: Optional[Iterable[str]] = None,
    ) -> "GenerationOptions":
        """Apply defaults; export formats keep their order and lose duplicates."""
        if export_formats is None:
            export_formats = get_settings().default_export_formats

        formats: List[str] = []
        for fmt in export_formats:
            fmt = (fmt or "").strip()
            if fmt and fmt not in formats:
                formats.append(fmt)

        return cls(
            auto_hook_detection=True if auto_hook_detection is None else auto_hook_detection,
            speaker_detection=True if speaker_detection is None else speaker_detection,
            high_energy_moments=True if high_energy_moments is None else high_energy_moments,
            export_formats=formats,
        )


class JobInputError(Exception):
    """Invalid request; raised before any job row exists"""
    status_code = 400
    error_code = "INVALID_INPUT"


class NotAuthenticated(JobInputError):
    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self):
        super().__init__("Not authenticated")


class MissingSourceMedia(JobInputError):
    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self):
        super().__init__("sourceMediaId is required")


class SourceMediaNotFound(JobInputError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, media_id: str):
        super().__init__(f"Source media not found: {media_id}")


class SourceMediaNotReady(JobInputError):
    status_code = 409
    error_code = "MEDIA_NOT_READY"

    def __init__(self, status: str):
        super().__init__(f"Source media is not ready (status: {status})")


class NoPlayableUrl(JobInputError):
    status_code = 409
    error_code = "MEDIA_NOT_PLAYABLE"

    def __init__(self):
        super().__init__("No video URL available for source media")


# ============================================================
# CANCELLATION
# ============================================================

class JobCancelled(Exception):
    pass


class CancellationToken:
    """Deadline plus explicit cancel flag, checked between steps and items"""

    def __init__(self, timeout_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.timeout_seconds = timeout_seconds
        self.deadline = clock() + timeout_seconds if timeout_seconds else None
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def check(self):
        if self._cancelled:
            raise JobCancelled("Job was cancelled")
        if self.deadline is not None and self._clock() >= self.deadline:
            raise JobCancelled(f"Job exceeded time limit of {self.timeout_seconds:g}s")


# ============================================================
# PROGRESS + RESULTS
# ============================================================

class ProgressTracker:
    """Writes job progress, never letting the percentage go down"""

    def __init__(self, store: ClipStore, job: ClipJob):
        self.store = store
        self.job = job
        self.value = job.progress_percent or 0

    def advance(self, percent: int, step: str):
        percent = max(self.value, min(int(percent), 100))
        self.store.update_job(self.job, percent, JobStatus.PROCESSING, step)
        self.value = percent

    @staticmethod
    def interpolate(phase: Tuple[int, int], index: int, total: int) -> int:
        start, span = phase
        if total <= 0:
            return start
        return start + (index * span) // total


@dataclass
class ItemResult:
    key: str
    ok: bool
    error: Optional[str] = None


@dataclass
class JobOutcome:
    job_id: Optional[str]
    status: JobStatus
    segments: int = 0
    created: List[ItemResult] = field(default_factory=list)
    rendered: List[ItemResult] = field(default_factory=list)
    total_clips: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.COMPLETED

    @property
    def message(self) -> str:
        if self.succeeded:
            return f"Successfully generated {self.total_clips} clips"
        return self.error or "Clip generation failed"


# ============================================================
# ORCHESTRATOR
# ============================================================

class ClipGenerationJob:
    def __init__(
        self,
        db: Session,
        proposer: Optional[SegmentProposer] = None,
        renderer: Optional[RenderStrategy] = None,
        transcriber: Optional[Transcriber] = None,
        token: Optional[CancellationToken] = None,
        store: Optional[ClipStore] = None,
    ):
        self.db = db
        self.store = store or ClipStore(db)
        self.proposer = proposer or SegmentProposer.from_settings()
        self.renderer = renderer or RenderStrategy.from_settings()
        self.transcriber = transcriber
        self.token = token or CancellationToken(get_settings().job_timeout_seconds)

    def validate(self, user: Optional[User], source_media_id: Optional[str]) -> SourceMedia:
        if user is None:
            raise NotAuthenticated()
        if not source_media_id or not str(source_media_id).strip():
            raise MissingSourceMedia()

        media = self.db.get(SourceMedia, source_media_id)
        if media is None or media.user_id != user.id:
            raise SourceMediaNotFound(source_media_id)
        if media.status != "ready":
            raise SourceMediaNotReady(media.status)
        if not media.playable_url:
            raise NoPlayableUrl()
        return media

    def run(self, user: Optional[User], source_media_id: Optional[str], options: GenerationOptions) -> JobOutcome:
        """
        Run the whole pipeline for one source.

        JobInputError subclasses propagate before a job exists. Once the
        job row is created, the returned outcome is always terminal.
        """
        media = self.validate(user, source_media_id)
        job = self.store.create_job(user.id, media.id, options)
        outcome = JobOutcome(job_id=job.id, status=JobStatus.PENDING)

        try:
            self._execute(job, media, options, outcome)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error("job_aborted", error=e, job_id=outcome.job_id)
            outcome.status = JobStatus.FAILED
            outcome.error = message
            try:
                self.store.fail_job(outcome.job_id, message)
            except Exception as store_error:
                logger.error("job_fail_write_failed", error=store_error, job_id=outcome.job_id)

        return outcome

    def _execute(self, job: ClipJob, media: SourceMedia, options: GenerationOptions, outcome: JobOutcome):
        progress = ProgressTracker(self.store, job)

        self.token.check()
        progress.advance(5, "Analyzing video content")
        transcript = obtain_transcript(media, self.transcriber)

        self.token.check()
        progress.advance(20, "Detecting viral moments")
        segments = self.proposer.propose(transcript, media.duration_seconds or 0, options)
        outcome.segments = len(segments)
        logger.info("segments_ready", job_id=job.id, count=len(segments))

        self.token.check()
        progress.advance(CREATE_PHASE[0], "Creating clip records")
        clips = self._create_clips(job, segments, options.export_formats, progress, outcome)

        self.token.check()
        progress.advance(RENDER_PHASE[0], "Rendering clips")
        self._render_clips(media, clips, progress, outcome)

        outcome.total_clips = sum(1 for result in outcome.rendered if result.ok)
        self.store.complete_job(job, outcome.total_clips)
        outcome.status = JobStatus.COMPLETED

    def _create_clips(
        self,
        job: ClipJob,
        segments: List[Segment],
        export_formats: List[str],
        progress: ProgressTracker,
        outcome: JobOutcome,
    ) -> List[Clip]:
        clips: List[Clip] = []
        total = len(segments)

        for i, segment in enumerate(segments):
            self.token.check()
            progress.advance(
                ProgressTracker.interpolate(CREATE_PHASE, i, total),
                f"Creating clip {i + 1} of {total}",
            )
            for aspect_ratio in export_formats:
                result, clip = self._insert_clip(job, segment, aspect_ratio, i, position=len(clips))
                outcome.created.append(result)
                if clip is not None:
                    clips.append(clip)

        return clips

    def _insert_clip(
        self, job: ClipJob, segment: Segment, aspect_ratio: str, index: int, position: int
    ) -> Tuple[ItemResult, Optional[Clip]]:
        key = f"segment-{index}:{aspect_ratio}"
        try:
            clip = self.store.insert_clip(job, segment, aspect_ratio, position)
        except Exception as e:
            logger.warning("clip_insert_failed", job_id=job.id, item=key, error_message=str(e))
            return ItemResult(key, False, str(e)), None
        logger.debug("clip_created", job_id=job.id, clip_id=clip.id, aspect_ratio=aspect_ratio)
        return ItemResult(clip.id, True), clip

    def _render_clips(self, media: SourceMedia, clips: List[Clip], progress: ProgressTracker, outcome: JobOutcome):
        total = len(clips)
        for i, clip in enumerate(clips):
            self.token.check()
            progress.advance(
                ProgressTracker.interpolate(RENDER_PHASE, i, total),
                f"Rendering clip {i + 1} of {total}",
            )
            outcome.rendered.append(self._render_clip(media, clip))

    def _render_clip(self, media: SourceMedia, clip: Clip) -> ItemResult:
        clip_id = clip.id
        try:
            self.renderer.render(self.store, media, clip)
            return ItemResult(clip_id, True)
        except Exception as e:
            message = str(e) or "Render failed"
            logger.error("clip_render_failed", error=e, clip_id=clip_id)
            try:
                self.store.mark_clip_failed(clip, message)
            except Exception as store_error:
                logger.error("clip_fail_write_failed", error=store_error, clip_id=clip_id)
            return ItemResult(clip_id, False, message)
