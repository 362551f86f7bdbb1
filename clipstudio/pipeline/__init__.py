from .job import (
    CancellationToken,
    ClipGenerationJob,
    GenerationOptions,
    JobCancelled,
    JobInputError,
    JobOutcome,
)
from .proposer import SegmentProposer
from .render import RenderStrategy
from .states import ClipStatus, JobStatus

__all__ = [
    "CancellationToken",
    "ClipGenerationJob",
    "GenerationOptions",
    "JobCancelled",
    "JobInputError",
    "JobOutcome",
    "SegmentProposer",
    "RenderStrategy",
    "ClipStatus",
    "JobStatus",
]
