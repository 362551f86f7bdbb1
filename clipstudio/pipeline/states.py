"""
Status enums for clip jobs and clips, with the transitions each allows.
"""
from enum import Enum
from typing import Dict, FrozenSet, Union


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ClipStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class InvalidTransition(Exception):
    """Raised when a status write would move an entity backwards or out of a terminal state"""

    def __init__(self, current: Enum, target: Enum):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {type(current).__name__} from {current.value} to {target.value}")


JOB_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    # processing -> processing carries progress updates
    JobStatus.PROCESSING: frozenset({JobStatus.PROCESSING, JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}

CLIP_TRANSITIONS: Dict[ClipStatus, FrozenSet[ClipStatus]] = {
    ClipStatus.PROCESSING: frozenset({ClipStatus.READY, ClipStatus.FAILED}),
    ClipStatus.READY: frozenset(),
    ClipStatus.FAILED: frozenset(),
}


def check_transition(current: Union[JobStatus, ClipStatus], target: Union[JobStatus, ClipStatus]):
    """Return target if current -> target is allowed, else raise InvalidTransition."""
    table = JOB_TRANSITIONS if isinstance(current, JobStatus) else CLIP_TRANSITIONS
    if type(current) is not type(target) or target not in table[current]:
        raise InvalidTransition(current, target)
    return target
