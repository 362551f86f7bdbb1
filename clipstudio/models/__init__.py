from .user import User
from .media import SourceMedia
from .clip_job import ClipJob
from .clip import Clip

__all__ = [
    "User",
    "SourceMedia",
    "ClipJob",
    "Clip",
]
