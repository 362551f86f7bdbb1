from .auth import router as auth_router
from .clips import router as clips_router
from .media import router as media_router

__all__ = [
    "auth_router",
    "clips_router",
    "media_router",
]
