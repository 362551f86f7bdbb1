from .auth import UserCreate, UserLogin, UserResponse, TokenResponse, RefreshRequest
from .clips import GenerateClipsOptions, GenerateClipsRequest, GenerateClipsResponse
from .media import MediaCreate, MediaUpdate

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "TokenResponse", "RefreshRequest",
    "GenerateClipsOptions", "GenerateClipsRequest", "GenerateClipsResponse",
    "MediaCreate", "MediaUpdate",
]
