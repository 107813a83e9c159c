"""Pydantic request/response schemas."""

from scrob.api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    TokenCreatedResponse,
    TokenCreateRequest,
    TokenResponse,
)
from scrob.api.schemas.scrob import (
    NowPlayingRequest,
    NowPlayingResponse,
    ScrobRequest,
    ScrobResponse,
)
from scrob.api.schemas.stats import TopArtistResponse, TopTrackResponse

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "NowPlayingRequest",
    "NowPlayingResponse",
    "ScrobRequest",
    "ScrobResponse",
    "TokenCreateRequest",
    "TokenCreatedResponse",
    "TokenResponse",
    "TopArtistResponse",
    "TopTrackResponse",
]
