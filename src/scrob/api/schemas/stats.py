"""API schemas for play-count rankings."""

from pydantic import BaseModel


class TopArtistResponse(BaseModel):
    """An artist with its play count."""

    name: str
    count: int


class TopTrackResponse(BaseModel):
    """A track with its play count."""

    artist: str
    track: str
    count: int
