"""API schemas for now-playing notifications and scrobbles."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from scrob.domain.entities import Scrob


# Yo, these input schemas only check JSON TYPES! Presence, emptiness and ranges are checked by
# IngestionService so one bad entry in a batch is reported with its index (scrobbles[3].track)
# and the whole batch is rejected before anything is written. StrictInt keeps "123" and true
# from being coerced into timestamps.
class NowPlayingRequest(BaseModel):
    """Request schema for a now-playing notification."""

    model_config = ConfigDict(extra="ignore")

    artist: str | None = None
    track: str | None = None
    album: str | None = None


class NowPlayingResponse(BaseModel):
    """Acknowledgement of a now-playing notification."""

    status: Literal["accepted"] = "accepted"


class ScrobRequest(BaseModel):
    """Request schema for one play event."""

    model_config = ConfigDict(extra="ignore")

    artist: str | None = None
    track: str | None = None
    album: str | None = None
    duration: StrictInt | None = Field(default=None, description="Track length in seconds")
    timestamp: StrictInt | None = Field(
        default=None, description="When the track was played (epoch seconds)"
    )


class ScrobResponse(BaseModel):
    """Response schema for a recorded play event."""

    id: int
    artist: str
    track: str
    album: str | None
    duration: int | None
    timestamp: int
    created_at: int

    @classmethod
    def from_entity(cls, scrob: Scrob) -> "ScrobResponse":
        """Build from a domain scrob."""
        return cls(
            id=scrob.id,
            artist=scrob.artist,
            track=scrob.track,
            album=scrob.album,
            duration=scrob.duration,
            timestamp=scrob.timestamp,
            created_at=scrob.created_at,
        )
