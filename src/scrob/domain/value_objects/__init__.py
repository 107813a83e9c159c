"""Domain value objects."""

import time
from dataclasses import dataclass
from enum import Enum

# Result-size bounds shared by every aggregation.
LIMIT_MIN = 1
LIMIT_MAX = 100
DEFAULT_RECENT_LIMIT = 20
DEFAULT_TOP_LIMIT = 10

# Largest value a BIGINT column holds. Anything above it overflows in the driver.
INT64_MAX = 2**63 - 1


def epoch_now() -> int:
    """Get the current time as whole seconds since the Unix epoch."""
    return int(time.time())


# Hey future me - out-of-range limits are CLAMPED, never rejected! limit=0 behaves as 1,
# limit=1000 behaves as 100, None means "use the per-operation default". Don't add a
# Query(ge=1, le=100) constraint on the routers - that would turn this into a 422.
def clamp_limit(limit: int | None, default: int) -> int:
    """Clamp a requested result size into [LIMIT_MIN, LIMIT_MAX].

    Args:
        limit: Requested limit, or None to use the default
        default: Per-operation default

    Returns:
        Effective limit
    """
    if limit is None:
        limit = default
    return max(LIMIT_MIN, min(LIMIT_MAX, limit))


class TokenState(str, Enum):
    """Lifecycle state of an API token.

    The only transition is ACTIVE -> REVOKED; there is no way back.
    """

    ACTIVE = "active"
    REVOKED = "revoked"

    @classmethod
    def from_revoked_flag(cls, revoked: bool) -> "TokenState":
        """Map the stored boolean flag to a state."""
        return cls.REVOKED if revoked else cls.ACTIVE


@dataclass(frozen=True)
class TimeRange:
    """Inclusive play-timestamp window; None on either side means unbounded."""

    since: int | None = None
    until: int | None = None

    @property
    def is_unbounded(self) -> bool:
        """Check if no bound is set."""
        return self.since is None and self.until is None


__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "DEFAULT_TOP_LIMIT",
    "INT64_MAX",
    "LIMIT_MAX",
    "LIMIT_MIN",
    "TimeRange",
    "TokenState",
    "clamp_limit",
    "epoch_now",
]
