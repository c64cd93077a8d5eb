"""Domain Types — identity types and enums shared across the entry lifecycle.

Invariants:
    - UsageId wraps the UUID of a sticker ledger row; users and content are
      opaque strings issued by external services
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and store in String columns without converters
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UsageId = NewType("UsageId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class RoundState(str, Enum):
    """Temporal state of a round, derived from wall-clock time only."""
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"


class CompetitionMediaType(str, Enum):
    """Which media kinds a competition accepts."""
    IMAGE_ONLY = "IMAGE_ONLY"
    VIDEO_ONLY = "VIDEO_ONLY"
    BOTH = "BOTH"


class MediaKind(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class StickerPosition(str, Enum):
    """Where the overlay is rendered on the media."""
    TOP_LEFT = "TOP_LEFT"
    TOP_RIGHT = "TOP_RIGHT"
    BOTTOM_LEFT = "BOTTOM_LEFT"
    BOTTOM_RIGHT = "BOTTOM_RIGHT"
    CENTER = "CENTER"


class FeedKind(str, Enum):
    """The two feed projections an entry can appear in."""
    COMPETITION = "competition"
    NORMAL = "normal"
