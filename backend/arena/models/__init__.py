"""ORM Models — SQLAlchemy declarative models for the entry lifecycle.

Invariants:
    - All models inherit from Base (db/base.py)
    - Cross-entity references are foreign keys resolved by query; content items
      live in an external service and are referenced by opaque id only

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so metadata is complete before create_all/autogenerate
"""

from arena.models.competition import Competition  # noqa: F401
from arena.models.round import Round  # noqa: F401
from arena.models.entry import Entry  # noqa: F401
from arena.models.sticker import PromotionSticker, StickerUsage  # noqa: F401
