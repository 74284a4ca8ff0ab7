"""
BrushQuest models

- models: domain enums and value types
- drafts: schemas for LLM-generated payloads
- requests: HTTP request bodies
"""

from .models import (
    StoryStatus,
    ReferenceType,
    ReferenceSource,
    BrushingZone,
    Expression,
    ShotType,
    CameraAngle,
    CharacterType,
    SpriteStatus,
    CollectibleType,
    Rarity,
    Reference,
    DecoratedSegment,
    GeneratedChapter,
)
from .drafts import (
    WorldDraft,
    OutlineEntry,
    StoryPitchDraft,
    StoryBibleDraft,
    ChapterDraft,
    SegmentDraft,
    ReferenceDraft,
    SegmentTags,
    StoryboardShot,
    PetDraft,
)

__all__ = [
    "StoryStatus",
    "ReferenceType",
    "ReferenceSource",
    "BrushingZone",
    "Expression",
    "ShotType",
    "CameraAngle",
    "CharacterType",
    "SpriteStatus",
    "CollectibleType",
    "Rarity",
    "Reference",
    "DecoratedSegment",
    "GeneratedChapter",
    "WorldDraft",
    "OutlineEntry",
    "StoryPitchDraft",
    "StoryBibleDraft",
    "ChapterDraft",
    "SegmentDraft",
    "ReferenceDraft",
    "SegmentTags",
    "StoryboardShot",
    "PetDraft",
]
