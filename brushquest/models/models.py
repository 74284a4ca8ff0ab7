"""
Domain enums and value types for BrushQuest
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


class StoryStatus(str, Enum):
    GENERATING = "generating"
    DRAFT = "draft"
    PUBLISHED = "published"


class ReferenceType(str, Enum):
    CHARACTER = "character"
    OBJECT = "object"
    LOCATION = "location"


class ReferenceSource(str, Enum):
    BIBLE = "bible"
    EXTRACTED = "extracted"
    MANUAL = "manual"


class BrushingZone(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    TONGUE = "tongue"


class Expression(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    SURPRISED = "surprised"
    WORRIED = "worried"
    DETERMINED = "determined"
    EXCITED = "excited"


class ShotType(str, Enum):
    WIDE = "wide"
    MEDIUM = "medium"
    CLOSE_UP = "close-up"
    EXTREME_CLOSE_UP = "extreme-close-up"
    OVER_SHOULDER = "over-shoulder"


class CameraAngle(str, Enum):
    EYE_LEVEL = "eye-level"
    LOW_ANGLE = "low-angle"
    HIGH_ANGLE = "high-angle"
    BIRDS_EYE = "birds-eye"
    WORMS_EYE = "worms-eye"
    DUTCH_ANGLE = "dutch-angle"


class CharacterType(str, Enum):
    CHILD = "child"
    PET = "pet"


class SpriteStatus(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETE = "complete"
    FAILED = "failed"


class CollectibleType(str, Enum):
    STICKER = "sticker"
    ACCESSORY = "accessory"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


class Reference(BaseModel):
    """A visual entity tracked per story, before or after it is persisted"""
    type: ReferenceType
    name: str
    description: str
    mood: Optional[str] = None
    personality: Optional[str] = None
    role: Optional[str] = None
    source: ReferenceSource = ReferenceSource.BIBLE
    id: Optional[str] = None


class DecoratedSegment(BaseModel):
    """A generated segment after brushing zones and expressions are applied"""
    segment_order: int
    text: str
    duration_seconds: int
    brushing_zone: Optional[BrushingZone] = None
    brushing_prompt: Optional[str] = None
    image_prompt: Optional[str] = None
    child_pose: Expression = Expression.HAPPY
    pet_pose: Expression = Expression.HAPPY


class GeneratedChapter(BaseModel):
    chapter_number: int
    title: str
    recap: Optional[str] = None
    cliffhanger: str = ""
    next_chapter_teaser: str = ""
    segments: List[DecoratedSegment]
