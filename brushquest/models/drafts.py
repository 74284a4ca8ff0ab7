"""
Pydantic schemas for generated (LLM) payloads

Every JSON document the text model returns is validated against one of these
before the pipeline trusts it. The model replies in camelCase, so fields carry
camelCase aliases while Python code uses snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any


class DraftModel(BaseModel):
    """Base for generated payloads: accept aliases and ignore extra keys"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================================
# Worlds and Pitches
# ============================================================================

class WorldDraft(DraftModel):
    name: str
    display_name: str = Field(alias="displayName")
    description: str
    theme: Optional[str] = None


class OutlineEntry(DraftModel):
    chapter: int
    title: str
    summary: str = ""


class StoryPitchDraft(DraftModel):
    title: str
    description: str
    outline: List[OutlineEntry] = Field(min_length=1)


# ============================================================================
# Story Bible
# ============================================================================

class VisualAssets(DraftModel):
    locations: List[Dict[str, Any]] = Field(default_factory=list)
    characters: List[Dict[str, Any]] = Field(default_factory=list)
    objects: List[Dict[str, Any]] = Field(default_factory=list)


class StoryBibleDraft(DraftModel):
    tone: str
    themes: List[str] = Field(default_factory=list)
    narrative_style: str = Field(default="", alias="narrativeStyle")
    child_role: str = Field(default="", alias="childRole")
    pet_role: str = Field(default="", alias="petRole")
    character_dynamic: str = Field(default="", alias="characterDynamic")
    visual_assets: VisualAssets = Field(default_factory=VisualAssets, alias="visualAssets")
    color_palette: str = Field(default="", alias="colorPalette")
    lighting_style: str = Field(default="", alias="lightingStyle")
    art_direction: str = Field(default="", alias="artDirection")
    magic_system: Optional[str] = Field(default=None, alias="magicSystem")
    stakes: str = ""
    resolution: str = ""

    def to_document(self) -> Dict[str, Any]:
        """The persisted bible: everything except the visual assets, in camelCase"""
        return self.model_dump(by_alias=True, exclude={"visual_assets"})


# ============================================================================
# Chapters
# ============================================================================

class SegmentDraft(DraftModel):
    segment_order: Optional[int] = Field(default=None, alias="segmentOrder")
    text: str
    image_prompt: Optional[str] = Field(default=None, alias="imagePrompt")
    child_expression: Optional[str] = Field(default=None, alias="childExpression")
    pet_expression: Optional[str] = Field(default=None, alias="petExpression")


class ChapterDraft(DraftModel):
    chapter_number: Optional[int] = Field(default=None, alias="chapterNumber")
    title: str
    recap: Optional[str] = None
    segments: List[SegmentDraft] = Field(min_length=5)
    cliffhanger: Optional[str] = ""
    next_chapter_teaser: Optional[str] = Field(default="", alias="nextChapterTeaser")


# ============================================================================
# References and Storyboard
# ============================================================================

class ReferenceDraft(DraftModel):
    type: str
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    mood: Optional[str] = None
    personality: Optional[str] = None
    role: Optional[str] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        if v not in ("character", "object", "location"):
            raise ValueError(f"unknown reference type '{v}'")
        return v


class SegmentTags(DraftModel):
    segment_id: str = Field(alias="segmentId")
    reference_ids: List[str] = Field(default_factory=list, alias="referenceIds")


class StoryboardShot(DraftModel):
    segment_id: str = Field(alias="segmentId")
    segment_order: Optional[int] = Field(default=None, alias="segmentOrder")
    chapter_number: Optional[int] = Field(default=None, alias="chapterNumber")
    location: Optional[str] = None
    characters: List[str] = Field(default_factory=list)
    shot_type: Optional[str] = Field(default=None, alias="shotType")
    camera_angle: Optional[str] = Field(default=None, alias="cameraAngle")
    visual_focus: Optional[str] = Field(default=None, alias="visualFocus")
    continuity_note: Optional[str] = Field(default=None, alias="continuityNote")

    @field_validator("characters", mode="before")
    @classmethod
    def coerce_characters(cls, v):
        # Models sometimes answer with a bare string or null
        return v if isinstance(v, list) else []


# ============================================================================
# Pets
# ============================================================================

class PetDraft(DraftModel):
    name: str
    display_name: str = Field(alias="displayName")
    description: str
    story_personality: str = Field(default="", alias="storyPersonality")
    unlock_cost: int = Field(default=0, alias="unlockCost")
    is_starter: bool = Field(default=False, alias="isStarter")
