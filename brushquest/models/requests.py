"""
Request bodies for the HTTP API.

Clients send camelCase JSON; fields are snake_case with camelCase aliases.
Required-ness is checked by the handlers so error messages stay specific
("Missing required field: segmentId"), hence most fields are Optional here.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def provided(self) -> Dict[str, Any]:
        """Fields the client actually sent (snake_case keys)"""
        return self.model_dump(exclude_unset=True)


# ============================================================================
# Generation Requests (POST /api/generate)
# ============================================================================

class VisualReference(RequestModel):
    type: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class StoryImageRequest(RequestModel):
    segment_id: Optional[str] = Field(default=None, alias="segmentId")
    prompt: Optional[str] = None
    segment_text: Optional[str] = Field(default=None, alias="segmentText")
    reference_image_url: Optional[str] = Field(default=None, alias="referenceImageUrl")
    user_avatar_url: Optional[str] = Field(default=None, alias="userAvatarUrl")
    pet_avatar_url: Optional[str] = Field(default=None, alias="petAvatarUrl")
    include_user: bool = Field(default=False, alias="includeUser")
    include_pet: bool = Field(default=False, alias="includePet")
    child_name: Optional[str] = Field(default=None, alias="childName")
    pet_name: Optional[str] = Field(default=None, alias="petName")
    story_bible: Optional[Dict[str, Any]] = Field(default=None, alias="storyBible")
    visual_references: List[VisualReference] = Field(default_factory=list, alias="visualReferences")
    storyboard_location: Optional[str] = Field(default=None, alias="storyboardLocation")
    storyboard_characters: Optional[List[str]] = Field(default=None, alias="storyboardCharacters")
    storyboard_shot_type: Optional[str] = Field(default=None, alias="storyboardShotType")
    storyboard_camera_angle: Optional[str] = Field(default=None, alias="storyboardCameraAngle")
    storyboard_focus: Optional[str] = Field(default=None, alias="storyboardFocus")
    storyboard_exclude: Optional[List[str]] = Field(default=None, alias="storyboardExclude")
    storyboard_location_id: Optional[str] = Field(default=None, alias="storyboardLocationId")
    storyboard_character_ids: Optional[List[str]] = Field(default=None, alias="storyboardCharacterIds")


class UserAvatarRequest(RequestModel):
    photo_data_url: Optional[str] = Field(default=None, alias="photoDataUrl")
    child_id: Optional[str] = Field(default=None, alias="childId")
    child_name: Optional[str] = Field(default=None, alias="childName")
    child_age: Optional[int] = Field(default=None, alias="childAge")


class PetAvatarRequest(RequestModel):
    pet_id: Optional[str] = Field(default=None, alias="petId")
    pet_name: Optional[str] = Field(default=None, alias="petName")
    pet_description: Optional[str] = Field(default=None, alias="petDescription")
    pet_personality: Optional[str] = Field(default=None, alias="petPersonality")


class WorldImageRequest(RequestModel):
    world_id: Optional[str] = Field(default=None, alias="worldId")
    world_name: Optional[str] = Field(default=None, alias="worldName")
    world_description: Optional[str] = Field(default=None, alias="worldDescription")
    theme: Optional[str] = None


class NameAudioRequest(RequestModel):
    name: Optional[str] = None
    name_type: Optional[str] = Field(default=None, alias="nameType")
    id: Optional[str] = None


class BackgroundMusicRequest(RequestModel):
    world_id: Optional[str] = Field(default=None, alias="worldId")
    world_name: Optional[str] = Field(default=None, alias="worldName")
    world_description: Optional[str] = Field(default=None, alias="worldDescription")
    world_theme: Optional[str] = Field(default=None, alias="worldTheme")
    story_id: Optional[str] = Field(default=None, alias="storyId")
    story_title: Optional[str] = Field(default=None, alias="storyTitle")
    story_description: Optional[str] = Field(default=None, alias="storyDescription")


class SpriteRequest(RequestModel):
    owner_type: Optional[str] = Field(default=None, alias="ownerType")
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    pose_key: Optional[str] = Field(default=None, alias="poseKey")
    source_avatar_url: Optional[str] = Field(default=None, alias="sourceAvatarUrl")
    pose_prompt: Optional[str] = Field(default=None, alias="posePrompt")


class SegmentAudioRequest(RequestModel):
    segment_id: Optional[str] = Field(default=None, alias="segmentId")
    text: Optional[str] = None
    story_id: Optional[str] = Field(default=None, alias="storyId")
    chapter_number: Optional[int] = Field(default=None, alias="chapterNumber")
    segment_order: Optional[int] = Field(default=None, alias="segmentOrder")


class ChapterAudioRequest(RequestModel):
    chapter_id: Optional[str] = Field(default=None, alias="chapterId")
    text: Optional[str] = None
    story_id: Optional[str] = Field(default=None, alias="storyId")
    chapter_number: Optional[int] = Field(default=None, alias="chapterNumber")
    field_name: Optional[str] = Field(default=None, alias="fieldName")


class CoverImageRequest(RequestModel):
    story_id: Optional[str] = Field(default=None, alias="storyId")
    story_title: Optional[str] = Field(default=None, alias="storyTitle")
    story_description: Optional[str] = Field(default=None, alias="storyDescription")
    reference_image_urls: List[str] = Field(default_factory=list, alias="referenceImageUrls")
    story_bible: Optional[Dict[str, Any]] = Field(default=None, alias="storyBible")


class ReferenceImageRequest(RequestModel):
    reference_id: Optional[str] = Field(default=None, alias="referenceId")
    reference_type: Optional[str] = Field(default=None, alias="referenceType")
    name: Optional[str] = None
    description: Optional[str] = None
    story_bible: Optional[Dict[str, Any]] = Field(default=None, alias="storyBible")


class GenerateImageRequest(RequestModel):
    prompt: Optional[str] = None
    segment_id: Optional[str] = Field(default=None, alias="segmentId")
    reference_image_url: Optional[str] = Field(default=None, alias="referenceImageUrl")


class TTSRequest(RequestModel):
    text: Optional[str] = None
    voice_id: Optional[str] = Field(default=None, alias="voiceId")
    model_id: Optional[str] = Field(default=None, alias="modelId")


# ============================================================================
# Admin Requests
# ============================================================================

class AuthRequest(RequestModel):
    password: Optional[str] = None


class AudioUploadRequest(RequestModel):
    file_name: Optional[str] = Field(default=None, alias="fileName")
    file_data: Optional[str] = Field(default=None, alias="fileData")
    file_type: Optional[str] = Field(default=None, alias="fileType")
    world_id: Optional[str] = Field(default=None, alias="worldId")


class WorldCreateRequest(RequestModel):
    action: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None
    theme: Optional[str] = None
    background_image_url: Optional[str] = Field(default=None, alias="backgroundImageUrl")
    background_music_url: Optional[str] = Field(default=None, alias="backgroundMusicUrl")
    unlock_cost: Optional[int] = Field(default=None, alias="unlockCost")
    is_starter: Optional[bool] = Field(default=None, alias="isStarter")
    is_published: Optional[bool] = Field(default=None, alias="isPublished")


class WorldUpdateRequest(WorldCreateRequest):
    pass


class PitchOutline(RequestModel):
    chapter: int
    title: str
    summary: str = ""


class WorldActionRequest(RequestModel):
    """POST /admin/worlds/{id}: pitches | outline | generate | regenerateImage"""
    action: Optional[str] = None
    count: Optional[int] = None
    idea: Optional[str] = None
    pitch_id: Optional[str] = Field(default=None, alias="pitchId")
    title: Optional[str] = None
    description: Optional[str] = None
    outline: Optional[List[PitchOutline]] = None


class StoryUpdateRequest(RequestModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    is_published: Optional[bool] = Field(default=None, alias="isPublished")
    background_music_url: Optional[str] = Field(default=None, alias="backgroundMusicUrl")
    cover_image_url: Optional[str] = Field(default=None, alias="coverImageUrl")


class ChapterUpdateRequest(RequestModel):
    title: Optional[str] = None
    recap: Optional[str] = None
    cliffhanger: Optional[str] = None
    next_chapter_teaser: Optional[str] = Field(default=None, alias="nextChapterTeaser")
    recap_narration_sequence: Optional[List[Dict[str, Any]]] = Field(default=None, alias="recapNarrationSequence")
    cliffhanger_narration_sequence: Optional[List[Dict[str, Any]]] = Field(default=None, alias="cliffhangerNarrationSequence")
    teaser_narration_sequence: Optional[List[Dict[str, Any]]] = Field(default=None, alias="teaserNarrationSequence")


class SegmentUpdateRequest(RequestModel):
    text: Optional[str] = None
    brushing_prompt: Optional[str] = Field(default=None, alias="brushingPrompt")
    image_prompt: Optional[str] = Field(default=None, alias="imagePrompt")
    narration_sequence: Optional[List[Dict[str, Any]]] = Field(default=None, alias="narrationSequence")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    reference_ids: Optional[List[str]] = Field(default=None, alias="referenceIds")


class StoryActionRequest(RequestModel):
    """POST /admin/stories/{id}: publish toggle or story-level generation"""
    action: Optional[str] = None
    publish: bool = True
    type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    reference_id: Optional[str] = Field(default=None, alias="referenceId")


class PetRequest(RequestModel):
    action: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None
    story_personality: Optional[str] = Field(default=None, alias="storyPersonality")
    unlock_cost: Optional[int] = Field(default=None, alias="unlockCost")
    is_starter: Optional[bool] = Field(default=None, alias="isStarter")
    count: Optional[int] = None
    pet_id: Optional[str] = Field(default=None, alias="petId")
    suggestion_id: Optional[str] = Field(default=None, alias="suggestionId")
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    possessive_audio_url: Optional[str] = Field(default=None, alias="possessiveAudioUrl")
    audio_urls: Optional[List[str]] = Field(default=None, alias="audioUrls")
    possessive_audio_urls: Optional[List[str]] = Field(default=None, alias="possessiveAudioUrls")


class PetUpdateRequest(RequestModel):
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None
    story_personality: Optional[str] = Field(default=None, alias="storyPersonality")
    unlock_cost: Optional[int] = Field(default=None, alias="unlockCost")
    is_starter: Optional[bool] = Field(default=None, alias="isStarter")
    is_published: Optional[bool] = Field(default=None, alias="isPublished")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")


class CollectibleRequest(RequestModel):
    action: Optional[str] = None
    world_id: Optional[str] = Field(default=None, alias="worldId")
    world_name: Optional[str] = Field(default=None, alias="worldName")
    world_description: Optional[str] = Field(default=None, alias="worldDescription")
    type: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    rarity: Optional[str] = None
    pet_id: Optional[str] = Field(default=None, alias="petId")
    count: Optional[int] = None


class CollectibleUpdateRequest(RequestModel):
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None
    rarity: Optional[str] = None
    world_id: Optional[str] = Field(default=None, alias="worldId")
    pet_id: Optional[str] = Field(default=None, alias="petId")
    is_published: Optional[bool] = Field(default=None, alias="isPublished")


class PoseRequest(RequestModel):
    id: Optional[str] = None
    character_type: Optional[str] = Field(default=None, alias="characterType")
    pose_key: Optional[str] = Field(default=None, alias="poseKey")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    generation_prompt: Optional[str] = Field(default=None, alias="generationPrompt")
    sort_order: Optional[int] = Field(default=None, alias="sortOrder")
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class SpriteActionRequest(RequestModel):
    action: Optional[str] = None
    owner_type: Optional[str] = Field(default=None, alias="ownerType")
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    pose_key: Optional[str] = Field(default=None, alias="poseKey")
    source_avatar_url: Optional[str] = Field(default=None, alias="sourceAvatarUrl")


# ============================================================================
# Child Profile Requests
# ============================================================================

class ChildUpdateRequest(RequestModel):
    action: Optional[str] = None
    name: Optional[str] = None
    age: Optional[int] = None
    character_id: Optional[str] = Field(default=None, alias="characterId")
    active_pet_id: Optional[str] = Field(default=None, alias="activePetId")
    active_brush_id: Optional[str] = Field(default=None, alias="activeBrushId")
    active_world_id: Optional[str] = Field(default=None, alias="activeWorldId")
    points: Optional[int] = None
    total_brush_sessions: Optional[int] = Field(default=None, alias="totalBrushSessions")
    current_streak: Optional[int] = Field(default=None, alias="currentStreak")
    longest_streak: Optional[int] = Field(default=None, alias="longestStreak")
    unlocked_pets: Optional[List[str]] = Field(default=None, alias="unlockedPets")
    unlocked_brushes: Optional[List[str]] = Field(default=None, alias="unlockedBrushes")
    unlocked_worlds: Optional[List[str]] = Field(default=None, alias="unlockedWorlds")
    current_story_arc: Optional[Dict[str, Any]] = Field(default=None, alias="currentStoryArc")
    completed_story_arcs: Optional[List[str]] = Field(default=None, alias="completedStoryArcs")
    last_brush_date: Optional[str] = Field(default=None, alias="lastBrushDate")
    name_audio_url: Optional[str] = Field(default=None, alias="nameAudioUrl")
    name_possessive_audio_url: Optional[str] = Field(default=None, alias="namePossessiveAudioUrl")
    collected_stickers: Optional[List[str]] = Field(default=None, alias="collectedStickers")
    collected_accessories: Optional[List[str]] = Field(default=None, alias="collectedAccessories")
    equipped_accessories: Optional[Dict[str, Any]] = Field(default=None, alias="equippedAccessories")


class ChildCreateRequest(ChildUpdateRequest):
    """Create body; `id` lets existing local profiles migrate with their id"""
    id: Optional[str] = None
