"""
Media Generation Service

Every image and audio asset the app uses is produced here: scene illustrations,
avatars, reference sheets, covers, sprites, world icons, narration clips, name
audio and background music. Each handler validates its inputs, calls the
provider, uploads the result to blob storage and returns the public URL.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config.limits import MAX_COVER_REFERENCES, NAME_AUDIO_MAX_LENGTH
from ..models.requests import (
    BackgroundMusicRequest,
    ChapterAudioRequest,
    CoverImageRequest,
    GenerateImageRequest,
    NameAudioRequest,
    PetAvatarRequest,
    ReferenceImageRequest,
    SegmentAudioRequest,
    SpriteRequest,
    StoryImageRequest,
    UserAvatarRequest,
    WorldImageRequest,
)
from ..prompts.audio import get_story_music_prompt, get_world_music_prompt
from ..prompts.images import (
    STYLE_PREFIX,
    build_scene_description,
    get_cover_prompt,
    get_pet_avatar_prompt,
    get_reference_sheet_prompt,
    get_scene_prompt,
    get_sprite_prompt,
    get_user_avatar_prompt,
    get_world_icon_prompt,
)
from .errors import BrushQuestError, NotFoundError, ValidationError
from .image_generation import decode_data_url
from .speech import split_narration, to_ssml

logger = logging.getLogger(__name__)

REFERENCE_LABELS = {
    "character": "CHARACTER REFERENCE SHEET",
    "location": "LOCATION REFERENCE",
}

GENERATE_TYPES = (
    "image, userAvatar, petAvatar, nameAudio, backgroundMusic, worldImage, "
    "sprite, segmentAudio, chapterAudio, coverImage, or referenceImage"
)


def _timestamp() -> int:
    return int(time.time() * 1000)


def bible_visual_references(bible: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten a story bible's visualAssets into typed entries for scene lookups"""
    assets = (bible or {}).get("visualAssets") or {}
    refs = []
    for kind, ref_type in (("characters", "character"), ("locations", "location"), ("objects", "object")):
        for asset in assets.get(kind) or []:
            refs.append({
                "type": ref_type,
                "id": asset.get("id"),
                "name": asset.get("name", ""),
                "description": asset.get("description", ""),
                "mood": asset.get("mood"),
            })
    return refs


class MediaService:
    """Image and audio generation with blob persistence"""

    def __init__(self, providers, db=None, settings=None, app_logger=None):
        self.providers = providers
        self.db = db
        self.settings = settings or providers.settings
        self.app_logger = app_logger

    # =========================================================================
    # Dispatcher
    # =========================================================================

    async def generate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Route a POST /api/generate body to its handler by `type`"""
        kind = payload.get("type")

        if kind == "image":
            return await self.story_image(StoryImageRequest.model_validate(payload))
        if kind in ("userAvatar", "user"):
            return await self.user_avatar(UserAvatarRequest.model_validate(payload))
        if kind in ("petAvatar", "pet"):
            return await self.pet_avatar(PetAvatarRequest.model_validate(payload))
        if kind == "nameAudio":
            return await self.name_audio(NameAudioRequest.model_validate(payload))
        if kind == "backgroundMusic":
            return await self.background_music(BackgroundMusicRequest.model_validate(payload))
        if kind == "worldImage":
            return await self.world_image(WorldImageRequest.model_validate(payload))
        if kind == "sprite":
            return await self.sprite(SpriteRequest.model_validate(payload))
        if kind == "segmentAudio":
            return await self.segment_narration(SegmentAudioRequest.model_validate(payload))
        if kind == "chapterAudio":
            return await self.chapter_narration(ChapterAudioRequest.model_validate(payload))
        if kind == "coverImage":
            return await self.cover_image(CoverImageRequest.model_validate(payload))
        if kind == "referenceImage":
            return await self.reference_image(ReferenceImageRequest.model_validate(payload))

        raise ValidationError(f"Invalid type. Must be: {GENERATE_TYPES}")

    # =========================================================================
    # Images
    # =========================================================================

    async def _generate_and_upload(self, prompt: str, references: List[Dict[str, str]], path: str) -> str:
        image, mime_type = await self.providers.images.generate_image(prompt, references)
        return await self.providers.blob.upload_image(path, image, mime_type)

    async def story_image(self, req: StoryImageRequest) -> Dict[str, Any]:
        """
        Illustrate one story segment.

        Request:
            {"type": "image", "segmentId": "...", "segmentText": "...",
             "storyboardShotType": "wide", "visualReferences": [...], ...}

        Response:
            {"imageUrl": "https://...", "segmentId": "..."}
        """
        if not req.segment_id:
            raise ValidationError("Missing required field: segmentId")

        has_storyboard = bool(
            req.storyboard_shot_type or req.storyboard_location
            or req.storyboard_camera_angle or req.storyboard_focus
        )
        overlay_mode = not req.include_user and not req.include_pet

        scene = build_scene_description(
            req.prompt, req.segment_text, req.storyboard_focus, has_storyboard, overlay_mode
        )
        if scene is None:
            raise ValidationError("Missing scene data: provide prompt, or segmentText with storyboard data")

        # Each candidate is (url, label); labels are numbered only for images that load
        candidates = []
        if req.reference_image_url and not has_storyboard:
            candidates.append((req.reference_image_url,
                               "Previous scene - use for style, color palette, and lighting consistency"))
        for ref in req.visual_references:
            label = REFERENCE_LABELS.get(ref.type, "OBJECT REFERENCE SHEET")
            candidates.append((ref.image_url,
                               f'{label} for "{ref.name}" - Match this {ref.type}\'s appearance EXACTLY'))
        if req.include_user and req.user_avatar_url:
            candidates.append((req.user_avatar_url,
                               f"{req.child_name or 'The child character'}'s appearance - "
                               "this character MUST appear in the scene with EXACT same features"))
        if req.include_pet and req.pet_avatar_url:
            candidates.append((req.pet_avatar_url,
                               f"{req.pet_name or 'The pet companion'}'s appearance - "
                               "this character MUST appear in the scene with EXACT same design"))

        fetched = await self.providers.images.fetch_references([url for url, _ in candidates])

        images = []
        descriptions = []
        loaded_urls = set()
        for (url, label), image in zip(candidates, fetched):
            if image is None:
                continue
            images.append(image)
            descriptions.append(f"[Image {len(images)}] {label}")
            loaded_urls.add(url)

        prompt = get_scene_prompt(
            scene,
            descriptions,
            bible=req.story_bible,
            references=bible_visual_references(req.story_bible),
            shot_type=req.storyboard_shot_type,
            camera_angle=req.storyboard_camera_angle,
            visual_focus=req.storyboard_focus,
            location_id=req.storyboard_location_id,
            location_name=req.storyboard_location,
            character_ids=req.storyboard_character_ids,
            character_names=req.storyboard_characters,
            include_user=req.include_user,
            include_pet=req.include_pet,
            has_user_avatar=req.user_avatar_url in loaded_urls,
            has_pet_avatar=req.pet_avatar_url in loaded_urls,
            child_name=req.child_name,
            pet_name=req.pet_name,
            exclude=req.storyboard_exclude,
        )

        url = await self._generate_and_upload(prompt, images, f"story-images/{req.segment_id}-{_timestamp()}.png")
        logger.info(f"Segment {req.segment_id} illustrated with {len(images)} references")
        return {"imageUrl": url, "segmentId": req.segment_id}

    async def simple_image(self, req: GenerateImageRequest) -> Dict[str, Any]:
        """Plain prompt-to-image proxy with optional previous-scene reference"""
        if not (req.prompt and req.segment_id):
            raise ValidationError("Missing required fields: prompt, segmentId")

        references = []
        if req.reference_image_url:
            fetched = await self.providers.images.fetch_references([req.reference_image_url])
            references = [image for image in fetched if image]

        prompt = f"{STYLE_PREFIX} Scene: {req.prompt}"
        path = f"story-images/{req.segment_id}-{_timestamp()}.png"
        url = await self._generate_and_upload(prompt, references, path)
        return {"imageUrl": url, "segmentId": req.segment_id}

    async def user_avatar(self, req: UserAvatarRequest) -> Dict[str, Any]:
        if not (req.photo_data_url and req.child_id and req.child_name):
            raise ValidationError("Missing required fields for user avatar")

        photo = decode_data_url(req.photo_data_url)
        if photo is None:
            raise ValidationError("Invalid photo data URL format")

        prompt = get_user_avatar_prompt(req.child_name, req.child_age)
        url = await self._generate_and_upload(prompt, [photo], f"avatars/{req.child_id}.png")
        return {"avatarUrl": url, "type": "user"}

    async def pet_avatar(self, req: PetAvatarRequest) -> Dict[str, Any]:
        if not (req.pet_id and req.pet_name and req.pet_description):
            raise ValidationError("Missing required fields for pet avatar")

        prompt = get_pet_avatar_prompt(req.pet_name, req.pet_description, req.pet_personality)
        url = await self._generate_and_upload(prompt, [], f"pet-avatars/{req.pet_id}.png")
        return {"avatarUrl": url, "type": "pet"}

    async def world_image(self, req: WorldImageRequest) -> Dict[str, Any]:
        """Generate a world icon and store its URL on the world row"""
        if not (req.world_id and req.world_name and req.world_description):
            raise ValidationError("Missing required fields: worldId, worldName, worldDescription")

        prompt = get_world_icon_prompt(req.world_name, req.world_description, req.theme)
        url = await self._generate_and_upload(prompt, [], f"world-images/{req.world_id}.png")

        if self.db is not None:
            await self.db.update_world(req.world_id, {"background_image_url": url})
        return {"imageUrl": url, "worldId": req.world_id}

    async def reference_image(self, req: ReferenceImageRequest) -> Dict[str, Any]:
        if not (req.reference_id and req.reference_type and req.name and req.description):
            raise ValidationError("Missing required fields: referenceId, referenceType, name, description")

        prompt = get_reference_sheet_prompt(req.reference_type, req.name, req.description, req.story_bible)
        url = await self._generate_and_upload(
            prompt, [], f"story-references/{req.reference_id}-{_timestamp()}.png"
        )
        return {"imageUrl": url, "referenceId": req.reference_id}

    async def cover_image(self, req: CoverImageRequest) -> Dict[str, Any]:
        if not (req.story_id and req.story_title):
            raise ValidationError("Missing required fields: storyId, storyTitle")

        fetched = await self.providers.images.fetch_references(req.reference_image_urls[:MAX_COVER_REFERENCES])
        images = [image for image in fetched if image]
        descriptions = [
            f"[Image {i}] Existing story scene - use for style, color palette, and character appearance consistency"
            for i in range(1, len(images) + 1)
        ]

        prompt = get_cover_prompt(req.story_title, req.story_description, descriptions, req.story_bible)
        url = await self._generate_and_upload(prompt, images, f"story-covers/{req.story_id}-{_timestamp()}.png")
        return {"coverImageUrl": url, "storyId": req.story_id}

    async def sprite(self, req: SpriteRequest) -> Dict[str, Any]:
        """Generate one expression portrait from an owner's avatar"""
        if not (req.owner_type and req.owner_id and req.pose_key and req.source_avatar_url and req.pose_prompt):
            raise ValidationError(
                "Missing required fields: ownerType, ownerId, poseKey, sourceAvatarUrl, posePrompt"
            )

        fetched = await self.providers.images.fetch_references([req.source_avatar_url])
        if not fetched[0]:
            raise ValidationError("Failed to fetch source avatar image")

        path = f"sprites/{req.owner_type}/{req.owner_id}/{req.pose_key}-{_timestamp()}.png"
        url = await self._generate_and_upload(get_sprite_prompt(req.pose_prompt), [fetched[0]], path)
        return {
            "spriteUrl": url,
            "ownerType": req.owner_type,
            "ownerId": req.owner_id,
            "poseKey": req.pose_key,
        }

    async def _render_pose(
        self,
        owner_type: str,
        owner_id: str,
        pose: Dict[str, Any],
        source_avatar_url: str
    ) -> Dict[str, Any]:
        """Generate one pose, recording generating -> complete | failed on the sprite row"""
        pose_key = pose["pose_key"]
        await self.db.upsert_sprite(owner_type, owner_id, pose_key, {"generation_status": "generating"})

        try:
            generated = await self.sprite(SpriteRequest(
                owner_type=owner_type,
                owner_id=owner_id,
                pose_key=pose_key,
                source_avatar_url=source_avatar_url,
                pose_prompt=pose["generation_prompt"],
            ))
        except BrushQuestError:
            await self.db.upsert_sprite(owner_type, owner_id, pose_key, {"generation_status": "failed"})
            raise

        return await self.db.upsert_sprite(owner_type, owner_id, pose_key, {
            "generation_status": "complete",
            "sprite_url": generated["spriteUrl"],
            "generated_at": datetime.utcnow(),
        })

    async def generate_pose_sprite(
        self,
        owner_type: Optional[str],
        owner_id: Optional[str],
        pose_key: Optional[str],
        source_avatar_url: Optional[str]
    ) -> Dict[str, Any]:
        if not (owner_type and owner_id and pose_key and source_avatar_url):
            raise ValidationError("Missing required fields: ownerType, ownerId, poseKey, sourceAvatarUrl")

        poses = await self.db.list_poses(owner_type, active_only=True)
        pose = next((p for p in poses if p["pose_key"] == pose_key), None)
        if not pose:
            raise NotFoundError("Pose definition not found")

        return await self._render_pose(owner_type, owner_id, pose, source_avatar_url)

    async def generate_all_sprites(
        self,
        owner_type: Optional[str],
        owner_id: Optional[str],
        source_avatar_url: Optional[str]
    ) -> List[Dict[str, Any]]:
        """
        Generate a sprite for every active pose of a character type.

        Poses run one at a time; a failed pose is recorded on its row and the
        loop moves on to the next one.
        """
        if not (owner_type and owner_id and source_avatar_url):
            raise ValidationError("Missing required fields: ownerType, ownerId, sourceAvatarUrl")

        poses = await self.db.list_poses(owner_type, active_only=True)
        if not poses:
            raise NotFoundError("No pose definitions found")

        results = []
        for pose in poses:
            pose_key = pose["pose_key"]
            try:
                row = await self._render_pose(owner_type, owner_id, pose, source_avatar_url)
            except BrushQuestError as e:
                logger.error(f"❌ Sprite {owner_type}/{owner_id}/{pose_key} failed: {e.message}")
                results.append({"poseKey": pose_key, "success": False, "error": e.message})
                continue
            results.append({"poseKey": pose_key, "success": True, "spriteUrl": row["sprite_url"]})

        completed = sum(1 for r in results if r["success"])
        logger.info(f"Sprites for {owner_type}/{owner_id}: {completed}/{len(results)} complete")
        return results

    # =========================================================================
    # Audio
    # =========================================================================

    async def tts(self, text: Optional[str], voice_id: Optional[str], model_id: Optional[str] = None) -> bytes:
        """Speak text with a caller-chosen voice; returns MP3 bytes"""
        if not text or not voice_id:
            raise ValidationError("Missing required fields: text, voiceId")
        return await self.providers.speech.synthesize_as(text, voice_id, model_id)

    async def _narration_sequence(self, text: str, path_prefix: str) -> Dict[str, Any]:
        """
        Speak each text run as its own clip, leaving name slots between them.

        Returns {"narrationSequence": [{"type": "audio", "url"} | {"type": "name",
        "placeholder"}], "clipCount": n}
        """
        sequence = []
        clip_index = 0
        for part in split_narration(text):
            if part["type"] == "name":
                sequence.append({"type": "name", "placeholder": part["placeholder"]})
                continue
            audio = await self.providers.speech.synthesize(part["text"])
            url = await self.providers.blob.upload_audio(f"{path_prefix}/clip{clip_index}.mp3", audio)
            sequence.append({"type": "audio", "url": url})
            clip_index += 1
        return {"narrationSequence": sequence, "clipCount": clip_index}

    async def segment_narration(self, req: SegmentAudioRequest) -> Dict[str, Any]:
        if not (req.segment_id and req.text and req.story_id):
            raise ValidationError("Missing required fields: segmentId, text, storyId")

        prefix = f"story-audio/{req.story_id}/ch{req.chapter_number or 1}/seg{req.segment_order or 1}"
        result = await self._narration_sequence(req.text, prefix)
        logger.info(f"[AudioGen] Segment {req.segment_id}: {result['clipCount']} clips")
        return {**result, "segmentId": req.segment_id}

    async def chapter_narration(self, req: ChapterAudioRequest) -> Dict[str, Any]:
        if not (req.chapter_id and req.text and req.story_id and req.field_name):
            raise ValidationError("Missing required fields: chapterId, text, storyId, fieldName")

        prefix = f"story-audio/{req.story_id}/ch{req.chapter_number or 1}/{req.field_name}"
        result = await self._narration_sequence(req.text, prefix)
        logger.info(f"[AudioGen] Chapter {req.chapter_id} {req.field_name}: {result['clipCount']} clips")
        return {**result, "chapterId": req.chapter_id, "fieldName": req.field_name}

    async def segment_audio(self, req: SegmentAudioRequest) -> Dict[str, Any]:
        """Single SSML clip for a whole segment, with pauses where names go"""
        if not (req.segment_id and req.text and req.story_id):
            raise ValidationError("Missing required fields: segmentId, text, storyId")

        path = f"story-audio/{req.story_id}/chapter-{req.chapter_number or 1}/segment-{req.segment_order or 1}.mp3"
        audio = await self.providers.speech.synthesize(to_ssml(req.text))
        url = await self.providers.blob.upload_audio(path, audio)
        return {"audioUrl": url, "segmentId": req.segment_id, "storagePath": path}

    async def name_audio(self, req: NameAudioRequest) -> Dict[str, Any]:
        """Speak a child's or pet's name, plus its possessive form"""
        if not (req.name and req.name_type and req.id):
            raise ValidationError("Missing required fields: name, nameType, id")
        if len(req.name) > NAME_AUDIO_MAX_LENGTH:
            raise ValidationError(f"Name too long (max {NAME_AUDIO_MAX_LENGTH} characters)")

        folder = "children" if req.name_type == "child" else "pets"
        audio = await self.providers.speech.synthesize(req.name)
        audio_url = await self.providers.blob.upload_audio(f"name-audio/{folder}/{req.id}.mp3", audio)

        possessive = await self.providers.speech.synthesize(f"{req.name}'s")
        possessive_url = await self.providers.blob.upload_audio(
            f"name-audio/{folder}/{req.id}-possessive.mp3", possessive
        )

        return {
            "audioUrl": audio_url,
            "possessiveAudioUrl": possessive_url,
            "audioUrls": [audio_url],
            "possessiveAudioUrls": [possessive_url],
            "name": req.name,
            "type": req.name_type,
            "id": req.id,
        }

    async def background_music(self, req: BackgroundMusicRequest) -> Dict[str, Any]:
        """World-level music when worldId is given, story-level otherwise"""
        is_world = bool(req.world_id)
        target_id = req.world_id or req.story_id
        name = req.world_name if is_world else req.story_title

        if not target_id or not name:
            raise ValidationError("Missing required fields: worldId/storyId, worldName/storyTitle")

        if is_world:
            prompt = get_world_music_prompt(name, req.world_description or "", req.world_theme)
            path = f"world-music/{target_id}.mp3"
        else:
            prompt = get_story_music_prompt(name, req.story_description or "", req.world_theme)
            path = f"story-music/{target_id}.mp3"

        music = await self.providers.speech.generate_music(prompt, self.settings.music_duration_seconds)
        url = await self.providers.blob.upload_audio(path, music)

        key = "worldId" if is_world else "storyId"
        return {"musicUrl": url, key: target_id}

    # =========================================================================
    # Jobs
    # =========================================================================

    async def world_image_job(self, world: Dict[str, Any]) -> Dict[str, Any]:
        return await self.world_image(WorldImageRequest(
            world_id=world["id"],
            world_name=world.get("display_name") or world["name"],
            world_description=world.get("description") or "",
            theme=world.get("theme"),
        ))

    async def story_music_job(self, story: Dict[str, Any], world: Dict[str, Any]) -> Dict[str, Any]:
        """Generate story music and store its URL on the story row"""
        result = await self.background_music(BackgroundMusicRequest(
            story_id=story["id"],
            story_title=story["title"],
            story_description=story.get("description") or "",
            world_theme=world.get("theme"),
        ))
        updated = await self.db.update_story(story["id"], {"background_music_url": result["musicUrl"]})
        if updated is None:
            raise NotFoundError("Story not found")
        return result
