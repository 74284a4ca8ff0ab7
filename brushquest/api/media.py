"""
Media generation routes

Thin HTTP wrappers over MediaService: the POST /api/generate dispatcher and
the single-purpose proxies kept for older clients.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Response

from ..models.requests import (
    GenerateImageRequest,
    NameAudioRequest,
    PetAvatarRequest,
    SegmentAudioRequest,
    TTSRequest,
    UserAvatarRequest,
)
from ..services.errors import ValidationError
from .dependencies import get_media

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])


@router.post("/generate")
async def generate(payload: Dict[str, Any] = Body(default={})):
    """
    Generate an image or audio asset, chosen by `type`.

    Types: image, userAvatar, petAvatar, nameAudio, backgroundMusic,
    worldImage, sprite, segmentAudio, chapterAudio, coverImage, referenceImage.

    Example:
    {
        "type": "image",
        "segmentId": "...",
        "segmentText": "[CHILD] and [PET] tiptoe past the sleeping dragon...",
        "storyboardShotType": "wide",
        "includeUser": true
    }
    """
    return await get_media().generate(payload)


@router.post("/generate-image")
async def generate_image(req: GenerateImageRequest):
    """Prompt-to-image; requires prompt and segmentId"""
    return await get_media().simple_image(req)


@router.post("/generate-avatar")
async def generate_avatar(payload: Dict[str, Any] = Body(default={})):
    """
    Child avatar from a photo, or a pet avatar from its description.

    Request body:
    {
        "type": "user",
        "photoDataUrl": "data:image/jpeg;base64,...",
        "childId": "...",
        "childName": "Maya",
        "childAge": 6
    }
    """
    kind = payload.get("type")
    if not kind:
        raise ValidationError("Missing required field: type")

    media = get_media()
    if kind == "user":
        return await media.user_avatar(UserAvatarRequest.model_validate(payload))
    if kind == "pet":
        return await media.pet_avatar(PetAvatarRequest.model_validate(payload))

    raise ValidationError("Invalid avatar type")


@router.post("/generate-name-audio")
async def generate_name_audio(payload: Dict[str, Any] = Body(default={})):
    """
    Speak a name and its possessive form.

    Request body:
    {
        "name": "Maya",
        "type": "child",
        "id": "..."
    }
    """
    name, kind, target_id = payload.get("name"), payload.get("type"), payload.get("id")
    if not (name and kind and target_id):
        raise ValidationError("Missing required fields: name, type, id")

    return await get_media().name_audio(NameAudioRequest(name=name, name_type=kind, id=target_id))


@router.post("/tts")
async def text_to_speech(req: TTSRequest):
    """
    Speak text with a chosen voice; returns audio/mpeg.

    Request body:
    {
        "text": "Once upon a time...",
        "voiceId": "0z8S749Xe6jLCD34QXl1",
        "modelId": "eleven_turbo_v2_5"
    }
    """
    audio = await get_media().tts(req.text, req.voice_id, req.model_id)
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.post("/admin/generate-segment-audio")
async def generate_segment_audio(req: SegmentAudioRequest):
    """
    Narrate a whole segment as one clip, pausing where names are spoken.

    Request body:
    {
        "segmentId": "...",
        "text": "[CHILD] and [PET] found a glowing door...",
        "storyId": "...",
        "chapterNumber": 2,
        "segmentOrder": 3
    }
    """
    return await get_media().segment_audio(req)
