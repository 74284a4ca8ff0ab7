"""
Admin audio library routes

Background music already attached to worlds can be reused by other worlds,
and admins can upload their own tracks to blob storage.
"""

import base64
import binascii
import logging
import re
import time

from fastapi import APIRouter

from ..config.limits import MAX_AUDIO_UPLOAD_BYTES, SUPPORTED_AUDIO_TYPES
from ..models.requests import AudioUploadRequest
from ..services.errors import ValidationError
from .dependencies import get_db, get_providers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["audio"])

UNSAFE_FILENAME_CHARS = re.compile(r'[^a-zA-Z0-9.-]')


@router.get("/admin/music-library")
async def music_library():
    """Every world's background track, for picking music to reuse"""
    worlds = await get_db().list_world_music()
    return {"music": [
        {
            "id": world["id"],
            "name": world["display_name"],
            "url": world["background_music_url"],
            "theme": world.get("theme"),
            "source": "world",
        }
        for world in worlds
    ]}


@router.post("/admin/upload-audio")
async def upload_audio(req: AudioUploadRequest):
    """
    Store an uploaded audio file and return its blob URL.

    Request body:
    {
        "fileName": "forest theme.mp3",
        "fileData": "<base64>",
        "fileType": "audio/mpeg",
        "worldId": "..."
    }
    """
    if not (req.file_name and req.file_data and req.file_type):
        raise ValidationError("Missing required fields: fileName, fileData, fileType")

    if req.file_type not in SUPPORTED_AUDIO_TYPES:
        raise ValidationError("Unsupported audio format. Supported formats: MP3, WAV, OGG, AAC, M4A, WebM")

    try:
        data = base64.b64decode(req.file_data, validate=True)
    except binascii.Error as e:
        raise ValidationError("fileData must be base64 encoded") from e

    if len(data) > MAX_AUDIO_UPLOAD_BYTES:
        raise ValidationError(f"File too large. Maximum size is {MAX_AUDIO_UPLOAD_BYTES // (1024 * 1024)}MB")

    safe_name = UNSAFE_FILENAME_CHARS.sub("_", req.file_name)
    timestamp = int(time.time() * 1000)
    path = (
        f"world-music/{req.world_id}-{timestamp}-{safe_name}" if req.world_id
        else f"uploaded-music/{timestamp}-{safe_name}"
    )

    url = await get_providers().blob.upload_audio(path, data, content_type=req.file_type)
    logger.info(f"🎵 Uploaded {safe_name} ({len(data)} bytes)")

    return {
        "url": url,
        "fileName": req.file_name,
        "fileType": req.file_type,
        "size": len(data),
    }
