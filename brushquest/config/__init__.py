"""Configuration package for BrushQuest"""

from .settings import Settings, get_settings
from .limits import (
    CHILD_NAME_MAX_LENGTH,
    CHILD_MIN_AGE,
    CHILD_MAX_AGE,
    NAME_AUDIO_MAX_LENGTH,
    DEFAULT_PITCH_COUNT,
    MAX_PITCH_COUNT,
    SEGMENTS_PER_CHAPTER,
    SEGMENT_DURATION_SECONDS,
    MAX_EXTRACTED_REFERENCES,
    CHAPTER_SUMMARY_MAX_LENGTH,
    MAX_COVER_REFERENCES,
    DEFAULT_STICKER_BATCH,
    DEFAULT_PET_SUGGESTION_COUNT,
)

__all__ = [
    "Settings",
    "get_settings",
    "CHILD_NAME_MAX_LENGTH",
    "CHILD_MIN_AGE",
    "CHILD_MAX_AGE",
    "NAME_AUDIO_MAX_LENGTH",
    "DEFAULT_PITCH_COUNT",
    "MAX_PITCH_COUNT",
    "SEGMENTS_PER_CHAPTER",
    "SEGMENT_DURATION_SECONDS",
    "MAX_EXTRACTED_REFERENCES",
    "CHAPTER_SUMMARY_MAX_LENGTH",
    "MAX_COVER_REFERENCES",
    "DEFAULT_STICKER_BATCH",
    "DEFAULT_PET_SUGGESTION_COUNT",
]
