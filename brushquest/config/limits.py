"""
Centralized Validation Limits

All limits and generation constants in one place for consistency.
Import these in both API routes and Pydantic models.
"""

# =============================================================================
# CHILD PROFILE LIMITS
# =============================================================================

# Child display name
CHILD_NAME_MAX_LENGTH = 50

# Supported age range (inclusive)
CHILD_MIN_AGE = 4
CHILD_MAX_AGE = 10

# Spoken name clips
NAME_AUDIO_MAX_LENGTH = 50

# =============================================================================
# STORY GENERATION LIMITS
# =============================================================================

# Pitches per request
DEFAULT_PITCH_COUNT = 3
MAX_PITCH_COUNT = 5

# Every generated chapter has exactly this many segments
SEGMENTS_PER_CHAPTER = 5

# Nominal narration length of a segment (seconds)
SEGMENT_DURATION_SECONDS = 15

# References pulled out of story prose
MAX_EXTRACTED_REFERENCES = 8

# Previous chapter summaries in chapter prompts
CHAPTER_SUMMARY_MAX_LENGTH = 150

# =============================================================================
# MEDIA LIMITS
# =============================================================================

# Reference images attached to a cover prompt
MAX_COVER_REFERENCES = 3

# Stickers created by a batch request
DEFAULT_STICKER_BATCH = 3

# Pet suggestions per request
DEFAULT_PET_SUGGESTION_COUNT = 3

# Uploaded background music
MAX_AUDIO_UPLOAD_BYTES = 50 * 1024 * 1024
SUPPORTED_AUDIO_TYPES = (
    "audio/mpeg", "audio/mp3",
    "audio/wav", "audio/wave", "audio/x-wav",
    "audio/ogg", "audio/aac",
    "audio/mp4", "audio/x-m4a",
    "audio/webm",
)
