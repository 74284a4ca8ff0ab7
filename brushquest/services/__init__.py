"""Services package for BrushQuest"""

from .errors import (
    BrushQuestError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    MethodNotAllowedError,
    ConflictError,
    ProviderError,
    MalformedOutputError,
    SchemaMismatchError,
    ConfigurationError,
    PersistenceError,
)
from .database import DatabaseService
from .blob_storage import BlobStorageService
from .text_generation import GeminiTextClient
from .image_generation import GeminiImageClient
from .speech import SpeechClient, to_ssml, split_narration
from .providers import Providers
from .jobs import JobRegistry, Job
from .validation_service import extract_json, validate_payload, validate_list, filter_valid
from .story_bible import StoryBibleBuilder
from .chapter_generator import ChapterGenerator, decorate_chapter
from .storyboard import StoryboardBuilder, match_reference, is_duplicate
from .media import MediaService
from .collectibles import CollectibleService
from .pets import PetService
from .story_pipeline import StoryPipeline
