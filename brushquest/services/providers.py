"""
Lazily-built provider clients.

Each external client is created on first use from settings. A missing key
raises ConfigurationError ("GEMINI_API_KEY not configured"), so only the
endpoints that need that provider fail, with a 500 and a descriptive message.
Tests inject mocks through the constructor.
"""

from typing import Optional

from .blob_storage import BlobStorageService
from .image_generation import GeminiImageClient
from .speech import SpeechClient
from .text_generation import GeminiTextClient


class Providers:
    """Text, image, speech and blob clients behind one handle"""

    def __init__(
        self,
        settings,
        text: Optional[GeminiTextClient] = None,
        images: Optional[GeminiImageClient] = None,
        speech: Optional[SpeechClient] = None,
        blob: Optional[BlobStorageService] = None,
        app_logger=None
    ):
        self.settings = settings
        self.app_logger = app_logger
        self._text = text
        self._images = images
        self._speech = speech
        self._blob = blob

    @property
    def text(self) -> GeminiTextClient:
        if self._text is None:
            self._text = GeminiTextClient(
                self.settings.require("gemini_api_key"),
                model=self.settings.gemini_text_model,
                app_logger=self.app_logger,
            )
        return self._text

    @property
    def images(self) -> GeminiImageClient:
        if self._images is None:
            self._images = GeminiImageClient(
                self.settings.require("gemini_api_key"),
                model=self.settings.gemini_image_model,
                app_logger=self.app_logger,
            )
        return self._images

    @property
    def speech(self) -> SpeechClient:
        if self._speech is None:
            self._speech = SpeechClient(
                self.settings.require("elevenlabs_api_key"),
                voice_id=self.settings.elevenlabs_voice_id,
                model_id=self.settings.elevenlabs_model_id,
                app_logger=self.app_logger,
            )
        return self._speech

    @property
    def blob(self) -> BlobStorageService:
        if self._blob is None:
            self._blob = BlobStorageService(
                self.settings.require("azure_blob_connection_string"),
                container_name=self.settings.azure_blob_container,
                logger=self.app_logger,
            )
        return self._blob

    @property
    def has_text(self) -> bool:
        return self._text is not None or bool(self.settings.gemini_api_key)

    @property
    def has_audio(self) -> bool:
        """True when both speech synthesis and blob upload are usable"""
        speech_ok = self._speech is not None or bool(self.settings.elevenlabs_api_key)
        blob_ok = self._blob is not None or bool(self.settings.azure_blob_connection_string)
        return speech_ok and blob_ok

    @property
    def has_images(self) -> bool:
        """True when both image generation and blob upload are usable"""
        images_ok = self._images is not None or bool(self.settings.gemini_api_key)
        blob_ok = self._blob is not None or bool(self.settings.azure_blob_connection_string)
        return images_ok and blob_ok
