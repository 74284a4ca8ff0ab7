"""
ElevenLabs speech and music client.

Narration never speaks the child's or pet's name inline. Placeholders are
either turned into a short pause (single-clip segment audio) or used as split
points, producing a narration sequence of audio clips and name slots that the
app stitches together with pre-recorded name audio.
"""

import asyncio
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

import requests
from elevenlabs import ElevenLabs, VoiceSettings
from elevenlabs.core.api_error import ApiError

from .errors import ProviderError

logger = logging.getLogger(__name__)

ELEVENLABS_MUSIC_URL = "https://api.elevenlabs.io/v1/music/generate"
PLACEHOLDER_PATTERN = re.compile(r'\[(CHILD|PET)\]')
NAME_PAUSE = '<break time="300ms"/>'


def to_ssml(text: str) -> str:
    """Replace [CHILD]/[PET] with a 300ms pause and wrap in <speak>"""
    return f"<speak>{PLACEHOLDER_PATTERN.sub(NAME_PAUSE, text)}</speak>"


def split_narration(text: str) -> List[Dict[str, str]]:
    """
    Split narration text at name placeholders.

    Returns an ordered list of {"type": "text", "text": ...} and
    {"type": "name", "placeholder": "CHILD" | "PET"} parts. Whitespace-only
    text between placeholders is dropped.

    "Hi [CHILD]! Meet [PET]." becomes text "Hi", name CHILD, text "! Meet",
    name PET, text ".".
    """
    parts = []
    pieces = PLACEHOLDER_PATTERN.split(text or "")
    # re.split with one group alternates text, placeholder, text, ...
    for i, piece in enumerate(pieces):
        if i % 2 == 1:
            parts.append({"type": "name", "placeholder": piece})
        elif piece.strip():
            parts.append({"type": "text", "text": piece.strip()})
    return parts


class SpeechClient:
    """Text-to-speech and background music via ElevenLabs"""

    def __init__(
        self,
        api_key: str,
        voice_id: str = "0z8S749Xe6jLCD34QXl1",
        model_id: str = "eleven_turbo_v2_5",
        app_logger=None
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.app_logger = app_logger
        self.client = ElevenLabs(api_key=api_key)
        self.voice_settings = VoiceSettings(
            stability=0.5,
            similarity_boost=0.75,
            style=0.5,
            use_speaker_boost=True
        )
        self._executor = ThreadPoolExecutor(max_workers=3)

    async def _run_async(self, func, *args, **kwargs):
        """Run a sync function in the thread pool."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _synthesize_sync(self, text: str, voice_id: str = None, model_id: str = None) -> bytes:
        model_id = model_id or self.model_id
        start = time.time()
        try:
            audio_stream = self.client.text_to_speech.convert(
                voice_id=voice_id or self.voice_id,
                text=text,
                model_id=model_id,
                voice_settings=self.voice_settings,
                output_format="mp3_44100_128"
            )
            audio = b"".join(audio_stream)
        except ApiError as e:
            if self.app_logger:
                self.app_logger.api_call("elevenlabs", model_id, len(text), time.time() - start, status="error")
            raise ProviderError("ElevenLabs", f"{e.status_code} {e.body}") from e

        if self.app_logger:
            self.app_logger.api_call("elevenlabs", model_id, len(text), time.time() - start)
        return audio

    async def synthesize(self, text: str) -> bytes:
        """Speak text verbatim and return MP3 bytes"""
        return await self._run_async(self._synthesize_sync, text)

    async def synthesize_as(self, text: str, voice_id: str, model_id: str = None) -> bytes:
        """Speak text with a specific voice (TTS proxy)"""
        return await self._run_async(self._synthesize_sync, text, voice_id, model_id)

    async def synthesize_with_pauses(self, text: str) -> bytes:
        """Speak narration with a short pause where each name belongs"""
        return await self.synthesize(to_ssml(text))

    def _generate_music_sync(self, prompt: str, duration_seconds: int) -> bytes:
        start = time.time()
        try:
            response = requests.post(
                ELEVENLABS_MUSIC_URL,
                json={"prompt": prompt, "duration_seconds": duration_seconds},
                headers={"xi-api-key": self.api_key, "Content-Type": "application/json"},
                timeout=300
            )
        except requests.RequestException as e:
            raise ProviderError("ElevenLabs", str(e)) from e

        if not response.ok:
            raise ProviderError("ElevenLabs", f"music generation failed: {response.status_code} {response.text[:300]}")

        if self.app_logger:
            self.app_logger.api_call("elevenlabs", "music", len(prompt), time.time() - start)
        return response.content

    async def generate_music(self, prompt: str, duration_seconds: int = 120) -> bytes:
        """Generate a background music track and return MP3 bytes"""
        return await self._run_async(self._generate_music_sync, prompt, duration_seconds)
