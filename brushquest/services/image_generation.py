"""
Gemini image-generation client.

Sends a text prompt plus optional inline reference images and returns the
first inline image in the reply. Callers build the prompt (see
brushquest.prompts.images) and persist the result themselves.
"""

import asyncio
import base64
import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple

import requests

from .errors import ProviderError
from .text_generation import GeminiTextClient

logger = logging.getLogger(__name__)

GeneratedImage = Tuple[bytes, str]


def fetch_image_as_base64(url: str, timeout: int = 30) -> Optional[Dict[str, str]]:
    """
    Download an image and encode it as a Gemini inline part.

    Returns None when the image cannot be fetched; a missing reference image
    degrades consistency but never fails the generation.
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch reference image {url}: {e}")
        return None

    mime_type = response.headers.get("Content-Type", "image/png").split(";")[0]
    return {
        "mimeType": mime_type,
        "data": base64.b64encode(response.content).decode("ascii"),
    }


def decode_data_url(data_url: str) -> Optional[Dict[str, str]]:
    """Split a data:<mime>;base64,<payload> URL into an inline part"""
    match = re.match(r'^data:([^;]+);base64,(.+)$', data_url or "", re.DOTALL)
    if not match:
        return None
    return {"mimeType": match.group(1), "data": match.group(2)}


class GeminiImageClient(GeminiTextClient):
    """Prompt + reference images in, image bytes out"""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash-exp-image-generation", **kwargs):
        super().__init__(api_key, model=model, **kwargs)

    def _generate_image_sync(self, prompt: str, reference_images: List[Dict[str, str]]) -> GeneratedImage:
        parts: List[Dict[str, Any]] = [{"text": prompt}]
        for image in reference_images:
            parts.append({"inlineData": {"mimeType": image["mimeType"], "data": image["data"]}})

        body = {
            "contents": [{"parts": parts}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

        start = time.time()
        data = self._call_with_retry_sync(body, len(prompt))

        for candidate in data.get("candidates") or []:
            for part in (candidate.get("content") or {}).get("parts") or []:
                inline = part.get("inlineData")
                if inline and inline.get("data"):
                    logger.info(f"Image generated with {len(reference_images)} references ({time.time() - start:.1f}s)")
                    return base64.b64decode(inline["data"]), inline.get("mimeType", "image/png")

        raise ProviderError("Gemini", "No image generated")

    async def generate_image(
        self,
        prompt: str,
        reference_images: Optional[List[Dict[str, str]]] = None
    ) -> GeneratedImage:
        """
        Generate one image.

        Args:
            prompt: Full composite prompt
            reference_images: Inline parts ({mimeType, data}) in the order
                the prompt's [Image N] labels refer to them

        Returns:
            (image bytes, MIME type)
        """
        return await self._run_async(self._generate_image_sync, prompt, reference_images or [])

    async def fetch_references(self, urls: List[Optional[str]]) -> List[Optional[Dict[str, str]]]:
        """Fetch several reference images concurrently; failures come back as None"""
        async def _fetch(url):
            return await self._run_async(fetch_image_as_base64, url) if url else None

        return list(await asyncio.gather(*(_fetch(url) for url in urls)))
