"""
Azure Blob Storage service for BrushQuest.

Stores generated images and audio under purpose-based paths
(story-images/, avatars/, name-audio/, ...). Uploads overwrite, so the last
write at a path wins.
"""

from azure.storage.blob import BlobServiceClient, ContentSettings
from azure.core.exceptions import AzureError
from typing import Optional
import asyncio
import time
from concurrent.futures import ThreadPoolExecutor

from .errors import ProviderError


class BlobStorageService:
    """Azure Blob Storage service for generated assets."""

    def __init__(
        self,
        connection_string: str,
        container_name: str = "brushquest-assets",
        logger=None
    ):
        """
        Initialize blob storage service.

        Args:
            connection_string: Azure Storage connection string
            container_name: Name of the blob container
            logger: Optional BrushQuestLogger instance
        """
        self.connection_string = connection_string
        self.container_name = container_name
        self.logger = logger
        self._executor = ThreadPoolExecutor(max_workers=3)
        self._initialized = False

    def initialize(self):
        """Initialize the blob storage client."""
        if self._initialized:
            return

        try:
            self.client = BlobServiceClient.from_connection_string(self.connection_string)
            self.container = self.client.get_container_client(self.container_name)

            # Verify container exists
            if not self.container.exists():
                print(f"   Creating container: {self.container_name}")
                self.container.create_container(public_access="blob")

            self._initialized = True
            print(f"   Azure Blob Storage initialized: {self.container_name}")
        except Exception as e:
            print(f"   Warning: Blob Storage initialization failed: {e}")
            raise

    async def _run_async(self, func, *args, **kwargs):
        """Run a sync function in the thread pool."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _upload_sync(self, path: str, data: bytes, content_type: str) -> str:
        """Upload bytes and return the public blob URL."""
        self.initialize()
        start = time.time()
        blob_client = self.container.get_blob_client(path)

        try:
            blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type)
            )
        except AzureError as e:
            raise ProviderError("Blob storage", str(e)) from e

        if self.logger:
            self.logger.storage_operation("upload", path, content_type, len(data), time.time() - start)
        return blob_client.url

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Upload an asset and return its URL.

        Args:
            path: Blob path, e.g. "story-images/{segmentId}-{ts}.png"
            data: Raw bytes
            content_type: MIME type stored with the blob

        Returns:
            Public blob URL
        """
        return await self._run_async(self._upload_sync, path, data, content_type)

    async def upload_image(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        return await self.upload(path, data, content_type or "image/png")

    async def upload_audio(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        return await self.upload(path, data, content_type or "audio/mpeg")
