"""
Shared fixtures: an in-memory DatabaseService and an API client wired to it.

FakeDatabase keeps every public DatabaseService method and replaces only the
SQL table primitives, so COALESCE updates, nullable columns and the
conditional suggestion claim behave as they do against Azure SQL.
"""

import copy
import sys
import threading
from collections import defaultdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.config.settings import Settings
from brushquest.services.database import DatabaseService, TABLES_WITH_UPDATED_AT
from brushquest.services.jobs import JobRegistry
from brushquest.services.providers import Providers


# Column defaults from schema.sql that the routes rely on
TABLE_DEFAULTS = {
    "worlds": {"unlock_cost": 0, "is_starter": False, "is_published": False},
    "story_pitches": {"is_used": False},
    "stories": {"total_chapters": 5, "status": "draft", "is_published": False},
    "segments": {"duration_seconds": 15, "child_pose": "happy", "pet_pose": "happy"},
    "story_references": {"source": "manual", "sort_order": 0},
    "pets": {"unlock_cost": 0, "is_starter": False, "is_published": False},
    "pet_suggestions": {"unlock_cost": 0, "is_starter": False, "is_approved": False},
    "collectibles": {"rarity": "common", "is_published": False},
    "pose_definitions": {"sort_order": 0, "is_active": True},
    "character_sprites": {"sprite_url": "", "generation_status": "pending"},
}


def _matches(row: Dict[str, Any], where: Optional[Dict[str, Any]]) -> bool:
    for column, value in (where or {}).items():
        if value is None:
            if row.get(column) is not None:
                return False
        elif row.get(column) != value:
            return False
    return True


class FakeDatabase(DatabaseService):
    """DatabaseService backed by dicts instead of pyodbc"""

    def __init__(self):
        super().__init__(server="fake", database="fake", username="fake", password="fake")
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self._lock = threading.Lock()
        self._tick = 0

    def initialize(self):
        self._initialized = True

    def _now(self) -> str:
        self._tick += 1
        return (datetime(2026, 1, 1) + timedelta(seconds=self._tick)).isoformat()

    def _select_sync(self, table, where=None, order_by=None, limit=None):
        with self._lock:
            rows = [copy.deepcopy(r) for r in self.tables[table] if _matches(r, where)]

        # Apply ORDER BY terms right to left with stable sorts
        for term in reversed((order_by or "").split(",")):
            parts = term.split()
            if not parts:
                continue
            column = parts[0]
            descending = len(parts) > 1 and parts[1].upper() == "DESC"
            rows.sort(key=lambda r: (r.get(column) is not None, r.get(column)), reverse=descending)

        return rows[:limit] if limit else rows

    def _insert_sync(self, table, values):
        with self._lock:
            row = {
                "id": str(uuid4()),
                **TABLE_DEFAULTS.get(table, {}),
                "created_at": self._now(),
                **copy.deepcopy(values),
            }
            if table in TABLES_WITH_UPDATED_AT:
                row.setdefault("updated_at", row["created_at"])
            self.tables[table].append(row)
        return self._select_sync(table, {"id": row["id"]})[0]

    def _update_sync(self, table, where, values, nullable=()):
        nullable = set(nullable)
        count = 0
        with self._lock:
            for row in self.tables[table]:
                if not _matches(row, where):
                    continue
                for column, value in values.items():
                    if value is not None or column in nullable:
                        row[column] = copy.deepcopy(value)
                if table in TABLES_WITH_UPDATED_AT:
                    row["updated_at"] = self._now()
                count += 1
        return count

    def _delete_sync(self, table, where):
        with self._lock:
            keep = [r for r in self.tables[table] if not _matches(r, where)]
            count = len(self.tables[table]) - len(keep)
            self.tables[table] = keep

        # ON DELETE CASCADE for the story tree
        if table == "worlds":
            for story in self._select_sync("stories", {"world_id": where.get("id")}):
                self._delete_sync("stories", {"id": story["id"]})
        elif table == "stories":
            for chapter in self._select_sync("chapters", {"story_id": where.get("id")}):
                self._delete_sync("chapters", {"id": chapter["id"]})
        elif table == "chapters":
            self._delete_sync("segments", {"chapter_id": where.get("id")})
        return count

    def _list_worlds_sync(self):
        worlds = self._select_sync("worlds", order_by="created_at DESC")
        for world in worlds:
            world["story_count"] = len(self._select_sync("stories", {"world_id": world["id"]}))
        return worlds


def make_settings(**overrides) -> Settings:
    values = {
        "admin_password": "test-password",
        "gemini_api_key": "test-gemini",
        "elevenlabs_api_key": "test-elevenlabs",
        "azure_blob_connection_string": "test-blob",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_providers(settings: Settings = None) -> Providers:
    """Providers with every client replaced by a mock"""
    text = MagicMock()
    text.generate_json = AsyncMock()

    images = MagicMock()
    images.generate_image = AsyncMock(return_value=(b"png-bytes", "image/png"))
    images.fetch_references = AsyncMock(side_effect=lambda urls: [{"mimeType": "image/png", "data": "eA=="} if url else None for url in urls])

    speech = MagicMock()
    speech.synthesize = AsyncMock(return_value=b"mp3-bytes")
    speech.synthesize_as = AsyncMock(return_value=b"mp3-bytes")
    speech.generate_music = AsyncMock(return_value=b"music-bytes")

    blob = MagicMock()
    blob.upload_image = AsyncMock(side_effect=lambda path, data, content_type=None: f"https://blob.test/{path}")
    blob.upload_audio = AsyncMock(side_effect=lambda path, data, content_type=None: f"https://blob.test/{path}")

    return Providers(settings or make_settings(), text=text, images=images, speech=speech, blob=blob)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def providers():
    return make_providers()


@pytest.fixture
def client(fake_db, providers):
    """TestClient with services wired to the fake database and mock providers"""
    from fastapi.testclient import TestClient

    from brushquest.api.dependencies import set_services
    from brushquest.main import app
    from brushquest.services.collectibles import CollectibleService
    from brushquest.services.media import MediaService
    from brushquest.services.pets import PetService
    from brushquest.services.story_pipeline import StoryPipeline

    jobs = JobRegistry()
    media = MediaService(providers, db=fake_db)
    set_services(
        settings=providers.settings,
        db=fake_db,
        providers=providers,
        jobs=jobs,
        media=media,
        pipeline=StoryPipeline(providers, fake_db, jobs, media),
        collectibles=CollectibleService(providers, fake_db),
        pets=PetService(providers, fake_db),
    )

    # Not used as a context manager, so the real lifespan never runs
    yield TestClient(app)

    set_services()
