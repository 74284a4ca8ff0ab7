"""
Azure SQL Database service for BrushQuest.

Every entity (worlds, stories, chapters, segments, references, pets,
collectibles, poses, sprites, children) is read and written through a small
set of table primitives. Partial updates use COALESCE semantics: a column
whose new value is None keeps its stored value, unless the caller names it
as nullable, in which case None is written through.

Each statement commits on its own; there are no multi-statement transactions.
"""

import pyodbc
import json
import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, Any, List, Iterable
from datetime import datetime, date
from uuid import uuid4

from .errors import PersistenceError


# Columns holding JSON documents or lists, decoded on read and encoded on write
JSON_COLUMNS = {
    "outline",
    "story_bible",
    "narration_sequence",
    "recap_narration_sequence",
    "cliffhanger_narration_sequence",
    "teaser_narration_sequence",
    "storyboard_characters",
    "storyboard_character_ids",
    "reference_ids",
    "unlocked_pets",
    "unlocked_brushes",
    "unlocked_worlds",
    "current_story_arc",
    "completed_story_arcs",
    "name_audio_urls",
    "name_possessive_audio_urls",
    "collected_stickers",
    "collected_accessories",
    "equipped_accessories",
    "audio_urls",
    "possessive_audio_urls",
}

TABLES_WITH_UPDATED_AT = {"worlds", "stories", "pets", "children"}


def _encode(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


def _decode(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in JSON_COLUMNS and isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _where_clause(where: Optional[Dict[str, Any]]):
    if not where:
        return "", []
    clauses, params = [], []
    for column, value in where.items():
        if value is None:
            clauses.append(f"{column} IS NULL")
        else:
            clauses.append(f"{column} = ?")
            params.append(value)
    return " WHERE " + " AND ".join(clauses), params


class DatabaseService:
    """Azure SQL Database service for BrushQuest content and profiles."""

    def __init__(
        self,
        server: str,
        database: str,
        username: str,
        password: str,
        logger=None
    ):
        """
        Initialize database service.

        Args:
            server: Azure SQL server (e.g., brushquest-db.database.windows.net)
            database: Database name
            username: SQL admin username
            password: SQL admin password
            logger: Optional logger instance
        """
        self.connection_string = (
            f"Driver={{ODBC Driver 18 for SQL Server}};"
            f"Server=tcp:{server},1433;"
            f"Database={database};"
            f"Uid={username};"
            f"Pwd={password};"
            f"Encrypt=yes;TrustServerCertificate=no;Connection Timeout=30;"
        )
        self.logger = logger
        self._executor = ThreadPoolExecutor(max_workers=5)
        self._initialized = False

    def initialize(self):
        """Initialize the database connection (verify connectivity)."""
        if self._initialized:
            return

        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT 1")
                cursor.fetchone()
            self._initialized = True
            print("   Azure SQL connection verified")
        except Exception as e:
            print(f"   Warning: Azure SQL connection failed: {e}")
            raise

    def _get_connection(self) -> pyodbc.Connection:
        """Get a database connection."""
        return pyodbc.connect(self.connection_string)

    async def _run_async(self, func, *args, **kwargs):
        """Run a sync function in the thread pool."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _log(self, operation: str, path: str, summary: str, duration: float = 0):
        """Log database operation."""
        if self.logger:
            self.logger.info(f"[DB {operation}] {path}: {summary} ({duration:.3f}s)")

    # =========================================================================
    # Table Primitives
    # =========================================================================

    def _query_sync(self, sql: str, params: Iterable[Any] = ()) -> List[Dict[str, Any]]:
        """Run a SELECT and return rows as dicts with JSON columns decoded."""
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(sql, tuple(params))
                columns = [col[0] for col in cursor.description]
                return [
                    {col: _decode(col, val) for col, val in zip(columns, row)}
                    for row in cursor.fetchall()
                ]
        except pyodbc.Error as e:
            raise PersistenceError(f"Database error: {e}") from e

    def _execute_sync(self, sql: str, params: Iterable[Any] = ()) -> int:
        """Run a write statement, commit, and return the affected row count."""
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(sql, tuple(params))
                rowcount = cursor.rowcount
                conn.commit()
                return rowcount
        except pyodbc.Error as e:
            raise PersistenceError(f"Database error: {e}") from e

    def _select_sync(
        self,
        table: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        start = time.time()
        where_sql, params = _where_clause(where)
        top = f"TOP {int(limit)} " if limit else ""
        order = f" ORDER BY {order_by}" if order_by else ""
        rows = self._query_sync(f"SELECT {top}* FROM {table}{where_sql}{order}", params)
        self._log("select", table, f"{len(rows)} rows", time.time() - start)
        return rows

    def _insert_sync(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row (generating its id) and return it as stored."""
        start = time.time()
        row = {"id": str(uuid4()), **values}
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        self._execute_sync(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            [_encode(v) for v in row.values()]
        )
        self._log("insert", table, row["id"], time.time() - start)
        return self._select_sync(table, {"id": row["id"]})[0]

    def _update_sync(
        self,
        table: str,
        where: Dict[str, Any],
        values: Dict[str, Any],
        nullable: Iterable[str] = ()
    ) -> int:
        """
        Partially update matching rows.

        Columns listed in `nullable` are assigned directly (so an explicit
        None clears them); all others use COALESCE(new, existing).
        """
        start = time.time()
        nullable = set(nullable)
        assignments, params = [], []
        for column, value in values.items():
            if column in nullable:
                assignments.append(f"{column} = ?")
            else:
                assignments.append(f"{column} = COALESCE(?, {column})")
            params.append(_encode(value))
        if table in TABLES_WITH_UPDATED_AT:
            assignments.append("updated_at = GETUTCDATE()")
        if not assignments:
            return 0

        where_sql, where_params = _where_clause(where)
        count = self._execute_sync(
            f"UPDATE {table} SET {', '.join(assignments)}{where_sql}",
            params + where_params
        )
        self._log("update", table, f"{count} rows", time.time() - start)
        return count

    def _delete_sync(self, table: str, where: Dict[str, Any]) -> int:
        start = time.time()
        where_sql, params = _where_clause(where)
        count = self._execute_sync(f"DELETE FROM {table}{where_sql}", params)
        self._log("delete", table, f"{count} rows", time.time() - start)
        return count

    def _upsert_sync(self, table: str, key: Dict[str, Any], values: Dict[str, Any]) -> Dict[str, Any]:
        """Update the row matching key, inserting it when absent."""
        if not self._update_sync(table, key, values):
            self._insert_sync(table, {**key, **values})
        return self._select_sync(table, key)[0]

    async def _select(self, table, where=None, order_by=None, limit=None) -> List[Dict[str, Any]]:
        return await self._run_async(self._select_sync, table, where, order_by, limit)

    async def _select_one(self, table: str, where: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self._select(table, where, limit=1)
        return rows[0] if rows else None

    async def _insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._run_async(self._insert_sync, table, values)

    async def _update_by_id(
        self,
        table: str,
        row_id: str,
        values: Dict[str, Any],
        nullable: Iterable[str] = ()
    ) -> Optional[Dict[str, Any]]:
        """Update one row by id and return it, or None if it does not exist."""
        if values:
            count = await self._run_async(self._update_sync, table, {"id": row_id}, values, nullable)
            if not count:
                return None
        return await self._select_one(table, {"id": row_id})

    async def _delete_by_id(self, table: str, row_id: str) -> bool:
        return await self._run_async(self._delete_sync, table, {"id": row_id}) > 0

    # =========================================================================
    # World Operations
    # =========================================================================

    def _list_worlds_sync(self) -> List[Dict[str, Any]]:
        """All worlds, newest first, with their story counts."""
        start = time.time()
        rows = self._query_sync("""
            SELECT w.*, COUNT(s.id) AS story_count
            FROM worlds w
            LEFT JOIN stories s ON s.world_id = w.id
            GROUP BY w.id, w.name, w.display_name, w.description, w.theme,
                     w.background_image_url, w.background_music_url, w.unlock_cost,
                     w.is_starter, w.is_published, w.created_at, w.updated_at
            ORDER BY w.created_at DESC
        """)
        self._log("select", "worlds", f"{len(rows)} rows with story counts", time.time() - start)
        return rows

    async def list_worlds(self) -> List[Dict[str, Any]]:
        return await self._run_async(self._list_worlds_sync)

    async def list_published_worlds(self) -> List[Dict[str, Any]]:
        """Published worlds: starters first, then by unlock cost, then age."""
        return await self._select(
            "worlds", {"is_published": 1},
            order_by="is_starter DESC, unlock_cost ASC, created_at ASC"
        )

    async def list_world_music(self) -> List[Dict[str, Any]]:
        """Worlds with a background track, by display name."""
        worlds = await self._select("worlds", order_by="display_name")
        return [w for w in worlds if w.get("background_music_url")]

    async def get_world(self, world_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("worlds", {"id": world_id})

    async def create_world(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("worlds", values)

    async def update_world(self, world_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("worlds", world_id, values)

    async def delete_world(self, world_id: str) -> bool:
        return await self._delete_by_id("worlds", world_id)

    # =========================================================================
    # Story Pitch Operations
    # =========================================================================

    async def create_pitch(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("story_pitches", values)

    async def get_pitch(self, pitch_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("story_pitches", {"id": pitch_id})

    async def list_pitches(self, world_id: str) -> List[Dict[str, Any]]:
        return await self._select("story_pitches", {"world_id": world_id}, order_by="created_at DESC")

    async def mark_pitch_used(self, pitch_id: str):
        await self._update_by_id("story_pitches", pitch_id, {"is_used": 1})

    # =========================================================================
    # Story Operations
    # =========================================================================

    async def list_stories(self, world_id: Optional[str] = None) -> List[Dict[str, Any]]:
        where = {"world_id": world_id} if world_id else None
        return await self._select("stories", where, order_by="created_at DESC")

    async def list_published_stories(self, world_id: str) -> List[Dict[str, Any]]:
        return await self._select(
            "stories", {"world_id": world_id, "is_published": 1},
            order_by="created_at ASC"
        )

    async def get_story(self, story_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("stories", {"id": story_id})

    async def create_story(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("stories", values)

    async def update_story(self, story_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("stories", story_id, values)

    async def delete_story(self, story_id: str) -> bool:
        return await self._delete_by_id("stories", story_id)

    # =========================================================================
    # Chapter and Segment Operations
    # =========================================================================

    async def create_chapter(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("chapters", values)

    async def get_chapter(self, chapter_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("chapters", {"id": chapter_id})

    async def list_chapters(self, story_id: str) -> List[Dict[str, Any]]:
        return await self._select("chapters", {"story_id": story_id}, order_by="chapter_number ASC")

    async def update_chapter(self, chapter_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("chapters", chapter_id, values)

    async def create_segment(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("segments", values)

    async def get_segment(self, segment_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("segments", {"id": segment_id})

    async def list_segments(self, chapter_id: str) -> List[Dict[str, Any]]:
        return await self._select("segments", {"chapter_id": chapter_id}, order_by="segment_order ASC")

    async def update_segment(self, segment_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("segments", segment_id, values)

    async def get_story_tree(self, story_id: str) -> Optional[Dict[str, Any]]:
        """A story with its chapters (ordered) and each chapter's segments."""
        story = await self.get_story(story_id)
        if not story:
            return None

        chapters = await self.list_chapters(story_id)
        for chapter in chapters:
            chapter["segments"] = await self.list_segments(chapter["id"])
        story["chapters"] = chapters
        return story

    # =========================================================================
    # Story Reference Operations
    # =========================================================================

    async def create_reference(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("story_references", values)

    async def list_references(self, story_id: str) -> List[Dict[str, Any]]:
        return await self._select("story_references", {"story_id": story_id}, order_by="sort_order ASC")

    async def get_reference(self, reference_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("story_references", {"id": reference_id})

    async def update_reference(self, reference_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("story_references", reference_id, values)

    async def delete_reference(self, reference_id: str) -> bool:
        return await self._delete_by_id("story_references", reference_id)

    # =========================================================================
    # Pet Operations
    # =========================================================================

    async def list_pets(self, published_only: bool = False) -> List[Dict[str, Any]]:
        where = {"is_published": 1} if published_only else None
        return await self._select("pets", where, order_by="is_starter DESC, unlock_cost ASC, created_at ASC")

    async def get_pet(self, pet_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("pets", {"id": pet_id})

    async def create_pet(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("pets", values)

    async def update_pet(self, pet_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("pets", pet_id, values)

    async def delete_pet(self, pet_id: str) -> bool:
        return await self._delete_by_id("pets", pet_id)

    async def list_suggestions(self) -> List[Dict[str, Any]]:
        """Pending (unapproved) pet suggestions, newest first."""
        return await self._select("pet_suggestions", {"is_approved": 0}, order_by="created_at DESC")

    async def get_suggestion(self, suggestion_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("pet_suggestions", {"id": suggestion_id})

    async def create_suggestion(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("pet_suggestions", values)

    async def delete_suggestion(self, suggestion_id: str) -> bool:
        return await self._delete_by_id("pet_suggestions", suggestion_id)

    async def claim_suggestion(self, suggestion_id: str) -> bool:
        """
        Flip a suggestion to approved if nobody else has.

        The conditional UPDATE makes approval race-safe: of two concurrent
        callers exactly one sees a changed row.
        """
        count = await self._run_async(
            self._update_sync, "pet_suggestions",
            {"id": suggestion_id, "is_approved": 0}, {"is_approved": 1}
        )
        return count > 0

    async def release_suggestion(self, suggestion_id: str):
        """Undo a claim whose pet could not be created"""
        await self._run_async(
            self._update_sync, "pet_suggestions",
            {"id": suggestion_id}, {"is_approved": 0}
        )

    async def list_pet_audio(self) -> List[Dict[str, Any]]:
        return await self._select("pet_name_audio")

    async def save_pet_audio(self, pet_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._run_async(self._upsert_sync, "pet_name_audio", {"pet_id": pet_id}, values)

    # =========================================================================
    # Collectible Operations
    # =========================================================================

    async def list_collectibles(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._select("collectibles", filters or None, order_by="created_at DESC")

    async def get_collectible(self, collectible_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("collectibles", {"id": collectible_id})

    async def create_collectible(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("collectibles", values)

    async def update_collectible(
        self,
        collectible_id: str,
        values: Dict[str, Any],
        nullable: Iterable[str] = ()
    ) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("collectibles", collectible_id, values, nullable)

    async def delete_collectible(self, collectible_id: str) -> bool:
        return await self._delete_by_id("collectibles", collectible_id)

    # =========================================================================
    # Pose and Sprite Operations
    # =========================================================================

    async def list_poses(self, character_type: Optional[str] = None, active_only: bool = False) -> List[Dict[str, Any]]:
        where = {}
        if character_type:
            where["character_type"] = character_type
        if active_only:
            where["is_active"] = 1
        return await self._select("pose_definitions", where, order_by="character_type ASC, sort_order ASC")

    async def upsert_pose(self, character_type: str, pose_key: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._run_async(
            self._upsert_sync, "pose_definitions",
            {"character_type": character_type, "pose_key": pose_key}, values
        )

    async def update_pose(self, pose_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("pose_definitions", pose_id, values)

    async def delete_pose(self, pose_id: str) -> bool:
        return await self._delete_by_id("pose_definitions", pose_id)

    async def list_sprites(self, owner_type: str, owner_id: str) -> List[Dict[str, Any]]:
        return await self._select("character_sprites", {"owner_type": owner_type, "owner_id": owner_id})

    async def upsert_sprite(self, owner_type: str, owner_id: str, pose_key: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._run_async(
            self._upsert_sync, "character_sprites",
            {"owner_type": owner_type, "owner_id": owner_id, "pose_key": pose_key}, values
        )

    async def delete_sprites(self, owner_type: str, owner_id: str, pose_key: Optional[str] = None) -> int:
        where = {"owner_type": owner_type, "owner_id": owner_id}
        if pose_key:
            where["pose_key"] = pose_key
        return await self._run_async(self._delete_sync, "character_sprites", where)

    # =========================================================================
    # Child Operations
    # =========================================================================

    async def list_children(self) -> List[Dict[str, Any]]:
        return await self._select("children", order_by="created_at DESC")

    async def get_child(self, child_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one("children", {"id": child_id})

    async def create_child(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert("children", values)

    async def update_child(
        self,
        child_id: str,
        values: Dict[str, Any],
        nullable: Iterable[str] = ()
    ) -> Optional[Dict[str, Any]]:
        return await self._update_by_id("children", child_id, values, nullable)

    async def delete_child(self, child_id: str) -> bool:
        return await self._delete_by_id("children", child_id)
