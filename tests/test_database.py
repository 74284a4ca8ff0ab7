"""
Unit tests for DatabaseService SQL building - pyodbc is mocked.

Checks the statements the table primitives send (COALESCE partial updates,
nullable columns, IS NULL filters) and the JSON/datetime column decoding.

Run with: python -m pytest tests/test_database.py -v
"""

import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from unittest import mock

import pyodbc
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.services.database import DatabaseService, _decode, _encode, _where_clause
from brushquest.services.errors import PersistenceError


class TestColumnCodec:
    """JSON columns round-trip through NVARCHAR(MAX)"""

    def test_encode_lists_and_dicts(self):
        assert _encode(["a", "b"]) == '["a", "b"]'
        assert _encode({"hat": "c1"}) == '{"hat": "c1"}'
        assert _encode("plain") == "plain"
        assert _encode(None) is None

    def test_decode_json_column(self):
        assert _decode("unlocked_pets", '["sparkle"]') == ["sparkle"]
        assert _decode("narration_sequence", None) is None

    def test_decode_leaves_other_columns(self):
        assert _decode("title", '["not json column"]') == '["not json column"]'

    def test_decode_invalid_json_kept_as_text(self):
        assert _decode("outline", "not json") == "not json"

    def test_decode_datetime(self):
        assert _decode("created_at", datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02T03:04:05"


class TestWhereClause:

    def test_empty(self):
        assert _where_clause(None) == ("", [])

    def test_values_and_nulls(self):
        sql, params = _where_clause({"world_id": "w1", "pet_id": None})
        assert sql == " WHERE world_id = ? AND pet_id IS NULL"
        assert params == ["w1"]


class TestStatements:
    """SQL sent to pyodbc by the primitives"""

    def setup_method(self):
        self.cursor = mock.MagicMock()
        self.cursor.rowcount = 1
        self.cursor.description = [("id",), ("name",), ("unlocked_pets",)]
        self.cursor.fetchall.return_value = [("c1", "Maya", '["sparkle"]')]

        self.conn = mock.MagicMock()
        self.conn.__enter__.return_value = self.conn
        self.conn.cursor.return_value = self.cursor

        self.patcher = mock.patch("brushquest.services.database.pyodbc.connect", return_value=self.conn)
        self.connect = self.patcher.start()
        self.db = DatabaseService("server", "db", "user", "pw")

    def teardown_method(self):
        self.patcher.stop()

    def executed(self):
        return [c.args for c in self.cursor.execute.call_args_list]

    def test_update_uses_coalesce(self):
        self.db._update_sync("children", {"id": "c1"}, {"name": "Maya", "points": None})

        sql, params = self.executed()[0]
        assert sql == ("UPDATE children SET name = COALESCE(?, name), points = COALESCE(?, points), "
                       "updated_at = GETUTCDATE() WHERE id = ?")
        assert params == ("Maya", None, "c1")
        self.conn.commit.assert_called_once()

    def test_nullable_columns_assigned_directly(self):
        self.db._update_sync("collectibles", {"id": "x"}, {"world_id": None, "rarity": "rare"}, nullable={"world_id"})

        sql, params = self.executed()[0]
        assert sql == "UPDATE collectibles SET world_id = ?, rarity = COALESCE(?, rarity) WHERE id = ?"
        assert params == (None, "rare", "x")

    def test_update_encodes_json(self):
        self.db._update_sync("segments", {"id": "s1"}, {"reference_ids": ["r1", "r2"]})
        assert self.executed()[0][1] == ('["r1", "r2"]', "s1")

    def test_insert_generates_id_and_reads_back(self):
        row = self.db._insert_sync("children", {"name": "Maya", "unlocked_pets": ["sparkle"]})

        insert_sql, insert_params = self.executed()[0]
        assert insert_sql == "INSERT INTO children (id, name, unlocked_pets) VALUES (?, ?, ?)"
        assert insert_params[1:] == ("Maya", json.dumps(["sparkle"]))
        select_sql, select_params = self.executed()[1]
        assert select_sql == "SELECT * FROM children WHERE id = ?"
        assert select_params == (insert_params[0],)
        assert row == {"id": "c1", "name": "Maya", "unlocked_pets": ["sparkle"]}

    def test_insert_keeps_supplied_id(self):
        self.db._insert_sync("children", {"id": "local-123", "name": "Maya"})
        assert self.executed()[0][1][0] == "local-123"

    def test_select_with_order_and_limit(self):
        self.db._select_sync("pets", {"is_published": 1}, order_by="unlock_cost ASC", limit=1)
        assert self.executed()[0] == ("SELECT TOP 1 * FROM pets WHERE is_published = ? ORDER BY unlock_cost ASC", (1,))

    def test_upsert_inserts_when_nothing_updated(self):
        self.cursor.rowcount = 0
        self.db._upsert_sync("pet_name_audio", {"pet_id": "sparkle"}, {"audio_url": "u"})

        statements = [sql for sql, _ in self.executed()]
        assert statements[0].startswith("UPDATE pet_name_audio")
        assert statements[1].startswith("INSERT INTO pet_name_audio")

    def test_claim_suggestion_is_conditional(self):
        self.cursor.rowcount = 0
        claimed = asyncio.run(self.db.claim_suggestion("s1"))

        sql, params = self.executed()[0]
        assert sql == "UPDATE pet_suggestions SET is_approved = COALESCE(?, is_approved) WHERE id = ? AND is_approved = ?"
        assert params == (1, "s1", 0)
        assert claimed is False

    def test_update_missing_row_returns_none(self):
        self.cursor.rowcount = 0
        assert asyncio.run(self.db.update_world("missing", {"name": "x"})) is None

    def test_driver_error_is_persistence_error(self):
        self.cursor.execute.side_effect = pyodbc.Error("08S01", "link failure")
        with pytest.raises(PersistenceError):
            self.db._select_sync("worlds")
