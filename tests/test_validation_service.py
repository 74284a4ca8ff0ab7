"""
Unit tests for LLM output handling - JSON extraction and draft validation.

No model calls: every input is a canned model reply.

Run with: python -m pytest tests/test_validation_service.py -v
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.models.drafts import ChapterDraft, PetDraft, ReferenceDraft, StoryPitchDraft
from brushquest.services.errors import MalformedOutputError, SchemaMismatchError
from brushquest.services.validation_service import (
    extract_json,
    filter_valid,
    validate_list,
    validate_payload,
)


class TestExtractJson:
    """Locating the JSON payload inside free-form replies"""

    def test_plain_object(self):
        assert extract_json('{"name": "crystal-caves"}') == {"name": "crystal-caves"}

    def test_fenced_block_preferred(self):
        text = 'Here you go:\n```json\n{"title": "The Lost Star"}\n```\nEnjoy!'
        assert extract_json(text) == {"title": "The Lost Star"}

    def test_fence_without_language_tag(self):
        text = '```\n[{"chapter": 1}]\n```'
        assert extract_json(text) == [{"chapter": 1}]

    def test_object_surrounded_by_prose(self):
        text = 'Sure! {"tone": "cozy", "themes": ["friendship"]} Let me know.'
        assert extract_json(text) == {"tone": "cozy", "themes": ["friendship"]}

    def test_braces_inside_strings_ignored(self):
        text = 'Result: {"text": "She drew a {curly} shape", "n": 1} done'
        assert extract_json(text) == {"text": "She drew a {curly} shape", "n": 1}

    def test_escaped_quotes_inside_strings(self):
        text = '{"text": "He said \\"hi\\" {wink}"}'
        assert extract_json(text) == {"text": 'He said "hi" {wink}'}

    def test_bare_array(self):
        text = 'Pets: [{"name": "luna"}, {"name": "pip"}]'
        assert extract_json(text) == [{"name": "luna"}, {"name": "pip"}]

    def test_unfenced_array_of_objects(self):
        text = '[{"name": "luna"}, {"name": "pip"}]'
        assert extract_json(text) == [{"name": "luna"}, {"name": "pip"}]

    def test_mismatched_brackets_raise(self):
        with pytest.raises(MalformedOutputError):
            extract_json('[{"name": "luna"]}')

    def test_broken_fence_falls_back_to_raw_reply(self):
        text = 'Final answer: {"title": "The Lost Star"}\nDraft:\n```json\n{"title": \n```'
        assert extract_json(text) == {"title": "The Lost Star"}

    def test_object_preferred_over_array(self):
        text = '{"pitches": [{"title": "A"}]}'
        assert extract_json(text) == {"pitches": [{"title": "A"}]}

    def test_no_json_raises(self):
        with pytest.raises(MalformedOutputError):
            extract_json("I could not think of anything, sorry.")

    def test_empty_reply_raises(self):
        with pytest.raises(MalformedOutputError):
            extract_json("")

    def test_unbalanced_raises(self):
        with pytest.raises(MalformedOutputError):
            extract_json('{"title": "cut off mid')

    def test_invalid_json_not_repaired(self):
        # Trailing commas are not repaired
        with pytest.raises(MalformedOutputError):
            extract_json('{"a": 1,}')

    def test_malformed_maps_to_500(self):
        with pytest.raises(MalformedOutputError) as exc_info:
            extract_json("nope")
        assert exc_info.value.status_code == 500


class TestValidatePayload:
    """Shape checks against the draft models"""

    def test_camel_case_aliases(self):
        pitch = validate_payload({
            "title": "The Lost Star",
            "description": "A star wants to go home",
            "outline": [{"chapter": 1, "title": "Falling", "summary": "It falls"}],
        }, StoryPitchDraft, "story pitch")
        assert pitch.outline[0].title == "Falling"

    def test_missing_field_is_schema_mismatch(self):
        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_payload({"title": "No outline"}, StoryPitchDraft, "story pitch")
        assert "story pitch" in exc_info.value.message

    def test_non_object_is_schema_mismatch(self):
        with pytest.raises(SchemaMismatchError):
            validate_payload([1, 2, 3], StoryPitchDraft, "story pitch")

    def test_chapter_needs_five_segments(self):
        payload = {
            "title": "Short",
            "segments": [{"text": "one"}, {"text": "two"}],
        }
        with pytest.raises(SchemaMismatchError):
            validate_payload(payload, ChapterDraft, "chapter")

    def test_extra_keys_ignored(self):
        draft = validate_payload({
            "name": "luna",
            "displayName": "Luna",
            "description": "A glowing moth",
            "favouriteSnack": "moonbeams",
        }, PetDraft, "pet")
        assert draft.display_name == "Luna"
        assert draft.unlock_cost == 0


class TestValidateList:
    """Lists arrive bare or wrapped in an object"""

    PETS = [{"name": "luna", "displayName": "Luna", "description": "A moth"}]

    def test_bare_list(self):
        assert len(validate_list(self.PETS, PetDraft, "pets")) == 1

    def test_wrapped_list(self):
        assert len(validate_list({"pets": self.PETS}, PetDraft, "pets", key="pets")) == 1

    def test_wrong_key_fails(self):
        with pytest.raises(SchemaMismatchError):
            validate_list({"animals": self.PETS}, PetDraft, "pets", key="pets")

    def test_one_bad_entry_fails_all(self):
        with pytest.raises(SchemaMismatchError):
            validate_list(self.PETS + [{"name": "nameless"}], PetDraft, "pets")


class TestFilterValid:
    """Best-effort lists keep the valid entries"""

    def test_drops_invalid_entries(self):
        items = [
            {"type": "character", "name": "Old Owl", "description": "A wise owl"},
            {"type": "spaceship", "name": "Zoom", "description": "Unknown type"},
            {"type": "object", "name": "", "description": "Empty name"},
            "not even an object",
        ]
        refs = filter_valid(items, ReferenceDraft)
        assert [r.name for r in refs] == ["Old Owl"]

    def test_non_list_gives_empty(self):
        assert filter_valid({"references": []}, ReferenceDraft) == []
