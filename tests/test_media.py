"""
Unit tests for MediaService - dispatch by type, validation and upload paths.

Providers are mocks (see conftest.make_providers); uploaded URLs echo the
blob path so the storage layout can be asserted directly.

Run with: python -m pytest tests/test_media.py -v
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.models.requests import SegmentAudioRequest
from brushquest.services.errors import ValidationError
from brushquest.services.media import MediaService, bible_visual_references

from conftest import FakeDatabase, make_providers


class TestDispatcher:
    """POST /api/generate routes on `type`"""

    def setup_method(self):
        self.providers = make_providers()
        self.db = FakeDatabase()
        self.media = MediaService(self.providers, db=self.db)

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(self.media.generate({"type": "hologram"}))
        assert exc_info.value.message.startswith("Invalid type. Must be: image, userAvatar")

    def test_missing_type(self):
        with pytest.raises(ValidationError):
            asyncio.run(self.media.generate({}))

    def test_pet_avatar(self):
        result = asyncio.run(self.media.generate({
            "type": "petAvatar", "petId": "luna", "petName": "Luna", "petDescription": "A glowing moth",
        }))
        assert result == {"avatarUrl": "https://blob.test/pet-avatars/luna.png", "type": "pet"}

    def test_user_avatar_needs_data_url(self):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(self.media.generate({
                "type": "userAvatar", "photoDataUrl": "not-a-data-url", "childId": "c1", "childName": "Maya",
            }))
        assert exc_info.value.message == "Invalid photo data URL format"

    def test_user_avatar_sends_photo(self):
        result = asyncio.run(self.media.generate({
            "type": "userAvatar", "photoDataUrl": "data:image/jpeg;base64,AAAA", "childId": "c1", "childName": "Maya",
        }))
        assert result["avatarUrl"] == "https://blob.test/avatars/c1.png"
        references = self.providers.images.generate_image.call_args.args[1]
        assert references == [{"mimeType": "image/jpeg", "data": "AAAA"}]

    def test_world_image_updates_row(self):
        world = self.db._insert_sync("worlds", {"name": "caves", "display_name": "Caves", "description": "Dark"})
        asyncio.run(self.media.generate({
            "type": "worldImage", "worldId": world["id"], "worldName": "Caves", "worldDescription": "Dark",
        }))
        stored = self.db._select_sync("worlds", {"id": world["id"]})[0]
        assert stored["background_image_url"] == f"https://blob.test/world-images/{world['id']}.png"


class TestStoryImage:
    """Segment illustrations with numbered reference images"""

    def setup_method(self):
        self.providers = make_providers()
        self.media = MediaService(self.providers)

    def test_requires_segment_id(self):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(self.media.generate({"type": "image", "prompt": "A cave"}))
        assert exc_info.value.message == "Missing required field: segmentId"

    def test_requires_scene_data(self):
        with pytest.raises(ValidationError):
            asyncio.run(self.media.generate({"type": "image", "segmentId": "s1"}))

    def test_failed_reference_not_numbered(self):
        self.providers.images.fetch_references.side_effect = lambda urls: [
            None if "broken" in url else {"mimeType": "image/png", "data": "eA=="} for url in urls
        ]
        result = asyncio.run(self.media.generate({
            "type": "image",
            "segmentId": "s1",
            "prompt": "[CHILD] waves at the owl",
            "visualReferences": [
                {"type": "character", "name": "Broken Owl", "imageUrl": "https://img.test/broken.png"},
                {"type": "location", "name": "Woods", "imageUrl": "https://img.test/woods.png"},
            ],
        }))

        assert result["segmentId"] == "s1"
        assert result["imageUrl"].startswith("https://blob.test/story-images/s1-")
        prompt, images = self.providers.images.generate_image.call_args.args
        assert len(images) == 1
        assert '[Image 1] LOCATION REFERENCE for "Woods"' in prompt
        assert "Broken Owl\" - Match" not in prompt


class TestAudio:
    """Narration clips, name audio and music"""

    def setup_method(self):
        self.providers = make_providers()
        self.media = MediaService(self.providers)

    def test_segment_narration_sequence(self):
        result = asyncio.run(self.media.generate({
            "type": "segmentAudio", "segmentId": "seg-1", "storyId": "st-1",
            "chapterNumber": 2, "segmentOrder": 3, "text": "Hi [CHILD]! Meet [PET].",
        }))

        assert result["clipCount"] == 3
        assert result["narrationSequence"] == [
            {"type": "audio", "url": "https://blob.test/story-audio/st-1/ch2/seg3/clip0.mp3"},
            {"type": "name", "placeholder": "CHILD"},
            {"type": "audio", "url": "https://blob.test/story-audio/st-1/ch2/seg3/clip1.mp3"},
            {"type": "name", "placeholder": "PET"},
            {"type": "audio", "url": "https://blob.test/story-audio/st-1/ch2/seg3/clip2.mp3"},
        ]

    def test_single_clip_segment_audio_uses_pauses(self):
        req = SegmentAudioRequest(segment_id="seg-1", text="[CHILD] laughed.", story_id="st-1")
        result = asyncio.run(self.media.segment_audio(req))
        spoken = self.providers.speech.synthesize.call_args.args[0]
        assert spoken == '<speak><break time="300ms"/> laughed.</speak>'
        assert result["storagePath"] == "story-audio/st-1/chapter-1/segment-1.mp3"

    def test_name_audio_plain_and_possessive(self):
        result = asyncio.run(self.media.generate({"type": "nameAudio", "name": "Maya", "nameType": "child", "id": "c1"}))

        spoken = [c.args[0] for c in self.providers.speech.synthesize.call_args_list]
        assert spoken == ["Maya", "Maya's"]
        assert result["audioUrl"] == "https://blob.test/name-audio/children/c1.mp3"
        assert result["possessiveAudioUrl"] == "https://blob.test/name-audio/children/c1-possessive.mp3"

    def test_name_audio_too_long(self):
        with pytest.raises(ValidationError):
            asyncio.run(self.media.generate({"type": "nameAudio", "name": "x" * 51, "nameType": "pet", "id": "p1"}))

    def test_world_music_path(self):
        result = asyncio.run(self.media.generate({
            "type": "backgroundMusic", "worldId": "w1", "worldName": "Caves", "worldDescription": "Dark",
        }))
        assert result == {"musicUrl": "https://blob.test/world-music/w1.mp3", "worldId": "w1"}
        assert self.providers.speech.generate_music.call_args.args[1] == 120

    def test_music_needs_target(self):
        with pytest.raises(ValidationError):
            asyncio.run(self.media.generate({"type": "backgroundMusic", "worldName": "Caves"}))


class TestBibleVisualReferences:

    def test_flattens_assets(self):
        refs = bible_visual_references({"visualAssets": {
            "characters": [{"name": "Owl", "description": "Wise"}],
            "locations": [{"name": "Woods", "description": "Tall", "mood": "calm"}],
        }})
        assert [(r["type"], r["name"]) for r in refs] == [("character", "Owl"), ("location", "Woods")]

    def test_no_bible(self):
        assert bible_visual_references(None) == []
