"""
API tests for the admin music library and audio uploads.

Run with: python -m pytest tests/test_api_audio.py -v
"""

import base64
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


MP3 = base64.b64encode(b"ID3-fake-mp3").decode("ascii")


def add_world(fake_db, name, display_name, music_url=None):
    return fake_db._insert_sync("worlds", {
        "name": name,
        "display_name": display_name,
        "description": "A place",
        "theme": name,
        "background_music_url": music_url,
    })


class TestMusicLibrary:

    def test_lists_worlds_with_music_by_name(self, client, fake_db):
        space = add_world(fake_db, "space-station", "Space Station", "https://blob.test/space.mp3")
        add_world(fake_db, "quiet-pond", "Quiet Pond")
        forest = add_world(fake_db, "magical-forest", "Magical Forest", "https://blob.test/forest.mp3")

        music = client.get("/api/admin/music-library").json()["music"]
        assert music == [
            {"id": forest["id"], "name": "Magical Forest", "url": "https://blob.test/forest.mp3",
             "theme": "magical-forest", "source": "world"},
            {"id": space["id"], "name": "Space Station", "url": "https://blob.test/space.mp3",
             "theme": "space-station", "source": "world"},
        ]

    def test_empty_library(self, client):
        assert client.get("/api/admin/music-library").json() == {"music": []}


class TestUploadAudio:

    def test_upload_for_world(self, client, providers):
        response = client.post("/api/admin/upload-audio", json={
            "fileName": "forest theme!.mp3", "fileData": MP3, "fileType": "audio/mpeg", "worldId": "w1",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["url"].startswith("https://blob.test/world-music/w1-")
        assert data["url"].endswith("-forest_theme_.mp3")
        assert data["fileName"] == "forest theme!.mp3"
        assert data["size"] == len(b"ID3-fake-mp3")

        call = providers.blob.upload_audio.call_args
        assert call.args[1] == b"ID3-fake-mp3"
        assert call.kwargs["content_type"] == "audio/mpeg"

    def test_upload_without_world(self, client):
        url = client.post("/api/admin/upload-audio", json={
            "fileName": "calm.ogg", "fileData": MP3, "fileType": "audio/ogg",
        }).json()["url"]
        assert url.startswith("https://blob.test/uploaded-music/")

    def test_missing_fields(self, client):
        response = client.post("/api/admin/upload-audio", json={"fileName": "calm.ogg"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: fileName, fileData, fileType"}

    def test_unsupported_type(self, client, providers):
        response = client.post("/api/admin/upload-audio", json={
            "fileName": "clip.flac", "fileData": MP3, "fileType": "audio/flac",
        })
        assert response.status_code == 400
        providers.blob.upload_audio.assert_not_awaited()

    def test_not_base64(self, client):
        response = client.post("/api/admin/upload-audio", json={
            "fileName": "calm.mp3", "fileData": "not base64!", "fileType": "audio/mpeg",
        })
        assert response.status_code == 400

    def test_too_large(self, client, providers, monkeypatch):
        monkeypatch.setattr("brushquest.api.audio.MAX_AUDIO_UPLOAD_BYTES", 4)
        response = client.post("/api/admin/upload-audio", json={
            "fileName": "long.mp3", "fileData": MP3, "fileType": "audio/mpeg",
        })
        assert response.status_code == 400
        assert response.json()["error"].startswith("File too large")
        providers.blob.upload_audio.assert_not_awaited()
