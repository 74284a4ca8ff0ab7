"""
API tests for world admin routes, auth, health and error mapping.

Uses the in-memory FakeDatabase and mock providers from conftest.

Run with: python -m pytest tests/test_api_worlds.py -v
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.api.dependencies import set_services

WORLD_BODY = {
    "name": "crystal-caves",
    "displayName": "Crystal Caves",
    "description": "Glittering caverns deep underground",
    "theme": "crystal-caves",
    "unlockCost": 100,
}


class TestAdminAuth:

    def test_correct_password(self, client):
        response = client.post("/api/admin/auth", json={"password": "test-password"})
        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_wrong_password(self, client):
        response = client.post("/api/admin/auth", json={"password": "guess"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid password"}

    def test_missing_password(self, client):
        response = client.post("/api/admin/auth", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Password required"}


class TestWorldCrud:

    def test_create_returns_201_and_queues_icon(self, client, fake_db):
        response = client.post("/api/admin/worlds", json=WORLD_BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["world"]["display_name"] == "Crystal Caves"
        assert data["world"]["unlock_cost"] == 100
        assert data["world"]["is_published"] is False
        assert data["imageJobId"]
        assert len(fake_db.tables["worlds"]) == 1

    def test_create_with_image_skips_job(self, client):
        body = {**WORLD_BODY, "backgroundImageUrl": "https://img.test/caves.png"}
        response = client.post("/api/admin/worlds", json=body)
        assert response.json()["imageJobId"] is None

    def test_create_missing_fields(self, client):
        response = client.post("/api/admin/worlds", json={"name": "nameless"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: name, displayName, description"}

    def test_list_includes_story_count(self, client, fake_db):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        fake_db._insert_sync("stories", {"world_id": world_id, "title": "One", "description": ""})

        worlds = client.get("/api/admin/worlds").json()["worlds"]
        assert worlds[0]["id"] == world_id
        assert worlds[0]["story_count"] == 1

    def test_new_world_has_zero_stories(self, client):
        client.post("/api/admin/worlds", json=WORLD_BODY)
        assert client.get("/api/admin/worlds").json()["worlds"][0]["story_count"] == 0

    def test_get_with_stories_and_pitches(self, client, fake_db):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        fake_db._insert_sync("story_pitches", {"world_id": world_id, "title": "Pitch", "description": "", "outline": []})

        data = client.get(f"/api/admin/worlds/{world_id}").json()
        assert data["world"]["id"] == world_id
        assert data["stories"] == []
        assert [p["title"] for p in data["pitches"]] == ["Pitch"]

    def test_get_missing(self, client):
        response = client.get("/api/admin/worlds/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "World not found"}

    def test_partial_update_keeps_other_fields(self, client):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]

        response = client.put(f"/api/admin/worlds/{world_id}", json={"isPublished": True})
        world = response.json()["world"]
        assert world["is_published"] is True
        assert world["display_name"] == "Crystal Caves"
        assert world["unlock_cost"] == 100

    def test_update_is_idempotent(self, client):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        body = {"displayName": "Crystal Caverns", "unlockCost": 50}

        first = client.put(f"/api/admin/worlds/{world_id}", json=body).json()["world"]
        second = client.put(f"/api/admin/worlds/{world_id}", json=body).json()["world"]
        first.pop("updated_at")
        second.pop("updated_at")
        assert first == second

    def test_update_missing(self, client):
        assert client.put("/api/admin/worlds/nope", json={"name": "x"}).status_code == 404

    def test_delete_cascades(self, client, fake_db):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        fake_db._insert_sync("stories", {"world_id": world_id, "title": "One", "description": ""})

        assert client.delete(f"/api/admin/worlds/{world_id}").json() == {"success": True}
        assert client.get(f"/api/admin/worlds/{world_id}").status_code == 404
        assert fake_db.tables["stories"] == []

    def test_method_not_allowed(self, client):
        response = client.patch("/api/admin/worlds")
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}


class TestWorldGeneration:

    def test_generate_world(self, client, providers):
        providers.text.generate_json.return_value = {
            "name": "cloud-castle",
            "displayName": "Cloud Castle",
            "description": "A castle that floats above the clouds",
            "theme": "cloud-castle",
        }
        response = client.post("/api/admin/worlds", json={"action": "generate"})

        assert response.status_code == 200
        data = response.json()
        assert data["world"]["name"] == "cloud-castle"
        assert data["world"]["is_published"] is False
        assert data["imageJobId"]

    def test_generate_world_bad_reply(self, client, providers):
        providers.text.generate_json.return_value = {"title": "not a world"}
        response = client.post("/api/admin/worlds", json={"action": "generate"})

        assert response.status_code == 500
        assert response.json()["error"].startswith("Generated world did not match expected shape")

    def test_pitches(self, client, providers):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        providers.text.generate_json.return_value = {"pitches": [
            {"title": f"Pitch {i}", "description": "Hook", "outline": [{"chapter": 1, "title": "Start"}]}
            for i in range(4)
        ]}

        response = client.post(f"/api/admin/worlds/{world_id}", json={"action": "pitches", "count": 2})
        pitches = response.json()["pitches"]
        assert [p["title"] for p in pitches] == ["Pitch 0", "Pitch 1"]
        assert pitches[0]["outline"] == [{"chapter": 1, "title": "Start", "summary": ""}]

    def test_outline_needs_idea(self, client):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        response = client.post(f"/api/admin/worlds/{world_id}", json={"action": "outline", "idea": "  "})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required field: idea"}

    def test_pitches_for_missing_world(self, client):
        response = client.post("/api/admin/worlds/nope", json={"action": "pitches"})
        assert response.status_code == 404

    def test_invalid_action(self, client):
        world_id = client.post("/api/admin/worlds", json=WORLD_BODY).json()["world"]["id"]
        response = client.post(f"/api/admin/worlds/{world_id}", json={"action": "explode"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}


class TestServiceWiring:

    def test_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["database_configured"] is True
        assert data["audio_configured"] is True

    def test_missing_database_is_500(self, client, providers):
        set_services(settings=providers.settings, providers=providers)

        response = client.get("/api/admin/worlds")
        assert response.status_code == 500
        assert response.json() == {"error": "AZURE_SQL_SERVER not configured"}

    def test_unknown_job(self, client):
        response = client.get("/api/jobs/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Job not found"}
