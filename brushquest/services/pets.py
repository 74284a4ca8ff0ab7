"""
Pet catalogue and AI pet suggestions.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config.limits import DEFAULT_PET_SUGGESTION_COUNT
from ..models.drafts import PetDraft
from ..prompts.pets import get_suggest_pets_prompt
from .errors import BrushQuestError, ConflictError, NotFoundError, PersistenceError
from .validation_service import validate_list

logger = logging.getLogger(__name__)

# Shipped with the app; served when the catalogue has no published pets
STATIC_PETS = [
    {"id": "sparkle", "name": "sparkle", "display_name": "Sparkle",
     "description": "A cheerful star who fell from the sky", "story_personality": "brave and optimistic",
     "image_url": "/pets/sparkle.png", "avatar_url": None, "unlock_cost": 0, "is_starter": True},
    {"id": "bubbles", "name": "bubbles", "display_name": "Bubbles",
     "description": "A giggly fish who learned to float in air", "story_personality": "silly and curious",
     "image_url": "/pets/bubbles.png", "avatar_url": None, "unlock_cost": 0, "is_starter": True},
    {"id": "cosmo", "name": "cosmo", "display_name": "Cosmo",
     "description": "A mini robot from the future", "story_personality": "smart and helpful",
     "image_url": "/pets/cosmo.png", "avatar_url": None, "unlock_cost": 75, "is_starter": False},
    {"id": "fern", "name": "fern", "display_name": "Fern",
     "description": "A tiny forest dragon", "story_personality": "shy but fierce",
     "image_url": "/pets/fern.png", "avatar_url": None, "unlock_cost": 100, "is_starter": False},
    {"id": "captain-whiskers", "name": "captain-whiskers", "display_name": "Captain Whiskers",
     "description": "A cat who dreams of sailing", "story_personality": "dramatic and bold",
     "image_url": "/pets/captain-whiskers.png", "avatar_url": None, "unlock_cost": 150, "is_starter": False},
]

PET_FIELDS = ("name", "display_name", "description", "story_personality", "unlock_cost", "is_starter")


def to_public_pet(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "displayName": row["display_name"],
        "description": row["description"],
        "storyPersonality": row["story_personality"],
        "imageUrl": row.get("image_url"),
        "avatarUrl": row.get("avatar_url"),
        "unlockCost": row.get("unlock_cost") or 0,
        "isStarter": bool(row.get("is_starter")),
    }


class PetService:
    """Pet suggestions, approval and the public pet list"""

    def __init__(self, providers, db):
        self.providers = providers
        self.db = db

    async def public_pets(self) -> List[Dict[str, Any]]:
        """Published pets, or the built-in set when none are published"""
        if self.db is None:
            return [to_public_pet(row) for row in STATIC_PETS]
        try:
            rows = await self.db.list_pets(published_only=True)
        except PersistenceError as e:
            logger.warning(f"⚠️ Pet catalogue unavailable, serving built-in pets: {e.message}")
            rows = []
        return [to_public_pet(row) for row in (rows or STATIC_PETS)]

    async def suggest(self, count: Optional[int] = None) -> List[Dict[str, Any]]:
        """Ask the model for new pets unlike any built-in or catalogued pet; saves them as suggestions"""
        count = count or DEFAULT_PET_SUGGESTION_COUNT
        existing = STATIC_PETS + await self.db.list_pets()

        payload = await self.providers.text.generate_json(get_suggest_pets_prompt(existing, count))
        drafts = validate_list(payload, PetDraft, "pet suggestions", key="pets")

        saved = []
        for draft in drafts:
            saved.append(await self.db.create_suggestion({
                "name": draft.name,
                "display_name": draft.display_name,
                "description": draft.description,
                "story_personality": draft.story_personality,
                "unlock_cost": draft.unlock_cost,
                "is_starter": draft.is_starter,
            }))
        logger.info(f"🐾 {len(saved)} pet suggestions saved")
        return saved

    async def approve(self, suggestion_id: str) -> Dict[str, Any]:
        """
        Promote a suggestion to a pet.

        Raises:
            NotFoundError: Suggestion does not exist
            ConflictError: Suggestion was already approved (possibly concurrently)
            PersistenceError: The pet insert failed; the suggestion stays pending
        """
        suggestion = await self.db.get_suggestion(suggestion_id)
        if not suggestion:
            raise NotFoundError("Suggestion not found")

        if not await self.db.claim_suggestion(suggestion_id):
            raise ConflictError("Suggestion already approved")

        try:
            pet = await self.db.create_pet({field: suggestion[field] for field in PET_FIELDS})
        except BrushQuestError:
            await self.db.release_suggestion(suggestion_id)
            raise
        logger.info(f"✅ Suggestion {suggestion_id} approved as pet {pet['name']}")
        return pet

    async def reject(self, suggestion_id: str):
        if not await self.db.delete_suggestion(suggestion_id):
            raise NotFoundError("Suggestion not found")
