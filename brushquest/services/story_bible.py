"""
Story Bible Builder

One LLM call per story, made before any chapter is written. The bible pins
down tone, character roles and art direction; its visual assets become the
story's first references. A failure here aborts story generation.
"""

import logging
from typing import Any, Dict, List, Tuple

from ..models.drafts import StoryBibleDraft
from ..models.models import Reference, ReferenceSource, ReferenceType
from ..prompts.story import get_story_bible_prompt
from .validation_service import validate_payload

logger = logging.getLogger(__name__)


def bible_references(bible: StoryBibleDraft) -> List[Reference]:
    """Flatten the bible's visual assets into reference records (locations, characters, objects)"""
    references: List[Reference] = []
    assets = bible.visual_assets

    for loc in assets.locations:
        if loc.get("name") and loc.get("description"):
            references.append(Reference(
                type=ReferenceType.LOCATION,
                name=loc["name"],
                description=loc["description"],
                mood=loc.get("mood"),
                source=ReferenceSource.BIBLE,
            ))
    for char in assets.characters:
        if char.get("name") and char.get("description"):
            references.append(Reference(
                type=ReferenceType.CHARACTER,
                name=char["name"],
                description=char["description"],
                personality=char.get("personality"),
                role=char.get("role"),
                source=ReferenceSource.BIBLE,
            ))
    for obj in assets.objects:
        if obj.get("name") and obj.get("description"):
            references.append(Reference(
                type=ReferenceType.OBJECT,
                name=obj["name"],
                description=obj["description"],
                source=ReferenceSource.BIBLE,
            ))

    return references


class StoryBibleBuilder:
    """Produces the cross-chapter consistency document for a story"""

    def __init__(self, text_client):
        self.text_client = text_client

    async def build(
        self,
        world: Dict[str, Any],
        title: str,
        description: str,
        outline: List[Dict[str, Any]]
    ) -> Tuple[Dict[str, Any], List[Reference]]:
        """
        Generate the bible for a pitch.

        Returns:
            (bible document without visual assets, flattened references)

        Raises:
            ProviderError, MalformedOutputError, SchemaMismatchError
        """
        prompt = get_story_bible_prompt(
            world_name=world["display_name"],
            world_description=world["description"],
            story_title=title,
            story_description=description,
            outline=outline,
        )
        payload = await self.text_client.generate_json(prompt)
        bible = validate_payload(payload, StoryBibleDraft, "story bible")

        references = bible_references(bible)
        logger.info(f"📖 Story bible for '{title}': {len(references)} visual references")
        return bible.to_document(), references
