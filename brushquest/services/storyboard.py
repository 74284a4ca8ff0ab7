"""
Reference Extractor & Storyboard Builder

Post-processing over a finished story:
1. extract_references: one LLM call listing NPCs/objects/locations the bible
   missed, de-duplicated against what the story already has.
2. build_storyboard: one LLM call assigning per-segment location, NPCs,
   shot type, camera angle and focus; names are matched back to reference ids.
3. suggest_segment_reference_tags: which references belong in each
   segment's illustration (used from the story editor).
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..config.limits import MAX_EXTRACTED_REFERENCES
from ..models.drafts import ReferenceDraft, SegmentTags, StoryboardShot
from ..models.models import CameraAngle, Reference, ReferenceSource, ReferenceType, ShotType
from ..prompts.story import (
    get_extract_references_prompt,
    get_storyboard_prompt,
    get_tag_references_prompt,
)
from .validation_service import filter_valid

logger = logging.getLogger(__name__)

VALID_SHOT_TYPES = {s.value for s in ShotType}
VALID_CAMERA_ANGLES = {a.value for a in CameraAngle}


# =========================================================================
# NAME MATCHING
# =========================================================================

def names_overlap(a: str, b: str) -> bool:
    """Case-insensitive equality or substring containment either way"""
    a, b = a.lower(), b.lower()
    return a == b or a in b or b in a


def is_duplicate(candidate: Reference, existing: List[Dict[str, Any]]) -> bool:
    """True when a same-type reference already covers this name"""
    return any(
        ref["type"] == candidate.type.value and names_overlap(ref["name"], candidate.name)
        for ref in existing
    )


def _normalize(name: str) -> str:
    return re.sub(r'^the\s+', '', name.lower().strip())


def match_reference(name: Optional[str], references: List[Dict[str, Any]]) -> Optional[str]:
    """
    Resolve a storyboard name to a reference id.

    Leading "the" is ignored when comparing for equality; a reference also
    matches when either name contains the other.
    """
    if not name:
        return None
    normalized = _normalize(name)
    if not normalized:
        return None

    for ref in references:
        ref_name = ref["name"].lower()
        if _normalize(ref_name) == normalized or normalized in ref_name or ref_name in normalized:
            return ref["id"]
    return None


# =========================================================================
# REFERENCE EXTRACTION
# =========================================================================

class StoryboardBuilder:
    """Reference extraction, storyboard and tagging calls for one story"""

    def __init__(self, text_client):
        self.text_client = text_client

    async def extract_references(
        self,
        story: Dict[str, Any],
        chapters: List[Any],
        bible: Optional[Dict[str, Any]],
        existing_references: List[Dict[str, Any]]
    ) -> List[Reference]:
        """
        List new visual entities mentioned in the prose.

        Args:
            chapters: GeneratedChapter objects (or anything with .segments/.cliffhanger)
            existing_references: Persisted references for the story

        Returns:
            At most MAX_EXTRACTED_REFERENCES new references, none duplicating
            an existing same-type name
        """
        segment_texts = [seg.text for ch in chapters for seg in ch.segments]
        cliffhangers = [ch.cliffhanger for ch in chapters if ch.cliffhanger]

        prompt = get_extract_references_prompt(
            story_title=story["title"],
            story_description=story["description"],
            segment_texts=segment_texts,
            cliffhangers=cliffhangers,
            bible=bible,
            existing_references=existing_references,
        )
        payload = await self.text_client.generate_json(prompt)
        drafts = filter_valid(payload, ReferenceDraft)[:MAX_EXTRACTED_REFERENCES]

        new_refs: List[Reference] = []
        seen = list(existing_references)
        for draft in drafts:
            ref = Reference(
                type=ReferenceType(draft.type),
                name=draft.name,
                description=draft.description,
                mood=draft.mood,
                personality=draft.personality,
                role=draft.role,
                source=ReferenceSource.EXTRACTED,
            )
            if is_duplicate(ref, seen):
                logger.debug(f"Skipping duplicate reference '{ref.name}'")
                continue
            new_refs.append(ref)
            seen.append({"type": ref.type.value, "name": ref.name})

        return new_refs

    # =====================================================================
    # STORYBOARD
    # =====================================================================

    async def build_storyboard(
        self,
        story: Dict[str, Any],
        bible: Dict[str, Any],
        references: List[Dict[str, Any]],
        chapters: List[Dict[str, Any]]
    ) -> Dict[str, Dict[str, Any]]:
        """
        Plan every segment's shot.

        Args:
            references: Persisted references (with ids)
            chapters: [{"chapter_number", "title", "segments": [{"id", "segment_order", "text", "image_prompt"}]}]

        Returns:
            {segment_id: segment column updates} for segments the model covered
        """
        prompt = get_storyboard_prompt(
            story_title=story["title"],
            story_description=story["description"],
            bible=bible or {},
            references=references,
            chapters=chapters,
        )
        payload = await self.text_client.generate_json(prompt)
        shots = filter_valid(payload, StoryboardShot)

        known_ids = {seg["id"] for ch in chapters for seg in ch["segments"]}
        locations = [r for r in references if r["type"] == "location"]
        characters = [r for r in references if r["type"] == "character"]

        updates: Dict[str, Dict[str, Any]] = {}
        for shot in shots:
            if shot.segment_id not in known_ids:
                continue
            updates[shot.segment_id] = self.shot_to_columns(shot, locations, characters)
        return updates

    @staticmethod
    def shot_to_columns(
        shot: StoryboardShot,
        locations: List[Dict[str, Any]],
        characters: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        character_ids = []
        for name in shot.characters:
            ref_id = match_reference(name, characters)
            if ref_id and ref_id not in character_ids:
                character_ids.append(ref_id)

        return {
            "storyboard_location": shot.location,
            "storyboard_characters": shot.characters,
            "storyboard_shot_type": shot.shot_type if shot.shot_type in VALID_SHOT_TYPES else ShotType.MEDIUM.value,
            "storyboard_camera_angle": (shot.camera_angle if shot.camera_angle in VALID_CAMERA_ANGLES
                                        else CameraAngle.EYE_LEVEL.value),
            "storyboard_focus": shot.visual_focus,
            "storyboard_continuity": shot.continuity_note,
            "storyboard_location_id": match_reference(shot.location, locations),
            "storyboard_character_ids": character_ids,
        }

    # =====================================================================
    # SEGMENT TAGGING
    # =====================================================================

    async def suggest_segment_reference_tags(
        self,
        segments: List[Dict[str, Any]],
        references: List[Dict[str, Any]]
    ) -> Dict[str, List[str]]:
        """
        Suggest which references each segment's illustration should use.

        Every segment appears in the result; unknown reference ids are dropped.
        """
        if not references:
            return {seg["id"]: [] for seg in segments}

        prompt = get_tag_references_prompt(segments, references)
        payload = await self.text_client.generate_json(prompt)
        tags = filter_valid(payload, SegmentTags)

        valid_ids = {ref["id"] for ref in references}
        result = {seg["id"]: [] for seg in segments}
        for tag in tags:
            if tag.segment_id in result:
                result[tag.segment_id] = [rid for rid in tag.reference_ids if rid in valid_ids]
        return result
