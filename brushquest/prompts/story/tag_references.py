"""
Segment Reference Tagging Prompt
"""

from typing import List, Dict, Any


def get_tag_references_prompt(segments: List[Dict[str, Any]], references: List[Dict[str, Any]]) -> str:
    reference_list = "\n".join(
        f'{idx + 1}. [{ref["id"]}] "{ref["name"]}" ({ref["type"]}): {ref["description"][:100]}...'
        for idx, ref in enumerate(references)
    )
    segment_list = "\n\n".join(
        f'Segment {seg["segment_order"]} [{seg["id"]}]:\n  Text: "{seg["text"]}"\n  Image Prompt: "{seg.get("image_prompt") or "none"}"'
        for seg in segments
    )

    return f"""Analyze which visual references should be included when generating images for each story segment.

AVAILABLE REFERENCES:
{reference_list}

SEGMENTS TO ANALYZE:
{segment_list}

For each segment, determine which references (if any) should be included in the image generation.
A reference should be tagged if:
- The character/object/location is mentioned in the segment text
- The character/object/location should appear in the scene based on the image prompt
- The reference is relevant to what's being illustrated

Be SELECTIVE - only tag references that should VISUALLY APPEAR in that specific segment's illustration.

Respond with ONLY a JSON array mapping segment IDs to reference IDs:
[
  {{"segmentId": "segment-uuid-1", "referenceIds": ["ref-uuid-1", "ref-uuid-3"]}},
  {{"segmentId": "segment-uuid-2", "referenceIds": []}},
  ...
]

Include ALL segments in the response, even if they have no references (empty array)."""
