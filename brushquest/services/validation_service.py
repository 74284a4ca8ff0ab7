"""
Validation Service for LLM Output Processing

The text model is asked to "Respond with ONLY JSON" but nothing enforces
that contract. This module locates the JSON payload inside free-form output
and then checks its shape against a pydantic draft model, so a reply that
parses but has the wrong structure fails distinctly from one that does not
parse at all.

Architecture:
- extract_json: text -> parsed JSON (MalformedOutputError on failure)
- validate_payload / validate_list: parsed JSON -> draft models
  (SchemaMismatchError on failure)
- Stateless utility functions (no class needed)
"""

import json
import re
import logging
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import MalformedOutputError, SchemaMismatchError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

FENCED_BLOCK = re.compile(r'```(?:json)?\s*([\s\S]*?)```')


# =========================================================================
# JSON EXTRACTION
# =========================================================================

def _extract_balanced(text: str) -> str:
    """
    Return the first balanced {...} or [...] span in text.

    The span starts at whichever bracket comes first, so a bare array of
    objects is returned whole. Brackets inside string literals are ignored.
    """
    starts = [i for i in (text.find('{'), text.find('[')) if i != -1]
    if not starts:
        raise MalformedOutputError("No JSON found in response")
    start = min(starts)

    closers = {'{': '}', '[': ']'}
    expected: List[str] = []
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        char = text[i]

        if escape_next:
            escape_next = False
            continue
        if char == '\\':
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char in closers:
            expected.append(closers[char])
        elif char in ('}', ']'):
            if not expected or char != expected.pop():
                raise MalformedOutputError("No valid JSON found - mismatched brackets")
            if not expected:
                return text[start:i + 1]

    raise MalformedOutputError("No valid JSON found - unbalanced braces")


def extract_json(text: str) -> Any:
    """
    Locate and parse the JSON payload in an LLM response.

    Tries a fenced ```json block first, then the first balanced object or
    array in the raw text. No repair is attempted.

    Args:
        text: Raw model output

    Returns:
        The parsed JSON value (dict or list)

    Raises:
        MalformedOutputError: no JSON-shaped span, or it failed to parse
    """
    if not text:
        raise MalformedOutputError("No JSON found in response")

    fenced = FENCED_BLOCK.search(text)
    candidate = fenced.group(1).strip() if fenced else None
    if candidate and candidate[0] in '{[':
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            logger.debug("Fenced block was not valid JSON, scanning raw text")

    span = _extract_balanced(text)
    try:
        return json.loads(span)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse failed: {e}")
        raise MalformedOutputError(f"Failed to parse JSON: {e}") from e


# =========================================================================
# SCHEMA VALIDATION
# =========================================================================

def _describe(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "root"
    return f"{location}: {first.get('msg', 'invalid')}"


def validate_payload(payload: Any, model: Type[ModelT], schema_name: str) -> ModelT:
    """Validate one parsed JSON object against a draft model"""
    if not isinstance(payload, dict):
        raise SchemaMismatchError(schema_name, f"expected object, got {type(payload).__name__}")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise SchemaMismatchError(schema_name, _describe(e)) from e


def validate_list(payload: Any, model: Type[ModelT], schema_name: str, key: str = None) -> List[ModelT]:
    """
    Validate a list of objects, optionally unwrapping it from payload[key].

    Models answer with either a bare array or an object wrapping one, so
    both shapes are accepted.
    """
    items = payload
    if key is not None and isinstance(payload, dict):
        items = payload.get(key)
    if not isinstance(items, list):
        raise SchemaMismatchError(schema_name, f"expected a list{f' under {key!r}' if key else ''}")

    try:
        return [model.model_validate(item) for item in items]
    except PydanticValidationError as e:
        raise SchemaMismatchError(schema_name, _describe(e)) from e


def filter_valid(items: Any, model: Type[ModelT]) -> List[ModelT]:
    """Keep only entries that validate; invalid ones are logged and dropped"""
    if not isinstance(items, list):
        return []

    valid = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except PydanticValidationError:
            logger.debug(f"Dropping invalid {model.__name__} entry: {str(item)[:100]}")
    return valid
