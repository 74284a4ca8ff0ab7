"""Pet Prompts Package"""

from .suggest_pets import get_suggest_pets_prompt

__all__ = ["get_suggest_pets_prompt"]
