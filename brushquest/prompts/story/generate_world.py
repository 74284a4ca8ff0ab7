"""
World Generation Prompt

Asks the text model for a fresh world setting for the story catalogue.
"""


def get_generate_world_prompt() -> str:
    return """Generate a unique, imaginative world setting for a children's toothbrushing story app (ages 4-8).
The world should be magical, engaging, and appropriate for children.
Respond with ONLY a JSON object:
{"name": "kebab-case-name", "displayName": "Human Readable Name", "description": "A short 1-sentence description", "theme": "one-word-theme"}
Be creative! Don't use common themes."""
