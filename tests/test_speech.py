"""
Unit tests for narration text handling - SSML pauses and name-slot splitting.

Run with: python -m pytest tests/test_speech.py -v
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.services.speech import NAME_PAUSE, split_narration, to_ssml


class TestToSsml:
    """Names are never spoken inline"""

    def test_placeholders_become_pauses(self):
        ssml = to_ssml("[CHILD] and [PET] ran home.")
        assert ssml == f"<speak>{NAME_PAUSE} and {NAME_PAUSE} ran home.</speak>"

    def test_text_without_placeholders(self):
        assert to_ssml("The moon rose.") == "<speak>The moon rose.</speak>"

    def test_other_brackets_untouched(self):
        assert "[FRIEND]" in to_ssml("[FRIEND] waved.")


class TestSplitNarration:
    """Ordered text runs and name slots"""

    def test_documented_example(self):
        assert split_narration("Hi [CHILD]! Meet [PET].") == [
            {"type": "text", "text": "Hi"},
            {"type": "name", "placeholder": "CHILD"},
            {"type": "text", "text": "! Meet"},
            {"type": "name", "placeholder": "PET"},
            {"type": "text", "text": "."},
        ]

    def test_leading_placeholder(self):
        parts = split_narration("[PET] giggled.")
        assert parts[0] == {"type": "name", "placeholder": "PET"}
        assert parts[1] == {"type": "text", "text": "giggled."}

    def test_adjacent_placeholders_drop_whitespace(self):
        parts = split_narration("[CHILD] [PET]")
        assert parts == [
            {"type": "name", "placeholder": "CHILD"},
            {"type": "name", "placeholder": "PET"},
        ]

    def test_plain_text_single_part(self):
        assert split_narration("Once upon a time.") == [{"type": "text", "text": "Once upon a time."}]

    def test_empty_text(self):
        assert split_narration("") == []
        assert split_narration(None) == []
