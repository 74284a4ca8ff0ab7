"""BrushQuest backend: story generation pipeline and admin API."""

__version__ = "1.0.0"
