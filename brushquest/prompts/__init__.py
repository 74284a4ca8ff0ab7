"""
Prompt templates for BrushQuest generation

Each prompt is a function that accepts context and returns a formatted prompt string.
"""
