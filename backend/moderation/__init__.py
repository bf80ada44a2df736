"""Message tone moderation for co-parenting chat."""

from .tone_analyzer import analyze_keywords, analyze_tone, analyze_with_llm

__all__ = ["analyze_keywords", "analyze_tone", "analyze_with_llm"]
