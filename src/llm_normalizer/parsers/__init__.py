"""Vendor response parsers behind one ``ResponseParser`` interface."""

from .base import ResponseParser
from .anthropic import AnthropicResponseParser
from .openai import OpenAIResponseParser

# Gemini's OpenAI-compatible endpoint shares the OpenAI wire format
GeminiResponseParser = OpenAIResponseParser

__all__ = [
    "ResponseParser",
    "AnthropicResponseParser",
    "OpenAIResponseParser",
    "GeminiResponseParser",
]
