from __future__ import annotations

from enum import StrEnum

__all__ = ["Provider"]


class Provider(StrEnum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"
