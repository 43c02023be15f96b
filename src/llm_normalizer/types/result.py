"""Normalized generation result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional

from llm_normalizer.types.content import ContentBlock, TextBlock, ToolUseBlock

__all__ = ["FinishReason", "Usage", "GenerateResult"]


class FinishReason(StrEnum):
    """Why the model stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    TOOL_USE = "tool_use"
    CONTENT_FILTER = "content_filter"
    OTHER = "other"


@dataclass(slots=True)
class Usage:
    """Token accounting echoed from the provider. Missing counts are 0."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class GenerateResult:
    """Unified result of one generation request, for all LLM providers."""

    content: list[ContentBlock] = field(default_factory=list)
    finish_reason: FinishReason = FinishReason.OTHER
    usage: Usage = field(default_factory=Usage)

    # Metadata echoed from the vendor payload
    id: str = ""
    model: str = ""
    raw_finish_reason: Optional[str] = None
    provider_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """All text blocks joined in order."""
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    @property
    def tool_calls(self) -> list[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    @property
    def has_tool_calls(self) -> bool:
        return any(isinstance(b, ToolUseBlock) for b in self.content)

    def __repr__(self) -> str:
        text = self.text
        preview = text[:75] + "..." if len(text) > 75 else text
        return (
            f"{self.__class__.__name__}(finish_reason={self.finish_reason.value!r}, "
            f"blocks={len(self.content)}, text_preview={preview!r})"
        )
