"""
Provider‑neutral content blocks produced by the response parsers.

A response is decoded once into this closed set of block kinds, so downstream
code dispatches on ``type`` instead of re‑reading vendor JSON.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

__all__ = [
    "TextBlock",
    "ToolUseBlock",
    "ReasoningBlock",
    "OpaqueBlock",
    "ContentBlock",
]


@dataclass(slots=True)
class TextBlock:
    """Plain generated text."""
    type: ClassVar[str] = "text"

    text: str


@dataclass(slots=True)
class ToolUseBlock:
    """A model‑agnostic request emitted by the LLM to call a local tool."""
    type: ClassVar[str] = "tool_use"

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ReasoningBlock:
    """Model reasoning ("thinking") output, kept apart from the answer text."""
    type: ClassVar[str] = "reasoning"

    text: str
    signature: str | None = None
    redacted: bool = False


@dataclass(slots=True)
class OpaqueBlock:
    """A block kind this library does not know yet.

    ``kind`` is the vendor discriminator; ``data`` is a copy of the vendor block.
    """
    type: ClassVar[str] = "opaque"

    kind: str
    data: dict[str, Any] = field(default_factory=dict)


ContentBlock = Union[TextBlock, ToolUseBlock, ReasoningBlock, OpaqueBlock]
