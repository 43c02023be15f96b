"""Anthropic Messages API response parser."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Final

from llm_normalizer.errors import ProviderErrorKind
from llm_normalizer.types import (
    ContentBlock,
    FinishReason,
    GenerateResult,
    OpaqueBlock,
    ReasoningBlock,
    TextBlock,
    ToolUseBlock,
    Usage,
)

from .base import ResponseParser

__all__ = ["AnthropicResponseParser"]

# Wire field names of the Messages API; nothing else in this module spells them.
_ID: Final = "id"
_MODEL: Final = "model"
_CONTENT: Final = "content"
_STOP_REASON: Final = "stop_reason"
_STOP_SEQUENCE: Final = "stop_sequence"
_USAGE: Final = "usage"

_BLOCK_TYPE: Final = "type"
_TEXT: Final = "text"
_TOOL_ID: Final = "id"
_TOOL_NAME: Final = "name"
_TOOL_INPUT: Final = "input"
_THINKING: Final = "thinking"
_SIGNATURE: Final = "signature"
_REDACTED_DATA: Final = "data"

_BLOCK_TEXT: Final = "text"
_BLOCK_TOOL_USE: Final = "tool_use"
_BLOCK_THINKING: Final = "thinking"
_BLOCK_REDACTED_THINKING: Final = "redacted_thinking"

_INPUT_TOKENS: Final = "input_tokens"
_OUTPUT_TOKENS: Final = "output_tokens"
_CACHE_CREATION_TOKENS: Final = "cache_creation_input_tokens"
_CACHE_READ_TOKENS: Final = "cache_read_input_tokens"

STOP_REASONS: Final[dict[str, FinishReason]] = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "max_tokens": FinishReason.LENGTH,
    "model_context_window_exceeded": FinishReason.LENGTH,
    "tool_use": FinishReason.TOOL_USE,
    "refusal": FinishReason.CONTENT_FILTER,
    "pause_turn": FinishReason.OTHER,
}

ERROR_TYPES: Final[dict[str, ProviderErrorKind]] = {
    "authentication_error": ProviderErrorKind.AUTHENTICATION,
    "permission_error": ProviderErrorKind.AUTHENTICATION,
    "rate_limit_error": ProviderErrorKind.RATE_LIMITED,
    "api_error": ProviderErrorKind.PROVIDER_UNAVAILABLE,
    "overloaded_error": ProviderErrorKind.PROVIDER_UNAVAILABLE,
    "invalid_request_error": ProviderErrorKind.INVALID_REQUEST,
    "not_found_error": ProviderErrorKind.INVALID_REQUEST,
    "request_too_large": ProviderErrorKind.INVALID_REQUEST,
}


class AnthropicResponseParser(ResponseParser):
    """Parser for ``POST /v1/messages`` responses (dicts or ``anthropic.types.Message``)."""

    stop_reasons = STOP_REASONS
    error_types = ERROR_TYPES

    def parse_success_response(self, response: Any) -> GenerateResult:
        doc = self._as_document(response)
        raw_blocks = self._require(doc, _CONTENT, list, _CONTENT)

        content: list[ContentBlock] = []
        for i in range(len(raw_blocks)):
            path = f"{_CONTENT}.{i}"
            content.append(self._parse_block(self._object_at(raw_blocks, i, path), path))

        stop_reason = self._optional_str(doc, _STOP_REASON)
        metadata: dict[str, Any] = {}
        stop_sequence = self._optional_str(doc, _STOP_SEQUENCE)
        if stop_sequence is not None:
            metadata[_STOP_SEQUENCE] = stop_sequence

        return GenerateResult(
            content=content,
            finish_reason=self._finish_reason(stop_reason),
            usage=self._parse_usage(doc.get(_USAGE)),
            id=self._optional_str(doc, _ID) or "",
            model=self._optional_str(doc, _MODEL) or "",
            raw_finish_reason=stop_reason,
            provider_metadata=metadata,
        )

    def _parse_block(self, block: Mapping[str, Any], path: str) -> ContentBlock:
        kind = self._require(block, _BLOCK_TYPE, str, f"{path}.{_BLOCK_TYPE}")

        if kind == _BLOCK_TEXT:
            return TextBlock(text=self._require(block, _TEXT, str, f"{path}.{_TEXT}"))

        if kind == _BLOCK_TOOL_USE:
            return ToolUseBlock(
                id=self._require(block, _TOOL_ID, str, f"{path}.{_TOOL_ID}"),
                name=self._require(block, _TOOL_NAME, str, f"{path}.{_TOOL_NAME}"),
                arguments=self._decode_arguments(
                    block.get(_TOOL_INPUT), f"{path}.{_TOOL_INPUT}"
                ),
            )

        if kind == _BLOCK_THINKING:
            return ReasoningBlock(
                text=self._optional_str(block, _THINKING) or "",
                signature=self._optional_str(block, _SIGNATURE),
            )

        if kind == _BLOCK_REDACTED_THINKING:
            # The encrypted payload must be sent back verbatim on the next turn.
            return ReasoningBlock(
                text="",
                signature=self._optional_str(block, _REDACTED_DATA),
                redacted=True,
            )

        self._log(f"Keeping unknown content block '{kind}' at {path} as opaque", logging.DEBUG)
        return OpaqueBlock(kind=kind, data=copy.deepcopy(dict(block)))

    def _parse_usage(self, usage: Any) -> Usage:
        return Usage(
            input_tokens=self._count(usage, _INPUT_TOKENS),
            output_tokens=self._count(usage, _OUTPUT_TOKENS),
            cache_creation_input_tokens=self._count(usage, _CACHE_CREATION_TOKENS),
            cache_read_input_tokens=self._count(usage, _CACHE_READ_TOKENS),
        )
