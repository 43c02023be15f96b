"""OpenAI Chat Completions response parser.

Gemini's OpenAI-compatible endpoint returns the same shape, so it is served by
this parser too.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Final

from llm_normalizer.errors import MalformedResponseError, ProviderErrorKind
from llm_normalizer.types import (
    ContentBlock,
    FinishReason,
    GenerateResult,
    OpaqueBlock,
    TextBlock,
    ToolUseBlock,
    Usage,
)

from .base import ResponseParser

__all__ = ["OpenAIResponseParser"]

_ID: Final = "id"
_MODEL: Final = "model"
_CHOICES: Final = "choices"
_MESSAGE: Final = "message"
_FINISH_REASON: Final = "finish_reason"
_USAGE: Final = "usage"
_SYSTEM_FINGERPRINT: Final = "system_fingerprint"

_CONTENT: Final = "content"
_REFUSAL: Final = "refusal"
_TOOL_CALLS: Final = "tool_calls"
_TOOL_ID: Final = "id"
_CALL_TYPE: Final = "type"
_CALL_FUNCTION: Final = "function"
_FUNCTION: Final = "function"
_FUNCTION_NAME: Final = "name"
_FUNCTION_ARGUMENTS: Final = "arguments"

_PART_TYPE: Final = "type"
_PART_TEXT: Final = "text"

_PROMPT_TOKENS: Final = "prompt_tokens"
_COMPLETION_TOKENS: Final = "completion_tokens"
_PROMPT_DETAILS: Final = "prompt_tokens_details"
_CACHED_TOKENS: Final = "cached_tokens"

STOP_REASONS: Final[dict[str, FinishReason]] = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_USE,
    "function_call": FinishReason.TOOL_USE,
    "content_filter": FinishReason.CONTENT_FILTER,
}

ERROR_TYPES: Final[dict[str, ProviderErrorKind]] = {
    "authentication_error": ProviderErrorKind.AUTHENTICATION,
    "permission_error": ProviderErrorKind.AUTHENTICATION,
    "rate_limit_error": ProviderErrorKind.RATE_LIMITED,
    "insufficient_quota": ProviderErrorKind.RATE_LIMITED,
    "server_error": ProviderErrorKind.PROVIDER_UNAVAILABLE,
    "invalid_request_error": ProviderErrorKind.INVALID_REQUEST,
    "not_found_error": ProviderErrorKind.INVALID_REQUEST,
}


class OpenAIResponseParser(ResponseParser):
    """Parser for ``/chat/completions`` responses (dicts or ``ChatCompletion``).

    Only the first choice is normalized.
    """

    stop_reasons = STOP_REASONS
    error_types = ERROR_TYPES

    def parse_success_response(self, response: Any) -> GenerateResult:
        doc = self._as_document(response)
        choices = self._require(doc, _CHOICES, list, _CHOICES)
        if not choices:
            raise MalformedResponseError("Response has no choices", field=_CHOICES)
        choice = self._object_at(choices, 0, f"{_CHOICES}.0")
        message = self._require(choice, _MESSAGE, Mapping, f"{_CHOICES}.0.{_MESSAGE}")

        content = self._parse_content(message, f"{_CHOICES}.0.{_MESSAGE}")

        metadata: dict[str, Any] = {}
        refusal = self._optional_str(message, _REFUSAL)
        if refusal:
            metadata[_REFUSAL] = refusal
        fingerprint = self._optional_str(doc, _SYSTEM_FINGERPRINT)
        if fingerprint:
            metadata[_SYSTEM_FINGERPRINT] = fingerprint

        finish_reason = self._optional_str(choice, _FINISH_REASON)
        return GenerateResult(
            content=content,
            finish_reason=self._finish_reason(finish_reason),
            usage=self._parse_usage(doc.get(_USAGE)),
            id=self._optional_str(doc, _ID) or "",
            model=self._optional_str(doc, _MODEL) or "",
            raw_finish_reason=finish_reason,
            provider_metadata=metadata,
        )

    def _parse_content(self, message: Mapping[str, Any], path: str) -> list[ContentBlock]:
        content: list[ContentBlock] = []

        raw_content = message.get(_CONTENT)
        if isinstance(raw_content, str):
            if raw_content:
                content.append(TextBlock(text=raw_content))
        elif isinstance(raw_content, list):
            # Content parts, as some compatible endpoints return them
            for i, part in enumerate(raw_content):
                part_path = f"{path}.{_CONTENT}.{i}"
                if isinstance(part, Mapping) and part.get(_PART_TYPE) == _PART_TEXT:
                    text = self._require(
                        part, _PART_TEXT, str, f"{part_path}.{_PART_TEXT}"
                    )
                    content.append(TextBlock(text=text))
                elif isinstance(part, Mapping):
                    kind = part.get(_PART_TYPE)
                    self._log(
                        f"Keeping unknown content part '{kind}' at {part_path} as opaque",
                        logging.DEBUG,
                    )
                    content.append(
                        OpaqueBlock(kind=str(kind or ""), data=copy.deepcopy(dict(part)))
                    )
                else:
                    raise MalformedResponseError(
                        f"Field '{part_path}' is {type(part).__name__}, expected an object",
                        field=part_path,
                    )

        tool_calls = message.get(_TOOL_CALLS)
        if isinstance(tool_calls, list):
            for i in range(len(tool_calls)):
                call_path = f"{path}.{_TOOL_CALLS}.{i}"
                call = self._object_at(tool_calls, i, call_path)
                if call.get(_CALL_TYPE, _CALL_FUNCTION) != _CALL_FUNCTION:
                    self._log(
                        f"Keeping non-function tool call at {call_path} as opaque",
                        logging.DEBUG,
                    )
                    content.append(
                        OpaqueBlock(
                            kind=str(call.get(_CALL_TYPE)), data=copy.deepcopy(dict(call))
                        )
                    )
                    continue
                function = self._require(
                    call, _FUNCTION, Mapping, f"{call_path}.{_FUNCTION}"
                )
                content.append(
                    ToolUseBlock(
                        id=self._require(call, _TOOL_ID, str, f"{call_path}.{_TOOL_ID}"),
                        name=self._require(
                            function,
                            _FUNCTION_NAME,
                            str,
                            f"{call_path}.{_FUNCTION}.{_FUNCTION_NAME}",
                        ),
                        arguments=self._decode_arguments(
                            function.get(_FUNCTION_ARGUMENTS),
                            f"{call_path}.{_FUNCTION}.{_FUNCTION_ARGUMENTS}",
                        ),
                    )
                )
        return content

    def _parse_usage(self, usage: Any) -> Usage:
        details = usage.get(_PROMPT_DETAILS) if isinstance(usage, Mapping) else None
        return Usage(
            input_tokens=self._count(usage, _PROMPT_TOKENS),
            output_tokens=self._count(usage, _COMPLETION_TOKENS),
            cache_read_input_tokens=self._count(details, _CACHED_TOKENS),
        )
