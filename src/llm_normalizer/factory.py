from __future__ import annotations

import logging
from typing import Type

from llm_normalizer.parsers import (
    AnthropicResponseParser,
    GeminiResponseParser,
    OpenAIResponseParser,
    ResponseParser,
)

from .providers import Provider

# map Provider enum to its parser implementation
_PARSER_REGISTRY: dict[Provider, Type[ResponseParser]] = {
    Provider.ANTHROPIC: AnthropicResponseParser,
    Provider.OPENAI: OpenAIResponseParser,
    Provider.GEMINI: GeminiResponseParser,
}


def get_parser(
    provider: Provider | str,
    *,
    logger: logging.Logger | None = None,
    name: str | None = None,
) -> ResponseParser:
    """
    Factory for the response parser of any supported provider.

    Args:
        provider: Which provider to use (ANTHROPIC, OPENAI, GEMINI), as the enum
            or its string value.
        logger: Optional custom logger.
        name: Optional name used to prefix log records.
    """
    try:
        parser_cls = _PARSER_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    return parser_cls(logger=logger, name=name)
