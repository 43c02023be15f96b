"""
LLM Normalizer - one result type for every LLM provider's responses.
"""

import logging

from .errors import (
    LLMNormalizerError,
    MalformedResponseError,
    ProviderError,
    ProviderErrorKind,
    classify_status,
)
from .factory import get_parser
from .parsers import (
    AnthropicResponseParser,
    GeminiResponseParser,
    OpenAIResponseParser,
    ResponseParser,
)
from .providers import Provider
from .types import (
    ContentBlock,
    FinishReason,
    GenerateResult,
    OpaqueBlock,
    ReasoningBlock,
    TextBlock,
    ToolUseBlock,
    Usage,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "LLMNormalizerError",
    "MalformedResponseError",
    "ProviderError",
    "ProviderErrorKind",
    "classify_status",
    "get_parser",
    "ResponseParser",
    "AnthropicResponseParser",
    "OpenAIResponseParser",
    "GeminiResponseParser",
    "Provider",
    "ContentBlock",
    "FinishReason",
    "GenerateResult",
    "OpaqueBlock",
    "ReasoningBlock",
    "TextBlock",
    "ToolUseBlock",
    "Usage",
]
