from .content import ContentBlock, OpaqueBlock, ReasoningBlock, TextBlock, ToolUseBlock
from .result import FinishReason, GenerateResult, Usage

__all__ = [
    "ContentBlock",
    "OpaqueBlock",
    "ReasoningBlock",
    "TextBlock",
    "ToolUseBlock",
    "FinishReason",
    "GenerateResult",
    "Usage",
]
