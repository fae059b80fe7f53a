from dataclasses import dataclass, field
from typing import List, Optional, Union

from chatsuite.framework.message import AssistantToolCall, MessageContent


@dataclass
class MetaUsage:
    """Token accounting as reported by the vendor. Every count is best effort."""

    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def summed(cls, input_tokens: Optional[int], output_tokens: Optional[int]) -> "MetaUsage":
        """Build a usage whose total is input + output when either side is known."""
        if input_tokens is None and output_tokens is None:
            total_tokens = None
        else:
            total_tokens = (input_tokens or 0) + (output_tokens or 0)
        return cls(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total_tokens)


@dataclass
class ContentPayload:
    content: Optional[MessageContent] = None


@dataclass
class ToolCallPayload:
    tool_calls: Optional[List[AssistantToolCall]] = None


ChatResponsePayload = Union[ContentPayload, ToolCallPayload]


@dataclass
class ChatResponse:
    """Standard response format for chat completions across all providers"""

    payload: ChatResponsePayload = field(default_factory=ContentPayload)
    usage: MetaUsage = field(default_factory=MetaUsage)

    def content_as_ref(self) -> Optional[MessageContent]:
        if isinstance(self.payload, ContentPayload):
            return self.payload.content
        return None

    def content_text_as_str(self) -> Optional[str]:
        content = self.content_as_ref()
        return content.text_as_str() if content is not None else None

    def tool_calls(self) -> Optional[List[AssistantToolCall]]:
        if isinstance(self.payload, ToolCallPayload):
            return self.payload.tool_calls
        return None
