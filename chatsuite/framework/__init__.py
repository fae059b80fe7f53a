from .message import (
    AssistantMessage,
    AssistantToolCall,
    AssistantToolCallFunction,
    ChatMessage,
    ChatRole,
    MessageContent,
    MessageExtra,
    SystemMessage,
    ToolCallExtra,
    ToolResponseMessage,
    UserMessage,
)
from .chat_request import AnyChatMessage, ChatRequest
from .chat_response import (
    ChatResponse,
    ChatResponsePayload,
    ContentPayload,
    MetaUsage,
    ToolCallPayload,
)
from .chat_options import ChatOptions, ChatOptionsSet
from .chat_stream import (
    ChatStream,
    ChatStreamEvent,
    ChatStreamResponse,
    StreamChunk,
    StreamEnd,
    StreamStart,
    StreamToolCall,
)
from .stop_reason import StopInfo, StopReason, stop_reason_manager
