from .client import Client
from .config import AdapterConfig
from .errors import LLMError
from .framework import (
    ChatMessage,
    ChatOptions,
    ChatRequest,
    ChatResponse,
    ChatStreamResponse,
    StreamChunk,
    StreamEnd,
    StreamStart,
    StreamToolCall,
)
from .provider import AdapterKind, ModelInfo, ProviderFactory, ServiceType
from .utils.tools import Tools
