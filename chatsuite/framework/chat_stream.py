"""Uniform streaming events, independent of how each vendor frames its stream."""

from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union, TYPE_CHECKING

from chatsuite.framework.chat_response import MetaUsage
from chatsuite.framework.message import AssistantToolCall

if TYPE_CHECKING:
    from chatsuite.framework.stop_reason import StopInfo
    from chatsuite.provider import ModelInfo


@dataclass
class StreamStart:
    pass


@dataclass
class StreamChunk:
    content: str


@dataclass
class StreamToolCall:
    tool_call: AssistantToolCall


@dataclass
class StreamEnd:
    captured_usage: Optional[MetaUsage] = None
    captured_content: Optional[str] = None
    stop_info: Optional["StopInfo"] = None


ChatStreamEvent = Union[StreamStart, StreamChunk, StreamToolCall, StreamEnd]


class ChatStream:
    """
    Lazy, forward-only sequence of ChatStreamEvent.

    Nothing is read from the network until the next event is requested.
    Exhausting the stream, calling ``aclose()`` or leaving an ``async with``
    block closes the underlying HTTP response. Vendor errors surface as
    exceptions raised from ``__anext__``, after which the stream is finished.
    """

    def __init__(self, events: AsyncIterator[ChatStreamEvent]):
        self._events = events
        self._closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChatStreamEvent:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._events.__anext__()
        except StopAsyncIteration:
            self._closed = True
            raise
        except BaseException:
            await self.aclose()
            raise

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._events, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()


class ChatStreamResponse:
    def __init__(self, stream: ChatStream, model_info: "ModelInfo"):
        self.stream = stream
        self.model_info = model_info
