"""
Shared plumbing of the per-vendor streamers.

A streamer opens the streaming POST, checks the status, then turns the
vendor's frames into ChatStreamEvent items. Every stream starts with
StreamStart and ends with exactly one StreamEnd; the HTTP response is closed
when the generator finishes or is closed early.
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Optional, TYPE_CHECKING

import httpx

from chatsuite.errors import HttpStatusError, UnexpectedChatResponseFormat
from chatsuite.framework.chat_options import ChatOptionsSet
from chatsuite.framework.chat_response import MetaUsage
from chatsuite.framework.chat_stream import (
    ChatStream,
    ChatStreamEvent,
    StreamChunk,
    StreamEnd,
    StreamStart,
)
from chatsuite.framework.stop_reason import StopInfo, stop_reason_manager
from chatsuite.web_client import WebClient, WebRequestData, read_error_body

if TYPE_CHECKING:
    from chatsuite.provider import ModelInfo

logger = logging.getLogger(__name__)


class Streamer(ABC):
    """Base class; subclasses implement ``iter_response``."""

    # Key of the stop-reason mapper used to annotate StreamEnd
    stop_mapper_name: str = ""

    def __init__(self, model_info: "ModelInfo", options_set: ChatOptionsSet):
        self.model_info = model_info
        self.capture_usage = bool(options_set.capture_usage())
        self.capture_content = bool(options_set.capture_content())
        self.usage = MetaUsage()
        self.stop_info: Optional[StopInfo] = None
        self.done = False
        self._content: List[str] = []

    def chunk(self, text: str) -> StreamChunk:
        if self.capture_content:
            self._content.append(text)
        return StreamChunk(content=text)

    def set_stop_reason(self, original_reason: Optional[str]):
        if original_reason:
            self.stop_info = stop_reason_manager.map_stop_reason(self.stop_mapper_name, original_reason)

    def end(self) -> StreamEnd:
        self.done = True
        return StreamEnd(
            captured_usage=self.usage if self.capture_usage else None,
            captured_content="".join(self._content) if self.capture_content else None,
            stop_info=self.stop_info,
        )

    @abstractmethod
    def iter_response(self, response: httpx.Response) -> AsyncIterator[ChatStreamEvent]:
        """Yield the events of an open, successful response, ending with StreamEnd."""
        ...

    async def events(self, web_client: WebClient, web_request: WebRequestData) -> AsyncIterator[ChatStreamEvent]:
        async with web_client.stream_post(web_request.url, web_request.headers, web_request.payload) as response:
            if not 200 <= response.status_code < 300:
                raise HttpStatusError(self.model_info, response.status_code, await read_error_body(response))

            yield StreamStart()
            async for event in self.iter_response(response):
                yield event

        if not self.done:
            logger.error(f"{self.model_info} stream ended without its completion signal")
            raise UnexpectedChatResponseFormat(self.model_info, "stream ended before the completion signal")

    def stream(self, web_client: WebClient, web_request: WebRequestData) -> ChatStream:
        return ChatStream(self.events(web_client, web_request))

