# Anthropic provider
# Links:
# Messages API - https://docs.anthropic.com/en/api/messages
# Streaming - https://docs.anthropic.com/en/api/messages-streaming

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from chatsuite.config import AdapterConfig
from chatsuite.errors import (
    ChatResponseError,
    MessageRoleNotSupported,
    UnexpectedChatResponseFormat,
)
from chatsuite.framework.chat_options import ChatOptionsSet
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.chat_response import ChatResponse, ContentPayload, MetaUsage
from chatsuite.framework.chat_stream import ChatStreamEvent, ChatStreamResponse
from chatsuite.framework.message import (
    AssistantMessage,
    ChatRole,
    MessageContent,
    SystemMessage,
    ToolResponseMessage,
    UserMessage,
)
from chatsuite.provider import ModelInfo, Provider, ServiceType
from chatsuite.streamer import Streamer
from chatsuite.utils.json_value import x_get
from chatsuite.utils.sse import iter_sse_events
from chatsuite.web_client import WebClient, WebRequestData, WebResponse

logger = logging.getLogger(__name__)

BASE_URL = "https://api.anthropic.com/v1/"
ANTHROPIC_VERSION = "2023-06-01"

# max_tokens is mandatory for the Messages API
DEFAULT_MAX_TOKENS = 1024

MODELS = [
    "claude-3-5-sonnet-20240620",
    "claude-3-opus-20240229",
    "claude-3-sonnet-20240229",
    "claude-3-haiku-20240307",
]


class AnthropicMessageConverter:
    # Role constants
    ROLE_USER = "user"
    ROLE_ASSISTANT = "assistant"

    def convert_request(self, model_info: ModelInfo, chat_req: ChatRequest):
        """Convert framework messages to Anthropic format: (system, messages)."""
        system = chat_req.combine_systems()
        messages = []
        for msg in chat_req.messages:
            if isinstance(msg, SystemMessage):
                # Already folded into the top-level system field
                continue
            elif isinstance(msg, UserMessage):
                messages.append({"role": self.ROLE_USER, "content": msg.content.text})
            elif isinstance(msg, AssistantMessage):
                if msg.extra is not None:
                    logger.debug(f"{model_info}: tool calls of assistant messages are not sent to Anthropic")
                messages.append({"role": self.ROLE_ASSISTANT, "content": msg.content.text})
            elif isinstance(msg, ToolResponseMessage):
                raise MessageRoleNotSupported(model_info, ChatRole.TOOL)
            else:
                raise TypeError(f"Unsupported message type: {type(msg).__name__}")
        return system, messages

    def convert_response(self, model_info: ModelInfo, body: Any) -> ChatResponse:
        """Concatenate the text items of the response content."""
        if not isinstance(body, dict):
            raise UnexpectedChatResponseFormat(model_info, f"expected a JSON object, got {body!r}")
        if body.get("type") == "error":
            raise ChatResponseError(model_info, body.get("error", body))

        usage = self._get_usage_stats(body.get("usage"))

        content_items = body.get("content")
        if not isinstance(content_items, list):
            raise UnexpectedChatResponseFormat(model_info, "content is missing")

        text = "".join(
            item.get("text", "")
            for item in content_items
            if isinstance(item, dict) and item.get("type") == "text"
        )
        content = MessageContent.from_text(text) if text else None
        return ChatResponse(payload=ContentPayload(content=content), usage=usage)

    def _get_usage_stats(self, usage: Optional[Dict[str, Any]]) -> MetaUsage:
        if not usage:
            return MetaUsage()
        return MetaUsage.summed(usage.get("input_tokens"), usage.get("output_tokens"))


class AnthropicStreamer(Streamer):
    """Named server-sent events; ``message_stop`` ends the stream."""

    stop_mapper_name = "anthropic"

    def __init__(self, model_info: ModelInfo, options_set: ChatOptionsSet):
        super().__init__(model_info, options_set)
        self.input_tokens: Optional[int] = None
        self.output_tokens: Optional[int] = None

    async def iter_response(self, response: httpx.Response) -> AsyncIterator[ChatStreamEvent]:
        async for sse in iter_sse_events(response.aiter_lines()):
            for event in self.handle_event(sse.event, sse.data):
                yield event
            if self.done:
                return

    def handle_event(self, event_type: str, data: str) -> List[ChatStreamEvent]:
        if event_type == "ping":
            return []

        try:
            message = json.loads(data) if data else {}
        except json.JSONDecodeError as e:
            raise UnexpectedChatResponseFormat(self.model_info, f"invalid {event_type} event {data!r}") from e
        if not isinstance(message, dict):
            raise UnexpectedChatResponseFormat(self.model_info, f"expected a JSON object in the {event_type} event, got {data!r}")

        if event_type == "error" or message.get("type") == "error":
            raise ChatResponseError(self.model_info, message.get("error", message))

        if event_type == "message_start":
            self.input_tokens = x_get(message, "/message/usage/input_tokens", None)
        elif event_type == "content_block_delta":
            text = x_get(message, "/delta/text", None)
            if text:
                return [self.chunk(text)]
        elif event_type == "message_delta":
            output_tokens = x_get(message, "/usage/output_tokens", None)
            if output_tokens is not None:
                self.output_tokens = output_tokens
            self.set_stop_reason(x_get(message, "/delta/stop_reason", None))
        elif event_type == "message_stop":
            self.usage = MetaUsage.summed(self.input_tokens, self.output_tokens)
            return [self.end()]
        # content_block_start and content_block_stop carry nothing to surface
        return []


class AnthropicProvider(Provider):
    DEFAULT_CONFIG = AdapterConfig(auth_env_name="ANTHROPIC_API_KEY")
    BASE_URL = BASE_URL
    MODELS = MODELS

    def __init__(self, config: Optional[AdapterConfig] = None):
        super().__init__(config)
        self.converter = AnthropicMessageConverter()

    def get_service_url(self, model_info: ModelInfo, service_type: ServiceType) -> str:
        base_url = self.config.base_url or self.BASE_URL
        if not base_url.endswith("/"):
            base_url += "/"
        return f"{base_url}messages"

    def to_web_request_data(
        self,
        model_info: ModelInfo,
        service_type: ServiceType,
        chat_req: ChatRequest,
        options_set: ChatOptionsSet,
    ) -> WebRequestData:
        system, messages = self.converter.convert_request(model_info, chat_req)
        api_key = self.get_api_key(model_info)
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

        if chat_req.tools:
            logger.debug(f"{model_info}: tool declarations are not forwarded to Anthropic")

        payload: Dict[str, Any] = {
            "model": model_info.model_name,
            "messages": messages,
            "stream": service_type == ServiceType.CHAT_STREAM,
            "max_tokens": options_set.max_tokens() or DEFAULT_MAX_TOKENS,
        }
        if system is not None:
            payload["system"] = system
        if options_set.temperature() is not None:
            payload["temperature"] = options_set.temperature()
        if options_set.top_p() is not None:
            payload["top_p"] = options_set.top_p()

        logger.debug(f"{model_info} request payload: {payload}")
        return WebRequestData(url=self.get_service_url(model_info, service_type), headers=headers, payload=payload)

    def to_chat_response(self, model_info: ModelInfo, web_response: WebResponse) -> ChatResponse:
        return self.converter.convert_response(model_info, web_response.body)

    def to_chat_stream(
        self,
        model_info: ModelInfo,
        web_client: WebClient,
        web_request: WebRequestData,
        options_set: ChatOptionsSet,
    ) -> ChatStreamResponse:
        streamer = AnthropicStreamer(model_info, options_set)
        return ChatStreamResponse(stream=streamer.stream(web_client, web_request), model_info=model_info)
