# OpenAI provider
# Also the base of the OpenAI-compatible vendors (Ollama, Groq, DeepSeek).
# Links:
# Chat completions - https://platform.openai.com/docs/api-reference/chat

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from chatsuite.config import AdapterConfig
from chatsuite.errors import (
    ChatResponseError,
    NeitherChatNorToolResponse,
    UnexpectedChatResponseFormat,
)
from chatsuite.framework.chat_options import ChatOptionsSet
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.chat_response import (
    ChatResponse,
    ContentPayload,
    MetaUsage,
    ToolCallPayload,
)
from chatsuite.framework.chat_stream import ChatStreamEvent, ChatStreamResponse, StreamToolCall
from chatsuite.framework.message import (
    AssistantMessage,
    AssistantToolCall,
    MessageContent,
    SystemMessage,
    ToolResponseMessage,
    UserMessage,
)
from chatsuite.framework.stop_reason import StopReason, stop_reason_manager
from chatsuite.provider import ModelInfo, Provider, ServiceType
from chatsuite.streamer import Streamer
from chatsuite.utils.json_value import JsonPathNotFound, x_get
from chatsuite.utils.sse import iter_sse_events
from chatsuite.utils.streaming_tool_calls import StreamingToolCallAccumulator
from chatsuite.web_client import WebClient, WebRequestData, WebResponse

logger = logging.getLogger(__name__)

BASE_URL = "https://api.openai.com/v1/"

MODELS = [
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4-turbo",
    "gpt-4",
    "gpt-3.5-turbo",
]


def usage_from_openai(usage: Optional[Dict[str, Any]]) -> MetaUsage:
    if not usage:
        return MetaUsage()
    return MetaUsage(
        input_tokens=usage.get("prompt_tokens"),
        output_tokens=usage.get("completion_tokens"),
        total_tokens=usage.get("total_tokens"),
    )


class OpenAIMessageConverter:
    # Role constants
    ROLE_SYSTEM = "system"
    ROLE_USER = "user"
    ROLE_ASSISTANT = "assistant"
    ROLE_TOOL = "tool"

    def __init__(self, single_system_message: bool = False):
        self.single_system_message = single_system_message

    def convert_request(self, chat_req: ChatRequest) -> List[Dict[str, Any]]:
        """Convert framework messages to the chat completions ``messages`` array."""
        messages = []

        if self.single_system_message:
            # Some OpenAI-compatible servers only honor one system message, placed first.
            # Entries are joined with a blank line, as combine_systems does
            systems = chat_req.combine_systems()
            if systems is not None:
                messages.append({"role": self.ROLE_SYSTEM, "content": systems})

        for msg in chat_req.messages:
            if isinstance(msg, SystemMessage):
                if not self.single_system_message:
                    messages.append({"role": self.ROLE_SYSTEM, "content": msg.content})
            elif isinstance(msg, UserMessage):
                messages.append({"role": self.ROLE_USER, "content": msg.content.text})
            elif isinstance(msg, AssistantMessage):
                messages.append(self._convert_assistant_message(msg))
            elif isinstance(msg, ToolResponseMessage):
                messages.append({
                    "role": self.ROLE_TOOL,
                    "tool_call_id": msg.tool_call_id,
                    "name": msg.tool_name,
                    "content": msg.tool_result,
                })
            else:
                raise TypeError(f"Unsupported message type: {type(msg).__name__}")
        return messages

    def _convert_assistant_message(self, msg: AssistantMessage) -> Dict[str, Any]:
        message = {"role": self.ROLE_ASSISTANT, "content": msg.content.text}
        if msg.extra is not None:
            message["tool_calls"] = [tool_call.to_vendor() for tool_call in msg.extra.tool_calls]
        return message

    def convert_response(self, model_info: ModelInfo, body: Any) -> ChatResponse:
        """Parse a chat completions body into a ChatResponse."""
        if not isinstance(body, dict):
            raise UnexpectedChatResponseFormat(model_info, f"expected a JSON object, got {body!r}")
        if body.get("error"):
            raise ChatResponseError(model_info, body["error"])

        usage = usage_from_openai(body.get("usage"))

        try:
            choice = x_get(body, "/choices/0")
        except JsonPathNotFound as e:
            raise UnexpectedChatResponseFormat(model_info, str(e)) from e

        finish_reason = choice.get("finish_reason")
        if finish_reason is None:
            raise UnexpectedChatResponseFormat(model_info, "/choices/0/finish_reason is missing")

        stop_info = stop_reason_manager.map_stop_reason("openai", finish_reason)
        if stop_info.reason == StopReason.COMPLETE:
            content = x_get(choice, "/message/content", None)
            payload = ContentPayload(content=MessageContent.from_text(content) if isinstance(content, str) else None)
        elif stop_info.reason == StopReason.TOOL_CALL:
            try:
                raw_tool_calls = x_get(choice, "/message/tool_calls")
            except JsonPathNotFound as e:
                raise UnexpectedChatResponseFormat(model_info, str(e)) from e
            if raw_tool_calls is None:
                payload = ToolCallPayload(tool_calls=None)
            elif isinstance(raw_tool_calls, list):
                payload = ToolCallPayload(tool_calls=[AssistantToolCall.from_vendor(tc) for tc in raw_tool_calls])
            else:
                raise UnexpectedChatResponseFormat(model_info, f"/choices/0/message/tool_calls is not a list: {raw_tool_calls!r}")
        else:
            raise NeitherChatNorToolResponse(model_info, finish_reason)

        return ChatResponse(payload=payload, usage=usage)


class OpenAIStreamer(Streamer):
    """Server-sent events of ``stream: true`` chat completions, ended by ``data: [DONE]``."""

    stop_mapper_name = "openai"

    def __init__(self, model_info: ModelInfo, options_set: ChatOptionsSet):
        super().__init__(model_info, options_set)
        self.tool_calls = StreamingToolCallAccumulator()

    async def iter_response(self, response: httpx.Response) -> AsyncIterator[ChatStreamEvent]:
        async for sse in iter_sse_events(response.aiter_lines()):
            for event in self.handle_data(sse.data):
                yield event
            if self.done:
                return

    def handle_data(self, data: str) -> List[ChatStreamEvent]:
        if data == "[DONE]":
            return [self.end()]

        try:
            message = json.loads(data)
        except json.JSONDecodeError as e:
            raise UnexpectedChatResponseFormat(self.model_info, f"invalid stream chunk {data!r}") from e
        if not isinstance(message, dict):
            raise UnexpectedChatResponseFormat(self.model_info, f"expected a JSON object chunk, got {data!r}")
        if message.get("error"):
            raise ChatResponseError(self.model_info, message["error"])

        events = []
        if self.capture_usage and message.get("usage"):
            # Only the last, choice-less chunk carries usage (stream_options.include_usage)
            self.usage = usage_from_openai(message["usage"])

        choice = x_get(message, "/choices/0", None)
        if choice is None:
            return events

        content = x_get(choice, "/delta/content", None)
        if content:
            events.append(self.chunk(content))

        tool_call_deltas = x_get(choice, "/delta/tool_calls", None)
        if tool_call_deltas:
            self.tool_calls.add_chunk(tool_call_deltas)

        finish_reason = choice.get("finish_reason")
        if finish_reason:
            self.set_stop_reason(finish_reason)
            for tool_call in self.tool_calls.get_complete_tool_calls(final=True):
                events.append(StreamToolCall(tool_call=tool_call))
            self.tool_calls.clear()
        return events


class OpenaiProvider(Provider):
    DEFAULT_CONFIG = AdapterConfig(auth_env_name="OPENAI_API_KEY")
    BASE_URL = BASE_URL
    MODELS = MODELS

    # When set, every system message is combined into one leading system message
    single_system_message = False

    def __init__(self, config: Optional[AdapterConfig] = None):
        super().__init__(config)
        self.converter = OpenAIMessageConverter(single_system_message=self.single_system_message)

    def base_url(self) -> str:
        base_url = self.config.base_url or self.BASE_URL
        return base_url if base_url.endswith("/") else base_url + "/"

    def get_service_url(self, model_info: ModelInfo, service_type: ServiceType) -> str:
        return f"{self.base_url()}chat/completions"

    def get_headers(self, model_info: ModelInfo) -> Dict[str, str]:
        api_key = self.get_api_key(model_info)
        if api_key is None:
            return {}
        return {"Authorization": f"Bearer {api_key}"}

    def to_web_request_data(
        self,
        model_info: ModelInfo,
        service_type: ServiceType,
        chat_req: ChatRequest,
        options_set: ChatOptionsSet,
    ) -> WebRequestData:
        stream = service_type == ServiceType.CHAT_STREAM
        messages = self.converter.convert_request(chat_req)
        headers = self.get_headers(model_info)

        payload: Dict[str, Any] = {
            "model": model_info.model_name,
            "messages": messages,
            "stream": stream,
        }
        if chat_req.tools:
            payload["tools"] = chat_req.tools
        if options_set.json_mode():
            payload["response_format"] = {"type": "json_object"}
        if stream and options_set.capture_usage():
            payload["stream_options"] = {"include_usage": True}
        if options_set.temperature() is not None:
            payload["temperature"] = options_set.temperature()
        if options_set.max_tokens() is not None:
            payload["max_tokens"] = options_set.max_tokens()
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
        streamer = OpenAIStreamer(model_info, options_set)
        return ChatStreamResponse(stream=streamer.stream(web_client, web_request), model_info=model_info)
