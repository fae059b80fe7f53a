# Gemini provider
# Links:
# generateContent - https://ai.google.dev/api/generate-content

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
from chatsuite.utils.json_array_stream import JsonArrayStreamParser
from chatsuite.utils.json_value import JsonPathNotFound, x_get
from chatsuite.web_client import WebClient, WebRequestData, WebResponse

logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/"

MODELS = [
    "gemini-1.5-pro",
    "gemini-1.5-flash",
    "gemini-1.0-pro",
    "gemini-1.5-flash-latest",
]


def _normalize_gemini_usage(usage_metadata: Optional[Dict[str, Any]]) -> MetaUsage:
    """Map promptTokenCount, candidatesTokenCount and totalTokenCount onto MetaUsage."""
    if not usage_metadata:
        return MetaUsage()
    return MetaUsage(
        input_tokens=usage_metadata.get("promptTokenCount"),
        output_tokens=usage_metadata.get("candidatesTokenCount"),
        total_tokens=usage_metadata.get("totalTokenCount"),
    )


class GeminiMessageConverter:
    ROLE_USER = "user"
    ROLE_MODEL = "model"

    def convert_request(self, model_info: ModelInfo, chat_req: ChatRequest):
        """Return (systemInstruction text, contents)."""
        system = chat_req.combine_systems()
        contents = []
        for msg in chat_req.messages:
            if isinstance(msg, SystemMessage):
                continue
            elif isinstance(msg, UserMessage):
                contents.append({"role": self.ROLE_USER, "parts": [{"text": msg.content.text}]})
            elif isinstance(msg, AssistantMessage):
                if msg.extra is not None:
                    logger.debug(f"{model_info}: tool calls of assistant messages are not sent to Gemini")
                contents.append({"role": self.ROLE_MODEL, "parts": [{"text": msg.content.text}]})
            elif isinstance(msg, ToolResponseMessage):
                raise MessageRoleNotSupported(model_info, ChatRole.TOOL)
            else:
                raise TypeError(f"Unsupported message type: {type(msg).__name__}")
        return system, contents

    def check_error(self, model_info: ModelInfo, body: Any):
        if not isinstance(body, dict):
            raise UnexpectedChatResponseFormat(model_info, f"expected a JSON object, got {body!r}")
        if "error" in body:
            raise ChatResponseError(model_info, body["error"])

    def convert_response(self, model_info: ModelInfo, body: Any) -> ChatResponse:
        # The error envelope is checked before any candidate is read
        self.check_error(model_info, body)

        try:
            text = x_get(body, "/candidates/0/content/parts/0/text")
        except JsonPathNotFound as e:
            raise UnexpectedChatResponseFormat(model_info, str(e)) from e

        content = MessageContent.from_text(text) if isinstance(text, str) else None
        usage = _normalize_gemini_usage(body.get("usageMetadata"))
        return ChatResponse(payload=ContentPayload(content=content), usage=usage)


class GeminiStreamer(Streamer):
    """
    ``streamGenerateContent`` returns one JSON array whose elements arrive over
    time; each element has the shape of a ``generateContent`` body. The closing
    bracket ends the stream.
    """

    stop_mapper_name = "gemini"

    def __init__(self, model_info: ModelInfo, options_set: ChatOptionsSet, converter: GeminiMessageConverter):
        super().__init__(model_info, options_set)
        self.converter = converter
        self.parser = JsonArrayStreamParser()

    async def iter_response(self, response: httpx.Response) -> AsyncIterator[ChatStreamEvent]:
        async for text in response.aiter_text():
            for event in self.feed(text):
                yield event
            if self.done:
                return

    def feed(self, text: str) -> List[ChatStreamEvent]:
        try:
            elements = self.parser.feed(text)
        except ValueError as e:
            raise UnexpectedChatResponseFormat(self.model_info, str(e)) from e

        events = []
        for element in elements:
            try:
                body = json.loads(element)
            except json.JSONDecodeError as e:
                raise UnexpectedChatResponseFormat(self.model_info, f"invalid stream element {element!r}") from e
            events.extend(self.handle_element(body))
        if self.parser.done:
            events.append(self.end())
        return events

    def handle_element(self, body: Any) -> List[ChatStreamEvent]:
        self.converter.check_error(self.model_info, body)

        if body.get("usageMetadata"):
            self.usage = _normalize_gemini_usage(body["usageMetadata"])
        self.set_stop_reason(x_get(body, "/candidates/0/finishReason", None))

        text = x_get(body, "/candidates/0/content/parts/0/text", None)
        if isinstance(text, str) and text:
            return [self.chunk(text)]
        return []


class GeminiProvider(Provider):
    DEFAULT_CONFIG = AdapterConfig(auth_env_name="GEMINI_API_KEY")
    BASE_URL = BASE_URL
    MODELS = MODELS

    def __init__(self, config: Optional[AdapterConfig] = None):
        super().__init__(config)
        self.converter = GeminiMessageConverter()

    def get_service_url(self, model_info: ModelInfo, service_type: ServiceType) -> str:
        base_url = self.config.base_url or self.BASE_URL
        if not base_url.endswith("/"):
            base_url += "/"
        api_key = self.get_api_key(model_info)
        verb = "streamGenerateContent" if service_type == ServiceType.CHAT_STREAM else "generateContent"
        return f"{base_url}models/{model_info.model_name}:{verb}?key={api_key}"

    def to_web_request_data(
        self,
        model_info: ModelInfo,
        service_type: ServiceType,
        chat_req: ChatRequest,
        options_set: ChatOptionsSet,
    ) -> WebRequestData:
        system, contents = self.converter.convert_request(model_info, chat_req)

        if chat_req.tools:
            logger.debug(f"{model_info}: tool declarations are not forwarded to Gemini")

        payload: Dict[str, Any] = {"contents": contents}
        if system is not None:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        generation_config: Dict[str, Any] = {}
        if options_set.temperature() is not None:
            generation_config["temperature"] = options_set.temperature()
        if options_set.max_tokens() is not None:
            generation_config["maxOutputTokens"] = options_set.max_tokens()
        if options_set.top_p() is not None:
            generation_config["topP"] = options_set.top_p()
        if options_set.json_mode():
            generation_config["responseMimeType"] = "application/json"
        if generation_config:
            payload["generationConfig"] = generation_config

        logger.debug(f"{model_info} request payload: {payload}")
        # The key travels in the URL; no auth header
        return WebRequestData(url=self.get_service_url(model_info, service_type), headers={}, payload=payload)

    def to_chat_response(self, model_info: ModelInfo, web_response: WebResponse) -> ChatResponse:
        return self.converter.convert_response(model_info, web_response.body)

    def to_chat_stream(
        self,
        model_info: ModelInfo,
        web_client: WebClient,
        web_request: WebRequestData,
        options_set: ChatOptionsSet,
    ) -> ChatStreamResponse:
        streamer = GeminiStreamer(model_info, options_set, self.converter)
        return ChatStreamResponse(stream=streamer.stream(web_client, web_request), model_info=model_info)
