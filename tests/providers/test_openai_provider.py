import pytest

from chatsuite.config import AdapterConfig
from chatsuite.errors import (
    ApiKeyEnvNotFound,
    ChatResponseError,
    NeitherChatNorToolResponse,
    UnexpectedChatResponseFormat,
)
from chatsuite.framework.chat_options import ChatOptions, ChatOptionsSet
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.chat_response import ContentPayload, ToolCallPayload
from chatsuite.framework.message import AssistantToolCall, ChatMessage, ToolCallExtra
from chatsuite.provider import AdapterKind, ModelInfo, ServiceType
from chatsuite.providers.deepseek_provider import DeepseekProvider
from chatsuite.providers.groq_provider import GroqProvider
from chatsuite.providers.ollama_provider import OllamaProvider
from chatsuite.providers.openai_provider import OpenaiProvider
from chatsuite.web_client import WebResponse

MODEL_INFO = ModelInfo(AdapterKind.OPENAI, "gpt-4o-mini")


@pytest.fixture(autouse=True)
def set_api_key_env_vars(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-api-key")
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "test-deepseek-key")


def _tool_call(arguments='{"x":1}'):
    return AssistantToolCall.from_vendor({
        "id": "call_abc",
        "type": "function",
        "function": {"name": "set_x", "arguments": arguments},
    })


def _request_data(provider, chat_req, model_info=MODEL_INFO, service_type=ServiceType.CHAT, options=None):
    return provider.to_web_request_data(model_info, service_type, chat_req, ChatOptionsSet(options))


def test_request_body_and_headers():
    chat_req = ChatRequest.from_system("be brief").append_message(ChatMessage.user("hi"))
    data = _request_data(OpenaiProvider(), chat_req, options=ChatOptions(temperature=0.2, max_tokens=64, top_p=0.9, json_mode=True))

    assert data.url == "https://api.openai.com/v1/chat/completions"
    assert data.headers == {"Authorization": "Bearer test-api-key"}
    assert data.payload == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ],
        "stream": False,
        "response_format": {"type": "json_object"},
        "temperature": 0.2,
        "max_tokens": 64,
        "top_p": 0.9,
    }


def test_tools_and_stream_options_in_streaming_body():
    tool = {"type": "function", "function": {"name": "now", "description": "Current time"}}
    chat_req = ChatRequest(messages=[ChatMessage.user("time?")], tools=[tool])
    data = _request_data(
        OpenaiProvider(), chat_req, service_type=ServiceType.CHAT_STREAM, options=ChatOptions(capture_usage=True)
    )

    assert data.payload["stream"] is True
    assert data.payload["tools"] == [tool]
    assert data.payload["stream_options"] == {"include_usage": True}


def test_each_system_message_is_kept():
    chat_req = ChatRequest.from_system("one").append_message(ChatMessage.user("q")).with_system("two")
    messages = _request_data(OpenaiProvider(), chat_req).payload["messages"]
    assert [m["role"] for m in messages] == ["system", "user", "system"]


def test_ollama_combines_system_messages_up_front():
    chat_req = ChatRequest.from_system("one").append_message(ChatMessage.user("q")).with_system("two")
    model_info = ModelInfo(AdapterKind.OLLAMA, "llama3")
    data = _request_data(OllamaProvider(), chat_req, model_info=model_info)

    assert data.url == "http://localhost:11434/v1/chat/completions"
    assert data.headers == {}
    assert data.payload["messages"] == [
        {"role": "system", "content": "one\n\ntwo"},
        {"role": "user", "content": "q"},
    ]


def test_openai_compatible_vendor_urls_and_keys():
    chat_req = ChatRequest(messages=[ChatMessage.user("q")])

    groq = _request_data(GroqProvider(), chat_req, model_info=ModelInfo(AdapterKind.GROQ, "llama3-8b-8192"))
    assert groq.url == "https://api.groq.com/openai/v1/chat/completions"
    assert groq.headers == {"Authorization": "Bearer test-groq-key"}

    deepseek = _request_data(DeepseekProvider(), chat_req, model_info=ModelInfo(AdapterKind.DEEPSEEK, "deepseek-chat"))
    assert deepseek.url == "https://api.deepseek.com/chat/completions"
    assert deepseek.headers == {"Authorization": "Bearer test-deepseek-key"}


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")
    with pytest.raises(ApiKeyEnvNotFound) as exc_info:
        _request_data(OpenaiProvider(), ChatRequest(messages=[ChatMessage.user("q")]))
    assert exc_info.value.env_name == "OPENAI_API_KEY"


def test_explicit_config_wins_over_environment():
    config = OpenaiProvider.default_adapter_config().with_overrides({"api_key": "explicit", "base_url": "http://proxy/v1"})
    data = _request_data(OpenaiProvider(config), ChatRequest(messages=[ChatMessage.user("q")]))
    assert data.url == "http://proxy/v1/chat/completions"
    assert data.headers == {"Authorization": "Bearer explicit"}


def test_assistant_tool_call_round_trip():
    chat_req = ChatRequest(messages=[
        ChatMessage.user("set x"),
        ChatMessage.assistant_with_extra("", ToolCallExtra(tool_calls=[_tool_call()])),
        ChatMessage.tool_response("call_abc", "set_x", "done"),
    ])
    messages = _request_data(OpenaiProvider(), chat_req).payload["messages"]

    assert messages[1]["tool_calls"] == [
        {"id": "call_abc", "type": "function", "function": {"name": "set_x", "arguments": "{\"x\":1}"}}
    ]
    assert messages[2] == {"role": "tool", "tool_call_id": "call_abc", "name": "set_x", "content": "done"}

    body = {
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": None, "tool_calls": messages[1]["tool_calls"]},
            "finish_reason": "tool_calls",
        }]
    }
    response = OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, body))
    assert response.tool_calls()[0].function.fn_arguments == {"x": 1}


def test_stop_response_is_content():
    body = {
        "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello!"}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 9, "completion_tokens": 3, "total_tokens": 12},
    }
    response = OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, body))

    assert isinstance(response.payload, ContentPayload)
    assert response.content_text_as_str() == "Hello!"
    assert response.tool_calls() is None
    assert (response.usage.input_tokens, response.usage.output_tokens, response.usage.total_tokens) == (9, 3, 12)


def test_tool_calls_response_has_one_entry_per_call():
    body = {
        "choices": [{
            "index": 0,
            "message": {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {"id": "c1", "type": "function", "function": {"name": "a", "arguments": "{\"n\":1}"}},
                    {"id": "c2", "type": "function", "function": {"name": "b", "arguments": "{}"}},
                ],
            },
            "finish_reason": "tool_calls",
        }]
    }
    response = OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, body))

    assert isinstance(response.payload, ToolCallPayload)
    assert [tc.tool_call_id for tc in response.tool_calls()] == ["c1", "c2"]


def _tool_calls_body(tool_calls):
    return {
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": None, "tool_calls": tool_calls},
            "finish_reason": "tool_calls",
        }]
    }


def test_null_tool_calls_give_empty_tool_call_payload():
    response = OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, _tool_calls_body(None)))

    assert isinstance(response.payload, ToolCallPayload)
    assert response.tool_calls() is None


def test_tool_calls_must_be_a_list():
    with pytest.raises(UnexpectedChatResponseFormat):
        OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, _tool_calls_body({"id": "c1"})))
    assert response.content_text_as_str() is None


def test_other_finish_reason_is_rejected():
    body = {"choices": [{"index": 0, "message": {"content": "cut"}, "finish_reason": "length"}]}
    with pytest.raises(NeitherChatNorToolResponse) as exc_info:
        OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, body))
    assert exc_info.value.finish_reason == "length"


def test_missing_finish_reason_or_choices():
    with pytest.raises(UnexpectedChatResponseFormat):
        OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, {"choices": [{"message": {"content": "x"}}]}))
    with pytest.raises(UnexpectedChatResponseFormat):
        OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, {"choices": []}))


def test_error_envelope():
    body = {"error": {"message": "bad model", "type": "invalid_request_error"}}
    with pytest.raises(ChatResponseError) as exc_info:
        OpenaiProvider().to_chat_response(MODEL_INFO, WebResponse(200, body))
    assert exc_info.value.model_info == MODEL_INFO


@pytest.mark.asyncio
async def test_all_model_names():
    assert "gpt-4o" in await OpenaiProvider().all_model_names()
    assert await OllamaProvider().all_model_names() == []
    assert "deepseek-reasoner" in await DeepseekProvider().all_model_names()


def test_default_configs_are_shared_constants():
    assert OpenaiProvider.default_adapter_config() is OpenaiProvider.default_adapter_config()
    assert OllamaProvider.default_adapter_config() == AdapterConfig()
    assert GroqProvider.default_adapter_config().auth_env_name == "GROQ_API_KEY"
