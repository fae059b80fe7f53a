"""Exception hierarchy shared by the client, the providers and the tool bridge."""

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from chatsuite.framework.message import ChatRole
    from chatsuite.provider import ModelInfo


class LLMError(Exception):
    """Custom exception for LLM errors."""

    def __init__(self, message):
        super().__init__(message)


def _describe(model_info) -> str:
    if model_info is None:
        return "unknown model"
    return f"{model_info.adapter_kind.value}:{model_info.model_name}"


# -- Configuration

class ConfigurationError(LLMError):
    """The selected vendor cannot be used as configured."""


class ApiKeyEnvNotFound(ConfigurationError):
    def __init__(self, model_info: "ModelInfo", env_name: Optional[str]):
        self.model_info = model_info
        self.env_name = env_name
        super().__init__(
            f"API key for {_describe(model_info)} is missing. "
            f"Provide it in the provider config or set the {env_name} environment variable."
        )


class UnsupportedProvider(ConfigurationError):
    def __init__(self, provider_key: str, supported):
        self.provider_key = provider_key
        self.supported = supported
        super().__init__(
            f"Invalid provider key '{provider_key}'. Supported providers: {sorted(supported)}. "
            "Make sure the model string is formatted correctly as 'provider:model'."
        )


# -- Capability

class CapabilityError(LLMError):
    """The conversation contains something the target vendor cannot express."""


class MessageRoleNotSupported(CapabilityError):
    def __init__(self, model_info: "ModelInfo", role: "ChatRole"):
        self.model_info = model_info
        self.role = role
        super().__init__(f"Role '{role.value}' is not supported by {_describe(model_info)}")


# -- Transport / vendor

class TransportError(LLMError):
    """The request failed on the wire or the vendor reported an error."""


class WebClientError(TransportError):
    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"Request to {url} failed: {cause}")


class HttpStatusError(TransportError):
    def __init__(self, model_info: "ModelInfo", status_code: int, body: Any):
        self.model_info = model_info
        self.status_code = status_code
        self.body = body
        super().__init__(f"{_describe(model_info)} responded with HTTP {status_code}: {body}")


class ChatResponseError(TransportError):
    """Vendor error envelope found in a response body or a stream event."""

    def __init__(self, model_info: "ModelInfo", body: Any):
        self.model_info = model_info
        self.body = body
        super().__init__(f"{_describe(model_info)} returned an error: {body}")


# -- Shape

class ShapeError(LLMError):
    """The vendor response does not have the expected structure."""


class UnexpectedChatResponseFormat(ShapeError):
    def __init__(self, model_info: "ModelInfo", detail: str):
        self.model_info = model_info
        self.detail = detail
        super().__init__(f"Unexpected response format from {_describe(model_info)}: {detail}")


class NeitherChatNorToolResponse(ShapeError):
    def __init__(self, model_info: "ModelInfo", finish_reason: str):
        self.model_info = model_info
        self.finish_reason = finish_reason
        super().__init__(
            f"{_describe(model_info)} finished with '{finish_reason}', "
            "which is neither a chat answer nor a tool call"
        )


class ToolCallParseError(ShapeError):
    def __init__(self, fn_name: str, arguments: Any, cause: Exception):
        self.fn_name = fn_name
        self.arguments = arguments
        self.cause = cause
        super().__init__(f"Arguments of tool call '{fn_name}' are not valid JSON: {cause}")


# -- Tool invocation (turned into result strings by the tool bridge)

class ToolInvocationError(LLMError):
    pass


class ToolCallArgsFailedSerialization(ToolInvocationError):
    def __init__(self, detail: str = "no arguments were provided"):
        super().__init__(f"ToolCallArgsFailedSerialization: {detail}")


class ToolCallFunctionFailed(ToolInvocationError):
    def __init__(self, detail: str):
        super().__init__(f"ToolCallFunctionFailed: {detail}")
