"""Vendor-agnostic conversation messages and tool-call types."""

import json
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatsuite.errors import ToolCallParseError


class MessageContent(BaseModel):
    """Message body. Only plain text is supported."""

    text: str

    @classmethod
    def from_text(cls, text: str) -> "MessageContent":
        return cls(text=text)

    def text_as_str(self) -> Optional[str]:
        return self.text


def _to_content(content: Union[str, MessageContent]) -> MessageContent:
    if isinstance(content, MessageContent):
        return content
    return MessageContent(text=content)


class AssistantToolCallFunction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fn_name: str = Field(alias="name")
    fn_arguments: Optional[Any] = Field(default=None, alias="arguments")


class AssistantToolCall(BaseModel):
    """A tool invocation requested by the model.

    Vendors transmit ``function.arguments`` as a JSON document encoded inside a
    JSON string; ``fn_arguments`` always holds the decoded value.
    """

    model_config = ConfigDict(populate_by_name=True)

    tool_call_id: str = Field(alias="id")
    tool_call_type: str = Field(default="function", alias="type")
    function: AssistantToolCallFunction

    @classmethod
    def from_vendor(cls, obj: dict) -> "AssistantToolCall":
        """Build from a vendor ``tool_calls`` entry, decoding the stringified arguments."""
        function = obj.get("function") or {}
        fn_name = function.get("name", "")
        raw_arguments = function.get("arguments")

        if isinstance(raw_arguments, str):
            if raw_arguments == "":
                arguments = None
            else:
                try:
                    arguments = json.loads(raw_arguments)
                except json.JSONDecodeError as e:
                    raise ToolCallParseError(fn_name, raw_arguments, e) from e
        else:
            arguments = raw_arguments

        return cls(
            tool_call_id=obj.get("id", ""),
            tool_call_type=obj.get("type") or "function",
            function=AssistantToolCallFunction(fn_name=fn_name, fn_arguments=arguments),
        )

    def to_vendor(self) -> dict:
        """Serialize back to the wire shape, re-stringifying the arguments."""
        if self.function.fn_arguments is None:
            arguments = ""
        else:
            arguments = json.dumps(self.function.fn_arguments, separators=(",", ":"))
        return {
            "id": self.tool_call_id,
            "type": self.tool_call_type,
            "function": {
                "name": self.function.fn_name,
                "arguments": arguments,
            },
        }


class ToolCallExtra(BaseModel):
    """Tool calls attached to an assistant message."""

    kind: Literal["tool_call"] = "tool_call"
    tool_calls: List[AssistantToolCall]


# ToolCallExtra is the only extra today.
MessageExtra = ToolCallExtra


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ChatMessage(BaseModel):
    """Base of the message variants; also hosts the constructors."""

    @property
    def chat_role(self) -> ChatRole:
        return ChatRole(self.role)

    @staticmethod
    def system(content: str) -> "SystemMessage":
        return SystemMessage(content=content)

    @staticmethod
    def user(content: Union[str, MessageContent]) -> "UserMessage":
        return UserMessage(content=_to_content(content))

    @staticmethod
    def assistant(content: Union[str, MessageContent]) -> "AssistantMessage":
        return AssistantMessage(content=_to_content(content))

    @staticmethod
    def assistant_with_extra(content: Union[str, MessageContent], extra: MessageExtra) -> "AssistantMessage":
        return AssistantMessage(content=_to_content(content), extra=extra)

    @staticmethod
    def from_tool_calls(tool_calls: List[AssistantToolCall]) -> "AssistantMessage":
        return AssistantMessage(content=MessageContent(text=""), extra=ToolCallExtra(tool_calls=list(tool_calls)))

    @staticmethod
    def tool_response(tool_call_id: str, tool_name: str, tool_result: str) -> "ToolResponseMessage":
        return ToolResponseMessage(tool_call_id=tool_call_id, tool_name=tool_name, tool_result=tool_result)


class SystemMessage(ChatMessage):
    role: Literal["system"] = "system"
    content: str


class UserMessage(ChatMessage):
    role: Literal["user"] = "user"
    content: MessageContent
    extra: Optional[MessageExtra] = None

    @field_validator("extra")
    @classmethod
    def _no_extra(cls, value):
        if value is not None:
            raise ValueError("message extras can only be attached to assistant messages")
        return value


class AssistantMessage(ChatMessage):
    role: Literal["assistant"] = "assistant"
    content: MessageContent
    extra: Optional[MessageExtra] = None


class ToolResponseMessage(ChatMessage):
    role: Literal["tool"] = "tool"
    tool_call_id: str
    tool_name: str
    tool_result: str
