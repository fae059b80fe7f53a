from typing import Annotated, Any, Dict, Iterable, Iterator, List, Optional, Union

from pydantic import BaseModel, Field

from chatsuite.framework.message import (
    AssistantMessage,
    SystemMessage,
    ToolResponseMessage,
    UserMessage,
)

AnyChatMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolResponseMessage],
    Field(discriminator="role"),
]


class ChatRequest(BaseModel):
    """An ordered conversation plus the tool declarations offered to the model."""

    messages: List[AnyChatMessage] = Field(default_factory=list)
    tools: Optional[List[Dict[str, Any]]] = None

    @classmethod
    def from_system(cls, content: str) -> "ChatRequest":
        return cls().with_system(content)

    def with_system(self, content: str) -> "ChatRequest":
        self.messages.append(SystemMessage(content=content))
        return self

    def append_message(self, message: AnyChatMessage) -> "ChatRequest":
        self.messages.append(message)
        return self

    def append_messages(self, messages: Iterable[AnyChatMessage]) -> "ChatRequest":
        self.messages.extend(messages)
        return self

    def append_tool(self, tool: Dict[str, Any]) -> "ChatRequest":
        if self.tools is None:
            self.tools = []
        self.tools.append(tool)
        return self

    def clone(self) -> "ChatRequest":
        return self.model_copy(deep=True)

    def iter_systems(self) -> Iterator[str]:
        """Iterate through the content of every system message, in order."""
        for message in self.messages:
            if isinstance(message, SystemMessage):
                yield message.content

    def combine_systems(self) -> Optional[str]:
        """
        Combine all system messages into one string, or None if there are none.

        An empty line separates consecutive entries: two newlines are added when
        the text so far does not end with a newline, one when it does.
        """
        systems = None
        for system in self.iter_systems():
            if systems is None:
                systems = ""
            if systems.endswith("\n"):
                systems += "\n"
            elif systems:
                systems += "\n\n"
            systems += system
        return systems
