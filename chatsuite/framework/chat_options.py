from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChatOptions:
    """Optional chat parameters. Each provider maps the subset its vendor accepts."""

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    json_mode: Optional[bool] = None
    # Streaming only
    capture_usage: Optional[bool] = None
    capture_content: Optional[bool] = None


class ChatOptionsSet:
    """Per-call options layered over the client defaults, field by field."""

    def __init__(self, chat_options: Optional[ChatOptions] = None, client_options: Optional[ChatOptions] = None):
        self.chat_options = chat_options
        self.client_options = client_options

    def _get(self, name: str):
        for options in (self.chat_options, self.client_options):
            if options is not None:
                value = getattr(options, name)
                if value is not None:
                    return value
        return None

    def temperature(self) -> Optional[float]:
        return self._get("temperature")

    def max_tokens(self) -> Optional[int]:
        return self._get("max_tokens")

    def top_p(self) -> Optional[float]:
        return self._get("top_p")

    def json_mode(self) -> Optional[bool]:
        return self._get("json_mode")

    def capture_usage(self) -> Optional[bool]:
        return self._get("capture_usage")

    def capture_content(self) -> Optional[bool]:
        return self._get("capture_content")
