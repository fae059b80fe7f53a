"""
Server-Sent Events decoding.

The transport hands over the response body line by line; SSEDecoder folds
those lines into events following the text/event-stream rules: ``data``
lines accumulate (joined with newlines), lines starting with ``:`` are
comments, and a blank line dispatches the pending event.
"""

from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Optional


@dataclass
class SSEEvent:
    data: str
    event: str = "message"
    id: Optional[str] = None


class SSEDecoder:
    def __init__(self):
        self._event: Optional[str] = None
        self._data: list = []
        self._id: Optional[str] = None

    def decode(self, line: str) -> Optional[SSEEvent]:
        """Feed one line (without its terminator). Returns an event on dispatch."""
        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            self._id = value
        # "retry" and unknown fields are ignored
        return None

    def flush(self) -> Optional[SSEEvent]:
        """Dispatch whatever is pending when the body ends without a blank line."""
        return self._dispatch()

    def _dispatch(self) -> Optional[SSEEvent]:
        if not self._data and self._event is None:
            return None
        event = SSEEvent(data="\n".join(self._data), event=self._event or "message", id=self._id)
        self._event = None
        self._data = []
        return event


async def iter_sse_events(lines: AsyncIterable[str]) -> AsyncIterator[SSEEvent]:
    decoder = SSEDecoder()
    async for line in lines:
        event = decoder.decode(line)
        if event is not None:
            yield event
    event = decoder.flush()
    if event is not None:
        yield event
