"""
Incremental splitting of a JSON array delivered in arbitrary text chunks.

Gemini's ``streamGenerateContent`` answers with one pretty-printed JSON array
whose elements arrive over time::

    [{
      "candidates": [...]
    }
    ,
    {
      ...
    }
    ]

JsonArrayStreamParser returns the text of each top-level element as soon as
it is complete, without waiting for the whole array.
"""

from typing import List


class JsonArrayStreamParser:
    def __init__(self):
        self._buffer: List[str] = []
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self._started = False
        self.done = False

    def feed(self, chunk: str) -> List[str]:
        """Consume a text chunk and return the elements completed by it."""
        elements = []
        for char in chunk:
            if self.done:
                if not char.isspace():
                    raise ValueError("unexpected data after the end of the JSON array")
                continue

            if not self._started:
                if char == "[":
                    self._started = True
                elif not char.isspace():
                    raise ValueError(f"expected '[' at the start of the stream, got {char!r}")
                continue

            if self._depth == 0:
                # Between elements: separators, whitespace, or the closing bracket
                if char == "]":
                    self.done = True
                elif char == "," or char.isspace():
                    pass
                else:
                    self._start_element(char, elements)
                continue

            self._buffer.append(char)
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif char == "\\":
                    self._escaped = True
                elif char == '"':
                    self._in_string = False
            elif char == '"':
                self._in_string = True
            elif char in "{[":
                self._depth += 1
            elif char in "}]":
                self._depth -= 1
                if self._depth == 0:
                    elements.append("".join(self._buffer))
                    self._buffer = []
        return elements

    def _start_element(self, char: str, elements: List[str]):
        if char not in "{[":
            raise ValueError(f"only objects and arrays are supported as elements, got {char!r}")
        self._buffer = [char]
        self._depth = 1
