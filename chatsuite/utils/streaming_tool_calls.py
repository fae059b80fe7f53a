"""
Utilities for handling streaming tool calls.

In streaming mode, tool calls are sent in chunks and need to be accumulated
before they can be processed. This module provides utilities to help with that.
"""

from typing import List, Dict, Any
import json
from chatsuite.framework.message import AssistantToolCall


class StreamingToolCallAccumulator:
    """
    Accumulates ``delta.tool_calls`` fragments from an OpenAI-style stream and
    converts them to AssistantToolCall objects once the stream says they are done.
    """

    def __init__(self):
        self.tool_calls: Dict[int, Dict[str, Any]] = {}

    def add_chunk(self, tool_call_deltas: List[Dict[str, Any]]) -> None:
        """
        Add a chunk of tool call deltas to the accumulator.

        Args:
            tool_call_deltas: The decoded ``delta.tool_calls`` list of one stream chunk
        """
        if not tool_call_deltas:
            return

        for delta in tool_call_deltas:
            index = delta.get("index", 0)

            if index not in self.tool_calls:
                self.tool_calls[index] = {
                    "id": "",
                    "type": "function",
                    "function": {
                        "name": "",
                        "arguments": ""
                    }
                }

            tool_call = self.tool_calls[index]

            if delta.get("id"):
                tool_call["id"] += delta["id"]

            function = delta.get("function") or {}
            if function.get("name"):
                tool_call["function"]["name"] += function["name"]
            if function.get("arguments"):
                tool_call["function"]["arguments"] += function["arguments"]

            if delta.get("type"):
                tool_call["type"] = delta["type"]

    def get_complete_tool_calls(self, final: bool = False) -> List[AssistantToolCall]:
        """
        Get the tool calls whose arguments form a complete JSON document.

        Args:
            final: The stream reported its finish reason, so the arguments will
                not grow any more. Unparsable arguments then raise
                ToolCallParseError instead of being held back.

        Returns:
            List of AssistantToolCall objects, in index order
        """
        complete_calls = []

        for index in sorted(self.tool_calls):
            tool_call_data = self.tool_calls[index]
            if not final:
                if not (tool_call_data["id"] and tool_call_data["function"]["name"]):
                    continue

                arguments = tool_call_data["function"]["arguments"]
                if arguments:
                    try:
                        json.loads(arguments)
                    except json.JSONDecodeError:
                        # Arguments are not complete yet
                        continue

            complete_calls.append(AssistantToolCall.from_vendor(tool_call_data))

        return complete_calls

    def clear(self) -> None:
        """Clear all accumulated tool calls."""
        self.tool_calls.clear()
