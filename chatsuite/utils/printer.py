import sys
from typing import Optional, TextIO

from chatsuite.framework.chat_stream import (
    ChatStreamResponse,
    StreamChunk,
    StreamEnd,
    StreamStart,
    StreamToolCall,
)


async def print_chat_stream(chat_res: ChatStreamResponse, print_events: bool = False, out: Optional[TextIO] = None) -> str:
    """
    Print the text chunks of a chat stream as they arrive and return the full content.

    With ``print_events`` the start, tool-call and end events are printed too.
    """
    out = out or sys.stdout
    content = []
    async with chat_res.stream as stream:
        async for event in stream:
            if isinstance(event, StreamStart):
                if print_events:
                    print("\n-- ChatStreamEvent::Start", file=out)
            elif isinstance(event, StreamChunk):
                if print_events:
                    print(f"\n-- ChatStreamEvent::Chunk: {event.content}", file=out)
                else:
                    out.write(event.content)
                    out.flush()
                content.append(event.content)
            elif isinstance(event, StreamToolCall):
                if print_events:
                    print(f"\n-- ChatStreamEvent::ToolCall: {event.tool_call.function.fn_name}", file=out)
            elif isinstance(event, StreamEnd):
                if print_events:
                    print(f"\n-- ChatStreamEvent::End: usage={event.captured_usage}", file=out)
    out.write("\n")
    return "".join(content)
