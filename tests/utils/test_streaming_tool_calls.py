import pytest

from chatsuite.errors import ToolCallParseError
from chatsuite.utils.streaming_tool_calls import StreamingToolCallAccumulator


def _delta(index=0, call_id=None, name=None, arguments=None):
    delta = {"index": index, "function": {}}
    if call_id:
        delta["id"] = call_id
        delta["type"] = "function"
    if name:
        delta["function"]["name"] = name
    if arguments is not None:
        delta["function"]["arguments"] = arguments
    return delta


def test_partial_arguments_are_held_back():
    accumulator = StreamingToolCallAccumulator()
    accumulator.add_chunk([_delta(call_id="c1", name="get_weather", arguments='{"location": ')])

    assert accumulator.get_complete_tool_calls() == []

    accumulator.add_chunk([_delta(arguments='"Paris"}')])
    tool_calls = accumulator.get_complete_tool_calls()
    assert len(tool_calls) == 1
    assert tool_calls[0].function.fn_arguments == {"location": "Paris"}


def test_calls_are_returned_in_index_order():
    accumulator = StreamingToolCallAccumulator()
    accumulator.add_chunk([_delta(index=1, call_id="c2", name="b", arguments="{}")])
    accumulator.add_chunk([_delta(index=0, call_id="c1", name="a", arguments="{}")])

    assert [tc.tool_call_id for tc in accumulator.get_complete_tool_calls(final=True)] == ["c1", "c2"]


def test_final_malformed_arguments_raise():
    accumulator = StreamingToolCallAccumulator()
    accumulator.add_chunk([_delta(call_id="c1", name="f", arguments='{"x": ')])

    assert accumulator.get_complete_tool_calls() == []
    with pytest.raises(ToolCallParseError):
        accumulator.get_complete_tool_calls(final=True)


def test_clear():
    accumulator = StreamingToolCallAccumulator()
    accumulator.add_chunk([_delta(call_id="c1", name="f", arguments="{}")])
    accumulator.clear()

    assert accumulator.get_complete_tool_calls(final=True) == []
