import pytest

from chatsuite.utils.sse import SSEDecoder, iter_sse_events


def test_decoder_dispatches_on_blank_line():
    decoder = SSEDecoder()
    assert decoder.decode("event: message_start") is None
    assert decoder.decode('data: {"a": 1}') is None
    event = decoder.decode("")

    assert event.event == "message_start"
    assert event.data == '{"a": 1}'


def test_decoder_joins_multiline_data_and_skips_comments():
    decoder = SSEDecoder()
    for line in [": keep-alive", "data: first", "data:second", "id: 7"]:
        assert decoder.decode(line) is None
    event = decoder.decode("\r\n")

    assert event.event == "message"
    assert event.data == "first\nsecond"
    assert event.id == "7"


def test_blank_lines_without_data_dispatch_nothing():
    decoder = SSEDecoder()
    assert decoder.decode("") is None
    assert decoder.flush() is None


@pytest.mark.asyncio
async def test_iter_sse_events_flushes_trailing_event():
    async def lines():
        for line in ["data: one", "", "data: two"]:
            yield line

    events = [event async for event in iter_sse_events(lines())]
    assert [event.data for event in events] == ["one", "two"]
