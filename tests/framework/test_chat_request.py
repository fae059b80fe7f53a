from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.message import ChatMessage, SystemMessage, UserMessage


def test_combine_systems_separates_entries_with_blank_line():
    chat_req = ChatRequest(messages=[
        ChatMessage.system("a"),
        ChatMessage.user("hi"),
        ChatMessage.system("b"),
        ChatMessage.system("c"),
    ])
    assert chat_req.combine_systems() == "a\n\nb\n\nc"


def test_combine_systems_adds_single_newline_after_trailing_newline():
    chat_req = ChatRequest.from_system("a\n").with_system("b")
    assert chat_req.combine_systems() == "a\n\nb"


def test_combine_systems_without_system_messages():
    chat_req = ChatRequest(messages=[ChatMessage.user("hi"), ChatMessage.assistant("hello")])
    assert chat_req.combine_systems() is None
    assert ChatRequest().combine_systems() is None


def test_combine_systems_keeps_empty_first_entry():
    chat_req = ChatRequest.from_system("").with_system("b")
    assert chat_req.combine_systems() == "b"


def test_iter_systems_preserves_order():
    chat_req = ChatRequest.from_system("first").append_message(ChatMessage.user("q")).with_system("second")
    assert list(chat_req.iter_systems()) == ["first", "second"]


def test_append_and_clone():
    chat_req = ChatRequest().append_messages([ChatMessage.user("one"), ChatMessage.assistant("two")])
    chat_req.append_tool({"type": "function", "function": {"name": "f", "description": "d"}})

    branch = chat_req.clone().append_message(ChatMessage.user("three"))

    assert len(chat_req.messages) == 2
    assert len(branch.messages) == 3
    assert branch.tools == chat_req.tools
    assert branch.tools is not chat_req.tools


def test_messages_validate_from_dicts():
    chat_req = ChatRequest.model_validate({
        "messages": [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": {"text": "hi"}},
        ]
    })
    assert isinstance(chat_req.messages[0], SystemMessage)
    assert isinstance(chat_req.messages[1], UserMessage)
    assert chat_req.messages[1].content.text == "hi"
