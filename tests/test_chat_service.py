import pytest

from tableside.models.order_models import ChatMessage, ToolCallTrace
from tableside.services.chat_service import ChatService, build_contents, build_system_prompt
from tableside.services.gemini_service import GeminiError, parse_reply

from tests.conftest import RESTAURANT_ID, TABLE_ID


@pytest.fixture
def chat_service(session_service, menu_service, dispatcher, gemini):
    return ChatService(session_service, menu_service, dispatcher, gemini)


async def test_plain_reply_is_recorded(chat_service, gemini, session_service):
    gemini.queue("Welcome! What can I get you?")

    turn = await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "hello")

    assert turn.message == "Welcome! What can I get you?"
    assert turn.tool_calls == []
    assert len(gemini.requests) == 1

    session = await session_service.get_session("s1")
    assert [m.role for m in session.messages] == ["user", "assistant"]
    assert session.messages[0].content == "hello"


async def test_tool_calls_get_one_follow_up(chat_service, gemini, session_service):
    gemini.queue("", [("addToOrder", {"itemId": "salmon", "quantity": 1}), ("getOrderSummary", {})])
    gemini.queue("I've added the Grilled Salmon. Your total is $26.99.")

    turn = await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "the salmon please")

    assert turn.message == "I've added the Grilled Salmon. Your total is $26.99."
    assert [call["name"] for call in turn.tool_calls] == ["addToOrder", "getOrderSummary"]
    assert turn.tool_calls[0]["result"]["orderTotal"] == 26.99
    assert turn.tool_calls[1]["result"]["total"] == 26.99

    assert len(gemini.requests) == 2
    follow_up = gemini.requests[1]["contents"]
    responses = follow_up[-1]["parts"]
    assert [part["functionResponse"]["name"] for part in responses] == ["addToOrder", "getOrderSummary"]
    # The prompt sent with the follow-up already shows the updated order
    assert "Subtotal: $24.99" in gemini.requests[1]["system_prompt"]

    session = await session_service.get_session("s1")
    assert session.currentOrder.total == 26.99
    assert [call.name for call in session.messages[1].toolCalls] == ["addToOrder", "getOrderSummary"]


async def test_first_text_kept_when_follow_up_is_empty(chat_service, gemini):
    gemini.queue("Let me check that.", [("checkAvailability", {"itemId": "ribeye"})])
    gemini.queue("")

    turn = await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "is the ribeye available?")

    assert turn.message == "Let me check that."


async def test_unknown_tool_does_not_stop_the_turn(chat_service, gemini):
    gemini.queue("", [("submitOrder", {})])
    gemini.queue("Sorry, I can't do that.")

    turn = await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "submit")

    assert turn.tool_calls[0]["result"] == {"success": False, "message": "Unknown function"}
    assert turn.message == "Sorry, I can't do that."


async def test_context_is_rebuilt_from_transcript(chat_service, gemini):
    gemini.queue("", [("addToOrder", {"itemId": "salmon"})])
    gemini.queue("Added!")
    await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "salmon")

    gemini.queue("Anything else?")
    await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "that's all")

    contents = gemini.requests[2]["contents"]
    assert [c["role"] for c in contents] == ["user", "model", "user", "model", "user"]
    assert contents[1]["parts"][0]["functionCall"]["name"] == "addToOrder"
    assert contents[2]["parts"][0]["functionResponse"]["response"]["success"] is True
    assert contents[3]["parts"][0]["text"] == "Added!"
    assert contents[4]["parts"][0]["text"] == "that's all"


async def test_gemini_failure_propagates(chat_service, session_service):
    with pytest.raises(GeminiError):
        await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "hello")

    session = await session_service.get_session("s1")
    assert session.messages == []


async def test_history(chat_service, gemini):
    assert await chat_service.get_history("missing") == {"messages": [], "currentOrder": None}

    gemini.queue("", [("addToOrder", {"itemId": "lemonade", "quantity": 2})])
    gemini.queue("Two lemonades coming up.")
    await chat_service.handle_message("s1", RESTAURANT_ID, TABLE_ID, "two lemonades")

    history = await chat_service.get_history("s1")
    assert len(history["messages"]) == 2
    assert history["messages"][1]["toolCalls"][0]["name"] == "addToOrder"
    assert history["currentOrder"]["subtotal"] == 9.98


async def test_system_prompt_lists_available_items_and_language(session, menu_service):
    menu = await menu_service.get_menu_for_restaurant(RESTAURANT_ID)
    session.language = "es"

    prompt = build_system_prompt(session, menu, "Casa Demo")

    assert "Casa Demo" in prompt
    assert "responde en espanol" in prompt
    assert 'itemId: "salmon"' in prompt
    assert "Empty - no items yet" in prompt


def test_build_contents_skips_system_messages():
    messages = [
        ChatMessage(id="system-1", role="system", content="internal"),
        ChatMessage(id="user-1", role="user", content="hi"),
        ChatMessage(
            id="assistant-1",
            role="assistant",
            content="",
            toolCalls=[ToolCallTrace("getOrderSummary", {}, {"success": True})],
        ),
    ]

    contents = build_contents(messages)

    assert [c["role"] for c in contents] == ["user", "model", "user"]


def test_parse_reply_collects_text_and_calls():
    reply = parse_reply({
        "candidates": [{
            "content": {"parts": [
                {"text": "Sure. "},
                {"functionCall": {"name": "addToOrder", "args": {"itemId": "salmon"}}},
                {"text": "Done."},
            ]}
        }]
    })

    assert reply.text == "Sure. Done."
    assert reply.function_calls == [("addToOrder", {"itemId": "salmon"})]

    with pytest.raises(GeminiError):
        parse_reply({"promptFeedback": {"blockReason": "SAFETY"}})
