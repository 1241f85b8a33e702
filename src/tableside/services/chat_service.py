"""
Chat service: one user message in, one assistant reply out.

The Gemini context is rebuilt from the stored transcript on every turn
(text turns plus the recorded tool calls and their results), so any server
instance can serve any turn and a restart loses nothing.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tableside.config.settings import RESTAURANT_NAME
from tableside.models.order_models import ChatMessage, ChatSession, MenuItem, OrderDraft, ToolCallTrace, localized
from tableside.services.gemini_service import (
    GeminiClient,
    function_responses,
    model_function_calls,
    model_text,
    user_text,
)
from tableside.services.menu_service import MenuService
from tableside.services.session_service import SessionService
from tableside.services.utility_service import UtilityService
from tableside.tools.base import ToolContext
from tableside.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

LANGUAGE_INSTRUCTIONS = {
    "es": "IMPORTANTE: Siempre responde en espanol de manera amigable y profesional. Usa un tono calido y servicial.",
    "en": "IMPORTANT: Always respond in English in a friendly and professional manner. Use a warm and helpful tone.",
}


@dataclass
class ChatTurn:
    message: str
    tool_calls: List[Dict[str, Any]]


def describe_menu_item(item: MenuItem, language: str) -> str:
    other = "en" if language == "es" else "es"
    lines = [
        f"ITEM: {localized(item.name, language)} / {localized(item.name, other)}",
        f'- itemId: "{item.id}" (USE THIS EXACT ID when calling addToOrder)',
        f"- Price: ${item.price:.2f}",
        f"- Description: {localized(item.description, language)}",
        f"- Allergens: {', '.join(item.allergens) or 'None'}",
        f"- Dietary: {', '.join(item.dietary_flags) or 'None'}",
        f"- Prep time: {item.preparation_time} min",
    ]
    if item.image_url:
        lines.append(f"- Image: {item.image_url}")
    return "\n".join(lines)


def describe_order(order: Optional[OrderDraft], language: str) -> str:
    if not order or not order.items:
        return "Empty - no items yet"
    items = ", ".join(
        f"{item.quantity}x {localized(item.name, language)} (orderItemId: \"{item.id}\")"
        for item in order.items
    )
    return f"Items: {items}\nSubtotal: ${order.subtotal:.2f}"


def build_system_prompt(session: ChatSession, menu: List[MenuItem],
                        restaurant_name: str = RESTAURANT_NAME) -> str:
    language = session.language if session.language in LANGUAGE_INSTRUCTIONS else "en"
    available = [item for item in menu if item.is_available]
    menu_text = "\n\n".join(describe_menu_item(item, language) for item in available)

    return f"""You are an AI waitress assistant for {restaurant_name}. {LANGUAGE_INSTRUCTIONS[language]}

## Your Responsibilities:
1. Help customers browse the menu and understand dishes
2. Answer questions about ingredients, allergens, and dietary restrictions
3. Make recommendations based on preferences and availability
4. Manage their order (add, remove, modify items)
5. Send customers to checkout when they are ready (always confirm first)
6. Suggest drinks, sides and desserts naturally without being pushy
7. Request human assistance for complaints or requests you cannot handle

## Menu Items Available ({len(available)} items):
{menu_text}

## Current Order:
{describe_order(session.currentOrder, language)}

## Function Calling Rules:
- You MUST call addToOrder to add items. Never say an item was added without calling it.
- When the customer confirms an item, call addToOrder with the item's exact itemId.
- Use removeFromOrder and modifyOrderItem for changes, with the orderItemId from the current order.
- When the customer wants to place, submit or pay for the order, call proceedToCheckout.

## Guidelines:
- Be conversational and friendly, like a helpful human server
- Mention allergens proactively for items with common allergens
- If an item is unavailable, suggest alternatives
- Keep responses concise but warm

Table: {session.tableId}
Session: {session.id}
"""


def build_contents(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    """Rebuild Gemini turns from the stored transcript"""
    contents = []
    for message in messages:
        if message.role == "user":
            contents.append(user_text(message.content))
        elif message.role == "assistant":
            if message.toolCalls:
                contents.append(model_function_calls([(call.name, call.args) for call in message.toolCalls]))
                contents.append(function_responses([(call.name, call.result) for call in message.toolCalls]))
            if message.content:
                contents.append(model_text(message.content))
    return contents


class ChatService:
    def __init__(self, session_service: SessionService, menu_service: MenuService,
                 dispatcher: ToolDispatcher, gemini: GeminiClient):
        self.session_service = session_service
        self.menu_service = menu_service
        self.dispatcher = dispatcher
        self.gemini = gemini

    async def handle_message(self, session_id: str, restaurant_id: str, table_id: str, message: str,
                             language: str = "en", customer_id: Optional[str] = None) -> ChatTurn:
        """Run one chat turn, executing any tool calls the model asks for"""
        session = await self.session_service.get_or_create_session(
            session_id, restaurant_id, table_id, language or "en", customer_id
        )
        menu = await self.menu_service.get_menu_for_restaurant(restaurant_id)
        logger.info(f"Chat turn for session {session_id}: {len(menu)} menu items, "
                    f"{len(session.messages)} prior messages")

        contents = build_contents(session.messages) + [user_text(message)]
        reply = await self.gemini.generate(build_system_prompt(session, menu), contents)
        text = reply.text

        processed = []
        if reply.function_calls:
            context = ToolContext(
                session_id=session_id,
                restaurant_id=restaurant_id,
                table_id=table_id,
                session=session,
                language=session.language,
            )
            processed = await self.dispatcher.dispatch_all(reply.function_calls, context)

            follow_up_contents = contents + [
                model_function_calls([(call.name, call.args) for call in processed]),
                function_responses([(call.name, call.result) for call in processed]),
            ]
            # The prompt is rebuilt so it reflects the order after the tool calls
            follow_up = await self.gemini.generate(build_system_prompt(session, menu), follow_up_contents)
            if follow_up.function_calls:
                logger.warning(f"Ignoring {len(follow_up.function_calls)} function calls in follow-up reply")
            if follow_up.text:
                text = follow_up.text

        await self.session_service.append_messages(session, [
            ChatMessage(id=UtilityService.generate_message_id("user"), role="user", content=message),
            ChatMessage(
                id=UtilityService.generate_message_id("assistant"),
                role="assistant",
                content=text,
                toolCalls=[ToolCallTrace(call.name, call.args, call.result) for call in processed],
            ),
        ])

        return ChatTurn(message=text, tool_calls=[call.to_dict() for call in processed])

    async def get_history(self, session_id: str) -> Dict[str, Any]:
        session = await self.session_service.get_session(session_id)
        if not session:
            return {"messages": [], "currentOrder": None}
        return {
            "messages": [m.to_dict() for m in session.messages],
            "currentOrder": session.currentOrder.to_dict() if session.currentOrder else None,
        }
