"""
Tool dispatcher mapping function calls from the AI model to handlers.

A dispatched call never raises: unknown names, invalid arguments and
handler failures all come back as ``{"success": False, "message": ...}`` so
the model can explain the problem and the rest of the turn continues.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from tableside.models.tool_args import (
    AddToOrderArgs,
    CheckAvailabilityArgs,
    EmptyArgs,
    GetMenuArgs,
    GetRecommendationsArgs,
    ModifyOrderItemArgs,
    RemoveFromOrderArgs,
    RequestHumanAssistanceArgs,
)
from tableside.tools.assistance_tools import AssistanceTools
from tableside.tools.base import ToolContext, ToolResult
from tableside.tools.declarations import DECLARED_TOOL_NAMES
from tableside.tools.menu_tools import MenuTools
from tableside.tools.order_tools import OrderTools

logger = logging.getLogger(__name__)

Handler = Callable[[ToolContext, Any], Awaitable[ToolResult]]

UNKNOWN_FUNCTION = {"success": False, "message": "Unknown function"}


@dataclass
class ProcessedCall:
    name: str
    args: Dict[str, Any]
    result: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": self.args, "result": self.result}


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ())) or "arguments"
        problems.append(f"{location}: {detail.get('msg')}")
    return "; ".join(problems)


class ToolDispatcher:
    def __init__(self, order_tools: OrderTools, menu_tools: MenuTools, assistance_tools: AssistanceTools):
        self._handlers: Dict[str, Tuple[Type[BaseModel], Handler]] = {
            "addToOrder": (AddToOrderArgs, order_tools.add_to_order),
            "removeFromOrder": (RemoveFromOrderArgs, order_tools.remove_from_order),
            "modifyOrderItem": (ModifyOrderItemArgs, order_tools.modify_order_item),
            "getRecommendations": (GetRecommendationsArgs, menu_tools.get_recommendations),
            "checkAvailability": (CheckAvailabilityArgs, menu_tools.check_availability),
            "requestHumanAssistance": (RequestHumanAssistanceArgs, assistance_tools.request_human_assistance),
            "getOrderSummary": (EmptyArgs, order_tools.get_order_summary),
            "proceedToCheckout": (EmptyArgs, order_tools.proceed_to_checkout),
        }
        # Tools only exposed to the voice agent
        self._voice_handlers: Dict[str, Tuple[Type[BaseModel], Handler]] = {
            "getMenu": (GetMenuArgs, menu_tools.get_menu),
        }
        missing = set(DECLARED_TOOL_NAMES) - set(self._handlers)
        if missing:
            raise ValueError(f"No handler for declared tools: {sorted(missing)}")

    def _lookup(self, name: str, include_voice: bool) -> Optional[Tuple[Type[BaseModel], Handler]]:
        entry = self._handlers.get(name)
        if entry is None and include_voice:
            entry = self._voice_handlers.get(name)
        return entry

    async def dispatch(self, name: str, args: Optional[Dict[str, Any]], context: ToolContext,
                       include_voice: bool = False) -> Dict[str, Any]:
        """Run one tool call and return its JSON result"""
        entry = self._lookup(name, include_voice)
        if entry is None:
            logger.warning(f"Unknown tool '{name}' requested for session {context.session_id}")
            return dict(UNKNOWN_FUNCTION)

        args_model, handler = entry
        try:
            parsed = args_model.model_validate(args or {})
        except ValidationError as e:
            logger.info(f"Invalid arguments for {name}: {e}")
            return ToolResult.fail(f"Invalid arguments for {name}: {_describe_validation_error(e)}").to_dict()

        try:
            result = await handler(context, parsed)
        except Exception as e:
            logger.exception(f"Tool {name} failed for session {context.session_id}")
            return ToolResult.fail(str(e) or f"{name} failed").to_dict()

        logger.info(f"Tool {name} for session {context.session_id}: success={result.success}")
        return result.to_dict()

    async def dispatch_all(self, calls: List[Tuple[str, Dict[str, Any]]], context: ToolContext) -> List[ProcessedCall]:
        """Run every call from one model turn, in order"""
        processed = []
        for name, args in calls:
            result = await self.dispatch(name, args, context)
            processed.append(ProcessedCall(name=name, args=args or {}, result=result))
        return processed
