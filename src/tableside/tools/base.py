"""
Shared types for tool handlers
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tableside.models.order_models import ChatSession


@dataclass
class ToolContext:
    """Who a tool call is acting for"""
    session_id: str
    restaurant_id: str
    table_id: Optional[str]
    session: ChatSession
    language: str = "en"


@dataclass
class ToolResult:
    success: bool
    message: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: Optional[str] = None, **data) -> "ToolResult":
        return cls(True, message, data)

    @classmethod
    def fail(cls, message: str, **data) -> "ToolResult":
        return cls(False, message, data)

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON object echoed back to the AI model"""
        result: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            result["message"] = self.message
        result.update(self.data)
        return result
