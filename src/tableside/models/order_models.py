"""
Data models for the conversational ordering system
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

# Bilingual display text, e.g. {"en": "Grilled Salmon", "es": "Salmon a la Parrilla"}
LocalizedText = Dict[str, str]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def localized(text: LocalizedText, language: str = "en") -> str:
    """Pick the requested language, falling back to English then anything"""
    if not isinstance(text, dict):
        return str(text or "")
    return text.get(language) or text.get("en") or next(iter(text.values()), "")


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    DELIVERED = "delivered"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MenuItem:
    id: str
    restaurant_id: str
    category_id: str
    name: LocalizedText
    description: LocalizedText
    price: float
    allergens: List[str] = field(default_factory=list)
    dietary_flags: List[str] = field(default_factory=list)
    preparation_time: int = 0
    image_url: Optional[str] = None
    is_available: bool = True
    stock_count: Optional[int] = None
    sort_order: int = 0

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "MenuItem":
        availability = doc.get("availability") or {}
        return cls(
            id=str(doc["id"]),
            restaurant_id=doc.get("restaurantId", ""),
            category_id=doc.get("categoryId", ""),
            name=doc.get("name") or {},
            description=doc.get("description") or {},
            price=float(doc.get("price", 0)),
            allergens=list(doc.get("allergens") or []),
            dietary_flags=list(doc.get("dietaryFlags") or []),
            preparation_time=int(doc.get("preparationTime") or 0),
            image_url=doc.get("imageUrl"),
            is_available=availability.get("isAvailable", True),
            stock_count=availability.get("stockCount"),
            sort_order=int(doc.get("sortOrder") or 0),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "restaurantId": self.restaurant_id,
            "categoryId": self.category_id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "allergens": self.allergens,
            "dietaryFlags": self.dietary_flags,
            "preparationTime": self.preparation_time,
            "imageUrl": self.image_url,
            "availability": {
                "isAvailable": self.is_available,
                "stockCount": self.stock_count,
            },
            "sortOrder": self.sort_order,
        }


@dataclass
class DraftLineItem:
    id: str
    menuItemId: str
    name: LocalizedText
    price: float
    quantity: int
    modifiers: List[str] = field(default_factory=list)
    specialInstructions: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DraftLineItem":
        return cls(
            id=data["id"],
            menuItemId=data["menuItemId"],
            name=data.get("name") or {},
            price=float(data.get("price", 0)),
            quantity=int(data.get("quantity", 1)),
            modifiers=list(data.get("modifiers") or []),
            specialInstructions=data.get("specialInstructions"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "menuItemId": self.menuItemId,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }
        # Optional extras are only written when set
        if self.modifiers:
            data["modifiers"] = list(self.modifiers)
        if self.specialInstructions:
            data["specialInstructions"] = self.specialInstructions
        return data


@dataclass
class OrderDraft:
    items: List[DraftLineItem] = field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["OrderDraft"]:
        if not data or not data.get("items"):
            return None
        return cls(
            items=[DraftLineItem.from_dict(item) for item in data["items"]],
            subtotal=float(data.get("subtotal", 0)),
            tax=float(data.get("tax", 0)),
            total=float(data.get("total", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
        }


@dataclass
class ToolCallTrace:
    name: str
    args: Dict[str, Any]
    result: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": self.args, "result": self.result}


@dataclass
class ChatMessage:
    id: str
    role: str
    content: str
    timestamp: str = field(default_factory=utc_now)
    toolCalls: List[ToolCallTrace] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(
            id=data.get("id", ""),
            role=data.get("role", "user"),
            content=data.get("content", ""),
            timestamp=data.get("timestamp") or utc_now(),
            toolCalls=[
                ToolCallTrace(call.get("name", ""), call.get("args") or {}, call.get("result") or {})
                for call in data.get("toolCalls") or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.toolCalls:
            data["toolCalls"] = [call.to_dict() for call in self.toolCalls]
        return data


@dataclass
class ChatSession:
    id: str
    restaurantId: str
    tableId: str
    language: str = "en"
    customerId: Optional[str] = None
    messages: List[ChatMessage] = field(default_factory=list)
    currentOrder: Optional[OrderDraft] = None
    version: int = 0
    createdAt: str = field(default_factory=utc_now)
    updatedAt: str = field(default_factory=utc_now)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ChatSession":
        return cls(
            id=doc["id"],
            restaurantId=doc.get("restaurantId", ""),
            tableId=doc.get("tableId", ""),
            language=doc.get("language") or "en",
            customerId=doc.get("customerId"),
            messages=[ChatMessage.from_dict(m) for m in doc.get("messages") or []],
            currentOrder=OrderDraft.from_dict(doc.get("currentOrder")),
            version=int(doc.get("version") or 0),
            createdAt=doc.get("createdAt") or utc_now(),
            updatedAt=doc.get("updatedAt") or utc_now(),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "restaurantId": self.restaurantId,
            "tableId": self.tableId,
            "language": self.language,
            "customerId": self.customerId,
            "messages": [m.to_dict() for m in self.messages],
            "currentOrder": self.currentOrder.to_dict() if self.currentOrder else None,
            "createdAt": self.createdAt,
            "updatedAt": self.updatedAt,
        }


@dataclass
class FinalizedOrderItem:
    id: str
    menuItemId: str
    name: LocalizedText
    price: float
    quantity: int
    modifiers: List[str] = field(default_factory=list)
    specialInstructions: str = ""


@dataclass
class FinalizedOrder:
    id: str
    restaurantId: str
    tableId: str
    sessionId: Optional[str]
    customerId: Optional[str]
    items: List[FinalizedOrderItem]
    subtotal: float
    tax: float
    tip: float
    total: float
    status: OrderStatus = OrderStatus.PENDING
    paymentMethod: Optional[str] = None
    paymentStatus: PaymentStatus = PaymentStatus.PENDING
    specialInstructions: Optional[str] = None
    createdAt: str = field(default_factory=utc_now)
    updatedAt: str = field(default_factory=utc_now)
    confirmedAt: Optional[str] = None
    completedAt: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "restaurantId": self.restaurantId,
            "tableId": self.tableId,
            "sessionId": self.sessionId,
            "customerId": self.customerId,
            "items": [
                {
                    "id": item.id,
                    "menuItemId": item.menuItemId,
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                    "modifiers": item.modifiers,
                    "specialInstructions": item.specialInstructions,
                }
                for item in self.items
            ],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "tip": self.tip,
            "total": self.total,
            "status": self.status.value,
            "paymentMethod": self.paymentMethod,
            "paymentStatus": self.paymentStatus.value,
            "specialInstructions": self.specialInstructions,
            "createdAt": self.createdAt,
            "updatedAt": self.updatedAt,
            "confirmedAt": self.confirmedAt,
            "completedAt": self.completedAt,
        }
