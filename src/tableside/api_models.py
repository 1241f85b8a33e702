"""
Pydantic models for the Tableside HTTP API
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Request Models
class ChatRequest(ApiModel):
    session_id: str = Field(..., alias="sessionId", min_length=1, description="Chat session ID")
    restaurant_id: str = Field(..., alias="restaurantId", min_length=1, description="Restaurant ID")
    table_id: str = Field(..., alias="tableId", min_length=1, description="Table ID")
    message: str = Field(..., min_length=1, description="User message")
    language: str = Field("en", description="Reply language (en or es)")
    customer_id: Optional[str] = Field(None, alias="customerId", description="Signed-in customer ID")


class VoiceWebhookRequest(ApiModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tool_name: str = Field(..., min_length=1, description="Tool the voice agent is calling")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Tool parameters")
    conversation_id: Optional[str] = Field(None, description="ElevenLabs conversation ID")
    agent_id: Optional[str] = Field(None, description="ElevenLabs agent ID")


class SignedUrlRequest(ApiModel):
    restaurant_id: str = Field(..., alias="restaurantId", min_length=1)
    table_id: str = Field(..., alias="tableId", min_length=1)
    session_id: str = Field(..., alias="sessionId", min_length=1)
    language: str = Field("en", description="Voice agent language")


class CreateOrderRequest(ApiModel):
    session_id: str = Field(..., alias="sessionId", min_length=1, description="Session whose draft is checked out")
    restaurant_id: str = Field(..., alias="restaurantId", min_length=1)
    table_id: str = Field(..., alias="tableId", min_length=1)
    customer_id: Optional[str] = Field(None, alias="customerId")
    tip: float = Field(0, ge=0, allow_inf_nan=False, description="Tip amount")
    payment_method: Optional[str] = Field(None, alias="paymentMethod", description="Payment method")
    special_instructions: Optional[str] = Field(None, alias="specialInstructions", description="Special instructions")


class UpdateOrderStatusRequest(ApiModel):
    order_id: str = Field(..., alias="orderId", min_length=1, description="Order to update")
    status: str = Field(..., min_length=1, description="New order status")
    payment_status: Optional[str] = Field(None, alias="paymentStatus", description="New payment status")


# Response Models
class ToolCallResponse(BaseModel):
    name: str
    args: Dict[str, Any]
    result: Dict[str, Any]


class ChatResponse(BaseModel):
    message: str = Field(..., description="Assistant reply")
    toolCalls: List[ToolCallResponse] = Field(default_factory=list, description="Tool calls run this turn")


class ChatHistoryResponse(BaseModel):
    messages: List[Dict[str, Any]]
    currentOrder: Optional[Dict[str, Any]]


class SignedUrlResponse(BaseModel):
    signedUrl: str
    expiresAt: int


class CreateOrderResponse(BaseModel):
    success: bool
    order: Dict[str, Any]


class OrdersResponse(BaseModel):
    orders: List[Dict[str, Any]]


class UpdateOrderStatusResponse(BaseModel):
    success: bool
    message: str
    order: Dict[str, Any]


class MenuResponse(BaseModel):
    items: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
