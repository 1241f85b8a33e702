"""
Pydantic models for the arguments the AI model sends with each tool call
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ToolArgs(BaseModel):
    # Vendor JSON: accept camelCase aliases or field names, ignore unknown keys
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AddToOrderArgs(ToolArgs):
    item_id: str = Field(..., alias="itemId", min_length=1, description="Menu item ID or name")
    quantity: int = Field(1, gt=0, description="Quantity to add")
    modifiers: List[str] = Field(default_factory=list, description="Modifier IDs to apply")
    special_instructions: Optional[str] = Field(None, alias="specialInstructions")

    @field_validator("quantity", mode="before")
    @classmethod
    def default_missing_quantity(cls, value):
        return 1 if value is None else value


class OrderLineRef(ToolArgs):
    """Identifies a draft line by its own ID or by its menu item ID"""
    order_item_id: Optional[str] = Field(None, alias="orderItemId")
    item_id: Optional[str] = Field(None, alias="itemId")

    @model_validator(mode="after")
    def require_reference(self):
        if not self.order_item_id and not self.item_id:
            raise ValueError("orderItemId or itemId is required")
        return self


class RemoveFromOrderArgs(OrderLineRef):
    pass


class ModifyOrderItemArgs(OrderLineRef):
    quantity: Optional[int] = Field(None, description="New quantity; 0 or less removes the item")
    modifiers: Optional[List[str]] = None
    special_instructions: Optional[str] = Field(None, alias="specialInstructions")


class GetRecommendationsArgs(ToolArgs):
    type: str = Field("", description="pairing, popular, dietary or upsell")
    context: Optional[str] = None


class CheckAvailabilityArgs(ToolArgs):
    item_id: str = Field(..., alias="itemId", min_length=1)


class RequestHumanAssistanceArgs(ToolArgs):
    reason: str = Field(..., min_length=1)


class EmptyArgs(ToolArgs):
    pass


class GetMenuArgs(ToolArgs):
    category_id: Optional[str] = Field(None, alias="categoryId")
