"""
Order service for draft order arithmetic and line item operations.

A draft is never empty: every operation that leaves no items returns None
instead, so "no order" and "order with zero items" are the same state.
"""
import logging
from typing import Dict, List, Optional, Tuple, Any

from tableside.config.settings import TAX_RATE
from tableside.models.order_models import DraftLineItem, MenuItem, OrderDraft
from tableside.services.utility_service import UtilityService

logger = logging.getLogger(__name__)


class OrderError(Exception):
    """Base class for order resolution failures"""


class EmptyOrderError(OrderError):
    def __init__(self, message: str = "Order is empty"):
        super().__init__(message)


class OrderItemNotFoundError(OrderError):
    def __init__(self, message: str = "Item not found in order"):
        super().__init__(message)


class OrderService:
    def __init__(self, tax_rate: float = TAX_RATE):
        self.tax_rate = UtilityService.to_decimal(tax_rate)

    def recalculate(self, draft: OrderDraft) -> OrderDraft:
        """Recompute subtotal, tax and total from the line items"""
        subtotal = sum(
            (UtilityService.to_decimal(item.price) * item.quantity for item in draft.items),
            UtilityService.to_decimal(0),
        )
        tax = UtilityService.quantize_money(subtotal * self.tax_rate)
        draft.subtotal = UtilityService.round_money(subtotal)
        draft.tax = float(tax)
        draft.total = UtilityService.round_money(subtotal + tax)
        return draft

    def _finish(self, draft: OrderDraft) -> Optional[OrderDraft]:
        if not draft.items:
            return None
        return self.recalculate(draft)

    def add_item(self, draft: Optional[OrderDraft], menu_item: MenuItem, quantity: int = 1,
                 modifiers: Optional[List[str]] = None,
                 special_instructions: Optional[str] = None) -> Tuple[OrderDraft, DraftLineItem]:
        """Add a menu item, incrementing the existing line for the same menu item"""
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        draft = draft or OrderDraft()
        line = next((item for item in draft.items if item.menuItemId == menu_item.id), None)

        if line:
            line.quantity += quantity
        else:
            line = DraftLineItem(
                id=UtilityService.generate_line_id(),
                menuItemId=menu_item.id,
                name=dict(menu_item.name),
                price=menu_item.price,
                quantity=quantity,
            )
            draft.items.append(line)

        if modifiers:
            line.modifiers = list(modifiers)
        if special_instructions:
            line.specialInstructions = special_instructions

        logger.debug(f"Line {line.menuItemId} now has quantity {line.quantity}")
        return self.recalculate(draft), line

    def find_line(self, draft: Optional[OrderDraft], order_item_id: Optional[str] = None,
                  menu_item_id: Optional[str] = None) -> DraftLineItem:
        """Locate a line by its own ID or by its menu item ID"""
        if not draft or not draft.items:
            raise EmptyOrderError()

        for item in draft.items:
            if order_item_id and order_item_id in (item.id, item.menuItemId):
                return item
            if menu_item_id and item.menuItemId == menu_item_id:
                return item

        raise OrderItemNotFoundError()

    def remove_line(self, draft: Optional[OrderDraft], order_item_id: Optional[str] = None,
                    menu_item_id: Optional[str] = None) -> Tuple[Optional[OrderDraft], DraftLineItem]:
        line = self.find_line(draft, order_item_id, menu_item_id)
        draft.items.remove(line)
        return self._finish(draft), line

    def modify_line(self, draft: Optional[OrderDraft], order_item_id: Optional[str] = None,
                    menu_item_id: Optional[str] = None, quantity: Optional[int] = None,
                    modifiers: Optional[List[str]] = None,
                    special_instructions: Optional[str] = None) -> Tuple[Optional[OrderDraft], DraftLineItem]:
        """Replace a line's quantity; zero or less removes the line"""
        line = self.find_line(draft, order_item_id, menu_item_id)

        if quantity is not None and quantity <= 0:
            draft.items.remove(line)
            return self._finish(draft), line

        if quantity is not None:
            line.quantity = quantity
        if modifiers is not None:
            line.modifiers = list(modifiers)
        if special_instructions is not None:
            line.specialInstructions = special_instructions

        return self._finish(draft), line

    def summarize(self, draft: Optional[OrderDraft]) -> Dict[str, Any]:
        """Rounded view of a draft, zeroed when there is no order"""
        if not draft or not draft.items:
            return {
                "items": [],
                "subtotal": 0,
                "tax": 0,
                "total": 0,
                "itemCount": 0,
            }

        return {
            "items": [
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "price": item.price,
                    "itemTotal": UtilityService.round_money(
                        UtilityService.to_decimal(item.price) * item.quantity
                    ),
                }
                for item in draft.items
            ],
            "subtotal": UtilityService.round_money(draft.subtotal),
            "tax": UtilityService.round_money(draft.tax),
            "total": UtilityService.round_money(draft.total),
            "itemCount": len(draft.items),
        }

    def is_empty(self, draft: Optional[OrderDraft]) -> bool:
        return not draft or not draft.items
