"""
Checkout service turning a session's draft into a finalized order,
and the order lifecycle after it
"""
import logging
import math
from typing import Any, Dict, List, Optional

from tableside.models.order_models import (
    FinalizedOrder,
    FinalizedOrderItem,
    OrderDraft,
    OrderStatus,
    PaymentStatus,
    utc_now,
)
from tableside.services.order_service import EmptyOrderError
from tableside.services.session_service import OrderConflictError, SessionService
from tableside.services.store import DocumentStore
from tableside.services.utility_service import UtilityService

logger = logging.getLogger(__name__)

ORDER_COLLECTION = "orders"
DEFAULT_ORDER_LIMIT = 20

COMPLETED_STATUSES = {OrderStatus.PAID, OrderStatus.DELIVERED}


class CheckoutError(Exception):
    """Raised when checkout input is rejected"""


def parse_order_status(status: str) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise CheckoutError(f"Invalid status. Must be one of: {allowed}") from None


def parse_payment_status(status: str) -> PaymentStatus:
    try:
        return PaymentStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise CheckoutError(f"Invalid payment status. Must be one of: {allowed}") from None


class CheckoutService:
    def __init__(self, store: DocumentStore, session_service: SessionService):
        self.store = store
        self.session_service = session_service

    async def submit(self, session_id: str, restaurant_id: str, table_id: str, tip: float = 0,
                     payment_method: Optional[str] = None, customer_id: Optional[str] = None,
                     special_instructions: Optional[str] = None) -> FinalizedOrder:
        """Create a finalized order from the session draft and clear the draft.

        The draft is detached and cleared in a single versioned write, so an
        item added concurrently either lands in this order or stays in the
        session for the next one.
        """
        if tip is None:
            tip = 0
        if not math.isfinite(tip):
            raise CheckoutError("Tip must be a finite amount")
        if tip < 0:
            raise CheckoutError("Tip cannot be negative")

        session = await self.session_service.get_session(session_id)
        if not session or not session.currentOrder or not session.currentOrder.items:
            raise EmptyOrderError("No items in order")
        if session.restaurantId != restaurant_id or session.tableId != table_id:
            raise CheckoutError("Session belongs to a different restaurant or table")

        draft = await self.session_service.take_order(session)
        order = self._finalize(draft, session_id, restaurant_id, table_id, tip,
                               payment_method, customer_id, special_instructions)

        try:
            await self.store.put(ORDER_COLLECTION, order.id, order.to_document())
        except Exception:
            logger.error(f"Saving order {order.id} failed, restoring draft on session {session_id}")
            await self.session_service.restore_order(session, draft)
            raise

        logger.info(f"Order {order.id} created from session {session_id}, total {order.total:.2f}")
        return order

    @staticmethod
    def _finalize(draft: OrderDraft, session_id: str, restaurant_id: str, table_id: str, tip: float,
                  payment_method: Optional[str], customer_id: Optional[str],
                  special_instructions: Optional[str]) -> FinalizedOrder:
        subtotal = UtilityService.quantize_money(draft.subtotal)
        tax = UtilityService.quantize_money(draft.tax)
        tip_amount = UtilityService.quantize_money(tip)

        return FinalizedOrder(
            id=UtilityService.generate_order_id(),
            restaurantId=restaurant_id,
            tableId=table_id,
            sessionId=session_id,
            customerId=customer_id,
            items=[
                FinalizedOrderItem(
                    id=UtilityService.generate_line_id(),
                    menuItemId=item.menuItemId,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    modifiers=list(item.modifiers),
                    specialInstructions=item.specialInstructions or "",
                )
                for item in draft.items
            ],
            subtotal=float(subtotal),
            tax=float(tax),
            tip=float(tip_amount),
            total=float(subtotal + tax + tip_amount),
            paymentMethod=payment_method,
            specialInstructions=special_instructions,
        )

    async def update_status(self, order_id: str, status: str,
                            payment_status: Optional[str] = None) -> Dict[str, Any]:
        """Move an order to a new status and stamp the lifecycle timestamps.

        Raises ``CheckoutError`` for an unknown status and
        ``DocumentNotFoundError`` for an unknown order.
        """
        new_status = parse_order_status(status)
        now = utc_now()
        changes: Dict[str, Any] = {"status": new_status.value, "updatedAt": now}
        if new_status == OrderStatus.CONFIRMED:
            changes["confirmedAt"] = now
        if new_status in COMPLETED_STATUSES:
            changes["completedAt"] = now
        if payment_status is not None:
            changes["paymentStatus"] = parse_payment_status(payment_status).value

        for _ in range(self.session_service.max_retries):
            if await self.store.update(ORDER_COLLECTION, order_id, changes) is not None:
                break
        else:
            raise OrderConflictError(f"Could not update status of order {order_id}")

        logger.info(f"Order {order_id} status updated to {new_status.value}")
        return await self.store.get(ORDER_COLLECTION, order_id)

    async def list_orders(self, session_id: Optional[str] = None, customer_id: Optional[str] = None,
                          restaurant_id: Optional[str] = None, statuses: Optional[List[str]] = None,
                          limit: int = DEFAULT_ORDER_LIMIT) -> List[Dict[str, Any]]:
        """Orders of a customer, a session or a restaurant, newest first.

        The first id given wins, in that order. ``statuses`` keeps only
        orders in one of the listed states.
        """
        if customer_id:
            orders = await self.store.query(ORDER_COLLECTION, customerId=customer_id)
        elif session_id:
            orders = await self.store.query(ORDER_COLLECTION, sessionId=session_id)
        elif restaurant_id:
            orders = await self.store.query(ORDER_COLLECTION, restaurantId=restaurant_id)
        else:
            raise CheckoutError("Must provide customerId, sessionId, or restaurantId")

        if statuses:
            wanted = {parse_order_status(s).value for s in statuses}
            orders = [order for order in orders if order.get("status") in wanted]

        orders.sort(key=lambda order: order.get("createdAt", ""), reverse=True)
        return orders[:max(0, limit)]
