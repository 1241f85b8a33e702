"""
Order management tools: add, remove, modify, summarize and checkout
"""
import logging

from tableside.config.settings import CHECKOUT_URL
from tableside.models.order_models import localized
from tableside.models.tool_args import AddToOrderArgs, EmptyArgs, ModifyOrderItemArgs, RemoveFromOrderArgs
from tableside.services.menu_service import MenuService
from tableside.services.order_service import OrderError, OrderService
from tableside.services.session_service import SessionService
from tableside.services.utility_service import UtilityService
from tableside.tools.base import ToolContext, ToolResult

logger = logging.getLogger(__name__)


class OrderTools:
    def __init__(self, order_service: OrderService, menu_service: MenuService,
                 session_service: SessionService, checkout_url: str = CHECKOUT_URL):
        self.order_service = order_service
        self.menu_service = menu_service
        self.session_service = session_service
        self.checkout_url = checkout_url

    async def add_to_order(self, context: ToolContext, args: AddToOrderArgs) -> ToolResult:
        """Add a menu item, resolving it by ID or by name"""
        menu = await self.menu_service.get_menu_for_restaurant(context.restaurant_id)
        menu_item = self.menu_service.find_item(menu, args.item_id)

        if not menu_item:
            names = ", ".join(self.menu_service.available_item_names(menu))
            logger.info(f"Item '{args.item_id}' not found for restaurant {context.restaurant_id}")
            return ToolResult.fail(
                f"Item not found in menu. Looking for: {args.item_id}. Available items: {names}"
            )

        def mutation(draft):
            return self.order_service.add_item(
                draft, menu_item, args.quantity, args.modifiers, args.special_instructions
            )

        line = await self.session_service.mutate_order(context.session, mutation)
        order = context.session.currentOrder

        return ToolResult.ok(
            f"Added {args.quantity}x {localized(menu_item.name)} to order",
            item={
                "menuItemId": menu_item.id,
                "orderItemId": line.id,
                "name": menu_item.name,
                "quantity": line.quantity,
                "price": menu_item.price,
            },
            orderTotal=UtilityService.round_money(order.total),
        )

    async def remove_from_order(self, context: ToolContext, args: RemoveFromOrderArgs) -> ToolResult:
        def mutation(draft):
            return self.order_service.remove_line(draft, args.order_item_id, args.item_id)

        try:
            removed = await self.session_service.mutate_order(context.session, mutation)
        except OrderError as e:
            return ToolResult.fail(str(e))

        order = context.session.currentOrder
        return ToolResult.ok(
            f"Removed {localized(removed.name)} from order",
            orderTotal=UtilityService.round_money(order.total if order else 0),
        )

    async def modify_order_item(self, context: ToolContext, args: ModifyOrderItemArgs) -> ToolResult:
        def mutation(draft):
            return self.order_service.modify_line(
                draft,
                args.order_item_id,
                args.item_id,
                quantity=args.quantity,
                modifiers=args.modifiers,
                special_instructions=args.special_instructions,
            )

        try:
            await self.session_service.mutate_order(context.session, mutation)
        except OrderError as e:
            return ToolResult.fail(str(e))

        order = context.session.currentOrder
        return ToolResult.ok(
            "Updated order",
            orderTotal=UtilityService.round_money(order.total if order else 0),
        )

    async def get_order_summary(self, context: ToolContext, args: EmptyArgs) -> ToolResult:
        order = context.session.currentOrder
        summary = self.order_service.summarize(order)
        if self.order_service.is_empty(order):
            return ToolResult.ok("Your order is empty", **summary)
        return ToolResult.ok(**summary)

    async def proceed_to_checkout(self, context: ToolContext, args: EmptyArgs) -> ToolResult:
        """Signal the presentation layer to open checkout; the draft is kept"""
        order = context.session.currentOrder
        if self.order_service.is_empty(order):
            return ToolResult.fail(
                "Your order is empty. Please add items before proceeding to checkout.",
                redirectToCheckout=False,
            )

        summary = self.order_service.summarize(order)
        return ToolResult.ok(
            "Please proceed to checkout to review your order, add a tip, and complete payment.",
            redirectToCheckout=True,
            checkoutUrl=self.checkout_url,
            orderSummary={
                "itemCount": summary["itemCount"],
                "subtotal": summary["subtotal"],
                "tax": summary["tax"],
                "total": summary["total"],
            },
        )
