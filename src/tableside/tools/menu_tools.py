"""
Menu lookup tools: recommendations, availability and the full menu
"""
import logging
from typing import List, Tuple

from tableside.models.order_models import MenuItem
from tableside.models.tool_args import CheckAvailabilityArgs, GetMenuArgs, GetRecommendationsArgs
from tableside.services.menu_service import MenuService
from tableside.tools.base import ToolContext, ToolResult

logger = logging.getLogger(__name__)


class MenuTools:
    def __init__(self, menu_service: MenuService):
        self.menu_service = menu_service

    def _recommendation_slate(self, menu: List[MenuItem], kind: str) -> List[Tuple[MenuItem, str]]:
        """Fixed rule table: always the first available items of a category"""
        mains = self.menu_service.items_in_category(menu, "mains")
        starters = self.menu_service.items_in_category(menu, "starters")
        desserts = self.menu_service.items_in_category(menu, "desserts")
        drinks = self.menu_service.items_in_category(menu, "drinks")

        if kind == "popular" and mains:
            slate = [(mains[0], "Our most popular dish!")]
            if len(mains) > 1:
                slate.append((mains[1], "Customer favorite!"))
            return slate

        if kind == "pairing":
            slate = []
            if drinks:
                slate.append((drinks[0], "Perfect to refresh your palate"))
            if desserts:
                slate.append((desserts[0], "A sweet finish to your meal"))
            return slate

        slate = []
        if starters:
            slate.append((starters[0], "Light and fresh start"))
        if len(starters) > 1:
            slate.append((starters[1], "Comfort food classic"))
        return slate

    async def get_recommendations(self, context: ToolContext, args: GetRecommendationsArgs) -> ToolResult:
        menu = await self.menu_service.get_menu_for_restaurant(context.restaurant_id)
        slate = self._recommendation_slate(menu, (args.type or "").strip().lower())
        return ToolResult.ok(
            recommendations=[
                {
                    "itemId": item.id,
                    "name": item.name,
                    "price": item.price,
                    "reason": reason,
                }
                for item, reason in slate
            ]
        )

    async def check_availability(self, context: ToolContext, args: CheckAvailabilityArgs) -> ToolResult:
        menu = await self.menu_service.get_menu_for_restaurant(context.restaurant_id)
        item = self.menu_service.find_item_by_id(menu, args.item_id)

        if not item:
            return ToolResult.fail("Item not found", isAvailable=False)

        return ToolResult.ok(
            isAvailable=item.is_available,
            itemName=item.name,
            stockCount=item.stock_count,
        )

    async def get_menu(self, context: ToolContext, args: GetMenuArgs) -> ToolResult:
        """Full menu for voice agents, optionally filtered by category"""
        menu = await self.menu_service.get_menu_for_restaurant(context.restaurant_id)
        if args.category_id:
            menu = [item for item in menu if item.category_id == args.category_id]

        return ToolResult.ok(
            items=[
                {
                    "id": item.id,
                    "name": item.name,
                    "description": item.description,
                    "price": item.price,
                    "available": item.is_available,
                    "allergens": item.allergens,
                    "dietaryFlags": item.dietary_flags,
                    "imageUrl": item.image_url,
                }
                for item in menu
            ]
        )
