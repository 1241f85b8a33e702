"""
Menu service for loading restaurant menus and resolving menu items
"""
import logging
from typing import List, Optional

from tableside.models.order_models import MenuItem
from tableside.services.demo_menu import DEMO_MENU_ITEMS
from tableside.services.menu_cache import MenuCache
from tableside.services.store import DocumentStore

logger = logging.getLogger(__name__)

MENU_COLLECTION = "menuItems"


def menu_document_key(restaurant_id: str, item_id: str) -> str:
    # Item IDs are only unique within one restaurant
    return f"{restaurant_id}:{item_id}"


class MenuService:
    def __init__(self, store: DocumentStore, cache: Optional[MenuCache] = None):
        self.store = store
        self.cache = cache or MenuCache()

    async def get_menu_for_restaurant(self, restaurant_id: str) -> List[MenuItem]:
        """Return the restaurant's menu, from cache when fresh"""
        cached = self.cache.get(restaurant_id)
        if cached is not None:
            return cached

        items = await self._load_menu(restaurant_id)
        if not items:
            logger.info(f"No menu found for restaurant {restaurant_id}, seeding demo menu")
            await self.seed_demo_menu(restaurant_id)
            items = await self._load_menu(restaurant_id)

        self.cache.set(restaurant_id, items)
        logger.info(f"Loaded {len(items)} menu items for restaurant {restaurant_id}")
        return items

    async def _load_menu(self, restaurant_id: str) -> List[MenuItem]:
        docs = await self.store.query(MENU_COLLECTION, restaurantId=restaurant_id)
        return [MenuItem.from_document(doc) for doc in docs]

    async def seed_demo_menu(self, restaurant_id: str) -> int:
        """Write the demo catalogue unless the restaurant already has items"""
        existing = await self.store.query(MENU_COLLECTION, restaurantId=restaurant_id)
        if existing:
            logger.info(f"Menu already exists for restaurant {restaurant_id}, skipping seed")
            return 0

        for item in DEMO_MENU_ITEMS:
            document = {
                **item,
                "restaurantId": restaurant_id,
                "imageUrl": item.get("imageUrl"),
                "availability": {"isAvailable": True, "stockCount": None},
            }
            await self.store.put(MENU_COLLECTION, menu_document_key(restaurant_id, item["id"]), document)

        return len(DEMO_MENU_ITEMS)

    @staticmethod
    def find_item_by_id(menu: List[MenuItem], item_id: str) -> Optional[MenuItem]:
        return next((item for item in menu if item.id == item_id), None)

    @staticmethod
    def find_item_by_name(menu: List[MenuItem], query: str) -> Optional[MenuItem]:
        """Case-insensitive substring match against both languages"""
        if not query or not query.strip():
            return None

        needle = query.strip().lower()
        for item in menu:
            if any(needle in name.lower() for name in item.name.values() if name):
                return item
        return None

    def find_item(self, menu: List[MenuItem], item_id: str) -> Optional[MenuItem]:
        """Resolve an item by exact ID, falling back to its display name"""
        item = self.find_item_by_id(menu, item_id)
        if item:
            return item

        item = self.find_item_by_name(menu, item_id)
        if item:
            logger.info(f"Resolved '{item_id}' by name to menu item {item.id}")
        return item

    @staticmethod
    def available_item_names(menu: List[MenuItem]) -> List[str]:
        return [item.name.get("en") or item.id for item in menu]

    @staticmethod
    def items_in_category(menu: List[MenuItem], category_id: str, available_only: bool = True) -> List[MenuItem]:
        return [
            item for item in menu
            if item.category_id == category_id and (item.is_available or not available_only)
        ]
