"""
Time-bounded cache of restaurant menus
"""
import time
from typing import Callable, Dict, List, Optional, Tuple

from tableside.config.settings import MENU_CACHE_TTL
from tableside.models.order_models import MenuItem


class MenuCache:
    """In-process TTL cache keyed by restaurant ID.

    Entries are never invalidated by menu writes; staleness is bounded by
    the TTL. ``clock`` is injectable so tests can move time forward.
    """

    def __init__(self, ttl: float = MENU_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, Tuple[float, List[MenuItem]]] = {}

    def get(self, restaurant_id: str) -> Optional[List[MenuItem]]:
        entry = self._entries.get(restaurant_id)
        if entry is None:
            return None
        stored_at, items = entry
        if self.clock() - stored_at >= self.ttl:
            del self._entries[restaurant_id]
            return None
        return items

    def set(self, restaurant_id: str, items: List[MenuItem]):
        self._entries[restaurant_id] = (self.clock(), items)

    def invalidate(self, restaurant_id: Optional[str] = None):
        if restaurant_id is None:
            self._entries.clear()
        else:
            self._entries.pop(restaurant_id, None)
