"""
Shared fixtures: in-memory store, controllable clock and a scripted Gemini client
"""
from typing import List, Optional

import pytest

from tableside.services.gemini_service import GeminiError, GeminiReply
from tableside.services.menu_cache import MenuCache
from tableside.services.menu_service import MenuService
from tableside.services.notification_service import StaffNotifier
from tableside.services.order_service import OrderService
from tableside.services.session_service import SessionService
from tableside.services.store import InMemoryDocumentStore
from tableside.tools.assistance_tools import AssistanceTools
from tableside.tools.base import ToolContext
from tableside.tools.dispatcher import ToolDispatcher
from tableside.tools.menu_tools import MenuTools
from tableside.tools.order_tools import OrderTools

RESTAURANT_ID = "demo_restaurant"
TABLE_ID = "table_7"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingNotifier(StaffNotifier):
    def __init__(self):
        super().__init__(webhook_url=None)
        self.requests = []

    async def notify(self, session_id, table_id, reason):
        self.requests.append((session_id, table_id, reason))
        return True


class FakeGeminiClient:
    """Returns scripted replies in order and records every request"""

    def __init__(self, replies: Optional[List[GeminiReply]] = None):
        self.replies = list(replies or [])
        self.requests = []

    def queue(self, text: str = "", function_calls=None):
        self.replies.append(GeminiReply(text=text, function_calls=list(function_calls or [])))

    async def generate(self, system_prompt, contents):
        self.requests.append({"system_prompt": system_prompt, "contents": list(contents)})
        if not self.replies:
            raise GeminiError("No scripted reply left")
        return self.replies.pop(0)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def menu_cache(clock):
    return MenuCache(ttl=300, clock=clock)


@pytest.fixture
def menu_service(store, menu_cache):
    return MenuService(store, menu_cache)


@pytest.fixture
def session_service(store):
    return SessionService(store, max_retries=3)


@pytest.fixture
def order_service():
    return OrderService(tax_rate=0.08)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(order_service, menu_service, session_service, notifier):
    return ToolDispatcher(
        OrderTools(order_service, menu_service, session_service, checkout_url="/checkout"),
        MenuTools(menu_service),
        AssistanceTools(notifier),
    )


@pytest.fixture
def gemini():
    return FakeGeminiClient()


@pytest.fixture
async def session(session_service):
    return await session_service.get_or_create_session("session-1", RESTAURANT_ID, TABLE_ID, "en")


@pytest.fixture
def context(session):
    return ToolContext(
        session_id=session.id,
        restaurant_id=RESTAURANT_ID,
        table_id=TABLE_ID,
        session=session,
        language="en",
    )
