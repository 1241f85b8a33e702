import pytest

from tableside.models.order_models import ChatMessage
from tableside.services.order_service import EmptyOrderError, OrderItemNotFoundError
from tableside.services.session_service import OrderConflictError, SessionService
from tableside.services.store import InMemoryDocumentStore

from tests.conftest import RESTAURANT_ID, TABLE_ID


class AlwaysConflictingStore(InMemoryDocumentStore):
    async def update(self, collection, doc_id, changes, expected_version=None):
        return None


async def add_salmon(session_service, order_service, menu_service, session):
    menu = await menu_service.get_menu_for_restaurant(RESTAURANT_ID)
    salmon = menu_service.find_item_by_id(menu, "salmon")
    return await session_service.mutate_order(session, lambda draft: order_service.add_item(draft, salmon, 1))


async def test_session_is_created_once(session_service):
    first = await session_service.get_or_create_session("s1", RESTAURANT_ID, TABLE_ID, "es")
    second = await session_service.get_or_create_session("s1", "other", "other", "en")

    assert first.version == 1
    assert second.restaurantId == RESTAURANT_ID
    assert second.language == "es"
    assert second.currentOrder is None
    assert second.messages == []


async def test_mutation_persists_draft(session_service, order_service, menu_service, session):
    await add_salmon(session_service, order_service, menu_service, session)

    stored = await session_service.get_session(session.id)
    assert stored.currentOrder.total == 26.99
    assert stored.version == session.version


async def test_stale_writer_retries_on_fresh_state(session_service, order_service, menu_service, session):
    other = await session_service.get_session(session.id)

    await add_salmon(session_service, order_service, menu_service, session)
    # ``other`` still holds the pre-write version and must not clobber the salmon
    await add_salmon(session_service, order_service, menu_service, other)

    stored = await session_service.get_session(session.id)
    assert stored.currentOrder.items[0].quantity == 2
    assert stored.currentOrder.total == 53.98


async def test_failed_mutation_writes_nothing(session_service, session):
    def mutation(draft):
        raise OrderItemNotFoundError()

    version = session.version
    with pytest.raises(OrderItemNotFoundError):
        await session_service.mutate_order(session, mutation)

    stored = await session_service.get_session(session.id)
    assert stored.version == version
    assert session.version == version


async def test_gives_up_after_repeated_conflicts(order_service, menu_service):
    store = AlwaysConflictingStore()
    service = SessionService(store, max_retries=2)
    session = await service.get_or_create_session("s1", RESTAURANT_ID, TABLE_ID)
    menu = await menu_service.get_menu_for_restaurant(RESTAURANT_ID)
    salmon = menu_service.find_item_by_id(menu, "salmon")

    with pytest.raises(OrderConflictError):
        await service.mutate_order(session, lambda draft: order_service.add_item(draft, salmon, 1))

    assert session.currentOrder is None


async def test_take_order_returns_cleared_draft(session_service, order_service, menu_service, session):
    await add_salmon(session_service, order_service, menu_service, session)

    taken = await session_service.take_order(session)

    assert taken.total == 26.99
    assert [item.menuItemId for item in taken.items] == ["salmon"]
    stored = await session_service.get_session(session.id)
    assert stored.currentOrder is None
    assert session.currentOrder is None


async def test_take_order_includes_item_added_by_other_writer(session_service, order_service, menu_service,
                                                              session):
    await add_salmon(session_service, order_service, menu_service, session)
    other = await session_service.get_session(session.id)
    menu = await menu_service.get_menu_for_restaurant(RESTAURANT_ID)
    lemonade = menu_service.find_item_by_id(menu, "lemonade")
    await session_service.mutate_order(other, lambda draft: order_service.add_item(draft, lemonade, 1))

    # session still holds the stale single-item draft
    taken = await session_service.take_order(session)

    assert sorted(item.menuItemId for item in taken.items) == ["lemonade", "salmon"]
    stored = await session_service.get_session(session.id)
    assert stored.currentOrder is None


async def test_take_empty_order(session_service, session):
    with pytest.raises(EmptyOrderError):
        await session_service.take_order(session)


async def test_restore_order_keeps_newer_draft(session_service, order_service, menu_service, session):
    await add_salmon(session_service, order_service, menu_service, session)
    taken = await session_service.take_order(session)

    await session_service.restore_order(session, taken)
    stored = await session_service.get_session(session.id)
    assert [item.menuItemId for item in stored.currentOrder.items] == ["salmon"]

    await session_service.take_order(session)
    menu = await menu_service.get_menu_for_restaurant(RESTAURANT_ID)
    lemonade = menu_service.find_item_by_id(menu, "lemonade")
    await session_service.mutate_order(session, lambda draft: order_service.add_item(draft, lemonade, 1))

    await session_service.restore_order(session, taken)
    stored = await session_service.get_session(session.id)
    assert [item.menuItemId for item in stored.currentOrder.items] == ["lemonade"]


async def test_append_messages_keeps_history(session_service, session):
    other = await session_service.get_session(session.id)

    await session_service.append_messages(session, [ChatMessage(id="user-1", role="user", content="hi")])
    await session_service.append_messages(other, [ChatMessage(id="user-2", role="user", content="hello")])

    stored = await session_service.get_session(session.id)
    assert [m.id for m in stored.messages] == ["user-1", "user-2"]
