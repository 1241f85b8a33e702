from tableside.services.menu_cache import MenuCache
from tableside.services.menu_service import MenuService
from tableside.services.store import InMemoryDocumentStore
from tableside.tools.assistance_tools import AssistanceTools
from tableside.tools.dispatcher import ToolDispatcher
from tableside.tools.menu_tools import MenuTools
from tableside.tools.order_tools import OrderTools


class BrokenMenuStore(InMemoryDocumentStore):
    async def query(self, collection, **equals):
        raise RuntimeError("menu store unavailable")


async def test_unknown_tool(dispatcher, context):
    result = await dispatcher.dispatch("submitOrder", {}, context)

    assert result == {"success": False, "message": "Unknown function"}


async def test_voice_only_tool_is_hidden_from_chat(dispatcher, context):
    assert (await dispatcher.dispatch("getMenu", {}, context))["message"] == "Unknown function"

    result = await dispatcher.dispatch("getMenu", {"categoryId": "drinks"}, context, include_voice=True)
    assert result["success"] is True
    assert [item["id"] for item in result["items"]] == ["lemonade", "house-red"]


async def test_add_to_order(dispatcher, context):
    result = await dispatcher.dispatch("addToOrder", {"itemId": "salmon", "quantity": 1}, context)

    assert result["success"] is True
    assert result["item"]["menuItemId"] == "salmon"
    assert result["item"]["quantity"] == 1
    assert result["orderTotal"] == 26.99
    assert context.session.currentOrder.total == 26.99


async def test_add_to_order_defaults_quantity(dispatcher, context):
    result = await dispatcher.dispatch("addToOrder", {"itemId": "lemonade", "quantity": None}, context)

    assert result["item"]["quantity"] == 1


async def test_add_to_order_by_name(dispatcher, context):
    result = await dispatcher.dispatch("addToOrder", {"itemId": "Grilled Salmon"}, context)

    assert result["success"] is True
    assert result["item"]["menuItemId"] == "salmon"


async def test_unknown_item_leaves_order_unchanged(dispatcher, context):
    await dispatcher.dispatch("addToOrder", {"itemId": "salmon"}, context)
    version = context.session.version

    result = await dispatcher.dispatch("addToOrder", {"itemId": "pizza"}, context)

    assert result["success"] is False
    assert "Available items:" in result["message"]
    assert "Grilled Salmon" in result["message"]
    assert context.session.version == version
    assert context.session.currentOrder.total == 26.99


async def test_invalid_arguments(dispatcher, context):
    missing = await dispatcher.dispatch("addToOrder", {"quantity": 2}, context)
    negative = await dispatcher.dispatch("addToOrder", {"itemId": "salmon", "quantity": -1}, context)

    assert missing["success"] is False
    assert missing["message"].startswith("Invalid arguments for addToOrder")
    assert negative["success"] is False
    assert context.session.currentOrder is None


async def test_remove_and_modify(dispatcher, context):
    added = await dispatcher.dispatch("addToOrder", {"itemId": "salmon", "quantity": 2}, context)
    line_id = added["item"]["orderItemId"]

    modified = await dispatcher.dispatch("modifyOrderItem", {"orderItemId": line_id, "quantity": 1}, context)
    assert modified["success"] is True
    assert modified["orderTotal"] == 26.99

    removed = await dispatcher.dispatch("removeFromOrder", {"orderItemId": line_id}, context)
    assert removed["success"] is True
    assert removed["orderTotal"] == 0
    assert context.session.currentOrder is None

    again = await dispatcher.dispatch("removeFromOrder", {"orderItemId": line_id}, context)
    assert again == {"success": False, "message": "Order is empty"}


async def test_remove_unknown_line(dispatcher, context):
    await dispatcher.dispatch("addToOrder", {"itemId": "salmon"}, context)

    result = await dispatcher.dispatch("removeFromOrder", {"orderItemId": "nope"}, context)

    assert result == {"success": False, "message": "Item not found in order"}


async def test_order_summary(dispatcher, context):
    empty = await dispatcher.dispatch("getOrderSummary", {}, context)
    assert empty["message"] == "Your order is empty"
    assert empty["itemCount"] == 0

    await dispatcher.dispatch("addToOrder", {"itemId": "salmon", "quantity": 2}, context)
    summary = await dispatcher.dispatch("getOrderSummary", {}, context)
    assert summary["subtotal"] == 49.98
    assert summary["tax"] == 4.0
    assert summary["total"] == 53.98


async def test_checkout_requires_items(dispatcher, context):
    empty = await dispatcher.dispatch("proceedToCheckout", {}, context)
    assert empty["success"] is False
    assert empty["redirectToCheckout"] is False

    await dispatcher.dispatch("addToOrder", {"itemId": "salmon"}, context)
    ready = await dispatcher.dispatch("proceedToCheckout", {}, context)
    assert ready["success"] is True
    assert ready["redirectToCheckout"] is True
    assert ready["checkoutUrl"] == "/checkout"
    assert ready["orderSummary"] == {"itemCount": 1, "subtotal": 24.99, "tax": 2.0, "total": 26.99}
    # Checkout is only a signal; the draft stays until the order is submitted
    assert context.session.currentOrder is not None


async def test_recommendations(dispatcher, context):
    popular = await dispatcher.dispatch("getRecommendations", {"type": "popular"}, context)
    pairing = await dispatcher.dispatch("getRecommendations", {"type": "pairing"}, context)
    other = await dispatcher.dispatch("getRecommendations", {"type": "dietary"}, context)

    assert [r["itemId"] for r in popular["recommendations"]] == ["salmon", "pasta-primavera"]
    assert popular["recommendations"][0]["reason"] == "Our most popular dish!"
    assert [r["itemId"] for r in pairing["recommendations"]] == ["lemonade", "chocolate-cake"]
    assert [r["itemId"] for r in other["recommendations"]] == ["caesar-salad", "tomato-soup"]


async def test_check_availability(dispatcher, context):
    found = await dispatcher.dispatch("checkAvailability", {"itemId": "ribeye"}, context)
    missing = await dispatcher.dispatch("checkAvailability", {"itemId": "pizza"}, context)

    assert found["success"] is True
    assert found["isAvailable"] is True
    assert missing == {"success": False, "message": "Item not found", "isAvailable": False}


async def test_human_assistance(dispatcher, context, notifier):
    result = await dispatcher.dispatch("requestHumanAssistance", {"reason": "spilled drink"}, context)

    assert result["success"] is True
    assert result["estimatedWait"] == "2-3 minutes"
    assert notifier.requests == [(context.session_id, context.table_id, "spilled drink")]


async def test_handler_exception_becomes_failure(order_service, session_service, notifier, context):
    menu_service = MenuService(BrokenMenuStore(), MenuCache())
    dispatcher = ToolDispatcher(
        OrderTools(order_service, menu_service, session_service),
        MenuTools(menu_service),
        AssistanceTools(notifier),
    )

    result = await dispatcher.dispatch("checkAvailability", {"itemId": "salmon"}, context)

    assert result == {"success": False, "message": "menu store unavailable"}


async def test_dispatch_all_runs_in_order(dispatcher, context):
    processed = await dispatcher.dispatch_all(
        [("addToOrder", {"itemId": "salmon"}), ("bogus", {}), ("getOrderSummary", {})],
        context,
    )

    assert [call.name for call in processed] == ["addToOrder", "bogus", "getOrderSummary"]
    assert processed[1].result["message"] == "Unknown function"
    assert processed[2].result["total"] == 26.99
