"""
Function declarations the AI model is told about
"""

TOOL_DECLARATIONS = [
    {
        "name": "addToOrder",
        "description": "Add a menu item to the customer order",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "itemId": {
                    "type": "STRING",
                    "description": "The unique ID of the menu item to add",
                },
                "quantity": {
                    "type": "NUMBER",
                    "description": "The quantity to add (default 1)",
                },
                "modifiers": {
                    "type": "ARRAY",
                    "items": {"type": "STRING"},
                    "description": "Array of modifier IDs to apply",
                },
                "specialInstructions": {
                    "type": "STRING",
                    "description": "Special instructions for the item",
                },
            },
            "required": ["itemId", "quantity"],
        },
    },
    {
        "name": "removeFromOrder",
        "description": "Remove an item from the order",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "orderItemId": {
                    "type": "STRING",
                    "description": "The ID of the order item to remove",
                },
                "itemId": {
                    "type": "STRING",
                    "description": "The menu item ID, when the order item ID is not known",
                },
            },
            "required": ["orderItemId"],
        },
    },
    {
        "name": "modifyOrderItem",
        "description": "Modify an existing item in the order",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "orderItemId": {
                    "type": "STRING",
                    "description": "The ID of the order item to modify",
                },
                "quantity": {
                    "type": "NUMBER",
                    "description": "New quantity",
                },
                "modifiers": {
                    "type": "ARRAY",
                    "items": {"type": "STRING"},
                    "description": "New modifiers to apply",
                },
                "specialInstructions": {
                    "type": "STRING",
                    "description": "Updated special instructions",
                },
            },
            "required": ["orderItemId"],
        },
    },
    {
        "name": "getRecommendations",
        "description": "Get AI-powered menu recommendations based on context",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "type": {
                    "type": "STRING",
                    "description": "Type of recommendation: pairing, popular, dietary, upsell",
                },
                "context": {
                    "type": "STRING",
                    "description": "Additional context for recommendations",
                },
            },
            "required": ["type"],
        },
    },
    {
        "name": "checkAvailability",
        "description": "Check if a specific menu item is currently available",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "itemId": {
                    "type": "STRING",
                    "description": "The menu item ID to check",
                },
            },
            "required": ["itemId"],
        },
    },
    {
        "name": "requestHumanAssistance",
        "description": "Request a human server to come to the table",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "reason": {
                    "type": "STRING",
                    "description": "The reason for requesting human assistance",
                },
            },
            "required": ["reason"],
        },
    },
    {
        "name": "getOrderSummary",
        "description": "Get the current order summary with items and totals",
    },
    {
        "name": "proceedToCheckout",
        "description": (
            "Direct the customer to the checkout page to review their order, add tip, and complete "
            "payment. Call this when the customer wants to place/submit/pay for their order."
        ),
    },
]

DECLARED_TOOL_NAMES = [declaration["name"] for declaration in TOOL_DECLARATIONS]

# Snake-case names used by the voice agent's server tools
VOICE_TOOL_ALIASES = {
    "add_to_order": "addToOrder",
    "remove_from_order": "removeFromOrder",
    "modify_order_item": "modifyOrderItem",
    "get_recommendations": "getRecommendations",
    "check_availability": "checkAvailability",
    "request_human_assistance": "requestHumanAssistance",
    "get_order_summary": "getOrderSummary",
    "proceed_to_checkout": "proceedToCheckout",
    "get_menu": "getMenu",
}
