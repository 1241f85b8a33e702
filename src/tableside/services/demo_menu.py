"""
Demo catalogue seeded into restaurants that have no menu yet
"""

DEMO_MENU_ITEMS = [
    {
        "id": "caesar-salad",
        "categoryId": "starters",
        "name": {"en": "Caesar Salad", "es": "Ensalada Cesar"},
        "description": {
            "en": "Fresh romaine lettuce with parmesan and croutons",
            "es": "Lechuga romana fresca con parmesano y crutones",
        },
        "price": 12.99,
        "allergens": ["gluten", "dairy"],
        "dietaryFlags": ["vegetarian"],
        "preparationTime": 10,
        "sortOrder": 1,
    },
    {
        "id": "tomato-soup",
        "categoryId": "starters",
        "name": {"en": "Tomato Soup", "es": "Sopa de Tomate"},
        "description": {
            "en": "Homemade tomato soup with fresh basil",
            "es": "Sopa de tomate casera con albahaca fresca",
        },
        "price": 8.99,
        "allergens": [],
        "dietaryFlags": ["vegetarian", "vegan", "gluten-free"],
        "preparationTime": 5,
        "sortOrder": 2,
    },
    {
        "id": "salmon",
        "categoryId": "mains",
        "name": {"en": "Grilled Salmon", "es": "Salmon a la Parrilla"},
        "description": {
            "en": "Atlantic salmon with lemon butter sauce and vegetables",
            "es": "Salmon del Atlantico con salsa de limon y vegetales",
        },
        "price": 24.99,
        "allergens": ["fish"],
        "dietaryFlags": ["gluten-free"],
        "preparationTime": 20,
        "sortOrder": 1,
    },
    {
        "id": "pasta-primavera",
        "categoryId": "mains",
        "name": {"en": "Pasta Primavera", "es": "Pasta Primavera"},
        "description": {
            "en": "Fresh pasta with seasonal vegetables in garlic sauce",
            "es": "Pasta fresca con vegetales de temporada en salsa de ajo",
        },
        "price": 18.99,
        "allergens": ["gluten", "dairy"],
        "dietaryFlags": ["vegetarian"],
        "preparationTime": 15,
        "sortOrder": 2,
    },
    {
        "id": "ribeye",
        "categoryId": "mains",
        "name": {"en": "Ribeye Steak", "es": "Bistec Ribeye"},
        "description": {
            "en": "12oz prime ribeye with garlic mashed potatoes",
            "es": "Ribeye premium de 12oz con pure de papas al ajo",
        },
        "price": 34.99,
        "allergens": ["dairy"],
        "dietaryFlags": ["gluten-free"],
        "preparationTime": 25,
        "sortOrder": 3,
    },
    {
        "id": "chocolate-cake",
        "categoryId": "desserts",
        "name": {"en": "Chocolate Cake", "es": "Pastel de Chocolate"},
        "description": {
            "en": "Rich chocolate cake with vanilla ice cream",
            "es": "Pastel de chocolate con helado de vainilla",
        },
        "price": 9.99,
        "allergens": ["gluten", "dairy", "eggs"],
        "dietaryFlags": ["vegetarian"],
        "preparationTime": 5,
        "sortOrder": 1,
    },
    {
        "id": "tiramisu",
        "categoryId": "desserts",
        "name": {"en": "Tiramisu", "es": "Tiramisu"},
        "description": {
            "en": "Classic Italian dessert with espresso and mascarpone",
            "es": "Postre italiano clasico con espresso y mascarpone",
        },
        "price": 10.99,
        "allergens": ["gluten", "dairy", "eggs"],
        "dietaryFlags": ["vegetarian"],
        "preparationTime": 5,
        "sortOrder": 2,
    },
    {
        "id": "lemonade",
        "categoryId": "drinks",
        "name": {"en": "Fresh Lemonade", "es": "Limonada Fresca"},
        "description": {
            "en": "House-made lemonade with mint",
            "es": "Limonada casera con menta",
        },
        "price": 4.99,
        "allergens": [],
        "dietaryFlags": ["vegan", "gluten-free"],
        "preparationTime": 3,
        "sortOrder": 1,
    },
    {
        "id": "house-red",
        "categoryId": "drinks",
        "name": {"en": "House Red Wine", "es": "Vino Tinto de la Casa"},
        "description": {
            "en": "A glass of our smooth house red",
            "es": "Una copa de nuestro vino tinto de la casa",
        },
        "price": 8.5,
        "allergens": ["sulfites"],
        "dietaryFlags": ["vegan", "gluten-free"],
        "preparationTime": 1,
        "sortOrder": 2,
    },
]
