"""Sample menu loaded into new sessions by the simulated fetch."""

from __future__ import annotations

from app.schemas.dish import Dish

_SAMPLE_DISHES: tuple[dict, ...] = (
    {
        "id": "1",
        "name": "Truffle Risotto",
        "description": "Creamy arborio rice with black truffle, parmesan, and wild mushrooms",
        "price": 28.99,
        "category": "mains",
        "image_url": "https://images.unsplash.com/photo-1582209853949-1b5e8c3a5d3e?auto=format&fit=crop&w=400",
        "created_at": "2024-01-15T10:30:00Z",
        "updated_at": "2024-01-15T10:30:00Z",
    },
    {
        "id": "2",
        "name": "Grilled Salmon",
        "description": "Fresh Atlantic salmon with herb butter and roasted vegetables",
        "price": 32.50,
        "category": "mains",
        "image_url": "https://images.unsplash.com/photo-1467003909585-2f8a72700288?auto=format&fit=crop&w=400",
        "created_at": "2024-01-15T11:15:00Z",
        "updated_at": "2024-01-15T11:15:00Z",
    },
    {
        "id": "3",
        "name": "Caesar Salad",
        "description": "Crisp romaine lettuce with homemade croutons, parmesan, and caesar dressing",
        "price": 16.99,
        "category": "salads",
        "image_url": "https://images.unsplash.com/photo-1551248429-40975aa4de74?auto=format&fit=crop&w=400",
        "created_at": "2024-01-15T12:00:00Z",
        "updated_at": "2024-01-15T12:00:00Z",
    },
    {
        "id": "4",
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with molten center, served with vanilla ice cream",
        "price": 12.99,
        "category": "desserts",
        "image_url": "https://images.unsplash.com/photo-1624353365286-3f8d62daad51?auto=format&fit=crop&w=400",
        "created_at": "2024-01-15T13:45:00Z",
        "updated_at": "2024-01-15T13:45:00Z",
    },
    {
        "id": "5",
        "name": "Craft Beer Selection",
        "description": "Local craft beer on tap - ask server for today's selection",
        "price": 8.99,
        "category": "beverages",
        "image_url": "https://images.unsplash.com/photo-1608270586620-248524c67de9?auto=format&fit=crop&w=400",
        "created_at": "2024-01-15T14:20:00Z",
        "updated_at": "2024-01-15T14:20:00Z",
    },
    {
        "id": "6",
        "name": "Butternut Squash Soup",
        "description": "Creamy roasted butternut squash soup with sage and pumpkin seeds",
        "price": 9.99,
        "category": "soups",
        "image_url": "https://images.unsplash.com/photo-1476718406336-bb5a9690ee2a?auto=format&fit=crop&w=400",
        "created_at": "2024-01-15T15:10:00Z",
        "updated_at": "2024-01-15T15:10:00Z",
    },
)


def sample_dishes() -> list[Dish]:
    """Return fresh Dish instances for the sample menu."""
    return [Dish(**data) for data in _SAMPLE_DISHES]
