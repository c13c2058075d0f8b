"""Rows inserted the first time the store is created."""
from decimal import Decimal

from sqlalchemy.orm import Session

from . import models
from .auth import hash_password

ADMIN_EMAIL = "admin@3dstore.com"
ADMIN_PASSWORD = "admin123"

PAYPAL_BUTTON = "https://www.paypal.com/cgi-bin/webscr?cmd=_s-xclick&hosted_button_id="

SEED_PRODUCTS = [
    {
        "name": "Futuristic Robot Model",
        "description": "High-quality 3D robot model with detailed textures and rigging. Perfect for games, animations, and renders.",
        "price": Decimal("29.99"),
        "image_url": "https://images.unsplash.com/photo-1485827404703-89b55fcc595e?w=400",
        "paypal_link": PAYPAL_BUTTON + "SAMPLE1",
        "zip_path": "assets/products/robot.zip",
    },
    {
        "name": "Sci-Fi Spaceship Pack",
        "description": "Complete spaceship collection with 5 different models, materials, and blueprints included.",
        "price": Decimal("49.99"),
        "image_url": "https://images.unsplash.com/photo-1446776653964-20c1d3a81b06?w=400",
        "paypal_link": PAYPAL_BUTTON + "SAMPLE2",
        "zip_path": "assets/products/spaceship.zip",
    },
    {
        "name": "Architectural Building Set",
        "description": "Modern architectural models including residential and commercial buildings with detailed interiors.",
        "price": Decimal("39.99"),
        "image_url": "https://images.unsplash.com/photo-1486406146926-c627a92ad1ab?w=400",
        "paypal_link": PAYPAL_BUTTON + "SAMPLE3",
        "zip_path": "assets/products/building.zip",
    },
    {
        "name": "Fantasy Character Pack",
        "description": "Collection of fantasy characters including warriors, mages, and mythical creatures.",
        "price": Decimal("34.99"),
        "image_url": "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=400",
        "paypal_link": PAYPAL_BUTTON + "SAMPLE4",
        "zip_path": "assets/products/characters.zip",
    },
    {
        "name": "Vehicle Collection",
        "description": "Sports cars, trucks, and military vehicles with high-detail models and textures.",
        "price": Decimal("44.99"),
        "image_url": "https://images.unsplash.com/photo-1492144534655-ae79c964c9d7?w=400",
        "paypal_link": PAYPAL_BUTTON + "SAMPLE5",
        "zip_path": "assets/products/vehicles.zip",
    },
    {
        "name": "Weapon Arsenal",
        "description": "Complete weapon pack including medieval swords, modern firearms, and sci-fi energy weapons.",
        "price": Decimal("24.99"),
        "image_url": "https://images.unsplash.com/photo-1595590424283-b8f17842773f?w=400",
        "paypal_link": PAYPAL_BUTTON + "SAMPLE6",
        "zip_path": "assets/products/weapons.zip",
    },
]


def seed_database(db: Session, rounds: int = 10):
    for row in SEED_PRODUCTS:
        db.add(models.Product(**row))
    db.add(
        models.User(
            email=ADMIN_EMAIL,
            password_hash=hash_password(ADMIN_PASSWORD, rounds=rounds),
            role="admin",
        )
    )
