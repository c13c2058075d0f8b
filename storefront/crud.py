import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from . import models, schemas
from .db import LocalStore
from .errors import StoreUninitialized
from .utils import clean_text

logger = logging.getLogger(__name__)

SORT_KEYS = {
    "name": (lambda p: (p.name or "").lower(), False),
    "price_low": (lambda p: p.price or 0, False),
    "price_high": (lambda p: p.price or 0, True),
    "newest": (lambda p: p.id or 0, True),
}

# Catalog reads degrade to empty results; admin writes report failure as
# None/False. Neither raises past this module.


def list_products(store: LocalStore) -> List[schemas.ProductRead]:
    try:
        with store.session() as db:
            rows = db.query(models.Product).order_by(models.Product.id.desc()).all()
            return [schemas.ProductRead.model_validate(p) for p in rows]
    except StoreUninitialized:
        logger.warning("Error loading products: %s", StoreUninitialized.message)
        return []
    except SQLAlchemyError:
        logger.exception("Error loading products")
        return []


def get_product(store: LocalStore, product_id: int) -> Optional[schemas.ProductRead]:
    try:
        with store.session() as db:
            product = db.get(models.Product, product_id)
            return schemas.ProductRead.model_validate(product) if product else None
    except StoreUninitialized:
        logger.warning("Error loading product: %s", StoreUninitialized.message)
        return None
    except SQLAlchemyError:
        logger.exception("Error loading product %s", product_id)
        return None


def filter_products(products: List[schemas.ProductRead], q: str = "", sort: Optional[str] = None) -> List[schemas.ProductRead]:
    """Search and sort an already loaded product list."""
    filtered = list(products)
    if q:
        needle = q.lower()
        filtered = [
            p for p in filtered
            if needle in (p.name or "").lower() or needle in (p.description or "").lower()
        ]
    if sort in SORT_KEYS:
        key, reverse = SORT_KEYS[sort]
        filtered.sort(key=key, reverse=reverse)
    return filtered


def list_user_orders(store: LocalStore, email: str) -> List[schemas.OrderRead]:
    try:
        with store.session() as db:
            rows = (
                db.query(models.Order, models.Product)
                .join(models.Product, models.Order.product_id == models.Product.id)
                .filter(models.Order.user_email == email)
                .order_by(models.Order.timestamp.desc(), models.Order.id.desc())
                .all()
            )
            return [
                schemas.OrderRead(
                    id=order.id,
                    user_email=order.user_email,
                    product_id=order.product_id,
                    timestamp=order.timestamp,
                    product_name=product.name,
                    price=product.price,
                    image_url=product.image_url,
                    zip_path=product.zip_path,
                )
                for order, product in rows
            ]
    except StoreUninitialized:
        logger.warning("Error loading orders: %s", StoreUninitialized.message)
        return []
    except SQLAlchemyError:
        logger.exception("Error loading orders for %s", email)
        return []


def _product_fields(product: schemas.ProductCreate, exclude_unset: bool = False) -> dict:
    fields = product.model_dump(exclude_unset=exclude_unset)
    for field in ("name", "description"):
        if field in fields:
            fields[field] = clean_text(fields[field])
    return fields


def create_product(store: LocalStore, product: schemas.ProductCreate) -> Optional[schemas.ProductRead]:
    try:
        with store.session() as db:
            db_product = models.Product(**_product_fields(product))
            db.add(db_product)
            db.commit()
            return schemas.ProductRead.model_validate(db_product)
    except (StoreUninitialized, SQLAlchemyError):
        logger.exception("Error saving product")
        return None


def update_product(store: LocalStore, product_id: int, product: schemas.ProductCreate) -> Optional[schemas.ProductRead]:
    try:
        with store.session() as db:
            db_product = db.get(models.Product, product_id)
            if not db_product:
                return None
            # fields left out of the request keep their stored values
            for field, value in _product_fields(product, exclude_unset=True).items():
                setattr(db_product, field, value)
            db.commit()
            return schemas.ProductRead.model_validate(db_product)
    except (StoreUninitialized, SQLAlchemyError):
        logger.exception("Error saving product %s", product_id)
        return None


def delete_product(store: LocalStore, product_id: int) -> bool:
    try:
        with store.session() as db:
            # orders referencing the product are left as they are
            result = db.execute(delete(models.Product).where(models.Product.id == product_id))
            db.commit()
            return result.rowcount > 0
    except (StoreUninitialized, SQLAlchemyError):
        logger.exception("Error deleting product %s", product_id)
        return False


def record_order(store: LocalStore, order: schemas.OrderCreate) -> Optional[schemas.OrderRead]:
    """Insert an order row for a completed purchase.

    Nothing calls this on the payment redirect; an admin records orders by
    hand once a payment has been confirmed.
    """
    try:
        with store.session() as db:
            product = db.get(models.Product, order.product_id)
            if not product:
                return None
            db_order = models.Order(user_email=order.user_email, product_id=product.id)
            db.add(db_order)
            db.commit()
            db.refresh(db_order)
            return schemas.OrderRead(
                id=db_order.id,
                user_email=db_order.user_email,
                product_id=db_order.product_id,
                timestamp=db_order.timestamp,
                product_name=product.name,
                price=product.price,
                image_url=product.image_url,
                zip_path=product.zip_path,
            )
    except (StoreUninitialized, SQLAlchemyError):
        logger.exception("Error recording order")
        return None
