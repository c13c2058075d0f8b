"""Hand-off to the hosted payment page and the static thank-you view.

No payment callback is received or verified here, and no order is written.
"""
from typing import Optional
from urllib.parse import quote, urlencode

from . import crud, schemas
from .db import LocalStore


def build_checkout_url(product: schemas.ProductRead, base_url: str, email: Optional[str] = None) -> Optional[str]:
    if not product.paypal_link:
        return None
    params = {"product_id": product.id}
    if email:
        params["email"] = email
    return_url = f"{base_url.rstrip('/')}/thankyou?{urlencode(params)}"
    return f"{product.paypal_link}&return={quote(return_url, safe='')}"


def thank_you(store: LocalStore, product_id: Optional[int] = None, email: Optional[str] = None) -> schemas.ThankYou:
    product = crud.get_product(store, product_id) if product_id is not None else None
    return schemas.ThankYou(
        message="Thank you for your purchase. Your payment has been processed successfully, "
        "and you now have access to download your 3D model.",
        product=product,
        email=email,
        download_path=product.zip_path if product else None,
    )
