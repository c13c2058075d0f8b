from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


def round_price(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class SessionUser(BaseModel):
    id: int
    email: str
    role: str = "user"

    model_config = ConfigDict(from_attributes=True)


class Credentials(BaseModel):
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)


class AuthResult(BaseModel):
    success: bool
    error: Optional[str] = None
    user: Optional[SessionUser] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    paypal_link: Optional[str] = None
    zip_path: Optional[str] = None

    @field_validator("price")
    def non_negative(cls, v: Decimal):
        if v < 0:
            raise ValueError("price must be non-negative")
        return round_price(v)


class ProductRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    paypal_link: Optional[str] = None
    zip_path: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    user_email: str = Field(..., min_length=1)
    product_id: int


class OrderRead(BaseModel):
    id: int
    user_email: str
    product_id: int
    timestamp: Optional[datetime] = None
    product_name: str
    price: Decimal
    image_url: Optional[str] = None
    zip_path: Optional[str] = None


class CheckoutLink(BaseModel):
    product_id: int
    url: str


class ThankYou(BaseModel):
    message: str
    product: Optional[ProductRead] = None
    email: Optional[str] = None
    download_path: Optional[str] = None


class ChatRequest(BaseModel):
    message: str = Field(..., max_length=2000)
    chat_id: Optional[int] = None


class ChatMessage(BaseModel):
    id: int
    type: str  # 'user' or 'bot'
    content: str
    code: Optional[str] = None
    download_link: Optional[str] = None
    timestamp: datetime


class ChatTranscript(BaseModel):
    id: int
    title: str = "New Chat"
    last_update: datetime
    messages: List[ChatMessage] = []
