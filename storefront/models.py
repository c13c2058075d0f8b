from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from .db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    # role column for simple RBAC: 'user' or 'admin'
    role = Column(String, nullable=False, default="user", server_default="user")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String)
    paypal_link = Column(Text)
    zip_path = Column(String)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # free text, not a key into users
    user_email = Column(String, nullable=False, index=True)
    # declared only; foreign keys are not enforced, deleted products leave orders behind
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    timestamp = Column(DateTime, server_default=func.current_timestamp())
