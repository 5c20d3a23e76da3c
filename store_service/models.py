# store_service/models.py

"""
SQLAlchemy database models for the store service.
These classes define the structure of tables in the database.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Many-to-many link between products and categories.
product_categories = Table(
    "product_categories",
    Base.metadata,
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Product(Base):
    """
    SQLAlchemy model for the 'products' table.
    A product carries its list price plus an optional sale window.
    """

    __tablename__ = "products"

    # Primary Key: random UUID string.
    id = Column(String(36), primary_key=True, default=_new_id)

    title = Column(String(255), nullable=False)

    # URL key derived from the title. The unique index is what stops two
    # concurrent creates from both claiming the same slug.
    slug = Column(String(255), nullable=False, unique=True, index=True)

    description = Column(Text, nullable=True)

    price = Column(Numeric(12, 2), nullable=False)

    # Sale fields are all set or all empty, following is_on_sale.
    is_on_sale = Column(Boolean, nullable=False, default=False)
    sale_price = Column(Numeric(12, 2), nullable=True)
    start_sale = Column(Date, nullable=True)
    end_sale = Column(Date, nullable=True)

    categories = relationship("Category", secondary=product_categories, lazy="selectin")

    # Set in Python so rows created within the same second keep their order.
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, slug='{self.slug}', price={self.price})>"


class Size(Base):
    __tablename__ = "sizes"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(50), nullable=False, unique=True)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class ForgotPassword(Base):
    """Pending password-reset code, one per email address."""

    __tablename__ = "forgot_passwords"

    email = Column(String(255), primary_key=True)
    otp = Column(String(20), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_new_id)

    # Recipient contact info
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    address = Column(Text, nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @property
    def total(self):
        return sum((item.unit_price * item.quantity for item in self.items), 0)

    def __repr__(self):
        return f"<Order(id={self.id}, email='{self.email}', items={len(self.items)})>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # Orders keep their lines even if the product is later deleted.
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_title = Column(String(255), nullable=False)
    size = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False)
    # Price snapshot taken when the order was placed.
    unit_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
