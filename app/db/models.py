"""Database models."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Company(Base):
    """Client company whose employees place orders."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    contact_number = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    users = relationship("User", back_populates="company")


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    company = relationship("Company", back_populates="users")
    orders = relationship("Order", back_populates="user")


class MenuItem(Base):
    """Catalog item."""

    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)


class Order(Base):
    """Order model."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    total_price = Column(Float, nullable=False, default=0.0)
    payment_method = Column(String, nullable=False)
    payment_status = Column(String, default="completed", nullable=False)
    delivery_date = Column(DateTime, nullable=False, index=True)  # UTC
    status = Column(String, default="ordered", nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )


class OrderItem(Base):
    """Order line item."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, default=1, nullable=False)
    extras = Column(JSON, default=list, nullable=False)  # List of extra strings

    # Relationships
    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")


class Feedback(Base):
    """Customer feedback rating."""

    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)
    rating = Column(Float, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
