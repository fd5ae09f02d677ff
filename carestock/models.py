# carestock/models.py
import enum

from sqlalchemy import (
    Column,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from .db import Base


class ItemSource(str, enum.Enum):
    PURCHASED = "purchased"
    SAMPLE = "sample"


class Resident(Base):
    __tablename__ = "residents"
    id = Column(String(32), primary_key=True)
    seq = Column(Integer, nullable=False, unique=True)   # creation order
    name = Column(String, nullable=False)

    items = relationship(
        "Item",
        back_populates="resident",
        cascade="all, delete-orphan",
        order_by="Item.seq",
    )


class Item(Base):
    __tablename__ = "items"
    id = Column(String(32), primary_key=True)
    seq = Column(Integer, nullable=False, unique=True)
    resident_id = Column(String(32), ForeignKey("residents.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    used = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=0)
    source = Column(Enum(ItemSource, native_enum=False), nullable=False, default=ItemSource.PURCHASED)

    resident = relationship("Resident", back_populates="items")
    purchases = relationship(
        "Purchase",
        cascade="all, delete-orphan",
        order_by="Purchase.id",
    )
    usage_history = relationship(
        "Usage",
        cascade="all, delete-orphan",
        order_by="Usage.id",
    )


class Purchase(Base):
    __tablename__ = "purchases"
    id = Column(Integer, primary_key=True)
    item_id = Column(String(32), ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    qty = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)


class Usage(Base):
    __tablename__ = "usage_events"
    id = Column(Integer, primary_key=True)
    item_id = Column(String(32), ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    qty = Column(Integer, nullable=False)


Index("ix_items_resident", Item.resident_id)
Index("ix_purchases_item_date", Purchase.item_id, Purchase.date)
Index("ix_usage_item_date", Usage.item_id, Usage.date)
