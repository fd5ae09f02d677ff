"""Immutable views of the stores, loaded once per query."""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from carestock.models import Item, ItemSource, Purchase, Resident, Usage


@dataclass(frozen=True)
class PurchaseRecord:
    date: datetime.date
    qty: int
    price: Decimal


@dataclass(frozen=True)
class UsageRecord:
    date: datetime.date
    qty: int


@dataclass(frozen=True)
class ResidentRecord:
    id: str
    name: str


@dataclass(frozen=True)
class ItemRecord:
    id: str
    resident_id: str
    name: str
    quantity: int
    used: int
    min_stock: int
    source: ItemSource
    purchases: Tuple[PurchaseRecord, ...] = ()
    usage_history: Tuple[UsageRecord, ...] = ()

    @property
    def low_stock(self) -> bool:
        # the threshold itself already counts as low
        return self.quantity <= self.min_stock


@dataclass(frozen=True)
class Snapshot:
    residents: Tuple[ResidentRecord, ...]
    items: Tuple[ItemRecord, ...]

    def items_of(self, resident_id: str) -> Iterator[ItemRecord]:
        return (item for item in self.items if item.resident_id == resident_id)

    def names(self) -> Dict[str, str]:
        return {r.id: r.name for r in self.residents}


def _price(value) -> Decimal:
    if value is None:
        return Decimal(0)
    return value if isinstance(value, Decimal) else Decimal(str(value))


def purchase_record(p: Purchase) -> PurchaseRecord:
    return PurchaseRecord(date=p.date, qty=int(p.qty), price=_price(p.price))


def usage_record(u: Usage) -> UsageRecord:
    return UsageRecord(date=u.date, qty=int(u.qty))


def resident_record(r: Resident) -> ResidentRecord:
    return ResidentRecord(id=r.id, name=r.name)


def item_record(item: Item) -> ItemRecord:
    return ItemRecord(
        id=item.id,
        resident_id=item.resident_id,
        name=item.name,
        quantity=int(item.quantity),
        used=int(item.used),
        min_stock=int(item.min_stock),
        source=item.source,
        purchases=tuple(purchase_record(p) for p in item.purchases),
        usage_history=tuple(usage_record(u) for u in item.usage_history),
    )


def load_snapshot(session: Session) -> Snapshot:
    stmt = (
        select(Resident)
        .order_by(Resident.seq.asc())
        .options(
            selectinload(Resident.items).selectinload(Item.purchases),
            selectinload(Resident.items).selectinload(Item.usage_history),
        )
    )
    residents = session.execute(stmt).scalars().all()
    items = []
    for r in residents:
        items.extend(item_record(item) for item in r.items)
    return Snapshot(
        residents=tuple(resident_record(r) for r in residents),
        items=tuple(items),
    )
