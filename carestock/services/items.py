"""Item store: running counters and their event logs.

Counters never go below zero; every adjustment is clamped rather than
rejected. Only usage increases and purchases write to the logs.
"""
from __future__ import annotations

import datetime
import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from carestock.inventory_utils import _clean_name
from carestock.models import Item, ItemSource, Resident
from carestock.services.event_log import append_purchase, append_usage
from carestock.services.outcome import Outcome, Rejection
from carestock.services.residents import new_id, next_seq

log = logging.getLogger(__name__)

_CENT = Decimal("0.01")
# SQLite INTEGER is signed 64-bit
MAX_COUNT = 2**63 - 1
# Numeric(12, 2): ten integer digits
MAX_PRICE = Decimal("9999999999.99")


def _as_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() and value == value.to_integral_value() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_price(value) -> Decimal | None:
    """Missing price is zero; negative, oversized or non-numeric is None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal(0)
    if isinstance(value, bool):
        return None
    try:
        price = Decimal(value.strip() if isinstance(value, str) else str(value))
        if not price.is_finite() or price < 0:
            return None
        price = price.quantize(_CENT)
    except InvalidOperation:
        return None
    if price > MAX_PRICE:
        return None
    return price


def _clamp_count(value: int) -> int:
    return min(MAX_COUNT, max(0, value))


def _in_range(value: int) -> bool:
    return -MAX_COUNT <= value <= MAX_COUNT


def _as_source(value) -> ItemSource | None:
    if value is None:
        return ItemSource.PURCHASED
    if isinstance(value, ItemSource):
        return value
    key = str(value).strip().lower()
    for source in ItemSource:
        if key in (source.value, source.name.lower()):
            return source
    return None


def _get_item(session: Session, item_id: str) -> Item | None:
    return session.get(Item, item_id) if item_id else None


def add_item(
    session: Session,
    resident_id: str,
    name: str,
    quantity: int = 0,
    min_stock: int = 0,
    source=ItemSource.PURCHASED,
) -> Outcome[Item]:
    clean = _clean_name(name)
    if not clean:
        return Outcome.reject(Rejection.EMPTY_INPUT)
    if not resident_id or session.get(Resident, resident_id) is None:
        return Outcome.reject(Rejection.NO_RESIDENT_SELECTED)
    src = _as_source(source)
    if src is None:
        return Outcome.reject(Rejection.INVALID_SOURCE)
    item = Item(
        id=new_id(),
        seq=next_seq(session, Item),
        resident_id=resident_id,
        name=clean,
        quantity=_clamp_count(_as_int(quantity) or 0),
        used=0,
        min_stock=_clamp_count(_as_int(min_stock) or 0),
        source=src,
    )
    session.add(item)
    session.flush()
    log.debug("Added item %s for resident %s", item.id, resident_id)
    return Outcome.accept(item)


def adjust_quantity(session: Session, item_id: str, delta: int) -> Outcome[Item]:
    """Raw stock correction; no log entry."""
    item = _get_item(session, item_id)
    if item is None:
        return Outcome.reject(Rejection.NOT_FOUND)
    step = _as_int(delta)
    if step is None:
        return Outcome.reject(Rejection.EMPTY_INPUT)
    if not _in_range(step):
        return Outcome.reject(Rejection.QUANTITY_OUT_OF_RANGE)
    item.quantity = _clamp_count(item.quantity + step)
    session.flush()
    return Outcome.accept(item)


def adjust_used(session: Session, item_id: str, delta: int, today: datetime.date) -> Outcome[Item]:
    """Mark usage. Consumes stock; only increases are logged."""
    item = _get_item(session, item_id)
    if item is None:
        return Outcome.reject(Rejection.NOT_FOUND)
    step = _as_int(delta)
    if step is None:
        return Outcome.reject(Rejection.EMPTY_INPUT)
    if not _in_range(step):
        return Outcome.reject(Rejection.QUANTITY_OUT_OF_RANGE)
    item.used = _clamp_count(item.used + step)
    item.quantity = _clamp_count(item.quantity - step)
    if step > 0:
        append_usage(item, today, step)
    session.flush()
    return Outcome.accept(item)


def record_purchase(session: Session, item_id: str, qty: int, price, today: datetime.date) -> Outcome[Item]:
    item = _get_item(session, item_id)
    if item is None:
        return Outcome.reject(Rejection.NOT_FOUND)
    amount = _as_int(qty)
    if amount is None or amount <= 0:
        return Outcome.reject(Rejection.NON_POSITIVE_QUANTITY)
    if not _in_range(amount):
        return Outcome.reject(Rejection.QUANTITY_OUT_OF_RANGE)
    cost = _as_price(price)
    if cost is None:
        return Outcome.reject(Rejection.INVALID_PRICE)
    item.quantity = _clamp_count(item.quantity + amount)
    append_purchase(item, today, amount, cost)
    session.flush()
    log.debug("Purchase of %d for item %s at %s", amount, item.id, cost)
    return Outcome.accept(item)


def delete_item(session: Session, item_id: str) -> Outcome[str]:
    item = _get_item(session, item_id)
    if item is None:
        return Outcome.reject(Rejection.NOT_FOUND)
    session.delete(item)
    session.flush()
    log.debug("Deleted item %s", item_id)
    return Outcome.accept(item_id)
