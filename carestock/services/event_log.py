"""Append-only purchase and usage logs hanging off an item.

Entries are never edited or removed; they go away only with their item.
"""
from __future__ import annotations

import datetime
from decimal import Decimal

from carestock.models import Item, Purchase, Usage


def append_purchase(item: Item, day: datetime.date, qty: int, price: Decimal) -> Purchase:
    entry = Purchase(date=day, qty=qty, price=price)
    item.purchases.append(entry)
    return entry


def append_usage(item: Item, day: datetime.date, qty: int) -> Usage:
    entry = Usage(date=day, qty=qty)
    item.usage_history.append(entry)
    return entry
