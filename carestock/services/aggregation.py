"""Statistics derived from a store snapshot.

Nothing computed here is stored; every call folds the raw purchase and
usage logs again, so results always match the latest mutation.
"""
from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from carestock.core.clock import MonthKey
from carestock.services.records import ItemRecord, ResidentRecord, Snapshot

ZERO = Decimal(0)


class _MonthSignals:
    """Balance figures shared by month totals and rollup buckets."""

    @property
    def net(self) -> int:
        return self.purchased - self.used

    @property
    def balanced(self) -> bool:
        return self.purchased >= self.used

    @property
    def cost_per_use(self) -> Optional[Decimal]:
        if self.cost > 0 and self.used > 0:
            return self.cost / self.used
        return None


@dataclass
class MonthTotals(_MonthSignals):
    purchased: int = 0
    used: int = 0
    cost: Decimal = ZERO

    def add(self, other: "MonthTotals") -> None:
        self.purchased += other.purchased
        self.used += other.used
        self.cost += other.cost

    def copy(self) -> "MonthTotals":
        return MonthTotals(self.purchased, self.used, self.cost)


@dataclass(frozen=True)
class ResidentStats:
    total_used: int
    total_purchased: int
    total_cost: Decimal
    monthly: Dict[MonthKey, MonthTotals]
    this_month: MonthTotals
    item_count: int
    low_stock_items: int

    @property
    def average_unit_cost(self) -> Decimal:
        if self.total_purchased <= 0:
            return ZERO
        return self.total_cost / self.total_purchased


@dataclass(frozen=True)
class ResidentSummary:
    resident: ResidentRecord
    stats: ResidentStats


@dataclass(frozen=True)
class GrandTotal:
    total_used: int = 0
    total_purchased: int = 0
    total_cost: Decimal = ZERO
    this_month_cost: Decimal = ZERO
    this_month_used: int = 0


@dataclass(frozen=True)
class FleetStats:
    entries: List[ResidentSummary]
    grand_total: GrandTotal


@dataclass
class MonthBucket(_MonthSignals):
    month: MonthKey
    purchased: int = 0
    used: int = 0
    cost: Decimal = ZERO
    # keyed by resident id; labels are resolved by the caller
    residents: Dict[str, MonthTotals] = field(default_factory=dict)

    def breakdown_by_name(self, names: Mapping[str, str]) -> Dict[str, MonthTotals]:
        """Per-resident breakdown labelled with display names.

        Residents sharing a name are summed under that name. Ids missing from
        ``names`` are shown as the id.
        """
        out: Dict[str, MonthTotals] = {}
        for resident_id, totals in self.residents.items():
            label = names.get(resident_id, resident_id)
            if label in out:
                out[label].add(totals)
            else:
                out[label] = totals.copy()
        return out


class Direction(str, enum.Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Delta:
    direction: Direction
    amount: Union[int, Decimal]
    adverse: bool = False


@dataclass(frozen=True)
class MonthlyTrend:
    current: MonthKey
    previous: MonthKey
    purchased: Delta
    used: Delta
    cost: Delta


@dataclass(frozen=True)
class MonthlyAverages:
    months: int
    purchased: float
    used: float
    cost: Decimal


def fold_months(items: Iterable[ItemRecord]) -> Dict[MonthKey, MonthTotals]:
    """Bucket every purchase and usage event by the month it happened in."""
    months: Dict[MonthKey, MonthTotals] = {}
    for item in items:
        for p in item.purchases:
            key = MonthKey.of(p.date)
            if key not in months:
                months[key] = MonthTotals()
            months[key].purchased += p.qty
            months[key].cost += p.price or ZERO
        for u in item.usage_history:
            key = MonthKey.of(u.date)
            if key not in months:
                months[key] = MonthTotals()
            months[key].used += u.qty
    return months


def resident_stats(snapshot: Snapshot, resident_id: str, today: datetime.date) -> ResidentStats:
    """Totals for one resident. Unknown ids yield all-zero stats."""
    items = list(snapshot.items_of(resident_id))
    monthly = fold_months(items)
    current = monthly.get(MonthKey.of(today))
    return ResidentStats(
        total_used=sum(i.used for i in items),
        total_purchased=sum(p.qty for i in items for p in i.purchases),
        total_cost=sum((p.price or ZERO for i in items for p in i.purchases), ZERO),
        monthly=monthly,
        this_month=current.copy() if current is not None else MonthTotals(),
        item_count=len(items),
        low_stock_items=sum(1 for i in items if i.low_stock),
    )


def fleet_stats(snapshot: Snapshot, today: datetime.date) -> FleetStats:
    entries = [
        ResidentSummary(resident=r, stats=resident_stats(snapshot, r.id, today))
        for r in snapshot.residents
    ]
    grand = GrandTotal(
        total_used=sum(e.stats.total_used for e in entries),
        total_purchased=sum(e.stats.total_purchased for e in entries),
        total_cost=sum((e.stats.total_cost for e in entries), ZERO),
        this_month_cost=sum((e.stats.this_month.cost for e in entries), ZERO),
        this_month_used=sum(e.stats.this_month.used for e in entries),
    )
    return FleetStats(entries=entries, grand_total=grand)


def monthly_rollup(snapshot: Snapshot, *, limit: int = 12) -> List[MonthBucket]:
    """Fleet-wide month buckets, newest first, at most ``limit`` of them."""
    buckets: Dict[MonthKey, MonthBucket] = {}
    for r in snapshot.residents:
        for month, totals in fold_months(snapshot.items_of(r.id)).items():
            bucket = buckets.get(month)
            if bucket is None:
                bucket = buckets[month] = MonthBucket(month=month)
            bucket.purchased += totals.purchased
            bucket.used += totals.used
            bucket.cost += totals.cost
            bucket.residents[r.id] = totals
    ordered = sorted(buckets.values(), key=lambda b: b.month, reverse=True)
    return ordered[: max(0, limit)]


def _delta(curr, prev, *, up_is_adverse: bool = False) -> Delta:
    # ties count as up
    direction = Direction.UP if curr >= prev else Direction.DOWN
    return Delta(
        direction=direction,
        amount=abs(curr - prev),
        adverse=up_is_adverse and direction is Direction.UP,
    )


def monthly_trend(buckets: Sequence[MonthBucket]) -> Optional[MonthlyTrend]:
    """Compare the two most recent buckets; None with fewer than two."""
    if len(buckets) < 2:
        return None
    curr, prev = sorted(buckets, key=lambda b: b.month, reverse=True)[:2]
    return MonthlyTrend(
        current=curr.month,
        previous=prev.month,
        purchased=_delta(curr.purchased, prev.purchased),
        used=_delta(curr.used, prev.used, up_is_adverse=True),
        cost=_delta(curr.cost, prev.cost, up_is_adverse=True),
    )


def monthly_averages(buckets: Sequence[MonthBucket]) -> Optional[MonthlyAverages]:
    n = len(buckets)
    if not n:
        return None
    return MonthlyAverages(
        months=n,
        purchased=sum(b.purchased for b in buckets) / n,
        used=sum(b.used for b in buckets) / n,
        cost=sum((b.cost for b in buckets), ZERO) / n,
    )
