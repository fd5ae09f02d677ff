import datetime
from decimal import Decimal

from carestock.core.clock import MonthKey
from carestock.models import ItemSource
from carestock.services.aggregation import (
    Direction,
    MonthBucket,
    MonthTotals,
    fleet_stats,
    fold_months,
    monthly_averages,
    monthly_rollup,
    monthly_trend,
    resident_stats,
)
from carestock.services.records import (
    ItemRecord,
    PurchaseRecord,
    ResidentRecord,
    Snapshot,
    UsageRecord,
)

D = datetime.date


def _item(item_id, resident_id, purchases=(), usage=(), quantity=0, used=0, min_stock=0):
    return ItemRecord(
        id=item_id,
        resident_id=resident_id,
        name=item_id,
        quantity=quantity,
        used=used,
        min_stock=min_stock,
        source=ItemSource.PURCHASED,
        purchases=tuple(PurchaseRecord(d, q, Decimal(p)) for d, q, p in purchases),
        usage_history=tuple(UsageRecord(d, q) for d, q in usage),
    )


def _snapshot():
    residents = (ResidentRecord("r1", "Alice"), ResidentRecord("r2", "Bob"))
    items = (
        _item(
            "a",
            "r1",
            purchases=[(D(2024, 1, 3), 5, 500), (D(2024, 2, 9), 3, 300)],
            usage=[(D(2024, 1, 20), 2)],
            quantity=6,
            used=2,
            min_stock=6,
        ),
        _item("b", "r1", quantity=9, min_stock=2),
        _item(
            "c",
            "r2",
            purchases=[(D(2024, 2, 1), 4, 200)],
            usage=[(D(2024, 2, 2), 6), (D(2023, 12, 30), 1)],
            used=7,
        ),
    )
    return Snapshot(residents=residents, items=items)


def test_fold_months_buckets_by_event_month():
    months = fold_months(_snapshot().items_of("r1"))
    assert months == {
        MonthKey(2024, 1): MonthTotals(purchased=5, used=2, cost=Decimal(500)),
        MonthKey(2024, 2): MonthTotals(purchased=3, used=0, cost=Decimal(300)),
    }


def test_resident_stats_totals():
    stats = resident_stats(_snapshot(), "r1", D(2024, 2, 15))
    assert stats.total_used == 2
    assert stats.total_purchased == 8
    assert stats.total_cost == Decimal(800)
    assert stats.item_count == 2
    assert stats.low_stock_items == 1
    assert stats.this_month == MonthTotals(3, 0, Decimal(300))
    assert stats.average_unit_cost == Decimal(100)


def test_this_month_defaults_to_zero_bucket():
    stats = resident_stats(_snapshot(), "r1", D(2024, 5, 1))
    assert stats.this_month == MonthTotals()
    assert MonthKey(2024, 5) not in stats.monthly


def test_unknown_resident_has_empty_stats():
    stats = resident_stats(_snapshot(), "nobody", D(2024, 2, 1))
    assert stats.item_count == 0
    assert stats.total_cost == 0
    assert stats.monthly == {}
    assert stats.average_unit_cost == 0


def test_fleet_grand_total_sums_residents():
    fleet = fleet_stats(_snapshot(), D(2024, 2, 10))
    assert [e.resident.name for e in fleet.entries] == ["Alice", "Bob"]
    grand = fleet.grand_total
    assert grand.total_used == 9
    assert grand.total_purchased == 12
    assert grand.total_cost == Decimal(1000)
    assert grand.this_month_cost == Decimal(500)
    assert grand.this_month_used == 6


def test_monthly_rollup_newest_first_keyed_by_resident_id():
    buckets = monthly_rollup(_snapshot())
    assert [b.month for b in buckets] == [MonthKey(2024, 2), MonthKey(2024, 1), MonthKey(2023, 12)]
    feb = buckets[0]
    assert (feb.purchased, feb.used, feb.cost) == (7, 6, Decimal(500))
    assert feb.residents == {
        "r1": MonthTotals(3, 0, Decimal(300)),
        "r2": MonthTotals(4, 6, Decimal(200)),
    }
    assert feb.breakdown_by_name({"r1": "Alice", "r2": "Bob"}) == {
        "Alice": MonthTotals(3, 0, Decimal(300)),
        "Bob": MonthTotals(4, 6, Decimal(200)),
    }


def test_breakdown_by_name_merges_shared_names():
    bucket = MonthBucket(
        month=MonthKey(2024, 1),
        residents={"r1": MonthTotals(1, 2, Decimal(3)), "r2": MonthTotals(4, 5, Decimal(6))},
    )
    merged = bucket.breakdown_by_name({"r1": "Same", "r2": "Same"})
    assert merged == {"Same": MonthTotals(5, 7, Decimal(9))}
    assert bucket.residents["r1"] == MonthTotals(1, 2, Decimal(3))
    assert bucket.breakdown_by_name({}) == {
        "r1": MonthTotals(1, 2, Decimal(3)),
        "r2": MonthTotals(4, 5, Decimal(6)),
    }


def test_monthly_rollup_keeps_most_recent_twelve():
    day = D(2023, 1, 15)
    purchases = []
    for _ in range(15):
        purchases.append((day, 1, 10))
        day = (day.replace(day=1) + datetime.timedelta(days=32)).replace(day=15)
    snapshot = Snapshot(
        residents=(ResidentRecord("r1", "Alice"),),
        items=(_item("a", "r1", purchases=purchases),),
    )
    buckets = monthly_rollup(snapshot)
    assert len(buckets) == 12
    assert buckets[0].month == MonthKey(2024, 3)
    assert buckets[-1].month == MonthKey(2023, 4)
    assert len(monthly_rollup(snapshot, limit=3)) == 3


def test_month_signals():
    short = MonthTotals(purchased=3, used=5, cost=Decimal(600))
    assert not short.balanced
    assert short.net == -2
    assert short.cost_per_use == Decimal(120)
    even = MonthTotals(purchased=4, used=4)
    assert even.balanced
    assert even.cost_per_use is None


def test_trend_ties_count_as_up():
    buckets = [
        MonthBucket(MonthKey(2024, 2), purchased=5, used=3, cost=Decimal(100)),
        MonthBucket(MonthKey(2024, 1), purchased=5, used=4, cost=Decimal(150)),
    ]
    trend = monthly_trend(buckets)
    assert trend.current == MonthKey(2024, 2)
    assert trend.previous == MonthKey(2024, 1)
    assert trend.purchased.direction is Direction.UP
    assert trend.purchased.amount == 0
    assert not trend.purchased.adverse
    assert trend.used.direction is Direction.DOWN
    assert trend.used.amount == 1
    assert not trend.used.adverse
    assert trend.cost.direction is Direction.DOWN
    assert trend.cost.amount == Decimal(50)


def test_trend_flags_rising_use_and_cost_as_adverse():
    buckets = [
        MonthBucket(MonthKey(2024, 1), purchased=2, used=1, cost=Decimal(10)),
        MonthBucket(MonthKey(2024, 3), purchased=1, used=6, cost=Decimal(90)),
    ]
    trend = monthly_trend(buckets)
    assert trend.current == MonthKey(2024, 3)
    assert trend.purchased.direction is Direction.DOWN
    assert trend.used.adverse and trend.cost.adverse
    assert trend.cost.amount == Decimal(80)


def test_trend_needs_two_months():
    assert monthly_trend([]) is None
    assert monthly_trend([MonthBucket(MonthKey(2024, 1))]) is None


def test_monthly_averages_simple_mean():
    buckets = [
        MonthBucket(MonthKey(2024, 2), purchased=3, used=1, cost=Decimal(300)),
        MonthBucket(MonthKey(2024, 1), purchased=6, used=4, cost=Decimal(200)),
    ]
    avg = monthly_averages(buckets)
    assert avg.months == 2
    assert avg.purchased == 4.5
    assert avg.used == 2.5
    assert avg.cost == Decimal(250)
    assert monthly_averages([]) is None
