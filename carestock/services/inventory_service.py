"""Resident and item operations for the presentation layer."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from carestock.core.config import Settings
from carestock.models import ItemSource
from carestock.services import aggregation
from carestock.services import items as item_store
from carestock.services import residents as resident_store
from carestock.services.aggregation import (
    FleetStats,
    MonthBucket,
    MonthlyAverages,
    MonthlyTrend,
    ResidentStats,
)
from carestock.services.outcome import Outcome
from carestock.services.records import (
    ItemRecord,
    ResidentRecord,
    Snapshot,
    item_record,
    load_snapshot,
    resident_record,
)
from carestock.state import InventoryState, new_state

log = logging.getLogger(__name__)


def _same(value):
    return value


class InventoryService:
    """All reads and writes against one inventory state."""

    def __init__(self, state: InventoryState | None = None):
        self._state = state or new_state()

    @property
    def state(self) -> InventoryState:
        return self._state

    @property
    def settings(self) -> Settings:
        return self._state.settings

    @property
    def max_residents(self) -> int:
        return self._state.settings.MAX_RESIDENTS

    # ------------------------------------------------------------------
    # Helpers
    def _session(self) -> Session:
        return self._state.session_factory()

    def _today(self):
        return self._state.clock.today()

    def _mutate(self, action: str, convert: Callable, fn: Callable[..., Outcome], *args, **kwargs) -> Outcome:
        with self._state.lock:
            session = self._session()
            try:
                outcome = fn(session, *args, **kwargs)
                if not outcome.ok:
                    session.rollback()
                    log.info("%s rejected: %s", action, outcome.rejection.value)
                    return outcome
                result = outcome.map(convert)
                session.commit()
                log.debug("%s applied", action)
                return result
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    # ------------------------------------------------------------------
    # Residents
    def add_resident(self, name: str) -> Outcome[ResidentRecord]:
        return self._mutate(
            "resident.add", resident_record, resident_store.add_resident, name, limit=self.max_residents
        )

    def rename_resident(self, resident_id: str, name: str) -> Outcome[ResidentRecord]:
        return self._mutate("resident.rename", resident_record, resident_store.rename_resident, resident_id, name)

    def delete_resident(self, resident_id: str) -> Outcome[str]:
        """Remove a resident and its items. Value is a surviving resident id."""
        return self._mutate("resident.delete", _same, resident_store.delete_resident, resident_id)

    # ------------------------------------------------------------------
    # Items
    def add_item(
        self,
        resident_id: str,
        name: str,
        quantity: int = 0,
        min_stock: int = 0,
        source=ItemSource.PURCHASED,
    ) -> Outcome[ItemRecord]:
        return self._mutate(
            "item.add",
            item_record,
            item_store.add_item,
            resident_id,
            name,
            quantity=quantity,
            min_stock=min_stock,
            source=source,
        )

    def adjust_quantity(self, item_id: str, delta: int) -> Outcome[ItemRecord]:
        return self._mutate("item.adjust_quantity", item_record, item_store.adjust_quantity, item_id, delta)

    def adjust_used(self, item_id: str, delta: int) -> Outcome[ItemRecord]:
        return self._mutate("item.adjust_used", item_record, item_store.adjust_used, item_id, delta, self._today())

    def record_purchase(self, item_id: str, qty: int, price=0) -> Outcome[ItemRecord]:
        return self._mutate(
            "item.purchase", item_record, item_store.record_purchase, item_id, qty, price, self._today()
        )

    def delete_item(self, item_id: str) -> Outcome[str]:
        return self._mutate("item.delete", _same, item_store.delete_item, item_id)

    # ------------------------------------------------------------------
    # Reads
    def snapshot(self) -> Snapshot:
        with self._state.lock:
            session = self._session()
            try:
                return load_snapshot(session)
            finally:
                session.close()

    def residents(self) -> List[ResidentRecord]:
        return list(self.snapshot().residents)

    def resident_names(self) -> Dict[str, str]:
        return self.snapshot().names()

    def can_add_resident(self) -> bool:
        return len(self.snapshot().residents) < self.max_residents

    def items(self, resident_id: str) -> List[ItemRecord]:
        return list(self.snapshot().items_of(resident_id))

    def get_item(self, item_id: str) -> Optional[ItemRecord]:
        for item in self.snapshot().items:
            if item.id == item_id:
                return item
        return None

    def stats(self, resident_id: str) -> ResidentStats:
        return aggregation.resident_stats(self.snapshot(), resident_id, self._today())

    def all_stats(self) -> FleetStats:
        return aggregation.fleet_stats(self.snapshot(), self._today())

    def monthly_data(self) -> List[MonthBucket]:
        return aggregation.monthly_rollup(self.snapshot(), limit=self.settings.HISTORY_MONTHS)

    def monthly_trend(self) -> Optional[MonthlyTrend]:
        return aggregation.monthly_trend(self.monthly_data())

    def monthly_averages(self) -> Optional[MonthlyAverages]:
        return aggregation.monthly_averages(self.monthly_data())
