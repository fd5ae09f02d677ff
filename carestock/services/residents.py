"""Resident store: population bounds and cascade delete."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from carestock.inventory_utils import _clean_name
from carestock.models import Resident
from carestock.services.outcome import Outcome, Rejection

log = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def next_seq(session: Session, model) -> int:
    current = session.execute(select(func.max(model.seq))).scalar_one_or_none()
    return (current or 0) + 1


def count_residents(session: Session) -> int:
    return session.execute(select(func.count()).select_from(Resident)).scalar_one()


def add_resident(session: Session, name: str, *, limit: int) -> Outcome[Resident]:
    clean = _clean_name(name)
    if not clean:
        return Outcome.reject(Rejection.EMPTY_INPUT)
    if count_residents(session) >= limit:
        return Outcome.reject(Rejection.POPULATION_LIMIT_REACHED)
    resident = Resident(id=new_id(), seq=next_seq(session, Resident), name=clean)
    session.add(resident)
    session.flush()
    log.debug("Added resident %s", resident.id)
    return Outcome.accept(resident)


def rename_resident(session: Session, resident_id: str, name: str) -> Outcome[Resident]:
    resident = session.get(Resident, resident_id) if resident_id else None
    if resident is None:
        return Outcome.reject(Rejection.NOT_FOUND)
    # free-form: no trimming, duplicates allowed
    resident.name = "" if name is None else str(name)
    session.flush()
    return Outcome.accept(resident)


def delete_resident(session: Session, resident_id: str) -> Outcome[str]:
    """Delete a resident and every item it owns.

    The accepted value is the id of a surviving resident, for callers that
    need to move their selection off the deleted one.
    """
    resident = session.get(Resident, resident_id) if resident_id else None
    if resident is None:
        return Outcome.reject(Rejection.NOT_FOUND)
    if count_residents(session) <= 1:
        return Outcome.reject(Rejection.LAST_RESIDENT_PROTECTED)
    item_count = len(resident.items)
    session.delete(resident)
    session.flush()
    survivor = session.execute(
        select(Resident.id).order_by(Resident.seq.asc()).limit(1)
    ).scalar_one()
    log.debug("Deleted resident %s with %d items", resident_id, item_count)
    return Outcome.accept(survivor)
