"""The explicit in-memory state container every operation runs against."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from carestock import models  # noqa: F401  registers tables
from carestock.core.clock import Clock, SystemClock
from carestock.core.config import Settings, settings as default_settings
from carestock.db import Base, make_engine, make_session_factory
from carestock.services.residents import add_resident, count_residents

log = logging.getLogger(__name__)


@dataclass
class InventoryState:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    clock: Clock
    # one mutator at a time; snapshot reads take it too
    lock: threading.RLock = field(default_factory=threading.RLock)


def new_state(settings: Settings | None = None, clock: Clock | None = None) -> InventoryState:
    """Build a fresh store holding one default resident."""
    cfg = settings or default_settings
    engine = make_engine(cfg.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    state = InventoryState(
        settings=cfg,
        engine=engine,
        session_factory=make_session_factory(engine),
        clock=clock or SystemClock(),
    )
    session = state.session_factory()
    try:
        if count_residents(session) == 0:
            add_resident(session, cfg.DEFAULT_RESIDENT_NAME, limit=cfg.MAX_RESIDENTS).unwrap()
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    log.debug("Inventory state ready at %s", engine.url)
    return state
