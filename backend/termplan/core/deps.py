import datetime as dt
from zoneinfo import ZoneInfo

import structlog
from fastapi import Depends
from sqlalchemy.orm import Session

from termplan.core.config import settings
from termplan.db.session import SessionLocal
from termplan.crud.snapshot import load_snapshot
from termplan.schemas.entities import Snapshot

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_today() -> dt.date:
    """Evaluation date for the actual/plan cost switch; overridden in tests."""
    return dt.datetime.now(ZoneInfo(settings.TZ)).date()

def get_snapshot(db: Session = Depends(get_db), today: dt.date = Depends(get_today)) -> Snapshot:
    snap = load_snapshot(db, today)
    # every log line of the request carries the active term
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(term=snap.current_term)
    return snap

def resolve_term(snap: Snapshot, term: int | None) -> int:
    return term if term is not None else snap.current_term
