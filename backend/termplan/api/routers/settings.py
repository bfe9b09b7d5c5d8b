from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from termplan.core.deps import get_db, get_snapshot
from termplan.crud.snapshot import set_current_term, update_settings
from termplan.schemas.entities import AppSettings, Snapshot

router = APIRouter()


class TermIn(BaseModel):
    term: int = Field(ge=2000, le=2999)


@router.get("", response_model=AppSettings)
def get_settings(snap: Snapshot = Depends(get_snapshot)):
    return snap.settings

@router.put("", response_model=AppSettings)
def put_settings(data: AppSettings, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    return update_settings(db, snap, data)

@router.get("/term")
def get_term(snap: Snapshot = Depends(get_snapshot)):
    return {"term": snap.current_term}

@router.put("/term")
def put_term(data: TermIn, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    return {"term": set_current_term(db, snap, data.term)}
