from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from termplan.core.deps import get_db, get_snapshot
from termplan.crud.snapshot import get_employee, get_project, list_work_logs, upsert_work_log
from termplan.schemas.entities import Snapshot, WorkLog, WorkLogIn

router = APIRouter()

@router.get("", response_model=list[WorkLog])
def get_work_logs(
    project_id: str | None = Query(None),
    employee_id: str | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
):
    return list_work_logs(snap, project_id=project_id, employee_id=employee_id)

@router.put("", response_model=WorkLog)
def put_work_log(data: WorkLogIn, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    if not get_project(snap, data.project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    if not get_employee(snap, data.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return upsert_work_log(db, snap, data)
