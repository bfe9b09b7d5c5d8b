from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from termplan.core.deps import get_db, get_snapshot
from termplan.crud.snapshot import add_project, delete_project, get_project, update_project
from termplan.schemas.entities import Project, ProjectIn, Snapshot
from termplan.services.projections.calendar import exact_months_between

router = APIRouter()

@router.get("", response_model=list[Project])
def get_projects(include_archived: bool = True, snap: Snapshot = Depends(get_snapshot)):
    if include_archived:
        return snap.projects
    return [p for p in snap.projects if not p.is_archived]

@router.post("", response_model=Project)
def post_project(data: ProjectIn, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    return add_project(db, snap, data)


@router.put("/{project_id}", response_model=Project)
def put_project(
    project_id: str,
    data: ProjectIn,
    db: Session = Depends(get_db),
    snap: Snapshot = Depends(get_snapshot),
):
    if not get_project(snap, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return update_project(db, snap, project_id, data)


@router.delete("/{project_id}", status_code=204)
def remove_project(project_id: str, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    if not get_project(snap, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    delete_project(db, snap, project_id)


@router.get("/{project_id}/duration")
def get_project_duration(project_id: str, snap: Snapshot = Depends(get_snapshot)):
    p = get_project(snap, project_id)
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    return {
        "project_id": project_id,
        "flow_start_date": p.flow_start_date,
        "flow_end_date": p.flow_end_date,
        "months": exact_months_between(p.flow_start_date, p.flow_end_date),
    }
