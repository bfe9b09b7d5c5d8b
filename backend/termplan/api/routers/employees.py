from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from termplan.core.deps import get_db, get_snapshot
from termplan.crud.snapshot import add_employee, delete_employee, get_employee, update_employee
from termplan.schemas.entities import Employee, EmployeeIn, Snapshot

router = APIRouter()

@router.get("", response_model=list[Employee])
def get_employees(snap: Snapshot = Depends(get_snapshot)):
    return snap.employees

@router.post("", response_model=Employee)
def post_employee(data: EmployeeIn, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    return add_employee(db, snap, data)


@router.put("/{employee_id}", response_model=Employee)
def put_employee(
    employee_id: str,
    data: EmployeeIn,
    db: Session = Depends(get_db),
    snap: Snapshot = Depends(get_snapshot),
):
    if not get_employee(snap, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return update_employee(db, snap, employee_id, data)


@router.delete("/{employee_id}", status_code=204)
def remove_employee(employee_id: str, db: Session = Depends(get_db), snap: Snapshot = Depends(get_snapshot)):
    if not get_employee(snap, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    delete_employee(db, snap, employee_id)
