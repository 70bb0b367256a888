"""Time entry routes for freelancers, with read access for project owners."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user, require_role
from backend.app.models.project import Project
from backend.app.models.time_entry import TimeEntry
from backend.app.models.user import User, UserRole
from backend.app.schemas.time_entry import TimeEntryCreate, TimeEntryDetail, TimeEntryRead, TimeEntryUpdate
from backend.app.services.time_tracking import entry_hours, round_hours

router = APIRouter(prefix="/time-entries", tags=["time-entries"])


def _get_own_entry(db: Session, entry_id: int, user: User) -> TimeEntry:
    entry = db.query(TimeEntry).filter(TimeEntry.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Time entry not found")
    if entry.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You don't have access to this time entry")
    return entry


def _ensure_unpaid(entry: TimeEntry, verb: str) -> None:
    if entry.payment_id is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot {verb} a time entry that has been submitted for payment",
        )


@router.post("/", response_model=TimeEntryRead, status_code=status.HTTP_201_CREATED)
async def create_time_entry(
    entry_in: TimeEntryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_role(current_user, UserRole.FREELANCER, "Only freelancers can create time entries")
    project = (
        db.query(Project)
        .filter(Project.id == entry_in.project_id, Project.members.any(User.id == current_user.id))
        .first()
    )
    if not project:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not a member of this project")

    entry = TimeEntry(
        user_id=current_user.id,
        project_id=project.id,
        description=entry_in.description,
        start_time=entry_in.start_time,
        end_time=entry_in.end_time,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/", response_model=List[TimeEntryRead])
async def list_time_entries(
    project_id: int | None = None,
    user_id: int | None = None,
    status: str | None = None,
    completed: bool | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.role == UserRole.FREELANCER.value:
        query = db.query(TimeEntry).filter(TimeEntry.user_id == current_user.id)
    else:
        query = db.query(TimeEntry).join(Project).filter(Project.owner_id == current_user.id)

    if project_id is not None:
        query = query.filter(TimeEntry.project_id == project_id)
    if user_id is not None:
        query = query.filter(TimeEntry.user_id == user_id)
    if status == "unpaid":
        query = query.filter(TimeEntry.payment_id.is_(None))
    if completed is True:
        query = query.filter(TimeEntry.end_time.isnot(None))
    elif completed is False:
        query = query.filter(TimeEntry.end_time.is_(None))

    return query.order_by(TimeEntry.start_time.desc(), TimeEntry.id.desc()).all()


@router.get("/{entry_id}", response_model=TimeEntryDetail)
async def get_time_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    entry = _get_own_entry(db, entry_id, current_user)
    data = TimeEntryRead.model_validate(entry).model_dump()
    data["project"] = entry.project
    data["user"] = entry.user
    data["hours"] = round_hours(entry_hours(entry))
    return data


@router.put("/{entry_id}", response_model=TimeEntryRead)
async def update_time_entry(
    entry_id: int,
    entry_in: TimeEntryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = _get_own_entry(db, entry_id, current_user)
    _ensure_unpaid(entry, "update")
    entry.description = entry_in.description
    entry.start_time = entry_in.start_time
    entry.end_time = entry_in.end_time
    db.commit()
    db.refresh(entry)
    return entry


@router.delete("/{entry_id}")
async def delete_time_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    entry = _get_own_entry(db, entry_id, current_user)
    _ensure_unpaid(entry, "delete")
    db.delete(entry)
    db.commit()
    return {"status": "deleted", "id": entry_id}
