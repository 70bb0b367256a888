"""Project routes: payers own projects, freelancers join them as members."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user, require_role
from backend.app.models.project import Project
from backend.app.models.user import User, UserRole
from backend.app.schemas.project import MemberAdd, ProjectCreate, ProjectRead
from backend.app.schemas.user import UserSummary

router = APIRouter(prefix="/projects", tags=["projects"])
logger = get_logger(__name__)


def _get_accessible_project(db: Session, project_id: int, user: User) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    is_owner = project.owner_id == user.id
    is_member = any(member.id == user.id for member in project.members)
    if not is_owner and not is_member:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You don't have access to this project")
    return project


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_role(current_user, UserRole.PAYER, "Only payers can create projects")
    project = Project(
        name=project_in.name,
        description=project_in.description,
        hourly_rate=project_in.hourly_rate,
        owner_id=current_user.id,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("project_created", project_id=project.id, owner_id=current_user.id)
    return project


@router.get("/", response_model=List[ProjectRead])
async def list_projects(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if current_user.role == UserRole.FREELANCER.value:
        query = db.query(Project).filter(Project.members.any(User.id == current_user.id))
    else:
        query = db.query(Project).filter(Project.owner_id == current_user.id)
    return query.order_by(Project.updated_at.desc(), Project.id.desc()).all()


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_accessible_project(db, project_id, current_user)


@router.get("/{project_id}/members", response_model=List[UserSummary])
async def list_members(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    project = _get_accessible_project(db, project_id, current_user)
    return project.members


@router.post("/{project_id}/members", response_model=List[UserSummary])
async def add_member(
    project_id: int,
    payload: MemberAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_role(current_user, UserRole.PAYER, "Only payers can add members to projects")
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.owner_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the project owner can add members")

    user = db.query(User).filter(User.email == payload.email).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if user.role != UserRole.FREELANCER.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only freelancers can be added to projects")
    if any(member.id == user.id for member in project.members):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a member of this project")

    project.members.append(user)
    db.commit()
    db.refresh(project)
    logger.info("project_member_added", project_id=project.id, user_id=user.id)
    return project.members
