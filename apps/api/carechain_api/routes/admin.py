"""Admin routes for user management."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from carechain_api.auth.actor import require_admin_key
from carechain_api.auth.roles import validate_role
from carechain_api.db.session import get_db
from carechain_api.models import User

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_key)])


class UserCreate(BaseModel):
    """User creation request."""

    username: str
    email: str
    full_name: str
    role: str
    phone: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None

    @field_validator("role")
    @classmethod
    def check_role(cls, value: str) -> str:
        return validate_role(value)


class UserResponse(BaseModel):
    """User response."""

    id: str
    username: str
    email: str
    full_name: str
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
):
    """Create a portal user."""
    existing = (
        db.query(User)
        .filter((User.username == user_data.username) | (User.email == user_data.email))
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already exists",
        )

    user = User(**user_data.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: Session = Depends(get_db)):
    """Get a portal user."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
    return user
