"""Record sharing endpoints."""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from carechain_api.access.service import AccessControlService
from carechain_api.auth.actor import get_current_user
from carechain_api.db.session import get_db
from carechain_api.models import User

router = APIRouter(prefix="/v1", tags=["access-permissions"])


class GrantRequest(BaseModel):
    """Grant request."""

    record_id: str
    granted_to_id: str
    access_level: Optional[Literal["view", "download"]] = None


class PermissionResponse(BaseModel):
    """Access permission response."""

    id: str
    record_id: str
    granted_to_id: str
    granted_by_id: str
    access_level: str
    granted_at: datetime
    revoked_at: Optional[datetime] = None
    is_active: bool

    class Config:
        from_attributes = True


@router.post("/access-permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def grant_access(
    data: GrantRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Share one of the caller's records."""
    return AccessControlService(db).grant(
        user.id, data.record_id, data.granted_to_id, access_level=data.access_level
    )


@router.get("/access-permissions", response_model=list[PermissionResponse])
async def list_permissions(
    record_id: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Permissions on one record, or on all of the caller's records."""
    service = AccessControlService(db)
    if record_id:
        return service.list_permissions_for_record(user.id, record_id)
    return service.list_permissions_for_owner(user.id)


@router.delete("/access-permissions/{permission_id}", response_model=PermissionResponse)
async def revoke_access(
    permission_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Revoke a permission the caller granted."""
    return AccessControlService(db).revoke(user.id, permission_id)
