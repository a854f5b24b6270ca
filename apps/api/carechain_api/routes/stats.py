"""Dashboard statistics endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from carechain_api.auth.actor import get_current_user
from carechain_api.db.session import get_db
from carechain_api.models import User
from carechain_api.services.stats import stats_for

router = APIRouter(prefix="/v1", tags=["stats"])


@router.get("/stats")
async def dashboard_stats(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Dashboard counters for the caller's role."""
    return stats_for(db, user)
