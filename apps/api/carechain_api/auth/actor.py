"""Request dependencies for the acting user."""

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from carechain_api.db.session import get_db
from carechain_api.models import User
from carechain_api.settings import get_settings


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Load the user resolved by AuthMiddleware into this request's session."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user id. Provide x-user-id header.",
        )
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user.")
    return user


def require_admin_key(x_admin_key: str = Header(default=None)):
    """Require the admin key when one is configured."""
    expected = get_settings().admin_api_key
    if expected and x_admin_key != expected:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin key.")
