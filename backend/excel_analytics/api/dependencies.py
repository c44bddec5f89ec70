from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from excel_analytics.core.database import get_db
from excel_analytics.core.security import decode_access_token, get_password_hash
from excel_analytics.core.config import settings
from excel_analytics.models.user import User

# Extracts the bearer token from the Authorization header
# tokenUrl tells Swagger UI where the login endpoint lives
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


def _get_or_create_dev_user(db: Session) -> User:
    user = db.query(User).filter(User.email == settings.DEV_AUTH_EMAIL).first()
    if user:
        return user
    user = User(
        email=settings.DEV_AUTH_EMAIL,
        hashed_password=get_password_hash(settings.DEV_AUTH_PASSWORD),
        full_name="Dev User",
        role=settings.DEV_AUTH_ROLE,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the acting user from the JWT bearer token.

    Raises 401 when the token is missing, invalid or points at a deleted
    user, and 403 when the account has been deactivated by an admin.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if settings.DISABLE_AUTH:
        # Dev bypass returns a real user so ownership checks still work.
        return _get_or_create_dev_user(db)

    if token is None:
        raise credentials_exception

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id_str = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    try:
        user_id: int = int(user_id_str)
    except (ValueError, TypeError):
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow the request through only for admin users"""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
