from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Literal
from pydantic import BaseModel, StrictBool
from excel_analytics.core.database import get_db
from excel_analytics.core.exceptions import NotFoundError
from excel_analytics.api.dependencies import require_admin
from excel_analytics.api.schemas import AnalysisResponse, MessageResponse, UploadResponse, UserSummary
from excel_analytics.models.user import User
from excel_analytics.services.admin_service import admin_service
from excel_analytics.services.analysis_service import analysis_service
from excel_analytics.services.upload_service import upload_service

# Every route here requires an admin user
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

USER_NOT_FOUND_MESSAGE = "User not found"


class UserStatusUpdate(BaseModel):
    isActive: StrictBool


class UserRoleUpdate(BaseModel):
    role: Literal["user", "admin"]


class UserActivity(BaseModel):
    uploads: List[UploadResponse]
    analyses: List[AnalysisResponse]


class UserDetailResponse(BaseModel):
    user: UserSummary
    activity: UserActivity


class UserUpdateResponse(BaseModel):
    message: str
    user: UserSummary


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(USER_NOT_FOUND_MESSAGE)
    return user


@router.get("/stats")
async def platform_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Platform totals, recent uploads and chart type usage"""
    return admin_service.platform_stats(db)


@router.get("/users", response_model=List[UserSummary])
async def list_users(
    search: str = Query("", description="Case-insensitive match on name or email"),
    db: Session = Depends(get_db)
):
    return admin_service.search_users(db, search)


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user_details(user_id: int, db: Session = Depends(get_db)):
    """A user together with their latest uploads and analyses"""
    user = _get_user(db, user_id)
    return {"user": user, "activity": admin_service.user_activity(db, user_id)}


@router.patch("/users/{user_id}/status", response_model=UserUpdateResponse)
async def update_user_status(
    user_id: int,
    update: UserStatusUpdate,
    db: Session = Depends(get_db)
):
    """Activate or deactivate a user"""
    user = _get_user(db, user_id)
    user.is_active = update.isActive
    db.commit()
    db.refresh(user)
    state = "activated" if update.isActive else "deactivated"
    return {"message": f"User {state} successfully", "user": user}


@router.patch("/users/{user_id}/role", response_model=UserUpdateResponse)
async def update_user_role(
    user_id: int,
    update: UserRoleUpdate,
    db: Session = Depends(get_db)
):
    user = _get_user(db, user_id)
    user.role = update.role
    db.commit()
    db.refresh(user)
    return {"message": "User role updated successfully", "user": user}


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a user and all of their uploads, analyses and stored files"""
    user = _get_user(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete their own account")
    upload_service.delete_user(db, user)
    return {"message": "User and all associated data deleted successfully"}


@router.get("/uploads", response_model=List[UploadResponse])
async def list_all_uploads(db: Session = Depends(get_db)):
    return upload_service.list_uploads(db)


@router.get("/analyses", response_model=List[AnalysisResponse])
async def list_all_analyses(db: Session = Depends(get_db)):
    return analysis_service.list_analyses(db)


@router.delete("/uploads/{upload_id}", response_model=MessageResponse)
async def delete_any_upload(upload_id: int, db: Session = Depends(get_db)):
    """Delete any user's upload along with its analyses and stored file"""
    upload = upload_service.get_upload(db, upload_id)
    upload_service.delete_upload(db, upload)
    return {"message": "Upload and related data deleted successfully"}
