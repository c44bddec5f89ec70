from fastapi import APIRouter, Depends, UploadFile, File as FastAPIFile
from sqlalchemy.orm import Session
from typing import List
from excel_analytics.core.database import get_db
from excel_analytics.api.dependencies import get_current_user
from excel_analytics.api.schemas import MessageResponse, UploadResponse
from excel_analytics.models.user import User
from excel_analytics.services.upload_service import upload_service

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/", response_model=UploadResponse, status_code=201)
async def upload_file(
    file: UploadFile = FastAPIFile(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Upload an Excel workbook and build its sheet previews"""
    return await upload_service.upload_file(db, current_user.id, file)


@router.get("/", response_model=List[UploadResponse])
async def list_uploads(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's uploads, newest first"""
    return upload_service.list_uploads(db, current_user.id)


@router.get("/{upload_id}", response_model=UploadResponse)
async def get_upload(
    upload_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single upload with its sheet previews"""
    return upload_service.get_upload(db, upload_id, current_user.id)


@router.delete("/{upload_id}", response_model=MessageResponse)
async def delete_upload(
    upload_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete an upload.
    Analyses generated from it and the stored workbook are removed too.
    """
    upload = upload_service.get_upload(db, upload_id, current_user.id)
    upload_service.delete_upload(db, upload)
    return {"message": "Upload deleted successfully"}
