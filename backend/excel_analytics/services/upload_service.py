import logging
from pathlib import Path
from typing import List

from fastapi import UploadFile, HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from excel_analytics.core.exceptions import AnalyticsError, NotFoundError
from excel_analytics.models.analysis import Analysis
from excel_analytics.models.upload import Upload
from excel_analytics.models.user import User
from excel_analytics.services.ingestion import ingest_workbook
from excel_analytics.storage.local_storage import storage

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
    ".xls": "application/vnd.ms-excel",
}

UPLOAD_NOT_FOUND_MESSAGE = "Upload not found"


class UploadService:
    @staticmethod
    async def upload_file(db: Session, user_id: int, file: UploadFile) -> Upload:
        """
        Store a workbook, build its sheet previews and record the upload.

        The stored file is removed again whenever ingestion or the database
        insert fails, so a rejected upload leaves nothing behind.
        """
        if not file or not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")

        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in MIME_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Only Excel files are allowed: {', '.join(MIME_TYPES)}"
            )

        file_path, filename, file_size = await storage.save_file(file, user_id)

        try:
            sheets = ingest_workbook(file_path)
        except AnalyticsError as e:
            logger.info(f"Rejected upload '{file.filename}' for user {user_id}: {e.message}")
            storage.delete_path(file_path)
            raise

        db_upload = Upload(
            user_id=user_id,
            filename=filename,
            original_filename=file.filename,
            file_path=file_path,
            file_size=file_size,
            mime_type=MIME_TYPES[file_ext],
            status="processed",
            sheets=sheets,
        )
        try:
            db.add(db_upload)
            db.commit()
            db.refresh(db_upload)
        except SQLAlchemyError:
            db.rollback()
            storage.delete_path(file_path)
            logger.exception(f"Could not save upload record for '{file.filename}'")
            raise HTTPException(status_code=500, detail="File upload failed")

        logger.info(
            f"Processed upload {db_upload.id} ('{file.filename}', {file_size} bytes, "
            f"{len(sheets)} sheet(s)) for user {user_id}"
        )
        return db_upload

    @staticmethod
    def get_upload(db: Session, upload_id: int, user_id: int | None = None) -> Upload:
        """Fetch an upload, scoped to its owner unless user_id is None"""
        query = db.query(Upload).filter(Upload.id == upload_id)
        if user_id is not None:
            query = query.filter(Upload.user_id == user_id)
        upload = query.first()
        if not upload:
            raise NotFoundError(UPLOAD_NOT_FOUND_MESSAGE)
        return upload

    @staticmethod
    def list_uploads(db: Session, user_id: int | None = None) -> List[Upload]:
        query = db.query(Upload)
        if user_id is not None:
            query = query.filter(Upload.user_id == user_id)
        return query.order_by(Upload.created_at.desc(), Upload.id.desc()).all()

    @staticmethod
    def delete_upload(db: Session, upload: Upload) -> int:
        """
        Delete an upload, its analyses and its stored file.

        Returns the number of analyses removed. The file is removed after
        the commit; if that fails the scheduler's orphan sweep picks it up.
        """
        analyses = db.query(Analysis).filter(Analysis.upload_id == upload.id).all()
        for analysis in analyses:
            db.delete(analysis)
        file_path = upload.file_path
        db.delete(upload)
        db.commit()

        storage.delete_path(file_path)
        logger.info(f"Deleted upload {upload.id} and {len(analyses)} analyses")
        return len(analyses)

    @staticmethod
    def delete_user(db: Session, user: User) -> None:
        """Delete a user together with all of their uploads, analyses and files"""
        uploads = db.query(Upload).filter(Upload.user_id == user.id).all()
        upload_ids = [upload.id for upload in uploads]
        analyses = db.query(Analysis).filter(
            or_(Analysis.user_id == user.id, Analysis.upload_id.in_(upload_ids))
        ).all()
        file_paths = [upload.file_path for upload in uploads]

        for analysis in analyses:
            db.delete(analysis)
        for upload in uploads:
            db.delete(upload)
        db.delete(user)
        db.commit()

        for file_path in file_paths:
            storage.delete_path(file_path)
        logger.info(f"Deleted user {user.id} with {len(uploads)} uploads and {len(analyses)} analyses")


upload_service = UploadService()
