from typing import Any, Dict, List

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from excel_analytics.models.analysis import Analysis
from excel_analytics.models.upload import Upload
from excel_analytics.models.user import User

RECENT_UPLOADS_LIMIT = 5
USER_ACTIVITY_LIMIT = 10


class AdminService:
    @staticmethod
    def platform_stats(db: Session) -> Dict[str, Any]:
        """Platform-wide totals, latest uploads and chart type usage"""
        total_users = db.query(func.count(User.id)).scalar() or 0
        active_users = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0
        total_uploads = db.query(func.count(Upload.id)).scalar() or 0
        total_analyses = db.query(func.count(Analysis.id)).scalar() or 0
        storage_used = db.query(func.coalesce(func.sum(Upload.file_size), 0)).scalar() or 0

        recent_uploads = (
            db.query(Upload, User)
            .join(User, Upload.user_id == User.id)
            .order_by(Upload.created_at.desc(), Upload.id.desc())
            .limit(RECENT_UPLOADS_LIMIT)
            .all()
        )

        count_column = func.count(Analysis.id).label("count")
        chart_type_rows = (
            db.query(Analysis.chart_type, count_column)
            .group_by(Analysis.chart_type)
            .order_by(count_column.desc(), Analysis.chart_type)
            .all()
        )

        return {
            "platform": {
                "totalUsers": total_users,
                "activeUsers": active_users,
                "totalUploads": total_uploads,
                "totalAnalyses": total_analyses,
                "storageUsedMB": round(int(storage_used) / (1024 * 1024), 2),
            },
            "recentActivity": {
                "recentUploads": [
                    {
                        "id": upload.id,
                        "filename": upload.original_filename,
                        "user": user.full_name or user.email,
                        "uploadDate": upload.created_at.isoformat() if upload.created_at else None,
                    }
                    for upload, user in recent_uploads
                ]
            },
            "analytics": {
                "chartTypeStats": [
                    {"chartType": chart_type, "count": count}
                    for chart_type, count in chart_type_rows
                ]
            },
        }

    @staticmethod
    def search_users(db: Session, search: str = "") -> List[User]:
        """Users matching `search` in name or email (case-insensitive), newest first"""
        query = db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def user_activity(db: Session, user_id: int) -> Dict[str, List]:
        uploads = (
            db.query(Upload)
            .filter(Upload.user_id == user_id)
            .order_by(Upload.created_at.desc(), Upload.id.desc())
            .limit(USER_ACTIVITY_LIMIT)
            .all()
        )
        analyses = (
            db.query(Analysis)
            .filter(Analysis.user_id == user_id)
            .order_by(Analysis.created_at.desc(), Analysis.id.desc())
            .limit(USER_ACTIVITY_LIMIT)
            .all()
        )
        return {"uploads": uploads, "analyses": analyses}


admin_service = AdminService()
