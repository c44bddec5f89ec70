import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from excel_analytics.core.exceptions import NotFoundError
from excel_analytics.models.analysis import Analysis
from excel_analytics.models.upload import Upload
from excel_analytics.services.charts import derive_chart_data
from excel_analytics.services.insights import summarize_chart_data
from excel_analytics.services.upload_service import upload_service

logger = logging.getLogger(__name__)

ANALYSIS_NOT_FOUND_MESSAGE = "Analysis not found"


def default_chart_config(upload: Upload, x_axis: str, y_axis: str) -> Dict[str, Any]:
    return {
        "title": f"{y_axis} vs {x_axis}",
        "subtitle": f"Chart from {upload.original_filename}",
        "showLegend": True,
        "showGrid": True,
        "animation": True,
    }


class AnalysisService:
    @staticmethod
    def generate_chart(
        db: Session,
        user_id: int,
        upload_id: int,
        sheet_name: str,
        chart_type: str,
        x_axis: str,
        y_axis: str,
        chart_config: Optional[Dict[str, Any]] = None,
    ) -> Analysis:
        """
        Derive chart data from a stored sheet preview and save it as an analysis.

        Chart data is recomputed from the preview on every call; an unknown
        column raises before anything is written.
        """
        upload = upload_service.get_upload(db, upload_id, user_id)

        sheet = upload.get_sheet(sheet_name)
        if sheet is None:
            raise NotFoundError("Sheet not found")

        chart_data = derive_chart_data(sheet, x_axis, y_axis, chart_type)

        analysis = Analysis(
            user_id=user_id,
            upload_id=upload.id,
            sheet_name=sheet_name,
            chart_type=chart_type,
            x_axis={"column": x_axis, "label": x_axis},
            y_axis={"column": y_axis, "label": y_axis},
            chart_data=chart_data,
            chart_config=chart_config or default_chart_config(upload, x_axis, y_axis),
            export_history=[],
        )
        db.add(analysis)
        db.commit()
        db.refresh(analysis)

        logger.info(
            f"Generated {chart_type} chart {analysis.id} from upload {upload.id} "
            f"sheet '{sheet_name}' ({len(chart_data['labels'])} points)"
        )
        return analysis

    @staticmethod
    def get_analysis(db: Session, analysis_id: int, user_id: int | None = None) -> Analysis:
        query = db.query(Analysis).filter(Analysis.id == analysis_id)
        if user_id is not None:
            query = query.filter(Analysis.user_id == user_id)
        analysis = query.first()
        if not analysis:
            raise NotFoundError(ANALYSIS_NOT_FOUND_MESSAGE)
        return analysis

    @staticmethod
    def list_analyses(db: Session, user_id: int | None = None) -> List[Analysis]:
        query = db.query(Analysis)
        if user_id is not None:
            query = query.filter(Analysis.user_id == user_id)
        return query.order_by(Analysis.created_at.desc(), Analysis.id.desc()).all()

    @staticmethod
    def record_export(db: Session, analysis: Analysis, export_format: str = "png") -> Dict[str, Any]:
        """Append an export entry and return the payload the client renders from"""
        file_name = f"chart-{analysis.id}.{export_format}"
        entry = {
            "format": export_format,
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "fileName": file_name,
        }
        # New list, so the JSON column is flagged dirty
        analysis.export_history = [*(analysis.export_history or []), entry]
        db.commit()
        db.refresh(analysis)

        return {
            "format": export_format,
            "chartData": analysis.chart_data,
            "chartConfig": analysis.chart_config,
            "chartType": analysis.chart_type,
            "fileName": file_name,
        }

    @staticmethod
    def generate_insights(db: Session, analysis: Analysis) -> Dict[str, Any]:
        y_label = (analysis.y_axis or {}).get("label", "")
        analysis.ai_insights = summarize_chart_data(analysis.chart_data, y_label)
        db.commit()
        db.refresh(analysis)
        return analysis.ai_insights

    @staticmethod
    def delete_analysis(db: Session, analysis: Analysis) -> None:
        db.delete(analysis)
        db.commit()


analysis_service = AnalysisService()
