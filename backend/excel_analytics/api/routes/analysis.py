from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from excel_analytics.core.database import get_db
from excel_analytics.api.dependencies import get_current_user
from excel_analytics.api.schemas import AnalysisResponse, MessageResponse
from excel_analytics.models.user import User
from excel_analytics.services.analysis_service import analysis_service

router = APIRouter(prefix="/analysis", tags=["analysis"])

ChartType = Literal["bar", "line", "pie", "scatter", "3d-bar", "3d-scatter"]


class ChartConfig(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    show_legend: bool = True
    show_grid: bool = True
    animation: bool = True

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChartRequest(BaseModel):
    upload_id: int
    sheet_name: str
    chart_type: ChartType
    x_axis: str
    y_axis: str
    chart_config: Optional[ChartConfig] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExportRequest(BaseModel):
    format: str = Field(default="png", pattern=r"^[A-Za-z0-9]{1,10}$")


class ExportResponse(BaseModel):
    message: str
    exportData: Dict[str, Any]


class InsightsResponse(BaseModel):
    message: str
    insights: Dict[str, Any]


@router.post("/generate-chart", response_model=AnalysisResponse, status_code=201)
async def generate_chart(
    request: ChartRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Build chart data from two columns of an uploaded sheet and save it"""
    chart_config = request.chart_config.model_dump(by_alias=True) if request.chart_config else None
    return analysis_service.generate_chart(
        db,
        current_user.id,
        upload_id=request.upload_id,
        sheet_name=request.sheet_name,
        chart_type=request.chart_type,
        x_axis=request.x_axis,
        y_axis=request.y_axis,
        chart_config=chart_config,
    )


@router.get("/", response_model=List[AnalysisResponse])
async def list_analyses(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's analyses, newest first"""
    return analysis_service.list_analyses(db, current_user.id)


@router.get("/{analysis_id}", response_model=AnalysisResponse)
async def get_analysis(
    analysis_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return analysis_service.get_analysis(db, analysis_id, current_user.id)


@router.post("/{analysis_id}/export", response_model=ExportResponse)
async def export_chart(
    analysis_id: int,
    request: Optional[ExportRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Prepare chart data for a client-side export and log it in the
    analysis export history.
    """
    export_format = request.format if request else "png"
    analysis = analysis_service.get_analysis(db, analysis_id, current_user.id)
    export_data = analysis_service.record_export(db, analysis, export_format)
    return {"message": "Export data prepared", "exportData": export_data}


@router.post("/{analysis_id}/ai-insights", response_model=InsightsResponse)
async def generate_insights(
    analysis_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Summarize the chart data (max, min, average) and store the result"""
    analysis = analysis_service.get_analysis(db, analysis_id, current_user.id)
    insights = analysis_service.generate_insights(db, analysis)
    return {"message": "AI insights generated", "insights": insights}


@router.delete("/{analysis_id}", response_model=MessageResponse)
async def delete_analysis(
    analysis_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    analysis = analysis_service.get_analysis(db, analysis_id, current_user.id)
    analysis_service.delete_analysis(db, analysis)
    return {"message": "Analysis deleted successfully"}
