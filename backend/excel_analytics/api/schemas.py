"""Response models shared by the user-facing and admin routers."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer


class SheetPreview(BaseModel):
    # Field names match the stored JSON document consumed by the chart client
    name: str
    rowCount: int
    columnCount: int
    headers: List[Any]
    data: List[List[Any]]


class UploadResponse(BaseModel):
    id: int
    user_id: int
    filename: str
    original_filename: str
    file_size: int
    mime_type: str
    status: str
    sheets: List[SheetPreview]
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class AxisDescriptor(BaseModel):
    column: str
    label: str


class AnalysisResponse(BaseModel):
    id: int
    user_id: int
    upload_id: int
    sheet_name: str
    chart_type: str
    x_axis: AxisDescriptor
    y_axis: AxisDescriptor
    chart_data: Dict[str, Any]
    chart_config: Dict[str, Any]
    export_history: List[Dict[str, Any]]
    ai_insights: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at', 'updated_at')
    def serialize_timestamps(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class UserSummary(BaseModel):
    id: int
    email: str
    full_name: Optional[str]
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class MessageResponse(BaseModel):
    message: str
