from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from excel_analytics.core.database import Base

# Chart types: bar, line, pie, scatter, 3d-bar, 3d-scatter (validated at the API)


class Analysis(Base):
    """
    A chart generated from one sheet of an upload.

    chart_data holds {labels, datasets} as produced by services.charts.
    export_history is append-only; always assign a new list so SQLAlchemy
    notices the change. ai_insights stays NULL until insights are generated.
    """
    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=False, index=True)
    sheet_name = Column(String, nullable=False)
    chart_type = Column(String, nullable=False)
    x_axis = Column(JSON, nullable=False)  # {"column": ..., "label": ...}
    y_axis = Column(JSON, nullable=False)
    chart_data = Column(JSON, nullable=False)
    chart_config = Column(JSON, nullable=False)
    export_history = Column(JSON, nullable=False, default=list)
    ai_insights = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", backref="analyses")
    upload = relationship("Upload", backref="analyses")
