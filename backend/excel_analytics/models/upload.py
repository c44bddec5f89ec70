from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, BigInteger, JSON, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from excel_analytics.core.database import Base


class Upload(Base):
    """
    Upload model representing one user-submitted workbook.

    The workbook itself lives on disk; this row keeps its metadata plus the
    sheet previews built at ingestion time. Each entry of `sheets` is a
    JSON document with camelCase keys so it can be handed to the chart
    client untouched:

        {"name": ..., "rowCount": ..., "columnCount": ...,
         "headers": [...], "data": [[...], ...]}
    """
    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # filename is the generated unique filename on disk
    filename = Column(String, nullable=False)
    # original_filename is what the user uploaded (for display purposes)
    original_filename = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String, nullable=False)
    # uploaded -> processing -> processed | error
    status = Column(String, nullable=False, default="uploaded")
    sheets = Column(JSON, nullable=False, default=list)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="uploads")

    def get_sheet(self, sheet_name: str) -> dict | None:
        """Return the stored preview for a sheet name, or None"""
        for sheet in self.sheets or []:
            if sheet.get("name") == sheet_name:
                return sheet
        return None
