from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from excel_analytics.core.database import Base


class User(Base):
    """
    Platform user.

    Uploads and analyses reference users by id; deleting a user removes
    their uploads and analyses in application code (see upload_service).
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Email is unique and indexed for fast lookups during login
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    # "user" or "admin" - admin unlocks the /api/admin routes
    role = Column(String, nullable=False, default="user")
    # is_active allows disabling accounts without removing data
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
