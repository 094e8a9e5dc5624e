from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class ConsoleSession(Base):
    """
    Server-side stand-in for the browser's local storage.
    auth_token and user_data hold what the web client kept under
    luvrix_auth_token and luvrix_user_data.
    """
    __tablename__ = "console_sessions"
    id = Column(Integer, primary_key=True, index=True)
    session_hash = Column(String, unique=True, index=True, nullable=False)

    auth_token = Column(Text, nullable=False)
    user_data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_verified_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
