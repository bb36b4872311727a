from sqlalchemy import Column, Integer, String, DateTime
from app.core.database import Base


class RevokedToken(Base):
    """Access token invalidated by logout, kept until it would have expired anyway"""
    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
