from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time_utils import utcnow


class Activity(Base):
    """One entry of a user's recent activity feed"""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    description = Column(String, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="activities")
