from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class User(Base):
    """
    User model representing marketplace members.

    Stores credentials and contact details. The posted, participated and won
    auction lists are not stored here; they are derived from the auctions and
    bids tables so that deleting an auction never leaves stale references.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Email is unique and indexed for fast lookups during signin
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    # Password is hashed using bcrypt - never store plaintext passwords
    hashed_password = Column(String, nullable=False)
    phone = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Append-only activity log, oldest first
    activities = relationship(
        "Activity",
        back_populates="user",
        order_by="Activity.id",
        cascade="all, delete-orphan",
    )
