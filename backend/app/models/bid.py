from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time_utils import utcnow


class Bid(Base):
    """
    Ledger of accepted bids.

    A user's participated auctions are the distinct auctions they have rows for.
    """
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True, index=True)
    auction_id = Column(Integer, ForeignKey("auctions.id", ondelete="CASCADE"), nullable=False, index=True)
    bidder_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    auction = relationship("Auction", back_populates="bids")
    bidder = relationship("User")
