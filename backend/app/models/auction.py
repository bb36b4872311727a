from sqlalchemy import Column, Integer, String, Text, Float, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class Auction(Base):
    """
    Auction listing.

    current_bid starts at starting_bid and only ever increases; bids write it
    with a compare-and-set update (see AuctionService.place_bid).
    closing_time is stored as naive UTC.
    """
    __tablename__ = "auctions"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    closing_time = Column(DateTime, nullable=False, index=True)

    starting_bid = Column(Float, nullable=False)
    current_bid = Column(Float, nullable=False)
    highest_bidder_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Seller never changes after creation
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Public paths of stored media, see MediaService
    image_required = Column(String, nullable=True)
    image_optional1 = Column(String, nullable=True)
    image_optional2 = Column(String, nullable=True)
    image_optional3 = Column(String, nullable=True)
    model_3d = Column(String, nullable=True)

    is_closed = Column(Boolean, nullable=False, default=False)
    # Set by the closing sweep to the highest bidder at close time
    winner_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    seller = relationship("User", foreign_keys=[seller_id])
    highest_bidder = relationship("User", foreign_keys=[highest_bidder_id])
    winner = relationship("User", foreign_keys=[winner_id])
    # Bid ledger rows go away with the auction
    bids = relationship(
        "Bid",
        back_populates="auction",
        order_by="Bid.id",
        cascade="all, delete-orphan",
    )

    def media_paths(self) -> list[str]:
        """All stored media paths of this auction"""
        paths = [
            self.image_required,
            self.image_optional1,
            self.image_optional2,
            self.image_optional3,
            self.model_3d,
        ]
        return [path for path in paths if path]
