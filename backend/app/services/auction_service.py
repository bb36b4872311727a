import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from app.core.config import settings
from app.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from app.models.activity import Activity
from app.models.auction import Auction
from app.models.bid import Bid
from app.services.media_service import media_service
from app.utils.time_utils import parse_timestamp, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

AUCTION_NOT_FOUND_MESSAGE = "Auction not found"
NOT_OWNER_MESSAGE = "Unauthorized: You are not the owner of this auction"

# Request keys a seller may change, mapped to auction columns
UPDATABLE_FIELDS = {
    "itemName": "item_name",
    "description": "description",
    "category": "category",
    "closingTime": "closing_time",
    "startingBid": "starting_bid",
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(raw: Any, message: str) -> float:
    """Parse a money amount, rejecting non-numeric, non-finite and negative values"""
    if isinstance(raw, bool):
        raise ValidationError(message)
    try:
        amount = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if not math.isfinite(amount) or amount < 0:
        raise ValidationError(message)
    return amount


def parse_closing_time(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return to_naive_utc(raw)
    parsed = parse_timestamp(raw) if isinstance(raw, str) else None
    if parsed is None:
        raise ValidationError("Invalid closingTime value")
    return parsed


def parse_category(raw: Any) -> str:
    category = raw.strip() if isinstance(raw, str) else ""
    if not category:
        raise ValidationError("Category is required")
    return category


class AuctionService:
    @staticmethod
    def get_auction(db: Session, auction_id: int) -> Auction:
        """Get a single auction or raise NotFound"""
        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        if not auction:
            raise NotFound(AUCTION_NOT_FOUND_MESSAGE)
        return auction

    @staticmethod
    def list_auctions(db: Session) -> List[Auction]:
        """All auctions, oldest first. Filtering and paging happen client-side."""
        return db.query(Auction).order_by(Auction.id).all()

    @staticmethod
    def _get_owned_auction(db: Session, requester_id: int, auction_id: int) -> Auction:
        auction = AuctionService.get_auction(db, auction_id)
        if auction.seller_id != requester_id:
            raise Forbidden(NOT_OWNER_MESSAGE)
        return auction

    @staticmethod
    async def create_auction(
        db: Session,
        seller_id: int,
        item_name: Optional[str],
        description: Optional[str],
        starting_bid: Optional[str],
        closing_time: Optional[str],
        category: Optional[str],
        images: Optional[List[UploadFile]] = None,
        model_3d: Optional[List[UploadFile]] = None,
    ) -> Auction:
        """
        Validate a new listing, store its media and create the auction.

        Fields are checked before any file is written, and stored files are
        removed again if the database insert fails.
        """
        if any(_is_blank(v) for v in (item_name, description, starting_bid, closing_time, category)):
            raise ValidationError("All required fields must be provided")

        bid = parse_amount(starting_bid, "Invalid startingBid value")
        closes_at = parse_closing_time(closing_time)
        category = parse_category(category)

        media = await media_service.store_auction_media(images, model_3d)

        auction = Auction(
            item_name=item_name,
            description=description,
            category=category,
            closing_time=closes_at,
            starting_bid=bid,
            current_bid=bid,
            highest_bidder_id=None,
            seller_id=seller_id,
            is_closed=False,
            **media,
        )
        try:
            db.add(auction)
            db.commit()
            db.refresh(auction)
        except SQLAlchemyError:
            db.rollback()
            media_service.delete_media([path for path in media.values() if path])
            raise

        logger.info(f"Auction {auction.id} posted by user {seller_id}")
        return auction

    @staticmethod
    def update_auction(
        db: Session,
        requester_id: int,
        auction_id: int,
        patch: Dict[str, Any],
    ) -> Auction:
        """
        Apply a seller's changes to listing metadata.

        Ownership is checked before the payload is looked at. Bid state,
        seller, media and the closed flag cannot be changed here, and the
        starting bid only while nobody has bid yet.
        """
        auction = AuctionService._get_owned_auction(db, requester_id, auction_id)

        if not isinstance(patch, dict):
            raise ValidationError("Request body must be an object")

        rejected = sorted(key for key in patch if key not in UPDATABLE_FIELDS)
        if rejected:
            raise ValidationError(f"Fields cannot be updated: {', '.join(rejected)}")

        if auction.is_closed:
            raise ValidationError("Auction is closed")

        changes: Dict[str, Any] = {}
        for key, value in patch.items():
            column = UPDATABLE_FIELDS[key]
            if column in ("item_name", "description"):
                if _is_blank(value) or not isinstance(value, str):
                    raise ValidationError(f"{key} must be a non-empty string")
                changes[column] = value
            elif column == "category":
                changes[column] = parse_category(value)
            elif column == "closing_time":
                changes[column] = parse_closing_time(value)
            elif column == "starting_bid":
                if auction.highest_bidder_id is not None or auction.bids:
                    raise ValidationError("startingBid cannot be changed after bidding has started")
                amount = parse_amount(value, "Invalid startingBid value")
                changes["starting_bid"] = amount
                changes["current_bid"] = amount

        # Everything is validated before the record is touched
        for column, value in changes.items():
            setattr(auction, column, value)

        db.commit()
        db.refresh(auction)
        logger.info(f"Auction {auction.id} updated by seller {requester_id}: {sorted(patch)}")
        return auction

    @staticmethod
    def delete_auction(db: Session, requester_id: int, auction_id: int) -> None:
        """
        Delete an auction together with its bid ledger.

        User auction lists are derived from auctions and bids, so nothing else
        needs retracting. Media files are removed once the delete is committed.
        """
        auction = AuctionService._get_owned_auction(db, requester_id, auction_id)
        media_paths = auction.media_paths()

        db.delete(auction)
        db.commit()

        media_service.delete_media(media_paths)
        logger.info(f"Auction {auction_id} deleted by seller {requester_id}")

    @staticmethod
    def _load_auction(db: Session, auction_id: int) -> Optional[Auction]:
        return db.query(Auction).filter(Auction.id == auction_id).first()

    @staticmethod
    def place_bid(db: Session, bidder_id: int, auction_id: int, amount: Any) -> Auction:
        """
        Place a bid strictly above the current bid.

        The write is a compare-and-set on current_bid: it only lands if the
        stored bid still equals the value read. When another bid got in first
        the auction is re-read; if that bid already matches or beats ours the
        caller gets a Conflict, otherwise the write is retried.
        """
        amount = parse_amount(amount, "Invalid bid value")

        for attempt in range(settings.BID_MAX_RETRIES):
            auction = AuctionService._load_auction(db, auction_id)
            if auction is None:
                raise NotFound(AUCTION_NOT_FOUND_MESSAGE)

            if auction.is_closed or auction.closing_time <= utcnow():
                raise ValidationError("Auction is closed")

            if amount <= auction.current_bid:
                if attempt == 0:
                    raise ValidationError("Bid must be higher than current bid")
                raise Conflict("Bid was outbid by a concurrent bid")

            read_bid = auction.current_bid
            item_name = auction.item_name

            updated = db.query(Auction).filter(
                Auction.id == auction_id,
                Auction.current_bid == read_bid,
                Auction.is_closed.is_(False),
            ).update(
                {
                    Auction.current_bid: amount,
                    Auction.highest_bidder_id: bidder_id,
                    Auction.updated_at: func.now(),
                },
                synchronize_session=False,
            )

            if updated == 1:
                db.add(Bid(auction_id=auction_id, bidder_id=bidder_id, amount=amount))
                db.add(Activity(user_id=bidder_id, description=f"Placed a bid on {item_name}"))
                db.commit()
                logger.info(f"User {bidder_id} bid {amount} on auction {auction_id}")
                return AuctionService.get_auction(db, auction_id)

            # Lost the race; end the transaction so the next read sees the winner's write
            db.rollback()
            logger.warning(
                f"Bid of {amount} on auction {auction_id} lost a concurrent update "
                f"(attempt {attempt + 1}/{settings.BID_MAX_RETRIES})"
            )

        raise Conflict("Bid could not be placed because of concurrent bids, please retry")

    @staticmethod
    def close_expired_auctions(db: Session, now: Optional[datetime] = None) -> int:
        """
        Close open auctions whose closing time has passed.

        The highest bidder at close becomes the winner. Each close is guarded
        by the current_bid value read, so an auction that takes a bid while the
        sweep runs is left for the next sweep instead of losing that bid.
        """
        now = now or utcnow()
        expired = db.query(Auction).filter(
            Auction.is_closed.is_(False),
            Auction.closing_time <= now,
        ).all()

        closed = 0
        for auction in expired:
            winner_id = auction.highest_bidder_id
            updated = db.query(Auction).filter(
                Auction.id == auction.id,
                Auction.is_closed.is_(False),
                Auction.current_bid == auction.current_bid,
            ).update(
                {Auction.is_closed: True, Auction.winner_id: winner_id},
                synchronize_session=False,
            )
            if not updated:
                logger.info(f"Auction {auction.id} changed during close, retrying next sweep")
                continue

            if winner_id is not None:
                db.add(Activity(user_id=winner_id, description=f"Won the auction for {auction.item_name}"))
            closed += 1

        db.commit()
        return closed


auction_service = AuctionService()
