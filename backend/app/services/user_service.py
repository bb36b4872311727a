import logging
import unicodedata
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.exceptions import InternalError, NotFound, ValidationError
from app.core.database import MAX_INTEGER_ID
from app.core.security import (
    MAX_PASSWORD_BYTES,
    get_password_hash,
    issue_token,
    password_too_long,
    verify_password,
)
from app.models.activity import Activity
from app.models.auction import Auction
from app.models.bid import Bid
from app.models.user import User

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def normalize_email(email: str) -> str:
    """Canonical form used both when storing and when looking up an email"""
    return unicodedata.normalize("NFC", email.strip()).lower()


class UserService:
    @staticmethod
    def signup(
        db: Session,
        full_name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        location: Optional[str] = None,
    ) -> User:
        """Register a new user with a hashed password"""
        if not full_name or not full_name.strip() or not email or not password:
            raise ValidationError("All required fields must be provided")
        if password_too_long(password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        email = normalize_email(email)

        # Explicit check gives a clearer error than the unique constraint
        if db.query(User).filter(User.email == email).first():
            raise ValidationError("Email already registered")

        try:
            user = User(
                full_name=full_name.strip(),
                email=email,
                hashed_password=get_password_hash(password),
                phone=phone or "",
                location=location or "",
            )
            user.activities.append(Activity(description="Joined the platform"))
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError:
            # Two concurrent signups with the same email both passed the check above
            db.rollback()
            raise ValidationError("Email already registered")
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Signup failed")
            raise InternalError("Database error occurred")

        logger.info(f"User {user.id} registered")
        return user

    @staticmethod
    def signin(db: Session, email: Optional[str], password: Optional[str]) -> str:
        """Check credentials and issue an access token"""
        if not email or not password:
            raise ValidationError("All fields are required")

        user = db.query(User).filter(User.email == normalize_email(email)).first()

        # Same message for unknown email and wrong password so accounts can't be probed.
        # Longer passwords were never accepted at signup, and bcrypt would
        # otherwise match them on their first 72 bytes.
        if not user or password_too_long(password) or not verify_password(password, user.hashed_password):
            logger.info("Signin rejected: invalid credentials")
            raise ValidationError(INVALID_CREDENTIALS_MESSAGE)

        return issue_token(user.id)

    @staticmethod
    def get_user(db: Session, user_id: int, message: str = USER_NOT_FOUND_MESSAGE) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound(message)
        return user

    @staticmethod
    def get_seller_profile(db: Session, raw_id: str) -> User:
        """Public profile of a user, looked up by an id taken from the URL"""
        if not raw_id.isascii() or not raw_id.isdigit() or not 0 < int(raw_id) <= MAX_INTEGER_ID:
            raise ValidationError("Invalid seller ID format")
        return UserService.get_user(db, int(raw_id), "Seller not found")

    @staticmethod
    def posted_auctions(db: Session, user_id: int) -> List[Auction]:
        UserService.get_user(db, user_id)
        return db.query(Auction).filter(
            Auction.seller_id == user_id
        ).order_by(Auction.id).all()

    @staticmethod
    def participated_auctions(db: Session, user_id: int) -> List[Auction]:
        """Auctions the user has bid on, each once, in order of the user's first bid"""
        UserService.get_user(db, user_id)
        return db.query(Auction).join(
            Bid, Bid.auction_id == Auction.id
        ).filter(
            Bid.bidder_id == user_id
        ).group_by(Auction.id).order_by(func.min(Bid.id)).all()

    @staticmethod
    def won_auctions(db: Session, user_id: int) -> List[Auction]:
        UserService.get_user(db, user_id)
        return db.query(Auction).filter(
            Auction.winner_id == user_id,
            Auction.is_closed.is_(True),
        ).order_by(Auction.id).all()

    @staticmethod
    def get_profile(db: Session, user_id: int) -> dict:
        """User with activity feed and the three auction lists"""
        user = UserService.get_user(db, user_id)
        return {
            "id": user.id,
            "full_name": user.full_name,
            "email": user.email,
            "phone": user.phone,
            "location": user.location,
            "created_at": user.created_at,
            "posted_auctions": UserService.posted_auctions(db, user_id),
            "participated_auctions": UserService.participated_auctions(db, user_id),
            "won_auctions": UserService.won_auctions(db, user_id),
            "recent_activity": user.activities,
        }


user_service = UserService()
