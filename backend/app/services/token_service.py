import logging
from datetime import datetime, timezone
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from app.core.security import decode_access_token
from app.models.revoked_token import RevokedToken
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class TokenService:
    """Database-backed store of access tokens invalidated by logout"""

    @staticmethod
    def revoke(db: Session, token: str) -> bool:
        """Record a token as revoked. Returns False for tokens that do not verify."""
        payload = decode_access_token(token)
        if payload is None or not payload.get("jti"):
            return False

        jti = payload["jti"]
        if db.query(RevokedToken).filter(RevokedToken.jti == jti).first():
            return True

        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)
        db.add(RevokedToken(jti=jti, expires_at=expires_at))
        db.commit()
        logger.info(f"Revoked access token for user {payload.get('sub')}")
        return True

    @staticmethod
    def is_revoked(db: Session, token: str) -> bool:
        """Check a token against the revocation store, regardless of its signature"""
        try:
            payload = jwt.get_unverified_claims(token)
        except JWTError:
            return False
        if not payload.get("jti"):
            return False
        return db.query(RevokedToken).filter(
            RevokedToken.jti == payload["jti"]
        ).first() is not None

    @staticmethod
    def purge_expired(db: Session) -> int:
        """Delete revocations of tokens that have expired on their own"""
        deleted = db.query(RevokedToken).filter(
            RevokedToken.expires_at <= utcnow()
        ).delete(synchronize_session=False)
        db.commit()
        return deleted


token_service = TokenService()
