from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import Forbidden, Unauthenticated
from app.core.security import verify_token
from app.services.token_service import token_service

# Extracts the token from "Authorization: Bearer <token>"
# auto_error=False so a missing token reaches our own 401 handling
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/signin", auto_error=False)


async def get_bearer_token(token: str | None = Depends(oauth2_scheme)) -> str:
    """The raw bearer token of the request, or 401 if there is none"""
    if not token:
        raise Unauthenticated()
    return token


def get_current_user_id(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db)
) -> int:
    """
    Resolve the authenticated user id from the bearer token.

    Revoked tokens are rejected with 401 whatever their signature says;
    tokens that fail verification (bad signature, expired) get 403.
    """
    if token_service.is_revoked(db, token):
        raise Unauthenticated("Invalid token. Please log in again.")

    user_id = verify_token(token)
    if user_id is None:
        raise Forbidden("Invalid token")

    return user_id

