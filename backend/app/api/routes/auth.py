from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import EmailStr
from app.core.database import get_db
from app.api.dependencies import get_bearer_token, get_current_user_id
from app.api.schemas import CamelModel, MessageResponse, ProfileResponse
from app.services.token_service import token_service
from app.services.user_service import user_service

router = APIRouter(tags=["auth"])


class UserCreate(CamelModel):
    full_name: str
    email: EmailStr
    password: str
    phone: str | None = None
    location: str | None = None


class SigninRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class Token(CamelModel):
    message: str
    token: str
    token_type: str = "bearer"


@router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    user_service.signup(
        db,
        full_name=user_data.full_name,
        email=user_data.email,
        password=user_data.password,
        phone=user_data.phone,
        location=user_data.location,
    )
    return {"message": "User registered successfully"}


@router.post("/signin", response_model=Token)
def signin(credentials: SigninRequest, db: Session = Depends(get_db)):
    """Sign in and get an access token"""
    token = user_service.signin(db, credentials.email, credentials.password)
    return {"message": "Signin successful", "token": token, "token_type": "bearer"}


@router.post("/logout", response_model=MessageResponse)
def logout(
    user_id: int = Depends(get_current_user_id),
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db)
):
    """Invalidate the current access token"""
    token_service.revoke(db, token)
    return {"message": "Logged out successfully"}


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Current user with activity and auction lists"""
    return user_service.get_profile(db, user_id)
