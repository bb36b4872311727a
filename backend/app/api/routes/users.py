from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.core.database import get_db
from app.api.dependencies import get_current_user_id
from app.api.schemas import AuctionResponse, CamelModel, SellerSummary
from app.services.user_service import user_service

router = APIRouter(tags=["users"])


class PostedAuctionsResponse(CamelModel):
    posted_auctions: List[AuctionResponse]


class ParticipatedAuctionsResponse(CamelModel):
    participated_auctions: List[AuctionResponse]


class WonAuctionsResponse(CamelModel):
    won_auctions: List[AuctionResponse]


@router.get("/users/{user_id}", response_model=SellerSummary)
def get_seller(user_id: str, db: Session = Depends(get_db)):
    """Public seller information"""
    return user_service.get_seller_profile(db, user_id)


# Each list is its own request so a failure in one never blocks the others

@router.get("/user/posted-auctions", response_model=PostedAuctionsResponse)
def list_posted_auctions(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"posted_auctions": user_service.posted_auctions(db, user_id)}


@router.get("/user/participated-auctions", response_model=ParticipatedAuctionsResponse)
def list_participated_auctions(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"participated_auctions": user_service.participated_auctions(db, user_id)}


@router.get("/user/won-auctions", response_model=WonAuctionsResponse)
def list_won_auctions(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"won_auctions": user_service.won_auctions(db, user_id)}
