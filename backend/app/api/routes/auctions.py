from fastapi import APIRouter, Body, Depends, File, Form, Path, UploadFile, status
from sqlalchemy.orm import Session
from typing import Annotated, Any, Dict, List, Optional
from pydantic import Field
from app.core.database import MAX_INTEGER_ID, get_db
from app.api.dependencies import get_current_user_id
from app.api.schemas import (
    AuctionDetailResponse,
    AuctionEnvelope,
    AuctionResponse,
    CamelModel,
    MessageResponse,
)
from app.services.auction_service import auction_service

router = APIRouter(tags=["auctions"])

# Ids outside the column range are rejected as malformed instead of reaching the database
AuctionId = Annotated[int, Path(ge=1, le=MAX_INTEGER_ID)]


class BidRequest(CamelModel):
    bid: float = Field(allow_inf_nan=False)


@router.post("/auction", response_model=AuctionEnvelope, status_code=status.HTTP_201_CREATED)
async def create_auction(
    item_name: Optional[str] = Form(None, alias="itemName"),
    description: Optional[str] = Form(None),
    starting_bid: Optional[str] = Form(None, alias="startingBid"),
    closing_time: Optional[str] = Form(None, alias="closingTime"),
    category: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    model_3d: Optional[List[UploadFile]] = File(None, alias="model3D"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Post an auction with up to five images and an optional 3D model"""
    # async because uploads are read with await; every other handler is sync
    # Fields stay optional here so missing ones get the service's validation message
    auction = await auction_service.create_auction(
        db,
        seller_id=user_id,
        item_name=item_name,
        description=description,
        starting_bid=starting_bid,
        closing_time=closing_time,
        category=category,
        images=images,
        model_3d=model_3d,
    )
    return {"message": "Auction created successfully", "auction": auction}


@router.put("/auction/{auction_id}", response_model=AuctionEnvelope)
def update_auction(
    auction_id: AuctionId,
    patch: Dict[str, Any] = Body(...),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update an auction (seller only)"""
    auction = auction_service.update_auction(db, user_id, auction_id, patch)
    return {"message": "Auction updated successfully", "auction": auction}


@router.delete("/auction/{auction_id}", response_model=MessageResponse)
def delete_auction(
    auction_id: AuctionId,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete an auction (seller only)"""
    auction_service.delete_auction(db, user_id, auction_id)
    return {"message": "Auction deleted successfully"}


@router.get("/auctions", response_model=List[AuctionResponse])
def list_auctions(db: Session = Depends(get_db)):
    """List all auctions"""
    return auction_service.list_auctions(db)


@router.get("/auctions/{auction_id}", response_model=AuctionDetailResponse)
def get_auction(auction_id: AuctionId, db: Session = Depends(get_db)):
    """Get an auction with its seller"""
    return auction_service.get_auction(db, auction_id)


@router.post("/bid/{auction_id}", response_model=AuctionEnvelope)
def place_bid(
    auction_id: AuctionId,
    bid_request: BidRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Place a bid higher than the current bid"""
    auction = auction_service.place_bid(db, user_id, auction_id, bid_request.bid)
    return {"message": "Bid placed successfully", "auction": auction}
