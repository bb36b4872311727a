"""Response models shared by the route modules. JSON keys are camelCase."""

from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel
from app.utils.time_utils import as_utc_isoformat


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(CamelModel):
    message: str


class SellerSummary(CamelModel):
    id: int
    full_name: str
    email: str
    created_at: Optional[datetime] = None

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return as_utc_isoformat(value)


class AuctionResponse(CamelModel):
    id: int
    item_name: str
    description: str
    category: str
    starting_bid: float
    current_bid: float
    highest_bidder: Optional[int] = Field(None, validation_alias="highest_bidder_id")
    closing_time: datetime
    seller: int = Field(validation_alias="seller_id")
    image_required: Optional[str] = None
    image_optional1: Optional[str] = None
    image_optional2: Optional[str] = None
    image_optional3: Optional[str] = None
    model_3d: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("model_3d", "model3D"),
        serialization_alias="model3D",
    )
    is_closed: bool
    winner: Optional[int] = Field(None, validation_alias="winner_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer('closing_time', 'created_at', 'updated_at')
    def serialize_timestamps(self, value: Optional[datetime], _info):
        return as_utc_isoformat(value)


class AuctionDetailResponse(AuctionResponse):
    """Auction with the seller's public identity resolved"""
    seller: SellerSummary = Field(validation_alias="seller")


class AuctionEnvelope(CamelModel):
    message: str
    auction: AuctionResponse


class AuctionSummary(CamelModel):
    id: int
    item_name: str
    current_bid: float


class ActivityResponse(CamelModel):
    description: str
    date: datetime

    @field_serializer('date')
    def serialize_date(self, value: datetime, _info):
        return as_utc_isoformat(value)


class ProfileResponse(CamelModel):
    id: int
    full_name: str
    email: str
    phone: str
    location: str
    created_at: Optional[datetime] = None
    posted_auctions: List[AuctionSummary]
    participated_auctions: List[AuctionSummary]
    won_auctions: List[AuctionSummary]
    recent_activity: List[ActivityResponse]

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return as_utc_isoformat(value)
