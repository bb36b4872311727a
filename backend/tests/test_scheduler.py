from datetime import timedelta

from app.core import scheduler
from app.core.security import issue_token
from app.models.auction import Auction
from app.models.revoked_token import RevokedToken
from app.services.auction_service import auction_service
from app.services.token_service import token_service
from app.utils.time_utils import utcnow


def test_sweep_closes_expired_auction_and_records_winner(client, make_user, create_auction, db_session):
    _, seller_headers = make_user("seller@example.com")
    bidder_id, bidder_headers = make_user("bidder@example.com")
    auction_id = create_auction(seller_headers).json()["auction"]["id"]
    client.post(f"/api/bid/{auction_id}", json={"bid": 250}, headers=bidder_headers)

    closed = auction_service.close_expired_auctions(db_session, now=utcnow() + timedelta(days=2))

    assert closed == 1
    auction = client.get(f"/api/auctions/{auction_id}").json()
    assert auction["isClosed"] is True
    assert auction["winner"] == bidder_id
    assert auction["currentBid"] == 250

    won = client.get("/api/user/won-auctions", headers=bidder_headers).json()
    assert [a["id"] for a in won["wonAuctions"]] == [auction_id]
    profile = client.get("/api/profile", headers=bidder_headers).json()
    assert profile["recentActivity"][-1]["description"] == "Won the auction for Vintage Camera"

    # current bid is frozen once closed
    response = client.post(f"/api/bid/{auction_id}", json={"bid": 900}, headers=bidder_headers)
    assert response.status_code == 400
    assert client.get(f"/api/auctions/{auction_id}").json()["currentBid"] == 250


def test_sweep_leaves_open_auctions_alone(make_user, create_auction, db_session):
    _, headers = make_user("seller@example.com")
    create_auction(headers)

    assert auction_service.close_expired_auctions(db_session) == 0
    assert db_session.query(Auction).filter(Auction.is_closed.is_(True)).count() == 0


def test_sweep_job_closes_auction_without_bids(client, make_user, create_auction, db_session):
    _, headers = make_user("seller@example.com")
    auction_id = create_auction(headers, closingTime="2000-01-01T00:00:00Z").json()["auction"]["id"]

    scheduler.close_expired_auctions_job()

    auction = client.get(f"/api/auctions/{auction_id}").json()
    assert auction["isClosed"] is True
    assert auction["winner"] is None
    assert client.get("/api/user/won-auctions", headers=headers).json() == {"wonAuctions": []}


def test_closed_auction_cannot_be_updated(client, make_user, create_auction):
    _, headers = make_user("seller@example.com")
    auction_id = create_auction(headers, closingTime="2000-01-01T00:00:00Z").json()["auction"]["id"]
    scheduler.close_expired_auctions_job()

    response = client.put(f"/api/auction/{auction_id}", json={"itemName": "Too late"}, headers=headers)

    assert response.status_code == 400


def test_purge_drops_only_expired_revocations(db_session):
    active_token = issue_token(1)
    token_service.revoke(db_session, active_token)
    db_session.add(RevokedToken(jti="old", expires_at=utcnow() - timedelta(hours=1)))
    db_session.commit()

    scheduler.purge_revoked_tokens_job()

    db_session.expire_all()
    assert db_session.query(RevokedToken).count() == 1
    assert db_session.query(RevokedToken).filter(RevokedToken.jti == "old").count() == 0
    assert token_service.is_revoked(db_session, active_token)
