"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Close expired auctions: Runs every CLOSING_SWEEP_SECONDS (60 by default)
- Purge expired token revocations: Runs every hour
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from app.core.config import settings
from app.core.database import SessionLocal
from app.services.auction_service import auction_service
from app.services.token_service import token_service
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def close_expired_auctions_job():
    """
    Background job that closes auctions past their closing time.

    The highest bidder at close is recorded as the winner.
    """
    db = SessionLocal()
    try:
        closed = auction_service.close_expired_auctions(db)
        if closed > 0:
            logger.info(f"Closing sweep completed: Closed {closed} auctions")
        else:
            logger.debug("Closing sweep completed: No expired auctions")
    except Exception as e:
        # Job errors must not kill the scheduler thread; the next run retries
        logger.error(f"Error in close_expired_auctions_job: {str(e)}")
        db.rollback()
    finally:
        db.close()


def purge_revoked_tokens_job():
    """Background job that drops revocations of tokens that have expired anyway"""
    db = SessionLocal()
    try:
        deleted = token_service.purge_expired(db)
        logger.info(f"Token purge completed: Removed {deleted} expired revocations")
    except Exception as e:
        logger.error(f"Error in purge_revoked_tokens_job: {str(e)}")
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """
    Start the background scheduler.

    This should be called when the FastAPI app starts.
    """
    if not scheduler.running:
        scheduler.add_job(
            close_expired_auctions_job,
            trigger=IntervalTrigger(seconds=settings.CLOSING_SWEEP_SECONDS),
            id="close_expired_auctions",
            name="Close expired auctions",
            replace_existing=True
        )
        scheduler.add_job(
            purge_revoked_tokens_job,
            trigger=IntervalTrigger(hours=1),
            id="purge_revoked_tokens",
            name="Purge expired token revocations",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            f"Background scheduler started. Closing sweep every {settings.CLOSING_SWEEP_SECONDS} seconds."
        )


def stop_scheduler():
    """
    Stop the background scheduler.

    This should be called when the FastAPI app shuts down.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
