"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Sweep orphaned workbooks: stored files with no matching upload row,
  left behind when a process dies between writing the file and
  committing (or deleting) its upload. Runs every CLEANUP_INTERVAL_HOURS.
"""

import logging
import time

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from excel_analytics.core.config import settings
from excel_analytics.core.database import SessionLocal
from excel_analytics.models.upload import Upload
from excel_analytics.storage.local_storage import storage

logger = logging.getLogger(__name__)

# Files younger than this may belong to an upload still being ingested
ORPHAN_GRACE_SECONDS = 60 * 60

scheduler = BackgroundScheduler()


def cleanup_orphaned_files_job(grace_seconds: int = ORPHAN_GRACE_SECONDS) -> int:
    """
    Delete stored workbooks that no upload row points at.

    Returns the number of files removed.
    """
    db = SessionLocal()
    try:
        known = {
            (user_id, filename)
            for user_id, filename in db.query(Upload.user_id, Upload.filename).all()
        }

        now = time.time()
        total_deleted = 0
        for user_id, filename, path in storage.iter_stored_files():
            if (user_id, filename) in known:
                continue
            try:
                modified = path.stat().st_mtime
            except FileNotFoundError:
                # Removed by a concurrent delete since the directory was listed
                continue
            if now - modified < grace_seconds:
                continue
            if storage.delete_path(path):
                total_deleted += 1
                logger.info(f"Deleted orphaned workbook: {path}")

        if total_deleted > 0:
            logger.info(f"Cleanup job completed: Deleted {total_deleted} orphaned files")
        else:
            logger.info("Cleanup job completed: No orphaned files found")
        return total_deleted
    except Exception as e:
        logger.error(f"Error in cleanup_orphaned_files_job: {str(e)}")
        return 0
    finally:
        db.close()


def start_scheduler():
    """
    Start the background scheduler.

    Called from the FastAPI lifespan on startup.
    """
    if not settings.ENABLE_SCHEDULER:
        logger.info("Background scheduler disabled")
        return

    if not scheduler.running:
        scheduler.add_job(
            cleanup_orphaned_files_job,
            trigger=IntervalTrigger(hours=settings.CLEANUP_INTERVAL_HOURS),
            id="cleanup_orphaned_files",
            name="Cleanup orphaned workbooks",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            f"Background scheduler started. Cleanup job scheduled to run every "
            f"{settings.CLEANUP_INTERVAL_HOURS} hours."
        )


def stop_scheduler():
    """Stop the background scheduler on app shutdown"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
