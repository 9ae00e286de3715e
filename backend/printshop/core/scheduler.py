"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Cleanup orphaned uploads: print files that no order references, e.g. when
  the order insert failed after the upload was written. Runs every few hours.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session
from printshop.models.order import Order
from printshop.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def cleanup_orphaned_uploads_job(
    session_factory: Callable[[], Session],
    storage: LocalStorage,
    grace_minutes: int,
    now: Optional[float] = None,
) -> int:
    """
    Delete uploads that no order points at.

    Files younger than grace_minutes are left alone so an upload whose
    order is still being inserted is never swept. Returns the number of
    files deleted.
    """
    cutoff = (now if now is not None else time.time()) - grace_minutes * 60
    db = session_factory()
    try:
        referenced = {
            Path(file_path).resolve()
            for (file_path,) in db.query(Order.file_path).filter(Order.file_path.isnot(None))
        }
    finally:
        db.close()

    total_deleted = 0
    for path in storage.iter_files():
        if path.resolve() in referenced:
            continue
        if path.stat().st_mtime > cutoff:
            continue
        try:
            storage.delete_path(str(path))
            total_deleted += 1
            logger.info(f"Deleted orphaned upload: {path}")
        except OSError as e:
            logger.error(f"Error deleting orphaned upload {path}: {str(e)}")

    if total_deleted > 0:
        logger.info(f"Cleanup job completed: Deleted {total_deleted} orphaned uploads")
    else:
        logger.info("Cleanup job completed: No orphaned uploads found")
    return total_deleted


def start_scheduler(
    session_factory: Callable[[], Session],
    storage: LocalStorage,
    interval_hours: int,
    grace_minutes: int,
):
    """
    Start the background scheduler.

    This should be called when the FastAPI app starts.
    """
    if not scheduler.running:
        scheduler.add_job(
            cleanup_orphaned_uploads_job,
            trigger=IntervalTrigger(hours=interval_hours),
            kwargs={
                "session_factory": session_factory,
                "storage": storage,
                "grace_minutes": grace_minutes,
            },
            id="cleanup_orphaned_uploads",
            name="Cleanup orphaned uploads",
            replace_existing=True
        )

        scheduler.start()
        logger.info(f"Background scheduler started. Cleanup job scheduled to run every {interval_hours} hours.")


def stop_scheduler():
    """
    Stop the background scheduler.

    This should be called when the FastAPI app shuts down.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
