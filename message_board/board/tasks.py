from __future__ import annotations

from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from board.services import bans as ban_service

logger = get_task_logger(__name__)


@shared_task(bind=True, name="board.tasks.purge_expired_bans")
def purge_expired_bans(self) -> dict[str, Any]:
    """Drop bans whose expiry has passed. Scheduled by Celery beat."""
    purged = ban_service.purge_expired()
    logger.info("Expired ban purge removed %s row(s)", purged)
    return {"purged": purged}
