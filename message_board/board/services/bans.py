from __future__ import annotations

import logging
from datetime import datetime

from django.db import transaction
from django.utils import timezone

from board.models import Ban, User

logger = logging.getLogger(__name__)


class BanConflict(Exception):
    """The user already carries a ban that has not expired."""

    def __init__(self, ban: Ban) -> None:
        super().__init__(f"{ban.user.username} is already banned until {format_expiry(ban)}.")
        self.ban = ban


def format_expiry(ban: Ban) -> str:
    return timezone.localtime(ban.expires_at).strftime("%Y-%m-%d %H:%M %Z")


def active_ban_for(user) -> Ban | None:
    if user is None or not getattr(user, "pk", None):
        return None
    return Ban.objects.filter(user_id=user.pk, expires_at__gt=timezone.now()).select_related("user").first()


@transaction.atomic
def issue_ban(actor: User, user: User, *, reason: str, expires_at: datetime) -> Ban:
    existing = Ban.objects.select_for_update().filter(user=user).first()
    if existing is not None:
        if existing.is_active:
            raise BanConflict(existing)
        # Only one ban row per user: an expired one is replaced.
        existing.delete()
    ban = Ban.objects.create(user=user, reason=reason, expires_at=expires_at)
    logger.info("%s banned %s until %s", actor.username, user.username, expires_at.isoformat())
    return ban


def update_ban(actor: User, ban: Ban, *, reason: str, expires_at: datetime) -> Ban:
    ban.reason = reason
    ban.expires_at = expires_at
    ban.save(update_fields=["reason", "expires_at", "updated_at"])
    logger.info("%s updated ban on %s (expires %s)", actor.username, ban.user.username, expires_at.isoformat())
    return ban


def lift_ban(actor: User, ban: Ban) -> None:
    username = ban.user.username
    ban.delete()
    logger.info("%s lifted ban on %s", actor.username, username)


def purge_expired(now: datetime | None = None) -> int:
    """Delete bans whose expiry has passed; returns the number removed."""
    cutoff = now or timezone.now()
    deleted, _ = Ban.objects.filter(expires_at__lte=cutoff).delete()
    if deleted:
        logger.info("Purged %s expired ban(s)", deleted)
    return deleted
