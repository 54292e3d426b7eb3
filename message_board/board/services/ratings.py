from __future__ import annotations

import logging

from django.db import transaction

from board.models import Rating, User
from board.services.rateables import content_type_for

logger = logging.getLogger(__name__)


class DuplicateRating(Exception):
    """The user already rated this target."""


@transaction.atomic
def rate(owner: User, target, value: int) -> Rating:
    content_type = content_type_for(target)
    already_rated = Rating.objects.filter(owner=owner, content_type=content_type, object_id=target.pk).exists()
    if already_rated:
        raise DuplicateRating(f"You have already rated this {target.KIND}.")
    rating = Rating.objects.create(owner=owner, content_type=content_type, object_id=target.pk, value=value)
    logger.debug("%s rated %s#%s %+d", owner.username, target.KIND, target.pk, value)
    return rating


def change(rating: Rating, value: int) -> Rating:
    rating.value = value
    rating.save(update_fields=["value", "updated_at"])
    return rating
