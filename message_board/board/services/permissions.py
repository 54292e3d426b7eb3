"""Ownership and role checks shared by the views."""
from __future__ import annotations

from typing import Optional

from board.models import PrivateMessage, Rating


def is_authenticated(user) -> bool:
    return user is not None and getattr(user, "is_authenticated", False)


def is_moderator(user) -> bool:
    return is_authenticated(user) and user.is_moderator()


def owns(user, owner_id: Optional[int]) -> bool:
    return is_authenticated(user) and owner_id is not None and user.pk == owner_id


def can_modify(user, owner_id: Optional[int]) -> bool:
    """Owner or moderator."""
    return owns(user, owner_id) or is_moderator(user)


def can_modify_rating(user, rating: Rating) -> bool:
    return owns(user, rating.owner_id)


def can_modify_message(user, message: PrivateMessage) -> bool:
    return owns(user, message.author_id)


def can_view(user, rateable) -> bool:
    """Private messages and everything attached to them are for participants only."""
    message = message_for(rateable)
    if message is None:
        return True
    return message.has_participant(user)


def message_for(rateable) -> Optional[PrivateMessage]:
    if isinstance(rateable, PrivateMessage):
        return rateable
    private_message_id = getattr(rateable, "private_message_id", None)
    if private_message_id:
        return rateable.private_message
    return None
