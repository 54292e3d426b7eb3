from __future__ import annotations

from typing import Any

from django import template

from board.models import Rating, User
from board.services import rateables as rateable_service

register = template.Library()

DELETED_USER_LABEL = "[deleted]"


@register.filter(name="display_name")
def display_name(user: User | None) -> str:
    if user is None or user.is_deleted:
        return DELETED_USER_LABEL
    return user.username


@register.filter(name="avatar_url")
def avatar_url(user: User | None) -> str:
    if user is None or user.is_deleted or not user.avatar:
        return ""
    return user.avatar.url


@register.filter(name="rating_by")
def rating_by(rateable: Any, user: Any) -> Rating | None:
    return rateable.rating_by(user)


@register.filter(name="kind")
def kind(rateable: Any) -> str:
    return getattr(rateable, "KIND", "")


@register.filter(name="describe_target")
def describe_target(rateable: Any) -> str:
    return rateable_service.describe(rateable)
