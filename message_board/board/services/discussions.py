from __future__ import annotations

import logging
from typing import Iterable

from django.db import transaction

from board.models import Post, PrivateMessage, Topic, User

logger = logging.getLogger(__name__)


class DiscussionClosed(Exception):
    """Posting is not allowed on this discussion."""


def add_post(author: User, discussion: Topic | PrivateMessage, content: str) -> Post:
    if not discussion.can_be_posted_on():
        raise DiscussionClosed(f"“{discussion.title}” is closed for new posts.")
    if isinstance(discussion, Topic):
        return Post.objects.create(author=author, topic=discussion, content=content)
    post = Post.objects.create(author=author, private_message=discussion, content=content)
    # Keeps the most recently active conversation at the top of the inbox.
    discussion.save(update_fields=["updated_at"])
    return post


@transaction.atomic
def start_conversation(author: User, recipients: Iterable[User], *, title: str, content: str) -> PrivateMessage:
    message = PrivateMessage.objects.create(author=author, title=title, content=content)
    message.participants.add(author, *recipients)
    return message


def set_pinned(actor: User, topic: Topic, pinned: bool) -> Topic:
    topic.is_pinned = pinned
    topic.save(update_fields=["is_pinned", "updated_at"])
    logger.info("%s %s topic %s", actor.username, "pinned" if pinned else "unpinned", topic.pk)
    return topic


def set_open(actor: User, topic: Topic, is_open: bool) -> Topic:
    topic.is_open = is_open
    topic.save(update_fields=["is_open", "updated_at"])
    logger.info("%s %s topic %s", actor.username, "opened" if is_open else "closed", topic.pk)
    return topic
