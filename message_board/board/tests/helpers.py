from __future__ import annotations

from urllib.parse import urlencode

from django.test import Client

from board.models import Post, PrivateMessage, Section, Topic, User

PASSWORD = "password"


def make_user(username: str, *, moderator: bool = False, **extra) -> User:
    email = extra.pop("email", f"{username}@example.com")
    if moderator:
        return User.objects.create_moderator(username, email, PASSWORD, **extra)
    return User.objects.create_user(username, email, PASSWORD, **extra)


def make_topic(section: Section, author: User | None, title: str = "Topic", **extra) -> Topic:
    return Topic.objects.create(section=section, author=author, title=title, content=extra.pop("content", "Body"), **extra)


def make_conversation(author: User, *recipients: User, title: str = "Hello") -> PrivateMessage:
    message = PrivateMessage.objects.create(author=author, title=title, content="Hi there")
    message.participants.add(author, *recipients)
    return message


def make_post(discussion: Topic | PrivateMessage, author: User | None, content: str = "Reply") -> Post:
    if isinstance(discussion, Topic):
        return Post.objects.create(topic=discussion, author=author, content=content)
    return Post.objects.create(private_message=discussion, author=author, content=content)


def put(client: Client, url: str, data: dict[str, object]):
    return client.put(url, data=urlencode(data), content_type="application/x-www-form-urlencoded")


def delete(client: Client, url: str):
    return client.post(url, {"_method": "DELETE"})
