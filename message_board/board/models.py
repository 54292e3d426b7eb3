"""Data models for the message board."""
from __future__ import annotations

import os
import uuid

from django.conf import settings
from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.contenttypes.fields import GenericForeignKey, GenericRelation
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.db.models import Sum
from django.urls import reverse
from django.utils import timezone


def avatar_upload_path(instance: "User", filename: str) -> str:
    """Store avatars under images/ with a generated name, keeping the extension."""
    extension = os.path.splitext(filename)[1].lower()
    return f"images/{uuid.uuid4().hex}{extension}"


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, username: str, email: str, password: str | None = None, **extra_fields) -> "User":
        if not username:
            raise ValueError("A username is required")
        user = self.model(username=username, email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_moderator(self, username: str, email: str, password: str | None = None, **extra_fields) -> "User":
        extra_fields["role"] = User.ROLE_MODERATOR
        return self.create_user(username, email, password, **extra_fields)


class User(AbstractBaseUser):
    """A registered board member."""

    ROLE_MODERATOR = "Moderator"

    ROLE_CHOICES = [
        (ROLE_MODERATOR, "Moderator"),
    ]

    username = models.CharField(max_length=150, unique=True)
    email = models.EmailField(max_length=254, unique=True)
    avatar = models.FileField(upload_to=avatar_upload_path, blank=True)
    is_deleted = models.BooleanField(default=False)
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["email"]

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:  # pragma: no cover
        return self.username

    @property
    def is_active(self) -> bool:
        # Soft-deleted accounts can neither authenticate nor keep a session.
        return not self.is_deleted

    def is_moderator(self) -> bool:
        return self.role == self.ROLE_MODERATOR

    def get_absolute_url(self) -> str:
        return reverse("board:user_detail", args=[self.pk])


class Section(models.Model):
    """Top-level grouping of topics."""

    name = models.CharField(max_length=120, unique=True)
    description = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def get_absolute_url(self) -> str:
        return reverse("board:section_detail", args=[self.pk])


class Rateable(models.Model):
    """Content that can collect ratings and complaints."""

    KIND = ""

    content = models.TextField()
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)ss",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    ratings = GenericRelation("Rating")
    complaints = GenericRelation("Complaint")

    class Meta:
        abstract = True

    def score(self) -> int:
        return self.ratings.aggregate(total=Sum("value"))["total"] or 0

    def rating_by(self, user) -> "Rating | None":
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return self.ratings.filter(owner=user).first()

    def rateable_url(self) -> str:
        return reverse("board:rateable_detail", args=[self.KIND, self.pk])


class Discussion(Rateable):
    """A rateable that holds a list of posts."""

    title = models.CharField(max_length=200)

    class Meta:
        abstract = True

    def __str__(self) -> str:  # pragma: no cover
        return self.title

    def can_be_posted_on(self) -> bool:
        raise NotImplementedError


class Topic(Discussion):
    """A public discussion inside a section."""

    KIND = "topic"

    section = models.ForeignKey(Section, on_delete=models.CASCADE, related_name="topics")
    is_pinned = models.BooleanField(default=False, db_index=True)
    is_open = models.BooleanField(default=True)

    class Meta:
        ordering = ["-is_pinned", "-created_at"]

    def can_be_posted_on(self) -> bool:
        return self.is_open

    def get_absolute_url(self) -> str:
        return reverse("board:topic_detail", args=[self.pk])


class PrivateMessage(Discussion):
    """A discussion visible only to its participants."""

    KIND = "message"

    participants = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="private_messages")

    class Meta:
        ordering = ["-updated_at"]

    def can_be_posted_on(self) -> bool:
        return True

    def has_participant(self, user) -> bool:
        if user is None or not getattr(user, "is_authenticated", False):
            return False
        return self.participants.filter(pk=user.pk).exists()

    def get_absolute_url(self) -> str:
        return reverse("board:message_detail", args=[self.pk])


class Post(Rateable):
    """A reply inside a topic or a private message."""

    KIND = "post"

    topic = models.ForeignKey(Topic, on_delete=models.CASCADE, null=True, blank=True, related_name="posts")
    private_message = models.ForeignKey(
        PrivateMessage,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="posts",
    )

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Post by {self.author} in {self.discussion}"

    @property
    def discussion(self) -> Topic | PrivateMessage | None:
        if self.topic_id:
            return self.topic
        return self.private_message

    def get_absolute_url(self) -> str:
        discussion = self.discussion
        if discussion is None:
            return reverse("board:index")
        return f"{discussion.get_absolute_url()}#post-{self.pk}"


class TargetedMixin(models.Model):
    """Tagged reference (content type + id) to a topic, post or message."""

    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField(db_index=True)
    target = GenericForeignKey("content_type", "object_id")

    class Meta:
        abstract = True

    @property
    def target_kind(self) -> str:
        return getattr(self.content_type.model_class(), "KIND", "")


class Rating(TargetedMixin):
    """An up or down vote. One per (owner, target), checked by the service layer."""

    VALUE_UP = 1
    VALUE_DOWN = -1

    VALUE_CHOICES = [
        (VALUE_UP, "+1"),
        (VALUE_DOWN, "-1"),
    ]

    value = models.SmallIntegerField(choices=VALUE_CHOICES)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="ratings")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.value:+d} by {self.owner} on {self.target_kind}#{self.object_id}"


class Complaint(TargetedMixin):
    """A report filed against a piece of content."""

    reason = models.TextField()
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="complaints",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Complaint about {self.target_kind}#{self.object_id}"


class Ban(models.Model):
    """Blocks a user from signing in until ``expires_at``."""

    reason = models.TextField()
    expires_at = models.DateTimeField()
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="ban")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["expires_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Ban on {self.user} until {self.expires_at:%Y-%m-%d %H:%M}"

    @property
    def is_active(self) -> bool:
        return self.expires_at > timezone.now()


class SiteSetting(models.Model):
    """Key/value overrides for board tunables."""

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.key}={self.value}"
