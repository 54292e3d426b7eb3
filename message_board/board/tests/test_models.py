from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from board.forms import PostForm
from board.models import Ban, Post, Section, User, avatar_upload_path
from board.services import bans as ban_service
from board.services import discussions as discussion_service
from board.tests.helpers import make_conversation, make_topic, make_user


class UserModelTests(TestCase):
    def test_create_user_hashes_password(self) -> None:
        user = User.objects.create_user("alice", "Alice@Example.COM", "pw")
        self.assertNotEqual(user.password, "pw")
        self.assertTrue(user.check_password("pw"))
        self.assertEqual(user.email, "Alice@example.com")
        self.assertFalse(user.is_moderator())

    def test_create_moderator_sets_role(self) -> None:
        self.assertTrue(User.objects.create_moderator("mod", "mod@example.com", "pw").is_moderator())

    def test_soft_deleted_user_is_inactive(self) -> None:
        user = make_user("gone")
        self.assertTrue(user.is_active)
        user.is_deleted = True
        self.assertFalse(user.is_active)

    def test_active_ban_ignores_expired_ban(self) -> None:
        user = make_user("someone")
        self.assertIsNone(ban_service.active_ban_for(user))
        ban = Ban.objects.create(user=user, reason="old", expires_at=timezone.now() - timedelta(hours=1))
        self.assertFalse(ban.is_active)
        self.assertIsNone(ban_service.active_ban_for(user))

    def test_avatar_upload_path_keeps_extension_only(self) -> None:
        path = avatar_upload_path(None, "Holiday Photo.JPG")
        self.assertTrue(path.startswith("images/"))
        self.assertTrue(path.endswith(".jpg"))
        self.assertNotIn("Holiday", path)


class PostModelTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        cls.author = make_user("author")
        cls.section = Section.objects.create(name="General", description="Anything goes")
        cls.topic = make_topic(cls.section, cls.author)
        cls.conversation = make_conversation(cls.author, make_user("friend"))

    def test_reply_form_validates_before_discussion_is_attached(self) -> None:
        form = PostForm({"content": "hi"})
        self.assertTrue(form.is_valid(), form.errors)

    def test_add_post_attaches_exactly_one_discussion(self) -> None:
        in_topic = discussion_service.add_post(self.author, self.topic, "in topic")
        self.assertEqual(in_topic.topic, self.topic)
        self.assertIsNone(in_topic.private_message_id)
        in_conversation = discussion_service.add_post(self.author, self.conversation, "in conversation")
        self.assertEqual(in_conversation.private_message, self.conversation)
        self.assertIsNone(in_conversation.topic_id)

    def test_discussion_and_url(self) -> None:
        post = Post.objects.create(author=self.author, content="hi", private_message=self.conversation)
        self.assertEqual(post.discussion, self.conversation)
        self.assertTrue(post.get_absolute_url().endswith(f"#post-{post.pk}"))

    def test_author_removal_keeps_content(self) -> None:
        post = Post.objects.create(author=self.author, content="stays", topic=self.topic)
        User.objects.filter(pk=self.author.pk).delete()
        post.refresh_from_db()
        self.assertIsNone(post.author)
        self.assertTrue(self.topic.can_be_posted_on())
        self.assertTrue(self.conversation.can_be_posted_on())
