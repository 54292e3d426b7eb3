from __future__ import annotations

import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings
from django.urls import reverse

from board.models import User
from board.tests.helpers import PASSWORD, delete, make_user, put

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class UserRegistrationTests(TestCase):
    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self) -> None:
        self.client: Client = Client()

    def _register(self, **overrides):
        payload = {"username": "newcomer", "email": "newcomer@example.com", "password": "s3cret"}
        payload.update(overrides)
        return self.client.post(reverse("board:users"), payload)

    def test_registration_creates_user_and_redirects_to_login(self) -> None:
        response = self._register()
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], reverse("board:login"))
        user = User.objects.get(username="newcomer")
        self.assertTrue(user.check_password("s3cret"))
        self.assertFalse(user.is_moderator())
        self.assertFalse(user.is_deleted)

    def test_duplicate_username_is_unprocessable(self) -> None:
        make_user("newcomer", email="other@example.com")
        response = self._register()
        self.assertEqual(response.status_code, 422)
        self.assertEqual(User.objects.filter(username="newcomer").count(), 1)

    def test_duplicate_email_is_unprocessable(self) -> None:
        make_user("someone", email="newcomer@example.com")
        response = self._register()
        self.assertEqual(response.status_code, 422)

    def test_invalid_email_is_unprocessable(self) -> None:
        response = self._register(email="not-an-email")
        self.assertEqual(response.status_code, 422)
        self.assertFalse(User.objects.filter(username="newcomer").exists())

    def test_missing_password_is_unprocessable(self) -> None:
        response = self._register(password="")
        self.assertEqual(response.status_code, 422)

    def test_avatar_with_disallowed_extension_is_rejected(self) -> None:
        avatar = SimpleUploadedFile("avatar.gif", b"GIF89a", content_type="image/gif")
        response = self._register(avatar=avatar)
        self.assertEqual(response.status_code, 422)
        self.assertFalse(User.objects.filter(username="newcomer").exists())

    def test_avatar_is_stored_under_generated_name(self) -> None:
        avatar = SimpleUploadedFile("Me.PNG", b"\x89PNG\r\n\x1a\n", content_type="image/png")
        response = self._register(avatar=avatar)
        self.assertEqual(response.status_code, 302)
        user = User.objects.get(username="newcomer")
        self.assertTrue(user.avatar.name.startswith("images/"))
        self.assertTrue(user.avatar.name.endswith(".png"))
        self.assertNotIn("Me", user.avatar.name)

    def test_authenticated_users_are_sent_home(self) -> None:
        self.client.force_login(make_user("member"))
        self.assertEqual(self.client.get(reverse("board:user_new"))["Location"], reverse("board:index"))
        response = self._register()
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], reverse("board:index"))
        self.assertFalse(User.objects.filter(username="newcomer").exists())


class UserUpdateTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        cls.alice = make_user("alice")
        cls.bob = make_user("bob")
        cls.mod = make_user("mod", moderator=True)

    def setUp(self) -> None:
        self.client: Client = Client()

    def _url(self, user: User) -> str:
        return reverse("board:user_detail", args=[user.pk])

    def test_update_requires_login(self) -> None:
        response = put(self.client, self._url(self.alice), {"username": "x", "email": "x@example.com"})
        self.assertEqual(response.status_code, 401)

    def test_owner_can_update_profile(self) -> None:
        self.client.force_login(self.alice)
        response = put(self.client, self._url(self.alice), {"username": "alicia", "email": "alicia@example.com"})
        self.assertEqual(response.status_code, 302)
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.username, "alicia")

    def test_other_user_cannot_update_profile(self) -> None:
        self.client.force_login(self.bob)
        response = put(self.client, self._url(self.alice), {"username": "hacked", "email": "h@example.com"})
        self.assertEqual(response.status_code, 403)
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.username, "alice")

    def test_moderator_can_update_profile(self) -> None:
        self.client.force_login(self.mod)
        response = put(self.client, self._url(self.bob), {"username": "robert", "email": "bob@example.com"})
        self.assertEqual(response.status_code, 302)
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.username, "robert")

    def test_update_to_taken_username_is_unprocessable(self) -> None:
        self.client.force_login(self.alice)
        response = put(self.client, self._url(self.alice), {"username": "bob", "email": "alice@example.com"})
        self.assertEqual(response.status_code, 422)

    def test_edit_page_renders_for_owner(self) -> None:
        self.client.force_login(self.alice)
        response = self.client.get(reverse("board:user_edit", args=[self.alice.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'name="_method" value="PUT"')


class UserDeleteTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        cls.alice = make_user("alice")
        cls.bob = make_user("bob")
        cls.mod = make_user("mod", moderator=True)

    def setUp(self) -> None:
        self.client: Client = Client()

    def test_self_delete_is_soft_and_logs_out(self) -> None:
        self.client.force_login(self.alice)
        response = delete(self.client, reverse("board:user_detail", args=[self.alice.pk]))
        self.assertEqual(response.status_code, 302)
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.is_deleted)
        self.assertTrue(User.objects.filter(pk=self.alice.pk).exists())
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_deleted_user_is_hidden_and_cannot_log_in(self) -> None:
        User.objects.filter(pk=self.alice.pk).update(is_deleted=True)
        self.assertEqual(self.client.get(reverse("board:user_detail", args=[self.alice.pk])).status_code, 404)
        listing = self.client.get(reverse("board:users"))
        self.assertNotContains(listing, "alice")
        response = self.client.post(reverse("board:login"), {"username": "alice", "password": PASSWORD})
        self.assertEqual(response.status_code, 422)

    def test_other_user_cannot_delete(self) -> None:
        self.client.force_login(self.bob)
        response = delete(self.client, reverse("board:user_detail", args=[self.alice.pk]))
        self.assertEqual(response.status_code, 403)
        self.alice.refresh_from_db()
        self.assertFalse(self.alice.is_deleted)

    def test_moderator_can_delete_other_user(self) -> None:
        self.client.force_login(self.mod)
        response = delete(self.client, reverse("board:user_detail", args=[self.bob.pk]))
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], reverse("board:users"))
        self.bob.refresh_from_db()
        self.assertTrue(self.bob.is_deleted)
