from __future__ import annotations

from django.test import Client, TestCase
from django.urls import reverse

from board.models import Rating, Section
from board.services import ratings as rating_service
from board.tests.helpers import delete, make_conversation, make_post, make_topic, make_user, put


class RatingCreationTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        cls.author = make_user("author")
        cls.voter = make_user("voter")
        cls.section = Section.objects.create(name="General", description="Anything goes")
        cls.topic = make_topic(cls.section, cls.author)
        cls.post = make_post(cls.topic, cls.author)

    def setUp(self) -> None:
        self.client: Client = Client()

    def _rate(self, kind: str, target_id: int, value: str):
        return self.client.post(reverse("board:ratings"), {"target_kind": kind, "target_id": target_id, "value": value})

    def test_rating_requires_login(self) -> None:
        self.assertEqual(self._rate("topic", self.topic.pk, "1").status_code, 401)

    def test_upvote_topic(self) -> None:
        self.client.force_login(self.voter)
        response = self._rate("topic", self.topic.pk, "1")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], reverse("board:topic_detail", args=[self.topic.pk]))
        rating = Rating.objects.get()
        self.assertEqual(rating.value, 1)
        self.assertEqual(rating.target, self.topic)
        self.assertEqual(rating.target_kind, "topic")
        self.assertEqual(self.topic.score(), 1)

    def test_downvote_post_redirects_to_anchor(self) -> None:
        self.client.force_login(self.voter)
        response = self._rate("post", self.post.pk, "-1")
        self.assertEqual(response["Location"], self.post.get_absolute_url())
        self.assertEqual(self.post.score(), -1)

    def test_second_rating_on_same_target_is_rejected(self) -> None:
        self.client.force_login(self.voter)
        self._rate("topic", self.topic.pk, "1")
        response = self._rate("topic", self.topic.pk, "-1")
        self.assertEqual(response.status_code, 422)
        self.assertEqual(Rating.objects.filter(owner=self.voter).count(), 1)
        self.assertEqual(Rating.objects.get().value, 1)

    def test_ratings_are_scoped_per_target(self) -> None:
        self.client.force_login(self.voter)
        self._rate("topic", self.topic.pk, "1")
        self._rate("post", self.post.pk, "1")
        self.assertEqual(Rating.objects.filter(owner=self.voter).count(), 2)

    def test_invalid_value_is_unprocessable(self) -> None:
        self.client.force_login(self.voter)
        self.assertEqual(self._rate("topic", self.topic.pk, "5").status_code, 422)
        self.assertEqual(self._rate("topic", self.topic.pk, "").status_code, 422)
        self.assertEqual(Rating.objects.count(), 0)

    def test_unknown_kind_is_not_found(self) -> None:
        self.client.force_login(self.voter)
        self.assertEqual(self._rate("section", 1, "1").status_code, 404)
        self.assertEqual(Rating.objects.count(), 0)

    def test_missing_target_is_not_found(self) -> None:
        self.client.force_login(self.voter)
        self.assertEqual(self._rate("topic", 9999, "1").status_code, 404)

    def test_outsider_cannot_rate_private_message(self) -> None:
        conversation = make_conversation(self.author, make_user("friend"))
        self.client.force_login(self.voter)
        self.assertEqual(self._rate("message", conversation.pk, "1").status_code, 403)
        self.assertEqual(Rating.objects.count(), 0)

    def test_service_raises_on_duplicate(self) -> None:
        rating_service.rate(self.voter, self.topic, 1)
        with self.assertRaises(rating_service.DuplicateRating):
            rating_service.rate(self.voter, self.topic, -1)


class RatingModificationTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        cls.owner = make_user("owner")
        cls.other = make_user("other")
        cls.mod = make_user("mod", moderator=True)
        section = Section.objects.create(name="General", description="Anything goes")
        cls.topic = make_topic(section, cls.other)

    def setUp(self) -> None:
        self.client: Client = Client()
        self.rating = rating_service.rate(self.owner, self.topic, 1)
        self.url = reverse("board:rating_detail", args=[self.rating.pk])

    def test_owner_flips_rating(self) -> None:
        self.client.force_login(self.owner)
        response = put(self.client, self.url, {"value": "-1"})
        self.assertEqual(response.status_code, 302)
        self.rating.refresh_from_db()
        self.assertEqual(self.rating.value, -1)

    def test_invalid_update_is_unprocessable(self) -> None:
        self.client.force_login(self.owner)
        self.assertEqual(put(self.client, self.url, {"value": "0"}).status_code, 422)

    def test_moderator_cannot_change_someone_elses_rating(self) -> None:
        self.client.force_login(self.mod)
        self.assertEqual(put(self.client, self.url, {"value": "-1"}).status_code, 403)
        self.assertEqual(delete(self.client, self.url).status_code, 403)

    def test_owner_withdraws_rating(self) -> None:
        self.client.force_login(self.owner)
        response = delete(self.client, self.url)
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], reverse("board:topic_detail", args=[self.topic.pk]))
        self.assertFalse(Rating.objects.filter(pk=self.rating.pk).exists())
