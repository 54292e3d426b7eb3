from __future__ import annotations

import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from board.models import Ban, Section, User

DEFAULT_PASSWORD = "password"

ADJECTIVES = ["quiet", "brisk", "amber", "lucky", "rusty", "hollow", "sunny", "nimble", "stray", "velvet"]
NOUNS = ["otter", "lantern", "falcon", "maple", "comet", "harbor", "pebble", "willow", "badger", "spindle"]
SECTION_TOPICS = [
    "General", "Announcements", "Introductions", "Help Desk", "Off Topic",
    "Hardware", "Software", "Gaming", "Music", "Books", "Travel", "Cooking",
]


class Command(BaseCommand):
    help = "Populate an empty board with sample users (including a moderator and a banned user) and sections."

    def add_arguments(self, parser):  # pragma: no cover - CLI wiring
        parser.add_argument(
            "--seed",
            type=int,
            default=None,
            help="Seed for deterministic usernames and section names.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        rng = random.Random(options["seed"])

        if User.objects.exists():
            self.stdout.write("Users already present; skipping user seed.")
        else:
            self._seed_users(rng)

        if Section.objects.exists():
            self.stdout.write("Sections already present; skipping section seed.")
        else:
            self._seed_sections(rng)

    # -- internal -----------------------------------------------------------------

    def _seed_users(self, rng: random.Random) -> None:
        names: set[str] = set()
        while len(names) < 5:
            names.add(f"{rng.choice(ADJECTIVES)}_{rng.choice(NOUNS)}{rng.randint(1, 99)}")
        for name in sorted(names):
            User.objects.create_user(name, f"{name}@example.com", DEFAULT_PASSWORD)

        User.objects.create_moderator("mod", "mod@mod.com", DEFAULT_PASSWORD)
        banned = User.objects.create_user("ban", "ban@ban.com", DEFAULT_PASSWORD)
        Ban.objects.create(
            user=banned,
            reason="Seeded ban",
            expires_at=timezone.now() + timedelta(hours=2),
        )
        self.stdout.write(self.style.SUCCESS(f"Created users: {', '.join(sorted(names))}, mod, ban"))

    def _seed_sections(self, rng: random.Random) -> None:
        names = rng.sample(SECTION_TOPICS, 5)
        for name in names:
            Section.objects.create(name=name, description=f"Everything about {name.lower()}.")
        self.stdout.write(self.style.SUCCESS(f"Created sections: {', '.join(names)}"))
