from __future__ import annotations

from django.core.management.base import BaseCommand

from board.services import bans as ban_service


class Command(BaseCommand):
    help = "Delete bans whose expiry time has passed."

    def handle(self, *args, **options):
        purged = ban_service.purge_expired()
        self.stdout.write(self.style.SUCCESS(f"Purged {purged} expired ban(s)"))
