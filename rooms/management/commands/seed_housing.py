from __future__ import annotations

from django.core.management.base import BaseCommand

from rooms.seed import seed_demo_housing


class Command(BaseCommand):
    help = "Seed demo locations, beds, teams and paid profiles (idempotent)."

    def handle(self, *args, **options):
        result = seed_demo_housing()
        summary = " ".join(f"{key}={value}" for key, value in result.items())
        self.stdout.write(self.style.SUCCESS(f"Seed completed: {summary}"))
