from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from people.models import Profile
from people.occupants import eligible_profiles
from rooms.models import Bed, Location
from rooms.seed import seed_demo_housing


class SeedTests(TestCase):
    def test_seed_is_idempotent(self):
        first = seed_demo_housing()
        second = seed_demo_housing()

        self.assertEqual(first["locations"], Location.objects.count())
        self.assertEqual(first["beds"], Bed.objects.count())
        self.assertTrue(all(count == 0 for count in second.values()))

    def test_seed_creates_example_hierarchy_and_eligible_people(self):
        seed_demo_housing()

        self.assertTrue(
            Bed.objects.filter(name="Bed A", bedroom__name="Room 1", bedroom__location__name="Alpine Lodge").exists()
        )
        eligible = {o.email for o in eligible_profiles()}
        self.assertIn("ada@example.com", eligible)
        self.assertNotIn("eve@example.com", eligible)
        self.assertTrue(Profile.objects.filter(email="eve@example.com").exists())

    def test_command_reports_counts(self):
        out = StringIO()
        call_command("seed_housing", stdout=out)
        self.assertIn("Seed completed", out.getvalue())
        self.assertIn("locations=2", out.getvalue())
