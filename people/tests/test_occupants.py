from datetime import date
from decimal import Decimal

from django.test import TestCase

from people.colors import NO_TEAM_COLOR
from people.models import Invoice, InvoiceStatus, Profile, Team
from people.occupants import (
    NO_TEAM_ID,
    Occupant,
    available_profiles,
    describe_preferences,
    eligible_profiles,
    filter_by_preferences,
    group_by_team,
    paid_profile_ids,
    search_profiles,
)


def make_invoice(profile, status=InvoiceStatus.PAID):
    return Invoice.objects.create(
        profile=profile,
        email=profile.email,
        first_name="First",
        last_name="Last",
        room_type="Shared room",
        checkin=date(2025, 5, 1),
        checkout=date(2025, 5, 31),
        price=Decimal("100.00"),
        status=status,
    )


class EligibilityTests(TestCase):
    def setUp(self):
        self.team = Team.objects.create(name="Engineering")
        self.paid = Profile.objects.create(full_name="Zoe Paid", email="zoe@example.com", team=self.team)
        self.twice = Profile.objects.create(full_name="Adam Twice", email="adam@example.com")
        self.pending = Profile.objects.create(full_name="Pat Pending", email="pat@example.com")
        make_invoice(self.paid)
        make_invoice(self.twice)
        make_invoice(self.twice)
        make_invoice(self.pending, status=InvoiceStatus.PENDING)

    def test_paid_profile_ids_are_distinct(self):
        self.assertEqual(paid_profile_ids(), sorted([self.paid.id, self.twice.id]))

    def test_eligible_profiles_are_paid_and_ordered_by_name(self):
        names = [o.full_name for o in eligible_profiles()]
        self.assertEqual(names, ["Adam Twice", "Zoe Paid"])

    def test_include_ids_keep_unpaid_profiles_selectable(self):
        ids = [o.id for o in eligible_profiles(include_ids=[self.pending.id])]
        self.assertIn(self.pending.id, ids)

    def test_available_excludes_assigned(self):
        eligible = eligible_profiles()
        available = available_profiles(eligible, {self.paid.id})
        self.assertEqual([o.id for o in available], [self.twice.id])

    def test_no_paid_invoices_means_nobody_is_eligible(self):
        Invoice.objects.update(status=InvoiceStatus.CANCELLED)
        self.assertEqual(eligible_profiles(), [])


class GroupingTests(TestCase):
    def setUp(self):
        self.design = Team.objects.create(name="Design")
        self.eng = Team.objects.create(name="Engineering")
        self.people = [
            Profile.objects.create(full_name="Ana", email="ana@example.com", team=self.eng),
            Profile.objects.create(full_name="Bo", email="bo@example.com"),
            Profile.objects.create(full_name="Cy", email="cy@example.com", team=self.design),
            Profile.objects.create(full_name="Di", email="di@example.com", team=self.eng),
        ]
        self.occupants = [Occupant.from_profile(p) for p in self.people]

    def test_no_team_group_comes_first(self):
        groups = group_by_team(self.occupants)
        self.assertEqual(groups[0].id, NO_TEAM_ID)
        self.assertEqual(groups[0].color, NO_TEAM_COLOR)
        self.assertEqual([o.full_name for o in groups[0].occupants], ["Bo"])

    def test_members_grouped_under_their_team(self):
        groups = {g.id: g for g in group_by_team(self.occupants)}
        self.assertEqual([o.full_name for o in groups[str(self.eng.id)].occupants], ["Ana", "Di"])
        self.assertEqual(groups[str(self.eng.id)].color, self.eng.color)
        self.assertEqual(groups[str(self.design.id)].member_count, 1)

    def test_empty_groups_are_dropped(self):
        with_team = [o for o in self.occupants if o.team_id is not None]
        ids = [g.id for g in group_by_team(with_team)]
        self.assertNotIn(NO_TEAM_ID, ids)
        self.assertEqual(group_by_team([]), [])


class SearchAndFilterTests(TestCase):
    def setUp(self):
        self.ana = Occupant.from_profile(
            Profile.objects.create(
                full_name="Ana Silva",
                email="ana@example.com",
                housing_preferences={"sleepSchedule": "early_riser", "personality": "introvert"},
            )
        )
        self.bo = Occupant.from_profile(
            Profile.objects.create(
                full_name="Bo Chen",
                email="bochen@corp.example",
                housing_preferences={"sleepSchedule": "night_owl", "cleanliness": ["tidy", "very_clean"]},
            )
        )
        self.cy = Occupant.from_profile(Profile.objects.create(full_name="Cy", email="cy@example.com"))

    def test_search_matches_name_or_email_case_insensitively(self):
        everyone = [self.ana, self.bo, self.cy]
        self.assertEqual(search_profiles(everyone, "SILVA"), [self.ana])
        self.assertEqual(search_profiles(everyone, "corp."), [self.bo])
        self.assertEqual(search_profiles(everyone, "  "), everyone)

    def test_filters_require_every_active_category(self):
        everyone = [self.ana, self.bo, self.cy]
        self.assertEqual(filter_by_preferences(everyone, {"sleepSchedule": ["early_riser"]}), [self.ana])
        self.assertEqual(
            filter_by_preferences(everyone, {"sleepSchedule": ["early_riser", "night_owl"], "personality": ["introvert"]}),
            [self.ana],
        )

    def test_list_preferences_match_any_selected_value(self):
        self.assertEqual(filter_by_preferences([self.ana, self.bo], {"cleanliness": ["tidy"]}), [self.bo])

    def test_empty_filters_keep_everyone(self):
        everyone = [self.ana, self.bo, self.cy]
        self.assertEqual(filter_by_preferences(everyone, {"sleepSchedule": []}), everyone)

    def test_describe_preferences_labels_values(self):
        self.assertEqual(
            describe_preferences({"sleepSchedule": "early_riser", "petFriendly": True, "cleanliness": ""}),
            [("Sleep Schedule", "Early riser"), ("Pet Friendly", "True")],
        )
        self.assertEqual(describe_preferences(None), [])
