from datetime import date
from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase

from rooms.models import Assignment, AssignmentProfile
from rooms.repository import AssignmentRepository
from rooms.services import AssignmentInput, BedOverlapError, InvalidDateRangeError, MissingInformationError

from .factories import make_assignment, make_bed, make_profile


class RepositoryTests(TestCase):
    def setUp(self):
        self.bed = make_bed()
        self.ana = make_profile("Ana Silva")
        self.bo = make_profile("Bo Chen")
        self.repository = AssignmentRepository(enforce_overlap=False)

    def _input(self, *profiles, start=date(2025, 5, 3), end=date(2025, 5, 9), bed=None, **extra):
        bed = bed or self.bed
        return AssignmentInput(
            bed_id=bed.id,
            start_date=start,
            end_date=end,
            profile_ids=tuple(p.id for p in profiles),
            location_id=bed.bedroom.location_id,
            bedroom_id=bed.bedroom_id,
            **extra,
        )

    def test_create_derives_hierarchy_and_links_profiles(self):
        record = self.repository.create(self._input(self.ana, self.bo, notes="Late arrival"))

        assignment = Assignment.objects.get(id=record.id)
        self.assertEqual(assignment.bedroom_id, self.bed.bedroom_id)
        self.assertEqual(assignment.location_id, self.bed.bedroom.location_id)
        self.assertEqual(sorted(record.profile_ids), sorted([self.ana.id, self.bo.id]))
        self.assertEqual(record.notes, "Late arrival")

    def test_snapshot_is_reused_until_a_write(self):
        self.assertEqual(self.repository.snapshot(), [])
        make_assignment(self.bed, date(2025, 5, 1), date(2025, 5, 2), self.ana)
        self.assertEqual(self.repository.snapshot(), [])
        self.assertEqual(len(self.repository.refresh()), 1)

        self.repository.create(self._input(self.bo))
        self.assertEqual(len(self.repository.snapshot()), 2)
        self.assertEqual(self.repository.assigned_profile_ids(), {self.ana.id, self.bo.id})

    def test_update_replaces_profile_links(self):
        record = self.repository.create(self._input(self.ana))

        updated = self.repository.update(record.id, self._input(self.bo, start=date(2025, 5, 4)))

        self.assertEqual(updated.profile_ids, [self.bo.id])
        self.assertEqual(updated.start_date, date(2025, 5, 4))
        self.assertEqual(AssignmentProfile.objects.filter(assignment_id=record.id).count(), 1)

    def test_failed_link_write_rolls_back_the_update(self):
        record = self.repository.create(self._input(self.ana))

        with patch(
            "rooms.repository.AssignmentProfile.objects.bulk_create",
            side_effect=DatabaseError("write failed"),
        ):
            with self.assertRaises(DatabaseError):
                self.repository.update(record.id, self._input(self.bo, start=date(2025, 5, 4)))

        assignment = Assignment.objects.get(id=record.id)
        self.assertEqual(assignment.start_date, date(2025, 5, 3))
        self.assertEqual(list(assignment.profiles.values_list("id", flat=True)), [self.ana.id])

    def test_missing_fields_are_rejected_before_any_write(self):
        with self.assertRaises(MissingInformationError) as ctx:
            self.repository.create(self._input())
        self.assertEqual(ctx.exception.missing, ["profile_ids"])
        self.assertFalse(Assignment.objects.exists())

    def test_inverted_dates_are_rejected(self):
        with self.assertRaises(InvalidDateRangeError):
            self.repository.create(self._input(self.ana, start=date(2025, 5, 9), end=date(2025, 5, 3)))

    def test_single_day_assignment_is_allowed(self):
        record = self.repository.create(self._input(self.ana, start=date(2025, 5, 3), end=date(2025, 5, 3)))
        self.assertEqual(record.start_date, record.end_date)

    def test_bed_must_belong_to_bedroom(self):
        other = make_bed("Harbor View", "Suite", "Bed A")
        data = AssignmentInput(
            bed_id=other.id,
            start_date=date(2025, 5, 3),
            end_date=date(2025, 5, 9),
            profile_ids=(self.ana.id,),
            location_id=self.bed.bedroom.location_id,
            bedroom_id=self.bed.bedroom_id,
        )
        with self.assertRaises(ValidationError):
            self.repository.create(data)

    def test_unknown_profile_is_rejected(self):
        data = AssignmentInput(
            bed_id=self.bed.id,
            start_date=date(2025, 5, 3),
            end_date=date(2025, 5, 9),
            profile_ids=(self.ana.id, 9999),
            location_id=self.bed.bedroom.location_id,
            bedroom_id=self.bed.bedroom_id,
        )
        with self.assertRaises(ValidationError):
            self.repository.create(data)
        self.assertFalse(Assignment.objects.exists())

    def test_overlaps_are_allowed_by_default(self):
        self.repository.create(self._input(self.ana))
        self.repository.create(self._input(self.bo, start=date(2025, 5, 5), end=date(2025, 5, 12)))
        self.assertEqual(Assignment.objects.filter(bed=self.bed).count(), 2)

    def test_overlap_check_when_enabled(self):
        strict = AssignmentRepository(enforce_overlap=True)
        first = strict.create(self._input(self.ana))

        with self.assertRaises(BedOverlapError) as ctx:
            strict.create(self._input(self.bo, start=date(2025, 5, 9), end=date(2025, 5, 12)))
        self.assertEqual(ctx.exception.conflicting_ids, [first.id])

        # Adjacent ranges share no day.
        strict.create(self._input(self.bo, start=date(2025, 5, 10), end=date(2025, 5, 12)))
        # An assignment never conflicts with itself.
        strict.update_dates(first.id, date(2025, 5, 2), date(2025, 5, 9))

    def test_update_dates_and_delete(self):
        record = self.repository.create(self._input(self.ana))

        moved = self.repository.update_dates(record.id, date(2025, 5, 1), date(2025, 5, 4))
        self.assertEqual((moved.start_date, moved.end_date), (date(2025, 5, 1), date(2025, 5, 4)))

        self.repository.delete(record.id)
        self.assertFalse(Assignment.objects.exists())
        self.assertFalse(AssignmentProfile.objects.exists())
        self.assertEqual(self.repository.assigned_profile_ids(), set())

    def test_unknown_assignment(self):
        with self.assertRaises(Assignment.DoesNotExist):
            self.repository.get(9999)
        with self.assertRaises(Assignment.DoesNotExist):
            self.repository.delete(9999)
