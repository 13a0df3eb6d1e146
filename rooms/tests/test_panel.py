from datetime import date
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings

from rooms.models import Assignment
from rooms.panel import EditPanel
from rooms.repository import AssignmentRepository
from rooms.services import AssignmentDraft

from .factories import make_assignment, make_bed, make_profile


class EditPanelTests(TestCase):
    def setUp(self):
        self.bed = make_bed()
        self.jane = make_profile("Jane Doe")
        self.bo = make_profile("Bo Chen")
        self.repository = AssignmentRepository(enforce_overlap=False)

    def _data(self, *profiles, **overrides):
        data = {
            "profiles": [str(p.id) for p in profiles],
            "location": str(self.bed.bedroom.location_id),
            "bedroom": str(self.bed.bedroom_id),
            "bed": str(self.bed.id),
            "start_date": "2025-05-03",
            "end_date": "2025-05-09",
            "notes": "",
        }
        data.update(overrides)
        return data

    def test_missing_profiles_writes_nothing(self):
        panel = EditPanel.for_draft(self.repository)

        result = panel.save(self._data())

        self.assertFalse(result.ok)
        self.assertEqual(result.notification["title"], "Missing information")
        self.assertEqual(result.notification["description"], "Please fill out all required fields.")
        self.assertEqual(result.notification["variant"], "destructive")
        self.assertIn("profiles", result.errors)
        self.assertFalse(Assignment.objects.exists())

    def test_create_from_draft(self):
        draft = AssignmentDraft(
            start_date=date(2025, 5, 3),
            end_date=date(2025, 5, 9),
            profile_ids=(self.jane.id,),
            location_id=self.bed.bedroom.location_id,
            bedroom_id=self.bed.bedroom_id,
            bed_id=self.bed.id,
        )
        panel = EditPanel.for_draft(self.repository, draft)
        self.assertTrue(panel.is_new)
        self.assertEqual(panel.initial()["profiles"], [self.jane.id])

        result = panel.save(self._data(self.jane, notes="Arrives late"))

        self.assertTrue(result.ok)
        self.assertTrue(result.refetch)
        self.assertEqual(result.notification["title"], "Assignment created")
        self.assertEqual(result.assignment.notes, "Arrives late")
        self.assertFalse(panel.is_new)

    @override_settings(ROOMS_DEFAULT_STAY_DAYS=7)
    def test_blank_draft_defaults_to_a_week_from_today(self):
        with patch("rooms.panel.timezone.localdate", return_value=date(2025, 5, 1)):
            panel = EditPanel.for_draft(self.repository)
        self.assertEqual(panel.initial()["start_date"], date(2025, 5, 1))
        self.assertEqual(panel.initial()["end_date"], date(2025, 5, 7))

    def test_update_replaces_people(self):
        assignment = make_assignment(self.bed, date(2025, 5, 3), date(2025, 5, 9), self.jane)
        panel = EditPanel.for_assignment(self.repository, assignment.id)

        result = panel.save(self._data(self.bo))

        self.assertTrue(result.ok)
        self.assertEqual(result.notification["title"], "Assignment updated")
        self.assertEqual(list(assignment.profiles.values_list("id", flat=True)), [self.bo.id])

    def test_edit_keeps_current_people_selectable(self):
        unpaid = make_profile("Pat Pending", paid=False)
        assignment = make_assignment(self.bed, date(2025, 5, 3), date(2025, 5, 9), unpaid)
        panel = EditPanel.for_assignment(self.repository, assignment.id)

        self.assertIn(unpaid, panel.form().fields["profiles"].queryset)
        self.assertTrue(panel.save(self._data(unpaid)).ok)

    def test_end_before_start_is_a_field_error(self):
        result = EditPanel.for_draft(self.repository).save(self._data(self.jane, end_date="2025-05-01"))
        self.assertFalse(result.ok)
        self.assertIn("end_date", result.errors)
        self.assertFalse(Assignment.objects.exists())

    def test_bed_from_another_bedroom_is_rejected(self):
        other = make_bed("Harbor View", "Suite", "Bed A")
        result = EditPanel.for_draft(self.repository).save(self._data(self.jane, bed=str(other.id)))
        self.assertFalse(result.ok)
        self.assertIn("bed", result.errors)

    def test_overlap_conflict_when_enforced(self):
        make_assignment(self.bed, date(2025, 5, 1), date(2025, 5, 4), self.bo)
        strict = AssignmentRepository(enforce_overlap=True)

        result = EditPanel.for_draft(strict).save(self._data(self.jane))

        self.assertFalse(result.ok)
        self.assertEqual(result.status, 409)
        self.assertEqual(Assignment.objects.count(), 1)

    def test_database_error_is_reported(self):
        panel = EditPanel.for_draft(self.repository)
        with patch.object(self.repository, "create", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("rooms.panel", level="ERROR"):
                result = panel.save(self._data(self.jane))
        self.assertFalse(result.ok)
        self.assertEqual(result.status, 500)
        self.assertEqual(result.notification["title"], "Error saving assignment")

    def test_delete_needs_confirmation(self):
        assignment = make_assignment(self.bed, date(2025, 5, 3), date(2025, 5, 9), self.jane)
        panel = EditPanel.for_assignment(self.repository, assignment.id)

        refused = panel.delete(confirmed=False)
        self.assertFalse(refused.ok)
        self.assertTrue(Assignment.objects.exists())

        result = panel.delete(confirmed=True)
        self.assertTrue(result.ok)
        self.assertEqual(result.notification["title"], "Assignment deleted")
        self.assertEqual(result.notification["description"], "The assignment has been deleted successfully.")
        self.assertFalse(Assignment.objects.exists())
        self.assertNotIn(self.jane.id, self.repository.assigned_profile_ids())

    def test_unsaved_draft_cannot_be_deleted(self):
        self.assertFalse(EditPanel.for_draft(self.repository).delete(confirmed=True).ok)
