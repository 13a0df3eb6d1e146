import json
from datetime import date

from django.test import SimpleTestCase, TestCase

from people.models import Profile
from people.occupants import Occupant
from rooms.intents import CreateAssignmentIntent, drag_payload, parse_drag_payload, stage_draft
from rooms.models import Assignment, Bed
from rooms.services import InvalidDropPayloadError

from .factories import make_bed, make_profile


class DragPayloadTests(SimpleTestCase):
    def test_reads_profile_id(self):
        self.assertEqual(parse_drag_payload('{"id": 7, "full_name": "Ana"}'), 7)
        self.assertEqual(parse_drag_payload({"id": "12"}), 12)

    def test_rejects_unusable_payloads(self):
        for raw in (None, "", "   ", "not json", "[1, 2]", '{"full_name": "Ana"}', '{"id": true}', '{"id": "abc"}'):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidDropPayloadError):
                    parse_drag_payload(raw)


class StageDraftTests(TestCase):
    def setUp(self):
        self.bed = make_bed()
        self.jane = make_profile("Jane Doe")

    def test_drop_stages_a_seven_day_draft_without_writing(self):
        payload = drag_payload(Occupant.from_profile(self.jane))
        intent = CreateAssignmentIntent.from_transport(payload, bed_id=self.bed.id, target_date=date(2025, 5, 3))

        draft = stage_draft(intent)

        self.assertEqual(draft.start_date, date(2025, 5, 3))
        self.assertEqual(draft.end_date, date(2025, 5, 9))
        self.assertEqual(draft.profile_ids, (self.jane.id,))
        self.assertEqual(draft.bed_id, self.bed.id)
        self.assertEqual(draft.bedroom_id, self.bed.bedroom_id)
        self.assertEqual(draft.location_id, self.bed.bedroom.location_id)
        self.assertFalse(Assignment.objects.exists())

    def test_drag_payload_carries_profile_fields(self):
        data = json.loads(drag_payload(Occupant.from_profile(self.jane)))
        self.assertEqual(data["id"], self.jane.id)
        self.assertEqual(data["full_name"], "Jane Doe")

    def test_custom_stay_length(self):
        intent = CreateAssignmentIntent(profile_id=self.jane.id, bed_id=self.bed.id, target_date=date(2025, 5, 3))
        self.assertEqual(stage_draft(intent, stay_days=1).end_date, date(2025, 5, 3))

    def test_stale_ids(self):
        with self.assertRaises(Bed.DoesNotExist):
            stage_draft(CreateAssignmentIntent(profile_id=self.jane.id, bed_id=9999, target_date=date(2025, 5, 3)))
        with self.assertRaises(Profile.DoesNotExist):
            stage_draft(CreateAssignmentIntent(profile_id=9999, bed_id=self.bed.id, target_date=date(2025, 5, 3)))
