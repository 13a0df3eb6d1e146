from datetime import date

from django.test import SimpleTestCase, TestCase

from rooms.catalog import load_catalog
from rooms.grid import BLOCK, COVERED, EMPTY, build_grid, date_window, resolve_cell, week_window, window_from_params
from rooms.models import Bedroom, Location
from rooms.repository import AssignmentRecord, AssignmentRepository

from .factories import make_assignment, make_bed, make_profile


def kinds(row):
    return [cell.kind for cell in row.cells]


class GridLayoutTests(TestCase):
    def setUp(self):
        self.bed = make_bed()
        self.jane = make_profile("Jane Doe")
        self.window = date_window(date(2025, 5, 1), 10)

    def _grid(self, window=None):
        return build_grid(load_catalog(), AssignmentRepository().snapshot(), window or self.window)

    def test_block_spans_assignment_inside_window(self):
        make_assignment(self.bed, date(2025, 5, 3), date(2025, 5, 9), self.jane)

        row = self._grid().rows[0]

        self.assertEqual(kinds(row), [EMPTY, EMPTY, BLOCK] + [COVERED] * 6 + [EMPTY])
        block = row.blocks[0]
        self.assertEqual(block.day, date(2025, 5, 3))
        self.assertEqual(block.span, 7)
        self.assertTrue(block.show_left_handle)
        self.assertTrue(block.show_right_handle)
        self.assertFalse(block.continues_beyond_view)
        self.assertEqual(block.color, self.jane.team_color)
        self.assertEqual(row.location_label, "Alpine Lodge")
        self.assertEqual(row.bedroom_label, "Room 1")

    def test_back_to_back_assignments_render_once_each(self):
        first = make_assignment(self.bed, date(2025, 5, 2), date(2025, 5, 4), self.jane)
        second = make_assignment(self.bed, date(2025, 5, 5), date(2025, 5, 6), make_profile("Bo Chen"))

        row = self._grid().rows[0]

        self.assertEqual([b.assignment.id for b in row.blocks], [first.id, second.id])
        self.assertEqual(len(row.cells), 10)

    def test_assignment_past_window_end_is_truncated(self):
        make_assignment(self.bed, date(2025, 5, 8), date(2025, 5, 20), self.jane)

        block = self._grid().rows[0].blocks[0]

        self.assertEqual(block.span, 3)
        self.assertTrue(block.continues_beyond_view)
        self.assertFalse(block.show_right_handle)

    def test_assignment_started_before_window_opens_on_first_day(self):
        make_assignment(self.bed, date(2025, 4, 28), date(2025, 5, 2), self.jane)

        row = self._grid().rows[0]
        block = row.blocks[0]

        self.assertEqual(block.day, date(2025, 5, 1))
        self.assertEqual(block.span, 2)
        self.assertTrue(block.continues_before_view)
        self.assertFalse(block.show_left_handle)
        self.assertEqual(kinds(row)[:3], [BLOCK, COVERED, EMPTY])

    def test_overlapping_assignments_leave_no_gap(self):
        first = make_assignment(self.bed, date(2025, 5, 1), date(2025, 5, 4), self.jane)
        second = make_assignment(self.bed, date(2025, 5, 3), date(2025, 5, 6), make_profile("Bo Chen"))

        row = self._grid().rows[0]

        self.assertEqual([b.assignment.id for b in row.blocks], [first.id, second.id])
        self.assertEqual(row.blocks[1].day, date(2025, 5, 5))
        self.assertEqual(row.blocks[1].span, 2)
        self.assertNotIn(EMPTY, kinds(row)[:6])

    def test_repeated_location_and_bedroom_labels_are_blank(self):
        make_bed(bed_name="Bed B")

        rows = self._grid().rows

        self.assertEqual([r.bed.name for r in rows], ["Bed A", "Bed B"])
        self.assertEqual(rows[1].location_label, "")
        self.assertEqual(rows[1].bedroom_label, "")

    def test_empty_cells_carry_drop_target(self):
        data = self._grid().rows[0].cells[0].to_dict()
        self.assertEqual(
            data["drop_target"],
            {
                "bed_id": self.bed.id,
                "bedroom_id": self.bed.bedroom_id,
                "location_id": self.bed.bedroom.location_id,
                "date": "2025-05-01",
            },
        )


class EmptyStateTests(TestCase):
    def test_no_locations(self):
        grid = build_grid(load_catalog(), [], date_window(date(2025, 5, 1), 7))
        self.assertEqual(grid.empty_state, "no-locations")

    def test_locations_without_beds(self):
        Bedroom.objects.create(location=Location.objects.create(name="Empty house"), name="Room 1")
        grid = build_grid(load_catalog(), [], date_window(date(2025, 5, 1), 7))
        self.assertEqual(grid.empty_state, "no-beds")


class WindowTests(SimpleTestCase):
    def test_resolve_cell_picks_earliest_covering_assignment(self):
        later = AssignmentRecord(id=1, bed_id=1, bedroom_id=1, location_id=1, start_date=date(2025, 5, 3), end_date=date(2025, 5, 5))
        earlier = AssignmentRecord(id=2, bed_id=1, bedroom_id=1, location_id=1, start_date=date(2025, 5, 2), end_date=date(2025, 5, 4))
        other_bed = AssignmentRecord(id=3, bed_id=2, bedroom_id=1, location_id=1, start_date=date(2025, 5, 1), end_date=date(2025, 5, 9))
        records = [later, earlier, other_bed]

        self.assertIs(resolve_cell(records, 1, date(2025, 5, 3)), earlier)
        self.assertIs(resolve_cell(records, 1, date(2025, 5, 5)), later)
        self.assertIsNone(resolve_cell(records, 1, date(2025, 5, 1)))

    def test_week_window_starts_on_monday(self):
        window = week_window(date(2025, 5, 8))  # Thursday
        self.assertEqual(window.start, date(2025, 5, 5))
        self.assertEqual(window.end, date(2025, 5, 11))

    def test_previous_and_next_move_by_window_length(self):
        window = date_window(date(2025, 5, 1), 10)
        self.assertEqual(window.previous().start, date(2025, 4, 21))
        self.assertEqual(window.next().start, date(2025, 5, 11))

    def test_window_from_params(self):
        today = date(2025, 5, 1)
        self.assertEqual(window_from_params({}, today=today, default_days=30, max_days=92).days, 30)
        window = window_from_params({"start": "2025-06-01", "days": "14"}, today=today, default_days=30, max_days=92)
        self.assertEqual((window.start, window.days), (date(2025, 6, 1), 14))
        with self.assertRaises(ValueError):
            window_from_params({"start": "06/01/2025"}, today=today, default_days=30, max_days=92)
        with self.assertRaises(ValueError):
            window_from_params({"days": "400"}, today=today, default_days=30, max_days=92)

    def test_zero_day_window_is_rejected(self):
        with self.assertRaises(ValueError):
            date_window(date(2025, 5, 1), 0)
