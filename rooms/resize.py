from __future__ import annotations

import logging
from datetime import date as date_type
from datetime import timedelta

from django.conf import settings

from .repository import AssignmentRecord, AssignmentRepository


logger = logging.getLogger(__name__)

LEFT = "left"
RIGHT = "right"
DIRECTIONS = (LEFT, RIGHT)


class ResizeSession:
    """
    Drag of an assignment block's left or right edge.

    ``move`` converts the horizontal mouse offset into whole days and applies
    the new dates to the record straight away; ``finish`` writes them. A drag
    never carries one edge past the other; a handle that is not moved leaves
    the dates alone, single-day stays included.
    """

    def __init__(
        self,
        record: AssignmentRecord,
        direction: str,
        origin_x: float,
        *,
        pixels_per_day: int | None = None,
    ):
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown resize direction: {direction!r}")
        if pixels_per_day is None:
            pixels_per_day = settings.ROOMS_PIXELS_PER_DAY
        if pixels_per_day <= 0:
            raise ValueError("pixels_per_day must be positive.")

        self.record = record
        self.direction = direction
        self.origin_x = origin_x
        self.pixels_per_day = pixels_per_day
        self.original_start: date_type = record.start_date
        self.original_end: date_type = record.end_date
        self.active = True

    def day_delta(self, x: float) -> int:
        return round((x - self.origin_x) / self.pixels_per_day)

    def compute(self, x: float) -> tuple[date_type, date_type]:
        delta = timedelta(days=self.day_delta(x))
        start, end = self.original_start, self.original_end
        one_day = timedelta(days=1)
        # An edge dragged past the other stops one day short of it, but is
        # never pulled back beyond where it started.
        if self.direction == LEFT:
            limit = end - one_day
            start = start + delta if start + delta <= limit else max(start, limit)
        else:
            limit = start + one_day
            end = end + delta if end + delta >= limit else min(end, limit)
        return start, end

    def move(self, x: float) -> tuple[date_type, date_type]:
        if not self.active:
            raise RuntimeError("Resize session already finished.")
        start, end = self.compute(x)
        self.record.start_date = start
        self.record.end_date = end
        return start, end

    def revert(self) -> None:
        self.record.start_date = self.original_start
        self.record.end_date = self.original_end

    def finish(self, repository: AssignmentRepository) -> AssignmentRecord:
        """
        Persist the current dates and reload the snapshot. On failure the
        record gets its original dates back and the error propagates.
        """
        if not self.active:
            raise RuntimeError("Resize session already finished.")
        try:
            if (self.record.start_date, self.record.end_date) == (self.original_start, self.original_end):
                return self.record
            saved = repository.update_dates(self.record.id, self.record.start_date, self.record.end_date)
        except Exception:
            logger.exception("Failed to persist resize of assignment %s", self.record.id)
            self.revert()
            raise
        finally:
            self.active = False
        repository.refresh()
        return saved
