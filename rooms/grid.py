"""
Bed-by-date assignment grid.

Rows are beds grouped under their bedroom and location; columns are the
consecutive dates of a window. Each (bed, date) cell is either the start of
a block spanning one or more columns, a placeholder covered by such a block,
or an empty cell that accepts a dropped profile.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import timedelta
from typing import Iterable, Sequence

from people.colors import NO_TEAM_COLOR

from .catalog import BedNode, BedroomNode, LocationNode
from .repository import AssignmentRecord


BLOCK = "block"
COVERED = "covered"
EMPTY = "empty"


@dataclass(frozen=True)
class DateWindow:
    start: date_type
    days: int

    @property
    def end(self) -> date_type:
        return self.start + timedelta(days=self.days - 1)

    @property
    def dates(self) -> list[date_type]:
        return [self.start + timedelta(days=offset) for offset in range(self.days)]

    def previous(self) -> "DateWindow":
        return DateWindow(self.start - timedelta(days=self.days), self.days)

    def next(self) -> "DateWindow":
        return DateWindow(self.start + timedelta(days=self.days), self.days)

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat(), "days": self.days}


def date_window(start: date_type, days: int) -> DateWindow:
    if days < 1:
        raise ValueError("A grid window needs at least one day.")
    return DateWindow(start, days)


def week_window(anchor: date_type) -> DateWindow:
    """
    Monday to Sunday week containing ``anchor``.
    """
    return DateWindow(anchor - timedelta(days=anchor.weekday()), 7)


@dataclass
class GridCell:
    day: date_type
    kind: str
    bed_id: int
    bedroom_id: int
    location_id: int
    span: int = 1
    assignment: AssignmentRecord | None = None
    show_left_handle: bool = False
    show_right_handle: bool = False
    continues_before_view: bool = False
    continues_beyond_view: bool = False

    @property
    def color(self) -> str:
        if self.assignment is None or not self.assignment.profiles:
            return NO_TEAM_COLOR
        return self.assignment.profiles[0].team_color

    def to_dict(self) -> dict:
        data = {"date": self.day.isoformat(), "kind": self.kind}
        if self.kind == BLOCK:
            data.update(
                {
                    "span": self.span,
                    "color": self.color,
                    "assignment": self.assignment.to_dict(),
                    "show_left_handle": self.show_left_handle,
                    "show_right_handle": self.show_right_handle,
                    "continues_before_view": self.continues_before_view,
                    "continues_beyond_view": self.continues_beyond_view,
                }
            )
        elif self.kind == COVERED:
            data["assignment_id"] = self.assignment.id
        else:
            data["drop_target"] = {
                "bed_id": self.bed_id,
                "bedroom_id": self.bedroom_id,
                "location_id": self.location_id,
                "date": self.day.isoformat(),
            }
        return data


@dataclass
class GridRow:
    location: LocationNode
    bedroom: BedroomNode
    bed: BedNode
    location_label: str
    bedroom_label: str
    cells: list[GridCell] = field(default_factory=list)

    @property
    def blocks(self) -> list[GridCell]:
        return [c for c in self.cells if c.kind == BLOCK]

    def to_dict(self) -> dict:
        return {
            "location_id": self.location.id,
            "location_label": self.location_label,
            "bedroom_id": self.bedroom.id,
            "bedroom_label": self.bedroom_label,
            "bed": self.bed.to_dict(),
            "cells": [c.to_dict() for c in self.cells],
        }


@dataclass
class Grid:
    window: DateWindow
    rows: list[GridRow]
    location_count: int = 0

    @property
    def dates(self) -> list[date_type]:
        return self.window.dates

    @property
    def empty_state(self) -> str | None:
        """
        "no-locations" / "no-beds" when there is nothing to assign to yet.
        """
        if self.rows:
            return None
        return "no-beds" if self.location_count else "no-locations"

    def to_dict(self) -> dict:
        return {
            "window": self.window.to_dict(),
            "dates": [d.isoformat() for d in self.dates],
            "empty_state": self.empty_state,
            "rows": [r.to_dict() for r in self.rows],
        }


def resolve_cell(assignments: Iterable[AssignmentRecord], bed_id: int, day: date_type) -> AssignmentRecord | None:
    """
    First assignment on ``bed_id`` whose inclusive range contains ``day``.
    """
    ordered = sorted(
        (a for a in assignments if a.bed_id == bed_id),
        key=lambda a: (a.start_date, a.id),
    )
    for assignment in ordered:
        if assignment.covers(day):
            return assignment
    return None


def _index_by_bed(assignments: Iterable[AssignmentRecord], window: DateWindow) -> dict[int, list[AssignmentRecord]]:
    by_bed: dict[int, list[AssignmentRecord]] = defaultdict(list)
    for assignment in assignments:
        if assignment.end_date < window.start or assignment.start_date > window.end:
            continue
        by_bed[assignment.bed_id].append(assignment)
    for records in by_bed.values():
        records.sort(key=lambda a: (a.start_date, a.id))
    return by_bed


def build_cells(
    window: DateWindow,
    location: LocationNode,
    bedroom: BedroomNode,
    bed: BedNode,
    assignments: Sequence[AssignmentRecord],
) -> list[GridCell]:
    dates = window.dates
    cells: list[GridCell] = []
    index = 0
    while index < len(dates):
        day = dates[index]
        target = dict(bed_id=bed.id, bedroom_id=bedroom.id, location_id=location.id)
        assignment = resolve_cell(assignments, bed.id, day)
        if assignment is None:
            cells.append(GridCell(day=day, kind=EMPTY, **target))
            index += 1
            continue

        remaining = len(dates) - index
        span = min((assignment.end_date - day).days + 1, remaining)
        starts_here = assignment.start_date == day
        beyond = assignment.end_date > window.end
        cells.append(
            GridCell(
                day=day,
                kind=BLOCK,
                span=span,
                assignment=assignment,
                show_left_handle=starts_here,
                show_right_handle=not beyond,
                continues_before_view=not starts_here,
                continues_beyond_view=beyond,
                **target,
            )
        )
        for offset in range(1, span):
            cells.append(GridCell(day=dates[index + offset], kind=COVERED, assignment=assignment, **target))
        index += span
    return cells


def build_grid(
    catalog: Sequence[LocationNode],
    assignments: Iterable[AssignmentRecord],
    window: DateWindow,
) -> Grid:
    by_bed = _index_by_bed(assignments, window)
    rows: list[GridRow] = []
    for location in catalog:
        first_in_location = True
        for bedroom in location.bedrooms:
            first_in_bedroom = True
            for bed in bedroom.beds:
                rows.append(
                    GridRow(
                        location=location,
                        bedroom=bedroom,
                        bed=bed,
                        location_label=location.name if first_in_location else "",
                        bedroom_label=bedroom.name if first_in_bedroom else "",
                        cells=build_cells(window, location, bedroom, bed, by_bed.get(bed.id, [])),
                    )
                )
                first_in_location = False
                first_in_bedroom = False
    return Grid(window=window, rows=rows, location_count=len(catalog))


def window_from_params(params, *, today: date_type, default_days: int, max_days: int) -> DateWindow:
    """
    Window for ``?start=YYYY-MM-DD&days=N`` or ``?view=week``.
    Raises ValueError on malformed values.
    """
    start_str = (params.get("start") or "").strip()
    start = date_type.fromisoformat(start_str) if start_str else today

    if (params.get("view") or "").strip() == "week":
        return week_window(start)

    days_str = (params.get("days") or "").strip()
    if not days_str:
        return date_window(start, default_days)
    if not days_str.isdigit():
        raise ValueError("days must be a positive integer.")
    days = int(days_str)
    if not 1 <= days <= max_days:
        raise ValueError(f"days must be between 1 and {max_days}.")
    return date_window(start, days)
