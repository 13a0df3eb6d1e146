from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from datetime import timedelta


class AssignmentError(Exception):
    """Base error type for room assignment domain errors."""


class MissingInformationError(AssignmentError):
    """Raised before any write when required assignment fields are absent."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Please fill out all required fields.")


class InvalidDateRangeError(AssignmentError):
    """Raised when an assignment would end before it starts."""


class BedOverlapError(AssignmentError):
    """Raised when the overlap check is enabled and the bed is already taken."""

    def __init__(self, conflicting_ids: list[int]):
        self.conflicting_ids = list(conflicting_ids)
        super().__init__("This bed is already assigned for part of that date range.")


class InvalidDropPayloadError(AssignmentError):
    """Raised when a dropped profile payload is missing or malformed."""


class CatalogLoadError(AssignmentError):
    """Raised when the location/bedroom/bed tree cannot be loaded."""


REQUIRED_FIELDS = ("profile_ids", "location_id", "bedroom_id", "bed_id", "start_date", "end_date")


@dataclass(frozen=True)
class AssignmentInput:
    bed_id: int | None
    start_date: date_type | None
    end_date: date_type | None
    profile_ids: tuple[int, ...] = ()
    location_id: int | None = None
    bedroom_id: int | None = None
    notes: str = ""


@dataclass(frozen=True)
class AssignmentDraft:
    """
    A staged, unsaved assignment used to pre-fill the edit panel.
    """

    start_date: date_type
    end_date: date_type
    profile_ids: tuple[int, ...] = ()
    location_id: int | None = None
    bedroom_id: int | None = None
    bed_id: int | None = None
    notes: str = ""

    def to_input(self) -> AssignmentInput:
        return AssignmentInput(
            bed_id=self.bed_id,
            start_date=self.start_date,
            end_date=self.end_date,
            profile_ids=self.profile_ids,
            location_id=self.location_id,
            bedroom_id=self.bedroom_id,
            notes=self.notes,
        )

    def to_dict(self) -> dict:
        return {
            "profile_ids": list(self.profile_ids),
            "location_id": self.location_id,
            "bedroom_id": self.bedroom_id,
            "bed_id": self.bed_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "notes": self.notes,
        }


def missing_fields(data: AssignmentInput) -> list[str]:
    missing = []
    for name in REQUIRED_FIELDS:
        value = getattr(data, name)
        if value is None or value == () or value == "":
            missing.append(name)
    return missing


def validate_input(data: AssignmentInput) -> None:
    """
    Reject incomplete or inverted input before touching the database.
    """
    missing = missing_fields(data)
    if missing:
        raise MissingInformationError(missing)
    validate_date_range(data.start_date, data.end_date)


def validate_date_range(start: date_type, end: date_type) -> None:
    if start > end:
        raise InvalidDateRangeError("End date must be on or after the start date.")


def default_stay_end(start: date_type, stay_days: int) -> date_type:
    """
    Inclusive end date of a stay of ``stay_days`` nights starting on ``start``.
    """
    return start + timedelta(days=max(stay_days, 1) - 1)
