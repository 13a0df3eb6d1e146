from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_type

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch

from people.models import Profile
from people.occupants import Occupant

from .models import Assignment, AssignmentProfile, Bed
from .services import (
    AssignmentInput,
    BedOverlapError,
    validate_date_range,
    validate_input,
)


logger = logging.getLogger(__name__)


@dataclass
class AssignmentRecord:
    """
    In-memory view of one assignment. Dates are mutable so a resize can
    apply them optimistically before the write lands.
    """

    id: int
    bed_id: int
    bedroom_id: int
    location_id: int
    start_date: date_type
    end_date: date_type
    notes: str = ""
    profiles: list[Occupant] = field(default_factory=list)

    @classmethod
    def from_model(cls, assignment: Assignment) -> "AssignmentRecord":
        return cls(
            id=assignment.id,
            bed_id=assignment.bed_id,
            bedroom_id=assignment.bedroom_id,
            location_id=assignment.location_id,
            start_date=assignment.start_date,
            end_date=assignment.end_date,
            notes=assignment.notes,
            profiles=[Occupant.from_profile(link.profile) for link in assignment.profile_links.all()],
        )

    @property
    def profile_ids(self) -> list[int]:
        return [p.id for p in self.profiles]

    def covers(self, day: date_type) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bed_id": self.bed_id,
            "bedroom_id": self.bedroom_id,
            "location_id": self.location_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "notes": self.notes,
            "profiles": [p.to_dict() for p in self.profiles],
        }


def _assignment_queryset():
    return Assignment.objects.prefetch_related(
        Prefetch(
            "profile_links",
            queryset=AssignmentProfile.objects.select_related("profile__team").order_by("id"),
        )
    ).order_by("start_date", "id")


class AssignmentRepository:
    """
    Single owner of assignment reads and writes for one request.

    ``snapshot()`` is loaded once and reused until a write (or an explicit
    ``invalidate()``) drops it; ``refresh()`` reloads immediately.
    """

    def __init__(self, *, enforce_overlap: bool | None = None):
        if enforce_overlap is None:
            enforce_overlap = settings.ROOMS_ENFORCE_BED_OVERLAP
        self.enforce_overlap = enforce_overlap
        self._snapshot: list[AssignmentRecord] | None = None

    # Reads

    def snapshot(self) -> list[AssignmentRecord]:
        if self._snapshot is None:
            self._snapshot = [AssignmentRecord.from_model(a) for a in _assignment_queryset()]
            logger.debug("Loaded %s assignments", len(self._snapshot))
        return self._snapshot

    def invalidate(self) -> None:
        self._snapshot = None

    def refresh(self) -> list[AssignmentRecord]:
        self.invalidate()
        return self.snapshot()

    def assigned_profile_ids(self) -> set[int]:
        return {pid for record in self.snapshot() for pid in record.profile_ids}

    def get(self, assignment_id: int) -> AssignmentRecord:
        """
        Raises Assignment.DoesNotExist for unknown ids.
        """
        return AssignmentRecord.from_model(_assignment_queryset().get(id=assignment_id))

    # Writes

    def create(self, data: AssignmentInput) -> AssignmentRecord:
        validate_input(data)
        profile_ids = self._checked_profile_ids(data.profile_ids)

        with transaction.atomic():
            bed = self._load_bed(data)
            if self.enforce_overlap:
                self._ensure_bed_free(bed.id, data.start_date, data.end_date)

            assignment = Assignment.objects.create(
                bed=bed,
                bedroom_id=bed.bedroom_id,
                location_id=bed.bedroom.location_id,
                start_date=data.start_date,
                end_date=data.end_date,
                notes=data.notes or "",
            )
            AssignmentProfile.objects.bulk_create(
                [AssignmentProfile(assignment=assignment, profile_id=pid) for pid in profile_ids]
            )

        self.invalidate()
        logger.info("Assignment %s created for bed %s", assignment.id, bed.id)
        return self.get(assignment.id)

    def update(self, assignment_id: int, data: AssignmentInput) -> AssignmentRecord:
        """
        Update the row and replace its profile links as one unit.
        """
        validate_input(data)
        profile_ids = self._checked_profile_ids(data.profile_ids)

        with transaction.atomic():
            assignment = Assignment.objects.select_for_update().get(id=assignment_id)
            bed = self._load_bed(data)
            if self.enforce_overlap:
                self._ensure_bed_free(bed.id, data.start_date, data.end_date, exclude_id=assignment.id)

            assignment.bed = bed
            assignment.bedroom_id = bed.bedroom_id
            assignment.location_id = bed.bedroom.location_id
            assignment.start_date = data.start_date
            assignment.end_date = data.end_date
            assignment.notes = data.notes or ""
            assignment.save(
                update_fields=["bed", "bedroom", "location", "start_date", "end_date", "notes", "updated_at"]
            )

            AssignmentProfile.objects.filter(assignment=assignment).delete()
            AssignmentProfile.objects.bulk_create(
                [AssignmentProfile(assignment=assignment, profile_id=pid) for pid in profile_ids]
            )

        self.invalidate()
        logger.info("Assignment %s updated", assignment_id)
        return self.get(assignment_id)

    def update_dates(self, assignment_id: int, start_date: date_type, end_date: date_type) -> AssignmentRecord:
        validate_date_range(start_date, end_date)

        with transaction.atomic():
            assignment = Assignment.objects.select_for_update().get(id=assignment_id)
            if self.enforce_overlap:
                self._ensure_bed_free(assignment.bed_id, start_date, end_date, exclude_id=assignment.id)
            assignment.start_date = start_date
            assignment.end_date = end_date
            assignment.save(update_fields=["start_date", "end_date", "updated_at"])

        self.invalidate()
        logger.info("Assignment %s moved to %s..%s", assignment_id, start_date, end_date)
        return self.get(assignment_id)

    def delete(self, assignment_id: int) -> None:
        with transaction.atomic():
            assignment = Assignment.objects.select_for_update().get(id=assignment_id)
            assignment.delete()

        self.invalidate()
        logger.info("Assignment %s deleted", assignment_id)

    # Helpers

    def _checked_profile_ids(self, profile_ids) -> list[int]:
        unique_ids = list(dict.fromkeys(int(pid) for pid in profile_ids))
        found = set(Profile.objects.filter(id__in=unique_ids).values_list("id", flat=True))
        unknown = [pid for pid in unique_ids if pid not in found]
        if unknown:
            raise ValidationError({"profile_ids": f"Unknown profile id(s): {', '.join(map(str, unknown))}."})
        return unique_ids

    def _load_bed(self, data: AssignmentInput) -> Bed:
        beds = Bed.objects.select_related("bedroom")
        if self.enforce_overlap:
            # Serializes concurrent writers on the same bed.
            beds = beds.select_for_update()
        bed = beds.get(id=data.bed_id)

        if data.bedroom_id is not None and data.bedroom_id != bed.bedroom_id:
            raise ValidationError({"bed_id": "This bed does not belong to the selected bedroom."})
        if data.location_id is not None and data.location_id != bed.bedroom.location_id:
            raise ValidationError({"bedroom_id": "This bedroom does not belong to the selected location."})
        return bed

    def _ensure_bed_free(
        self,
        bed_id: int,
        start_date: date_type,
        end_date: date_type,
        *,
        exclude_id: int | None = None,
    ) -> None:
        conflicts = Assignment.objects.filter(bed_id=bed_id, start_date__lte=end_date, end_date__gte=start_date)
        if exclude_id is not None:
            conflicts = conflicts.exclude(id=exclude_id)
        conflicting_ids = list(conflicts.values_list("id", flat=True))
        if conflicting_ids:
            raise BedOverlapError(conflicting_ids)
