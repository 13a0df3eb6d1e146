from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from people.notifications import notification

from .forms import AssignmentForm
from .models import Assignment
from .repository import AssignmentRecord, AssignmentRepository
from .services import AssignmentDraft, AssignmentError, BedOverlapError, default_stay_end


logger = logging.getLogger(__name__)

PANEL_REQUIRED_FIELDS = ("profiles", "location", "bedroom", "bed", "start_date", "end_date")


@dataclass
class PanelResult:
    ok: bool
    notification: dict
    errors: dict = field(default_factory=dict)
    refetch: bool = False
    assignment: AssignmentRecord | None = None
    status: int = 400

    def to_dict(self) -> dict:
        return {
            "success": self.ok,
            "notification": self.notification,
            "errors": self.errors,
            "refetch": self.refetch,
            "assignment": self.assignment.to_dict() if self.assignment else None,
        }


def _raw_values(data, name: str) -> list:
    if hasattr(data, "getlist"):
        values = data.getlist(name)
    else:
        value = data.get(name)
        values = value if isinstance(value, (list, tuple)) else [value]
    return [v for v in values if v not in (None, "")]


def _missing(data) -> list[str]:
    return [name for name in PANEL_REQUIRED_FIELDS if not _raw_values(data, name)]


class EditPanel:
    """
    Side panel bound to one assignment, or to a staged draft when creating.
    """

    def __init__(
        self,
        repository: AssignmentRepository,
        *,
        record: AssignmentRecord | None = None,
        draft: AssignmentDraft | None = None,
    ):
        self.repository = repository
        self.record = record
        self.draft = draft

    @classmethod
    def for_assignment(cls, repository: AssignmentRepository, assignment_id: int) -> "EditPanel":
        return cls(repository, record=repository.get(assignment_id))

    @classmethod
    def for_draft(cls, repository: AssignmentRepository, draft: AssignmentDraft | None = None) -> "EditPanel":
        if draft is None:
            # "Add Assignment" without a drop: today plus the default stay.
            today = timezone.localdate()
            draft = AssignmentDraft(start_date=today, end_date=default_stay_end(today, settings.ROOMS_DEFAULT_STAY_DAYS))
        return cls(repository, draft=draft)

    @property
    def is_new(self) -> bool:
        return self.record is None

    def initial(self) -> dict:
        source = self.record or self.draft
        if source is None:
            return {}
        return {
            "profiles": list(source.profile_ids),
            "location": source.location_id,
            "bedroom": source.bedroom_id,
            "bed": source.bed_id,
            "start_date": source.start_date,
            "end_date": source.end_date,
            "notes": source.notes,
        }

    def form(self, data=None) -> AssignmentForm:
        include = self.record.profile_ids if self.record else ()
        return AssignmentForm(data, initial=self.initial(), include_profile_ids=include)

    def save(self, data) -> PanelResult:
        missing = _missing(data)
        if missing:
            logger.info("Assignment save rejected, missing %s", ", ".join(missing))
            return PanelResult(
                ok=False,
                notification=notification("Missing information", "Please fill out all required fields.", destructive=True),
                errors={name: ["This field is required."] for name in missing},
            )

        form = self.form(data)
        if not form.is_valid():
            return PanelResult(
                ok=False,
                notification=notification(
                    "Error saving assignment",
                    "Please fix the highlighted fields and try again.",
                    destructive=True,
                ),
                errors={name: [str(e) for e in errs] for name, errs in form.errors.items()},
            )

        payload = form.to_input()
        try:
            if self.is_new:
                record = self.repository.create(payload)
                message = notification("Assignment created", "The assignment has been created successfully.")
            else:
                record = self.repository.update(self.record.id, payload)
                message = notification("Assignment updated", "The assignment has been updated successfully.")
        except BedOverlapError as exc:
            return self._failure("Error saving assignment", str(exc), errors={"bed": [str(exc)]}, status=409)
        except ValidationError as exc:
            return self._failure("Error saving assignment", "Please fix the highlighted fields and try again.", errors=exc.message_dict)
        except AssignmentError as exc:
            return self._failure("Error saving assignment", str(exc))
        except Assignment.DoesNotExist:
            return self._failure("Error saving assignment", "This assignment no longer exists.", status=404)
        except DatabaseError as exc:
            logger.exception("Failed to save assignment")
            return self._failure("Error saving assignment", str(exc), status=500)

        self.record = record
        return PanelResult(ok=True, notification=message, refetch=True, assignment=record)

    def delete(self, *, confirmed: bool) -> PanelResult:
        if self.is_new:
            return self._failure("Error deleting assignment", "This assignment has not been saved yet.")
        if not confirmed:
            return self._failure("Confirm deletion", "Please confirm you want to delete this assignment.")

        try:
            self.repository.delete(self.record.id)
        except Assignment.DoesNotExist:
            return self._failure("Error deleting assignment", "This assignment no longer exists.", status=404)
        except DatabaseError as exc:
            logger.exception("Failed to delete assignment %s", self.record.id)
            return self._failure("Error deleting assignment", str(exc), status=500)

        return PanelResult(
            ok=True,
            notification=notification("Assignment deleted", "The assignment has been deleted successfully."),
            refetch=True,
        )

    @staticmethod
    def _failure(title: str, description: str, *, errors: dict | None = None, status: int = 400) -> PanelResult:
        return PanelResult(
            ok=False,
            notification=notification(title, description, destructive=True),
            errors=errors or {},
            status=status,
        )
