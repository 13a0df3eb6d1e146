from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date as date_type

from django.conf import settings

from people.models import Profile
from people.occupants import Occupant

from .models import Bed
from .services import AssignmentDraft, InvalidDropPayloadError, default_stay_end


logger = logging.getLogger(__name__)

# Key the browser sidebar writes the dragged profile under.
DRAG_MIME_KEY = "profile"


def drag_payload(occupant: Occupant) -> str:
    """
    JSON stored on the drag event when a profile leaves the sidebar.
    """
    return json.dumps(
        {
            "id": occupant.id,
            "full_name": occupant.full_name,
            "email": occupant.email,
            "avatar_url": occupant.avatar_url,
            "team_id": occupant.team_id,
        }
    )


def parse_drag_payload(raw) -> int:
    """
    Profile id carried by a drag payload. Anything unusable raises
    InvalidDropPayloadError so the drop is abandoned untouched.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidDropPayloadError("No profile was dropped.")

    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidDropPayloadError("The dropped profile could not be read.") from exc
    else:
        data = raw

    if not isinstance(data, dict):
        raise InvalidDropPayloadError("The dropped profile could not be read.")

    profile_id = data.get("id")
    if isinstance(profile_id, bool) or not isinstance(profile_id, (int, str)):
        raise InvalidDropPayloadError("The dropped profile has no id.")
    try:
        return int(profile_id)
    except ValueError as exc:
        raise InvalidDropPayloadError("The dropped profile has no id.") from exc


@dataclass(frozen=True)
class CreateAssignmentIntent:
    """
    "Put this profile in this bed from this date", as emitted by a drop.
    """

    profile_id: int
    bed_id: int
    target_date: date_type

    @classmethod
    def from_transport(cls, raw_payload, *, bed_id: int, target_date: date_type) -> "CreateAssignmentIntent":
        return cls(profile_id=parse_drag_payload(raw_payload), bed_id=bed_id, target_date=target_date)


def stage_draft(intent: CreateAssignmentIntent, *, stay_days: int | None = None) -> AssignmentDraft:
    """
    Resolve the dropped cell into a draft for the edit panel. Nothing is written.

    Raises Bed.DoesNotExist / Profile.DoesNotExist for stale ids.
    """
    if stay_days is None:
        stay_days = settings.ROOMS_DEFAULT_STAY_DAYS

    bed = Bed.objects.select_related("bedroom").get(id=intent.bed_id)
    if not Profile.objects.filter(id=intent.profile_id).exists():
        raise Profile.DoesNotExist(f"Profile {intent.profile_id} does not exist.")

    draft = AssignmentDraft(
        start_date=intent.target_date,
        end_date=default_stay_end(intent.target_date, stay_days),
        profile_ids=(intent.profile_id,),
        location_id=bed.bedroom.location_id,
        bedroom_id=bed.bedroom_id,
        bed_id=bed.id,
    )
    logger.debug("Staged draft for profile %s on bed %s", intent.profile_id, bed.id)
    return draft
