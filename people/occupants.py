from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from django.conf import settings

from .colors import NO_TEAM_COLOR
from .models import Invoice, Profile


logger = logging.getLogger(__name__)

NO_TEAM_ID = "no-team"
NO_TEAM_NAME = "No Team"

PREFERENCE_LABELS = {
    "sleepSchedule": "Sleep Schedule",
    "noisePreference": "Noise Preference",
    "cleanliness": "Cleanliness",
    "personality": "Personality Type",
}

PREFERENCE_OPTIONS: dict[str, list[tuple[str, str]]] = {
    "sleepSchedule": [
        ("early_riser", "Early Riser"),
        ("night_owl", "Night Owl"),
        ("flexible", "Flexible Schedule"),
    ],
    "noisePreference": [
        ("quiet", "Prefers Quiet"),
        ("moderate", "Moderate Noise OK"),
        ("social", "Social Environment"),
    ],
    "cleanliness": [
        ("very_clean", "Very Clean"),
        ("tidy", "Tidy"),
        ("relaxed", "Relaxed About Cleaning"),
    ],
    "personality": [
        ("introvert", "Introvert"),
        ("extrovert", "Extrovert"),
        ("ambivert", "Ambivert"),
    ],
}


@dataclass(frozen=True)
class Occupant:
    id: int
    full_name: str
    email: str
    avatar_url: str
    team_id: int | None
    team_name: str
    team_color: str
    housing_preferences: dict | None

    @classmethod
    def from_profile(cls, profile: Profile) -> "Occupant":
        team = profile.team
        return cls(
            id=profile.id,
            full_name=profile.display_name,
            email=profile.email,
            avatar_url=profile.avatar_url,
            team_id=profile.team_id,
            team_name=team.name if team else "",
            team_color=profile.team_color,
            housing_preferences=profile.housing_preferences or None,
        )

    @property
    def initial(self) -> str:
        return (self.full_name or "?")[:1].upper()

    @property
    def preference_details(self) -> list[tuple[str, str]]:
        return describe_preferences(self.housing_preferences)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "avatar_url": self.avatar_url,
            "team": (
                {"id": self.team_id, "name": self.team_name, "color": self.team_color}
                if self.team_id is not None
                else None
            ),
            "housing_preferences": self.housing_preferences,
        }


@dataclass
class TeamGroup:
    id: str
    name: str
    color: str
    occupants: list[Occupant] = field(default_factory=list)

    @property
    def member_count(self) -> int:
        return len(self.occupants)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "member_count": self.member_count,
            "profiles": [o.to_dict() for o in self.occupants],
        }


def paid_profile_ids() -> list[int]:
    """
    Distinct ids of profiles holding at least one paid invoice.
    """
    rows = (
        Invoice.objects.filter(status=settings.PEOPLE_PAID_INVOICE_STATUS, profile__isnull=False)
        .values_list("profile_id", flat=True)
        .distinct()
    )
    return sorted(set(rows))


def eligible_profiles(*, include_ids: Iterable[int] = ()) -> list[Occupant]:
    """
    Profiles that may be assigned a bed, ordered by name.

    ``include_ids`` keeps profiles already linked to the assignment being
    edited selectable even if their invoice status changed since.
    """
    ids = set(paid_profile_ids())
    ids.update(include_ids)
    if not ids:
        return []
    profiles = Profile.objects.select_related("team").filter(id__in=ids).order_by("full_name", "email")
    occupants = [Occupant.from_profile(p) for p in profiles]
    logger.debug("Loaded %s eligible occupants", len(occupants))
    return occupants


def available_profiles(eligible: Sequence[Occupant], assigned_ids: Iterable[int]) -> list[Occupant]:
    assigned = set(assigned_ids)
    return [o for o in eligible if o.id not in assigned]


def group_by_team(occupants: Iterable[Occupant]) -> list[TeamGroup]:
    """
    Group occupants for the sidebar. The "No Team" group always comes first;
    groups left empty are dropped.
    """
    groups: dict[str, TeamGroup] = {
        NO_TEAM_ID: TeamGroup(id=NO_TEAM_ID, name=NO_TEAM_NAME, color=NO_TEAM_COLOR),
    }
    for occupant in occupants:
        if occupant.team_id is None:
            groups[NO_TEAM_ID].occupants.append(occupant)
            continue
        key = str(occupant.team_id)
        if key not in groups:
            groups[key] = TeamGroup(id=key, name=occupant.team_name, color=occupant.team_color)
        groups[key].occupants.append(occupant)
    return [g for g in groups.values() if g.occupants]


def search_profiles(occupants: Iterable[Occupant], query: str) -> list[Occupant]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(occupants)
    return [
        o
        for o in occupants
        if needle in (o.full_name or "").lower() or needle in (o.email or "").lower()
    ]


def filter_by_preferences(occupants: Iterable[Occupant], filters: Mapping[str, Sequence[str]]) -> list[Occupant]:
    """
    Keep occupants matching every category that has at least one selected value.
    A preference stored as a list matches when any of its items is selected.
    """
    active = {category: set(values) for category, values in filters.items() if values}
    if not active:
        return list(occupants)

    def matches(occupant: Occupant) -> bool:
        prefs = occupant.housing_preferences or {}
        for category, accepted in active.items():
            value = prefs.get(category)
            if value is None:
                return False
            values = value if isinstance(value, list) else [value]
            if not accepted.intersection(str(v) for v in values):
                return False
        return True

    return [o for o in occupants if matches(o)]


def _humanize(text: str) -> str:
    spaced = re.sub(r"([A-Z])", r" \1", text).replace("_", " ").strip()
    return spaced[:1].upper() + spaced[1:]


def describe_preferences(prefs: Mapping | None) -> list[tuple[str, str]]:
    """
    Label/value pairs shown in the grid tooltip. Empty values are skipped.
    """
    if not prefs:
        return []
    described = []
    for key, value in prefs.items():
        if not value:
            continue
        label = PREFERENCE_LABELS.get(key) or _humanize(key)
        if isinstance(value, list):
            shown = ", ".join(str(v) for v in value)
        elif isinstance(value, str):
            shown = _humanize(value)
        else:
            shown = str(value)
        described.append((label, shown))
    return described
