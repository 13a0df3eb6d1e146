from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from people.models import Invoice, InvoiceStatus, Profile, Team

from .models import Bed, Bedroom, Location, LocationType


@dataclass(frozen=True)
class BedroomSeed:
    name: str
    beds: list[tuple[str, str]]


@dataclass(frozen=True)
class LocationSeed:
    name: str
    building: str
    floor: str
    max_occupancy: int
    bedrooms: list[BedroomSeed] = field(default_factory=list)
    type: str = LocationType.APARTMENT


@dataclass(frozen=True)
class ProfileSeed:
    full_name: str
    email: str
    team: str | None
    housing_preferences: dict | None = None
    paid: bool = True


DEFAULT_LOCATIONS: list[LocationSeed] = [
    LocationSeed(
        name="Alpine Lodge",
        building="Main house",
        floor="1",
        max_occupancy=6,
        bedrooms=[
            BedroomSeed(name="Room 1", beds=[("Bed A", "single"), ("Bed B", "single")]),
            BedroomSeed(name="Room 2", beds=[("Bed A", "double")]),
        ],
    ),
    LocationSeed(
        name="Harbor View",
        building="Annex",
        floor="2",
        max_occupancy=4,
        bedrooms=[
            BedroomSeed(name="Suite", beds=[("Bed A", "queen"), ("Bed B", "sofa")]),
        ],
    ),
]

DEFAULT_TEAMS = ["Design", "Engineering"]

DEFAULT_PROFILES: list[ProfileSeed] = [
    ProfileSeed(
        full_name="Ada Byrne",
        email="ada@example.com",
        team="Engineering",
        housing_preferences={"sleepSchedule": "early_riser", "personality": "introvert"},
    ),
    ProfileSeed(
        full_name="Ben Okafor",
        email="ben@example.com",
        team="Engineering",
        housing_preferences={"sleepSchedule": "night_owl", "noisePreference": "moderate"},
    ),
    ProfileSeed(
        full_name="Chloe Martin",
        email="chloe@example.com",
        team="Design",
        housing_preferences={"cleanliness": "very_clean"},
    ),
    ProfileSeed(full_name="Dan Ruiz", email="dan@example.com", team=None),
    ProfileSeed(full_name="Eve Lind", email="eve@example.com", team="Design", paid=False),
]


def _seed_invoice(profile: Profile, *, paid: bool) -> bool:
    if profile.invoices.exists():
        return False
    first_name, _, last_name = profile.full_name.partition(" ")
    Invoice.objects.create(
        profile=profile,
        email=profile.email,
        first_name=first_name,
        last_name=last_name,
        room_type="Shared room",
        checkin=date(2025, 5, 1),
        checkout=date(2025, 5, 31),
        price=Decimal("450.00"),
        status=InvoiceStatus.PAID if paid else InvoiceStatus.PENDING,
        paid_at=timezone.now() if paid else None,
    )
    return True


def seed_demo_housing() -> dict[str, int]:
    """
    Idempotently seed demo locations, beds, teams and people.

    Rows are matched by name (email for profiles); existing rows are never
    overwritten, so running it twice creates nothing the second time.
    """
    counts = {"locations": 0, "bedrooms": 0, "beds": 0, "teams": 0, "profiles": 0, "invoices": 0}

    with transaction.atomic():
        for loc in DEFAULT_LOCATIONS:
            location, created = Location.objects.get_or_create(
                name=loc.name,
                defaults={
                    "building": loc.building,
                    "floor": loc.floor,
                    "max_occupancy": loc.max_occupancy,
                    "type": loc.type,
                },
            )
            counts["locations"] += created
            for room in loc.bedrooms:
                bedroom, created = Bedroom.objects.get_or_create(location=location, name=room.name)
                counts["bedrooms"] += created
                for bed_name, bed_type in room.beds:
                    _, created = Bed.objects.get_or_create(
                        bedroom=bedroom, name=bed_name, defaults={"bed_type": bed_type}
                    )
                    counts["beds"] += created

        teams = {}
        for name in DEFAULT_TEAMS:
            teams[name], created = Team.objects.get_or_create(name=name)
            counts["teams"] += created

        for person in DEFAULT_PROFILES:
            profile, created = Profile.objects.get_or_create(
                email=person.email,
                defaults={
                    "full_name": person.full_name,
                    "team": teams.get(person.team) if person.team else None,
                    "housing_preferences": person.housing_preferences,
                },
            )
            counts["profiles"] += created
            counts["invoices"] += _seed_invoice(profile, paid=person.paid)

    return counts
