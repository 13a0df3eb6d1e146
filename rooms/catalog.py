from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError
from django.db.models import Prefetch

from .models import Bed, Bedroom, Location
from .services import CatalogLoadError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BedNode:
    id: int
    name: str
    bed_type: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "bed_type": self.bed_type}


@dataclass(frozen=True)
class BedroomNode:
    id: int
    name: str
    beds: list[BedNode] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "beds": [b.to_dict() for b in self.beds]}


@dataclass(frozen=True)
class LocationNode:
    id: int
    name: str
    building: str = ""
    floor: str = ""
    type: str = ""
    bedrooms: list[BedroomNode] = field(default_factory=list)

    @property
    def bed_count(self) -> int:
        return sum(len(b.beds) for b in self.bedrooms)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "building": self.building,
            "floor": self.floor,
            "type": self.type,
            "bedrooms": [b.to_dict() for b in self.bedrooms],
        }


def load_catalog() -> list[LocationNode]:
    """
    Load Location -> Bedroom -> Bed, every level ordered by name.

    One query per level; a failure anywhere aborts the whole load so callers
    never see a partial tree.
    """
    queryset = (
        Location.objects.order_by("name", "id")
        .only("id", "name", "building", "floor", "type")
        .prefetch_related(
            Prefetch(
                "bedrooms",
                queryset=Bedroom.objects.order_by("name", "id").prefetch_related(
                    Prefetch("beds", queryset=Bed.objects.order_by("name", "id"))
                ),
            )
        )
    )
    try:
        catalog = [
            LocationNode(
                id=location.id,
                name=location.name,
                building=location.building,
                floor=location.floor,
                type=location.type,
                bedrooms=[
                    BedroomNode(
                        id=bedroom.id,
                        name=bedroom.name,
                        beds=[BedNode(id=bed.id, name=bed.name, bed_type=bed.bed_type) for bed in bedroom.beds.all()],
                    )
                    for bedroom in location.bedrooms.all()
                ],
            )
            for location in queryset
        ]
    except DatabaseError as exc:
        logger.exception("Failed to load location catalog")
        raise CatalogLoadError("Could not load locations, bedrooms and beds.") from exc

    logger.debug("Loaded catalog with %s locations", len(catalog))
    return catalog


def has_beds(catalog: list[LocationNode]) -> bool:
    return any(location.bed_count for location in catalog)


def bedroom_options(location_id: int) -> list[dict]:
    """
    Choices for the bedroom dropdown once a location is picked.
    """
    return list(Bedroom.objects.filter(location_id=location_id).order_by("name", "id").values("id", "name"))


def bed_options(bedroom_id: int) -> list[dict]:
    return list(Bed.objects.filter(bedroom_id=bedroom_id).order_by("name", "id").values("id", "name", "bed_type"))
