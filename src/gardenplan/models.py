"""
Data models for garden layout planning.

This module contains the dataclasses shared by every part of the planner:
garden settings, catalog definitions, the three kinds of placement, history
snapshots and compatibility reports. Placements and definitions are frozen so
that history snapshots can hold them without copying.

Classes:
    GardenSettings: Plot dimensions, grid cell size and garden name.
    PlantDefinition: Catalog entry describing a plant type.
    StructureDefinition: Catalog entry describing a structure type.
    PlantPlacement: A plant positioned on a grid cell.
    StructurePlacement: A structure positioned on the grid.
    PathSegment: A rectangular path on the grid.
    HistorySnapshot: Immutable copy of all placements at one point in time.
    CompatibilityEntry: One conflict or benefit between two placed plants.
    CompatibilityReport: All conflicts and benefits for a plan.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple

from .errors import InvalidSettingsError

DEFAULT_PLANT_COLOR = "#3498db"
DEFAULT_STRUCTURE_COLOR = "#8d6e63"
DEFAULT_PATH_COLOR = "#a1887f"

WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass
class GardenSettings:
    """
    Dimensions of the garden plot.

    Attributes:
        width: Plot width in metres.
        length: Plot length in metres.
        grid_size: Edge length of one grid cell in metres.
        name: Display name of the garden, also used for export filenames.
    """

    width: float = 3.0
    length: float = 4.0
    grid_size: float = 0.5
    name: str = "My Garden"

    def validate(self) -> None:
        """
        Check the settings describe a usable grid.

        Raises:
            InvalidSettingsError: If any dimension is not positive or the grid
                cell is larger than the plot.
        """
        for label, value in (
            ("width", self.width),
            ("length", self.length),
            ("grid_size", self.grid_size),
        ):
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise InvalidSettingsError(f"{label} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidSettingsError(f"{label} must be positive, got {value}")
        if self.grid_size > min(self.width, self.length):
            raise InvalidSettingsError(
                f"grid_size {self.grid_size} is larger than the plot "
                f"({self.width} x {self.length})"
            )

    @property
    def slug(self) -> str:
        """Lower-cased name with whitespace replaced by hyphens."""
        return WHITESPACE_PATTERN.sub("-", self.name).lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "width": self.width,
            "length": self.length,
            "gridSize": self.grid_size,
        }


@dataclass(frozen=True)
class PlantDefinition:
    """
    A plant type in the catalog.

    Relationships are directional: ``avoid_plants`` lists the ids this plant
    should not be grown next to, which does not imply the reverse.
    """

    id: str
    name: str
    botanical_name: str = ""
    category: str = ""
    spacing: float = 0.3
    height: float = 0.3
    width: float = 0.3
    growth_months: Tuple[int, ...] = ()
    harvest_months: Tuple[int, ...] = ()
    water_needs: str = "Medium"
    sun_needs: str = "Full Sun"
    tags: FrozenSet[str] = frozenset()
    companion_plants: FrozenSet[str] = frozenset()
    avoid_plants: FrozenSet[str] = frozenset()
    color: str = DEFAULT_PLANT_COLOR
    icon: str = "🌱"
    native: bool = False
    hardiness: str = ""

    def in_season(self, month: int) -> bool:
        """Return True if the plant is growing or harvestable in ``month``."""
        return month in self.growth_months or month in self.harvest_months

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "botanicalName": self.botanical_name,
            "category": self.category,
            "spacing": self.spacing,
            "height": self.height,
            "width": self.width,
            "growthMonths": list(self.growth_months),
            "harvestMonths": list(self.harvest_months),
            "waterNeeds": self.water_needs,
            "sunNeeds": self.sun_needs,
            "tags": sorted(self.tags),
            "companionPlants": sorted(self.companion_plants),
            "avoidPlants": sorted(self.avoid_plants),
            "color": self.color,
            "icon": self.icon,
            "native": self.native,
            "hardiness": self.hardiness,
        }


# Display values used when a placement references a plant missing from the catalog
UNKNOWN_PLANT = PlantDefinition(id="unknown", name="Unknown Plant")


@dataclass(frozen=True)
class StructureDefinition:
    """
    A structure type in the catalog (shed, raised bed, water barrel...).

    Attributes:
        blocks_planting: Whether plants may be placed on cells the structure
            covers. Beds accept plants, buildings do not.
    """

    id: str
    name: str
    width: float
    length: float
    height: float
    color: str = DEFAULT_STRUCTURE_COLOR
    category: str = ""
    blocks_planting: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "length": self.length,
            "height": self.height,
            "color": self.color,
            "category": self.category,
            "blocksPlanting": self.blocks_planting,
        }


def footprint_cells(
    x: int, y: int, width: float, length: float
) -> Iterator[Tuple[int, int]]:
    """Yield every grid cell touched by a rectangle anchored at (x, y)."""
    cols = max(1, math.ceil(round(width, 9)))
    rows = max(1, math.ceil(round(length, 9)))
    for dy in range(rows):
        for dx in range(cols):
            yield (x + dx, y + dy)


@dataclass(frozen=True)
class PlantPlacement:
    """
    A plant placed on a single grid cell.

    Attributes:
        size: Footprint diameter in grid units (definition width / grid size).
        planted_date: ISO-8601 timestamp of when the plant was placed.
    """

    id: str
    type_id: str
    x: int
    y: int
    size: float
    planted_date: str

    @property
    def cell(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "typeId": self.type_id,
            "x": self.x,
            "y": self.y,
            "size": self.size,
            "plantedDate": self.planted_date,
        }


@dataclass(frozen=True)
class StructurePlacement:
    """A structure anchored at its top-left grid cell; sizes are in grid units."""

    id: str
    type_id: str
    name: str
    x: int
    y: int
    width: float
    length: float
    height: float
    color: str = DEFAULT_STRUCTURE_COLOR
    blocks_planting: bool = True

    def cells(self) -> Iterator[Tuple[int, int]]:
        return footprint_cells(self.x, self.y, self.width, self.length)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "typeId": self.type_id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "length": self.length,
            "height": self.height,
            "color": self.color,
            "blocksPlanting": self.blocks_planting,
        }


@dataclass(frozen=True)
class PathSegment:
    """A rectangular path anchored at its top-left grid cell."""

    id: str
    x: int
    y: int
    width: float
    length: float
    color: str = DEFAULT_PATH_COLOR
    material: str = "gravel"

    def cells(self) -> Iterator[Tuple[int, int]]:
        return footprint_cells(self.x, self.y, self.width, self.length)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "length": self.length,
            "color": self.color,
            "material": self.material,
        }


@dataclass(frozen=True)
class HistorySnapshot:
    """Immutable copy of the three placement collections."""

    plants: Tuple[PlantPlacement, ...] = ()
    structures: Tuple[StructurePlacement, ...] = ()
    paths: Tuple[PathSegment, ...] = ()


@dataclass(frozen=True)
class CompatibilityEntry:
    """
    A relationship between two adjacent placed plants.

    ``plant1`` is the plant whose catalog entry declares the relationship;
    ``plant2`` is its neighbour.
    """

    plant1: PlantPlacement
    plant2: PlantPlacement
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plant1": self.plant1.to_dict(),
            "plant2": self.plant2.to_dict(),
            "reason": self.reason,
        }


@dataclass
class CompatibilityReport:
    """Conflicts and benefits among currently placed plants."""

    conflicts: List[CompatibilityEntry] = field(default_factory=list)
    benefits: List[CompatibilityEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.conflicts and not self.benefits

    def conflicts_for(self, plant_id: str) -> List[CompatibilityEntry]:
        """Return conflicts involving the given placement on either side."""
        return [
            entry
            for entry in self.conflicts
            if plant_id in (entry.plant1.id, entry.plant2.id)
        ]

    def benefits_for(self, plant_id: str) -> List[CompatibilityEntry]:
        """Return benefits involving the given placement on either side."""
        return [
            entry
            for entry in self.benefits
            if plant_id in (entry.plant1.id, entry.plant2.id)
        ]

    def summary(self) -> str:
        return f"{len(self.conflicts)} conflict(s), {len(self.benefits)} benefit(s)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conflicts": [entry.to_dict() for entry in self.conflicts],
            "benefits": [entry.to_dict() for entry in self.benefits],
        }


def lookup_color(definition: Optional[Any], fallback: str) -> str:
    """Return a definition's display colour, or ``fallback`` when unresolved."""
    if definition is None:
        return fallback
    return getattr(definition, "color", None) or fallback
