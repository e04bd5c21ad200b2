"""
Placement store: the live plants, structures and paths of a garden.

All mutations follow the same sequence: validate, record the change in
history, then apply it. Validation failures raise before anything is recorded
or applied.

Occupancy rules:
- A cell holds at most one plant.
- Plants may not share cells with paths or with structures whose definition
  blocks planting (sheds, greenhouses...). Beds do not block planting.
- Structures and paths may overlap each other.
"""

import itertools
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .catalog import Catalog
from .errors import NotFoundError, OccupiedCellError
from .grid import GridModel
from .history import (
    COLLECTIONS,
    PATHS,
    PLANTS,
    STRUCTURES,
    Change,
    HistoryManager,
)
from .models import (
    DEFAULT_PATH_COLOR,
    HistorySnapshot,
    PathSegment,
    PlantPlacement,
    StructurePlacement,
    footprint_cells,
)

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"^(plant|structure|path)-(\d+)$")

# Where new structures land when no position is given
DEFAULT_STRUCTURE_POSITION = (1, 1)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PlacementStore:
    """
    Owns the three placement collections and enforces occupancy.

    Example:
        >>> store = PlacementStore(GridModel(GardenSettings()), default_catalog())
        >>> tomato = store.place_plant("tomato", 2, 3)
        >>> store.plant_at(2, 3) == tomato
        True
    """

    def __init__(
        self,
        grid: GridModel,
        catalog: Catalog,
        history: Optional[HistoryManager] = None,
    ):
        self.grid = grid
        self.catalog = catalog
        self.history = history if history is not None else HistoryManager()
        self._items: Dict[str, List] = {name: [] for name in COLLECTIONS}
        self._counter = itertools.count(1)

    @property
    def plants(self) -> Tuple[PlantPlacement, ...]:
        return tuple(self._items[PLANTS])

    @property
    def structures(self) -> Tuple[StructurePlacement, ...]:
        return tuple(self._items[STRUCTURES])

    @property
    def paths(self) -> Tuple[PathSegment, ...]:
        return tuple(self._items[PATHS])

    def __len__(self) -> int:
        return sum(len(items) for items in self._items.values())

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            plants=self.plants, structures=self.structures, paths=self.paths
        )

    def plant_at(self, x: int, y: int) -> Optional[PlantPlacement]:
        for plant in self._items[PLANTS]:
            if plant.x == x and plant.y == y:
                return plant
        return None

    def occupied_cells(self) -> Set[Tuple[int, int]]:
        """Cells holding a plant."""
        return {plant.cell for plant in self._items[PLANTS]}

    def blocked_cells(self) -> Dict[Tuple[int, int], str]:
        """Map cells where plants may not go to the name of what blocks them."""
        blocked: Dict[Tuple[int, int], str] = {}
        for structure in self._items[STRUCTURES]:
            if structure.blocks_planting:
                for cell in structure.cells():
                    blocked.setdefault(cell, structure.name)
        for path in self._items[PATHS]:
            for cell in path.cells():
                blocked.setdefault(cell, "path")
        return blocked

    def find(self, item_id: str):
        """Return the plant, structure or path with this id, or None."""
        for collection in COLLECTIONS:
            for item in self._items[collection]:
                if item.id == item_id:
                    return item
        return None

    # -- plants -------------------------------------------------------------

    def place_plant(
        self,
        type_id: str,
        x: int,
        y: int,
        planted_date: Optional[str] = None,
    ) -> PlantPlacement:
        """
        Place a plant on a grid cell.

        Args:
            type_id: Catalog id of the plant.
            x: Grid column.
            y: Grid row.
            planted_date: ISO-8601 timestamp; defaults to now.

        Returns:
            The new placement.

        Raises:
            NotFoundError: If the plant type is not in the catalog.
            OutOfBoundsError: If the cell is outside the grid.
            OccupiedCellError: If the cell holds a plant or a blocking item.
        """
        definition = self.catalog.plant(type_id)
        self._check_plant_cell(x, y)

        placement = PlantPlacement(
            id=self._next_id("plant"),
            type_id=type_id,
            x=x,
            y=y,
            size=self.grid.to_grid_units(definition.width),
            planted_date=planted_date or utc_now(),
        )
        self._commit([Change(PLANTS, len(self._items[PLANTS]), after=placement)])
        logger.debug("Placed %s at (%d, %d) as %s", type_id, x, y, placement.id)
        return placement

    def move_plant(self, plant_id: str, x: int, y: int) -> PlantPlacement:
        """
        Move a placed plant to another cell.

        Raises:
            NotFoundError: If no plant has this id.
            OutOfBoundsError: If the target cell is outside the grid.
            OccupiedCellError: If the target cell is taken by something else.
        """
        index = self._index_of(PLANTS, plant_id)
        if index is None:
            raise NotFoundError("plant", plant_id)
        current = self._items[PLANTS][index]
        if current.cell == (x, y):
            return current
        self._check_plant_cell(x, y)

        moved = PlantPlacement(
            id=current.id,
            type_id=current.type_id,
            x=x,
            y=y,
            size=current.size,
            planted_date=current.planted_date,
        )
        self._commit([Change(PLANTS, index, before=current, after=moved)])
        logger.debug("Moved %s to (%d, %d)", plant_id, x, y)
        return moved

    def remove_plant(self, plant_id: str) -> Optional[PlantPlacement]:
        """Remove a plant. Unknown ids are ignored with a warning."""
        return self._remove(PLANTS, plant_id)

    # -- structures ---------------------------------------------------------

    def add_structure(
        self,
        type_id: str,
        x: int = DEFAULT_STRUCTURE_POSITION[0],
        y: int = DEFAULT_STRUCTURE_POSITION[1],
    ) -> StructurePlacement:
        """
        Add a structure with its top-left corner on (x, y).

        Raises:
            NotFoundError: If the structure type is not in the catalog.
            OutOfBoundsError: If the footprint does not fit on the grid.
            OccupiedCellError: If a blocking structure would cover a plant.
        """
        definition = self.catalog.structure(type_id)
        width = self.grid.to_grid_units(definition.width)
        length = self.grid.to_grid_units(definition.length)
        self.grid.check_footprint(x, y, width, length)
        if definition.blocks_planting:
            self._check_no_plants(footprint_cells(x, y, width, length))

        placement = StructurePlacement(
            id=self._next_id("structure"),
            type_id=type_id,
            name=definition.name,
            x=x,
            y=y,
            width=width,
            length=length,
            height=definition.height,
            color=definition.color,
            blocks_planting=definition.blocks_planting,
        )
        self._commit([Change(STRUCTURES, len(self._items[STRUCTURES]), after=placement)])
        logger.debug("Added %s at (%d, %d) as %s", type_id, x, y, placement.id)
        return placement

    def remove_structure(self, structure_id: str) -> Optional[StructurePlacement]:
        """Remove a structure. Unknown ids are ignored with a warning."""
        return self._remove(STRUCTURES, structure_id)

    # -- paths --------------------------------------------------------------

    def add_path(
        self,
        x: int,
        y: int,
        width: float = 1,
        length: float = 1,
        color: str = DEFAULT_PATH_COLOR,
        material: str = "gravel",
    ) -> PathSegment:
        """
        Add a rectangular path; width and length are in grid units.

        Raises:
            ValueError: If width or length is not positive.
            OutOfBoundsError: If the path does not fit on the grid.
            OccupiedCellError: If the path would cover a plant.
        """
        if width <= 0 or length <= 0:
            raise ValueError("path width and length must be positive")
        self.grid.check_footprint(x, y, width, length)
        self._check_no_plants(footprint_cells(x, y, width, length))

        segment = PathSegment(
            id=self._next_id("path"),
            x=x,
            y=y,
            width=width,
            length=length,
            color=color,
            material=material,
        )
        self._commit([Change(PATHS, len(self._items[PATHS]), after=segment)])
        logger.debug("Added path %s at (%d, %d)", segment.id, x, y)
        return segment

    def remove_path(self, path_id: str) -> Optional[PathSegment]:
        """Remove a path. Unknown ids are ignored with a warning."""
        return self._remove(PATHS, path_id)

    # -- whole plan ---------------------------------------------------------

    def clear(self) -> None:
        """Remove every placement as a single undoable action."""
        changes = []
        for collection in COLLECTIONS:
            items = self._items[collection]
            for index in range(len(items) - 1, -1, -1):
                changes.append(Change(collection, index, before=items[index]))
        if not changes:
            return
        self._commit(changes)
        logger.debug("Cleared %d placements", len(changes))

    def restore(self, snapshot: HistorySnapshot) -> None:
        """
        Replace the live placements with a snapshot taken from this store.

        Recorded as a single undoable action.
        """
        if snapshot == self.snapshot():
            return
        changes = []
        for collection in COLLECTIONS:
            items = self._items[collection]
            for index in range(len(items) - 1, -1, -1):
                changes.append(Change(collection, index, before=items[index]))
            for index, item in enumerate(getattr(snapshot, collection)):
                changes.append(Change(collection, index, after=item))
        self._commit(changes)
        logger.debug("Restored snapshot with %d plants", len(snapshot.plants))

    def apply_changes(self, changes: Sequence[Change]) -> None:
        """
        Apply changes without recording them.

        Used by HistoryManager to move between states; the changes are
        assumed to have been validated when first recorded.
        """
        for change in changes:
            items = self._items[change.collection]
            if change.before is not None and change.after is not None:
                items[change.index] = change.after
            elif change.after is not None:
                items.insert(change.index, change.after)
            else:
                del items[change.index]

    def load(
        self,
        plants: Iterable[PlantPlacement] = (),
        structures: Iterable[StructurePlacement] = (),
        paths: Iterable[PathSegment] = (),
    ) -> None:
        """
        Insert previously saved placements, re-checking every invariant.

        Intended for an empty store; the load is not recorded in history.
        Plants are checked against bounds, each other and any blocking
        structures or paths loaded with them.

        Raises:
            OutOfBoundsError, OccupiedCellError, NotFoundError: On the first
                placement that would break an invariant. Nothing is loaded.
            ValueError: If the store is not empty.
        """
        if len(self):
            raise ValueError("placements can only be loaded into an empty store")
        structures = list(structures)
        paths = list(paths)
        plants = list(plants)
        staging = PlacementStore(self.grid, self.catalog, HistoryManager(max_depth=1))
        for item in structures:
            self.catalog.structure(item.type_id)
            self.grid.check_footprint(item.x, item.y, item.width, item.length)
            staging._items[STRUCTURES].append(item)
        for item in paths:
            self.grid.check_footprint(item.x, item.y, item.width, item.length)
            staging._items[PATHS].append(item)
        for item in plants:
            self.catalog.plant(item.type_id)
            staging._check_plant_cell(item.x, item.y)
            staging._items[PLANTS].append(item)

        for collection in COLLECTIONS:
            self._items[collection].extend(staging._items[collection])
        loaded = itertools.chain(plants, structures, paths)
        self._advance_counter(item.id for item in loaded)

    # -- internals ----------------------------------------------------------

    def _check_plant_cell(self, x: int, y: int) -> None:
        self.grid.check_bounds(x, y)
        occupant = self.plant_at(x, y)
        if occupant is not None:
            raise OccupiedCellError(x, y, occupant.type_id)
        blocker = self.blocked_cells().get((x, y))
        if blocker is not None:
            raise OccupiedCellError(x, y, blocker)

    def _check_no_plants(self, cells: Iterable[Tuple[int, int]]) -> None:
        occupied = {plant.cell: plant for plant in self._items[PLANTS]}
        for cell in cells:
            if cell in occupied:
                raise OccupiedCellError(cell[0], cell[1], occupied[cell].type_id)

    def _remove(self, collection: str, item_id: str):
        index = self._index_of(collection, item_id)
        if index is None:
            logger.warning("Cannot remove %s: no such id %r", collection, item_id)
            return None
        removed = self._items[collection][index]
        self._commit([Change(collection, index, before=removed)])
        logger.debug("Removed %s", item_id)
        return removed

    def _commit(self, changes: List[Change]) -> None:
        self.history.record(changes)
        self.apply_changes(changes)

    def _index_of(self, collection: str, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items[collection]):
            if item.id == item_id:
                return index
        return None

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"

    def _advance_counter(self, ids: Iterable[str]) -> None:
        highest = 0
        for item_id in ids:
            match = ID_PATTERN.match(item_id)
            if match:
                highest = max(highest, int(match.group(2)))
        current = next(self._counter)
        self._counter = itertools.count(max(current, highest + 1))
