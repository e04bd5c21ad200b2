"""
Main garden planner module.

Combines the grid, catalog, placement store, history, compatibility analysis
and export into a single editing session.
"""

import dataclasses
import logging
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Union,
)

from .catalog import Catalog, default_catalog
from .compatibility import CompatibilityAnalyzer
from .export import PlanExporter, load_plan
from .grid import GridModel
from .history import DEFAULT_MAX_HISTORY, HistoryManager
from .models import (
    CompatibilityReport,
    GardenSettings,
    HistorySnapshot,
    PathSegment,
    PlantDefinition,
    PlantPlacement,
    StructurePlacement,
)
from .png_renderer import PlanPNGRenderer
from .renderer import PlanTextRenderer
from .store import PlacementStore

logger = logging.getLogger(__name__)

# Called with the event name and the planner after every accepted change
Listener = Callable[[str, "GardenPlanner"], None]


class GardenPlanner:
    """
    An editing session over one garden plan.

    Example:
        >>> planner = GardenPlanner()
        >>> potato = planner.place_plant("potato", 2, 2)
        >>> tomato = planner.place_plant("tomato", 2, 3)
        >>> [entry.reason for entry in planner.compatibility().conflicts]
        ['Potato should not be planted near Tomato', 'Tomato should not be planted near Potato']
    """

    def __init__(
        self,
        settings: Optional[GardenSettings] = None,
        catalog: Optional[Catalog] = None,
        max_history: Optional[int] = DEFAULT_MAX_HISTORY,
        listeners: Iterable[Listener] = (),
    ):
        """
        Initialize the planner.

        Args:
            settings: Garden dimensions; defaults to a 3m x 4m plot with 0.5m cells.
            catalog: Plant and structure definitions; defaults to the built-in catalog.
            max_history: Number of undoable actions to keep (None for unlimited).
            listeners: Callbacks notified after every accepted change.
        """
        self.settings = settings if settings is not None else GardenSettings()
        self.catalog = catalog if catalog is not None else default_catalog()
        self.grid = GridModel(self.settings)
        self.history = HistoryManager(max_depth=max_history)
        self.store = PlacementStore(self.grid, self.catalog, self.history)
        self.analyzer = CompatibilityAnalyzer()
        self.exporter = PlanExporter(self.analyzer)
        self.text_renderer = PlanTextRenderer()
        self._listeners: List[Listener] = list(listeners)

    @classmethod
    def from_plan(
        cls,
        document: Union[str, Mapping[str, Any]],
        catalog: Optional[Catalog] = None,
        max_history: Optional[int] = DEFAULT_MAX_HISTORY,
        listeners: Iterable[Listener] = (),
    ) -> "GardenPlanner":
        """
        Start a session from an exported plan document (dict or JSON text).

        All placements are re-validated against the document's settings.
        """
        planner = cls(catalog=catalog, max_history=max_history, listeners=listeners)
        settings, store = load_plan(
            document,
            planner.catalog,
            store_factory=lambda grid, cat: PlacementStore(grid, cat, planner.history),
        )
        planner.settings = settings
        planner.grid = store.grid
        planner.store = store
        return planner

    # -- listeners ----------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # -- state --------------------------------------------------------------

    @property
    def plants(self) -> Sequence[PlantPlacement]:
        return self.store.plants

    @property
    def structures(self) -> Sequence[StructurePlacement]:
        return self.store.structures

    @property
    def paths(self) -> Sequence[PathSegment]:
        return self.store.paths

    def snapshot(self) -> HistorySnapshot:
        return self.store.snapshot()

    def search(
        self,
        term: str = "",
        tags: Union[str, Sequence[str]] = (),
        month: Optional[int] = None,
    ) -> List[PlantDefinition]:
        return self.catalog.search(term, tags, month)

    def update_settings(self, **changes: Any) -> GardenSettings:
        """
        Change garden settings (width, length, grid_size, name).

        The grid is recomputed; existing placements are kept as they are,
        including any that now fall outside the plot.

        Raises:
            InvalidSettingsError: If the new settings are not usable. The old
                settings stay in effect.
        """
        settings = dataclasses.replace(self.settings, **changes)
        self.grid.update(settings)
        self.settings = settings
        logger.debug("Garden settings updated: %s", settings)
        self._notify("settings_updated")
        return settings

    # -- editing ------------------------------------------------------------

    def place_plant(self, type_id: str, x: int, y: int) -> PlantPlacement:
        placement = self.store.place_plant(type_id, x, y)
        self._notify("plant_placed")
        return placement

    def place_plant_at_pixel(
        self,
        type_id: str,
        pixel_x: float,
        pixel_y: float,
        canvas_width: float,
        canvas_height: float,
    ) -> PlantPlacement:
        """Place a plant where the user clicked on a rendered plot."""
        x, y = self.grid.to_grid_cell(pixel_x, pixel_y, canvas_width, canvas_height)
        return self.place_plant(type_id, x, y)

    def move_plant(self, plant_id: str, x: int, y: int) -> PlantPlacement:
        current = self.store.find(plant_id)
        placement = self.store.move_plant(plant_id, x, y)
        if placement != current:
            self._notify("plant_moved")
        return placement

    def remove_plant(self, plant_id: str) -> Optional[PlantPlacement]:
        removed = self.store.remove_plant(plant_id)
        if removed is not None:
            self._notify("plant_removed")
        return removed

    def add_structure(self, type_id: str, x: int = 1, y: int = 1) -> StructurePlacement:
        placement = self.store.add_structure(type_id, x, y)
        self._notify("structure_added")
        return placement

    def remove_structure(self, structure_id: str) -> Optional[StructurePlacement]:
        removed = self.store.remove_structure(structure_id)
        if removed is not None:
            self._notify("structure_removed")
        return removed

    def add_path(
        self, x: int, y: int, width: float = 1, length: float = 1, **kwargs: Any
    ) -> PathSegment:
        segment = self.store.add_path(x, y, width, length, **kwargs)
        self._notify("path_added")
        return segment

    def remove_path(self, path_id: str) -> Optional[PathSegment]:
        removed = self.store.remove_path(path_id)
        if removed is not None:
            self._notify("path_removed")
        return removed

    def clear(self) -> None:
        if len(self.store):
            self.store.clear()
            self._notify("cleared")

    # -- history ------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> Optional[HistorySnapshot]:
        snapshot = self.history.undo(self.store)
        if snapshot is not None:
            self._notify("undo")
        return snapshot

    def redo(self) -> Optional[HistorySnapshot]:
        snapshot = self.history.redo(self.store)
        if snapshot is not None:
            self._notify("redo")
        return snapshot

    # -- analysis and output ------------------------------------------------

    def compatibility(self) -> CompatibilityReport:
        """Compute the compatibility report for the current placements."""
        return self.analyzer.analyze(self.store.plants, self.catalog)

    def conflict_clusters(self) -> List[Set[str]]:
        return self.analyzer.conflict_clusters(self.compatibility())

    def export(self) -> Dict[str, Any]:
        return self.exporter.export(self.settings, self.store, self.catalog)

    def to_json(self) -> str:
        return self.exporter.to_json(self.settings, self.store, self.catalog)

    def save(self, directory: Union[str, Path] = ".") -> Path:
        """Write ``<garden-name>-plan.json`` into ``directory``."""
        return self.exporter.save(self.settings, self.store, self.catalog, directory)

    def render_text(self, title: Optional[str] = None) -> str:
        """Render the plan as a character grid, titled with the garden name by default."""
        effective_title = title if title is not None else self.settings.name
        return self.text_renderer.render(
            self.grid, self.store.snapshot(), self.catalog, title=effective_title
        )

    def save_txt(self, filename: Union[str, Path]) -> Path:
        return self.exporter.save_txt(self.render_text(), filename)

    def save_png(self, filename: Union[str, Path], **renderer_options: Any) -> str:
        """
        Save a PNG snapshot of the plan.

        Args:
            filename: Output path.
            **renderer_options: Passed to PlanPNGRenderer (cell_pixels, scale...).
        """
        renderer = PlanPNGRenderer(**renderer_options)
        return renderer.render(self.grid, self.store.snapshot(), self.catalog, filename)
