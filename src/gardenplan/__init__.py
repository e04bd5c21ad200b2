"""
gardenplan - Grid-based garden layout planning

A Python library for laying out plants, structures and paths on a garden
plot, with undo/redo and companion-planting compatibility checks.

Example:
    >>> from gardenplan import GardenPlanner
    >>> planner = GardenPlanner()
    >>> potato = planner.place_plant("potato", 2, 2)
    >>> tomato = planner.place_plant("tomato", 2, 3)
    >>> print(planner.compatibility().summary())
    2 conflict(s), 0 benefit(s)
    >>> planner.undo() is not None
    True
"""

import logging

from .catalog import Catalog, default_catalog, load_catalog
from .compatibility import CompatibilityAnalyzer, analyze
from .errors import (
    EmptyHistoryError,
    InvalidSettingsError,
    NotFoundError,
    OccupiedCellError,
    OutOfBoundsError,
    PlanFormatError,
    PlannerError,
)
from .export import PlanExporter, load_plan
from .grid import GridModel
from .history import HistoryManager
from .models import (
    CompatibilityEntry,
    CompatibilityReport,
    GardenSettings,
    HistorySnapshot,
    PathSegment,
    PlantDefinition,
    PlantPlacement,
    StructureDefinition,
    StructurePlacement,
)
from .planner import GardenPlanner
from .png_renderer import PlanPNGRenderer
from .renderer import Canvas, PlanTextRenderer
from .store import PlacementStore

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Main API
    "GardenPlanner",
    # Model
    "GardenSettings",
    "PlantDefinition",
    "StructureDefinition",
    "PlantPlacement",
    "StructurePlacement",
    "PathSegment",
    "HistorySnapshot",
    "CompatibilityEntry",
    "CompatibilityReport",
    # Components
    "GridModel",
    "Catalog",
    "default_catalog",
    "load_catalog",
    "PlacementStore",
    "HistoryManager",
    "CompatibilityAnalyzer",
    "analyze",
    "PlanExporter",
    "load_plan",
    # Rendering
    "Canvas",
    "PlanTextRenderer",
    "PlanPNGRenderer",
    # Errors
    "PlannerError",
    "InvalidSettingsError",
    "OutOfBoundsError",
    "OccupiedCellError",
    "NotFoundError",
    "EmptyHistoryError",
    "PlanFormatError",
]
