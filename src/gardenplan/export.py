"""
Export and import of garden plans.

This module turns the live state of a planner into a portable document and
back:
- JSON plan documents (``<garden-name>-plan.json``)
- Text files (.txt) holding the character-grid preview
- PNG snapshots of the plan

The PlanExporter class assembles documents; load_plan() rebuilds settings and
placements from one, re-validating every invariant instead of trusting the
file.
"""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .catalog import Catalog
from .compatibility import CompatibilityAnalyzer
from .errors import InvalidSettingsError, PlanFormatError
from .grid import GridModel
from .models import (
    DEFAULT_PATH_COLOR,
    UNKNOWN_PLANT,
    GardenSettings,
    PathSegment,
    PlantPlacement,
    StructurePlacement,
)
from .store import PlacementStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS = (1,)


class PlanExporter:
    """
    Serializes garden plans.

    Attributes:
        analyzer: Analyzer used to compute the compatibility section.
        indent: JSON indentation for written files.
    """

    def __init__(self, analyzer: Optional[CompatibilityAnalyzer] = None, indent: int = 2):
        self.analyzer = analyzer or CompatibilityAnalyzer()
        self.indent = indent

    def export(
        self, settings: GardenSettings, store: PlacementStore, catalog: Catalog
    ) -> Dict[str, Any]:
        """
        Build a plan document.

        Plant and structure entries carry the resolved catalog definition
        under ``definition``; plants whose type is missing from the catalog
        get the default "Unknown Plant" display values. The compatibility
        section is computed fresh from the current placements.

        Args:
            settings: Garden settings.
            store: Store holding the placements.
            catalog: Catalog used to resolve definitions.

        Returns:
            A JSON-serializable dictionary.
        """
        plants: List[Dict[str, Any]] = []
        for plant in store.plants:
            definition = catalog.find_by_id(plant.type_id)
            if definition is None:
                definition_data = dict(UNKNOWN_PLANT.to_dict(), id=plant.type_id)
            else:
                definition_data = definition.to_dict()
            plants.append(dict(plant.to_dict(), definition=definition_data))

        structures: List[Dict[str, Any]] = []
        for structure in store.structures:
            definition = catalog.find_by_id(structure.type_id)
            structures.append(
                dict(
                    structure.to_dict(),
                    definition=definition.to_dict() if definition is not None else None,
                )
            )

        document = dict(settings.to_dict())
        document.update(
            {
                "schemaVersion": SCHEMA_VERSION,
                "exportedAt": datetime.now(timezone.utc).isoformat(),
                "plants": plants,
                "structures": structures,
                "paths": [path.to_dict() for path in store.paths],
                "compatibility": self.analyzer.analyze(store.plants, catalog).to_dict(),
            }
        )
        return document

    def to_json(
        self, settings: GardenSettings, store: PlacementStore, catalog: Catalog
    ) -> str:
        return json.dumps(
            self.export(settings, store, catalog), indent=self.indent, ensure_ascii=False
        )

    @staticmethod
    def filename(settings: GardenSettings) -> str:
        """Return the conventional file name, e.g. ``my-garden-plan.json``."""
        return f"{settings.slug}-plan.json"

    def save(
        self,
        settings: GardenSettings,
        store: PlacementStore,
        catalog: Catalog,
        directory: Union[str, Path] = ".",
    ) -> Path:
        """
        Write the plan document into ``directory``.

        Returns:
            Path of the written file.
        """
        output_path = Path(directory) / self.filename(settings)
        output_path.write_text(self.to_json(settings, store, catalog), encoding="utf-8")
        logger.info("Exported plan %r to %s", settings.name, output_path)
        return output_path

    def save_txt(self, preview: str, filename: Union[str, Path]) -> Path:
        """Save a character-grid preview to a text file."""
        output_path = Path(filename)
        output_path.write_text(preview, encoding="utf-8")
        return output_path


def _require(record: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return record[key]
    except (KeyError, TypeError):
        raise PlanFormatError(f"{kind} entry is missing {key!r}: {record!r}") from None


def _as_int(value: Any, kind: str) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value != int(value)
    ):
        raise PlanFormatError(f"{kind} coordinates must be integers, got {value!r}")
    return int(value)


def _as_number(value: Any, kind: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
        raise PlanFormatError(f"{kind} dimension must be a positive number, got {value!r}")
    return value


def _as_height(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value >= 0:
        raise PlanFormatError(
            f"structure height must be a non-negative number, got {value!r}"
        )
    return value


def _collection(document: Mapping[str, Any], key: str) -> List[Any]:
    records = document.get(key, [])
    if not isinstance(records, list):
        raise PlanFormatError(f"Plan {key!r} must be a list, got {type(records).__name__}")
    return records


def load_plan(
    document: Union[str, Mapping[str, Any]],
    catalog: Catalog,
    store_factory=PlacementStore,
) -> Tuple[GardenSettings, PlacementStore]:
    """
    Rebuild settings and placements from an exported plan document.

    Args:
        document: The parsed document, or its JSON text.
        catalog: Catalog to resolve plant and structure types against.
        store_factory: Callable ``(grid, catalog)`` returning an empty store.

    Returns:
        (settings, store) with the loaded placements and empty history.

    Raises:
        PlanFormatError: If the document is malformed, has an unsupported
            schema version or invalid settings.
        OutOfBoundsError, OccupiedCellError, NotFoundError: If the placements
            break an invariant or reference unknown catalog types.
    """
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as e:
            raise PlanFormatError(f"Plan is not valid JSON: {e}") from e
    if not isinstance(document, Mapping):
        raise PlanFormatError("Plan document must be a JSON object")

    version = document.get("schemaVersion")
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise PlanFormatError(f"Unsupported plan schema version: {version!r}")

    settings = GardenSettings(
        width=_require(document, "width", "plan"),
        length=_require(document, "length", "plan"),
        grid_size=_require(document, "gridSize", "plan"),
        name=document.get("name", GardenSettings.name),
    )
    try:
        grid = GridModel(settings)
    except InvalidSettingsError as e:
        raise PlanFormatError(f"Invalid plan settings: {e}") from e

    plants = [
        PlantPlacement(
            id=str(_require(record, "id", "plant")),
            type_id=str(_require(record, "typeId", "plant")),
            x=_as_int(_require(record, "x", "plant"), "plant"),
            y=_as_int(_require(record, "y", "plant"), "plant"),
            size=_as_number(_require(record, "size", "plant"), "plant"),
            planted_date=str(_require(record, "plantedDate", "plant")),
        )
        for record in _collection(document, "plants")
    ]

    structures = []
    for record in _collection(document, "structures"):
        type_id = str(_require(record, "typeId", "structure"))
        definition = catalog.structure(type_id)
        structures.append(
            StructurePlacement(
                id=str(_require(record, "id", "structure")),
                type_id=type_id,
                name=record.get("name", definition.name),
                x=_as_int(_require(record, "x", "structure"), "structure"),
                y=_as_int(_require(record, "y", "structure"), "structure"),
                width=_as_number(_require(record, "width", "structure"), "structure"),
                length=_as_number(_require(record, "length", "structure"), "structure"),
                height=_as_height(record.get("height", definition.height)),
                color=record.get("color", definition.color),
                blocks_planting=definition.blocks_planting,
            )
        )

    paths = [
        PathSegment(
            id=str(_require(record, "id", "path")),
            x=_as_int(_require(record, "x", "path"), "path"),
            y=_as_int(_require(record, "y", "path"), "path"),
            width=_as_number(_require(record, "width", "path"), "path"),
            length=_as_number(_require(record, "length", "path"), "path"),
            color=record.get("color", DEFAULT_PATH_COLOR),
            material=record.get("material", "gravel"),
        )
        for record in _collection(document, "paths")
    ]

    ids = [item.id for item in plants + structures + paths]
    duplicates = sorted({item_id for item_id in ids if ids.count(item_id) > 1})
    if duplicates:
        raise PlanFormatError(f"Duplicate placement ids: {', '.join(duplicates)}")

    store = store_factory(grid, catalog)
    store.load(plants=plants, structures=structures, paths=paths)
    logger.info(
        "Loaded plan %r with %d plants, %d structures, %d paths",
        settings.name,
        len(plants),
        len(structures),
        len(paths),
    )
    return settings, store
