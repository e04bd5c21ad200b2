"""
Plant and structure catalog.

The catalog is the static registry of everything that can be placed in a
garden. It is populated once at startup, either from the built-in data or
from a JSON file, and is read-only afterwards.

Uses networkx for:
- Representing declared companion/avoid relationships as a directed graph
- Finding one-directional declarations for data-quality warnings
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import networkx as nx

from .errors import NotFoundError
from .models import PlantDefinition, StructureDefinition

logger = logging.getLogger(__name__)

AVOID = "avoid"
COMPANION = "companion"

Definition = Union[PlantDefinition, StructureDefinition]


class Catalog:
    """
    Read-only registry of plant and structure definitions.

    Example:
        >>> catalog = default_catalog()
        >>> [plant.id for plant in catalog.search("solanum")]
        ['tomato', 'potato']
    """

    def __init__(
        self,
        plants: Iterable[PlantDefinition] = (),
        structures: Iterable[StructureDefinition] = (),
    ):
        self._plants: Dict[str, PlantDefinition] = {}
        self._structures: Dict[str, StructureDefinition] = {}
        for plant in plants:
            if plant.id in self._plants:
                raise ValueError(f"Duplicate plant id in catalog: {plant.id!r}")
            self._plants[plant.id] = plant
        for structure in structures:
            if structure.id in self._structures or structure.id in self._plants:
                raise ValueError(f"Duplicate catalog id: {structure.id!r}")
            self._structures[structure.id] = structure

    @property
    def plants(self) -> List[PlantDefinition]:
        return list(self._plants.values())

    @property
    def structures(self) -> List[StructureDefinition]:
        return list(self._structures.values())

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._plants or item_id in self._structures

    def __len__(self) -> int:
        return len(self._plants) + len(self._structures)

    def find_by_id(self, item_id: str) -> Optional[Definition]:
        """Return the plant or structure definition with this id, or None."""
        if item_id in self._plants:
            return self._plants[item_id]
        return self._structures.get(item_id)

    def get(self, item_id: str) -> Definition:
        """Like find_by_id() but raises NotFoundError for unknown ids."""
        definition = self.find_by_id(item_id)
        if definition is None:
            raise NotFoundError("catalog entry", item_id)
        return definition

    def plant(self, plant_id: str) -> PlantDefinition:
        try:
            return self._plants[plant_id]
        except KeyError:
            raise NotFoundError("plant type", plant_id) from None

    def structure(self, structure_id: str) -> StructureDefinition:
        try:
            return self._structures[structure_id]
        except KeyError:
            raise NotFoundError("structure type", structure_id) from None

    def search(
        self,
        term: str = "",
        tags: Union[str, Sequence[str]] = (),
        month: Optional[int] = None,
    ) -> List[PlantDefinition]:
        """
        Filter plants by name, tags and season.

        The term is matched case-insensitively as a substring of the common or
        botanical name. A plant passes the tag filter if it carries any of the
        requested tags. Both filters must pass; empty filters match everything.

        Args:
            term: Text to look for in names.
            tags: Tag or tags to filter by (any-of).
            month: If given, only plants growing or harvestable that month.

        Returns:
            Matching plant definitions in catalog order.
        """
        needle = term.strip().lower()
        wanted = {tags} if isinstance(tags, str) else set(tags)
        matches = []
        for plant in self._plants.values():
            if needle and not (
                needle in plant.name.lower() or needle in plant.botanical_name.lower()
            ):
                continue
            if wanted and not wanted & plant.tags:
                continue
            if month is not None and not plant.in_season(month):
                continue
            matches.append(plant)
        return matches

    def all_tags(self) -> List[str]:
        """Return every tag used by a plant, sorted."""
        tags = set()
        for plant in self._plants.values():
            tags.update(plant.tags)
        return sorted(tags)

    def relationship_graph(self) -> nx.DiGraph:
        """
        Build a directed graph of declared plant relationships.

        Each edge (a, b) carries ``kind`` = "avoid" or "companion" and means
        plant ``a`` declares the relationship towards ``b``. Targets that are
        not in the catalog still appear as nodes with ``known=False``.
        """
        graph = nx.DiGraph()
        for plant in self._plants.values():
            graph.add_node(plant.id, known=True)
        for plant in self._plants.values():
            relations = ((AVOID, plant.avoid_plants), (COMPANION, plant.companion_plants))
            for kind, targets in relations:
                for target in sorted(targets):
                    if target not in graph:
                        graph.add_node(target, known=False)
                    if graph.has_edge(plant.id, target):
                        # Listed as both avoid and companion
                        graph.edges[plant.id, target]["kind"] = AVOID
                        graph.edges[plant.id, target]["contradictory"] = True
                        continue
                    graph.add_edge(plant.id, target, kind=kind, contradictory=False)
        return graph

    def consistency_warnings(self) -> List[str]:
        """
        Report data-quality issues in plant relationships.

        Relationships are never symmetrized; this only describes where the
        data is one-sided, refers to unknown plants, or contradicts itself.
        """
        graph = self.relationship_graph()
        warnings: List[str] = []
        for source, target, data in graph.edges(data=True):
            kind = data["kind"]
            if data["contradictory"]:
                warnings.append(
                    f"{source} lists {target} as both a companion and a plant to avoid"
                )
                continue
            if not graph.nodes[target]["known"]:
                warnings.append(f"{source} {kind} list refers to unknown plant {target!r}")
                continue
            reverse = graph.get_edge_data(target, source)
            if reverse is None or reverse["kind"] != kind:
                warnings.append(
                    f"{source} declares {kind} with {target}, but {target} does not "
                    f"declare {kind} with {source}"
                )
        return warnings


def plant_from_dict(data: Mapping[str, Any]) -> PlantDefinition:
    """Build a PlantDefinition from a camelCase mapping such as a JSON record."""
    try:
        return PlantDefinition(
            id=data["id"],
            name=data["name"],
            botanical_name=data.get("botanicalName", data.get("latinName", "")),
            category=data.get("category", ""),
            spacing=float(data.get("spacing", 0.3)),
            height=float(data.get("height", 0.3)),
            width=float(data.get("width", 0.3)),
            growth_months=tuple(data.get("growthMonths", ())),
            harvest_months=tuple(data.get("harvestMonths", ())),
            water_needs=data.get("waterNeeds", "Medium"),
            sun_needs=data.get("sunNeeds", "Full Sun"),
            tags=frozenset(data.get("tags", ())),
            companion_plants=frozenset(data.get("companionPlants", ())),
            avoid_plants=frozenset(data.get("avoidPlants", ())),
            color=data.get("color", "#3498db"),
            icon=data.get("icon", "🌱"),
            native=bool(data.get("native", data.get("nativeToIreland", False))),
            hardiness=data.get("hardiness", ""),
        )
    except KeyError as e:
        raise ValueError(f"Plant record is missing required field {e}") from None


def structure_from_dict(data: Mapping[str, Any]) -> StructureDefinition:
    """Build a StructureDefinition from a camelCase mapping."""
    try:
        return StructureDefinition(
            id=data["id"],
            name=data["name"],
            width=float(data["width"]),
            length=float(data["length"]),
            height=float(data.get("height", 0.0)),
            color=data.get("color", "#8d6e63"),
            category=data.get("category", ""),
            blocks_planting=bool(data.get("blocksPlanting", True)),
        )
    except KeyError as e:
        raise ValueError(f"Structure record is missing required field {e}") from None


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load a catalog from a JSON file.

    The file holds an object with ``plants`` and ``structures`` arrays in the
    same camelCase shape as the export document's plant definitions.
    Relationship inconsistencies are logged as warnings, not corrected.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    catalog = Catalog(
        plants=[plant_from_dict(record) for record in data.get("plants", [])],
        structures=[structure_from_dict(record) for record in data.get("structures", [])],
    )
    for warning in catalog.consistency_warnings():
        logger.warning("Catalog data: %s", warning)
    logger.debug(
        "Loaded %d plants and %d structures from %s",
        len(catalog.plants),
        len(catalog.structures),
        path,
    )
    return catalog


DEFAULT_PLANTS = [
    {
        "id": "tomato",
        "name": "Tomato",
        "botanicalName": "Solanum lycopersicum",
        "category": "vegetables",
        "spacing": 0.5,
        "height": 1.2,
        "width": 0.6,
        "growthMonths": [5, 6, 7, 8, 9],
        "harvestMonths": [7, 8, 9],
        "waterNeeds": "Medium",
        "sunNeeds": "Full Sun",
        "tags": ["vegetable", "annual", "edible"],
        "companionPlants": ["basil", "marigold", "onion"],
        "avoidPlants": ["potato", "fennel"],
        "color": "#e74c3c",
        "icon": "🍅",
        "native": False,
        "hardiness": "H3",
    },
    {
        "id": "carrot",
        "name": "Carrot",
        "botanicalName": "Daucus carota",
        "category": "vegetables",
        "spacing": 0.1,
        "height": 0.3,
        "width": 0.1,
        "growthMonths": [3, 4, 5, 6, 7, 8],
        "harvestMonths": [6, 7, 8, 9, 10],
        "waterNeeds": "Medium",
        "sunNeeds": "Full Sun",
        "tags": ["vegetable", "annual", "edible", "root"],
        "companionPlants": ["onion", "leek", "rosemary"],
        "avoidPlants": ["dill", "parsley"],
        "color": "#e67e22",
        "icon": "🥕",
        "native": False,
        "hardiness": "H5",
    },
    {
        "id": "potato",
        "name": "Potato",
        "botanicalName": "Solanum tuberosum",
        "category": "vegetables",
        "spacing": 0.3,
        "height": 0.6,
        "width": 0.4,
        "growthMonths": [3, 4, 5, 6, 7],
        "harvestMonths": [6, 7, 8, 9],
        "waterNeeds": "Medium",
        "sunNeeds": "Full Sun",
        "tags": ["vegetable", "annual", "edible", "root"],
        "companionPlants": ["cabbage", "corn", "beans"],
        "avoidPlants": ["tomato", "cucumber", "sunflower"],
        "color": "#9b59b6",
        "icon": "🥔",
        "native": False,
        "hardiness": "H4",
    },
    {
        "id": "cabbage",
        "name": "Cabbage",
        "botanicalName": "Brassica oleracea var. capitata",
        "category": "vegetables",
        "spacing": 0.5,
        "height": 0.4,
        "width": 0.5,
        "growthMonths": [3, 4, 5, 6, 7, 8, 9],
        "harvestMonths": [6, 7, 8, 9, 10, 11],
        "waterNeeds": "Medium",
        "sunNeeds": "Full Sun",
        "tags": ["vegetable", "annual", "edible"],
        "companionPlants": ["potato", "celery", "dill"],
        "avoidPlants": ["strawberry", "tomato", "grape"],
        "color": "#2ecc71",
        "icon": "🥬",
        "native": False,
        "hardiness": "H5",
    },
    {
        "id": "wildflower",
        "name": "Irish Wildflower Mix",
        "botanicalName": "Various",
        "category": "flowers",
        "spacing": 0.2,
        "height": 0.6,
        "width": 0.3,
        "growthMonths": [3, 4, 5, 6, 7, 8],
        "harvestMonths": [],
        "waterNeeds": "Low",
        "sunNeeds": "Full Sun",
        "tags": ["flower", "perennial", "native", "pollinator"],
        "companionPlants": ["most plants"],
        "avoidPlants": [],
        "color": "#f1c40f",
        "icon": "🌼",
        "native": True,
        "hardiness": "H7",
    },
    {
        "id": "thyme",
        "name": "Thyme",
        "botanicalName": "Thymus vulgaris",
        "category": "herbs",
        "spacing": 0.3,
        "height": 0.3,
        "width": 0.3,
        "growthMonths": [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12],
        "harvestMonths": [4, 5, 6, 7, 8, 9],
        "waterNeeds": "Low",
        "sunNeeds": "Full Sun",
        "tags": ["herb", "perennial", "edible", "pollinator"],
        "companionPlants": ["strawberry", "cabbage", "tomato"],
        "avoidPlants": [],
        "color": "#27ae60",
        "icon": "🌿",
        "native": False,
        "hardiness": "H5",
    },
]

DEFAULT_STRUCTURES = [
    {"id": "shed", "name": "Shed", "category": "buildings",
     "width": 2, "length": 3, "height": 2.5, "color": "#8d6e63"},
    {"id": "greenhouse", "name": "Greenhouse", "category": "buildings",
     "width": 2, "length": 3, "height": 2.5, "color": "#b3e5fc"},
    {"id": "raisedBed", "name": "Raised Bed", "category": "beds",
     "width": 1, "length": 2, "height": 0.5, "color": "#795548", "blocksPlanting": False},
    {"id": "squareBed", "name": "Square Bed", "category": "beds",
     "width": 1, "length": 1, "height": 0.5, "color": "#795548", "blocksPlanting": False},
    {"id": "fence", "name": "Fence Section", "category": "features",
     "width": 0.1, "length": 1, "height": 1.8, "color": "#a1887f"},
    {"id": "water", "name": "Water Barrel", "category": "features",
     "width": 0.6, "length": 0.6, "height": 1, "color": "#42a5f5"},
]


def default_catalog() -> Catalog:
    """Return a catalog holding the built-in plants and structures."""
    return Catalog(
        plants=[plant_from_dict(record) for record in DEFAULT_PLANTS],
        structures=[structure_from_dict(record) for record in DEFAULT_STRUCTURES],
    )
