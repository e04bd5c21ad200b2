"""Pytest configuration and shared fixtures for gardenplan tests."""

import pytest

from gardenplan import (
    Catalog,
    GardenPlanner,
    GardenSettings,
    GridModel,
    HistoryManager,
    PlacementStore,
    PlantDefinition,
    StructureDefinition,
    default_catalog,
)


@pytest.fixture
def settings():
    """Default 3m x 4m plot with 0.5m cells (6 x 8 grid)."""
    return GardenSettings(width=3, length=4, grid_size=0.5, name="My Garden")


@pytest.fixture
def grid(settings):
    return GridModel(settings)


@pytest.fixture
def catalog():
    """Built-in catalog."""
    return default_catalog()


@pytest.fixture
def small_catalog():
    """Potato avoids tomato, tomato likes basil; nothing is declared both ways."""
    return Catalog(
        plants=[
            PlantDefinition(
                id="potato",
                name="Potato",
                botanical_name="Solanum tuberosum",
                width=0.4,
                tags=frozenset({"vegetable", "root"}),
                avoid_plants=frozenset({"tomato"}),
            ),
            PlantDefinition(
                id="tomato",
                name="Tomato",
                botanical_name="Solanum lycopersicum",
                width=0.6,
                tags=frozenset({"vegetable"}),
                companion_plants=frozenset({"basil"}),
            ),
            PlantDefinition(
                id="basil",
                name="Basil",
                botanical_name="Ocimum basilicum",
                width=0.25,
                tags=frozenset({"herb"}),
            ),
        ],
        structures=[
            StructureDefinition(id="shed", name="Shed", width=1, length=1, height=2),
            StructureDefinition(
                id="bed",
                name="Bed",
                width=1,
                length=1,
                height=0.3,
                blocks_planting=False,
            ),
        ],
    )


@pytest.fixture
def history():
    return HistoryManager()


@pytest.fixture
def store(grid, catalog, history):
    """Empty store over the default grid and catalog."""
    return PlacementStore(grid, catalog, history)


@pytest.fixture
def small_store(grid, small_catalog, history):
    """Empty store over the default grid and the small catalog."""
    return PlacementStore(grid, small_catalog, history)


@pytest.fixture
def planner():
    """Planner with default settings and catalog."""
    return GardenPlanner()
