"""Unit tests for the placement store."""

import logging

import pytest

from gardenplan import (
    NotFoundError,
    OccupiedCellError,
    OutOfBoundsError,
    PlantPlacement,
)


class TestPlacePlant:
    """Tests for PlacementStore.place_plant()."""

    def test_place_plant(self, store):
        plant = store.place_plant("tomato", 2, 3)
        assert plant.type_id == "tomato"
        assert plant.cell == (2, 3)
        assert store.plants == (plant,)
        assert store.plant_at(2, 3) == plant

    def test_size_derived_from_width_and_grid(self, store):
        """Footprint is definition width divided by grid size."""
        plant = store.place_plant("cabbage", 0, 0)
        assert plant.size == pytest.approx(1.0)
        plant = store.place_plant("carrot", 1, 0)
        assert plant.size == pytest.approx(0.2)

    def test_planted_date_defaults_to_now(self, store):
        plant = store.place_plant("thyme", 0, 0)
        assert plant.planted_date.endswith("+00:00")

    def test_planted_date_can_be_given(self, store):
        plant = store.place_plant("thyme", 0, 0, planted_date="2026-04-01T09:00:00+00:00")
        assert plant.planted_date == "2026-04-01T09:00:00+00:00"

    def test_ids_are_unique(self, store):
        ids = {store.place_plant("carrot", x, 0).id for x in range(6)}
        assert len(ids) == 6

    def test_occupied_cell_rejected(self, store):
        """A second plant on the same cell fails and leaves the store unchanged."""
        store.place_plant("tomato", 2, 2)
        before = store.snapshot()

        with pytest.raises(OccupiedCellError) as excinfo:
            store.place_plant("carrot", 2, 2)

        assert excinfo.value.occupant == "tomato"
        assert store.snapshot() == before
        assert store.history.undo_depth == 1

    @pytest.mark.parametrize("x,y", [(6, 0), (0, 8), (-1, 0), (0, -1), (10, 10)])
    def test_out_of_bounds_rejected(self, store, x, y):
        with pytest.raises(OutOfBoundsError):
            store.place_plant("tomato", x, y)
        assert store.plants == ()
        assert not store.history.can_undo

    def test_unknown_type_rejected(self, store):
        with pytest.raises(NotFoundError):
            store.place_plant("triffid", 0, 0)
        assert store.plants == ()

    def test_structure_type_is_not_a_plant(self, store):
        with pytest.raises(NotFoundError):
            store.place_plant("shed", 0, 0)

    def test_occupancy_invariant_over_many_placements(self, store):
        """No sequence of placements puts two plants on one cell."""
        attempts = [(x % 4, (x * 3) % 5) for x in range(40)]
        for x, y in attempts:
            try:
                store.place_plant("carrot", x, y)
            except OccupiedCellError:
                pass
        cells = [plant.cell for plant in store.plants]
        assert len(cells) == len(set(cells))
        assert set(cells) == set(attempts)


class TestOccupancyPolicy:
    """Plants versus structures and paths."""

    def test_blocking_structure_rejects_plants(self, store):
        store.add_structure("shed", 1, 1)
        with pytest.raises(OccupiedCellError) as excinfo:
            store.place_plant("tomato", 2, 2)
        assert excinfo.value.occupant == "Shed"

    def test_bed_accepts_plants(self, store):
        store.add_structure("raisedBed", 1, 1)
        plant = store.place_plant("tomato", 1, 1)
        assert store.plant_at(1, 1) == plant

    def test_path_rejects_plants(self, store):
        store.add_path(0, 0, width=6, length=1)
        with pytest.raises(OccupiedCellError):
            store.place_plant("tomato", 3, 0)

    def test_blocking_structure_cannot_cover_plant(self, store):
        store.place_plant("tomato", 2, 2)
        with pytest.raises(OccupiedCellError):
            store.add_structure("shed", 1, 1)
        assert store.structures == ()

    def test_bed_can_go_over_plants(self, store):
        store.place_plant("tomato", 1, 1)
        bed = store.add_structure("squareBed", 1, 1)
        assert store.structures == (bed,)

    def test_path_cannot_cover_plant(self, store):
        store.place_plant("tomato", 2, 0)
        with pytest.raises(OccupiedCellError):
            store.add_path(0, 0, width=6, length=1)

    def test_structures_and_paths_may_overlap(self, store):
        store.add_structure("shed", 1, 1)
        store.add_structure("greenhouse", 1, 1)
        store.add_path(1, 1, width=2, length=2)
        assert len(store.structures) == 2
        assert len(store.paths) == 1

    def test_blocked_cells(self, store):
        store.add_structure("water", 0, 0)
        store.add_path(5, 7)
        blocked = store.blocked_cells()
        # Water barrel is 0.6m -> 1.2 cells -> covers 2x2
        assert set(blocked) == {(0, 0), (1, 0), (0, 1), (1, 1), (5, 7)}
        assert blocked[(5, 7)] == "path"


class TestStructuresAndPaths:
    """Tests for structure and path placement."""

    def test_add_structure_defaults(self, store):
        shed = store.add_structure("shed")
        assert (shed.x, shed.y) == (1, 1)
        assert shed.width == 4
        assert shed.length == 6
        assert shed.height == 2.5
        assert shed.name == "Shed"
        assert shed.color == "#8d6e63"

    def test_structure_must_fit(self, store):
        with pytest.raises(OutOfBoundsError):
            store.add_structure("shed", 3, 0)

    def test_unknown_structure(self, store):
        with pytest.raises(NotFoundError):
            store.add_structure("castle")

    def test_fractional_structure_covers_partial_cells(self, store):
        fence = store.add_structure("fence", 0, 0)
        assert list(fence.cells()) == [(0, 0), (0, 1)]

    def test_add_path(self, store):
        path = store.add_path(0, 2, width=6, length=1, color="#999999", material="bark")
        assert store.paths == (path,)
        assert path.material == "bark"
        assert len(list(path.cells())) == 6

    def test_path_must_fit(self, store):
        with pytest.raises(OutOfBoundsError):
            store.add_path(0, 7, width=1, length=2)

    def test_path_size_must_be_positive(self, store):
        with pytest.raises(ValueError):
            store.add_path(0, 0, width=0, length=1)

    def test_failed_add_consumes_no_id(self, store):
        with pytest.raises(OutOfBoundsError):
            store.add_structure("shed", 5, 5)
        path = store.add_path(0, 0)
        assert path.id == "path-1"


class TestRemovalAndMove:
    """Tests for removal and moving."""

    def test_remove_plant(self, store):
        plant = store.place_plant("tomato", 0, 0)
        assert store.remove_plant(plant.id) == plant
        assert store.plants == ()

    def test_remove_unknown_is_noop_with_warning(self, store, caplog):
        store.place_plant("tomato", 0, 0)
        before = store.snapshot()
        with caplog.at_level(logging.WARNING, logger="gardenplan.store"):
            assert store.remove_plant("plant-999") is None
            assert store.remove_structure("structure-1") is None
            assert store.remove_path("path-1") is None
        assert store.snapshot() == before
        assert store.history.undo_depth == 1
        assert "plant-999" in caplog.text

    def test_remove_structure_and_path(self, store):
        shed = store.add_structure("shed", 0, 0)
        path = store.add_path(5, 0)
        store.remove_structure(shed.id)
        store.remove_path(path.id)
        assert store.structures == ()
        assert store.paths == ()

    def test_remove_frees_cell(self, store):
        plant = store.place_plant("tomato", 0, 0)
        store.remove_plant(plant.id)
        store.place_plant("carrot", 0, 0)

    def test_move_plant(self, store):
        plant = store.place_plant("tomato", 0, 0)
        moved = store.move_plant(plant.id, 3, 4)
        assert moved.id == plant.id
        assert moved.planted_date == plant.planted_date
        assert store.plant_at(0, 0) is None
        assert store.plant_at(3, 4) == moved

    def test_move_onto_plant_rejected(self, store):
        first = store.place_plant("tomato", 0, 0)
        store.place_plant("carrot", 1, 0)
        with pytest.raises(OccupiedCellError):
            store.move_plant(first.id, 1, 0)
        assert store.plant_at(0, 0) == first

    def test_move_to_same_cell_is_noop(self, store):
        plant = store.place_plant("tomato", 0, 0)
        assert store.move_plant(plant.id, 0, 0) == plant
        assert store.history.undo_depth == 1

    def test_move_unknown(self, store):
        with pytest.raises(NotFoundError):
            store.move_plant("plant-1", 0, 0)

    def test_clear(self, store):
        store.place_plant("tomato", 0, 0)
        store.add_structure("squareBed", 2, 2)
        store.add_path(5, 5)
        store.clear()
        assert len(store) == 0
        assert store.history.undo_depth == 4

    def test_clear_empty_store_records_nothing(self, store):
        store.clear()
        assert not store.history.can_undo

    def test_restore(self, store):
        """Restoring an earlier snapshot is itself one undoable action."""
        store.place_plant("tomato", 0, 0)
        earlier = store.snapshot()
        store.place_plant("carrot", 1, 0)
        store.add_path(5, 5)
        later = store.snapshot()

        store.restore(earlier)
        assert store.snapshot() == earlier
        store.history.undo(store)
        assert store.snapshot() == later

    def test_restore_current_state_records_nothing(self, store):
        store.place_plant("tomato", 0, 0)
        store.restore(store.snapshot())
        assert store.history.undo_depth == 1

    def test_find(self, store):
        plant = store.place_plant("tomato", 0, 0)
        path = store.add_path(5, 5)
        assert store.find(plant.id) == plant
        assert store.find(path.id) == path
        assert store.find("nope") is None


class TestLoad:
    """Tests for PlacementStore.load()."""

    def _plant(self, plant_id, x, y, type_id="tomato"):
        return PlantPlacement(
            id=plant_id, type_id=type_id, x=x, y=y, size=1.2, planted_date="2026-05-01"
        )

    def test_load_valid(self, store):
        store.load(plants=[self._plant("plant-7", 0, 0), self._plant("plant-8", 1, 0)])
        assert len(store.plants) == 2
        assert not store.history.can_undo

    def test_load_continues_id_sequence(self, store):
        store.load(plants=[self._plant("plant-7", 0, 0)])
        assert store.place_plant("carrot", 3, 3).id == "plant-8"

    def test_load_rejects_overlap(self, store):
        with pytest.raises(OccupiedCellError):
            store.load(plants=[self._plant("a", 0, 0), self._plant("b", 0, 0)])
        assert store.plants == ()

    def test_load_rejects_out_of_bounds(self, store):
        with pytest.raises(OutOfBoundsError):
            store.load(plants=[self._plant("a", 9, 0)])

    def test_load_rejects_unknown_type(self, store):
        with pytest.raises(NotFoundError):
            store.load(plants=[self._plant("a", 0, 0, type_id="triffid")])

    def test_load_requires_empty_store(self, store):
        store.place_plant("tomato", 0, 0)
        with pytest.raises(ValueError):
            store.load(plants=[self._plant("a", 3, 3)])
