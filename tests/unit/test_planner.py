"""Unit tests for the GardenPlanner facade."""

import json

import pytest

from gardenplan import (
    GardenPlanner,
    GardenSettings,
    InvalidSettingsError,
    OccupiedCellError,
    OutOfBoundsError,
)


class TestGardenPlannerInit:
    """Tests for GardenPlanner initialization."""

    def test_defaults(self, planner):
        assert planner.settings == GardenSettings()
        assert planner.grid.grid_cell_count() == (6, 8)
        assert planner.catalog.find_by_id("tomato") is not None
        assert planner.history.max_depth == 100
        assert planner.plants == ()

    def test_custom_settings(self, small_catalog):
        planner = GardenPlanner(
            settings=GardenSettings(width=2, length=2, grid_size=1, name="Pots"),
            catalog=small_catalog,
            max_history=5,
        )
        assert planner.grid.grid_cell_count() == (2, 2)
        assert planner.history.max_depth == 5
        assert planner.search(tags=["herb"])[0].id == "basil"
        assert [p.id for p in planner.search(tags="herb")] == ["basil"]

    def test_invalid_settings(self):
        with pytest.raises(InvalidSettingsError):
            GardenPlanner(settings=GardenSettings(width=-1))


class TestEditing:
    """Tests for editing through the planner."""

    def test_place_and_undo(self, planner):
        planner.place_plant("tomato", 1, 1)
        assert planner.can_undo
        planner.undo()
        assert planner.plants == ()
        assert planner.can_redo
        planner.redo()
        assert planner.plants[0].cell == (1, 1)

    def test_place_at_pixel(self, planner):
        plant = planner.place_plant_at_pixel("thyme", 250, 399, 600, 800)
        assert plant.cell == (2, 3)

    def test_place_at_pixel_outside(self, planner):
        with pytest.raises(OutOfBoundsError):
            planner.place_plant_at_pixel("thyme", 700, 10, 600, 800)
        assert planner.plants == ()

    def test_occupied(self, planner):
        planner.place_plant("tomato", 1, 1)
        with pytest.raises(OccupiedCellError):
            planner.place_plant("carrot", 1, 1)

    def test_structures_paths_and_move(self, planner):
        bed = planner.add_structure("raisedBed")
        path = planner.add_path(0, 7, width=6, length=1)
        plant = planner.place_plant("carrot", 1, 1)
        planner.move_plant(plant.id, 2, 2)
        assert planner.structures == (bed,)
        assert planner.paths == (path,)
        assert planner.plants[0].cell == (2, 2)

        planner.remove_structure(bed.id)
        planner.remove_path(path.id)
        planner.remove_plant(plant.id)
        assert len(planner.store) == 0

    def test_clear_is_one_undo_step(self, planner):
        planner.place_plant("tomato", 0, 0)
        planner.place_plant("carrot", 1, 0)
        planner.clear()
        assert planner.plants == ()
        planner.undo()
        assert len(planner.plants) == 2


class TestSettings:
    """Tests for GardenPlanner.update_settings()."""

    def test_update_keeps_placements(self, planner):
        planner.place_plant("tomato", 5, 7)
        planner.update_settings(grid_size=1)
        assert planner.grid.grid_cell_count() == (3, 4)
        assert planner.plants[0].cell == (5, 7)
        assert planner.settings.grid_size == 1

    def test_new_bounds_apply_to_new_placements(self, planner):
        planner.update_settings(width=1, length=1)
        with pytest.raises(OutOfBoundsError):
            planner.place_plant("tomato", 2, 0)

    def test_invalid_update_keeps_old_settings(self, planner):
        with pytest.raises(InvalidSettingsError):
            planner.update_settings(grid_size=0)
        assert planner.settings.grid_size == 0.5
        assert planner.grid.grid_cell_count() == (6, 8)

    def test_rename(self, planner):
        planner.update_settings(name="Allotment 12")
        assert planner.exporter.filename(planner.settings) == "allotment-12-plan.json"


class TestListeners:
    """Tests for change notification."""

    def test_listener_receives_events(self):
        events = []
        planner = GardenPlanner(listeners=[lambda event, p: events.append(event)])
        plant = planner.place_plant("tomato", 0, 0)
        planner.undo()
        planner.redo()
        planner.remove_plant(plant.id)
        assert events == ["plant_placed", "undo", "redo", "plant_removed"]

    def test_rejected_actions_do_not_notify(self, planner):
        events = []
        planner.subscribe(lambda event, p: events.append(event))
        planner.undo()
        planner.remove_plant("plant-404")
        with pytest.raises(OutOfBoundsError):
            planner.place_plant("tomato", 99, 0)
        assert events == []

    def test_move_to_same_cell_does_not_notify(self, planner):
        events = []
        plant = planner.place_plant("tomato", 0, 0)
        planner.subscribe(lambda event, p: events.append(event))
        planner.move_plant(plant.id, 0, 0)
        assert events == []
        planner.move_plant(plant.id, 1, 0)
        assert events == ["plant_moved"]

    def test_unsubscribe(self, planner):
        events = []
        unsubscribe = planner.subscribe(lambda event, p: events.append(event))
        planner.place_plant("tomato", 0, 0)
        unsubscribe()
        planner.place_plant("carrot", 1, 0)
        assert events == ["plant_placed"]

    def test_listener_sees_new_state(self):
        seen = []
        planner = GardenPlanner(
            listeners=[lambda event, p: seen.append(len(p.compatibility().conflicts))]
        )
        planner.place_plant("potato", 2, 2)
        planner.place_plant("tomato", 2, 3)
        assert seen == [0, 2]


class TestOutput:
    """Tests for compatibility, export and rendering through the planner."""

    def test_compatibility_recomputed(self, planner):
        planner.place_plant("potato", 2, 2)
        planner.place_plant("tomato", 2, 3)
        assert len(planner.compatibility().conflicts) == 2
        planner.undo()
        assert planner.compatibility().is_empty

    def test_conflict_clusters(self, planner):
        potato = planner.place_plant("potato", 2, 2)
        tomato = planner.place_plant("tomato", 2, 3)
        assert planner.conflict_clusters() == [{potato.id, tomato.id}]

    def test_save(self, planner, tmp_path):
        planner.place_plant("thyme", 0, 0)
        path = planner.save(tmp_path)
        assert path.name == "my-garden-plan.json"
        assert json.loads(path.read_text(encoding="utf-8"))["plants"][0]["typeId"] == "thyme"

    def test_from_plan(self, planner):
        planner.place_plant("thyme", 0, 0)
        planner.add_structure("squareBed", 3, 3)
        restored = GardenPlanner.from_plan(planner.to_json(), catalog=planner.catalog)

        assert restored.snapshot() == planner.snapshot()
        assert restored.settings == planner.settings
        assert not restored.can_undo
        restored.place_plant("carrot", 1, 1)
        restored.undo()
        assert restored.snapshot() == planner.snapshot()

    def test_render_text_uses_garden_name(self, planner):
        planner.place_plant("thyme", 0, 0)
        text = planner.render_text()
        assert text.startswith("My Garden")
        assert "T Thyme" in text

    def test_save_txt_and_png(self, planner, tmp_path):
        planner.place_plant("thyme", 0, 0)
        txt = planner.save_txt(tmp_path / "plan.txt")
        png = planner.save_png(tmp_path / "plan.png", cell_pixels=10, scale=1)
        assert txt.read_text(encoding="utf-8") == planner.render_text()
        assert (tmp_path / "plan.png").stat().st_size > 0
        assert png == str(tmp_path / "plan.png")
