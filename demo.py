#!/usr/bin/env python3
"""
Demo script for the garden planner.

Lays out a small plot, checks companion planting and writes the plan
as JSON, text and PNG into the current directory.
"""

import logging

from gardenplan import GardenPlanner, GardenSettings, OccupiedCellError


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def demo_layout(planner):
    """Demo 1: Structures, paths and plants"""
    print_header("Demo 1: Laying Out the Plot")

    planner.add_structure("shed", 0, 0)
    planner.add_structure("raisedBed", 4, 0)
    planner.add_path(0, 7, width=6, length=1)
    planner.place_plant("carrot", 4, 0)
    planner.place_plant("thyme", 5, 1)
    planner.place_plant("wildflower", 0, 6)

    try:
        planner.place_plant("tomato", 1, 1)
    except OccupiedCellError as e:
        print(f"Rejected: {e}\n")

    print(planner.render_text())


def demo_companions(planner):
    """Demo 2: Companion planting"""
    print_header("Demo 2: Companion Planting")

    planner.place_plant("potato", 4, 5)
    planner.place_plant("tomato", 5, 5)
    report = planner.compatibility()
    print(report.summary())
    for entry in report.conflicts:
        print(f"  conflict: {entry.reason}")
    for entry in report.benefits:
        print(f"  benefit:  {entry.reason}")

    print("\nUndoing the tomato...")
    planner.undo()
    print(planner.compatibility().summary())


def demo_export(planner):
    """Demo 3: Export"""
    print_header("Demo 3: Export")

    print(f"Saved {planner.save()}")
    print(f"Saved {planner.save_txt(planner.settings.slug + '-plan.txt')}")
    print(f"Saved {planner.save_png(planner.settings.slug + '-plan.png')}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    planner = GardenPlanner(
        settings=GardenSettings(width=3, length=4, grid_size=0.5, name="Demo Garden")
    )
    demo_layout(planner)
    demo_companions(planner)
    demo_export(planner)


if __name__ == "__main__":
    main()
