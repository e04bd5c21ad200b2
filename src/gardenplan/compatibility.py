"""
Companion-planting compatibility analysis.

Scans the 8-cell neighbourhood of every placed plant and checks neighbours
against the plant's catalog ``avoid_plants`` and ``companion_plants`` lists.
Relationships are taken as declared: if potato avoids tomato but tomato does
not avoid potato, a potato next to a tomato yields exactly one conflict.

Uses networkx for grouping conflicting placements into clusters.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

import networkx as nx

from .catalog import Catalog
from .models import (
    CompatibilityEntry,
    CompatibilityReport,
    PlantDefinition,
    PlantPlacement,
)

NEIGHBOUR_OFFSETS = [
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
]


class CompatibilityAnalyzer:
    """
    Computes conflicts and benefits between adjacent plants.

    The analyzer holds no state between calls; every report is computed from
    the placements it is given.
    """

    def analyze(
        self, plants: Iterable[PlantPlacement], catalog: Catalog
    ) -> CompatibilityReport:
        """
        Build a compatibility report for the given placements.

        Args:
            plants: Placed plants to examine.
            catalog: Catalog used to resolve plant types.

        Returns:
            CompatibilityReport with one conflict per (plant, neighbour) pair
            where the plant avoids the neighbour's type, and one benefit per
            pair where the plant lists the neighbour's type as a companion.
            Placements whose type is not in the catalog are skipped.
        """
        plants = list(plants)
        by_cell: Dict[Tuple[int, int], List[PlantPlacement]] = defaultdict(list)
        for plant in plants:
            by_cell[plant.cell].append(plant)

        report = CompatibilityReport()
        for plant in plants:
            info = catalog.find_by_id(plant.type_id)
            if not isinstance(info, PlantDefinition):
                continue

            for dx, dy in NEIGHBOUR_OFFSETS:
                for neighbour in by_cell.get((plant.x + dx, plant.y + dy), ()):
                    neighbour_info = catalog.find_by_id(neighbour.type_id)
                    if not isinstance(neighbour_info, PlantDefinition):
                        continue

                    if neighbour_info.id in info.avoid_plants:
                        report.conflicts.append(
                            CompatibilityEntry(
                                plant1=plant,
                                plant2=neighbour,
                                reason=f"{info.name} should not be planted near "
                                f"{neighbour_info.name}",
                            )
                        )
                    if neighbour_info.id in info.companion_plants:
                        report.benefits.append(
                            CompatibilityEntry(
                                plant1=plant,
                                plant2=neighbour,
                                reason=f"{info.name} benefits from being planted near "
                                f"{neighbour_info.name}",
                            )
                        )
        return report

    def conflict_graph(self, report: CompatibilityReport) -> nx.Graph:
        """
        Build an undirected graph of placements joined by conflicts.

        Nodes are placement ids (with the placement under ``placement``);
        each edge lists the reasons reported between its two plants.
        """
        graph = nx.Graph()
        for entry in report.conflicts:
            graph.add_node(entry.plant1.id, placement=entry.plant1)
            graph.add_node(entry.plant2.id, placement=entry.plant2)
            if graph.has_edge(entry.plant1.id, entry.plant2.id):
                graph.edges[entry.plant1.id, entry.plant2.id]["reasons"].append(entry.reason)
            else:
                graph.add_edge(entry.plant1.id, entry.plant2.id, reasons=[entry.reason])
        return graph

    def conflict_clusters(self, report: CompatibilityReport) -> List[Set[str]]:
        """
        Group conflicting placements into connected clusters.

        Returns:
            Sets of placement ids, largest cluster first.
        """
        graph = self.conflict_graph(report)
        clusters = [set(component) for component in nx.connected_components(graph)]
        return sorted(clusters, key=lambda cluster: (-len(cluster), sorted(cluster)))


def analyze(plants: Iterable[PlantPlacement], catalog: Catalog) -> CompatibilityReport:
    """
    Convenience function to analyze placements.

    Args:
        plants: Placed plants.
        catalog: Catalog resolving their types.

    Returns:
        CompatibilityReport
    """
    return CompatibilityAnalyzer().analyze(plants, catalog)
