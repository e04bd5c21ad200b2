"""
Character-grid renderer for garden plans.

Draws a plan as text, one character per grid cell, framed with Unicode
box-drawing characters. Plants are drawn with the first letter of their
name, structures with the first letter of theirs in lower case, paths with
PATH_CHAR. Names sharing an initial fall back to their next unused letter.
A legend below the grid maps letters back to names.
"""

import string
from typing import Callable, Dict, List, Optional

from .catalog import Catalog
from .grid import GridModel
from .models import HistorySnapshot, PlantDefinition

# Unicode box-drawing characters for the plot border
BOX_CHARS = {
    "top_left": "┌",
    "top_right": "┐",
    "bottom_left": "└",
    "bottom_right": "┘",
    "horizontal": "─",
    "vertical": "│",
}

EMPTY_CHAR = "·"
PATH_CHAR = "="
UNKNOWN_PLANT_CHAR = "?"


class Canvas:
    """
    A 2D character canvas.
    """

    def __init__(self, width: int, height: int, fill_char: str = " "):
        self.width = width
        self.height = height
        self.grid: List[List[str]] = [
            [fill_char for _ in range(width)] for _ in range(height)
        ]

    def set(self, x: int, y: int, char: str) -> None:
        """Set a character at position (x, y)."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.grid[y][x] = char

    def draw_text(self, x: int, y: int, text: str) -> None:
        """Draw text starting at position (x, y)."""
        for i, char in enumerate(text):
            self.set(x + i, y, char)

    def render(self) -> str:
        """Render the canvas to a string."""
        lines = []
        for row in self.grid:
            line = "".join(row).rstrip()
            lines.append(line)

        # Remove trailing empty lines
        while lines and not lines[-1]:
            lines.pop()

        return "\n".join(lines)


class PlanTextRenderer:
    """
    Renders a plan snapshot as a framed character grid.

    Example:
        >>> renderer = PlanTextRenderer()
        >>> print(renderer.render(grid, store.snapshot(), catalog, title="My Garden"))
    """

    def __init__(self, legend: bool = True, cell_width: int = 2):
        if cell_width < 1:
            raise ValueError("cell_width must be at least 1")
        self.legend = legend
        self.cell_width = cell_width

    def render(
        self,
        grid: GridModel,
        snapshot: HistorySnapshot,
        catalog: Catalog,
        title: Optional[str] = None,
    ) -> str:
        """
        Render the placements in ``snapshot``.

        Placements that fall outside the current grid (for example after the
        plot was resized) are clipped.
        """
        cols, rows = grid.grid_cell_count()
        offset_y = 2 if title else 0
        canvas = Canvas(cols * self.cell_width + 2, rows + 2 + offset_y)

        if title:
            canvas.draw_text(0, 0, title)

        self._draw_border(canvas, cols * self.cell_width + 2, rows + 2, offset_y)

        cells: Dict[tuple, str] = {}
        labels: Dict[str, str] = {}
        chars: Dict[str, str] = {}

        for path in snapshot.paths:
            for cell in path.cells():
                cells[cell] = PATH_CHAR
            labels.setdefault(PATH_CHAR, "path")

        for structure in snapshot.structures:
            char = self._char_for(structure.name, str.lower, chars)
            for cell in structure.cells():
                cells[cell] = char
            labels.setdefault(char, structure.name)

        for plant in snapshot.plants:
            definition = catalog.find_by_id(plant.type_id)
            if isinstance(definition, PlantDefinition):
                char = self._char_for(definition.name, str.upper, chars)
                label = definition.name
            else:
                char = UNKNOWN_PLANT_CHAR
                label = "Unknown Plant"
            cells[plant.cell] = char
            labels.setdefault(char, label)

        # Only what is visible on the grid goes into the legend
        legend: Dict[str, str] = {}
        for y in range(rows):
            for x in range(cols):
                char = cells.get((x, y), EMPTY_CHAR)
                if char in labels:
                    legend[char] = labels[char]
                canvas.draw_text(1 + x * self.cell_width, 1 + y + offset_y, char)

        text = canvas.render()
        if self.legend and legend:
            entries = [f"{char} {name}" for char, name in sorted(legend.items())]
            text += "\n\n" + "\n".join(entries)
        return text

    @staticmethod
    def _char_for(name: str, case: Callable[[str], str], chars: Dict[str, str]) -> str:
        """
        Pick a legend letter for ``name``.

        Tries the letters of the name in order, then the rest of the alphabet,
        so that two names sharing an initial get different letters.
        """
        key = case(name)
        if key in chars:
            return chars[key]
        taken = set(chars.values())
        candidates = [case(c) for c in name if c.isalpha()]
        candidates += [case(c) for c in string.ascii_lowercase]
        for char in candidates:
            if char not in taken:
                chars[key] = char
                return char
        chars[key] = "#"
        return "#"

    @staticmethod
    def _draw_border(canvas: Canvas, width: int, height: int, top: int) -> None:
        for x in range(1, width - 1):
            canvas.set(x, top, BOX_CHARS["horizontal"])
            canvas.set(x, top + height - 1, BOX_CHARS["horizontal"])
        for y in range(top + 1, top + height - 1):
            canvas.set(0, y, BOX_CHARS["vertical"])
            canvas.set(width - 1, y, BOX_CHARS["vertical"])
        canvas.set(0, top, BOX_CHARS["top_left"])
        canvas.set(width - 1, top, BOX_CHARS["top_right"])
        canvas.set(0, top + height - 1, BOX_CHARS["bottom_left"])
        canvas.set(width - 1, top + height - 1, BOX_CHARS["bottom_right"])
