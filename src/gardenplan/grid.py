"""
Grid model for a bounded rectangular garden plot.

Converts between real-world distances, discrete grid cells and the pixel
space owned by whichever renderer displays the plot.
"""

import math
from typing import Tuple

from .errors import OutOfBoundsError
from .models import GardenSettings, footprint_cells

# Guards ceil() against float noise such as 3 / 0.1 == 30.000000000000004
_PRECISION = 9


class GridModel:
    """
    Discrete grid over a garden plot.

    Example:
        >>> grid = GridModel(GardenSettings(width=3, length=4, grid_size=0.5))
        >>> grid.grid_cell_count()
        (6, 8)
    """

    def __init__(self, settings: GardenSettings):
        settings.validate()
        self.settings = settings

    def update(self, settings: GardenSettings) -> None:
        """Switch to new settings. Existing placements are left untouched."""
        settings.validate()
        self.settings = settings

    @property
    def grid_size(self) -> float:
        return self.settings.grid_size

    def grid_cell_count(self) -> Tuple[int, int]:
        """Return (cols, rows): ceil(width / grid_size), ceil(length / grid_size)."""
        cols = math.ceil(round(self.settings.width / self.settings.grid_size, _PRECISION))
        rows = math.ceil(round(self.settings.length / self.settings.grid_size, _PRECISION))
        return cols, rows

    def to_grid_units(self, distance: float) -> float:
        """Convert a real-world distance into grid units."""
        return distance / self.settings.grid_size

    def in_bounds(self, x: int, y: int) -> bool:
        cols, rows = self.grid_cell_count()
        return 0 <= x < cols and 0 <= y < rows

    def check_bounds(self, x: int, y: int) -> None:
        """
        Raise if (x, y) is not a cell of the grid.

        Raises:
            OutOfBoundsError: If the cell lies outside [0, cols) x [0, rows).
        """
        if not self.in_bounds(x, y):
            cols, rows = self.grid_cell_count()
            raise OutOfBoundsError(x, y, cols, rows)

    def check_footprint(self, x: int, y: int, width: float, length: float) -> None:
        """Raise OutOfBoundsError unless every cell of the rectangle is on the grid."""
        for cell_x, cell_y in footprint_cells(x, y, width, length):
            if not self.in_bounds(cell_x, cell_y):
                cols, rows = self.grid_cell_count()
                raise OutOfBoundsError(cell_x, cell_y, cols, rows)

    def cell_pixel_size(
        self, canvas_width: float, canvas_height: float
    ) -> Tuple[float, float]:
        """Return the (x, y) pixel size of one cell on a canvas of the given size."""
        if canvas_width <= 0 or canvas_height <= 0:
            raise ValueError("canvas dimensions must be positive")
        cols, rows = self.grid_cell_count()
        return canvas_width / cols, canvas_height / rows

    def to_grid_cell(
        self,
        pixel_x: float,
        pixel_y: float,
        canvas_width: float,
        canvas_height: float,
    ) -> Tuple[int, int]:
        """
        Convert a click position on the rendered plot into a grid cell.

        Args:
            pixel_x: Horizontal offset from the canvas' left edge.
            pixel_y: Vertical offset from the canvas' top edge.
            canvas_width: Current rendered width of the plot in pixels.
            canvas_height: Current rendered height of the plot in pixels.

        Returns:
            (gx, gy) grid coordinates.

        Raises:
            OutOfBoundsError: If the position falls outside the grid.
        """
        px_per_cell_x, px_per_cell_y = self.cell_pixel_size(canvas_width, canvas_height)
        gx = math.floor(pixel_x / px_per_cell_x)
        gy = math.floor(pixel_y / px_per_cell_y)
        self.check_bounds(gx, gy)
        return gx, gy

    def cell_to_pixels(
        self, x: float, y: float, canvas_width: float, canvas_height: float
    ) -> Tuple[float, float]:
        """Return the pixel position of the top-left corner of cell (x, y)."""
        px_per_cell_x, px_per_cell_y = self.cell_pixel_size(canvas_width, canvas_height)
        return x * px_per_cell_x, y * px_per_cell_y
