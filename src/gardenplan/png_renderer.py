"""
PNG renderer for garden plans.

Renders a plan snapshot as an image: a light green plot with grid lines,
paths as rounded rectangles, structures as labelled blocks and plants as
circles in their catalog colour.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .catalog import Catalog
from .grid import GridModel
from .models import (
    DEFAULT_PATH_COLOR,
    DEFAULT_PLANT_COLOR,
    DEFAULT_STRUCTURE_COLOR,
    HistorySnapshot,
    lookup_color,
)

logger = logging.getLogger(__name__)


class PlanPNGRenderer:
    """Renders garden plans as PNG images."""

    def __init__(
        self,
        cell_pixels: int = 40,
        margin: int = 20,
        font_size: int = 11,
        font_path: Optional[str] = None,
        scale: int = 2,  # For high-resolution output
    ):
        if cell_pixels < 4:
            raise ValueError("cell_pixels must be at least 4")
        self.cell_pixels = cell_pixels
        self.margin = margin
        self.font_size = font_size
        self.font_path = font_path
        self.scale = scale

        # Colors
        self.bg_color = (255, 255, 255)
        self.plot_color = (226, 240, 203)
        self.grid_color = (187, 187, 187)
        self.label_color = (255, 255, 255)

        self.font = None

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a font for structure labels."""
        if self.font is not None:
            return self.font

        font_size = self.font_size * self.scale
        font_options = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        ]
        if self.font_path:
            font_options.insert(0, self.font_path)

        for path in font_options:
            if os.path.exists(path):
                try:
                    self.font = ImageFont.truetype(path, font_size)
                    return self.font
                except OSError:
                    logger.debug("Could not load font %s", path)
                    continue

        self.font = ImageFont.load_default()
        return self.font

    def canvas_size(self, grid: GridModel) -> Tuple[int, int]:
        """Return the pixel (width, height) of the plot area, excluding margins."""
        cols, rows = grid.grid_cell_count()
        cell = self.cell_pixels * self.scale
        return cols * cell, rows * cell

    def draw(
        self, grid: GridModel, snapshot: HistorySnapshot, catalog: Catalog
    ) -> Image.Image:
        """Draw the plan and return the image."""
        plot_width, plot_height = self.canvas_size(grid)
        margin = self.margin * self.scale
        img = Image.new(
            "RGB", (plot_width + margin * 2, plot_height + margin * 2), self.bg_color
        )
        draw = ImageDraw.Draw(img)

        draw.rectangle(
            [margin, margin, margin + plot_width, margin + plot_height],
            fill=self.plot_color,
        )
        self._draw_grid(draw, grid, margin, plot_width, plot_height)

        def to_pixels(x: float, y: float) -> Tuple[float, float]:
            px, py = grid.cell_to_pixels(x, y, plot_width, plot_height)
            return margin + px, margin + py

        px_per_x, px_per_y = grid.cell_pixel_size(plot_width, plot_height)

        for path in snapshot.paths:
            left, top = to_pixels(path.x, path.y)
            right = left + path.width * px_per_x
            bottom = top + path.length * px_per_y
            draw.rounded_rectangle(
                [left, top, right, bottom],
                radius=5 * self.scale,
                fill=path.color or DEFAULT_PATH_COLOR,
            )

        font = self._get_font()
        for structure in snapshot.structures:
            left, top = to_pixels(structure.x, structure.y)
            right = left + structure.width * px_per_x
            bottom = top + structure.length * px_per_y
            draw.rectangle(
                [left, top, right, bottom],
                fill=structure.color or DEFAULT_STRUCTURE_COLOR,
            )
            bbox = draw.textbbox((0, 0), structure.name, font=font)
            text_width = bbox[2] - bbox[0]
            text_height = bbox[3] - bbox[1]
            draw.text(
                ((left + right - text_width) / 2, (top + bottom - text_height) / 2),
                structure.name,
                fill=self.label_color,
                font=font,
            )

        for plant in snapshot.plants:
            color = lookup_color(catalog.find_by_id(plant.type_id), DEFAULT_PLANT_COLOR)
            diameter = min(px_per_x, px_per_y) * plant.size
            left, top = to_pixels(plant.x, plant.y)
            center_x = left + px_per_x / 2
            center_y = top + px_per_y / 2
            radius = diameter / 2
            draw.ellipse(
                [center_x - radius, center_y - radius, center_x + radius, center_y + radius],
                fill=color,
            )

        return img

    def _draw_grid(
        self,
        draw: ImageDraw.ImageDraw,
        grid: GridModel,
        margin: int,
        plot_width: int,
        plot_height: int,
    ) -> None:
        cols, rows = grid.grid_cell_count()
        px_per_x, px_per_y = grid.cell_pixel_size(plot_width, plot_height)
        for i in range(rows + 1):
            y = margin + i * px_per_y
            draw.line([(margin, y), (margin + plot_width, y)], fill=self.grid_color, width=1)
        for i in range(cols + 1):
            x = margin + i * px_per_x
            draw.line([(x, margin), (x, margin + plot_height)], fill=self.grid_color, width=1)

    def render(
        self,
        grid: GridModel,
        snapshot: HistorySnapshot,
        catalog: Catalog,
        output_path: Union[str, Path],
    ) -> str:
        """
        Render the plan to a PNG file.

        Returns:
            The output path.
        """
        img = self.draw(grid, snapshot, catalog)
        img.save(output_path, "PNG")
        return str(output_path)
