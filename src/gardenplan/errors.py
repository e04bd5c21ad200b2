"""
Exceptions raised by the garden planner.

Every mutation in the planner validates its input before touching any state,
so when one of these errors propagates the plan is exactly as it was before
the call.
"""

from typing import Optional


class PlannerError(Exception):
    """Base class for all planner errors."""

    pass


class InvalidSettingsError(PlannerError):
    """Raised when garden dimensions or grid size are not usable."""

    pass


class OutOfBoundsError(PlannerError):
    """Raised when a grid cell (or footprint) lies outside the plot."""

    def __init__(self, x: int, y: int, cols: int, rows: int):
        self.x = x
        self.y = y
        self.cols = cols
        self.rows = rows
        super().__init__(
            f"Cell ({x}, {y}) is outside the {cols}x{rows} garden grid"
        )


class OccupiedCellError(PlannerError):
    """Raised when a plant would share a cell with a plant or a blocking item."""

    def __init__(self, x: int, y: int, occupant: Optional[str] = None):
        self.x = x
        self.y = y
        self.occupant = occupant
        detail = f" by {occupant}" if occupant else ""
        super().__init__(f"This space is already occupied{detail}: ({x}, {y})")


class NotFoundError(PlannerError):
    """Raised when a placement or catalog id does not exist."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"Unknown {kind}: {item_id!r}")


class EmptyHistoryError(PlannerError):
    """Raised internally when undo or redo has nothing to apply."""

    pass


class PlanFormatError(PlannerError):
    """Raised when an exported plan document cannot be loaded."""

    pass
