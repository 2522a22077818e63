"""
Placement Strategies

Pure geometry helpers shared by the generator and packer. Every function is
deterministic: the same arguments always give the same points, in order.
Screen coordinates are used throughout (x right, y down), so increasing
angles sweep clockwise.
"""

from enum import Enum
from typing import List, Tuple
import math

Point = Tuple[float, float]
Cell = Tuple[int, int]

# Timeline layouts start left of centre and slightly below the central node
CHRONOLOGICAL_OFFSET: Point = (-300.0, 100.0)


class Orientation(Enum):
    """Axis used by axis-aligned placement."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def _check_count(n: int):
    if n < 0:
        raise ValueError(f"Point count must be non-negative, got {n}")


def circular(n: int, radius: float, center: Point = (0.0, 0.0)) -> List[Point]:
    """
    Spread n points evenly on a circle, starting at 12 o'clock.

    angle_i = (i / n) * 2*pi - pi/2

    Args:
        n: Number of points
        radius: Circle radius
        center: Circle centre

    Returns:
        List of (x, y) points
    """
    _check_count(n)
    cx, cy = center
    points = []
    for i in range(n):
        angle = (i / n) * 2 * math.pi - math.pi / 2
        points.append((cx + math.cos(angle) * radius, cy + math.sin(angle) * radius))
    return points


def axis(
    n: int,
    spacing: float,
    orientation: Orientation = Orientation.HORIZONTAL,
    center: Point = (0.0, 0.0),
) -> List[Point]:
    """Spread n points along one axis with fixed spacing, centred on ``center``."""
    _check_count(n)
    cx, cy = center
    start = -(n - 1) * spacing / 2
    points = []
    for i in range(n):
        offset = start + i * spacing
        if orientation == Orientation.HORIZONTAL:
            points.append((cx + offset, cy))
        else:
            points.append((cx, cy + offset))
    return points


def chronological(
    n: int,
    spacing: float,
    offset: Point = CHRONOLOGICAL_OFFSET,
) -> List[Point]:
    """Left-to-right timeline starting at a fixed offset."""
    _check_count(n)
    ox, oy = offset
    return [(ox + i * spacing, oy) for i in range(n)]


def arc(
    n: int,
    radius: float,
    start_angle: float,
    end_angle: float,
    center: Point = (0.0, 0.0),
) -> List[Point]:
    """
    Spread n points along a circular arc, endpoints included.

    Angles are in radians. A single point sits at the arc midpoint.
    """
    _check_count(n)
    cx, cy = center
    if n == 1:
        angles = [(start_angle + end_angle) / 2]
    else:
        step = (end_angle - start_angle) / (n - 1)
        angles = [start_angle + i * step for i in range(n)]
    return [(cx + math.cos(a) * radius, cy + math.sin(a) * radius) for a in angles]


def grid_columns(n: int) -> int:
    """Column count for a near-square grid of n items."""
    _check_count(n)
    return max(1, math.ceil(math.sqrt(n)))


def grid(n: int) -> List[Cell]:
    """
    Assign n items to (row, col) cells of a near-square grid, row-major.

    columns = ceil(sqrt(n)); row = i div columns; col = i mod columns
    """
    columns = grid_columns(n)
    return [(i // columns, i % columns) for i in range(n)]
