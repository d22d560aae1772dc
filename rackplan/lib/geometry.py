"""
Coordinate helpers shared by the slot allocator and the editor session.

Plan space is pixels with y growing downward. Rack space is 1-based U
indices with U1 at the bottom of the rack.
"""
import math
from typing import Tuple


Point = Tuple[float, float]


def snap_to_grid(x: float, y: float, grid_size: float, enabled: bool = True) -> Point:
    """Round both coordinates to the nearest multiple of ``grid_size``."""
    if not enabled or grid_size <= 0:
        return x, y
    return _snap(x, grid_size), _snap(y, grid_size)


def _snap(value: float, grid_size: float) -> float:
    # Half-up rounding; round() would send 5 -> 0 on a 10px grid
    return math.floor(value / grid_size + 0.5) * grid_size


def u_to_pixel_offset(u: int, total_u: int, u_height_px: float) -> float:
    """Offset of the top edge of slot ``u`` measured down from the rack's top edge."""
    return (total_u - u) * u_height_px


def pixel_offset_to_u(offset: float, total_u: int, u_height_px: float) -> int:
    """
    Slot index under a vertical offset from the rack's top edge.

    Offsets above or below the rack clamp to ``total_u`` and ``1``.
    """
    rack_height = total_u * u_height_px
    u = math.ceil((rack_height - offset) / u_height_px)
    return max(1, min(total_u, u))


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Inclusive interval test on U indices."""
    return not (end_a < start_b or start_a > end_b)


def u_range_end(start_u: int, height_u: int) -> int:
    return start_u + height_u - 1


def translate_point(point: Point, dx: float, dy: float) -> Point:
    return point[0] + dx, point[1] + dy


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def rotate_point(point: Point, center: Point, angle_deg: float) -> Point:
    """Rotate ``point`` around ``center`` clockwise in screen space."""
    rad = math.radians(angle_deg)
    cos, sin = math.cos(rad), math.sin(rad)
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    return center[0] + dx * cos - dy * sin, center[1] + dx * sin + dy * cos
