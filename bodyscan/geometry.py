"""
Geometry helpers over normalized landmark coordinates
"""

import math

from .landmarks import Landmark

def distance_px(a: Landmark, b: Landmark, width: float, height: float) -> float:
    """Euclidean distance in pixels between two normalized landmarks"""
    return math.hypot((a.x - b.x) * width, (a.y - b.y) * height)

def midpoint(a: Landmark, b: Landmark) -> Landmark:
    return Landmark(
        x=(a.x + b.x) / 2,
        y=(a.y + b.y) / 2,
        z=(a.z + b.z) / 2,
        visibility=min(a.visibility, b.visibility),
    )

def mid_y(a: Landmark, b: Landmark) -> float:
    return (a.y + b.y) / 2

def ellipse_circumference(a: float, b: float) -> float:
    """Ramanujan's approximation for the perimeter of an ellipse with semi-axes a, b"""
    return math.pi * (3 * (a + b) - math.sqrt((3 * a + b) * (a + 3 * b)))

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
