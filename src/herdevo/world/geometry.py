"""
Plane geometry helpers shared by the world, the sensors and the simulation.

Points are plain '(x, y)' tuples of floats. Angles are in degrees unless a
function name says otherwise.
"""

import math
from typing import Optional

Point = tuple[float, float]

def clamp(value: float, low: float, high: float) -> float:
    """Restrict 'value' to the closed interval [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value

def clamp360(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360]."""
    while angle < 0:
        angle += 360
    while angle > 360:
        angle -= 360
    return angle

def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])

def point_in_triangle(p: Point, v1: Point, v2: Point, v3: Point) -> bool:
    """
    Test whether 'p' lies inside the triangle (v1, v2, v3).

    The triangle is half-open: the edges v1-v2 and v2-v3 are inside, the edge
    v1-v3 is outside. Triangles fanned around a shared apex v1, where the v3
    of one is the v2 of the next, therefore claim each point of a shared edge
    exactly once.

    Both edges leaving v1 are tested with the same expression, so a shared
    edge gives the same value, with opposite sign requirements, in both
    triangles.
    """
    x2_minus_x1 = v2[0] - v1[0]
    y2_minus_y1 = v2[1] - v1[1]
    x3_minus_x1 = v3[0] - v1[0]
    y3_minus_y1 = v3[1] - v1[1]
    det = x2_minus_x1 * y3_minus_y1 - y2_minus_y1 * x3_minus_x1

    return (det * (x2_minus_x1 * (p[1] - v1[1]) - y2_minus_y1 * (p[0] - v1[0])) >= 0 and
            det * ((v3[0] - v2[0]) * (p[1] - v2[1]) - (v3[1] - v2[1]) * (p[0] - v2[0])) >= 0 and
            det * (x3_minus_x1 * (p[1] - v1[1]) - y3_minus_y1 * (p[0] - v1[0])) < 0)

def line_intersection(p0: Point, p1: Point, p2: Point, p3: Point) -> Optional[Point]:
    """
    Intersection of segment p0-p1 with segment p2-p3.

    Returns:
        The intersection point, or None if the segments do not cross
        (parallel segments never cross).
    """
    s1_x = p1[0] - p0[0]
    s1_y = p1[1] - p0[1]
    s2_x = p3[0] - p2[0]
    s2_y = p3[1] - p2[1]

    denominator = -s2_x * s1_y + s1_x * s2_y
    if denominator == 0:
        return None

    s = (-s1_y * (p0[0] - p2[0]) + s1_x * (p0[1] - p2[1])) / denominator
    t = ( s2_x * (p0[1] - p2[1]) - s2_y * (p0[0] - p2[0])) / denominator

    if 0 <= s <= 1 and 0 <= t <= 1:
        return (p0[0] + t * s1_x, p0[1] + t * s1_y)
    return None

def closest_point_on_segment(p0: Point, p1: Point, c: Point) -> tuple[bool, Point]:
    """
    Project 'c' onto the segment p0-p1.

    Returns:
        (on_segment, closest) where 'closest' is the nearest point of the
        segment to 'c', and 'on_segment' is True when the perpendicular foot
        falls between the end points (inclusive).
    """
    dx  = c[0] - p0[0]
    dy  = c[1] - p0[1]
    dxx = p1[0] - p0[0]
    dyy = p1[1] - p0[1]

    length_squared = dxx * dxx + dyy * dyy
    if length_squared == 0:
        return False, p0

    t = (dx * dxx + dy * dyy) / length_squared

    if t < 0:
        return False, p0
    if t > 1:
        return False, p1
    return True, (p0[0] + dxx * t, p0[1] + dyy * t)

def angle_between_degrees(origin: Point, target: Point) -> float:
    """Direction from 'origin' to 'target', in degrees in (-180, 180]."""
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0]))
