"""
Wall Sensor

A radial fan of 45-degree sectors that reports how close the nearest fence is
in each direction.
"""

import math

from herdevo.world.geometry    import Point, clamp, distance, line_intersection
from herdevo.world.world_model import WorldModel

WALL_SECTOR_ANGLE = 45.0

class WallSensor:
    """
    Each sector is the triangle formed by the herder and two points 'depth'
    pixels away. For every fence segment crossing the triangle, the crossing
    point is estimated from the intersections with the triangle's sides (the
    far side takes precedence) and its normalized distance d = dist / depth
    is computed. The sector reports 1 - min(d), starting from min(d) = 1:
    0 means no fence within range, values near 1 mean a fence right next to
    the herder.

    Note the sector geometry uses sin() for x and cos() for y, so the fan is
    mirrored relative to the sheep sensor's convention.
    """

    def __init__(self, world: WorldModel, depth: float = 10, sample_points: int = 8):
        self.world         = world
        self.depth         = depth
        self.sample_points = sample_points

        self.sweep_triangles: list[tuple[Point, Point, Point]] = []
        self.hit_triangles  : list[tuple[Point, Point, Point]] = []

    @classmethod
    def from_config(cls, config, world: WorldModel) -> 'WallSensor':
        return cls(world, depth=config.wall_sensor_depth, sample_points=config.wall_sensor_sample_points)

    @property
    def sector_count(self) -> int:
        return self.sample_points

    def read(self, facing_angle: float, origin: Point) -> list[float]:
        self.sweep_triangles = []
        self.hit_triangles   = []

        output = []
        start  = facing_angle - WALL_SECTOR_ANGLE / 2

        for sector in range(self.sample_points):
            angle_min = math.radians(start + sector * WALL_SECTOR_ANGLE)
            angle_max = angle_min + math.radians(WALL_SECTOR_ANGLE)

            p1 = (math.sin(angle_min) * self.depth + origin[0], math.cos(angle_min) * self.depth + origin[1])
            p2 = (math.sin(angle_max) * self.depth + origin[0], math.cos(angle_max) * self.depth + origin[1])
            triangle = (origin, p1, p2)
            self.sweep_triangles.append(triangle)

            closest = 1.0
            for a, b in self.world.segments():
                hit = self._crossing_point(origin, p1, p2, a, b)
                if hit is None:
                    continue
                mult = clamp(distance(origin, hit), 0, self.depth) / self.depth
                closest = min(closest, mult)

            if closest != 1:
                self.hit_triangles.append(triangle)
            output.append(1 - closest)

        return output

    @staticmethod
    def _crossing_point(origin: Point, p1: Point, p2: Point, a: Point, b: Point):
        left  = line_intersection(origin, p1, a, b)
        right = line_intersection(origin, p2, a, b)
        far   = line_intersection(p1, p2, a, b)

        if far is not None:
            return far
        if left is None and right is None:
            return None
        if left is None:
            left = right
        if right is None:
            right = left
        return ((left[0] + right[0]) / 2, (left[1] + right[1]) / 2)
