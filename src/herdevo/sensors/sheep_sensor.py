"""
Sheep Sensor

A radial "fan" of triangular sectors around the herder. Each sector reports
either the share of the flock standing inside it, or the normalized distance
to the nearest follower inside it.
"""

import math
from typing import Sequence

from herdevo.world.geometry import Point, distance, point_in_triangle

class SheepSensor:
    """
    Fan of 'int(360 / sector_angle)' equal sectors reaching 'depth' pixels.

    Sector 0 starts at 'facing_angle - sector_angle / 2', so it is centred on
    the facing direction; the following sectors sweep in the direction of
    increasing angle.

    Count mode:    value = followers in sector / total followers
    Distance mode: value = distance to nearest follower in sector / depth
                   (0 when the sector is empty)
    Binary:        any positive value becomes 1

    Sectors are half-open: a follower on the ray shared by two neighbouring
    sectors belongs to the later one, so no follower is counted twice.

    After each 'read()', 'sweep_triangles' holds the triangle of every
    sector and 'hit_triangles' the (triangle, value) pairs of the
    non-empty ones; a renderer may draw them.
    """

    def __init__(self,
                 sector_angle      : float = 5.703125,
                 depth             : float = 140,
                 output_is_distance: bool  = False,
                 binary            : bool  = False):
        if sector_angle <= 0 or sector_angle > 360:
            raise ValueError(f"Sector angle must be in (0, 360], got {sector_angle}")
        self.sector_angle       = sector_angle
        self.depth              = depth
        self.output_is_distance = output_is_distance
        self.binary             = binary

        self.sweep_triangles: list[tuple[Point, Point, Point]] = []
        self.hit_triangles  : list[tuple[tuple[Point, Point, Point], float]] = []

    @classmethod
    def from_config(cls, config) -> 'SheepSensor':
        return cls(sector_angle       = config.sheep_sensor_angle,
                   depth              = config.sheep_sensor_depth,
                   output_is_distance = config.sheep_sensor_output_is_distance,
                   binary             = config.binary_sheep_sensor)

    @property
    def sector_count(self) -> int:
        return int(360 / self.sector_angle)

    def read(self, facing_angle: float, origin: Point, followers: Sequence[Point]) -> list[float]:
        """
        Parameters:
            facing_angle: Direction the fan is centred on, in degrees
            origin:       Apex of every sector (the herder position)
            followers:    Positions of the followers to detect

        Returns:
            One value per sector
        """
        self.sweep_triangles = []
        self.hit_triangles   = []

        output = [0.0] * self.sector_count
        start  = facing_angle - self.sector_angle / 2

        # neighbouring sectors share the very same corner point
        corners = []
        for index in range(self.sector_count + 1):
            angle = math.radians(start + index * self.sector_angle)
            corners.append((math.cos(angle) * self.depth + origin[0], math.sin(angle) * self.depth + origin[1]))

        for sector in range(self.sector_count):
            p1 = corners[sector]
            p2 = corners[sector + 1]
            triangle = (origin, p1, p2)
            self.sweep_triangles.append(triangle)

            value = 0.0
            for position in followers:
                if not point_in_triangle(position, origin, p1, p2):
                    continue
                if self.output_is_distance:
                    dist = distance(position, origin) / self.depth
                    if value == 0 or dist < value:
                        value = dist
                else:
                    value += 1

            if not self.output_is_distance and followers:
                value /= len(followers)

            if self.binary and value > 0:
                value = 1.0

            if value > 0:
                self.hit_triangles.append((triangle, value))
            output[sector] = value

        return output
