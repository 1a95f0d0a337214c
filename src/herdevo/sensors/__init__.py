"""
Sensors Package

Radial sector sensors that turn world state into fixed-length network inputs.
"""

from herdevo.sensors.sheep_sensor import SheepSensor
from herdevo.sensors.wall_sensor  import WallSensor, WALL_SECTOR_ANGLE

__all__ = ['SheepSensor', 'WallSensor', 'WALL_SECTOR_ANGLE']
