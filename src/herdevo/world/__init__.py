"""
World Package

Geometry helpers and the course model (waypoints, fences, goal region).
"""

from herdevo.world.geometry    import (Point, clamp, clamp360, distance, point_in_triangle,
                                       line_intersection, closest_point_on_segment,
                                       angle_between_degrees)
from herdevo.world.world_model import GoalRegion, WorldModel

__all__ = ['Point',
           'clamp',
           'clamp360',
           'distance',
           'point_in_triangle',
           'line_intersection',
           'closest_point_on_segment',
           'angle_between_degrees',
           'GoalRegion',
           'WorldModel']
