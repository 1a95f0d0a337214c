"""
Follower Module

Boid physics for the followers (sheep). Every tick a follower combines five
steering rules (cohesion, separation, alignment, guidance and escape from the
herder) plus a constant wind, caps its speed and turn rate, and moves.

The rules need the whole flock, so they are plain functions taking the
follower and its flock; a follower itself holds no reference to its flock.

Classes:
    Follower: Position, velocity, heading and pause state of one follower
"""

import math
from typing import TYPE_CHECKING

from herdevo.phenotype.network import crypto_random
from herdevo.world.geometry    import Point, clamp, closest_point_on_segment, distance

if TYPE_CHECKING:
    from herdevo.simulation.flock import Flock

# Largest heading change per tick: 5 degrees, split evenly either side.
MAX_TURN_RADIANS = 0.0872665

SEPARATION_DISTANCE      = 6.0
FENCE_REPULSION_DISTANCE = 9.0
FENCE_REPULSION          = 2.5
ESCAPE_SCALE             = 10.0
BOUNDARY_MARGIN          = 5.0
BOUNDARY_PUSH            = 4.0

class Follower:
    """
    One boid of a flock.

    Public Attributes:
        start_position:  Where the follower starts each generation
        position:        Current position
        velocity:        Current velocity, per tick
        angle:           Heading in radians
        paused:          Whether the follower is standing still (grazing)
        pause_remaining: Ticks left before a paused follower moves again
    """

    def __init__(self, start: Point):
        self.start_position = (float(start[0]), float(start[1]))
        self.reset()

    def reset(self):
        """Put the follower back at its start position, standing still."""
        self.position        = self.start_position
        self.velocity        = (0.0, 0.0)
        self.angle           = 0.0
        self.paused          = False
        self.pause_remaining = 0

    def pause(self, frames: int = 0, rng=crypto_random):
        """Stop for 'frames' ticks (a random 1..29 ticks if 'frames' < 1)."""
        if frames < 1:
            frames = rng.randrange(1, 30)
        self.pause_remaining = frames
        self.paused          = True

    def move(self, flock: 'Flock'):
        """Advance this follower by one tick."""
        if self.paused:
            self.pause_remaining -= 1
            if self.pause_remaining > 0:
                return
            self.paused = False

        config    = flock.config
        proximity = proximity_sigmoid(config.notice_distance, distance(self.position, flock.herder.position))

        def weight(multiplier, threat_multiplier):
            return multiplier * (1 + proximity * threat_multiplier)

        cohesion   = cohesion_vector(self, flock)
        separation = separation_vector(self, flock)
        alignment  = alignment_vector(self, flock)
        guidance   = guidance_vector(self, flock.next_waypoint_position, config.follower_max_speed)
        escape     = escape_vector(self.position, flock.herder.position)

        w_cohesion   = weight(config.cohesion_multiplier,   config.cohesion_threat_multiplier)
        w_separation = weight(config.separation_multiplier, config.separation_threat_multiplier)
        w_alignment  = weight(config.alignment_multiplier,  config.alignment_threat_multiplier)
        w_guidance   = weight(config.guidance_multiplier,   config.guidance_threat_multiplier)

        vx, vy = self.velocity
        vx += (w_cohesion * cohesion[0] + w_separation * separation[0] + w_alignment * alignment[0] +
               config.wind_x + w_guidance * guidance[0] + config.escape_multiplier * escape[0])
        vy += (w_cohesion * cohesion[1] + w_separation * separation[1] + w_alignment * alignment[1] +
               config.wind_y + w_guidance * guidance[1] + config.escape_multiplier * escape[1])
        self.velocity = (vx, vy)

        # a follower walks forwards, so it can only turn slowly towards its velocity
        desired_angle = math.atan2(vy, vx)
        self.angle = clamp(desired_angle, self.angle - MAX_TURN_RADIANS / 2, self.angle + MAX_TURN_RADIANS / 2)

        self.limit_speed(config.follower_min_speed, config.follower_max_speed)

        x, y = self.position
        x += self.velocity[0]
        y += self.velocity[1]

        push = boundary_push((x, y), flock.world.width, flock.world.height)
        self.position = (x + push[0], y + push[1])

    def limit_speed(self, min_speed: float, max_speed: float):
        """
        Cap the speed at 'max_speed', keeping the direction;
        a speed below 'min_speed' becomes zero.
        """
        speed = math.hypot(*self.velocity)

        if speed < max_speed:
            if abs(speed) < min_speed:
                self.velocity = (0.0, 0.0)
            return

        self.velocity = (self.velocity[0] / speed * max_speed, self.velocity[1] / speed * max_speed)

def proximity_sigmoid(notice_distance: float, herder_distance: float) -> float:
    """
    Smooth step from 0 (herder far beyond 'notice_distance') to 1 (herder
    on top of the follower), equal to 0.5 at exactly 'notice_distance'.
    """
    return math.atan((notice_distance - herder_distance) / 20) / math.pi + 0.5

def cohesion_vector(follower: Follower, flock: 'Flock') -> Point:
    """1% of the way towards the centroid of the rest of the flock."""
    cx, cy = flock.centre_of_mass_excluding(follower)
    return ((cx - follower.position[0]) / 100, (cy - follower.position[1]) / 100)

def separation_vector(follower: Follower, flock: 'Flock') -> Point:
    """Push away from followers that are too close, and (harder) from nearby fences."""
    x, y = follower.position
    sx = sy = 0.0

    for other in flock.followers:
        if other is follower:
            continue
        if distance(other.position, follower.position) < SEPARATION_DISTANCE:
            sx -= other.position[0] - x
            sy -= other.position[1] - y

    for a, b in flock.world.segments():
        on_segment, closest = closest_point_on_segment(a, b, (x + sx, y + sy))
        if on_segment and distance(closest, follower.position) < FENCE_REPULSION_DISTANCE:
            sx -= FENCE_REPULSION * (closest[0] - x)
            sy -= FENCE_REPULSION * (closest[1] - y)

    return (sx, sy)

def alignment_vector(follower: Follower, flock: 'Flock') -> Point:
    """An eighth of the way towards the mean velocity of the followers within the mass radius."""
    mx = my = 0.0
    count = 0

    for other in flock.followers:
        if other is follower:
            continue
        if distance(other.position, follower.position) > flock.config.mass_radius:
            continue
        count += 1
        mx += other.velocity[0]
        my += other.velocity[1]

    if count > 0:
        mx /= count
        my /= count

    return ((mx - follower.velocity[0]) / 8, (my - follower.velocity[1]) / 8)

def guidance_vector(follower: Follower, target: Point, max_speed: float) -> Point:
    """1% of the way towards 'target', limited per axis to half the maximum speed."""
    limit = max_speed / 2
    return (clamp((target[0] - follower.position[0]) / 100, -limit, limit),
            clamp((target[1] - follower.position[1]) / 100, -limit, limit))

def escape_vector(position: Point, herder_position: Point) -> Point:
    """Inverse-square repulsion from the herder."""
    dx = position[0] - herder_position[0]
    dy = position[1] - herder_position[1]
    dist = math.hypot(dx, dy) + 1e-5
    strength = (dist / (ESCAPE_SCALE + 1e-10)) ** -2
    return (dx / dist * strength, dy / dist * strength)

def boundary_push(position: Point, width: float, height: float) -> Point:
    """Nudge a follower that strays within 5 pixels of the field's edge back inside."""
    px = py = 0.0
    if position[0] < BOUNDARY_MARGIN:
        px = BOUNDARY_PUSH
    if position[0] > width - BOUNDARY_MARGIN:
        px = -BOUNDARY_PUSH
    if position[1] < BOUNDARY_MARGIN:
        py = BOUNDARY_PUSH
    if position[1] > height - BOUNDARY_MARGIN:
        py = -BOUNDARY_PUSH
    return (px, py)
