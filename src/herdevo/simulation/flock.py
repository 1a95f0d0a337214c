"""
Flock Module

A flock is one herder, its followers, and the progress they make along the
course. Flocks are rebuilt every generation while the networks steering their
herders live on; a flock's id is the id of the network that steers it.

Classes:
    Flock: Followers + herder + waypoint progress + failure state

Functions:
    closest_waypoint_forwards(world, centroid, current): Advance the waypoint cursor
"""

import math
from typing import Callable, Sequence, TYPE_CHECKING

from herdevo.sensors             import SheepSensor, WallSensor
from herdevo.simulation.failure  import FailureReason
from herdevo.simulation.follower import Follower
from herdevo.simulation.herder   import Herder
from herdevo.world.geometry      import Point, distance
from herdevo.world.world_model   import WorldModel

if TYPE_CHECKING:
    from herdevo.run.config  import Config
    from herdevo.run.session import TrainingSession

# The flock counts as lost when its centroid is farther than this
# multiple of the sheep sensor's depth from the herder.
OUT_OF_SIGHT_FACTOR = 1.4

# Fitness credited for each follower standing in the goal region.
GOAL_REWARD = 100

class Flock:
    """
    One herder with its followers on one copy of the course.

    Failures (losing sight of the flock, making no progress for too long) are
    ordinary outcomes: they set 'failed' and 'failure_reason', and a failed
    flock no longer moves until the next generation replaces it.

    Public Attributes:
        id:                Id of the flock, equal to the id of its network
        followers:         The followers (sheep)
        herder:            The herder (dog)
        failed:            Whether the flock has stopped
        failure_reason:    FailureReason (RUNNING while not failed)
        followers_in_goal: Followers in the goal region after the last move

    Public Methods:
        move(session):             Advance followers, then the herder, by one tick
        update_progress(position): Advance the waypoint cursor and check failure conditions
        fitness():                 Progress-based score of the flock
    """

    def __init__(self,
                 flock_id       : int,
                 start_positions: Sequence[Point],
                 config         : 'Config',
                 world          : WorldModel,
                 clock          : Callable[[], float]):
        """
        Parameters:
            flock_id:        Id of the flock (and of the network steering its herder)
            start_positions: One start position per follower
            config:          Configuration parameters
            world:           The course, shared read-only between flocks
            clock:           Returns the current time, in the units of 'time_wasting_limit'
        """
        self.id     = flock_id
        self.config = config
        self.world  = world
        self._clock = clock

        self.followers = [Follower(p) for p in start_positions]
        self.herder    = Herder(flock_id,
                                SheepSensor.from_config(config),
                                WallSensor.from_config(config, world))

        self.failed            : bool          = False
        self.failure_reason    : FailureReason = FailureReason.RUNNING
        self.followers_in_goal : int           = 0

        self._next_waypoint   = 0
        self._last_checkpoint = clock()

    @property
    def next_waypoint(self) -> int:
        """Index of the next waypoint the flock has to reach; it never decreases."""
        return self._next_waypoint

    @next_waypoint.setter
    def next_waypoint(self, value: int):
        if value == self._next_waypoint:
            return
        self._next_waypoint   = value
        self._last_checkpoint = self._clock()

    @property
    def next_waypoint_position(self) -> Point:
        return self.world.waypoints[self._next_waypoint]

    @property
    def time_since_checkpoint(self) -> float:
        return self._clock() - self._last_checkpoint

    def fail(self, reason: FailureReason):
        self.failed         = True
        self.failure_reason = reason

    def follower_positions(self) -> list[Point]:
        return [f.position for f in self.followers]

    def centre_of_mass(self) -> Point:
        return self.true_centre_of_mass()[0]

    def true_centre_of_mass(self) -> tuple[Point, bool]:
        """
        Returns:
            (centroid of all followers, whether any follower is a straggler)
        """
        count = len(self.followers)
        cx = sum(f.position[0] for f in self.followers) / count
        cy = sum(f.position[1] for f in self.followers) / count

        stragglers = any(distance((cx, cy), f.position) > self.config.straggler_distance
                         for f in self.followers)
        return (cx, cy), stragglers

    def centre_of_mass_excluding(self, follower: Follower) -> Point:
        """Centroid of every follower but 'follower' (its own position if it is alone)."""
        if len(self.followers) < 2:
            return follower.position

        x = y = 0.0
        for other in self.followers:
            if other is follower:
                continue
            x += other.position[0]
            y += other.position[1]

        count = len(self.followers) - 1
        return (x / count, y / count)

    def movement_angle(self) -> float:
        """Direction of the summed follower velocities, in radians."""
        return math.atan2(sum(f.velocity[1] for f in self.followers),
                          sum(f.velocity[0] for f in self.followers))

    def angle_to_next_waypoint(self) -> float:
        """Direction from the centroid to the next waypoint, in radians."""
        cx, cy = self.centre_of_mass()
        wx, wy = self.next_waypoint_position
        return math.atan2(wy - cy, wx - cx)

    def update_progress(self, herder_position: Point):
        """
        Move the waypoint cursor forward and check the flock-side failure
        conditions: the flock drifting out of the herder's sight, stragglers
        (if enabled), and too much time passing without reaching a waypoint.
        """
        centroid, stragglers = self.true_centre_of_mass()

        if self.config.fail_on_stragglers and stragglers:
            self.fail(FailureReason.STRAGGLERS)

        if distance(herder_position, centroid) > self.config.sheep_sensor_depth * OUT_OF_SIGHT_FACTOR:
            self.fail(FailureReason.OUT_OF_SIGHT)
        else:
            self.next_waypoint = closest_waypoint_forwards(self.world, centroid, self.next_waypoint)

        if self.time_since_checkpoint > self.config.time_wasting_limit:
            if self.next_waypoint < self.world.waypoint_count - 1:
                self.fail(FailureReason.TIME_WASTING)
            else:
                self.fail(FailureReason.TIME_UP)

    def fitness(self) -> float:
        """
        Mean over the followers of GOAL_REWARD for a follower inside the goal
        region, or the index of the next waypoint otherwise.
        """
        score = 0.0
        for f in self.followers:
            score += GOAL_REWARD if self.world.in_goal(f.position) else self._next_waypoint
        return score / len(self.followers)

    def move(self, session: 'TrainingSession'):
        """Move every follower, then the herder. A failed flock does not move."""
        if self.failed:
            return

        in_goal = 0
        for follower in self.followers:
            follower.move(self)
            if self.world.in_goal(follower.position):
                in_goal += 1
        self.followers_in_goal = in_goal

        self.herder.move(session)

def closest_waypoint_forwards(world: WorldModel, centroid: Point, current: int) -> int:
    """
    Pick, among the waypoints from 'current' onwards, the one farthest from
    'centroid' that can be reached in a straight line without crossing a fence.
    This lets a flock skip several waypoints at once but never go back.

    Returns:
        The new waypoint index (>= current)
    """
    best_index    = -1
    best_distance = -1.0

    for index in range(max(current, 0), world.waypoint_count):
        waypoint = world.waypoints[index]
        dist = distance(waypoint, centroid)
        if not world.route_is_obstructed(centroid, waypoint) and dist > best_distance:
            best_index    = index
            best_distance = dist

    if best_index > 0:
        current = best_index
    if current >= world.waypoint_count:
        current = world.waypoint_count - 1
    return current
