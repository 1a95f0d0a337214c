"""
Herder Module

The herder (dog) is steered by the network whose id it shares. Every tick it
senses its flock, asks the network where to go, and moves there while keeping
clear of fences and inside the playing field.

The herder does not own its flock or its network: both are looked up by id
through the training session, so a herder holds no reference that outlives
the generation.

Classes:
    Herder: Position, heading and speed of one network-controlled herder
"""

import math
from typing import Sequence, TYPE_CHECKING

from herdevo.sensors           import SheepSensor, WallSensor
from herdevo.simulation.inputs import assemble_inputs
from herdevo.world.geometry    import Point, clamp, clamp360, closest_point_on_segment, distance

if TYPE_CHECKING:
    from herdevo.run.session      import TrainingSession
    from herdevo.simulation.flock import Flock

HERDER_START  = (10.0, 10.0)
EDGE_MARGIN   = 3.0

# Heading steering: a zero speed output still creeps forward.
CREEP_SPEED = 0.5

class Herder:
    """
    Public Attributes:
        id:               Id of the herder, its flock and its network
        position:         Current position
        desired_position: Where the network wants the herder to be (position steering)
        facing:           Heading in degrees, in [0, 360]
        speed:            Distance travelled this tick (negative = backwards)
        monitoring:       Whether a renderer should overlay the sensors
        sheep_sensor:     Fan of sectors detecting followers
        wall_sensor:      Fan of sectors detecting fences
    """

    def __init__(self, herder_id: int, sheep_sensor: SheepSensor, wall_sensor: WallSensor):
        self.id               = herder_id
        self.position         = HERDER_START
        self.desired_position = HERDER_START
        self.facing           = 0.0
        self.speed            = 0.0
        self.monitoring       = False
        self.sheep_sensor     = sheep_sensor
        self.wall_sensor      = wall_sensor

    def sees_followers(self, followers: Sequence[Point], depth: float) -> bool:
        """Whether at least one follower is closer than 'depth'."""
        return any(distance(self.position, p) < depth for p in followers)

    def move(self, session: 'TrainingSession'):
        """Sense, ask the network where to go, and take one step."""
        flock   = session.flocks[self.id]
        network = session.population[self.id]
        config  = session.config

        inputs  = assemble_inputs(flock, self, config)
        outputs = network.feed_forward(inputs)

        if config.steering_mode == 'position':
            self._steer_to_offset(outputs, flock)
        elif config.steering_mode == 'heading':
            self._steer_by_heading(outputs, config)
        else:
            raise RuntimeError("bad 'steering_mode' in configuration")

        angle = math.radians(self.facing)
        x = self.position[0] + self.speed * math.cos(angle)
        y = self.position[1] + self.speed * math.sin(angle)
        self.position = (x, y)

        self._keep_off_fences(flock, config.fence_clearance)

        width, height = flock.world.size
        self.position = (clamp(self.position[0], EDGE_MARGIN, width - EDGE_MARGIN),
                         clamp(self.position[1], EDGE_MARGIN, height - EDGE_MARGIN))

    def _steer_to_offset(self, outputs, flock: 'Flock'):
        """
        Outputs are an offset from the flock's centroid, as fractions of
        the field's size. Turn towards that point (at most
        'herder_max_turn_per_tick' degrees, the shorter way round) and close
        the distance as fast as the maximum speed allows.
        """
        config = flock.config
        cx, cy = flock.centre_of_mass()
        width, height = flock.world.size

        self.desired_position = (cx + outputs[0] * width, cy + outputs[1] * height)

        target = math.degrees(math.atan2(self.desired_position[1] - self.position[1],
                                         self.desired_position[0] - self.position[0]))
        delta  = clamp(abs(target - self.facing), 0, config.herder_max_turn_per_tick)
        optimal_direction = (target - self.facing + 540) % 360 - 180

        if optimal_direction != 0:
            self.facing = clamp360(self.facing + math.copysign(delta, optimal_direction))

        self.speed = clamp(distance(self.position, self.desired_position),
                           -config.herder_max_speed, config.herder_max_speed)

    def _steer_by_heading(self, outputs, config):
        """Output 0 is a heading change in degrees, output 1 a speed."""
        turn = clamp(float(outputs[0]), -config.herder_max_turn_degrees, config.herder_max_turn_degrees)
        self.facing = clamp360(self.facing + turn)

        speed = float(outputs[1]) * config.herder_speed_multiplier
        if speed == 0:
            speed = CREEP_SPEED
        self.speed = clamp(speed, -config.herder_max_speed, config.herder_max_speed)

    def _keep_off_fences(self, flock: 'Flock', clearance: float):
        """Back away from every fence segment closer than 'clearance'."""
        cx = cy = 0.0
        x, y = self.position

        for a, b in flock.world.segments():
            on_segment, closest = closest_point_on_segment(a, b, (x + cx, y + cy))
            if on_segment and distance(closest, self.position) < clearance:
                cx -= (closest[0] - x) / 2
                cy -= (closest[1] - y) / 2

        self.position = (x + cx, y + cy)
