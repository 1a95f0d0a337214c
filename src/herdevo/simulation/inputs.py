"""
Network Input Module

Builds the herder's network input vector and, from the same configuration,
the layer sizes of every network in the population. The order of the terms
defines the meaning of each input neuron, so it must never change:

    angle of herder, sheep sensor, wall sensor, distance to centroid,
    angle to centroid, relative centroid offset (x, y), absolute herder
    position (x, y), flock movement angle, absolute centroid position (x, y),
    angle to next waypoint, closest approach distance

Functions:
    input_width(config):                   Number of inputs the enabled terms produce
    layer_sizes(config):                   Input width, hidden widths, 2 outputs
    assemble_inputs(flock, herder, config): The input vector for one tick
"""

import math
from typing import TYPE_CHECKING

from herdevo.errors             import InvalidTopology
from herdevo.simulation.failure import FailureReason
from herdevo.world.geometry     import distance

if TYPE_CHECKING:
    from herdevo.run.config        import Config
    from herdevo.simulation.flock  import Flock
    from herdevo.simulation.herder import Herder

# Herders are steered by two outputs (an offset, or a turn and a speed).
NUM_OUTPUTS = 2

def input_width(config: 'Config') -> int:
    width = 0
    if config.input_angle_of_herder:
        width += 1
    if config.input_sheep_sensor:
        width += int(360 / config.sheep_sensor_angle)
    if config.input_wall_sensor:
        width += config.wall_sensor_sample_points
    if config.input_distance_to_centroid:
        width += 1
    if config.input_angle_to_centroid:
        width += 1
    if config.input_relative_centroid_offset:
        width += 2
    if config.input_absolute_herder_position:
        width += 2
    if config.input_flock_movement_angle:
        width += 1
    if config.input_absolute_centroid_position:
        width += 2
    if config.input_angle_to_next_waypoint:
        width += 1
    if config.input_closest_approach:
        width += 1
    return width

def layer_sizes(config: 'Config') -> list[int]:
    """
    Layer sizes of the herder networks. A hidden width of 0 means
    "as wide as the input layer".

    Raises:
        InvalidTopology: If no input is enabled or a hidden width is negative
    """
    width = input_width(config)
    if width < 1:
        raise InvalidTopology("At least one network input must be enabled")

    sizes = [width]
    for hidden in config.hidden_layers:
        if hidden < 0:
            raise InvalidTopology(f"Hidden layer width must not be negative, got {hidden}")
        sizes.append(width if hidden == 0 else hidden)
    sizes.append(NUM_OUTPUTS)
    return sizes

def assemble_inputs(flock: 'Flock', herder: 'Herder', config: 'Config') -> list[float]:
    """
    Build this tick's input vector. Every angle is scaled to about [-1, 1]
    by dividing by pi, every position by the world's size.

    Two failure checks happen here as well: the herder losing sight of every
    follower, and the flock's progress update (waypoint cursor, centroid
    distance, wasted time), which runs right before the angle to the next
    waypoint is read.
    """
    width, height = flock.world.width, flock.world.height
    position      = herder.position
    centroid      = flock.centre_of_mass()

    inputs: list[float] = []

    if config.input_angle_of_herder:
        inputs.append((math.radians(herder.facing) - math.pi) / math.pi)

    # Sensors either turn with the herder or stay fixed to the world axes.
    sensor_angle = 0.0 if config.zero_relative_angles else herder.facing

    if config.input_sheep_sensor:
        inputs.extend(herder.sheep_sensor.read(sensor_angle, position, flock.follower_positions()))

    if not herder.sees_followers(flock.follower_positions(), config.sheep_sensor_depth):
        flock.fail(FailureReason.OUT_OF_SIGHT)

    if config.input_wall_sensor:
        inputs.extend(herder.wall_sensor.read(sensor_angle, position))

    if config.input_distance_to_centroid:
        inputs.append(distance(position, centroid) / config.sheep_sensor_depth)

    if config.input_angle_to_centroid:
        inputs.append(math.atan2(centroid[1] - position[1], centroid[0] - position[0]) / math.pi)

    if config.input_relative_centroid_offset:
        inputs.append((centroid[0] - position[0]) / width)
        inputs.append((centroid[1] - position[1]) / height)

    if config.input_absolute_herder_position:
        inputs.append(position[0] / width)
        inputs.append(position[1] / height)

    if config.input_flock_movement_angle:
        inputs.append(flock.movement_angle() / math.pi)

    if config.input_absolute_centroid_position:
        inputs.append(centroid[0] / width)
        inputs.append(centroid[1] / height)

    flock.update_progress(position)

    if config.input_angle_to_next_waypoint:
        inputs.append(flock.angle_to_next_waypoint() / math.pi)

    if config.input_closest_approach:
        inputs.append(config.closest_approach / width)

    return inputs
