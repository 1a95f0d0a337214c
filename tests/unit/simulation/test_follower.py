"""
Unit tests for the follower (boid) physics.
"""

import math
import random

import pytest

from herdevo.run.config          import Config
from herdevo.simulation.flock    import Flock
from herdevo.simulation.follower import (
    Follower,
    MAX_TURN_RADIANS,
    boundary_push,
    cohesion_vector,
    escape_vector,
    guidance_vector,
    proximity_sigmoid,
    separation_vector,
)


def make_flock(world, starts, config=None):
    return Flock(0, starts, config if config is not None else Config(), world, lambda: 0.0)


# ============================================================================
# Follower state
# ============================================================================

class TestFollowerState:

    def test_starts_still(self):
        follower = Follower((5, 6))
        assert follower.position == (5.0, 6.0)
        assert follower.velocity == (0.0, 0.0)
        assert not follower.paused

    def test_reset(self):
        """Test reset() puts the follower back at its start position."""
        follower = Follower((5, 6))
        follower.position = (50, 60)
        follower.velocity = (1, 1)
        follower.pause(3)

        follower.reset()

        assert follower.position == (5.0, 6.0)
        assert follower.velocity == (0.0, 0.0)
        assert not follower.paused

    def test_pause_for_given_frames(self):
        follower = Follower((0, 0))
        follower.pause(7)
        assert follower.paused
        assert follower.pause_remaining == 7

    def test_pause_random_frames(self):
        """Test pause() without a frame count draws 1..29 ticks."""
        follower = Follower((0, 0))
        rng = random.Random(1)
        for _ in range(50):
            follower.pause(0, rng)
            assert 1 <= follower.pause_remaining <= 29


class TestLimitSpeed:
    """Test Follower.limit_speed()."""

    def test_caps_speed_keeping_direction(self):
        follower = Follower((0, 0))
        follower.velocity = (3.0, 4.0)

        follower.limit_speed(0.1, 0.7)

        assert math.hypot(*follower.velocity) == pytest.approx(0.7)
        assert follower.velocity == pytest.approx((0.42, 0.56))

    def test_slow_speed_becomes_zero(self):
        """Test a speed below the minimum stops the follower."""
        follower = Follower((0, 0))
        follower.velocity = (0.05, 0.0)

        follower.limit_speed(0.1, 0.7)

        assert follower.velocity == (0.0, 0.0)

    def test_speed_in_range_is_kept(self):
        follower = Follower((0, 0))
        follower.velocity = (0.3, 0.4)
        follower.limit_speed(0.1, 0.7)
        assert follower.velocity == (0.3, 0.4)


# ============================================================================
# Steering rules
# ============================================================================

class TestSteeringRules:

    def test_proximity_sigmoid(self):
        """Test the threat weight is 0.5 at the notice distance and grows as the herder closes in."""
        assert proximity_sigmoid(140, 140) == pytest.approx(0.5)
        assert proximity_sigmoid(140, 0) > 0.9
        assert proximity_sigmoid(140, 10000) < 0.01

    def test_escape_points_away_from_herder(self):
        ex, ey = escape_vector((20, 10), (10, 10))
        assert ex > 0
        assert ey == pytest.approx(0)

    def test_escape_weakens_with_distance(self):
        near = escape_vector((20, 10), (10, 10))
        far  = escape_vector((50, 10), (10, 10))
        assert near[0] > far[0]

    def test_guidance_is_limited(self):
        """Test guidance is limited per axis to half the maximum speed."""
        follower = Follower((0, 0))
        assert guidance_vector(follower, (1000, -1000), 0.7) == pytest.approx((0.35, -0.35))
        assert guidance_vector(follower, (10, 20), 0.7) == pytest.approx((0.1, 0.2))

    def test_boundary_push(self):
        assert boundary_push((2, 150), 300, 300) == (4.0, 0.0)
        assert boundary_push((298, 298), 300, 300) == (-4.0, -4.0)
        assert boundary_push((150, 150), 300, 300) == (0.0, 0.0)

    def test_cohesion_towards_the_others(self, open_world):
        flock = make_flock(open_world, [(100, 100), (200, 100), (200, 200)])
        cx, cy = cohesion_vector(flock.followers[0], flock)
        assert cx == pytest.approx(1.0)
        assert cy == pytest.approx(0.5)

    def test_separation_from_crowding_neighbour(self, open_world):
        """Test a neighbour within the separation distance pushes the follower away."""
        flock = make_flock(open_world, [(100, 100), (103, 100), (200, 200)])
        sx, sy = separation_vector(flock.followers[0], flock)
        assert sx == pytest.approx(-3.0)
        assert sy == pytest.approx(0.0)

    def test_separation_from_fence(self, walled_world):
        """Test a fence closer than the repulsion distance pushes the follower off."""
        flock = make_flock(walled_world, [(145, 100), (30, 250)])
        sx, _ = separation_vector(flock.followers[0], flock)
        assert sx == pytest.approx(-2.5 * 5)


# ============================================================================
# Movement
# ============================================================================

class TestFollowerMove:

    def test_paused_follower_stays_put(self, open_world):
        """Test a follower paused for 3 ticks holds still for 2 moves."""
        flock = make_flock(open_world, [(100, 100), (110, 100)])
        follower = flock.followers[0]
        follower.pause(3)

        follower.move(flock)
        follower.move(flock)

        assert follower.position == (100.0, 100.0)
        assert follower.paused

        follower.move(flock)
        assert not follower.paused

    def test_flees_nearby_herder(self, open_world):
        """Test a lone follower right next to the herder moves away from it."""
        flock = make_flock(open_world, [(20, 10)])
        follower = flock.followers[0]

        follower.move(flock)

        assert follower.position[0] > 20

    def test_turn_rate_is_limited(self, open_world):
        flock = make_flock(open_world, [(10, 30)])
        follower = flock.followers[0]

        follower.move(flock)

        assert abs(follower.angle) <= MAX_TURN_RADIANS / 2 + 1e-12

    def test_speed_never_exceeds_maximum(self, open_world):
        config = Config()
        flock = make_flock(open_world, [(12, 10), (14, 12), (13, 15)], config)

        for _ in range(20):
            for follower in flock.followers:
                follower.move(flock)
                assert math.hypot(*follower.velocity) <= config.follower_max_speed + 1e-9
