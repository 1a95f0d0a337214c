"""
Unit tests for the sheep and wall sector sensors.
"""

import pytest
from unittest.mock import Mock

from herdevo.run.config        import Config
from herdevo.sensors           import SheepSensor, WallSensor, WALL_SECTOR_ANGLE
from herdevo.world.world_model import GoalRegion, WorldModel


def world_with_fences(*fences):
    return WorldModel(100, 100, [(1, 1)], list(fences), GoalRegion(0, 0, 1, 1))


# ============================================================================
# Sheep sensor
# ============================================================================

class TestSheepSensor:
    """Test SheepSensor.read in count, distance and binary mode."""

    origin = (100.0, 100.0)

    def test_sector_count(self):
        """Test the default 5.703125 degree sectors give 63 outputs."""
        assert SheepSensor().sector_count == 63
        assert len(SheepSensor().read(0, self.origin, [])) == 63

    def test_from_config(self):
        config = Mock(spec=Config)
        config.sheep_sensor_angle = 90
        config.sheep_sensor_depth = 50
        config.sheep_sensor_output_is_distance = True
        config.binary_sheep_sensor = False

        sensor = SheepSensor.from_config(config)

        assert sensor.sector_count == 4
        assert sensor.depth == 50
        assert sensor.output_is_distance

    def test_invalid_angle(self):
        with pytest.raises(ValueError):
            SheepSensor(sector_angle=0)

    def test_count_mode(self):
        """Test each sector reports its share of the flock."""
        sensor = SheepSensor(sector_angle=90, depth=100)
        followers = [(150, 100), (160, 105), (100, 150), (300, 300)]

        output = sensor.read(0, self.origin, followers)

        # sector 0 faces +x, sector 1 faces +y
        assert output == pytest.approx([0.5, 0.25, 0.0, 0.0])

    def test_facing_rotates_the_fan(self):
        """Test sector 0 follows the facing angle."""
        sensor = SheepSensor(sector_angle=90, depth=100)
        output = sensor.read(90, self.origin, [(100, 150)])
        assert output == pytest.approx([1.0, 0.0, 0.0, 0.0])

    def test_distance_mode_keeps_nearest(self):
        """Test distance mode reports the nearest follower, normalized by depth."""
        sensor = SheepSensor(sector_angle=90, depth=100, output_is_distance=True)
        followers = [(150, 100), (130, 100), (100, 160)]

        output = sensor.read(0, self.origin, followers)

        assert output == pytest.approx([0.3, 0.6, 0.0, 0.0])

    def test_binary_mode(self):
        """Test binary mode collapses any presence to 1."""
        sensor = SheepSensor(sector_angle=90, depth=100, binary=True)
        output = sensor.read(0, self.origin, [(150, 100), (100, 150), (110, 150), (120, 150)])
        assert output == [1.0, 1.0, 0.0, 0.0]

    def test_beyond_depth_is_not_seen(self):
        sensor = SheepSensor(sector_angle=90, depth=100)
        assert sensor.read(0, self.origin, [(250, 100)]) == [0.0] * 4

    def test_deterministic(self):
        """Test identical inputs give identical outputs."""
        sensor = SheepSensor()
        followers = [(100 + i * 7 % 90, 100 + i * 13 % 90) for i in range(30)]
        assert sensor.read(33, self.origin, followers) == sensor.read(33, self.origin, followers)

    def test_follower_on_shared_ray_counted_once(self):
        """Test a follower on the boundary of two sectors is counted in exactly one."""
        sensor = SheepSensor(sector_angle=90, depth=100)
        sensor.read(0, self.origin, [])

        first, second = sensor.sweep_triangles[0], sensor.sweep_triangles[1]
        assert first[2] == second[1]

        corner = first[2]
        for share in (0.25, 0.5, 0.7):
            follower = (self.origin[0] + share * (corner[0] - self.origin[0]),
                        self.origin[1] + share * (corner[1] - self.origin[1]))
            output = sensor.read(0, self.origin, [follower])
            assert sum(output) == 1.0
            assert output.count(1.0) == 1

    def test_exposes_scan_geometry(self):
        """Test the triangles of the last read are kept for a renderer."""
        sensor = SheepSensor(sector_angle=90, depth=100)
        sensor.read(0, self.origin, [(150, 100)])

        assert len(sensor.sweep_triangles) == 4
        assert len(sensor.hit_triangles) == 1
        triangle, value = sensor.hit_triangles[0]
        assert triangle[0] == self.origin
        assert value == pytest.approx(1.0)


# ============================================================================
# Wall sensor
# ============================================================================

class TestWallSensor:
    """Test WallSensor.read against a vertical fence at x=55, herder at (50, 50)."""

    origin = (50.0, 50.0)

    def test_no_fences_reads_zero(self):
        sensor = WallSensor(world_with_fences(), depth=10)
        assert sensor.read(0, self.origin) == [0.0] * 8

    def test_sector_width(self):
        assert WALL_SECTOR_ANGLE == 45.0

    def test_fence_beside_the_herder(self):
        """Test the sector facing the fence reads 1 - 5/10 and the slanted ones read less."""
        sensor = WallSensor(world_with_fences([(55, 0), (55, 100)]), depth=10)

        output = sensor.read(0, self.origin)

        assert len(output) == 8
        assert output[2] == pytest.approx(0.5)
        assert 0 < output[1] < 0.5
        assert output[1] == pytest.approx(output[3])
        assert output[0] == 0.0
        assert output[4:] == [0.0] * 4
        assert len(sensor.hit_triangles) == 3

    def test_closer_fence_reads_higher(self):
        far  = WallSensor(world_with_fences([(58, 0), (58, 100)]), depth=10).read(0, self.origin)
        near = WallSensor(world_with_fences([(53, 0), (53, 100)]), depth=10).read(0, self.origin)
        assert near[2] > far[2]

    def test_keeps_the_nearest_fence(self):
        """Test two fences in one sector: the closer one wins."""
        sensor = WallSensor(world_with_fences([(58, 0), (58, 100)], [(53, 0), (53, 100)]), depth=10)
        assert sensor.read(0, self.origin)[2] == pytest.approx(0.7)

    def test_sample_points(self):
        sensor = WallSensor(world_with_fences(), depth=10, sample_points=4)
        assert len(sensor.read(0, self.origin)) == 4
