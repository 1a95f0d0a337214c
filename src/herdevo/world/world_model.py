"""
World Model

The shared, read-mostly description of the herding course: the ordered
waypoints the followers have to pass, the fences (polylines of obstacle
segments) and the rectangular goal region (the pen).

Classes:
    GoalRegion: Axis-aligned rectangle that scores followers standing inside it
    WorldModel: Waypoints, fences and goal region of one course
"""

import random
from typing import Iterator, Sequence

from herdevo.world.geometry import Point, line_intersection

# Waypoints of the default course, designed on a 674x500 grid and
# scaled to the size of the playing field.
_DESIGN_WIDTH  = 674
_DESIGN_HEIGHT = 500
_DEFAULT_WAYPOINTS = [(81, 192), (78, 321), (155, 427), (310, 260),
                      (336, 260), (555, 260), (602, 146), (619, 40)]

class GoalRegion:
    """
    Rectangle with its top-left corner at (x, y).
    The left and top edges belong to it, the right and bottom edges do not.
    """

    def __init__(self, x: float, y: float, width: float, height: float):
        self.x      = x
        self.y      = y
        self.width  = width
        self.height = height

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        return self.left <= point[0] < self.right and self.top <= point[1] < self.bottom

    def __repr__(self):
        return f"GoalRegion(x={self.x}, y={self.y}, width={self.width}, height={self.height})"

class WorldModel:
    """
    The course a flock is herded along.

    A WorldModel is immutable once built; flocks running in parallel only
    ever read from it.

    Public Attributes:
        width, height: Size of the playing field
        waypoints:     Ordered checkpoints the follower mass must pass
        fences:        Obstacle polylines, each a sequence of points
        goal:          The region followers must reach

    Public Methods:
        segments():                Every obstacle segment as a (start, end) pair
        in_goal(point):            Whether a point lies in the goal region
        route_is_obstructed(a, b): Whether the straight line a-b crosses a fence
        random_start_positions():  Start points for the followers of a generation
        default_course():          The standard course used for training
    """

    def __init__(self,
                 width    : int,
                 height   : int,
                 waypoints: Sequence[Point],
                 fences   : Sequence[Sequence[Point]],
                 goal     : GoalRegion):
        if not waypoints:
            raise ValueError("A world needs at least one waypoint")

        self.width     = width
        self.height    = height
        self.waypoints = tuple((float(x), float(y)) for x, y in waypoints)
        self.fences    = tuple(tuple((float(x), float(y)) for x, y in fence) for fence in fences)
        self.goal      = goal

        self._segments = tuple((fence[i], fence[i + 1])
                               for fence in self.fences
                               for i in range(len(fence) - 1))

    @property
    def waypoint_count(self) -> int:
        return len(self.waypoints)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def segments(self) -> Iterator[tuple[Point, Point]]:
        return iter(self._segments)

    def in_goal(self, point: Point) -> bool:
        return self.goal.contains(point)

    def route_is_obstructed(self, start: Point, end: Point) -> bool:
        """True if the straight line from 'start' to 'end' crosses any fence segment."""
        for p1, p2 in self._segments:
            if line_intersection(p1, p2, start, end) is not None:
                return True
        return False

    def random_start_positions(self, count: int, rng: random.Random) -> list[Point]:
        """
        Start positions for 'count' followers, scattered in the
        top-left corner of the field (away from the goal region).
        """
        return [(float(rng.randrange(0, self.width // 6 + 20)),
                 float(rng.randrange(0, self.height // 6) + 40))
                for _ in range(count)]

    @classmethod
    def default_course(cls, width: int = 300, height: int = 300) -> 'WorldModel':
        """
        Build the standard course: a pen in the top-right corner, a border
        fence, and three internal fences forming a zig-zag route that runs
        down, across and back up to the pen.
        """
        goal = GoalRegion(width - width // 7, 0, width // 7, height // 7)

        pen = [(goal.right - 1, goal.height),
               (goal.right - 1, 0),
               (goal.left, 0),
               (goal.left, goal.height),
               (goal.left - goal.width // 2, goal.height + goal.height // 2)]

        border = [(2, 2), (width - 3, 2), (width - 3, height - 3), (2, height - 3), (2, 2)]

        quarter_width  = width // 4
        quarter_height = height // 4
        fences = [pen,
                  border,
                  [(quarter_width, 0), (quarter_width, quarter_height * 3)],
                  [(width // 2, 0),
                   (width // 2, quarter_height * 1.8),
                   (width // 2 + quarter_width, quarter_height * 1.8)],
                  [(width // 2, height), (width // 2, height - quarter_height * 1.8)]]

        waypoints = [(int(x / _DESIGN_WIDTH * width), int(y / _DESIGN_HEIGHT * height))
                     for x, y in _DEFAULT_WAYPOINTS]

        return cls(width, height, waypoints, fences, goal)
