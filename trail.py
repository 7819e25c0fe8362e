# trail.py
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional, Tuple

import numpy as np

from physics_utils import screen_distance

@dataclass(frozen=True)
class TrailPoint:
    """One recorded position of a body.

    Attributes:
        x (float): X position in the reference frame active when recorded (meters).
        y (float): Y position in the reference frame active when recorded (meters).
        time (float): Simulation time of the sample (seconds since epoch).
        screen_x (float): Screen X (pixels) at which the point was recorded.
        screen_y (float): Screen Y (pixels) at which the point was recorded.
    """
    x: float
    y: float
    time: float
    screen_x: float
    screen_y: float


class Trail:
    """Bounded, time-ordered history of where a body has been.

    Points are appended at the tail only when the body has moved far enough on
    screen, so trail density follows screen displacement rather than the frame
    rate or the time scale. Old points are pruned from the head by age. The
    stored positions and screen coordinates are only meaningful for the frame
    and zoom they were recorded under, so owners call `clear()` whenever either
    changes.
    """

    def __init__(self):
        self.points: Deque[TrailPoint] = deque()
        self.last_screen_pos: Optional[Tuple[float, float]] = None

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[TrailPoint]:
        return iter(self.points)

    def add_point(self, rel_pos, time: float, screen_pos) -> None:
        """Appends a point unconditionally and remembers its screen position."""
        point = TrailPoint(float(rel_pos[0]), float(rel_pos[1]), float(time),
                           float(screen_pos[0]), float(screen_pos[1]))
        self.points.append(point)
        self.last_screen_pos = (point.screen_x, point.screen_y)

    def add_point_if_moved(self, rel_pos, time: float, screen_pos, min_pixel_distance: float) -> bool:
        """Appends a point if the body moved at least `min_pixel_distance` on screen.

        The first point after construction or `clear()` is always recorded.

        Args:
            rel_pos: `(x, y)` position relative to the current center body (meters).
            time (float): Simulation time of the sample.
            screen_pos: `(x, y)` screen coordinates of the sample (pixels).
            min_pixel_distance (float): Screen displacement threshold.

        Returns:
            bool: True if a point was appended.
        """
        if self.last_screen_pos is not None and \
           screen_distance(screen_pos, self.last_screen_pos) < min_pixel_distance:
            return False
        self.add_point(rel_pos, time, screen_pos)
        return True

    def prune(self, max_age: float) -> int:
        """Drops head points older than `max_age` relative to the newest point.

        Returns:
            int: Number of points removed.
        """
        if not self.points:
            return 0
        cutoff_time = self.points[-1].time - max_age
        removed = 0
        while self.points and self.points[0].time < cutoff_time:
            self.points.popleft()
            removed += 1
        return removed

    def clear(self) -> None:
        self.points.clear()
        self.last_screen_pos = None

    def positions(self) -> np.ndarray:
        """Returns the stored frame positions as an `(N, 2)` array."""
        if not self.points:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([(p.x, p.y) for p in self.points], dtype=np.float64)

    def screen_positions(self) -> np.ndarray:
        """Returns the recorded screen positions as an `(N, 2)` array."""
        if not self.points:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([(p.screen_x, p.screen_y) for p in self.points], dtype=np.float64)

    def fade_weights(self, now: float, max_age: float, exponent: float) -> np.ndarray:
        """Opacity per point for fading trails, newest points brightest.

        `(1 - min(age / max_age, 1)) ** exponent`, where age is measured from
        `now`. A zero `max_age` keeps only points stamped at `now` visible.

        Returns:
            np.ndarray: Weights in [0, 1], one per stored point.
        """
        if not self.points:
            return np.empty(0, dtype=np.float64)
        ages = now - np.array([p.time for p in self.points], dtype=np.float64)
        if max_age <= 0:
            return np.where(ages <= 0, 1.0, 0.0)
        normalized_age = np.clip(ages / max_age, 0.0, 1.0)
        return (1.0 - normalized_age) ** exponent

    def log_state(self, label: str) -> None:
        if self.points:
            logging.debug(f"Trail[{label}]: {len(self.points)} points spanning "
                          f"{self.points[-1].time - self.points[0].time:.1f} s")
        else:
            logging.debug(f"Trail[{label}]: empty")
