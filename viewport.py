#!/usr/bin/env python3
"""
Viewport model: window size plus zoom, and the world-to-screen projection.
"""
from dataclasses import dataclass
from typing import Tuple

from config import AU_M


@dataclass
class Viewport:
    """
    Maps frame coordinates (meters, center body at the origin) to screen pixels.

    `zoom` is a magnification in pixels per astronomical unit. Screen y grows
    downward, so world y is flipped.
    """
    width: int
    height: int
    zoom: float = 1.0

    @property
    def pixels_per_meter(self) -> float:
        return self.zoom / AU_M

    @property
    def min_dimension(self) -> int:
        return min(self.width, self.height)

    def world_to_screen(self, pos) -> Tuple[float, float]:
        scale = self.pixels_per_meter
        return (pos[0] * scale + self.width / 2,
                -pos[1] * scale + self.height / 2)

    def screen_to_world(self, screen) -> Tuple[float, float]:
        scale = self.pixels_per_meter
        return ((screen[0] - self.width / 2) / scale,
                -(screen[1] - self.height / 2) / scale)

    def length_to_pixels(self, length_m: float) -> float:
        return length_m * self.pixels_per_meter
