# ui_controls.py
import math
from collections import deque
from typing import Deque

from config import config as default_config
from physics_utils import clamp, screen_distance


def time_scale_from_slider(value: float, sim_config=default_config) -> float:
    """Maps a speed slider position (0..SLIDER_STEPS) logarithmically onto the time-scale bounds."""
    steps = sim_config.Time.SLIDER_STEPS
    fraction = clamp(value, 0.0, steps) / steps
    min_log = math.log(sim_config.Time.MIN_TIME_SCALE)
    max_log = math.log(sim_config.Time.MAX_TIME_SCALE)
    return math.exp(min_log + fraction * (max_log - min_log))


def slider_from_time_scale(time_scale: float, sim_config=default_config) -> float:
    """Inverse of `time_scale_from_slider`."""
    min_log = math.log(sim_config.Time.MIN_TIME_SCALE)
    max_log = math.log(sim_config.Time.MAX_TIME_SCALE)
    if max_log == min_log:
        return 0.0
    scale = clamp(time_scale, sim_config.Time.MIN_TIME_SCALE, sim_config.Time.MAX_TIME_SCALE)
    return (math.log(scale) - min_log) / (max_log - min_log) * sim_config.Time.SLIDER_STEPS


def display_radius_px(body, viewport, sim_config=default_config) -> float:
    """On-screen radius of `body`: its scaled physical radius, never below MIN_BODY_RADIUS_PX."""
    return max(sim_config.Visualization.MIN_BODY_RADIUS_PX,
               viewport.length_to_pixels(body.actual_radius_m * body.display_scale))


def pick_body_at(state, screen_pos, sim_config=default_config):
    """
    Returns the first body whose drawn disc (plus click tolerance) contains `screen_pos`.

    Positions are evaluated at the state's current time so the hit test matches
    what is on screen.

    Args:
        state (SimulationState): Simulation providing bodies, frame and viewport.
        screen_pos (Tuple[float, float]): Click position in pixels.

    Returns:
        CelestialBody or None.
    """
    tolerance = sim_config.Visualization.CLICK_TOLERANCE_PX
    for body in state.get_bodies():
        body_screen = state.world_to_screen(state.get_relative_position(body))
        if screen_distance(screen_pos, body_screen) <= display_radius_px(body, state.viewport, sim_config) + tolerance:
            return body
    return None


class FpsCounter:
    """Counts frames seen during the last second of real time."""

    def __init__(self, window_s: float = 1.0):
        self.window_s = window_s
        self.frame_times: Deque[float] = deque()

    def tick(self, now_s: float) -> int:
        self.frame_times.append(now_s)
        while self.frame_times and now_s - self.frame_times[0] > self.window_s:
            self.frame_times.popleft()
        return len(self.frame_times)
