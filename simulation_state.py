# simulation_state.py
import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np

from config import config as default_config, AU_M, SECONDS_PER_DAY, DAYS_PER_MONTH, DAYS_PER_YEAR
from physics_utils import clamp
from solarsystem import CelestialBody, OrbitalMechanics, build_body_catalog
from viewport import Viewport


class SimulationState:
    """Time, reference frame, zoom and trails of the orrery.

    One instance is created by the driving loop and passed to whoever needs it;
    nothing here is global. The state machine has two states, running and
    paused, toggled explicitly. Each call to `advance` moves simulated time
    forward first and then updates every body's trail at the new time.

    All mutators clamp their inputs to the configured bounds instead of
    rejecting them; NaN requests leave the current value unchanged.
    Changing the center body or the zoom clears every trail, since stored
    positions are frame-relative and the screen-distance gate was measured at
    the old zoom.

    Attributes:
        bodies (List[CelestialBody]): Catalog bodies in stable index order.
        orbital_mechanics (OrbitalMechanics): Position calculator.
        center_body_id (str): Id of the current reference body.
        current_time (float): Simulation seconds since the epoch.
        time_scale (float): Simulated seconds per real second.
        is_paused (bool): True while time is frozen.
        viewport (Viewport): Window size and zoom (pixels per AU).
        trail_length_orbits (float): Trail length in units of each body's own period.
        show_labels (bool): Front-end toggle for body names.
        show_orbit_reference_paths (bool): Front-end toggle for ghost orbits.
        show_fps (bool): Front-end toggle for the FPS counter.
        fps (int): Last measured frame rate, written by the driver.
    """

    def __init__(self, sim_config=default_config, bodies: Optional[List[CelestialBody]] = None,
                 width: int = None, height: int = None):
        self.config = sim_config
        self.bodies: List[CelestialBody] = bodies if bodies is not None else build_body_catalog(sim_config)
        self._bodies_by_id: Dict[str, CelestialBody] = {body.body_id: body for body in self.bodies}
        self.orbital_mechanics = OrbitalMechanics(sim_config=sim_config)

        self.center_body_id: str = sim_config.SolarSystem.DEFAULT_CENTER_BODY_ID
        if self.center_body_id not in self._bodies_by_id:
            self.center_body_id = self.bodies[0].body_id
        self.current_time: float = 0.0
        self.time_scale: float = sim_config.Time.DEFAULT_TIME_SCALE
        self.is_paused: bool = False

        self.viewport = Viewport(
            width=width if width is not None else sim_config.Visualization.SCREEN_WIDTH_PX,
            height=height if height is not None else sim_config.Visualization.SCREEN_HEIGHT_PX,
            zoom=sim_config.Zoom.MIN_ZOOM,
        )
        self.trail_length_orbits: float = sim_config.Trail.DEFAULT_TRAIL_ORBITS

        self.show_labels: bool = sim_config.Visualization.SHOW_LABELS
        self.show_orbit_reference_paths: bool = sim_config.Visualization.SHOW_ORBIT_REFERENCE_PATHS
        self.show_fps: bool = sim_config.Visualization.SHOW_FPS
        self.fps: int = 0

        self._orbit_reference_paths: Dict[Tuple[str, str], np.ndarray] = {}

        # Fit all orbits on screen
        self.reset_view()
        logging.info(f"SimulationState initialized: {len(self.bodies)} bodies, center '{self.center_body_id}', "
                     f"zoom {self.viewport.zoom:.3f} px/AU.")

    # --- Queries ---

    def get_bodies(self) -> List[CelestialBody]:
        return self.bodies

    def get_body(self, body_id: str) -> CelestialBody:
        try:
            return self._bodies_by_id[body_id]
        except KeyError:
            raise KeyError(f"Unknown body id '{body_id}'") from None

    def get_body_by_index(self, index: int) -> CelestialBody:
        return self.bodies[index]

    def get_center_body(self) -> CelestialBody:
        return self._bodies_by_id[self.center_body_id]

    def get_relative_position(self, body: CelestialBody, time_s: float = None) -> np.ndarray:
        """Position of `body` in the current reference frame at `time_s` (default: now)."""
        time_s = self.current_time if time_s is None else time_s
        return self.orbital_mechanics.get_relative_position(body, self.get_center_body(), time_s)

    def get_current_positions(self) -> Dict[str, np.ndarray]:
        center = self.get_center_body()
        return {
            body.body_id: self.orbital_mechanics.get_relative_position(body, center, self.current_time)
            for body in self.bodies
        }

    def generate_orbit_reference_path(self, body: CelestialBody, center_body: CelestialBody = None,
                                      time_s: float = None) -> np.ndarray:
        """Uncached closed reference orbit of `body` around `center_body` (default: current center)."""
        center_body = self.get_center_body() if center_body is None else center_body
        time_s = self.current_time if time_s is None else time_s
        return self.orbital_mechanics.generate_orbit_reference_path(
            body, center_body, time_s, self.config.Kepler.ORBIT_PATH_POINTS
        )

    def get_orbit_reference_path(self, body: CelestialBody) -> np.ndarray:
        """Reference orbit cached by `(body, center)`; generated at the current time on first use."""
        key = (body.body_id, self.center_body_id)
        path = self._orbit_reference_paths.get(key)
        if path is None:
            path = self.generate_orbit_reference_path(body)
            self._orbit_reference_paths[key] = path
        return path

    def invalidate_orbit_reference_paths(self) -> None:
        self._orbit_reference_paths.clear()

    def world_to_screen(self, pos) -> Tuple[float, float]:
        return self.viewport.world_to_screen(pos)

    def screen_to_world(self, screen) -> Tuple[float, float]:
        return self.viewport.screen_to_world(screen)

    def max_trail_age(self, body: CelestialBody) -> float:
        return self.trail_length_orbits * body.orbital_period_s

    # --- Clock ---

    def pause(self) -> None:
        self.is_paused = True

    def resume(self) -> None:
        self.is_paused = False

    def toggle_pause(self) -> bool:
        self.is_paused = not self.is_paused
        logging.info(f"Simulation {'paused' if self.is_paused else 'resumed'} at t={self.current_time:.0f} s.")
        return self.is_paused

    def set_time_scale(self, scale: float) -> None:
        if math.isnan(scale):
            logging.debug("Ignoring NaN time scale request.")
            return
        self.time_scale = clamp(float(scale), self.config.Time.MIN_TIME_SCALE, self.config.Time.MAX_TIME_SCALE)
        if self.time_scale != scale:
            logging.debug(f"Time scale {scale} clamped to {self.time_scale}.")

    def set_trail_length_orbits(self, orbits: float) -> None:
        if math.isnan(orbits):
            logging.debug("Ignoring NaN trail length request.")
            return
        self.trail_length_orbits = clamp(float(orbits), 0.0, self.config.Trail.MAX_TRAIL_ORBITS)

    def advance(self, real_dt: float) -> None:
        """
        Advances simulated time by `real_dt * time_scale` and updates every trail.

        No-op while paused or for a non-positive (or NaN) `real_dt`. Trail
        points are stamped with the post-advance time.

        Args:
            real_dt (float): Elapsed real (wall-clock) seconds since the last tick.
        """
        if self.is_paused or not real_dt > 0:
            return
        self.current_time += real_dt * self.time_scale
        self._update_trails()

    def _update_trails(self) -> None:
        center = self.get_center_body()
        min_pixel_distance = self.config.Trail.MIN_PIXEL_DISTANCE
        for body in self.bodies:
            rel_pos = self.orbital_mechanics.get_relative_position(body, center, self.current_time)
            screen_pos = self.viewport.world_to_screen(rel_pos)
            body.trail.add_point_if_moved(rel_pos, self.current_time, screen_pos, min_pixel_distance)
            removed = body.trail.prune(self.max_trail_age(body))
            if removed and self.config.Debug.TRAILS:
                logging.debug(f"Pruned {removed} trail points from {body.name}.")
                body.trail.log_state(body.name)

    def clear_all_trails(self) -> None:
        for body in self.bodies:
            body.trail.clear()
        if self.config.Debug.TRAILS:
            logging.debug("All trails cleared.")

    # --- Frame and view ---

    def set_center_body(self, body_id: str) -> None:
        """Switches the reference body; clears trails and cached reference orbits on change."""
        if body_id not in self._bodies_by_id:
            logging.error(f"Cannot center on unknown body '{body_id}'.")
            raise KeyError(f"Unknown body id '{body_id}'")
        if body_id == self.center_body_id:
            return
        self.center_body_id = body_id
        self.clear_all_trails()
        self.invalidate_orbit_reference_paths()
        logging.info(f"Reference frame switched to {self.get_center_body().name}.")

    def set_zoom(self, zoom: float) -> None:
        """Clamps and applies `zoom` (px/AU); trails are cleared only on a real change."""
        if math.isnan(zoom):
            logging.debug("Ignoring NaN zoom request.")
            return
        new_zoom = clamp(float(zoom), self.config.Zoom.MIN_ZOOM, self.config.Zoom.MAX_ZOOM)
        if new_zoom != zoom:
            logging.debug(f"Zoom {zoom} clamped to {new_zoom}.")
        if abs(new_zoom - self.viewport.zoom) > self.config.Zoom.ZOOM_EPSILON * self.viewport.zoom:
            self.viewport.zoom = new_zoom
            self.clear_all_trails()

    def zoom_in(self) -> None:
        self.set_zoom(self.viewport.zoom * self.config.Zoom.ZOOM_STEP)

    def zoom_out(self) -> None:
        self.set_zoom(self.viewport.zoom / self.config.Zoom.ZOOM_STEP)

    def reset_view(self) -> None:
        """Zooms so that the widest orbit, padded for trails, fits the smaller window dimension."""
        max_radius_m = max((body.semi_major_axis_m for body in self.bodies), default=0.0)
        if max_radius_m <= 0:
            logging.warning("No orbiting bodies to fit; keeping current zoom.")
            return

        if self.trail_length_orbits > 0:
            max_radius_m *= 1 + self.trail_length_orbits * self.config.Trail.VIEW_PADDING_PER_ORBIT

        diameter_au = max_radius_m * 2 * self.config.Zoom.INITIAL_ZOOM_PADDING / AU_M
        self.set_zoom(self.viewport.min_dimension / diameter_au)

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            logging.warning(f"Ignoring viewport resize to {width}x{height}.")
            return
        self.viewport.width = int(width)
        self.viewport.height = int(height)

    # --- Display projections ---

    def get_date_string(self) -> str:
        """Calendar date at the current simulation time, e.g. ``'Jan 1, 2000'``."""
        epoch = datetime(self.config.Epoch.YEAR, self.config.Epoch.MONTH, self.config.Epoch.DAY)
        try:
            sim_date = epoch + timedelta(seconds=self.current_time)
        except OverflowError:
            years = self.current_time / (DAYS_PER_YEAR * SECONDS_PER_DAY)
            return f"Year {int(self.config.Epoch.YEAR + years)}"
        return f"{sim_date:%b} {sim_date.day}, {sim_date.year}"

    def get_time_scale_string(self) -> str:
        days_per_second = self.time_scale / SECONDS_PER_DAY
        if days_per_second < 1:
            return f"{days_per_second:.2f}x"
        elif days_per_second < 30:
            return f"{days_per_second:.1f} days/sec"
        elif days_per_second < 365:
            return f"{days_per_second / DAYS_PER_MONTH:.1f} months/sec"
        return f"{days_per_second / DAYS_PER_YEAR:.1f} years/sec"
