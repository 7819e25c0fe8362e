# solarsystem.py
import numpy as np
import math
import logging
from dataclasses import dataclass, field
from typing import Tuple, List, Optional
from config import config as default_config, ConfigurationError, InvalidElementsError, AU_M, SECONDS_PER_DAY, DEG_TO_RAD
from physics_utils import PhysicsError, mean_motion, rotate_2d
from trail import Trail

@dataclass(frozen=True)
class OrbitalElements:
    """Fixed Keplerian elements of one body, in SI units.

    A body with `semi_major_axis_m == 0` and `orbital_period_s == 0` is the
    fixed frame origin (the Sun); it has no orbit.

    Attributes:
        semi_major_axis_m (float): Semi-major axis `a` in meters.
        eccentricity (float): Eccentricity `e`, 0 <= e < 1.
        orbital_period_s (float): Orbital period `T` in seconds.
        argument_of_periapsis_rad (float): Argument of periapsis `ω`.
        longitude_of_ascending_node_rad (float): `Ω`; retained but not used by the
            flat projection.
        inclination_rad (float): `i`; retained but projected flat.
        mean_anomaly_at_epoch_rad (float): `M0` at simulation time zero.

    Raises:
        InvalidElementsError: If the elements cannot describe an ellipse or the
            origin-body invariant (`a == 0` exactly when `T == 0`) is broken.
    """
    semi_major_axis_m: float
    eccentricity: float
    orbital_period_s: float
    argument_of_periapsis_rad: float = 0.0
    longitude_of_ascending_node_rad: float = 0.0
    inclination_rad: float = 0.0
    mean_anomaly_at_epoch_rad: float = 0.0

    def __post_init__(self):
        if not (0.0 <= self.eccentricity < 1.0):
            raise InvalidElementsError(f"Eccentricity {self.eccentricity} must be >= 0 and < 1.")
        if self.semi_major_axis_m < 0 or self.orbital_period_s < 0:
            raise InvalidElementsError(
                f"Semi-major axis ({self.semi_major_axis_m}) and period ({self.orbital_period_s}) cannot be negative."
            )
        if (self.semi_major_axis_m == 0) != (self.orbital_period_s == 0):
            raise InvalidElementsError(
                f"Semi-major axis ({self.semi_major_axis_m}) and period ({self.orbital_period_s}) "
                f"must both be zero (frame origin) or both be positive."
            )

    @property
    def is_origin(self) -> bool:
        return self.semi_major_axis_m == 0


@dataclass(eq=False)
class CelestialBody:
    body_id: str
    name: str
    index: int
    elements: OrbitalElements
    mass_kg: float
    actual_radius_m: float
    display_scale: float
    color: Tuple[int, int, int]
    trail_color: Tuple[int, int, int]

    # Only mutable part of a body; positions are relative to the active center body
    trail: Trail = field(default_factory=Trail, repr=False)

    @property
    def is_origin(self) -> bool:
        return self.elements.is_origin

    @property
    def orbital_period_s(self) -> float:
        return self.elements.orbital_period_s

    @property
    def semi_major_axis_m(self) -> float:
        return self.elements.semi_major_axis_m


def build_body_catalog(sim_config=default_config) -> List[CelestialBody]:
    """
    Creates every `CelestialBody` from `sim_config.SolarSystem.BODY_DATA`.

    Catalog values are given in AU, days and degrees and are converted to
    meters, seconds and radians here. Bodies keep the table order and get a
    stable integer `index` matching their position in the returned list.

    Args:
        sim_config (SimulationConfig): Configuration providing the body table.

    Returns:
        List[CelestialBody]: All bodies, origin body included.

    Raises:
        InvalidElementsError: If any body's elements are malformed.
        ConfigurationError: If an entry lacks a required key, or the table does
            not contain exactly one origin body matching `ORIGIN_BODY_ID`.
    """
    bodies: List[CelestialBody] = []
    try:
        for index, (body_id, body_cfg) in enumerate(sim_config.SolarSystem.BODY_DATA.items()):
            elements = OrbitalElements(
                semi_major_axis_m=float(body_cfg['semi_major_axis_au']) * AU_M,
                eccentricity=float(body_cfg['eccentricity']),
                orbital_period_s=float(body_cfg['orbital_period_days']) * SECONDS_PER_DAY,
                argument_of_periapsis_rad=float(body_cfg['argument_of_periapsis_deg']) * DEG_TO_RAD,
                longitude_of_ascending_node_rad=float(body_cfg['longitude_of_ascending_node_deg']) * DEG_TO_RAD,
                inclination_rad=float(body_cfg['inclination_deg']) * DEG_TO_RAD,
                mean_anomaly_at_epoch_rad=float(body_cfg['mean_anomaly_at_epoch_deg']) * DEG_TO_RAD,
            )
            body = CelestialBody(
                body_id=body_id,
                name=str(body_cfg.get('name', body_id.title())),
                index=index,
                elements=elements,
                mass_kg=float(body_cfg['mass_kg']),
                actual_radius_m=float(body_cfg['radius_m']),
                display_scale=float(body_cfg.get('display_scale', 1.0)),
                color=tuple(body_cfg['color']),
                trail_color=tuple(body_cfg.get('trail_color', body_cfg['color'])),
            )
            bodies.append(body)
            logging.debug(f"Created {body.name}: a={elements.semi_major_axis_m:.4e} m, e={elements.eccentricity}, "
                          f"T={elements.orbital_period_s:.4e} s")
    except InvalidElementsError as e_elements:
        logging.critical(f"Invalid orbital elements for body '{body_id}': {e_elements}", exc_info=True)
        raise InvalidElementsError(f"Body '{body_id}': {e_elements}") from e_elements
    except KeyError as e_key:
        logging.critical(f"Missing key during celestial body creation: {e_key}. Check BODY_DATA structure.", exc_info=True)
        raise ConfigurationError(f"Missing key in BODY_DATA entry '{body_id}': {e_key}") from e_key

    origin_ids = [body.body_id for body in bodies if body.is_origin]
    if origin_ids != [sim_config.SolarSystem.ORIGIN_BODY_ID]:
        raise ConfigurationError(
            f"Exactly one origin body ('{sim_config.SolarSystem.ORIGIN_BODY_ID}') must have zero "
            f"semi-major axis and period, found {origin_ids}."
        )

    logging.info(f"Body catalog built with {len(bodies)} celestial bodies.")
    return bodies


class OrbitalMechanics:
    """Kepler solver and position calculator for fixed, unperturbed ellipses.

    Every method is pure: positions depend only on the elements and the
    requested simulation time.
    """

    def __init__(self, tolerance: float = None, max_iterations: int = None, debug: bool = None,
                 sim_config=default_config):
        self.tolerance = sim_config.Kepler.TOLERANCE if tolerance is None else tolerance
        self.max_iterations = sim_config.Kepler.MAX_ITERATIONS if max_iterations is None else max_iterations
        self.debug = sim_config.Debug.KEPLER_SOLVER if debug is None else debug

    def solve_kepler_equation(self, M_rad, e: float, tolerance: float = None, max_iterations: int = None):
        """
        Solves Kepler's Equation M = E - e * sin(E) for eccentric anomaly E using Newton-Raphson.

        Starts from E = M. Stops when the Newton step falls below `tolerance` or
        after `max_iterations`; in the latter case the current estimate is
        returned as-is, which for physical eccentricities is already close.

        Args:
            M_rad: Mean anomaly in radians, any real value. A numpy array is solved
                element-wise and stops when every step is below tolerance.
            e: Eccentricity (0 <= e < 1).
            tolerance: Convergence tolerance on the step size (radians).
            max_iterations: Maximum number of iterations.

        Returns:
            Eccentric anomaly E in radians (same shape as `M_rad`).
        """
        tolerance = self.tolerance if tolerance is None else tolerance
        max_iterations = self.max_iterations if max_iterations is None else max_iterations

        E_rad = np.array(M_rad, dtype=np.float64) if isinstance(M_rad, np.ndarray) else float(M_rad)
        delta_E = None
        for _ in range(max_iterations):
            delta_E = (E_rad - e * np.sin(E_rad) - M_rad) / (1.0 - e * np.cos(E_rad))
            E_rad = E_rad - delta_E
            if np.all(np.abs(delta_E) < tolerance):
                return E_rad

        if self.debug and delta_E is not None:
            logging.debug(f"Kepler solver hit the {max_iterations} iteration cap for e={e}; "
                          f"last step {np.max(np.abs(delta_E)):.3e} rad. Using current estimate.")
        return E_rad

    def calculate_heliocentric_positions(self, body: CelestialBody, times) -> np.ndarray:
        """
        Heliocentric positions of `body` at each time in `times`.

        Args:
            body: The body to propagate.
            times: Array-like of simulation times in seconds.

        Returns:
            np.ndarray: `(N, 2)` positions in meters.
        """
        times = np.asarray(times, dtype=np.float64)
        elements = body.elements
        if elements.is_origin:
            return np.zeros((times.size, 2), dtype=np.float64)

        try:
            n_rad_s = mean_motion(elements.orbital_period_s)
        except PhysicsError as err:
            # OrbitalElements guarantees a positive period for orbiting bodies
            logging.error(f"Cannot propagate {body.name}: {err}", exc_info=True)
            raise

        e = elements.eccentricity
        # Not reduced modulo 2*pi; sin/cos absorb the extra turns
        M_rad = elements.mean_anomaly_at_epoch_rad + n_rad_s * times.ravel()
        E_rad = self.solve_kepler_equation(M_rad, e)

        cos_E = np.cos(E_rad)
        sin_E = np.sin(E_rad)
        sqrt_1_minus_e_sq = math.sqrt(1.0 - e * e)
        nu_rad = np.arctan2(sqrt_1_minus_e_sq * sin_E, cos_E - e)
        r_m = elements.semi_major_axis_m * (1.0 - e * cos_E)

        x_orb = r_m * np.cos(nu_rad)
        y_orb = r_m * np.sin(nu_rad)

        # Flat ecliptic projection: only the argument of periapsis is applied
        x_ecl, y_ecl = rotate_2d(x_orb, y_orb, elements.argument_of_periapsis_rad)
        return np.column_stack((x_ecl, y_ecl))

    def calculate_heliocentric_position(self, body: CelestialBody, time_s: float) -> np.ndarray:
        """Heliocentric `[x, y]` of `body` at `time_s`, in meters. The origin body is always `[0, 0]`."""
        if body.is_origin:
            return np.zeros(2, dtype=np.float64)
        return self.calculate_heliocentric_positions(body, [time_s])[0]

    def get_relative_position(self, body: CelestialBody, center_body: CelestialBody, time_s: float) -> np.ndarray:
        """Position of `body` relative to `center_body` at `time_s`; exactly zero when they are the same body."""
        return (self.calculate_heliocentric_position(body, time_s)
                - self.calculate_heliocentric_position(center_body, time_s))

    def get_relative_positions(self, body: CelestialBody, center_body: CelestialBody, times) -> np.ndarray:
        return (self.calculate_heliocentric_positions(body, times)
                - self.calculate_heliocentric_positions(center_body, times))

    def generate_orbit_reference_path(self, body: CelestialBody, center_body: CelestialBody,
                                      start_time_s: float, points: int = 360) -> np.ndarray:
        """
        Closed polyline of `body` relative to `center_body` over one period.

        The period is the center body's own period when the center is not the
        frame origin, otherwise the body's own period. That is one heliocentric
        cycle of the center, which only equals one cycle of the relative motion
        when both periods match; the approximation is kept as-is.

        Args:
            body: Body whose path is sampled.
            center_body: Reference frame center.
            start_time_s: Simulation time of the first sample.
            points: Number of equally spaced samples before the closing point.

        Returns:
            np.ndarray: `(points + 1, 2)` positions with the last row equal to the
                first, or an empty `(0, 2)` array when the chosen period is zero.
        """
        period_s = body.orbital_period_s if center_body.is_origin else center_body.orbital_period_s
        if period_s == 0 or points <= 0:
            return np.empty((0, 2), dtype=np.float64)

        sample_times = start_time_s + (np.arange(points, dtype=np.float64) / points) * period_s
        path = self.get_relative_positions(body, center_body, sample_times)
        return np.vstack((path, path[:1]))
