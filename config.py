# config.py
import math
import logging

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Fundamental Physical Constants (used across different config sections)
AU_M = 1.496e11  # Astronomical Unit in meters
SECONDS_PER_DAY = 86400.0
DAYS_PER_YEAR = 365.25
DAYS_PER_MONTH = 30.0
DEG_TO_RAD = math.pi / 180.0

class ConfigurationError(Exception):
    """Custom exception for simulation configuration errors.

    Raised by `SimulationConfig.validate()` and by the body catalog builder when
    settings are invalid, inconsistent, or missing, which would prevent the
    simulation from running correctly.

    Attributes:
        message (str): A human-readable explanation of the configuration error.
                       This is the first argument passed to the exception constructor.
    """
    pass

class InvalidElementsError(ConfigurationError):
    """Raised when a body's orbital elements are physically malformed.

    Covers eccentricities outside [0, 1), negative semi-major axes or periods,
    and bodies where exactly one of semi-major axis / period is zero. Fatal at
    catalog-load time.
    """
    pass

class SimulationConfig:
    """Centralized, hierarchical configuration for the Keplerian orrery.

    All tunables live in nested static classes (e.g., `SimulationConfig.Time`,
    `SimulationConfig.Trail`, `SimulationConfig.Zoom`). An instance named
    `config` is created at the end of this module, making it available via
    `from config import config`. The simulation state itself is never stored
    here; `SimulationState` receives this object explicitly.

    The `__init__` method invokes `validate()`, which checks the tunables for
    logical consistency and raises a `ConfigurationError` on the first problem
    found, so a bad table fails at startup rather than mid-run.

    Example Usage:
        >>> from config import config
        >>> print(f"Max time scale (s/s): {config.Time.MAX_TIME_SCALE}")
        >>> print(f"Trail pixel gate: {config.Trail.MIN_PIXEL_DISTANCE}")
    """

    # --- Time Configuration ---
    class Time:
        """Configuration for simulated time progression.

        Attributes:
            DEFAULT_TIME_SCALE (float): Simulated seconds per real second at startup
                                        (one Earth year every five seconds).
            MIN_TIME_SCALE (float): Lower clamp for the time scale (1 day/sec).
            MAX_TIME_SCALE (float): Upper clamp for the time scale (1000 years/sec).
            SLIDER_STEPS (float): Number of discrete steps of the logarithmic speed slider.
            SLIDER_KEY_INCREMENT (float): Slider units moved per arrow key press.
        """
        DEFAULT_TIME_SCALE = 6307200.0
        MIN_TIME_SCALE = 86400.0
        MAX_TIME_SCALE = 31557600000.0
        SLIDER_STEPS = 100.0
        SLIDER_KEY_INCREMENT = 2.0

    # --- Trail Configuration ---
    class Trail:
        """Configuration for per-body trails.

        Attributes:
            MIN_PIXEL_DISTANCE (float): Minimum screen displacement (pixels) before a new
                                        trail point is recorded. Lower means smoother trails
                                        and more points.
            MAX_TRAIL_ORBITS (float): Upper clamp for the trail length, in orbital periods.
            DEFAULT_TRAIL_ORBITS (float): Trail length at startup, in orbital periods.
            TRAIL_KEY_INCREMENT (float): Orbits added/removed per keyboard adjustment.
            FADE_EXPONENT (float): Non-linear fade exponent (higher fades faster).
            VIEW_PADDING_PER_ORBIT (float): Fractional view inflation per trail orbit
                                            used by `reset_view`.
        """
        MIN_PIXEL_DISTANCE = 3.0
        MAX_TRAIL_ORBITS = 10.0
        DEFAULT_TRAIL_ORBITS = 1.0
        TRAIL_KEY_INCREMENT = 0.5
        FADE_EXPONENT = 2.0
        VIEW_PADDING_PER_ORBIT = 0.1

    # --- Zoom Configuration ---
    class Zoom:
        """Configuration for the viewport zoom.

        Zoom is a magnification expressed in pixels per astronomical unit.

        Attributes:
            MIN_ZOOM (float): Smallest magnification (px/AU).
            MAX_ZOOM (float): Largest magnification (px/AU).
            ZOOM_STEP (float): Multiplier per zoom in/out step.
            WHEEL_ZOOM_STEP (float): Multiplier per mouse wheel notch.
            ZOOM_EPSILON (float): Relative change below which a zoom request is ignored.
            INITIAL_ZOOM_PADDING (float): Multiplier applied to the fitted diameter on
                                          reset so all orbits sit inside the window.
        """
        MIN_ZOOM = 0.5
        MAX_ZOOM = 20000.0
        ZOOM_STEP = 1.2
        WHEEL_ZOOM_STEP = 1.1
        ZOOM_EPSILON = 1e-6
        INITIAL_ZOOM_PADDING = 1.2

    # --- Kepler Solver Configuration ---
    class Kepler:
        """Configuration for the Kepler equation solver and reference orbits.

        Attributes:
            TOLERANCE (float): Newton step size (radians) below which iteration stops.
            MAX_ITERATIONS (int): Iteration cap; the current estimate is used afterwards.
            ORBIT_PATH_POINTS (int): Samples per generated reference orbit.
        """
        TOLERANCE = 1e-6
        MAX_ITERATIONS = 20
        ORBIT_PATH_POINTS = 360

    # --- Epoch Configuration ---
    class Epoch:
        """Calendar date corresponding to simulation time zero (J2000.0)."""
        YEAR = 2000
        MONTH = 1
        DAY = 1

    # --- Visualization Configuration ---
    class Visualization:
        """Configuration for the pygame front end.

        Attributes:
            SCREEN_WIDTH_PX (int): Initial width of the display window in pixels.
            SCREEN_HEIGHT_PX (int): Initial height of the display window in pixels.
            FPS (int): Target frames per second.
            MIN_BODY_RADIUS_PX (int): Smallest radius a body is drawn with.
            CLICK_TOLERANCE_PX (int): Extra pixels around a body accepted as a click on it.
            LABEL_OFFSET_PX (int): Vertical distance between a body and its label.
            SHOW_LABELS (bool): Draw body names at startup.
            SHOW_ORBIT_REFERENCE_PATHS (bool): Draw ghost orbits at startup.
            SHOW_FPS (bool): Show the FPS counter.
            ORBIT_PATH_ALPHA (float): Brightness factor for ghost orbits.
            ORBIT_DASH_SEGMENTS (int): Path samples per dash when drawing ghost orbits.
            BACKGROUND_COLOR (Tuple[int, int, int]): Window clear colour.
            TEXT_COLOR (Tuple[int, int, int]): HUD and label colour.
            SUN_GLOW_COLOR (Tuple[int, int, int]): Halo colour drawn around the origin body.
        """
        SCREEN_WIDTH_PX = 1400
        SCREEN_HEIGHT_PX = 900
        FPS = 60
        MIN_BODY_RADIUS_PX = 3
        CLICK_TOLERANCE_PX = 10
        LABEL_OFFSET_PX = 15
        SHOW_LABELS = True
        SHOW_ORBIT_REFERENCE_PATHS = False
        SHOW_FPS = True
        ORBIT_PATH_ALPHA = 0.3
        ORBIT_DASH_SEGMENTS = 4
        BACKGROUND_COLOR = (0, 0, 0)
        TEXT_COLOR = (255, 255, 255)
        SUN_GLOW_COLOR = (253, 184, 19)

    # --- Monitoring Configuration ---
    class Monitoring:
        """Configuration for system resource monitoring.

        Attributes:
            MEMORY_USAGE_WARN_MB (int): Memory usage threshold in Megabytes. If exceeded,
                                        a warning is logged.
            MEMORY_CHECK_INTERVAL_FRAMES (int): Frequency (in frames) at which
                                                memory usage is checked.
        """
        MEMORY_USAGE_WARN_MB = 1024
        MEMORY_CHECK_INTERVAL_FRAMES = 600

    # --- Debug Configuration ---
    class Debug:
        """Configuration for debugging features and logging verbosity.

        Attributes:
            DEBUG_MODE (bool): Master toggle for debug logging in the driver loop.
            KEPLER_SOLVER (bool): Log when the Kepler solver hits its iteration cap.
            TRAILS (bool): Log trail clears and prune counts.
        """
        DEBUG_MODE = False
        KEPLER_SOLVER = False
        TRAILS = False

    # --- Solar System Configuration ---
    class SolarSystem:
        """Static body catalog (NASA/JPL elements, J2000.0 epoch).

        Attributes:
            ORIGIN_BODY_ID (str): Id of the fixed frame-origin body.
            DEFAULT_CENTER_BODY_ID (str): Reference body at startup.
            BODY_DATA (Dict[str, Dict]): Keyed by body id. Each entry holds the display
                name, semi-major axis in AU, eccentricity, period in days, angles in
                degrees, physical radius in meters, mass in kg, display scale and RGB
                colours. Converted to SI by `solarsystem.build_body_catalog`.
        """
        ORIGIN_BODY_ID = 'sun'
        DEFAULT_CENTER_BODY_ID = 'sun'

        BODY_DATA = {
            'sun': {
                'name': 'Sun',
                'semi_major_axis_au': 0.0, 'eccentricity': 0.0, 'orbital_period_days': 0.0,
                'argument_of_periapsis_deg': 0.0, 'longitude_of_ascending_node_deg': 0.0,
                'inclination_deg': 0.0, 'mean_anomaly_at_epoch_deg': 0.0,
                'radius_m': 6.96e8, 'mass_kg': 1.989e30, 'display_scale': 15.0,
                'color': (253, 184, 19), 'trail_color': (253, 184, 19)
            },
            'mercury': {
                'name': 'Mercury',
                'semi_major_axis_au': 0.38710, 'eccentricity': 0.2056, 'orbital_period_days': 87.969,
                'argument_of_periapsis_deg': 29.124, 'longitude_of_ascending_node_deg': 48.331,
                'inclination_deg': 7.005, 'mean_anomaly_at_epoch_deg': 174.796,
                'radius_m': 2.4397e6, 'mass_kg': 3.3011e23, 'display_scale': 10.0,
                'color': (175, 92, 40), 'trail_color': (175, 92, 40)
            },
            'venus': {
                'name': 'Venus',
                'semi_major_axis_au': 0.72333, 'eccentricity': 0.0067, 'orbital_period_days': 224.701,
                'argument_of_periapsis_deg': 54.884, 'longitude_of_ascending_node_deg': 76.680,
                'inclination_deg': 3.395, 'mean_anomaly_at_epoch_deg': 50.115,
                'radius_m': 6.0518e6, 'mass_kg': 4.8675e24, 'display_scale': 10.0,
                'color': (73, 255, 118), 'trail_color': (73, 255, 118)
            },
            'earth': {
                'name': 'Earth',
                'semi_major_axis_au': 1.00000, 'eccentricity': 0.0167, 'orbital_period_days': 365.256,
                'argument_of_periapsis_deg': 114.208, 'longitude_of_ascending_node_deg': 174.873,
                'inclination_deg': 0.000, 'mean_anomaly_at_epoch_deg': 358.617,
                'radius_m': 6.371e6, 'mass_kg': 5.972e24, 'display_scale': 10.0,
                'color': (74, 144, 226), 'trail_color': (74, 144, 226)
            },
            'mars': {
                'name': 'Mars',
                'semi_major_axis_au': 1.52368, 'eccentricity': 0.0934, 'orbital_period_days': 686.980,
                'argument_of_periapsis_deg': 286.502, 'longitude_of_ascending_node_deg': 49.558,
                'inclination_deg': 1.850, 'mean_anomaly_at_epoch_deg': 19.412,
                'radius_m': 3.3895e6, 'mass_kg': 6.4171e23, 'display_scale': 10.0,
                'color': (225, 66, 13), 'trail_color': (225, 66, 13)
            },
            'jupiter': {
                'name': 'Jupiter',
                'semi_major_axis_au': 5.20288, 'eccentricity': 0.0489, 'orbital_period_days': 4332.589,
                'argument_of_periapsis_deg': 273.867, 'longitude_of_ascending_node_deg': 100.464,
                'inclination_deg': 1.303, 'mean_anomaly_at_epoch_deg': 20.020,
                'radius_m': 6.9911e7, 'mass_kg': 1.8982e27, 'display_scale': 8.0,
                'color': (174, 58, 200), 'trail_color': (174, 58, 200)
            },
            'saturn': {
                'name': 'Saturn',
                'semi_major_axis_au': 9.53667, 'eccentricity': 0.0565, 'orbital_period_days': 10759.22,
                'argument_of_periapsis_deg': 339.392, 'longitude_of_ascending_node_deg': 113.665,
                'inclination_deg': 2.485, 'mean_anomaly_at_epoch_deg': 317.020,
                'radius_m': 5.8232e7, 'mass_kg': 5.6834e26, 'display_scale': 8.0,
                'color': (250, 213, 165), 'trail_color': (250, 213, 165)
            },
            'uranus': {
                'name': 'Uranus',
                'semi_major_axis_au': 19.18916, 'eccentricity': 0.0457, 'orbital_period_days': 30688.5,
                'argument_of_periapsis_deg': 96.998857, 'longitude_of_ascending_node_deg': 74.006,
                'inclination_deg': 0.773, 'mean_anomaly_at_epoch_deg': 142.238600,
                'radius_m': 2.5362e7, 'mass_kg': 8.6810e25, 'display_scale': 9.0,
                'color': (79, 208, 231), 'trail_color': (79, 208, 231)
            },
            'neptune': {
                'name': 'Neptune',
                'semi_major_axis_au': 30.06992, 'eccentricity': 0.0113, 'orbital_period_days': 60182.0,
                'argument_of_periapsis_deg': 273.187, 'longitude_of_ascending_node_deg': 131.784,
                'inclination_deg': 1.770, 'mean_anomaly_at_epoch_deg': 256.228,
                'radius_m': 2.4622e7, 'mass_kg': 1.02413e26, 'display_scale': 9.0,
                'color': (65, 102, 245), 'trail_color': (65, 102, 245)
            }
        }

    def __init__(self):
        """Initializes the `SimulationConfig` instance and validates it.

        Raises:
            ConfigurationError: If `self.validate()` detects any issue with the
                                configuration values.
        """
        self.validate()

    def validate(self):
        """Performs validation of the tunables and the shape of the body table.

        Checks, in order:
        -   **Time**: positive, ordered time-scale bounds with the default inside them.
        -   **Trail**: positive pixel gate, non-negative trail bounds with the default
            inside them, non-negative fade exponent and view padding.
        -   **Zoom**: positive, ordered zoom bounds, step above one, positive padding.
        -   **Kepler**: positive tolerance, iteration cap and path sample count.
        -   **Epoch**: a valid calendar month and day.
        -   **Visualization**: positive screen dimensions and FPS.
        -   **SolarSystem**: the origin and default center ids exist in `BODY_DATA`.

        Orbital elements themselves are validated when the catalog is built
        (`InvalidElementsError`), so the same checks apply to injected tables.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        # Time validation
        if not (0 < self.Time.MIN_TIME_SCALE <= self.Time.MAX_TIME_SCALE):
            raise ConfigurationError(
                f"Time scale bounds (MIN: {self.Time.MIN_TIME_SCALE}, MAX: {self.Time.MAX_TIME_SCALE}) "
                f"must be positive and ordered."
            )
        if not (self.Time.MIN_TIME_SCALE <= self.Time.DEFAULT_TIME_SCALE <= self.Time.MAX_TIME_SCALE):
            raise ConfigurationError(f"Time.DEFAULT_TIME_SCALE ({self.Time.DEFAULT_TIME_SCALE}) must lie within the time scale bounds.")
        if self.Time.SLIDER_STEPS <= 0:
            raise ConfigurationError("Time.SLIDER_STEPS must be positive.")

        # Trail validation
        if self.Trail.MIN_PIXEL_DISTANCE <= 0:
            raise ConfigurationError("Trail.MIN_PIXEL_DISTANCE must be positive.")
        if self.Trail.MAX_TRAIL_ORBITS < 0:
            raise ConfigurationError("Trail.MAX_TRAIL_ORBITS cannot be negative.")
        if not (0 <= self.Trail.DEFAULT_TRAIL_ORBITS <= self.Trail.MAX_TRAIL_ORBITS):
            raise ConfigurationError(
                f"Trail.DEFAULT_TRAIL_ORBITS ({self.Trail.DEFAULT_TRAIL_ORBITS}) must be between 0 "
                f"and MAX_TRAIL_ORBITS ({self.Trail.MAX_TRAIL_ORBITS})."
            )
        if self.Trail.FADE_EXPONENT < 0 or self.Trail.VIEW_PADDING_PER_ORBIT < 0:
            raise ConfigurationError("Trail.FADE_EXPONENT and Trail.VIEW_PADDING_PER_ORBIT cannot be negative.")

        # Zoom validation
        if not (0 < self.Zoom.MIN_ZOOM <= self.Zoom.MAX_ZOOM):
            raise ConfigurationError(
                f"Zoom bounds (MIN: {self.Zoom.MIN_ZOOM}, MAX: {self.Zoom.MAX_ZOOM}) must be positive and ordered."
            )
        if self.Zoom.ZOOM_STEP <= 1.0 or self.Zoom.WHEEL_ZOOM_STEP <= 1.0:
            raise ConfigurationError("Zoom.ZOOM_STEP and Zoom.WHEEL_ZOOM_STEP must be greater than 1.")
        if self.Zoom.INITIAL_ZOOM_PADDING <= 0 or self.Zoom.ZOOM_EPSILON < 0:
            raise ConfigurationError("Zoom.INITIAL_ZOOM_PADDING must be positive and Zoom.ZOOM_EPSILON non-negative.")

        # Kepler validation
        if self.Kepler.TOLERANCE <= 0 or self.Kepler.MAX_ITERATIONS <= 0:
            raise ConfigurationError("Kepler.TOLERANCE and Kepler.MAX_ITERATIONS must be positive.")
        if self.Kepler.ORBIT_PATH_POINTS <= 0:
            raise ConfigurationError("Kepler.ORBIT_PATH_POINTS must be positive.")

        # Epoch validation
        if not (1 <= self.Epoch.MONTH <= 12 and 1 <= self.Epoch.DAY <= 31):
            raise ConfigurationError(f"Epoch month/day ({self.Epoch.MONTH}/{self.Epoch.DAY}) is not a valid calendar date.")

        # Visualization validation
        if self.Visualization.SCREEN_WIDTH_PX <= 0 or self.Visualization.SCREEN_HEIGHT_PX <= 0:
            raise ConfigurationError("Visualization screen dimensions (SCREEN_WIDTH_PX, SCREEN_HEIGHT_PX) must be positive.")
        if self.Visualization.FPS <= 0:
            raise ConfigurationError("Visualization.FPS must be positive.")

        # Solar System Data Validation
        if not self.SolarSystem.BODY_DATA:
            raise ConfigurationError("SolarSystem.BODY_DATA cannot be empty.")
        if self.SolarSystem.ORIGIN_BODY_ID not in self.SolarSystem.BODY_DATA:
            raise ConfigurationError(f"Origin body '{self.SolarSystem.ORIGIN_BODY_ID}' not found in BODY_DATA.")
        if self.SolarSystem.DEFAULT_CENTER_BODY_ID not in self.SolarSystem.BODY_DATA:
            raise ConfigurationError(f"Default center body '{self.SolarSystem.DEFAULT_CENTER_BODY_ID}' not found in BODY_DATA.")
        for body_id, data in self.SolarSystem.BODY_DATA.items():
            if data.get('mass_kg', -1.0) < 0:
                raise ConfigurationError(f"Mass of celestial body '{body_id}' cannot be negative.")
            if data.get('radius_m', -1.0) < 0:
                raise ConfigurationError(f"Radius of celestial body '{body_id}' cannot be negative.")

        logging.info("Configuration validated successfully.")


# --- Instantiate the configuration ---
# This makes the config object available for import and runs validation.
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
