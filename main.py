# main.py
import os
import time
import logging
import cProfile
import argparse # For command line argument to enable profiling
import psutil # For memory monitoring

from config import config, ConfigurationError
from simulation_state import SimulationState
from ui_controls import FpsCounter
from visualization import Visualization

class OrrerySimulation:
    """Owns the `SimulationState` and drives it once per frame.

    The driver measures real elapsed time between frames, feeds it to
    `SimulationState.advance`, and, when a window is available, lets the
    `Visualization` handle input and draw. A headless mode advances with a
    fixed real-time step and no window, which is useful for profiling.

    Attributes:
        state (SimulationState): The simulation being driven.
        visualization (Visualization | None): Pygame front end, `None` when headless
            or when no display could be opened.
        running (bool): Loop flag; cleared by closing the window or critical errors.
        frame_count (int): Frames executed so far.
        fps_counter (FpsCounter): Frames-in-last-second counter.
        process (psutil.Process): Current process, used for memory monitoring.
    """
    def __init__(self, headless: bool = False):
        """Builds the state and, unless `headless`, the pygame front end.

        Raises:
            ConfigurationError: If the body catalog or the visualization reject
                                the configuration.
        """
        try:
            self.state = SimulationState(config)
            self.visualization = None
            if not headless:
                self.visualization = Visualization(config)
                if not self.visualization.visualization_enabled:
                    logging.error("No display available; continuing without a window.")
                    self.visualization.close()
                    self.visualization = None
        except ConfigurationError as e:
            logging.critical(f"Failed to initialize OrrerySimulation due to ConfigurationError: {e}", exc_info=True)
            raise

        self.running = True
        self.frame_count = 0
        self.fps_counter = FpsCounter()
        self.process = psutil.Process(os.getpid())
        logging.info("OrrerySimulation initialized successfully.")

    def _check_memory(self):
        if self.frame_count == 0 or self.frame_count % config.Monitoring.MEMORY_CHECK_INTERVAL_FRAMES != 0:
            return
        try:
            memory_mb = self.process.memory_info().rss / (1024 * 1024)
            if memory_mb > config.Monitoring.MEMORY_USAGE_WARN_MB:
                logging.warning(f"High memory usage: {memory_mb:.2f} MB at frame {self.frame_count}")
            elif config.Debug.DEBUG_MODE:
                logging.debug(f"Memory usage: {memory_mb:.2f} MB at frame {self.frame_count}")
        except psutil.Error as e_psutil:
            logging.error(f"Could not retrieve memory usage: {e_psutil}", exc_info=True)

    def step(self, real_dt: float):
        """Advances the state by `real_dt` real seconds and renders if a window exists."""
        self.state.advance(real_dt)
        if self.visualization is not None:
            try:
                self.visualization.render(self.state)
            except Exception as e_render:
                logging.error(f"Error during visualization rendering: {e_render}", exc_info=True)
                self.visualization.visualization_enabled = False
                logging.warning("Disabling rendering due to an error.")
        self.frame_count += 1
        self._check_memory()

    def run(self):
        """Interactive loop: one `advance` per rendered frame until the window closes."""
        if self.visualization is None:
            raise RuntimeError("run() needs a window; use run_headless() instead.")
        last_time = time.perf_counter()
        try:
            while self.running:
                if not self.visualization.handle_events(self.state):
                    self.running = False
                    logging.info("Simulation stopped by user (visualization window closed).")
                    break
                now = time.perf_counter()
                real_dt = now - last_time
                last_time = now
                self.state.fps = self.fps_counter.tick(now)
                self.step(real_dt)
                if self.visualization.clock is not None:
                    self.visualization.clock.tick(config.Visualization.FPS)
        except Exception as e_loop:
            logging.critical(f"Unhandled error in simulation loop at frame {self.frame_count}: {e_loop}", exc_info=True)
            self.running = False
            raise
        finally:
            self.visualization.close()

    def run_headless(self, duration_s: float, real_dt: float):
        """Advances `duration_s` real seconds in fixed `real_dt` steps and logs the final positions."""
        frames = max(0, int(round(duration_s / real_dt)))
        logging.info(f"Running headless for {frames} frames of {real_dt} s (time scale {self.state.get_time_scale_string()}).")
        for _ in range(frames):
            if not self.running:
                break
            self.step(real_dt)
        logging.info(f"Simulation date: {self.state.get_date_string()}")
        for body_id, position in self.state.get_current_positions().items():
            body = self.state.get_body(body_id)
            logging.info(f"{body.name:>8}: x={position[0]: .4e} m, y={position[1]: .4e} m, trail={len(body.trail)} points")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the Keplerian orrery.")
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable profiling for the simulation. Statistics will be saved to 'simulation_profile.prof'."
    )
    parser.add_argument("--headless", action="store_true", help="Run without a window.")
    parser.add_argument("--duration", type=float, default=10.0, help="Headless run length in real seconds.")
    parser.add_argument("--dt", type=float, default=1.0 / 60.0, help="Headless real-time step in seconds.")
    parser.add_argument("--center", default=None, help="Initial reference body id (e.g. 'earth').")
    parser.add_argument("--time-scale", type=float, default=None, help="Initial simulated seconds per real second.")
    args = parser.parse_args(argv)
    if not args.dt > 0:
        parser.error(f"--dt must be positive, got {args.dt}")
    return args


def main(argv=None):
    args = parse_args(argv)

    profiler = None
    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        logging.info("cProfile profiling enabled. Output will be saved to simulation_profile.prof upon completion.")

    try:
        try:
            simulation = OrrerySimulation(headless=args.headless)
        except ConfigurationError as e_config_main:
            logging.critical(f"Orrery could not be initialized due to a ConfigurationError: {e_config_main}", exc_info=True)
            print(f"FATAL CONFIGURATION ERROR: {e_config_main}. Simulation cannot start. Check logs for details.")
            return 1

        if args.center is not None:
            try:
                simulation.state.set_center_body(args.center)
            except KeyError as e_key:
                logging.critical(f"Invalid --center option: {e_key}")
                return 2
        if args.time_scale is not None:
            simulation.state.set_time_scale(args.time_scale)

        if args.headless or simulation.visualization is None:
            simulation.run_headless(args.duration, args.dt)
        else:
            simulation.run()
        return 0
    finally:
        if profiler:
            profiler.disable()
            stats_file = "simulation_profile.prof"
            try:
                profiler.dump_stats(stats_file)
                logging.info(f"Profiling data successfully saved to {stats_file}")
            except OSError as e_profile_dump:
                logging.error(f"Failed to save profiling data to {stats_file}: {e_profile_dump}", exc_info=True)


if __name__ == "__main__":
    raise SystemExit(main())
