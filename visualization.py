# visualization.py
import pygame
import numpy as np
from typing import List, Tuple
import logging
from config import config as default_config, ConfigurationError
from simulation_state import SimulationState
from solarsystem import CelestialBody
from ui_controls import display_radius_px, pick_body_at, slider_from_time_scale, time_scale_from_slider

class Visualization:
    """Renders a `SimulationState` with pygame and turns input into state mutations.

    This class is the presentation collaborator of the orrery. It only reads
    positions, trails and reference orbits from the state, and writes user
    intents back through the state's mutators:
    - Space: pause/resume.  `+`/`-` or mouse wheel: zoom.  `r`: reset view.
    - Up/Down: move the logarithmic speed slider.  `[`/`]`: trail length.
    - `l`: toggle labels.  `o`: toggle reference orbits.
    - Left click on a body: make it the reference frame.
    - Window resize: update the viewport.

    Drawing errors are logged and rendering continues where possible. If the
    display cannot be created, `visualization_enabled` is set to `False` and
    rendering calls are skipped.

    Attributes:
        screen (pygame.Surface | None): The main display surface.
        visualization_enabled (bool): `True` if rendering is active.
        clock (pygame.time.Clock | None): Frame clock used by the driver loop.
        font (pygame.font.Font | None): HUD font.
        small_font (pygame.font.Font | None): Label font.

    Raises:
        ConfigurationError: If the configured screen dimensions are invalid.
    """
    def __init__(self, sim_config=default_config):
        self.config = sim_config
        self.screen = None
        self.clock = None
        self.font = self.small_font = None
        self.visualization_enabled = True
        try:
            pygame.init()
            screen_w = sim_config.Visualization.SCREEN_WIDTH_PX
            screen_h = sim_config.Visualization.SCREEN_HEIGHT_PX
            if not (isinstance(screen_w, int) and screen_w > 0 and
                    isinstance(screen_h, int) and screen_h > 0):
                raise ConfigurationError("SCREEN_WIDTH_PX and SCREEN_HEIGHT_PX must be positive integers.")
            self.screen = pygame.display.set_mode((screen_w, screen_h), pygame.RESIZABLE)
            pygame.display.set_caption("Keplerian Orrery")
            self.clock = pygame.time.Clock()
        except ConfigurationError as e_config:
            logging.critical(f"Visualization initialization failed due to ConfigurationError: {e_config}", exc_info=True)
            self.visualization_enabled = False
            raise
        except pygame.error as e_disp:
            logging.critical(f"Error setting display mode: {e_disp}. Visualization disabled.", exc_info=True)
            self.visualization_enabled = False
            return

        try:
            self.font = pygame.font.Font(None, 24)
            self.small_font = pygame.font.Font(None, 18)
        except pygame.error as e_font:
            logging.error(f"Pygame error initializing fonts: {e_font}. Text rendering disabled.", exc_info=True)
            self.font = self.small_font = None

    def render(self, state: SimulationState):
        """Draws one frame: reference orbits, trails, bodies, labels and the HUD."""
        if not self.visualization_enabled or self.screen is None:
            return
        self.screen.fill(self.config.Visualization.BACKGROUND_COLOR)
        center = state.get_center_body()

        if state.show_orbit_reference_paths:
            for body in state.get_bodies():
                if body is not center:
                    self._draw_orbit_reference_path(body, state)

        for body in state.get_bodies():
            if len(body.trail) > 1:
                self._draw_trail(body, state)

        for body in state.get_bodies():
            screen_pos, radius = self._draw_body(body, state)
            if state.show_labels:
                self._draw_label(body, screen_pos, radius)

        self._draw_hud(state)
        pygame.display.flip()

    def _to_screen_points(self, positions: np.ndarray, state: SimulationState) -> List[Tuple[float, float]]:
        return [state.world_to_screen(pos) for pos in positions]

    def _draw_orbit_reference_path(self, body: CelestialBody, state: SimulationState):
        path = state.get_orbit_reference_path(body)
        if len(path) < 2:
            return
        alpha = self.config.Visualization.ORBIT_PATH_ALPHA
        color = tuple(int(c * alpha) for c in body.trail_color)
        dash = max(1, self.config.Visualization.ORBIT_DASH_SEGMENTS)
        points = self._to_screen_points(path, state)
        try:
            # Every other run of `dash` segments is drawn
            for start in range(0, len(points) - 1, 2 * dash):
                run = points[start:start + dash + 1]
                if len(run) > 1:
                    pygame.draw.lines(self.screen, color, False, run, 1)
        except pygame.error as e_orbit:
            logging.error(f"Error drawing reference orbit for {body.name}: {e_orbit}", exc_info=True)

    def _draw_trail(self, body: CelestialBody, state: SimulationState):
        points = self._to_screen_points(body.trail.positions(), state)
        weights = body.trail.fade_weights(state.current_time, state.max_trail_age(body),
                                          self.config.Trail.FADE_EXPONENT)
        try:
            for i in range(len(points) - 1):
                opacity = float(weights[i])
                if opacity <= 0.0:
                    continue
                # Fading toward the background colour stands in for per-segment alpha
                segment_color = tuple(int(c * opacity) for c in body.trail_color)
                pygame.draw.line(self.screen, segment_color, points[i], points[i + 1], 2)
        except pygame.error as e_trail:
            logging.error(f"Pygame error drawing trail for {body.name}: {e_trail}", exc_info=True)

    def _draw_body(self, body: CelestialBody, state: SimulationState):
        screen_pos = state.world_to_screen(state.get_relative_position(body))
        radius = display_radius_px(body, state.viewport, self.config)
        center = (int(screen_pos[0]), int(screen_pos[1]))
        try:
            if body.is_origin:
                glow_radius = int(radius * 2)
                glow = pygame.Surface((glow_radius * 2, glow_radius * 2), pygame.SRCALPHA)
                pygame.draw.circle(glow, (*self.config.Visualization.SUN_GLOW_COLOR, 90),
                                   (glow_radius, glow_radius), glow_radius)
                self.screen.blit(glow, (center[0] - glow_radius, center[1] - glow_radius))
            pygame.draw.circle(self.screen, body.color, center, max(1, int(radius)))
        except (pygame.error, OverflowError) as e_body:
            # Bodies far off-screen at high zoom can overflow pygame's int coordinates
            logging.debug(f"Skipped drawing {body.name}: {e_body}")
        return screen_pos, radius

    def _draw_label(self, body: CelestialBody, screen_pos, radius: float):
        if not self.small_font:
            return
        try:
            text_surface = self.small_font.render(body.name, True, self.config.Visualization.TEXT_COLOR)
            text_rect = text_surface.get_rect(midtop=(int(screen_pos[0]),
                                                      int(screen_pos[1] + self.config.Visualization.LABEL_OFFSET_PX)))
            self.screen.blit(text_surface, text_rect)
        except (pygame.error, OverflowError) as e_label:
            logging.debug(f"Skipped label for {body.name}: {e_label}")

    def _draw_hud(self, state: SimulationState):
        if not self.font:
            return
        lines = [
            f"Time: {state.get_date_string()}",
            f"Speed: {state.get_time_scale_string()}",
            f"Center: {state.get_center_body().name}",
            f"Trail: {state.trail_length_orbits:.1f} orbits",
        ]
        if state.show_fps:
            lines.append(f"FPS: {state.fps}")
        if state.is_paused:
            lines.append("PAUSED")
        try:
            y = 10
            for line in lines:
                surface = self.font.render(line, True, self.config.Visualization.TEXT_COLOR)
                self.screen.blit(surface, (10, y))
                y += surface.get_height() + 4
        except pygame.error as e_hud:
            logging.error(f"Pygame error drawing HUD: {e_hud}", exc_info=True)

    def handle_events(self, state: SimulationState) -> bool:
        """Processes the pygame event queue.

        Events are still read after rendering has been disabled, so the window
        keeps responding to close requests.

        Returns:
            bool: `False` when the window was closed or Escape pressed, `True` otherwise.
        """
        try:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    logging.info("QUIT event received via Pygame window. Signaling shutdown.")
                    return False
                if event.type == pygame.VIDEORESIZE:
                    state.resize(event.w, event.h)
                    self.screen = pygame.display.set_mode((state.viewport.width, state.viewport.height), pygame.RESIZABLE)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        return False
                    self._handle_key(event.key, state)
                elif event.type == pygame.MOUSEWHEEL:
                    step = self.config.Zoom.WHEEL_ZOOM_STEP
                    state.set_zoom(state.viewport.zoom * (step if event.y > 0 else 1.0 / step))
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    body = pick_body_at(state, event.pos, self.config)
                    if body is not None:
                        state.set_center_body(body.body_id)
            return True
        except pygame.error as e_pygame_event:
            logging.error(f"Pygame error during event handling: {e_pygame_event}. Attempting to continue.", exc_info=True)
            return True

    def _handle_key(self, key: int, state: SimulationState):
        if key == pygame.K_SPACE:
            state.toggle_pause()
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            state.zoom_in()
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            state.zoom_out()
        elif key == pygame.K_r:
            state.reset_view()
        elif key in (pygame.K_UP, pygame.K_DOWN):
            increment = self.config.Time.SLIDER_KEY_INCREMENT
            slider = slider_from_time_scale(state.time_scale, self.config)
            slider += increment if key == pygame.K_UP else -increment
            state.set_time_scale(time_scale_from_slider(slider, self.config))
        elif key in (pygame.K_LEFTBRACKET, pygame.K_RIGHTBRACKET):
            increment = self.config.Trail.TRAIL_KEY_INCREMENT
            delta = increment if key == pygame.K_RIGHTBRACKET else -increment
            state.set_trail_length_orbits(state.trail_length_orbits + delta)
        elif key == pygame.K_l:
            state.show_labels = not state.show_labels
        elif key == pygame.K_o:
            state.show_orbit_reference_paths = not state.show_orbit_reference_paths
            if state.show_orbit_reference_paths:
                state.invalidate_orbit_reference_paths()

    def close(self):
        pygame.quit()
