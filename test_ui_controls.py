import unittest
from config import config
from simulation_state import SimulationState
from ui_controls import FpsCounter, display_radius_px, pick_body_at, slider_from_time_scale, time_scale_from_slider

class TestSpeedSlider(unittest.TestCase):

    def test_slider_endpoints_match_bounds(self):
        self.assertAlmostEqual(time_scale_from_slider(0, config) / config.Time.MIN_TIME_SCALE, 1.0)
        self.assertAlmostEqual(time_scale_from_slider(config.Time.SLIDER_STEPS, config) / config.Time.MAX_TIME_SCALE, 1.0)

    def test_slider_is_logarithmic(self):
        middle = time_scale_from_slider(config.Time.SLIDER_STEPS / 2, config)
        geometric_mean = (config.Time.MIN_TIME_SCALE * config.Time.MAX_TIME_SCALE) ** 0.5
        self.assertAlmostEqual(middle / geometric_mean, 1.0)

    def test_out_of_range_slider_is_clamped(self):
        self.assertAlmostEqual(time_scale_from_slider(-20, config) / config.Time.MIN_TIME_SCALE, 1.0)
        self.assertAlmostEqual(time_scale_from_slider(500, config) / config.Time.MAX_TIME_SCALE, 1.0)

    def test_inverse_of_default_scale(self):
        slider = slider_from_time_scale(config.Time.DEFAULT_TIME_SCALE, config)
        self.assertAlmostEqual(time_scale_from_slider(slider, config) / config.Time.DEFAULT_TIME_SCALE, 1.0)

class TestBodyPicking(unittest.TestCase):

    def setUp(self):
        self.state = SimulationState(config)

    def screen_of(self, body_id):
        body = self.state.get_body(body_id)
        return self.state.world_to_screen(self.state.get_relative_position(body))

    def test_click_on_frame_origin_picks_sun(self):
        body = pick_body_at(self.state, (700, 450), config)
        self.assertEqual(body.body_id, 'sun')

    def test_click_on_outer_planet(self):
        body = pick_body_at(self.state, self.screen_of('neptune'), config)
        self.assertEqual(body.body_id, 'neptune')

    def test_click_within_tolerance(self):
        x, y = self.screen_of('uranus')
        body = pick_body_at(self.state, (x + config.Visualization.CLICK_TOLERANCE_PX, y), config)
        self.assertEqual(body.body_id, 'uranus')

    def test_click_on_empty_space(self):
        self.assertIsNone(pick_body_at(self.state, (0, 0), config))

    def test_display_radius_never_below_minimum(self):
        for body in self.state.get_bodies():
            self.assertGreaterEqual(display_radius_px(body, self.state.viewport, config),
                                    config.Visualization.MIN_BODY_RADIUS_PX)

    def test_display_radius_grows_with_zoom(self):
        jupiter = self.state.get_body('jupiter')
        self.state.set_zoom(config.Zoom.MAX_ZOOM)
        expected = self.state.viewport.length_to_pixels(jupiter.actual_radius_m * jupiter.display_scale)
        self.assertAlmostEqual(display_radius_px(jupiter, self.state.viewport, config),
                               max(expected, config.Visualization.MIN_BODY_RADIUS_PX))

class TestFpsCounter(unittest.TestCase):

    def test_counts_frames_in_last_second(self):
        counter = FpsCounter()
        self.assertEqual(counter.tick(0.0), 1)
        self.assertEqual(counter.tick(0.5), 2)
        self.assertEqual(counter.tick(0.9), 3)
        self.assertEqual(counter.tick(1.6), 2)

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
