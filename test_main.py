import unittest
from unittest import mock
import pygame
from config import config
from main import OrrerySimulation, main, parse_args
from simulation_state import SimulationState
from visualization import Visualization

def failing_set_mode(*args, **kwargs):
    raise pygame.error("No available video device")

class TestHeadlessDriver(unittest.TestCase):

    def test_headless_run_advances_time(self):
        simulation = OrrerySimulation(headless=True)
        self.assertIsNone(simulation.visualization)
        simulation.run_headless(duration_s=1.0, real_dt=0.1)
        self.assertEqual(simulation.frame_count, 10)
        self.assertAlmostEqual(simulation.state.current_time, config.Time.DEFAULT_TIME_SCALE, delta=1.0)

    def test_interactive_run_needs_window(self):
        simulation = OrrerySimulation(headless=True)
        with self.assertRaises(RuntimeError):
            simulation.run()

    def test_parse_args_defaults(self):
        args = parse_args([])
        self.assertFalse(args.profile)
        self.assertFalse(args.headless)
        self.assertIsNone(args.center)

    def test_parse_args_rejects_non_positive_dt(self):
        for dt in ('0', '-0.5'):
            with self.assertRaises(SystemExit):
                parse_args(['--headless', '--dt', dt])

    def test_main_headless_with_options(self):
        self.assertEqual(main(['--headless', '--duration', '0.2', '--center', 'earth', '--time-scale', '86400']), 0)

    def test_main_rejects_unknown_center(self):
        self.assertEqual(main(['--headless', '--duration', '0.1', '--center', 'pluto']), 2)

    def test_key_error_inside_loop_is_not_a_cli_error(self):
        with mock.patch.object(OrrerySimulation, 'run_headless', side_effect=KeyError('mars')):
            with self.assertRaises(KeyError):
                main(['--headless', '--duration', '0.1'])

class TestMissingDisplay(unittest.TestCase):

    def test_simulation_drops_unusable_window(self):
        with mock.patch('pygame.display.set_mode', side_effect=failing_set_mode):
            simulation = OrrerySimulation(headless=False)
        self.assertIsNone(simulation.visualization)
        with self.assertRaises(RuntimeError):
            simulation.run()

    def test_main_falls_back_to_headless_run(self):
        with mock.patch('pygame.display.set_mode', side_effect=failing_set_mode):
            self.assertEqual(main(['--duration', '0.1']), 0)

    def test_disabled_rendering_still_handles_quit(self):
        with mock.patch('pygame.display.set_mode', side_effect=failing_set_mode):
            visualization = Visualization(config)
        self.assertFalse(visualization.visualization_enabled)
        state = SimulationState(config)
        with mock.patch('pygame.event.get', return_value=[pygame.event.Event(pygame.QUIT)]):
            self.assertFalse(visualization.handle_events(state))
        visualization.render(state)
        visualization.close()

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
