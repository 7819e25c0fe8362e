import copy
import math
import unittest
import numpy as np
from config import SimulationConfig, ConfigurationError, InvalidElementsError, AU_M, SECONDS_PER_DAY, DEG_TO_RAD
from solarsystem import OrbitalElements, CelestialBody, OrbitalMechanics, build_body_catalog

def make_body(body_id='test', a_au=1.0, e=0.1, period_days=365.0, w_deg=0.0, m0_deg=0.0, index=0):
    elements = OrbitalElements(
        semi_major_axis_m=a_au * AU_M,
        eccentricity=e,
        orbital_period_s=period_days * SECONDS_PER_DAY,
        argument_of_periapsis_rad=w_deg * DEG_TO_RAD,
        mean_anomaly_at_epoch_rad=m0_deg * DEG_TO_RAD,
    )
    return CelestialBody(body_id=body_id, name=body_id.title(), index=index, elements=elements,
                         mass_kg=1.0, actual_radius_m=1.0, display_scale=1.0,
                         color=(255, 255, 255), trail_color=(255, 255, 255))

def config_with_bodies(body_data):
    class Solar(SimulationConfig.SolarSystem):
        BODY_DATA = body_data

    class TestConfig(SimulationConfig):
        SolarSystem = Solar

    return TestConfig()

class TestKeplerSolver(unittest.TestCase):

    def setUp(self):
        self.mechanics = OrbitalMechanics()

    def test_residual_below_tolerance_for_valid_eccentricities(self):
        for e in (0.0, 0.0167, 0.2056, 0.5, 0.8):
            for M in np.linspace(-10.0, 10.0, 41):
                E = self.mechanics.solve_kepler_equation(M, e)
                self.assertLess(abs(M - (E - e * math.sin(E))), 1e-6, msg=f"e={e}, M={M}")

    def test_circular_orbit_returns_mean_anomaly(self):
        self.assertAlmostEqual(self.mechanics.solve_kepler_equation(1.234, 0.0), 1.234)

    def test_zero_mean_anomaly(self):
        self.assertAlmostEqual(self.mechanics.solve_kepler_equation(0.0, 0.6), 0.0)

    def test_array_input_matches_scalar(self):
        M = np.array([0.1, 1.0, 2.5, 6.0])
        E_array = self.mechanics.solve_kepler_equation(M, 0.3)
        for M_i, E_i in zip(M, E_array):
            self.assertAlmostEqual(E_i, self.mechanics.solve_kepler_equation(M_i, 0.3))

    def test_iteration_cap_returns_best_estimate(self):
        # One Newton step from E = M cannot converge for this eccentricity
        E = self.mechanics.solve_kepler_equation(0.5, 0.9, max_iterations=1)
        self.assertTrue(math.isfinite(E))
        self.assertNotAlmostEqual(E, 0.5)

class TestPositions(unittest.TestCase):

    def setUp(self):
        self.mechanics = OrbitalMechanics()
        self.bodies = {body.body_id: body for body in build_body_catalog()}
        self.sun = self.bodies['sun']

    def test_origin_body_is_always_at_origin(self):
        for t in (0.0, 1e6, -5e7, 3.2e10):
            np.testing.assert_array_equal(self.mechanics.calculate_heliocentric_position(self.sun, t), [0.0, 0.0])

    def test_body_relative_to_itself_is_exactly_zero(self):
        for body in self.bodies.values():
            for t in (0.0, 12345.6, 9.9e9):
                np.testing.assert_array_equal(self.mechanics.get_relative_position(body, body, t), [0.0, 0.0])

    def test_relative_position_is_difference_of_heliocentric(self):
        earth, mars = self.bodies['earth'], self.bodies['mars']
        t = 4.2e7
        expected = (self.mechanics.calculate_heliocentric_position(mars, t)
                    - self.mechanics.calculate_heliocentric_position(earth, t))
        np.testing.assert_array_almost_equal(self.mechanics.get_relative_position(mars, earth, t), expected)

    def test_earth_at_epoch_is_about_one_au(self):
        position = self.mechanics.calculate_heliocentric_position(self.bodies['earth'], 0.0)
        distance_au = np.linalg.norm(position) / AU_M
        self.assertLessEqual(abs(distance_au - 1.0), 0.0167 + 1e-9)

    def test_periodicity(self):
        for body in self.bodies.values():
            if body.is_origin:
                continue
            for t in (0.0, 1.5e8):
                start = self.mechanics.calculate_heliocentric_position(body, t)
                later = self.mechanics.calculate_heliocentric_position(body, t + body.orbital_period_s)
                np.testing.assert_allclose(later, start, rtol=0, atol=body.semi_major_axis_m * 1e-6)

    def test_distance_stays_between_periapsis_and_apoapsis(self):
        mercury = self.bodies['mercury']
        a, e = mercury.semi_major_axis_m, mercury.elements.eccentricity
        positions = self.mechanics.calculate_heliocentric_positions(
            mercury, np.linspace(0.0, mercury.orbital_period_s, 50))
        radii = np.linalg.norm(positions, axis=1)
        self.assertTrue(np.all(radii >= a * (1 - e) * (1 - 1e-9)))
        self.assertTrue(np.all(radii <= a * (1 + e) * (1 + 1e-9)))

    def test_periapsis_orientation(self):
        # At M = 0 the body sits at periapsis, rotated by the argument of periapsis
        body = make_body(a_au=2.0, e=0.5, w_deg=90.0, m0_deg=0.0)
        position = self.mechanics.calculate_heliocentric_position(body, 0.0)
        np.testing.assert_allclose(position, [0.0, 1.0 * AU_M], atol=1.0)

    def test_inclination_and_node_do_not_change_projection(self):
        flat = make_body(a_au=1.0, e=0.2, w_deg=30.0, m0_deg=45.0)
        tilted = CelestialBody(
            body_id='tilted', name='Tilted', index=1,
            elements=OrbitalElements(flat.semi_major_axis_m, 0.2, flat.orbital_period_s,
                                     30.0 * DEG_TO_RAD, 1.0, 0.5, 45.0 * DEG_TO_RAD),
            mass_kg=1.0, actual_radius_m=1.0, display_scale=1.0, color=(0, 0, 0), trail_color=(0, 0, 0))
        np.testing.assert_array_equal(self.mechanics.calculate_heliocentric_position(flat, 1e6),
                                      self.mechanics.calculate_heliocentric_position(tilted, 1e6))

class TestOrbitReferencePath(unittest.TestCase):

    def setUp(self):
        self.mechanics = OrbitalMechanics()
        self.bodies = {body.body_id: body for body in build_body_catalog()}

    def test_closed_loop_with_points_plus_one_rows(self):
        path = self.mechanics.generate_orbit_reference_path(self.bodies['mars'], self.bodies['sun'], 0.0, 360)
        self.assertEqual(path.shape, (361, 2))
        np.testing.assert_array_equal(path[0], path[-1])

    def test_custom_point_count(self):
        path = self.mechanics.generate_orbit_reference_path(self.bodies['venus'], self.bodies['sun'], 5e6, 12)
        self.assertEqual(len(path), 13)

    def test_origin_body_around_origin_is_empty(self):
        sun = self.bodies['sun']
        path = self.mechanics.generate_orbit_reference_path(sun, sun, 0.0)
        self.assertEqual(path.shape, (0, 2))

    def test_first_point_is_current_relative_position(self):
        mars, earth = self.bodies['mars'], self.bodies['earth']
        t0 = 7.7e7
        path = self.mechanics.generate_orbit_reference_path(mars, earth, t0, 36)
        np.testing.assert_array_almost_equal(path[0], self.mechanics.get_relative_position(mars, earth, t0))

    def test_uses_center_period_when_center_is_not_origin(self):
        mars, earth = self.bodies['mars'], self.bodies['earth']
        points = 4
        path = self.mechanics.generate_orbit_reference_path(mars, earth, 0.0, points)
        quarter = earth.orbital_period_s / points
        np.testing.assert_array_almost_equal(path[1], self.mechanics.get_relative_position(mars, earth, quarter))

    def test_sun_around_planet_uses_planet_period(self):
        sun, earth = self.bodies['sun'], self.bodies['earth']
        path = self.mechanics.generate_orbit_reference_path(sun, earth, 0.0, 90)
        self.assertEqual(len(path), 91)
        # Sun seen from Earth traces Earth's orbit mirrored through the origin
        radii = np.linalg.norm(path, axis=1) / AU_M
        self.assertTrue(np.all(np.abs(radii - 1.0) < 0.02))

class TestCatalog(unittest.TestCase):

    def test_default_catalog(self):
        bodies = build_body_catalog()
        self.assertEqual([b.body_id for b in bodies],
                         ['sun', 'mercury', 'venus', 'earth', 'mars', 'jupiter', 'saturn', 'uranus', 'neptune'])
        self.assertEqual([b.index for b in bodies], list(range(len(bodies))))
        self.assertTrue(bodies[0].is_origin)
        self.assertEqual(sum(1 for b in bodies if b.is_origin), 1)

    def test_unit_conversion(self):
        earth = {b.body_id: b for b in build_body_catalog()}['earth']
        self.assertAlmostEqual(earth.semi_major_axis_m / AU_M, 1.0)
        self.assertAlmostEqual(earth.orbital_period_s / SECONDS_PER_DAY, 365.256)
        self.assertAlmostEqual(earth.elements.mean_anomaly_at_epoch_rad, math.radians(358.617))
        self.assertEqual(earth.color, (74, 144, 226))

    def test_catalogs_do_not_share_trails(self):
        first, second = build_body_catalog(), build_body_catalog()
        self.assertIsNot(first[3].trail, second[3].trail)

    def test_eccentricity_out_of_range_rejected(self):
        data = copy.deepcopy(SimulationConfig.SolarSystem.BODY_DATA)
        data['mars']['eccentricity'] = 1.0
        with self.assertRaises(InvalidElementsError):
            build_body_catalog(config_with_bodies(data))

    def test_orbiting_body_with_zero_period_rejected(self):
        data = copy.deepcopy(SimulationConfig.SolarSystem.BODY_DATA)
        data['venus']['orbital_period_days'] = 0.0
        with self.assertRaises(InvalidElementsError):
            build_body_catalog(config_with_bodies(data))

    def test_missing_key_is_configuration_error(self):
        data = copy.deepcopy(SimulationConfig.SolarSystem.BODY_DATA)
        del data['earth']['eccentricity']
        with self.assertRaises(ConfigurationError):
            build_body_catalog(config_with_bodies(data))

    def test_second_origin_body_rejected(self):
        data = copy.deepcopy(SimulationConfig.SolarSystem.BODY_DATA)
        data['rogue'] = dict(data['sun'], name='Rogue')
        with self.assertRaises(ConfigurationError):
            build_body_catalog(config_with_bodies(data))

class TestOrbitalElements(unittest.TestCase):

    def test_origin_elements(self):
        self.assertTrue(OrbitalElements(0.0, 0.0, 0.0).is_origin)

    def test_negative_eccentricity_rejected(self):
        with self.assertRaises(InvalidElementsError):
            OrbitalElements(AU_M, -0.1, 1e7)

    def test_negative_axis_rejected(self):
        with self.assertRaises(InvalidElementsError):
            OrbitalElements(-AU_M, 0.1, 1e7)

    def test_axis_without_period_rejected(self):
        with self.assertRaises(InvalidElementsError):
            OrbitalElements(AU_M, 0.1, 0.0)
        with self.assertRaises(InvalidElementsError):
            OrbitalElements(0.0, 0.0, 1e7)

    def test_elements_are_immutable(self):
        elements = OrbitalElements(AU_M, 0.1, 1e7)
        with self.assertRaises(AttributeError):
            elements.eccentricity = 0.5

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
