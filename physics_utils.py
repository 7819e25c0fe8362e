# physics_utils.py

import math
import numpy as np

class PhysicsError(Exception):
    """Custom exception for physics-related errors, including numerical issues."""
    pass

def clamp(value, min_value, max_value):
    """
    Clamps a scalar into the closed interval [min_value, max_value].

    Args:
        value (float): The value to clamp.
        min_value (float): Lower bound.
        max_value (float): Upper bound. Must not be smaller than min_value.

    Returns:
        float: The clamped value.

    Raises:
        PhysicsError: If the bounds are inverted or the value is NaN.
    """
    if min_value > max_value:
        raise PhysicsError(f"Invalid clamp bounds [{min_value}, {max_value}].")
    if math.isnan(value):
        raise PhysicsError("Cannot clamp NaN.")
    return max(min_value, min(max_value, value))

def mean_motion(period_s):
    """
    Mean motion n = 2*pi / T in radians per second.

    Args:
        period_s (float): Orbital period in seconds. Must be positive.

    Returns:
        float: Mean motion in rad/s.

    Raises:
        PhysicsError: If the period is zero, negative or not finite.
    """
    if not math.isfinite(period_s) or period_s <= 0:
        raise PhysicsError(f"Mean motion requires a positive finite period, got {period_s}.")
    return 2.0 * math.pi / period_s

def rotate_2d(x, y, angle_rad):
    """
    Rotates points counter-clockwise by angle_rad about the origin.

    Works on scalars or numpy arrays of matching shape.

    Args:
        x (float or np.ndarray): X coordinate(s).
        y (float or np.ndarray): Y coordinate(s).
        angle_rad (float): Rotation angle in radians.

    Returns:
        Tuple: Rotated (x, y), same type as the input.
    """
    cos_a = np.cos(angle_rad)
    sin_a = np.sin(angle_rad)
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a

def screen_distance(a, b):
    """
    Euclidean distance between two screen-space points.

    Args:
        a (Tuple[float, float]): First point (pixels).
        b (Tuple[float, float]): Second point (pixels).

    Returns:
        float: Distance in pixels.
    """
    return math.hypot(a[0] - b[0], a[1] - b[1])

if __name__ == '__main__':
    print("--- Testing clamp ---")
    print(f"clamp(5, 0, 1) = {clamp(5, 0, 1)}")
    print(f"clamp(-5, 0, 1) = {clamp(-5, 0, 1)}")

    print("\n--- Testing mean_motion ---")
    print(f"Earth mean motion: {mean_motion(365.256 * 86400.0)} rad/s")

    print("\n--- Testing rotate_2d ---")
    print(f"Rotate (1, 0) by 90 deg: {rotate_2d(1.0, 0.0, math.pi / 2)}")
    xs, ys = rotate_2d(np.array([1.0, 0.0]), np.array([0.0, 1.0]), math.pi)
    print(f"Rotate array by 180 deg: {xs}, {ys}")

    print("\n--- Testing screen_distance ---")
    print(f"Distance (0,0)-(3,4): {screen_distance((0, 0), (3, 4))}")
