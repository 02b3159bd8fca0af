# utils.py
import numpy as np
from fractions import Fraction


def convert_to_fraction(value, fraction_digits=3, force_float=False):
    """
    Convert a decimal value to a fraction string or formatted float.

    Args:
        value: The numerical value to convert.
        fraction_digits: Max digits for numerator/denominator or float precision.
        force_float: If True, always return formatted float.

    Returns:
        Formatted string representation.
    """
    try:
        float_value = float(value)
        if force_float or not np.isfinite(float_value):
            return f"{float_value:.{fraction_digits}f}"
        if abs(float_value) < 1e-10:
            return "0"

        max_value = 10 ** fraction_digits - 1
        frac = Fraction(float_value).limit_denominator(max_value)
        num, den = frac.numerator, frac.denominator

        # Fall back to a float when the fraction would be too long or too far off
        if abs(num) > max_value or abs(float(frac) - float_value) > 1e-9:
            return f"{float_value:.{fraction_digits}f}"
        return str(frac)

    except (ValueError, TypeError):
        return str(value) # Return original if conversion fails


def create_example_3d():
    """Create a simple example 3D LP problem (Maximize, three pivots)"""
    # Maximize: z = 2x1 + 3x2 + 4x3
    # Subject to:
    #   x1 + x2 + x3 <= 6
    #   2x1 + x2     <= 4
    #   x2 + 3x3     <= 7
    #   x1, x2, x3 >= 0
    # Optimal: x1=0, x2=4, x3=1, z = 16
    c = np.array([2, 3, 4])
    A = np.array([
        [1, 1, 1],
        [2, 1, 0],
        [0, 1, 3],
    ])
    b = np.array([6, 4, 7])
    return c, A, b

def create_example_2d():
    """Create a simple example 2D LP problem (Maximize)"""
    # Maximize: z = 3x1 + 5x2
    # Subject to:
    #   x1 <= 4
    #   2x2 <= 12  (x2 <= 6)
    #   3x1 + 2x2 <= 18
    #   x1, x2 >= 0
    # Optimal: x1=2, x2=6, z = 36
    c = np.array([3, 5])
    A = np.array([
        [1, 0],
        [0, 2],
        [3, 2]
    ])
    b = np.array([4, 12, 18])
    return c, A, b
