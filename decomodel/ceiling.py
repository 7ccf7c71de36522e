"""
Ascent ceiling math.

Pure functions (no side effects) shared by the tissue model and the
decompression planner.
"""

import math
from typing import Tuple

import numpy as np

from .buhlmann_constants import CoefficientArrays
from .gas_mix import MixType

# Depth granularity of decompression stops (m)
STOP_INCREMENT = 3.0


def select_coefficients(
    mix_type: MixType, coefs: CoefficientArrays
) -> Tuple[np.ndarray, np.ndarray]:
    """M-value (a, b) coefficients to evaluate the ceiling with.

    Helium coefficients are used only for heliox. Any mix containing
    nitrogen, trimix included, uses the nitrogen coefficients, which is more
    conservative than interpolating a and b by the inert gas loading of each
    compartment.
    """
    if mix_type == MixType.HELIOX:
        return coefs.he_a, coefs.he_b
    return coefs.n2_a, coefs.n2_b


def tolerated_pressures(
    p_he: np.ndarray, p_n2: np.ndarray, a: np.ndarray, b: np.ndarray
) -> np.ndarray:
    """Lowest tolerated ambient pressure (bar) per compartment.

    P_tol = ((P_He + P_N2) - a) * b
    """
    return ((p_he + p_n2) - a) * b


def round_up_to_stop(depth_m: float, increment: float = STOP_INCREMENT) -> float:
    """Round a ceiling depth up to the next stop depth."""
    return math.ceil(depth_m / increment) * increment
