"""
Inert gas exchange between the lungs and tissue compartments.

Pure functions only. Scalar forms operate on a single compartment, the
`_vec` forms on numpy arrays holding all compartments at once.
"""

import math

import numpy as np

from .buhlmann_constants import WATER_VAPOR_PRESSURE


def alveolar_pressure(ambient_pressure: float, fraction: float) -> float:
    """Partial pressure of an inert gas inspired in the alveoli.

    Water vapour in the lungs displaces part of the inspired gas, so the
    inert gas sees (P_amb - P_H2O) rather than P_amb.

    Args:
        ambient_pressure: absolute ambient pressure (bar)
        fraction: fraction of the inert gas in the breathing mix
    """
    return (ambient_pressure - WATER_VAPOR_PRESSURE) * fraction


def schreiner_equation(
    p_amb: float,
    t: float,
    prate: float,
    fraction: float,
    p_initial: float,
    half_time: float,
) -> float:
    """Compartment inert gas pressure after a linear pressure change.

    P = P_alv + R(t - 1/k) - (P_alv - P_0 - R/k) * exp(-k t)

    With prate == 0 this is the Haldane equation for a constant depth.

    Args:
        p_amb: ambient pressure at the start of the interval (bar)
        t: duration of the interval (minutes)
        prate: ambient pressure change (bar/min), negative when ascending
        fraction: inert gas fraction of the breathing mix
        p_initial: compartment inert gas pressure at the start (bar)
        half_time: compartment half-time for this gas (minutes)

    Returns:
        Compartment inert gas pressure at the end of the interval (bar).
    """
    palv = alveolar_pressure(p_amb, fraction)
    k = math.log(2.0) / half_time
    r = prate * fraction
    return palv + r * (t - 1.0 / k) - (palv - p_initial - r / k) * math.exp(-k * t)


def schreiner_vec(
    p_initial: np.ndarray,
    palv: float,
    rate: float,
    t: float,
    k: np.ndarray,
) -> np.ndarray:
    """Schreiner equation over all compartments.

    Args:
        p_initial: compartment pressures at the start (bar)
        palv: alveolar inert gas pressure at the start (bar)
        rate: rate of change of the alveolar pressure (bar/min)
        t: duration (minutes)
        k: decay constants ln(2) / half-time, one per compartment
    """
    return palv + rate * (t - 1.0 / k) - (palv - p_initial - rate / k) * np.exp(-k * t)


def haldane_vec(p_initial: np.ndarray, palv: float, t: float, k: np.ndarray) -> np.ndarray:
    """Exponential approach to a constant alveolar pressure."""
    return palv + (p_initial - palv) * np.exp(-k * t)
