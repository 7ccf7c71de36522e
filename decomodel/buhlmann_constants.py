"""
Bühlmann ZH-L16 coefficient tables and physical constants.

Single source of truth for compartment half-times and a/b coefficients of the
three published ZH-L16 variants. The tables are immutable and shared by every
model instance using the same variant.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, Tuple

import numpy as np

# Atmospheric pressure at sea level (bar). Altitude is not modelled.
ATM_PRESSURE = 1.0

# Partial pressure of water vapour in the lungs (bar), equivalent to 47 mmHg.
# Constant regardless of ambient pressure.
WATER_VAPOR_PRESSURE = 0.06266

# Nitrogen fraction of air breathed before the dive
SURFACE_N2_FRACTION = 0.79

NUM_COMPARTMENTS = 16


class CoefficientSet(Enum):
    """Published ZH-L16 coefficient variants."""

    ZH_L16A = "ZH-L16A"  # experimentally derived
    ZH_L16B = "ZH-L16B"  # printed tables
    ZH_L16C = "ZH-L16C"  # dive computers, most conservative

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "CoefficientSet":
        """Resolve a variant from its published name or member name.

        Accepts "ZH-L16B", "zh_l16b" or "ZHL16B" alike.

        Raises:
            ValueError: if the name matches no variant
        """
        key = str(name).strip().upper().replace("-", "").replace("_", "")
        for variant in cls:
            if variant.name.replace("_", "") == key:
                return variant
        raise ValueError(f"Unknown coefficient set: {name!r}")


@dataclass(frozen=True)
class CompartmentCoefficients:
    """Constants of one tissue compartment.

    number:        published compartment number (1..16)
    n2_half_time:  nitrogen half-time (minutes)
    n2_a, n2_b:    nitrogen M-value coefficients
    he_half_time:  helium half-time (minutes)
    he_a, he_b:    helium M-value coefficients
    """
    number: int
    n2_half_time: float
    n2_a: float
    n2_b: float
    he_half_time: float
    he_a: float
    he_b: float


_C = CompartmentCoefficients

COEFFICIENT_TABLES: Dict[CoefficientSet, Tuple[CompartmentCoefficients, ...]] = {
    CoefficientSet.ZH_L16A: (
        _C(1, 4.0, 1.2599, 0.5050, 1.5, 1.7435, 0.1911),
        _C(2, 8.0, 1.0000, 0.6514, 3.0, 1.3838, 0.4295),
        _C(3, 12.5, 0.8618, 0.7222, 4.7, 1.1925, 0.5446),
        _C(4, 18.5, 0.7562, 0.7725, 7.0, 1.0465, 0.6265),
        _C(5, 27.0, 0.6667, 0.8125, 10.2, 0.9226, 0.6917),
        _C(6, 38.3, 0.5933, 0.8434, 14.5, 0.8211, 0.7420),
        _C(7, 54.3, 0.5282, 0.8693, 20.5, 0.7309, 0.7841),
        _C(8, 77.0, 0.4701, 0.8910, 29.1, 0.6506, 0.8195),
        _C(9, 109.0, 0.4187, 0.9092, 41.1, 0.5794, 0.8491),
        _C(10, 146.0, 0.3798, 0.9222, 55.1, 0.5256, 0.8703),
        _C(11, 187.0, 0.3497, 0.9319, 70.6, 0.4840, 0.8860),
        _C(12, 239.0, 0.3223, 0.9403, 90.2, 0.4460, 0.8997),
        _C(13, 305.0, 0.2971, 0.9477, 115.1, 0.4112, 0.9118),
        _C(14, 390.0, 0.2737, 0.9544, 147.2, 0.3788, 0.9226),
        _C(15, 498.0, 0.2523, 0.9602, 187.9, 0.3492, 0.9321),
        _C(16, 635.0, 0.2327, 0.9653, 239.6, 0.3220, 0.9404),
    ),
    CoefficientSet.ZH_L16B: (
        _C(1, 4.0, 1.2599, 0.5240, 1.51, 1.6189, 0.4245),
        _C(2, 8.0, 1.0000, 0.6514, 3.02, 1.3830, 0.5747),
        _C(3, 12.5, 0.8618, 0.7222, 4.72, 1.1919, 0.6527),
        _C(4, 18.5, 0.7562, 0.7825, 6.99, 1.0458, 0.7223),
        _C(5, 27.0, 0.6667, 0.8126, 10.21, 0.9220, 0.7582),
        _C(6, 38.3, 0.5505, 0.8434, 14.48, 0.8205, 0.7957),
        _C(7, 54.3, 0.4858, 0.8693, 20.53, 0.7305, 0.8279),
        _C(8, 77.0, 0.4443, 0.8910, 29.11, 0.6502, 0.8553),
        _C(9, 109.0, 0.4187, 0.9092, 41.20, 0.5950, 0.8757),
        _C(10, 146.0, 0.3798, 0.9222, 55.19, 0.5545, 0.8903),
        _C(11, 187.0, 0.3497, 0.9319, 70.69, 0.5333, 0.8997),
        _C(12, 239.0, 0.3223, 0.9403, 90.34, 0.5189, 0.9073),
        _C(13, 305.0, 0.2828, 0.9477, 115.29, 0.5181, 0.9122),
        _C(14, 390.0, 0.2737, 0.9544, 147.42, 0.5176, 0.9171),
        _C(15, 498.0, 0.2523, 0.9602, 188.24, 0.5172, 0.9217),
        _C(16, 635.0, 0.2327, 0.9653, 240.03, 0.5119, 0.9267),
    ),
    CoefficientSet.ZH_L16C: (
        _C(1, 4.0, 1.2599, 0.5240, 1.51, 1.6189, 0.4245),
        _C(2, 8.0, 1.0000, 0.6514, 3.02, 1.3830, 0.5747),
        _C(3, 12.5, 0.8618, 0.7222, 4.72, 1.1919, 0.6527),
        _C(4, 18.5, 0.7562, 0.7825, 6.99, 1.0458, 0.7223),
        _C(5, 27.0, 0.6667, 0.8126, 10.21, 0.9220, 0.7582),
        _C(6, 38.3, 0.5600, 0.8434, 14.48, 0.8205, 0.7957),
        _C(7, 54.3, 0.4947, 0.8693, 20.53, 0.7305, 0.8279),
        _C(8, 77.0, 0.4500, 0.8910, 29.11, 0.6502, 0.8553),
        _C(9, 109.0, 0.4187, 0.9092, 41.20, 0.5950, 0.8757),
        _C(10, 146.0, 0.3798, 0.9222, 55.19, 0.5545, 0.8903),
        _C(11, 187.0, 0.3497, 0.9319, 70.69, 0.5333, 0.8997),
        _C(12, 239.0, 0.3223, 0.9403, 90.34, 0.5189, 0.9073),
        _C(13, 305.0, 0.2850, 0.9477, 115.29, 0.5181, 0.9122),
        _C(14, 390.0, 0.2737, 0.9544, 147.42, 0.5176, 0.9171),
        _C(15, 498.0, 0.2523, 0.9602, 188.24, 0.5172, 0.9217),
        _C(16, 635.0, 0.2327, 0.9653, 240.03, 0.5119, 0.9267),
    ),
}

del _C


@dataclass(frozen=True)
class CoefficientArrays:
    """Columns of a coefficient table as numpy arrays of shape (16,)."""
    n2_half_time: np.ndarray
    n2_a: np.ndarray
    n2_b: np.ndarray
    he_half_time: np.ndarray
    he_a: np.ndarray
    he_b: np.ndarray


def lookup(variant: CoefficientSet, index: int) -> CompartmentCoefficients:
    """Coefficients of compartment `index` (0..15) for the given variant."""
    return COEFFICIENT_TABLES[variant][index]


@lru_cache(maxsize=None)
def coefficient_arrays(variant: CoefficientSet) -> CoefficientArrays:
    """Vectorised view of a coefficient table.

    Built once per variant and shared; the arrays are read-only.
    """
    table = COEFFICIENT_TABLES[variant]

    def column(name):
        values = np.array([getattr(c, name) for c in table])
        values.setflags(write=False)
        return values

    return CoefficientArrays(
        n2_half_time=column("n2_half_time"),
        n2_a=column("n2_a"),
        n2_b=column("n2_b"),
        he_half_time=column("he_half_time"),
        he_a=column("he_a"),
        he_b=column("he_b"),
    )


def depth_to_pressure(depth_m: float) -> float:
    """Absolute pressure (bar) at depth. Standard rule: 1 bar per 10m."""
    return depth_m / 10.0 + ATM_PRESSURE


def pressure_to_depth(pressure_bar: float) -> float:
    """Depth (m) for an absolute pressure (bar). Inverse of `depth_to_pressure`."""
    return (pressure_bar - ATM_PRESSURE) * 10.0


def pressure_rate(rate_m_per_min: float) -> float:
    """Pressure change in bar/min for a vertical speed in m/min."""
    return rate_m_per_min / 10.0
