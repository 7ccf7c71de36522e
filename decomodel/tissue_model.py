"""
Bühlmann ZH-L16 tissue loading model.

Tracks helium and nitrogen pressures in 16 compartments through a dive given
as an ordered sequence of transitions (descents/ascents) and stops. All
tissue math is vectorized across compartments using numpy.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .buhlmann_constants import (
    ATM_PRESSURE,
    NUM_COMPARTMENTS,
    SURFACE_N2_FRACTION,
    CoefficientSet,
    coefficient_arrays,
    depth_to_pressure,
    pressure_rate,
    pressure_to_depth,
)
from .ceiling import round_up_to_stop, select_coefficients, tolerated_pressures
from .config import load_effective_config
from .deco_planner import (
    ASCENT_RATE,
    DESCENT_RATE,
    MAX_STOP_TIME,
    DecoSchedule,
    deco_stop_lengths,
    no_deco_limit,
    plan_deco,
)
from .gas_exchange import alveolar_pressure, schreiner_vec
from .gas_mix import GasMix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompartmentState:
    """Inert gas pressures (bar) of one compartment at a point in time."""
    p_he: float
    p_n2: float


class TissueModel:
    """Bühlmann ZH-L16 tissue simulation for a single breathing gas.

    The model starts at the surface with tissues equilibrated to air (allowing
    for alveolar water vapour) whatever gas is breathed during the dive. It
    changes only through `transition` and `stop`; the NDL and deco queries
    work on private copies.
    """

    def __init__(
        self,
        gas_mix: GasMix,
        variant: CoefficientSet = CoefficientSet.ZH_L16B,
        max_stop_time: int = MAX_STOP_TIME,
        descent_rate: float = DESCENT_RATE,
        ascent_rate: float = ASCENT_RATE,
    ):
        """
        Args:
            gas_mix: Breathing gas, validated by GasMix
            variant: ZH-L16 coefficient set, fixed for the model's lifetime
            max_stop_time: Longest single stop the deco planner will hold
                before giving up with RuntimeError
            descent_rate: Default rate (m/min) for transitions going deeper
            ascent_rate: Default rate (m/min) for shallower transitions and
                deco planning
        """
        if max_stop_time <= 0:
            raise ValueError(f"max_stop_time must be positive, got {max_stop_time}")
        if descent_rate == 0 or ascent_rate == 0:
            raise ValueError(
                f"Rates must be non-zero, got descent {descent_rate}, ascent {ascent_rate}"
            )

        self.gas_mix = gas_mix
        self.max_stop_time = max_stop_time
        self.descent_rate = descent_rate
        self.ascent_rate = ascent_rate
        self._variant = variant
        self._coefs = coefficient_arrays(variant)

        # Decay constants k = ln(2) / halftime
        self._n2_k = np.log(2) / self._coefs.n2_half_time
        self._he_k = np.log(2) / self._coefs.he_half_time

        self.p_he = np.zeros(NUM_COMPARTMENTS)
        self.p_n2 = np.full(
            NUM_COMPARTMENTS, alveolar_pressure(ATM_PRESSURE, SURFACE_N2_FRACTION)
        )
        self.ambient_pressure = ATM_PRESSURE
        self.elapsed = 0.0

    @classmethod
    def from_config(
        cls, config_path: Optional[str] = None, gas_mix: Optional[GasMix] = None
    ) -> "TissueModel":
        """Create a model from config.yaml; `gas_mix` overrides the configured gas."""
        config = load_effective_config(config_path=config_path)
        return cls(
            gas_mix or config["gas_mix"],
            variant=config["variant"],
            max_stop_time=config["max_stop_time"],
            descent_rate=config["descent_rate"],
            ascent_rate=config["ascent_rate"],
        )

    @property
    def variant(self) -> CoefficientSet:
        return self._variant

    @property
    def depth(self) -> float:
        """Current depth in meters."""
        return pressure_to_depth(self.ambient_pressure)

    @property
    def compartments(self) -> Tuple[CompartmentState, ...]:
        """Snapshot of all compartments, fastest first."""
        return tuple(
            CompartmentState(p_he=float(he), p_n2=float(n2))
            for he, n2 in zip(self.p_he, self.p_n2)
        )

    def copy(self) -> "TissueModel":
        """Independent copy for extrapolating without touching this model.

        Compartment arrays and scalar state are copied; the read-only
        coefficient arrays and the gas mix are shared.
        """
        clone = type(self).__new__(type(self))
        clone.gas_mix = self.gas_mix
        clone.max_stop_time = self.max_stop_time
        clone.descent_rate = self.descent_rate
        clone.ascent_rate = self.ascent_rate
        clone._variant = self._variant
        clone._coefs = self._coefs
        clone._n2_k = self._n2_k
        clone._he_k = self._he_k
        clone.p_he = self.p_he.copy()
        clone.p_n2 = self.p_n2.copy()
        clone.ambient_pressure = self.ambient_pressure
        clone.elapsed = self.elapsed
        return clone

    def _load(self, t: float, prate: float):
        """Advance every compartment by t minutes at pressure rate prate."""
        f_he = self.gas_mix.f_he
        f_n2 = self.gas_mix.f_n2

        # Alveolar pressures at START of interval
        palv_he = alveolar_pressure(self.ambient_pressure, f_he)
        palv_n2 = alveolar_pressure(self.ambient_pressure, f_n2)

        self.p_he = schreiner_vec(self.p_he, palv_he, prate * f_he, t, self._he_k)
        self.p_n2 = schreiner_vec(self.p_n2, palv_n2, prate * f_n2, t, self._n2_k)

    def transition(self, depth_m: float, rate: Optional[float] = None):
        """Descend or ascend to `depth_m` at `rate` m/min.

        The direction comes from the depths; the sign of `rate` is ignored.
        Without a rate the model's descent or ascent rate is used.

        Raises:
            ValueError: if rate is zero and the depth changes
        """
        next_p = depth_to_pressure(depth_m)
        if next_p == self.ambient_pressure:
            return
        if rate is None:
            going_deeper = next_p > self.ambient_pressure
            rate = self.descent_rate if going_deeper else self.ascent_rate
        if rate == 0:
            raise ValueError(f"Cannot move to {depth_m}m at zero rate")

        prate = pressure_rate(abs(rate))
        if next_p < self.ambient_pressure:
            prate = -prate
        t = (next_p - self.ambient_pressure) / prate

        logger.debug(
            f"Transition {self.depth:.1f}m -> {depth_m:.1f}m "
            f"in {t:.2f} min ({prate:+.2f} bar/min)"
        )
        self._load(t, prate)
        self.ambient_pressure = next_p
        self.elapsed += abs(t)

    def stop(self, duration: float):
        """Stay at the current depth for `duration` minutes."""
        logger.debug(f"Stop {duration:.1f} min at {self.depth:.1f}m")
        self._load(duration, 0.0)
        self.elapsed += abs(duration)

    def compartment_ceilings(self) -> np.ndarray:
        """Tolerated ambient pressure (bar) for each compartment."""
        a, b = select_coefficients(self.gas_mix.mix_type, self._coefs)
        return tolerated_pressures(self.p_he, self.p_n2, a, b)

    def ceiling_pressure(self) -> float:
        """Shallowest safe ambient pressure (bar)."""
        return float(np.max(self.compartment_ceilings()))

    def ascent_ceiling(self) -> float:
        """Shallowest safe depth (m); positive means a stop is mandatory."""
        return pressure_to_depth(self.ceiling_pressure())

    def leading_compartment(self) -> int:
        """0-based index of the compartment setting the ceiling."""
        return int(np.argmax(self.compartment_ceilings()))

    def first_deco_stop(self) -> float:
        """Depth of the first decompression stop; <= 0 means no stop."""
        return round_up_to_stop(self.ascent_ceiling())

    def ndl(self) -> int:
        """No-decompression limit in minutes, capped at 60 ("60+")."""
        return no_deco_limit(self)

    def deco_stop_lengths(self, ascent_rate: Optional[float] = None) -> List[int]:
        """Minutes owed at each stop, deepest first; empty without deco."""
        return deco_stop_lengths(self, ascent_rate)

    def plan_deco(self, ascent_rate: Optional[float] = None) -> DecoSchedule:
        return plan_deco(self, ascent_rate)

    def __repr__(self) -> str:
        return (
            f"TissueModel({self.gas_mix}, {self._variant}, "
            f"depth={self.depth:.1f}m, elapsed={self.elapsed:.1f}min)"
        )


if __name__ == "__main__":
    # Demo: 30m for 60 minutes on EAN32
    model = TissueModel(GasMix.nitrox(0.32), CoefficientSet.ZH_L16B)
    model.transition(30.0, 20.0)
    model.stop(60.0)

    schedule = model.plan_deco(9.0)
    print(f"Model: {model}")
    print(f"Ascent ceiling: {model.ascent_ceiling():.2f} m")
    print(f"Leading compartment: {model.leading_compartment() + 1}")
    for stop in schedule.stops:
        print(f"  {stop.depth:4.0f} m  {stop.duration_min:3d} min")
    print(f"TTS: {schedule.tts:.1f} min")
