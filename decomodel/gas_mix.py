"""
Breathing gas mixtures.

A gas mix is validated once, when it is constructed. The tissue model trusts
the fractions it is handed.
"""

from dataclasses import dataclass
from enum import Enum

from .buhlmann_constants import depth_to_pressure

_SUM_TOLERANCE = 1e-9


class MixType(Enum):
    AIR = "Air"
    HELIOX = "Heliox"
    NITROX = "Nitrox"
    TRIMIX = "Trimix"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GasMix:
    """Breathing gas as fractions of oxygen, nitrogen and helium.

    Either inert gas fraction may be zero (nitrox, heliox, pure oxygen).
    """
    f_o2: float
    f_n2: float
    f_he: float = 0.0

    def __post_init__(self):
        for name in ("f_o2", "f_n2", "f_he"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be in [0, 1.0], got {value}")
        total = self.f_o2 + self.f_n2 + self.f_he
        if abs(total - 1.0) > _SUM_TOLERANCE:
            raise ValueError(f"Gas fractions must sum to 1.0, got {total}")

    @classmethod
    def air(cls) -> "GasMix":
        return cls(f_o2=0.21, f_n2=0.79)

    @classmethod
    def nitrox(cls, f_o2: float) -> "GasMix":
        """Nitrox with the given oxygen fraction; nitrogen makes up the rest."""
        if not (0.21 <= f_o2 <= 1.0):
            raise ValueError(f"Nitrox f_o2 must be in [0.21, 1.0], got {f_o2}")
        return cls(f_o2=f_o2, f_n2=1.0 - f_o2)

    @classmethod
    def trimix(cls, f_o2: float, f_he: float) -> "GasMix":
        """Trimix with the given oxygen and helium fractions."""
        if not (0.21 <= f_o2 <= 0.98):
            raise ValueError(f"Trimix f_o2 must be in [0.21, 0.98], got {f_o2}")
        if not (0.01 <= f_he <= 0.78):
            raise ValueError(f"Trimix f_he must be in [0.01, 0.78], got {f_he}")
        if f_o2 + f_he > 1.0:
            raise ValueError(
                f"Trimix f_o2 ({f_o2}) + f_he ({f_he}) must not exceed 1.0"
            )
        return cls(f_o2=f_o2, f_n2=1.0 - (f_he + f_o2), f_he=f_he)

    @classmethod
    def heliox(cls, f_o2: float) -> "GasMix":
        """Heliox with the given oxygen fraction; helium makes up the rest."""
        if not (0.21 <= f_o2 < 0.99):
            raise ValueError(f"Heliox f_o2 must be in [0.21, 0.99), got {f_o2}")
        return cls(f_o2=f_o2, f_n2=0.0, f_he=1.0 - f_o2)

    @property
    def mix_type(self) -> MixType:
        if self.f_o2 == 0.21 and self.f_n2 == 0.79 and self.f_he == 0.0:
            return MixType.AIR
        if self.f_he > 0.0:
            if self.f_n2 == 0.0:
                return MixType.HELIOX
            return MixType.TRIMIX
        return MixType.NITROX

    def pp_o2(self, depth_m: float) -> float:
        """Partial pressure of oxygen (bar) at depth."""
        return depth_to_pressure(abs(depth_m)) * self.f_o2

    def pp_n2(self, depth_m: float) -> float:
        """Partial pressure of nitrogen (bar) at depth."""
        return depth_to_pressure(abs(depth_m)) * self.f_n2

    def pp_he(self, depth_m: float) -> float:
        """Partial pressure of helium (bar) at depth."""
        return depth_to_pressure(abs(depth_m)) * self.f_he

    def __str__(self) -> str:
        o2 = int(round(self.f_o2 * 100))
        he = int(round(self.f_he * 100))
        if self.mix_type == MixType.TRIMIX:
            return f"Trimix {o2}/{he}"
        if self.mix_type == MixType.HELIOX:
            return f"Heliox {o2}/{he}"
        if self.mix_type == MixType.AIR:
            return "Air"
        return f"EAN{o2}"
