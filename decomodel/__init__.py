"""
Bühlmann ZH-L16 tissue loading and decompression planning.

Modules:
    - buhlmann_constants: ZH-L16A/B/C coefficient tables and unit conversions
    - gas_exchange: Schreiner/Haldane equations and alveolar pressure
    - gas_mix: Breathing gas fractions and mix classification
    - ceiling: Ascent ceiling math shared by model and planner
    - tissue_model: 16-compartment tissue loading model
    - deco_planner: NDL search and decompression stop planning
    - config: config.yaml loading
"""

from .buhlmann_constants import CoefficientSet, CompartmentCoefficients, lookup
from .gas_mix import GasMix, MixType
from .tissue_model import TissueModel, CompartmentState
from .deco_planner import DecoSchedule, DecoStop, NDL_CAP
from .config import load_effective_config

__all__ = [
    "CoefficientSet",
    "CompartmentCoefficients",
    "lookup",
    "GasMix",
    "MixType",
    "TissueModel",
    "CompartmentState",
    "DecoSchedule",
    "DecoStop",
    "NDL_CAP",
    "load_effective_config",
]
