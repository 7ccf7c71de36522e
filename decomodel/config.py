"""
Model configuration loaded from config.yaml.

Resolves the coefficient variant, breathing gas, descent/ascent rates and the
planner's per-stop cap, falling back to built-in defaults for anything the
file leaves out.
"""

import logging
import os

import yaml

from .buhlmann_constants import CoefficientSet
from .deco_planner import ASCENT_RATE, DESCENT_RATE, MAX_STOP_TIME
from .gas_mix import GasMix

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), "config.yaml"
)


def _gas_from_config(gas_cfg: dict) -> GasMix:
    """Build a GasMix from the `gas` section (f_o2, f_he)."""
    f_o2 = float(gas_cfg.get("f_o2", 0.21))
    f_he = float(gas_cfg.get("f_he", 0.0))
    if f_he == 0.0:
        if f_o2 == 0.21:
            return GasMix.air()
        return GasMix.nitrox(f_o2)
    if abs(f_o2 + f_he - 1.0) < 1e-9:
        return GasMix.heliox(f_o2)
    return GasMix.trimix(f_o2, f_he)


def load_effective_config(
    variant_override: str = None,
    config_path: str = None,
) -> dict:
    """Load configuration from config.yaml with optional variant override.

    Returns a dict with resolved settings:
        variant:         CoefficientSet instance
        gas_mix:         GasMix instance
        descent_rate:    float (m/min)
        ascent_rate:     float (m/min)
        max_stop_time:   int (minutes)
        config_path:     str (resolved path)
        variant_source:  'override' | 'config' | 'default'

    Raises:
        ValueError: on an unknown variant or an invalid gas mix
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    # Defaults
    variant = CoefficientSet.ZH_L16B
    variant_source = "default"
    gas_mix = GasMix.air()
    descent_rate = DESCENT_RATE
    ascent_rate = ASCENT_RATE
    max_stop_time = MAX_STOP_TIME

    if os.path.exists(config_path):
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        model_cfg = config.get("model", {})
        if "variant" in model_cfg:
            variant = CoefficientSet.parse(model_cfg["variant"])
            variant_source = "config"

        gas_cfg = config.get("gas", {})
        if gas_cfg:
            gas_mix = _gas_from_config(gas_cfg)

        rates_cfg = config.get("rates", {})
        descent_rate = float(rates_cfg.get("descent_rate", descent_rate))
        ascent_rate = float(rates_cfg.get("ascent_rate", ascent_rate))

        deco_cfg = config.get("deco", {})
        max_stop_time = int(deco_cfg.get("max_stop_time", max_stop_time))
    else:
        logger.debug(f"No config at {config_path}, using defaults")

    if variant_override:
        variant = CoefficientSet.parse(variant_override)
        variant_source = "override"

    logger.info(f"Using {variant} ({variant_source}) with {gas_mix}")

    return {
        "variant": variant,
        "gas_mix": gas_mix,
        "descent_rate": descent_rate,
        "ascent_rate": ascent_rate,
        "max_stop_time": max_stop_time,
        "config_path": config_path,
        "variant_source": variant_source,
    }
