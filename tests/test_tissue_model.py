"""
Tests for the 16-compartment tissue loading model.

Reference compartment pressures were computed independently (spreadsheet)
for two multi-step profiles.
"""

import numpy as np
import pytest

from decomodel.buhlmann_constants import (
    ATM_PRESSURE,
    NUM_COMPARTMENTS,
    WATER_VAPOR_PRESSURE,
    CoefficientSet,
    coefficient_arrays,
)
from decomodel.gas_mix import GasMix
from decomodel.tissue_model import CompartmentState, TissueModel

EAN32 = GasMix.nitrox(0.32)
TRIMIX_21_35 = GasMix.trimix(0.21, 0.35)

SURFACE_N2 = 0.79 * (1.0 - WATER_VAPOR_PRESSURE)

# EAN32, ZH-L16B: 30m @ 20m/min
EAN32_AFTER_DESCENT = [
    (0.0, 0.9604734065), (0.0, 0.854935828), (0.0, 0.8148063852),
    (0.0, 0.7911298294), (0.0, 0.7753825758), (0.0, 0.7651780404),
    (0.0, 0.7579497155), (0.0, 0.7528268538), (0.0, 0.7492183981),
    (0.0, 0.7470135324), (0.0, 0.7455876214), (0.0, 0.744481901),
    (0.0, 0.7436208648), (0.0, 0.7429409417), (0.0, 0.742411625),
    (0.0, 0.7419991062),
]

# ... 20 min, ascent to 5m @ 9m/min, 3 min, ascent to surface @ 9m/min
EAN32_AT_SURFACE = [
    (0.0, 1.672296857), (0.0, 1.893536995), (0.0, 1.833359353),
    (0.0, 1.68378254), (0.0, 1.505220325), (0.0, 1.343033018),
    (0.0, 1.200816721), (0.0, 1.084189877), (0.0, 0.9933195009),
    (0.0, 0.9339951474), (0.0, 0.8940232746), (0.0, 0.8621325456),
    (0.0, 0.8367460716), (0.0, 0.8163517305), (0.0, 0.8002596335),
    (0.0, 0.7875864217),
]

# Trimix 21/35, ZH-L16C: 28m @ 12m/min
TRIMIX_AFTER_DESCENT = [
    (0.594200479, 0.8500272426), (0.357260812, 0.7969987678),
    (0.2454398644, 0.7770555484), (0.172881504, 0.7653529845),
    (0.1217401447, 0.7575972655), (0.08741980569, 0.7525835467),
    (0.06246123299, 0.7490379952), (0.0444573127, 0.7465281843),
    (0.03161528562, 0.7447618205), (0.02369476862, 0.7436831392),
    (0.01854668408, 0.7429857936), (0.01454138666, 0.7424451735),
    (0.01141210176, 0.7420242687), (0.00893575019, 0.7416919493),
    (0.007004678942, 0.7414332713), (0.005497387525, 0.7412316916),
]

# ... 26 min, ascent to 5m @ 6m/min, 3 min, ascent to surface @ 6m/min
TRIMIX_AT_SURFACE = [
    (0.5386705562, 0.9955025044), (0.7090384785, 1.19657782),
    (0.8357987022, 1.230418803), (0.913653473, 1.196590753),
    (0.9239177414, 1.129896423), (0.8681834207, 1.058017147),
    (0.7643523167, 0.9891373186), (0.6367408295, 0.9294581259),
    (0.5082831889, 0.8812573392), (0.4096347296, 0.8490641266),
    (0.3363096181, 0.8270701402), (0.2737347642, 0.8093551124),
    (0.2212385896, 0.7951499187), (0.177328413, 0.7836733266),
    (0.1415728293, 0.7745777295), (0.1127108548, 0.7673900486),
]


def assert_compartments(model, expected):
    expected = np.array(expected)
    np.testing.assert_allclose(model.p_he, expected[:, 0], rtol=0, atol=1e-9)
    np.testing.assert_allclose(model.p_n2, expected[:, 1], rtol=0, atol=1e-9)


def snapshot(model):
    return model.compartments, model.ambient_pressure, model.elapsed


class TestInitialState:
    """Fresh model: surface, tissues equilibrated to air."""

    @pytest.mark.parametrize("gas", [GasMix.air(), EAN32, TRIMIX_21_35, GasMix.heliox(0.21)])
    @pytest.mark.parametrize("variant", list(CoefficientSet))
    def test_tissues_saturated_with_air(self, gas, variant):
        model = TissueModel(gas, variant)
        assert len(model.compartments) == NUM_COMPARTMENTS
        for c in model.compartments:
            assert c.p_he == 0.0
            assert c.p_n2 == pytest.approx(SURFACE_N2, abs=1e-15)
        assert SURFACE_N2 == pytest.approx(0.7405, abs=1e-4)

    def test_surface_and_zero_time(self):
        model = TissueModel(EAN32, CoefficientSet.ZH_L16B)
        assert model.ambient_pressure == ATM_PRESSURE
        assert model.depth == 0.0
        assert model.elapsed == 0.0
        assert model.variant is CoefficientSet.ZH_L16B
        assert model.gas_mix is EAN32

    def test_default_variant(self):
        assert TissueModel(GasMix.air()).variant is CoefficientSet.ZH_L16B

    def test_variant_is_read_only(self):
        model = TissueModel(GasMix.air())
        with pytest.raises(AttributeError):
            model.variant = CoefficientSet.ZH_L16C

    def test_reject_non_positive_stop_cap(self):
        with pytest.raises(ValueError, match="max_stop_time must be positive"):
            TissueModel(GasMix.air(), max_stop_time=0)

    def test_compartment_snapshot_is_immutable(self):
        state = TissueModel(GasMix.air()).compartments[0]
        assert isinstance(state, CompartmentState)
        with pytest.raises(Exception):  # FrozenInstanceError
            state.p_n2 = 1.0


class TestReferenceProfiles:
    """Multi-step profiles against independently computed pressures."""

    def test_ean32_zhl16b(self):
        model = TissueModel(EAN32, CoefficientSet.ZH_L16B)
        model.transition(30.0, 20.0)
        assert_compartments(model, EAN32_AFTER_DESCENT)

        model.stop(20.0)
        model.transition(5.0, 9.0)
        model.stop(3.0)
        model.transition(0.0, 9.0)
        assert_compartments(model, EAN32_AT_SURFACE)

    def test_trimix_zhl16c(self):
        model = TissueModel(TRIMIX_21_35, CoefficientSet.ZH_L16C)
        model.transition(28.0, 12.0)
        assert_compartments(model, TRIMIX_AFTER_DESCENT)

        model.stop(26.0)
        model.transition(5.0, 6.0)
        model.stop(3.0)
        model.transition(0.0, 6.0)
        assert_compartments(model, TRIMIX_AT_SURFACE)


class TestTransitionAndStop:
    """Bookkeeping of pressure and elapsed time."""

    def test_elapsed_time_accumulates(self):
        model = TissueModel(EAN32)
        model.transition(30.0, 20.0)
        assert model.elapsed == pytest.approx(1.5)
        assert model.ambient_pressure == pytest.approx(4.0)

        model.stop(20.0)
        assert model.elapsed == pytest.approx(21.5)
        assert model.ambient_pressure == pytest.approx(4.0)

        model.transition(0.0, 9.0)
        assert model.elapsed == pytest.approx(21.5 + 30.0 / 9.0)
        assert model.ambient_pressure == ATM_PRESSURE

    def test_default_rates_by_direction(self):
        model = TissueModel(EAN32, descent_rate=20.0, ascent_rate=9.0)
        model.transition(30.0)
        assert model.elapsed == pytest.approx(1.5)
        model.transition(0.0)
        assert model.elapsed == pytest.approx(1.5 + 30.0 / 9.0)

    def test_reject_zero_default_rate(self):
        with pytest.raises(ValueError, match="Rates must be non-zero"):
            TissueModel(EAN32, ascent_rate=0.0)

    def test_rate_sign_is_ignored(self):
        up = TissueModel(EAN32)
        up.transition(30.0, 20.0)
        down = up.copy()

        up.transition(9.0, 9.0)
        down.transition(9.0, -9.0)
        np.testing.assert_array_equal(up.p_n2, down.p_n2)
        assert up.elapsed == down.elapsed

    def test_same_depth_is_a_no_op(self):
        model = TissueModel(EAN32)
        model.transition(20.0, 20.0)
        before = snapshot(model)

        model.transition(20.0, 20.0)
        model.transition(20.0, 0.0)
        assert snapshot(model) == before

    def test_zero_rate_depth_change_rejected(self):
        model = TissueModel(EAN32)
        with pytest.raises(ValueError, match="zero rate"):
            model.transition(10.0, 0.0)
        assert model.elapsed == 0.0

    def test_zero_length_stop(self):
        model = TissueModel(EAN32)
        model.transition(30.0, 20.0)
        before = snapshot(model)
        model.stop(0.0)
        assert snapshot(model) == before

    def test_stop_loads_tissues(self):
        model = TissueModel(EAN32)
        model.transition(30.0, 20.0)
        before = model.p_n2.copy()
        model.stop(10.0)
        assert np.all(model.p_n2 > before)
        assert np.all(model.p_he == 0.0)

    def test_round_trip_is_not_reversible(self):
        """Going up and back down leaves different loading than staying put."""
        stayed = TissueModel(EAN32)
        stayed.transition(30.0, 20.0)
        stayed.stop(10.0)

        bounced = stayed.copy()
        bounced.transition(10.0, 9.0)
        bounced.transition(30.0, 20.0)

        assert bounced.ambient_pressure == stayed.ambient_pressure
        assert bounced.elapsed > stayed.elapsed
        assert not np.allclose(bounced.p_n2, stayed.p_n2, rtol=0, atol=1e-6)


class TestCopy:
    """Copies are fully independent of the original."""

    def test_copy_has_same_state(self):
        model = TissueModel(TRIMIX_21_35, CoefficientSet.ZH_L16C)
        model.transition(28.0, 12.0)
        clone = model.copy()
        assert snapshot(clone) == snapshot(model)
        assert clone.variant is model.variant
        assert clone.gas_mix is model.gas_mix
        assert clone.max_stop_time == model.max_stop_time

    def test_no_shared_compartment_storage(self):
        model = TissueModel(TRIMIX_21_35, CoefficientSet.ZH_L16C)
        clone = model.copy()
        assert not np.shares_memory(clone.p_n2, model.p_n2)
        assert not np.shares_memory(clone.p_he, model.p_he)

    def test_copy_keeps_subclass(self):
        class LoggedModel(TissueModel):
            pass

        model = LoggedModel(EAN32, descent_rate=15.0, ascent_rate=6.0)
        clone = model.copy()
        assert type(clone) is LoggedModel
        assert (clone.descent_rate, clone.ascent_rate) == (15.0, 6.0)

    def test_mutating_copy_leaves_original(self):
        model = TissueModel(TRIMIX_21_35, CoefficientSet.ZH_L16C)
        model.transition(28.0, 12.0)
        before = snapshot(model)

        clone = model.copy()
        clone.stop(30.0)
        clone.transition(5.0, 9.0)
        assert snapshot(model) == before


class TestAscentCeiling:
    """Ceiling and NDL after descent and bottom time."""

    @pytest.mark.parametrize(
        "gas, variant, rate, depth, bottom_time, ceiling, ndl",
        [
            (EAN32, CoefficientSet.ZH_L16B, 20.0, 30.0, 20.0, -1.172073717, 6),
            (EAN32, CoefficientSet.ZH_L16B, 20.0, 30.0, 30.0, 0.5636003878, 0),
            (EAN32, CoefficientSet.ZH_L16B, 20.0, 10.0, 1.0, -5.090898233, 60),
            (EAN32, CoefficientSet.ZH_L16B, 20.0, 24.0, 25.0, -2.510879382, 24),
            (TRIMIX_21_35, CoefficientSet.ZH_L16C, 9.0, 26.0, 10.0, -0.8575469199, 2),
            (TRIMIX_21_35, CoefficientSet.ZH_L16C, 9.0, 18.0, 20.0, -1.597315895, 14),
            (TRIMIX_21_35, CoefficientSet.ZH_L16C, 9.0, 12.0, 45.0, -1.933904326, 60),
            (TRIMIX_21_35, CoefficientSet.ZH_L16C, 9.0, 24.0, 27.0, 2.166049527, 0),
        ],
    )
    def test_ceiling_and_ndl(self, gas, variant, rate, depth, bottom_time, ceiling, ndl):
        model = TissueModel(gas, variant)
        model.transition(depth, rate)
        model.stop(bottom_time)

        assert model.ascent_ceiling() == pytest.approx(ceiling, abs=1e-8)
        assert model.ndl() == ndl

    def test_fresh_model_can_surface(self):
        model = TissueModel(GasMix.air())
        assert model.ascent_ceiling() < 0.0
        assert model.first_deco_stop() <= 0.0

    def test_ceiling_pressure_and_depth_agree(self):
        model = TissueModel(EAN32)
        model.transition(30.0, 20.0)
        model.stop(60.0)
        assert model.ceiling_pressure() == pytest.approx(np.max(model.compartment_ceilings()))
        assert model.ascent_ceiling() == pytest.approx((model.ceiling_pressure() - 1.0) * 10.0)

    def test_nitrogen_coefficients_for_trimix(self):
        model = TissueModel(TRIMIX_21_35, CoefficientSet.ZH_L16C)
        model.transition(45.0, 20.0)
        coefs = coefficient_arrays(CoefficientSet.ZH_L16C)
        expected = ((model.p_he + model.p_n2) - coefs.n2_a) * coefs.n2_b
        np.testing.assert_allclose(model.compartment_ceilings(), expected)

    def test_helium_coefficients_for_heliox(self):
        model = TissueModel(GasMix.heliox(0.21), CoefficientSet.ZH_L16C)
        model.transition(45.0, 20.0)
        model.stop(10.0)
        coefs = coefficient_arrays(CoefficientSet.ZH_L16C)
        expected = ((model.p_he + model.p_n2) - coefs.he_a) * coefs.he_b
        np.testing.assert_allclose(model.compartment_ceilings(), expected)

    def test_leading_compartment(self):
        model = TissueModel(GasMix.air())
        # At surface saturation the slowest compartment has the highest tolerance
        assert model.leading_compartment() == 15

        model.transition(40.0, 20.0)
        model.stop(25.0)
        assert model.leading_compartment() == int(np.argmax(model.compartment_ceilings()))

    @pytest.mark.parametrize(
        "gas, variant, depth, bottom_time, first_stop",
        [
            (EAN32, CoefficientSet.ZH_L16B, 30.0, 60.0, 6.0),
            (TRIMIX_21_35, CoefficientSet.ZH_L16C, 45.0, 22.0, 12.0),
            (GasMix.air(), CoefficientSet.ZH_L16B, 40.0, 25.0, 9.0),
        ],
    )
    def test_first_deco_stop(self, gas, variant, depth, bottom_time, first_stop):
        model = TissueModel(gas, variant)
        model.transition(depth, 20.0)
        model.stop(bottom_time)
        assert model.first_deco_stop() == first_stop
        assert model.ascent_ceiling() > first_stop - 3.0


class TestRepr:
    def test_repr(self):
        model = TissueModel(EAN32, CoefficientSet.ZH_L16B)
        model.transition(30.0, 20.0)
        assert repr(model) == "TissueModel(EAN32, ZH-L16B, depth=30.0m, elapsed=1.5min)"
