"""
Tests for the explicit cooling source term.

Tests validate:
1. Energy decrement dt · ρ² / amu² · Λ(T) above the floor
2. Bit-for-bit no-op at or below the floor
3. Linear scaling with dt
4. Only the owned IEN cells are modified
5. Degenerate cell policies (skip / raise)
6. Relaxation law only when selected
7. Diagnostics: loss rate, luminosity, cooling timestep
"""

import warnings

import numpy as np
import pytest

from coolturb.core import DEFAULT_CONSTANTS, MeshBlock, IDN, IM1, IEN, IPR
from coolturb.radiation import (
    CoolingSource,
    RadiativeLossCooling,
    RelaxationCooling,
    DegenerateCellError,
    make_cooling_law,
    cooling_lambda,
)

AMU = DEFAULT_CONSTANTS.amu


def make_block(rho, T, nx=(4, 3, 2), energy=1.0, nghost=2):
    """Block with uniform density/temperature and a chosen energy density."""
    block = MeshBlock(*nx, nghost=nghost)
    block.prim[IDN] = rho
    block.prim[IPR] = DEFAULT_CONSTANTS.pressure(rho, T)
    block.cons[IDN] = rho
    block.cons[IEN] = energy
    return block


def apply(source, block, dt):
    source(block, 0.0, dt, block.prim, block.prim_scalar, block.bcc,
           block.cons, block.cons_scalar)


class TestRadiativeLossUpdate:
    """The active density-squared radiative loss."""

    def setup_method(self):
        self.source = CoolingSource()
        self.rho = 1.0e-24
        self.T = 1.0e6

    def test_defaults(self):
        """Default source uses radiative loss with the 0.1 K floor."""
        assert self.source.temp_goal == pytest.approx(0.1)
        assert isinstance(self.source.law, RadiativeLossCooling)
        assert self.source.degenerate_cells == "skip"
        assert self.source.constants is DEFAULT_CONSTANTS

    def test_energy_decrement_formula(self):
        """Post-update energy equals E0 - dt ρ²/amu² Λ(T) exactly."""
        block = make_block(self.rho, self.T, energy=5.0e-10)
        dt = 1.0e6
        apply(self.source, block, dt)

        cells = np.ones(block.owned(block.prim[IDN]).shape, dtype=bool)
        rho = block.owned(block.prim[IDN])[cells]
        T = DEFAULT_CONSTANTS.temperature(rho, block.owned(block.prim[IPR])[cells])
        expected = 5.0e-10 - dt * rho * rho / AMU / AMU * cooling_lambda(T)
        np.testing.assert_array_equal(block.owned(block.cons[IEN])[cells], expected)

    def test_strict_decrease(self):
        """Energy strictly decreases for T > floor, Λ > 0, dt > 0."""
        block = make_block(self.rho, self.T, energy=5.0)
        apply(self.source, block, 1.0e9)
        assert np.all(block.owned(block.cons[IEN]) < 5.0)

    def test_decrement_magnitude(self):
        """Decrement at 10^6 K for a single cell, bit for bit."""
        block = make_block(1.0, 1.0e6, nx=(1, 1, 1), energy=0.0)
        apply(self.source, block, 1.0)
        rho = np.array([1.0])
        T = DEFAULT_CONSTANTS.temperature(rho, np.array([block.prim[IPR][0, 0, 2]]))
        expected = 0.0 - 1.0 * rho * rho / AMU / AMU * cooling_lambda(T)
        assert block.owned(block.cons[IEN])[0, 0, 0] == expected[0]
        assert expected[0] == pytest.approx(-(10.0 ** -21.3) / AMU**2, rel=1e-10)

    def test_dt_scaling(self):
        """Doubling dt doubles the decrement exactly."""
        block1 = make_block(self.rho, self.T, energy=0.0)
        block2 = make_block(self.rho, self.T, energy=0.0)
        apply(self.source, block1, 3.0e5)
        apply(self.source, block2, 6.0e5)
        np.testing.assert_array_equal(block2.cons[IEN], 2.0 * block1.cons[IEN])

    def test_overshoot_not_corrected(self):
        """A very large dt can drive the energy negative; no limiter is applied."""
        block = make_block(self.rho, self.T, energy=1.0e-12)
        apply(self.source, block, 1.0e30)
        assert np.all(block.owned(block.cons[IEN]) < 0.0)

    def test_zero_dt_is_noop(self):
        """dt = 0 leaves energy unchanged."""
        block = make_block(self.rho, self.T, energy=2.5)
        before = block.cons.copy()
        apply(self.source, block, 0.0)
        np.testing.assert_array_equal(block.cons, before)


class TestFloorAndLocality:
    """Cells at or below the floor and cells outside the owned range."""

    def test_below_floor_bit_for_bit(self):
        """T ≤ temp_goal leaves the energy exactly unchanged."""
        block = make_block(1.0, 0.05, energy=0.123456789)
        before = block.cons.copy()
        apply(CoolingSource(), block, 1.0e10)
        np.testing.assert_array_equal(block.cons, before)

    def test_exactly_at_floor_is_noop(self):
        """T == temp_goal is not cooled (strict inequality)."""
        block = make_block(1.0, 1.0, nx=(1, 1, 1), energy=7.0)
        T = DEFAULT_CONSTANTS.temperature(block.prim[IDN], block.prim[IPR])
        source = CoolingSource(temp_goal=float(T[0, 0, 2]))
        apply(source, block, 1.0e10)
        assert block.owned(block.cons[IEN])[0, 0, 0] == 7.0

    def test_mixed_cells(self):
        """Only cells above the floor are cooled."""
        block = make_block(1.0, 1.0e6, nx=(4, 1, 1), energy=1.0)
        cold = DEFAULT_CONSTANTS.pressure(1.0, 0.01)
        block.prim[IPR][0, 0, block.is_ + 1] = cold
        apply(CoolingSource(), block, 1.0e-10)
        energy = block.owned(block.cons[IEN])[0, 0]
        assert energy[1] == 1.0
        assert np.all(np.delete(energy, 1) < 1.0)

    def test_ghost_cells_untouched(self):
        """Ghost zones keep their energy."""
        block = make_block(1.0e-24, 1.0e7, energy=3.0)
        apply(CoolingSource(), block, 1.0e12)
        mask = np.ones(block.shape, dtype=bool)
        mask[block.owned_slice] = False
        assert np.all(block.cons[IEN][mask] == 3.0)

    def test_other_components_untouched(self):
        """Density and momentum are never modified."""
        block = make_block(1.0e-24, 1.0e7, energy=3.0)
        block.cons[IM1] = 0.25
        before = block.cons.copy()
        apply(CoolingSource(), block, 1.0e12)
        np.testing.assert_array_equal(block.cons[:IEN], before[:IEN])

    def test_primitives_read_only(self):
        """Primitive arrays are not modified by the update."""
        block = make_block(1.0e-24, 1.0e7)
        before = block.prim.copy()
        apply(CoolingSource(), block, 1.0e12)
        np.testing.assert_array_equal(block.prim, before)

    def test_barotropic_block_ignored(self):
        """Blocks without an energy slot are left alone."""
        block = MeshBlock(2, 2, 2, non_barotropic=False)
        block.prim[IDN] = 1.0
        before = block.cons.copy()
        apply(CoolingSource(), block, 1.0)
        np.testing.assert_array_equal(block.cons, before)

    def test_uses_passed_arrays(self):
        """The update writes into the cons array it is given."""
        block = make_block(1.0e-24, 1.0e7, energy=3.0)
        cons = block.cons.copy()
        block_before = block.cons.copy()
        CoolingSource()(block, 0.0, 1.0e12, block.prim, block.prim_scalar,
                        block.bcc, cons, block.cons_scalar)
        np.testing.assert_array_equal(block.cons, block_before)
        assert np.all(block.owned(cons[IEN]) < 3.0)


class TestDegenerateCells:
    """Non-positive or non-finite density/pressure."""

    def setup_method(self):
        self.block = make_block(1.0e-24, 1.0e7, nx=(3, 1, 1), energy=2.0)
        i = self.block.is_
        self.block.prim[IDN][0, 0, i] = 0.0
        self.block.prim[IPR][0, 0, i + 1] = -1.0

    def test_skip_policy_leaves_cells_and_warns(self):
        """Degenerate cells keep their energy; healthy cells still cool."""
        with pytest.warns(RuntimeWarning, match="2 cell"):
            apply(CoolingSource(), self.block, 1.0e12)
        energy = self.block.owned(self.block.cons[IEN])[0, 0]
        assert energy[0] == 2.0
        assert energy[1] == 2.0
        assert energy[2] < 2.0

    def test_skip_policy_no_numpy_warnings(self):
        """No floating-point RuntimeWarnings leak besides the policy warning."""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with np.errstate(all='raise'):
                apply(CoolingSource(), self.block, 1.0e12)
        assert len(caught) == 1
        assert "skipping cooling" in str(caught[0].message)

    def test_raise_policy(self):
        """'raise' rejects the block before modifying it."""
        before = self.block.cons.copy()
        with pytest.raises(DegenerateCellError, match="non-positive or non-finite"):
            apply(CoolingSource(degenerate_cells="raise"), self.block, 1.0e12)
        np.testing.assert_array_equal(self.block.cons, before)

    def test_nan_pressure(self):
        """NaN pressure counts as degenerate."""
        block = make_block(1.0e-24, 1.0e7, nx=(1, 1, 1), energy=2.0)
        block.prim[IPR][:] = np.nan
        with pytest.raises(DegenerateCellError):
            apply(CoolingSource(degenerate_cells="raise"), block, 1.0)

    def test_invalid_policy(self):
        """Unknown policy raises ValueError."""
        with pytest.raises(ValueError, match="Invalid degenerate_cells policy"):
            CoolingSource(degenerate_cells="clamp")


class TestCoolingLaws:
    """Swappable cooling laws."""

    def test_make_radiative_loss(self):
        law = make_cooling_law("radiative_loss")
        assert isinstance(law, RadiativeLossCooling)
        assert law.name == "radiative_loss"

    def test_make_relaxation(self):
        law = make_cooling_law("relaxation", tau=0.5)
        assert isinstance(law, RelaxationCooling)
        assert law.tau == pytest.approx(0.5)

    def test_make_invalid(self):
        with pytest.raises(ValueError, match="Invalid cooling mode"):
            make_cooling_law("bremsstrahlung")

    def test_relaxation_tau_positive(self):
        with pytest.raises(ValueError):
            RelaxationCooling(tau=0.0)

    def test_relaxation_update(self):
        """Relaxation law removes dt/τ ρ (T - T_goal)/(γ-1)."""
        block = make_block(2.0, 50.0, nx=(1, 1, 1), energy=0.0)
        source = CoolingSource(temp_goal=10.0, law=RelaxationCooling(tau=0.01))
        apply(source, block, 1.0e-3)

        T = DEFAULT_CONSTANTS.temperature(2.0, block.prim[IPR][0, 0, 2])
        expected = -(1.0e-3 / 0.01 * 2.0 * (T - 10.0) / (block.gamma - 1.0))
        assert block.owned(block.cons[IEN])[0, 0, 0] == pytest.approx(expected, rel=1e-12)

    def test_relaxation_differs_from_default(self):
        """The default law is not the relaxation law."""
        b1 = make_block(1.0, 1.0e6, energy=0.0)
        b2 = make_block(1.0, 1.0e6, energy=0.0)
        apply(CoolingSource(), b1, 1.0)
        apply(CoolingSource(law=RelaxationCooling()), b2, 1.0)
        assert not np.allclose(b1.cons[IEN], b2.cons[IEN])


class TestDiagnostics:
    """Loss rate, luminosity and cooling timestep."""

    def setup_method(self):
        self.source = CoolingSource()
        self.block = make_block(1.0e-24, 1.0e6, nx=(2, 2, 2))
        self.block.dx = (10.0, 10.0, 10.0)

    def test_energy_loss_rate_sign(self):
        """Rate is negative above the floor, zero below."""
        rho = np.array([1.0e-24, 1.0e-24])
        p = DEFAULT_CONSTANTS.pressure(rho, np.array([1.0e6, 0.01]))
        rate = self.source.energy_loss_rate(rho, p)
        assert rate[0] < 0.0
        assert rate[1] == 0.0

    def test_energy_loss_rate_matches_update(self):
        """Rate times dt equals the decrement applied by the source."""
        block = make_block(1.0e-24, 1.0e6, energy=0.0)
        apply(self.source, block, 1.0)
        rate = self.source.energy_loss_rate(block.owned(block.prim[IDN]),
                                            block.owned(block.prim[IPR]))
        np.testing.assert_array_equal(rate, block.owned(block.cons[IEN]))

    def test_luminosity(self):
        """L = Σ |dE/dt| V over owned cells."""
        rate = self.source.energy_loss_rate(1.0e-24, DEFAULT_CONSTANTS.pressure(1.0e-24, 1.0e6))
        L = self.source.luminosity(self.block)
        assert L == pytest.approx(-float(rate) * 8 * 1000.0, rel=1e-12)
        assert L > 0.0

    def test_cooling_timestep(self):
        """dt_cool = safety · e_int / |dE/dt|."""
        p = DEFAULT_CONSTANTS.pressure(1.0e-24, 1.0e6)
        rate = self.source.energy_loss_rate(1.0e-24, p)
        e_int = p / (self.block.gamma - 1.0)
        dt = self.source.cooling_timestep(self.block, safety=0.2)
        assert dt == pytest.approx(0.2 * e_int / abs(float(rate)), rel=1e-12)

    def test_diagnostics_read_block_geometry_and_eos(self):
        """Cell volume and gamma come from the block itself."""
        block = make_block(1.0e-24, 1.0e6, nx=(2, 2, 2))
        L_unit = self.source.luminosity(block)
        assert self.source.luminosity(self.block) == pytest.approx(1000.0 * L_unit, rel=1e-12)

        block_14 = MeshBlock(2, 2, 2, gamma=1.4)
        block_14.prim[:] = block.prim
        # e_int = p / (γ - 1): (5/3 - 1) / (1.4 - 1) = 5/3
        assert self.source.cooling_timestep(block_14) == pytest.approx(
            self.source.cooling_timestep(block) * (2.0 / 3.0) / 0.4, rel=1e-12
        )

    def test_cooling_timestep_no_cooling(self):
        """No cooling cells gives an infinite timestep."""
        block = make_block(1.0, 0.01)
        assert self.source.cooling_timestep(block) == float("inf")

    def test_cooling_timestep_bad_safety(self):
        with pytest.raises(ValueError):
            self.source.cooling_timestep(self.block, safety=0.0)

    def test_repr(self):
        assert "radiative_loss" in repr(self.source)
