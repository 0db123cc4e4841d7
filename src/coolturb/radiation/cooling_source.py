"""
Explicit radiative cooling source term for mesh blocks.

Each sub-step the host calls CoolingSource once per block. For every owned
cell the gas temperature is computed from the primitive state,

    T = p / ρ · μ amu / k_B

and, if T exceeds the floor ``temp_goal``, the active cooling law removes
energy from the conserved total energy density. The default law is
optically thin radiative loss,

    E -= dt · ρ² / amu² · Λ(T)

with Λ from the piecewise cooling curve. The update is forward Euler and
operator split: Λ is not re-evaluated after the update and nothing prevents
a large dt from driving the energy negative. Keeping dt below the cooling
time is the host's job (see ``cooling_timestep`` for an estimate).

An alternative relaxation-time law, (T - temp_goal)/τ, is available as an
explicit opt-in strategy only.

Cells with non-positive or non-finite density or pressure have no defined
temperature. They are either skipped (energy left untouched, one warning per
call) or rejected with DegenerateCellError before the block is modified.

References:
    Sutherland & Dopita (1993) - cooling functions for low-density plasma
    Stone et al. (2020) - Athena++ explicit user source terms
"""

import warnings
from typing import Optional

import numpy as np

from coolturb.core.block import IDN, IEN, IPR, MeshBlock
from coolturb.core.constants import DEFAULT_CONSTANTS, PhysicalConstants
from coolturb.core.interfaces import CoolingLaw, NDArrayFloat
from coolturb.radiation.cooling_curve import cooling_lambda

COOLING_MODES = ("radiative_loss", "relaxation")
DEGENERATE_POLICIES = ("skip", "raise")

# Floor of the cool_turb problem; 0.1 K never binds for ionised gas.
DEFAULT_TEMP_GOAL = 0.1
DEFAULT_RELAXATION_TAU = 0.01


class DegenerateCellError(ValueError):
    """Raised when a block contains cells with no defined temperature."""


class RadiativeLossCooling(CoolingLaw):
    """
    Optically thin radiative loss, dE = dt · ρ² / amu² · Λ(T).

    Parameters
    ----------
    constants : PhysicalConstants, optional
        Provides the atomic mass unit used to turn ρ into a number density.
    """

    def __init__(self, constants: PhysicalConstants = DEFAULT_CONSTANTS):
        self.constants = constants

    @property
    def name(self) -> str:
        return "radiative_loss"

    def energy_decrement(
        self,
        density: NDArrayFloat,
        temperature: NDArrayFloat,
        dt: float,
        gamma: float,
        temp_goal: float,
    ) -> NDArrayFloat:
        amu = self.constants.amu
        lam = cooling_lambda(temperature)
        return dt * density * density / amu / amu * lam

    def __repr__(self) -> str:
        return f"RadiativeLossCooling(constants={self.constants})"


class RelaxationCooling(CoolingLaw):
    """
    Newtonian relaxation towards the floor temperature on a timescale τ.

    dE = dt / τ · ρ · (T - temp_goal) / (γ - 1)

    Only used when selected explicitly (``mode="relaxation"``).

    Parameters
    ----------
    tau : float
        Relaxation timescale in the same time units as dt.
    """

    def __init__(self, tau: float = DEFAULT_RELAXATION_TAU):
        if not tau > 0.0:
            raise ValueError(f"Relaxation timescale tau must be > 0, got {tau}")
        self.tau = float(tau)

    @property
    def name(self) -> str:
        return "relaxation"

    def energy_decrement(
        self,
        density: NDArrayFloat,
        temperature: NDArrayFloat,
        dt: float,
        gamma: float,
        temp_goal: float,
    ) -> NDArrayFloat:
        return dt / self.tau * density * (temperature - temp_goal) / (gamma - 1.0)

    def __repr__(self) -> str:
        return f"RelaxationCooling(tau={self.tau})"


def make_cooling_law(
    mode: str = "radiative_loss",
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
    tau: float = DEFAULT_RELAXATION_TAU,
) -> CoolingLaw:
    """
    Build a cooling law from its tag.

    Parameters
    ----------
    mode : str
        "radiative_loss" (default) or "relaxation".
    constants : PhysicalConstants
        Shared constants (radiative loss only).
    tau : float
        Relaxation timescale (relaxation only).
    """
    if mode == "radiative_loss":
        return RadiativeLossCooling(constants)
    elif mode == "relaxation":
        return RelaxationCooling(tau)
    raise ValueError(f"Invalid cooling mode: {mode}. Must be one of {list(COOLING_MODES)}")


class CoolingSource:
    """
    Per-block explicit cooling update with the host source-term signature.

    Parameters
    ----------
    temp_goal : float, optional
        Temperature floor [K]; cells at or below it are left untouched
        (default 0.1).
    law : CoolingLaw, optional
        Cooling prescription (default RadiativeLossCooling with ``constants``).
    constants : PhysicalConstants, optional
        Shared μ, k_B, amu used for the temperature (default DEFAULT_CONSTANTS).
    degenerate_cells : str, optional
        "skip" (default) or "raise"; see module docstring.

    Notes
    -----
    Instances hold configuration only. Calls for different blocks share no
    mutable state and can run concurrently.
    """

    def __init__(
        self,
        temp_goal: float = DEFAULT_TEMP_GOAL,
        law: Optional[CoolingLaw] = None,
        constants: PhysicalConstants = DEFAULT_CONSTANTS,
        degenerate_cells: str = "skip",
    ):
        if degenerate_cells not in DEGENERATE_POLICIES:
            raise ValueError(
                f"Invalid degenerate_cells policy: {degenerate_cells}. "
                f"Must be one of {list(DEGENERATE_POLICIES)}"
            )
        if not np.isfinite(temp_goal):
            raise ValueError(f"temp_goal must be finite, got {temp_goal}")

        self.temp_goal = float(temp_goal)
        self.constants = constants
        self.law = law if law is not None else RadiativeLossCooling(constants)
        self.degenerate_cells = degenerate_cells

    def __call__(
        self,
        block: MeshBlock,
        time: float,
        dt: float,
        prim: NDArrayFloat,
        prim_scalar: NDArrayFloat,
        bcc: NDArrayFloat,
        cons: NDArrayFloat,
        cons_scalar: NDArrayFloat,
    ) -> None:
        """
        Subtract one sub-step of cooling from ``cons[IEN]`` over the owned cells.

        Parameters
        ----------
        block : MeshBlock
            Block being updated; supplies the owned index range and gamma.
        time : float
            Current simulation time (unused).
        dt : float
            Sub-step size.
        prim : NDArrayFloat, shape (NHYDRO, nk, nj, ni)
            Primitive variables, read only.
        prim_scalar, bcc : NDArrayFloat
            Passive scalars and cell-centred field (unused).
        cons : NDArrayFloat, shape (NHYDRO, nk, nj, ni)
            Conserved variables; only the IEN component is modified.
        cons_scalar : NDArrayFloat
            Conserved passive scalars (unused).
        """
        if not block.non_barotropic:
            return

        idx = block.owned_slice
        density = prim[(IDN,) + idx]
        pressure = prim[(IPR,) + idx]
        energy = cons[(IEN,) + idx]

        cooling = self._cooling_mask(density, pressure, block)
        if not np.any(cooling):
            return

        rho = density[cooling]
        temperature = self.constants.temperature(rho, pressure[cooling])
        dE = self.law.energy_decrement(rho, temperature, dt, block.gamma, self.temp_goal)
        energy[cooling] -= dE

    def _cooling_mask(self, density: NDArrayFloat, pressure: NDArrayFloat,
                      block: Optional[MeshBlock] = None) -> NDArrayFloat:
        """Cells with a defined temperature above the floor."""
        valid = (np.isfinite(density) & np.isfinite(pressure)
                 & (density > 0.0) & (pressure > 0.0))

        n_bad = int(valid.size - np.count_nonzero(valid))
        if n_bad:
            where = f" in block {block.gid}" if block is not None else ""
            message = (f"{n_bad} cell(s){where} have non-positive or non-finite "
                       "density/pressure; temperature undefined")
            if self.degenerate_cells == "raise":
                raise DegenerateCellError(message)
            warnings.warn(f"{message}, skipping cooling for them", RuntimeWarning)

        temperature = np.zeros_like(density, dtype=np.float64)
        temperature[valid] = self.constants.temperature(density[valid], pressure[valid])
        return valid & (temperature > self.temp_goal)

    def temperature(self, density: NDArrayFloat, pressure: NDArrayFloat) -> NDArrayFloat:
        """Temperature with the same constants as the cooling update."""
        return self.constants.temperature(density, pressure)

    def energy_loss_rate(
        self,
        density: NDArrayFloat,
        pressure: NDArrayFloat,
        gamma: float = 5.0 / 3.0,
    ) -> NDArrayFloat:
        """
        Instantaneous cooling rate dE/dt per unit volume (≤ 0).

        Zero for cells at or below the floor and for degenerate cells.
        """
        density = np.asarray(density, dtype=np.float64)
        pressure = np.asarray(pressure, dtype=np.float64)

        rate = np.zeros(np.broadcast(density, pressure).shape, dtype=np.float64)
        density, pressure = np.broadcast_arrays(density, pressure)
        cooling = self._cooling_mask(density, pressure)
        if np.any(cooling):
            rho = density[cooling]
            temperature = self.constants.temperature(rho, pressure[cooling])
            rate[cooling] = -self.law.energy_decrement(rho, temperature, 1.0, gamma, self.temp_goal)
        return rate

    def luminosity(self, block: MeshBlock) -> float:
        """
        Total radiated power from the owned cells of ``block`` [erg/s].

        L = -Σ dE/dt · V_cell
        """
        if not block.non_barotropic:
            return 0.0
        rate = self.energy_loss_rate(
            block.owned(block.prim[IDN]), block.owned(block.prim[IPR]), block.gamma
        )
        return float(-np.sum(rate) * block.cell_volume)

    def cooling_timestep(self, block: MeshBlock, safety: float = 0.1) -> float:
        """
        Estimate the largest stable explicit cooling sub-step for ``block``.

        dt_cool = safety · min(e_int / |dE/dt|) over cooling cells, with
        e_int = p / (γ - 1). Returns inf when no cell cools. The source term
        never applies this limit itself.
        """
        if not safety > 0.0:
            raise ValueError(f"safety must be > 0, got {safety}")
        if not block.non_barotropic:
            return float("inf")

        pressure = block.owned(block.prim[IPR])
        rate = self.energy_loss_rate(block.owned(block.prim[IDN]), pressure, block.gamma)
        cooling = rate < 0.0
        if not np.any(cooling):
            return float("inf")

        e_int = pressure[cooling] / (block.gamma - 1.0)
        return float(safety * np.min(e_int / np.abs(rate[cooling])))

    def __repr__(self) -> str:
        return (f"CoolingSource(law={self.law.name}, temp_goal={self.temp_goal}, "
                f"degenerate_cells={self.degenerate_cells})")
