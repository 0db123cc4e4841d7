"""
Uniform, at-rest initial conditions for a mesh block.

Every cell receives the same density and temperature with zero velocity.
Ghost zones are filled as well as the owned range (is..ie, js..je,
ks..ke), so a block is fully defined before the host's first boundary
exchange; the exchange overwrites them with the same uniform values:

    ρ      = rho
    ρ v    = 0
    E      = ρ k_B T / (γ - 1) / μ / amu     (energy equation only)

Barotropic blocks carry no energy slot, so no energy field is written for
them. The primitive arrays are filled consistently (p = ρ k_B T / (μ amu)) so
the first source-term call sees a well-defined state.

The temperature definition matches CoolingSource through the shared
PhysicalConstants instance.
"""

from coolturb.core.block import IDN, IEN, IM1, IM2, IM3, IPR, IVX, IVY, IVZ, MeshBlock
from coolturb.core.constants import DEFAULT_CONSTANTS, PhysicalConstants
from coolturb.core.interfaces import ICGenerator


class UniformMedium(ICGenerator):
    """
    Generate a spatially uniform medium at rest.

    Parameters
    ----------
    rho : float
        Mass density [g/cm³].
    temperature : float
        Gas temperature [K].
    gamma : float
        Adiabatic index.
    constants : PhysicalConstants, optional
        Shared μ, k_B, amu (default DEFAULT_CONSTANTS).
    """

    def __init__(
        self,
        rho: float,
        temperature: float,
        gamma: float,
        constants: PhysicalConstants = DEFAULT_CONSTANTS,
    ):
        if not rho > 0.0:
            raise ValueError(f"Density rho must be > 0, got {rho}")
        if not temperature > 0.0:
            raise ValueError(f"Temperature T must be > 0, got {temperature}")
        if gamma <= 1.0:
            raise ValueError(f"Adiabatic index gamma must be > 1, got {gamma}")

        self.rho = float(rho)
        self.temperature = float(temperature)
        self.gamma = float(gamma)
        self.constants = constants

    @property
    def energy_density(self) -> float:
        """Total (= internal) energy density of the medium [erg/cm³]."""
        return self.constants.energy_density(self.rho, self.temperature, self.gamma)

    @property
    def pressure(self) -> float:
        return self.constants.pressure(self.rho, self.temperature)

    def generate(self, block: MeshBlock) -> None:
        """
        Fill ``block.cons`` and ``block.prim`` with the uniform state,
        ghost zones included.

        Parameters
        ----------
        block : MeshBlock
            Block to initialise in place.
        """
        cons = block.cons
        cons[IDN] = self.rho
        cons[IM1] = 0.0
        cons[IM2] = 0.0
        cons[IM3] = 0.0

        prim = block.prim
        prim[IDN] = self.rho
        prim[IVX] = 0.0
        prim[IVY] = 0.0
        prim[IVZ] = 0.0

        if block.non_barotropic:
            cons[IEN] = self.energy_density
            prim[IPR] = self.pressure

    def __repr__(self) -> str:
        return (f"UniformMedium(rho={self.rho:.3e}, T={self.temperature:.3e}, "
                f"gamma={self.gamma:.4f})")