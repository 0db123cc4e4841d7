"""
Physical constants shared by the cooling source term and the initial conditions.

Both the temperature used to evaluate the cooling curve and the temperature
used to build the initial energy density are defined through the same
mean molecular weight, Boltzmann constant and atomic mass unit. Keeping them
in one frozen instance passed by reference prevents the two definitions from
drifting apart.

Units are CGS throughout.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np
import numpy.typing as npt

NDArrayFloat = npt.NDArray[np.float64]
ArrayLike = Union[float, NDArrayFloat]


@dataclass(frozen=True)
class PhysicalConstants:
    """
    Immutable set of physical constants for an ionised plasma.

    Attributes
    ----------
    mu : float
        Mean molecular weight (0.62 for fully ionised solar-metallicity gas).
    k_B : float
        Boltzmann constant [erg/K].
    amu : float
        Atomic mass unit [g].
    """
    mu: float = 0.62
    k_B: float = 1.3807e-16
    amu: float = 1.660539e-24

    def __post_init__(self):
        for name in ("mu", "k_B", "amu"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be positive and finite, got {value}")

    @property
    def temperature_factor(self) -> float:
        """Conversion p/ρ -> T, i.e. μ amu / k_B [K g / erg]."""
        return self.mu * self.amu / self.k_B

    def temperature(self, density: ArrayLike, pressure: ArrayLike) -> ArrayLike:
        """
        Gas temperature T = p/ρ · μ amu / k_B.

        No guard against non-positive density; callers that may see
        degenerate cells must mask them first.
        """
        return pressure / density * self.mu * self.amu / self.k_B

    def pressure(self, density: ArrayLike, temperature: ArrayLike) -> ArrayLike:
        """Ideal-gas pressure p = ρ k_B T / (μ amu)."""
        return density * self.k_B * temperature / self.mu / self.amu

    def energy_density(self, density: ArrayLike, temperature: ArrayLike, gamma: float) -> ArrayLike:
        """Internal energy density ρ k_B T / (γ - 1) / μ / amu [erg/cm³]."""
        return density * self.k_B * temperature / (gamma - 1.0) / self.mu / self.amu


DEFAULT_CONSTANTS = PhysicalConstants()
