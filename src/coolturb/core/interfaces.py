"""
Abstract base classes defining the seams between coolturb and its host solver.

The host owns the mesh, the time integrator and the gravity/turbulence
subsystems. coolturb only needs three things from it, each captured here as an
interface so that a real solver binding and the reference UniformMesh can be
swapped freely:

- CoolingLaw: how much energy a cell loses over a sub-step
- ICGenerator: how a block's initial conserved state is filled
- MeshHost: capability flags, gravity parameters and the explicit
  source-term callback slot
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List

import numpy as np
import numpy.typing as npt

NDArrayFloat = npt.NDArray[np.float64]

# (block, time, dt, prim, prim_scalar, bcc, cons, cons_scalar) -> None
SourceFunction = Callable[
    [Any, float, float, NDArrayFloat, NDArrayFloat, NDArrayFloat, NDArrayFloat, NDArrayFloat],
    None,
]


class CoolingLaw(ABC):
    """
    Abstract base class for optically thin cooling prescriptions.

    Implementations: RadiativeLossCooling (default), RelaxationCooling.
    """

    @abstractmethod
    def energy_decrement(
        self,
        density: NDArrayFloat,
        temperature: NDArrayFloat,
        dt: float,
        gamma: float,
        temp_goal: float,
    ) -> NDArrayFloat:
        """
        Energy density removed from each cell over one sub-step.

        Only called for cells whose temperature exceeds ``temp_goal``.

        Parameters
        ----------
        density : NDArrayFloat
            Mass density ρ [g/cm³].
        temperature : NDArrayFloat
            Gas temperature T [K].
        dt : float
            Sub-step size [s].
        gamma : float
            Adiabatic index of the host EOS.
        temp_goal : float
            Temperature floor [K].

        Returns
        -------
        dE : NDArrayFloat
            Amount to subtract from the total energy density [erg/cm³].
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Tag identifying the cooling law."""
        pass


class ICGenerator(ABC):
    """
    Abstract base class for block initial-condition generators.

    Implementations: UniformMedium.
    """

    @abstractmethod
    def generate(self, block: Any) -> None:
        """
        Fill the conserved (and primitive) arrays of ``block`` in place.

        Parameters
        ----------
        block : MeshBlock
            Block to initialise.
        """
        pass


class MeshHost(ABC):
    """
    Abstract base class for the mesh-owning host solver.

    The host decides whether self-gravity and FFT support exist, stores the
    gravity constants it is given, and invokes the registered explicit source
    function once per block per sub-step.
    """

    turb_flag: int = 0

    @property
    @abstractmethod
    def self_gravity_enabled(self) -> bool:
        """Whether the host was built with a self-gravity solver."""
        pass

    @property
    @abstractmethod
    def fft_enabled(self) -> bool:
        """Whether the host has spectral-transform (FFT) capability."""
        pass

    @abstractmethod
    def set_four_pi_G(self, four_pi_G: float) -> None:
        """Forward 4πG to the gravity subsystem."""
        pass

    @abstractmethod
    def set_gravity_threshold(self, eps: float) -> None:
        """Forward the gravity convergence threshold / softening."""
        pass

    @abstractmethod
    def enroll_user_explicit_source_function(self, func: SourceFunction) -> None:
        """Register the explicit source term invoked per block per sub-step."""
        pass

    @property
    @abstractmethod
    def blocks(self) -> List[Any]:
        """Blocks owned by this process."""
        pass
