"""
Mesh block storage for primitive and conserved cell state.

A MeshBlock owns a logically Cartesian patch of cells, padded with ghost
zones in every active dimension. Arrays are laid out as (nvar, nk, nj, ni)
so that a single variable over the whole block is ``array[ivar]`` and the
owned region is ``array[..., ks:ke+1, js:je+1, is_:ie+1]``.

Variable ordering follows the usual finite-volume MHD convention:

    conserved : IDN, IM1, IM2, IM3, IEN
    primitive : IDN, IVX, IVY, IVZ, IPR

Barotropic (isothermal) blocks carry no energy slot, so NHYDRO is 4.
"""

from typing import Tuple

import numpy as np
import numpy.typing as npt

NDArrayFloat = npt.NDArray[np.float64]

# Conserved variable indices
IDN = 0
IM1 = 1
IM2 = 2
IM3 = 3
IEN = 4

# Primitive variable indices
IVX = 1
IVY = 2
IVZ = 3
IPR = 4


class MeshBlock:
    """
    Container for one block of cells and its hydro arrays.

    Parameters
    ----------
    nx1, nx2, nx3 : int
        Number of owned cells along each direction. A direction with a single
        cell is treated as inactive and receives no ghost zones.
    nghost : int, optional
        Ghost zones on each side of every active direction (default 2).
    non_barotropic : bool, optional
        Whether the equation of state evolves an energy equation (default True).
    gamma : float, optional
        Adiabatic index of the host EOS (default 5/3).
    gid : int, optional
        Global block id assigned by the mesh (default 0).
    dx : tuple of float, optional
        Cell widths (dx1, dx2, dx3) in cm (default unit cells).

    Attributes
    ----------
    is_, ie, js, je, ks, ke : int
        Inclusive bounds of the owned index range.
    prim : NDArrayFloat, shape (NHYDRO, nk, nj, ni)
        Primitive variables.
    cons : NDArrayFloat, shape (NHYDRO, nk, nj, ni)
        Conserved variables.
    prim_scalar, cons_scalar : NDArrayFloat, shape (0, nk, nj, ni)
        Passive scalar arrays (empty; kept for the callback signature).
    bcc : NDArrayFloat, shape (3, nk, nj, ni)
        Cell-centred magnetic field (zero for pure hydro).
    """

    def __init__(
        self,
        nx1: int,
        nx2: int = 1,
        nx3: int = 1,
        nghost: int = 2,
        non_barotropic: bool = True,
        gamma: float = 5.0 / 3.0,
        gid: int = 0,
        dx: Tuple[float, float, float] = (1.0, 1.0, 1.0),
    ):
        if min(nx1, nx2, nx3) < 1:
            raise ValueError(f"Block dimensions must be >= 1, got ({nx1}, {nx2}, {nx3})")
        if nghost < 0:
            raise ValueError(f"nghost must be >= 0, got {nghost}")
        if gamma <= 1.0:
            raise ValueError(f"Adiabatic index gamma must be > 1, got {gamma}")

        self.gid = gid
        self.nx1, self.nx2, self.nx3 = nx1, nx2, nx3
        self.nghost = nghost
        self.non_barotropic = non_barotropic
        self.gamma = float(gamma)
        self.dx = tuple(float(d) for d in dx)

        ng1 = nghost
        ng2 = nghost if nx2 > 1 else 0
        ng3 = nghost if nx3 > 1 else 0

        self.is_, self.ie = ng1, ng1 + nx1 - 1
        self.js, self.je = ng2, ng2 + nx2 - 1
        self.ks, self.ke = ng3, ng3 + nx3 - 1

        ncells = (nx3 + 2 * ng3, nx2 + 2 * ng2, nx1 + 2 * ng1)

        self.prim = np.zeros((self.nhydro,) + ncells, dtype=np.float64)
        self.cons = np.zeros((self.nhydro,) + ncells, dtype=np.float64)
        self.prim_scalar = np.zeros((0,) + ncells, dtype=np.float64)
        self.cons_scalar = np.zeros((0,) + ncells, dtype=np.float64)
        self.bcc = np.zeros((3,) + ncells, dtype=np.float64)

    @property
    def nhydro(self) -> int:
        """Number of hydro variables (5 with an energy equation, else 4)."""
        return 5 if self.non_barotropic else 4

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Full cell shape (nk, nj, ni) including ghost zones."""
        return self.cons.shape[1:]

    @property
    def cell_volume(self) -> float:
        """Volume of a single cell [cm³]."""
        return self.dx[0] * self.dx[1] * self.dx[2]

    @property
    def n_owned(self) -> int:
        return self.nx1 * self.nx2 * self.nx3

    @property
    def owned_slice(self) -> Tuple[slice, slice, slice]:
        """Index expression selecting the owned (k, j, i) region."""
        return (
            slice(self.ks, self.ke + 1),
            slice(self.js, self.je + 1),
            slice(self.is_, self.ie + 1),
        )

    def owned(self, array: NDArrayFloat) -> NDArrayFloat:
        """
        View of the owned region of a (nvar, nk, nj, ni) or (nk, nj, ni) array.

        The result is a numpy view, so in-place updates write through.
        """
        return array[(Ellipsis,) + self.owned_slice]

    def __repr__(self) -> str:
        return (f"MeshBlock(gid={self.gid}, nx=({self.nx1}, {self.nx2}, {self.nx3}), "
                f"nghost={self.nghost}, non_barotropic={self.non_barotropic})")
