"""
Reference host mesh for driving explicit source terms over blocks.

UniformMesh is a minimal stand-in for the fluid solver that normally owns the
blocks: it partitions a Cartesian grid into equal MeshBlocks, exposes the
capability flags (self-gravity, FFT) the problem setup checks, stores the
gravity constants it is given, and invokes the enrolled explicit source
function once per block per sub-step. It never computes fluxes; after each
sub-step it only refreshes the primitive variables from the conserved ones.

Blocks share no data, so a sub-step may be spread over a thread pool; the
result is identical to the serial loop.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import numpy as np

from coolturb.core.block import IDN, IEN, IM1, IM2, IM3, IPR, IVX, IVY, IVZ, MeshBlock
from coolturb.core.interfaces import MeshHost, SourceFunction


class UniformMesh(MeshHost):
    """
    Uniform Cartesian mesh split into equal blocks.

    Parameters
    ----------
    nx : tuple of int
        Total owned cells (nx1, nx2, nx3).
    block_size : tuple of int, optional
        Cells per block along each direction; must divide ``nx``
        (default: one block covering the mesh).
    nghost : int, optional
        Ghost zones per side (default 2).
    gamma : float, optional
        Adiabatic index (default 5/3).
    non_barotropic : bool, optional
        Whether blocks carry an energy equation (default True).
    self_gravity : bool, optional
        Pretend the host has a self-gravity solver (default False).
    fft : bool, optional
        Pretend the host has FFT support (default False).
    dx : tuple of float, optional
        Cell widths in cm (default (1, 1, 1)).
    verbose : bool, optional
        Print progress messages (default True).

    Attributes
    ----------
    time : float
        Current simulation time.
    ncycle : int
        Completed sub-steps.
    four_pi_G : float or None
        Value forwarded by the setup when self-gravity is enabled.
    grav_threshold : float or None
        Gravity threshold forwarded by the setup.
    turb_flag : int
        Turbulence mode recorded by the setup.
    """

    def __init__(
        self,
        nx: Tuple[int, int, int],
        block_size: Optional[Tuple[int, int, int]] = None,
        nghost: int = 2,
        gamma: float = 5.0 / 3.0,
        non_barotropic: bool = True,
        self_gravity: bool = False,
        fft: bool = False,
        dx: Tuple[float, float, float] = (1.0, 1.0, 1.0),
        verbose: bool = True,
    ):
        nx = tuple(int(n) for n in nx)
        block_size = tuple(int(n) for n in block_size) if block_size is not None else nx
        if len(nx) != 3 or len(block_size) != 3:
            raise ValueError("nx and block_size must have three entries")
        for n, b in zip(nx, block_size):
            if b < 1 or n < 1 or n % b != 0:
                raise ValueError(f"block_size {block_size} must evenly divide mesh size {nx}")

        self.nx = nx
        self.block_size = block_size
        self.gamma = float(gamma)
        self.verbose = verbose

        self._self_gravity = bool(self_gravity)
        self._fft = bool(fft)
        self._source: Optional[SourceFunction] = None

        self.time = 0.0
        self.ncycle = 0
        self.four_pi_G: Optional[float] = None
        self.grav_threshold: Optional[float] = None
        self.turb_flag = 0

        nblocks = [n // b for n, b in zip(nx, block_size)]
        self._blocks: List[MeshBlock] = []
        gid = 0
        for _k in range(nblocks[2]):
            for _j in range(nblocks[1]):
                for _i in range(nblocks[0]):
                    self._blocks.append(MeshBlock(
                        *block_size,
                        nghost=nghost,
                        non_barotropic=non_barotropic,
                        gamma=gamma,
                        gid=gid,
                        dx=dx,
                    ))
                    gid += 1

    # --- MeshHost interface ---

    @property
    def self_gravity_enabled(self) -> bool:
        return self._self_gravity

    @property
    def fft_enabled(self) -> bool:
        return self._fft

    @property
    def blocks(self) -> List[MeshBlock]:
        return self._blocks

    @property
    def user_explicit_source(self) -> Optional[SourceFunction]:
        return self._source

    def set_four_pi_G(self, four_pi_G: float) -> None:
        if not self._self_gravity:
            raise RuntimeError("set_four_pi_G called on a mesh without self-gravity")
        self.four_pi_G = float(four_pi_G)

    def set_gravity_threshold(self, eps: float) -> None:
        if not self._self_gravity:
            raise RuntimeError("set_gravity_threshold called on a mesh without self-gravity")
        self.grav_threshold = float(eps)

    def enroll_user_explicit_source_function(self, func: SourceFunction) -> None:
        if not callable(func):
            raise TypeError(f"Explicit source function must be callable, got {type(func).__name__}")
        self._source = func
        self._log(f"Enrolled explicit source term: {func!r}")

    # --- driving ---

    def _log(self, message: str):
        """Log message if verbose."""
        if self.verbose:
            print(f"[{self.time:.4e}] {message}")

    def initialize(self, generator) -> None:
        """Apply a per-block initialiser, e.g. ``lambda b: problem_generator(b, pin)``."""
        for block in self._blocks:
            generator(block)
        self._log(f"Initialized {len(self._blocks)} block(s) of {self.block_size} cells")

    def _apply_source(self, block: MeshBlock, dt: float) -> None:
        self._source(block, self.time, dt, block.prim, block.prim_scalar,
                     block.bcc, block.cons, block.cons_scalar)
        conserved_to_primitive(block)

    def step(self, dt: float, n_workers: int = 1) -> None:
        """
        Advance one sub-step: apply the source term to every block.

        Parameters
        ----------
        dt : float
            Sub-step size.
        n_workers : int, optional
            Threads used to process blocks concurrently (default 1, serial).
        """
        if not np.isfinite(dt) or dt < 0.0:
            raise ValueError(f"Timestep must be finite and non-negative, got dt={dt}")

        if self._source is not None:
            if n_workers > 1 and len(self._blocks) > 1:
                with ThreadPoolExecutor(max_workers=n_workers) as pool:
                    # list() re-raises the first exception from any block
                    list(pool.map(lambda b: self._apply_source(b, dt), self._blocks))
            else:
                for block in self._blocks:
                    self._apply_source(block, dt)

        self.time += dt
        self.ncycle += 1

    def run(self, n_steps: int, dt: float, n_workers: int = 1,
            log_interval: int = 0) -> Dict[str, float]:
        """
        Take ``n_steps`` sub-steps of size ``dt``.

        Returns
        -------
        summary : Dict[str, float]
            Total energy before and after, and the elapsed simulation time.
        """
        e_start = self.total_energy()
        for _ in range(n_steps):
            self.step(dt, n_workers=n_workers)
            if log_interval and self.ncycle % log_interval == 0:
                self._log(f"cycle={self.ncycle} E_tot={self.total_energy():.6e}")

        summary = {
            'energy_start': e_start,
            'energy_end': self.total_energy(),
            'time': self.time,
        }
        self._log(f"Finished {n_steps} step(s): E_tot {e_start:.6e} -> {summary['energy_end']:.6e}")
        return summary

    def total_energy(self) -> float:
        """Total energy in the owned cells of all blocks [erg] (0 if barotropic)."""
        total = 0.0
        for block in self._blocks:
            if block.non_barotropic:
                total += float(np.sum(block.owned(block.cons[IEN]))) * block.cell_volume
        return total

    def __repr__(self) -> str:
        return (f"UniformMesh(nx={self.nx}, blocks={len(self._blocks)}, "
                f"self_gravity={self._self_gravity}, fft={self._fft})")


def conserved_to_primitive(block: MeshBlock) -> None:
    """
    Refresh ``block.prim`` from ``block.cons`` for an ideal gas.

    p = (γ - 1)(E - ½ |m|² / ρ). No floors are applied, so a negative
    energy produced by an over-large cooling step shows up as a negative
    pressure.
    """
    cons, prim = block.cons, block.prim
    rho = cons[IDN]
    with np.errstate(divide='ignore', invalid='ignore'):
        prim[IDN] = rho
        prim[IVX] = cons[IM1] / rho
        prim[IVY] = cons[IM2] / rho
        prim[IVZ] = cons[IM3] / rho
        if block.non_barotropic:
            kinetic = 0.5 * (cons[IM1]**2 + cons[IM2]**2 + cons[IM3]**2) / rho
            prim[IPR] = (block.gamma - 1.0) * (cons[IEN] - kinetic)
