"""
Core module: constants, block storage, host interfaces and problem setup.
"""

from coolturb.core.constants import PhysicalConstants, DEFAULT_CONSTANTS
from coolturb.core.block import (
    MeshBlock,
    IDN, IM1, IM2, IM3, IEN,
    IVX, IVY, IVZ, IPR,
)
from coolturb.core.interfaces import CoolingLaw, ICGenerator, MeshHost, SourceFunction
from coolturb.core.setup import (
    ConfigurationError,
    TURBULENCE_MODES,
    init_user_mesh_data,
    build_cooling_source,
    problem_generator,
    user_work_after_loop,
)
from coolturb.core.mesh import UniformMesh, conserved_to_primitive

__all__ = [
    "PhysicalConstants",
    "DEFAULT_CONSTANTS",
    "MeshBlock",
    "IDN", "IM1", "IM2", "IM3", "IEN",
    "IVX", "IVY", "IVZ", "IPR",
    "CoolingLaw",
    "ICGenerator",
    "MeshHost",
    "SourceFunction",
    "ConfigurationError",
    "TURBULENCE_MODES",
    "init_user_mesh_data",
    "build_cooling_source",
    "problem_generator",
    "user_work_after_loop",
    "UniformMesh",
    "conserved_to_primitive",
]
