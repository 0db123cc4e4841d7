"""
coolturb: optically thin radiative cooling for mesh-based fluid solvers.

Provides a piecewise cooling curve, an explicit operator-split cooling source
term with the host's per-block callback signature, a uniform initial
condition built on the same physical constants, and the problem setup hooks
that register them with a host mesh.
"""

__version__ = "1.0.0"
__author__ = "coolturb Dev Team"

# Core imports for convenience
from coolturb.core.interfaces import (
    CoolingLaw,
    ICGenerator,
    MeshHost,
)

__all__ = [
    "CoolingLaw",
    "ICGenerator",
    "MeshHost",
]
