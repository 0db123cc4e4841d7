"""
Initial conditions module: uniform medium.
"""

from coolturb.ICs.uniform import UniformMedium

__all__ = ["UniformMedium"]
