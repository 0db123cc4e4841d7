"""
Radiation module: cooling curve and explicit cooling source term.
"""

from .cooling_curve import temp_to_lambda, cooling_lambda, COOLING_CURVE_BREAKPOINTS
from .cooling_source import (
    CoolingSource,
    RadiativeLossCooling,
    RelaxationCooling,
    DegenerateCellError,
    make_cooling_law,
    COOLING_MODES,
)

__all__ = [
    "temp_to_lambda",
    "cooling_lambda",
    "COOLING_CURVE_BREAKPOINTS",
    "CoolingSource",
    "RadiativeLossCooling",
    "RelaxationCooling",
    "DegenerateCellError",
    "make_cooling_law",
    "COOLING_MODES",
]
