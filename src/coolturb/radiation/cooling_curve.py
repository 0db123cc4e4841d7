"""
Piecewise power-law cooling curve for optically thin plasma.

log10 Λ(T) is linear in log10 T on four contiguous segments between the
breakpoints below, constant at the low-temperature end and rising with slope
1/3 per decade beyond 10^9 K. Segments are left-closed/right-open, and the
curve is continuous at every breakpoint.

    log10 T      log10 Λ
    < 4.0        -24.0
    4.0 - 5.0    -24.0 -> -20.5
    5.0 - 7.5    -20.5 -> -22.5
    7.5 - 9.0    -22.5 -> -22.0
    >= 9.0       -22.0 + (log10 T - 9) / 3

Λ is in erg cm³ s⁻¹.
"""

from typing import Union

import numpy as np
import numpy.typing as npt

NDArrayFloat = npt.NDArray[np.float64]
ArrayLike = Union[float, NDArrayFloat]

# (log10 T, log10 Λ) nodes of the piecewise-linear part
COOLING_CURVE_BREAKPOINTS = (
    (4.0, -24.0),
    (5.0, -20.5),
    (7.5, -22.5),
    (9.0, -22.0),
)

LOG_LAMBDA_FLOOR = -24.0
HIGH_T_SLOPE = 3.0  # decades of T per decade of Λ above the last node


def temp_to_lambda(log10T: ArrayLike) -> ArrayLike:
    """
    Evaluate log10 of the cooling coefficient at log10 of the temperature.

    Parameters
    ----------
    log10T : float or NDArrayFloat
        log10 of the temperature in Kelvin. -inf (from T = 0) is accepted and
        maps onto the low-temperature plateau.

    Returns
    -------
    log10Lambda : float or NDArrayFloat
        log10 Λ in erg cm³ s⁻¹. Scalars in, float out; arrays keep their shape.

    Examples
    --------
    >>> temp_to_lambda(6.25)
    -21.5
    >>> temp_to_lambda(12.0)
    -21.0
    """
    x = np.asarray(log10T, dtype=np.float64)

    last_T, last_L = COOLING_CURVE_BREAKPOINTS[-1]
    result = last_L + (x - last_T) / HIGH_T_SLOPE

    nodes = COOLING_CURVE_BREAKPOINTS
    for (lo_T, lo_L), (hi_T, hi_L) in zip(nodes[:-1], nodes[1:]):
        segment = (x >= lo_T) & (x < hi_T)
        result = np.where(segment, lo_L + (hi_L - lo_L) * (x - lo_T) / (hi_T - lo_T), result)

    result = np.where(x < nodes[0][0], LOG_LAMBDA_FLOOR, result)

    if result.ndim == 0:
        return float(result)
    return result


def cooling_lambda(temperature: ArrayLike) -> ArrayLike:
    """
    Cooling coefficient Λ(T) = 10**temp_to_lambda(log10 T) [erg cm³ s⁻¹].

    Temperatures must be positive; zero maps to the plateau value.
    """
    with np.errstate(divide='ignore'):
        log10T = np.log10(np.asarray(temperature, dtype=np.float64))
    lam = np.power(10.0, temp_to_lambda(log10T))
    if np.ndim(lam) == 0:
        return float(lam)
    return lam
