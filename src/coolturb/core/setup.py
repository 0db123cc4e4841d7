"""
Problem setup: turbulence with optically thin cooling.

Three hooks are called by the host:

- init_user_mesh_data(mesh, pin): once at startup. Forwards self-gravity
  constants, checks that turbulence driving has the FFT support it needs,
  and registers the cooling source term.
- problem_generator(block, pin): once per block. Fills a uniform medium at
  rest.
- user_work_after_loop(mesh, pin): after the main loop. Nothing to do.

The turbulence driver itself lives in the host; only its mode flag is read
here:

    turb_flag = 0  no turbulence
    turb_flag = 1  decaying turbulence
    turb_flag = 2  impulsively driven turbulence
    turb_flag = 3  continuously driven turbulence
"""

from coolturb.config.parameters import ParameterInput
from coolturb.core.block import MeshBlock
from coolturb.core.constants import DEFAULT_CONSTANTS, PhysicalConstants
from coolturb.core.interfaces import MeshHost
from coolturb.ICs.uniform import UniformMedium
from coolturb.radiation.cooling_source import (
    DEFAULT_RELAXATION_TAU,
    DEFAULT_TEMP_GOAL,
    CoolingSource,
    make_cooling_law,
)

TURBULENCE_MODES = {
    0: "disabled",
    1: "decaying",
    2: "impulsively driven",
    3: "continuously driven",
}


class ConfigurationError(RuntimeError):
    """Fatal setup error: the run cannot start with this input on this host."""


def init_user_mesh_data(
    mesh: MeshHost,
    pin: ParameterInput,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
) -> CoolingSource:
    """
    Mesh-level setup, run once before any block is initialised or stepped.

    Parameters
    ----------
    mesh : MeshHost
        Host mesh providing capability flags and the source-term slot.
    pin : ParameterInput
        Run parameters.
    constants : PhysicalConstants, optional
        Shared constants passed on to the cooling source.

    Returns
    -------
    source : CoolingSource
        The source term that was registered with ``mesh``.

    Raises
    ------
    MissingParameterError
        If ``problem.turb_flag`` is missing, or ``problem.four_pi_G`` is
        missing while self-gravity is enabled.
    ConfigurationError
        If ``turb_flag`` is outside 0-3, or non-zero on a host without FFT.
    """
    if mesh.self_gravity_enabled:
        four_pi_G = pin.get_real("problem", "four_pi_G")
        eps = pin.get_or_add_real("problem", "grav_eps", 0.0)
        mesh.set_four_pi_G(four_pi_G)
        mesh.set_gravity_threshold(eps)

    turb_flag = pin.get_integer("problem", "turb_flag")
    if turb_flag not in TURBULENCE_MODES:
        raise ConfigurationError(
            f"### FATAL ERROR in init_user_mesh_data\n"
            f"problem/turb_flag={turb_flag} is invalid; "
            f"must be one of {sorted(TURBULENCE_MODES)}"
        )
    if turb_flag != 0 and not mesh.fft_enabled:
        raise ConfigurationError(
            "### FATAL ERROR in TurbulenceDriver\n"
            "non zero Turbulence flag is set without FFT!"
        )
    mesh.turb_flag = turb_flag

    source = build_cooling_source(pin, constants)
    mesh.enroll_user_explicit_source_function(source)
    return source


def build_cooling_source(
    pin: ParameterInput,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
) -> CoolingSource:
    """
    Build the cooling source from the optional ``<cooling>`` section.

    Missing keys are filled with their defaults (radiative loss, floor 0.1 K,
    skip degenerate cells) and recorded in ``pin``.
    """
    mode = pin.get_or_add_string("cooling", "mode", "radiative_loss")
    temp_goal = pin.get_or_add_real("cooling", "temp_goal", DEFAULT_TEMP_GOAL)
    policy = pin.get_or_add_string("cooling", "degenerate_cells", "skip")

    if mode == "relaxation":
        tau = pin.get_or_add_real("cooling", "tau", DEFAULT_RELAXATION_TAU)
    else:
        tau = DEFAULT_RELAXATION_TAU

    law = make_cooling_law(mode, constants=constants, tau=tau)
    return CoolingSource(
        temp_goal=temp_goal,
        law=law,
        constants=constants,
        degenerate_cells=policy,
    )


def problem_generator(
    block: MeshBlock,
    pin: ParameterInput,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
) -> None:
    """
    Initialise ``block`` as a uniform medium at rest.

    Reads ``problem.rho``, ``problem.T`` and ``hydro.gamma``.
    """
    rho = pin.get_real("problem", "rho")
    T = pin.get_real("problem", "T")
    gamma = pin.get_real("hydro", "gamma")
    UniformMedium(rho, T, gamma, constants).generate(block)


def user_work_after_loop(mesh: MeshHost, pin: ParameterInput) -> None:
    """Post-loop hook; the cooling problem has no final analysis."""
    return None
