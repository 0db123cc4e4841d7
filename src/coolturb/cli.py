"""
Command-line entrypoint for the cooling-turbulence problem.

Loads an input file, runs the problem setup on a UniformMesh, initialises the
uniform medium and applies the cooling source for a number of sub-steps.
Configuration errors (including turbulence requested on a host without
FFT) and invalid --dt or --cfl-cooling values are reported on stderr and
end the run with exit status 1 before any block is stepped.

Usage:
    coolturb-run athinput.cool_turb
    coolturb-run cool_turb.yaml --steps 100 --dt 1e8 --nx 32 32 32 --block-size 16 16 16
    coolturb-run cool_turb.yaml --fft --set problem.turb_flag=3
    coolturb-run --help
"""

import argparse
import math
import sys
from typing import List, Optional

from coolturb.config import MissingParameterError, ProblemConfig, load_config, save_config
from coolturb.core.mesh import UniformMesh
from coolturb.core.setup import (
    TURBULENCE_MODES,
    ConfigurationError,
    init_user_mesh_data,
    problem_generator,
    user_work_after_loop,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coolturb-run",
        description="Uniform medium with optically thin radiative cooling",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("config", type=str,
                        help="Input file (.yaml, .json, .athinput or .in)")

    # Run control
    parser.add_argument("--steps", "-n", type=int, default=10,
                        help="Number of sub-steps")
    parser.add_argument("--dt", type=float, default=1.0e6,
                        help="Sub-step size [s]")
    parser.add_argument("--cfl-cooling", type=float, default=None,
                        help="If set, limit dt to this fraction of the cooling time")

    # Mesh
    parser.add_argument("--nx", type=int, nargs=3, default=[16, 16, 16],
                        metavar=("NX1", "NX2", "NX3"), help="Mesh cells")
    parser.add_argument("--block-size", type=int, nargs=3, default=None,
                        metavar=("BX1", "BX2", "BX3"), help="Cells per block")
    parser.add_argument("--dx", type=float, default=1.0, help="Cell width [cm]")
    parser.add_argument("--workers", type=int, default=1,
                        help="Threads used to process blocks")

    # Host capabilities
    parser.add_argument("--self-gravity", action="store_true",
                        help="Host has a self-gravity solver")
    parser.add_argument("--fft", action="store_true",
                        help="Host has FFT support (required for turb_flag != 0)")

    # Parameters
    parser.add_argument("--set", dest="overrides", action="append", default=[],
                        metavar="SECTION.KEY=VALUE", help="Override an input parameter")
    parser.add_argument("--save-config", type=str, default=None,
                        help="Write the effective parameters (with defaults) to this file")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress progress output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    verbose = not args.quiet

    if not math.isfinite(args.dt) or args.dt < 0.0:
        print(f"### FATAL ERROR: --dt must be finite and non-negative, got {args.dt}",
              file=sys.stderr)
        return 1
    if args.cfl_cooling is not None and not args.cfl_cooling > 0.0:
        print(f"### FATAL ERROR: --cfl-cooling must be > 0, got {args.cfl_cooling}",
              file=sys.stderr)
        return 1

    try:
        pin = load_config(args.config)
        pin.apply_overrides(args.overrides)
        config = ProblemConfig.from_parameters(pin, self_gravity_enabled=args.self_gravity)

        mesh = UniformMesh(
            nx=tuple(args.nx),
            block_size=tuple(args.block_size) if args.block_size else None,
            gamma=config.hydro.gamma,
            self_gravity=args.self_gravity,
            fft=args.fft,
            dx=(args.dx, args.dx, args.dx),
            verbose=verbose,
        )
        source = init_user_mesh_data(mesh, pin)
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        return 1
    except (FileNotFoundError, MissingParameterError, ValueError) as e:
        print(f"### FATAL ERROR: {e}", file=sys.stderr)
        return 1

    if verbose:
        print(f"Turbulence: {TURBULENCE_MODES[mesh.turb_flag]} (turb_flag={mesh.turb_flag})")
        print(f"Cooling: {source!r}")

    mesh.initialize(lambda block: problem_generator(block, pin))

    dt = args.dt
    if args.cfl_cooling is not None:
        t_cool = min(source.cooling_timestep(block, safety=args.cfl_cooling)
                     for block in mesh.blocks)
        if t_cool < dt:
            dt = t_cool
            if verbose:
                print(f"dt limited by cooling time: dt={dt:.4e}")

    summary = mesh.run(args.steps, dt, n_workers=args.workers,
                       log_interval=max(args.steps // 10, 1))
    luminosity = sum(source.luminosity(block) for block in mesh.blocks)
    user_work_after_loop(mesh, pin)

    if args.save_config:
        save_config(pin, args.save_config)

    print(f"t = {summary['time']:.6e}  E_tot: {summary['energy_start']:.6e} -> "
          f"{summary['energy_end']:.6e}  L = {luminosity:.6e} erg/s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
