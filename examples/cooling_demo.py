#!/usr/bin/env python3
"""
Cooling Source Demo

Demonstrates:
1. Evaluating the piecewise cooling curve
2. Loading the example inputs and validating them
3. The FFT capability check for turbulence
4. Cooling a uniform medium on a small mesh

Run from project root:
    python examples/cooling_demo.py
"""

from pathlib import Path

import numpy as np

from coolturb.config import load_config, ProblemConfig
from coolturb.core import (
    ConfigurationError,
    UniformMesh,
    init_user_mesh_data,
    problem_generator,
)
from coolturb.radiation import temp_to_lambda, cooling_lambda

CONFIG_DIR = Path(__file__).parent.parent / "configs"


def demo_cooling_curve():
    """Demo 1: log10 Λ over the tabulated range."""
    print("=" * 70)
    print("DEMO 1: Cooling Curve")
    print("=" * 70)

    for log10T in np.arange(3.0, 10.5, 0.5):
        print(f"  log10 T = {log10T:4.1f}   log10 Λ = {temp_to_lambda(log10T):7.3f}")
    print(f"\n  Λ(10^6 K) = {cooling_lambda(1.0e6):.4e} erg cm³/s")
    print()


def demo_load_configs():
    """Demo 2: Load the YAML and Athena-style inputs."""
    print("=" * 70)
    print("DEMO 2: Loading Inputs")
    print("=" * 70)

    for name in ["cool_turb.yaml", "athinput.cool_turb"]:
        path = CONFIG_DIR / name
        if not path.exists():
            print(f"⚠️  Config not found: {name}")
            continue

        pin = load_config(path)
        config = ProblemConfig.from_parameters(pin)
        print(f"\n📄 Loaded: {name}")
        print(f"   rho: {config.problem.rho:.3e} g/cm³")
        print(f"   T: {config.problem.T:.3e} K")
        print(f"   turb_flag: {config.problem.turb_flag}")
        print(f"   cooling: {config.cooling.mode} (floor {config.cooling.temp_goal} K)")
    print()


def demo_fft_check():
    """Demo 3: Turbulence needs FFT support in the host."""
    print("=" * 70)
    print("DEMO 3: Turbulence Capability Check")
    print("=" * 70)

    pin = load_config(CONFIG_DIR / "athinput.cool_turb")

    print("Host without FFT, turb_flag=3 (should fail):")
    try:
        init_user_mesh_data(UniformMesh(nx=(8, 8, 8), verbose=False), pin)
    except ConfigurationError as e:
        print(f"  ❌ {e}")

    print("\nHost with FFT:")
    mesh = UniformMesh(nx=(8, 8, 8), fft=True, verbose=False)
    init_user_mesh_data(mesh, pin)
    print(f"  ✓ turb_flag={mesh.turb_flag}")
    print()


def demo_cooling_run():
    """Demo 4: Cool a uniform medium and compare with the cooling time."""
    print("=" * 70)
    print("DEMO 4: Cooling a Uniform Medium")
    print("=" * 70)

    pin = load_config(CONFIG_DIR / "cool_turb.yaml")
    mesh = UniformMesh(nx=(16, 16, 16), block_size=(8, 8, 8), verbose=False)
    source = init_user_mesh_data(mesh, pin)
    mesh.initialize(lambda block: problem_generator(block, pin))

    dt = min(source.cooling_timestep(block, safety=0.05) for block in mesh.blocks)
    print(f"  Sub-step (5% of cooling time): {dt:.4e} s")

    summary = mesh.run(10, dt, n_workers=4)
    loss = 1.0 - summary['energy_end'] / summary['energy_start']
    print(f"  E_tot: {summary['energy_start']:.6e} -> {summary['energy_end']:.6e}")
    print(f"  Fractional energy radiated: {loss:.3%}")
    print()


if __name__ == "__main__":
    demo_cooling_curve()
    demo_load_configs()
    demo_fft_check()
    demo_cooling_run()
