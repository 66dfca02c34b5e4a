"""Headless frame driver: builds a body and steps it once per frame."""

import argparse
import logging
import sys
import time
from dataclasses import dataclass

import numpy as np

from softmesh.config import ClothSettings, PinMode, StepParameters
from softmesh.errors import SimulationError
from softmesh.mesh.cloth import generate_cloth
from softmesh.mesh.hemisphere import generate_hemisphere
from softmesh.models import SpringNetwork, Vector3
from softmesh.solver import find_closest_corners, sim_cloth_time_step, sim_time_step
from softmesh.types import POSITIONS

logger = logging.getLogger(__name__)

BODIES = ("cloth", "blob")


@dataclass
class RunResult:
    positions: POSITIONS
    velocities: POSITIONS
    frames: int
    error: SimulationError | None = None


def build_body(body: str) -> tuple[POSITIONS, SpringNetwork]:
    if body == "cloth":
        positions, springs = generate_cloth(rows=5, cols=5, center=Vector3(0.0, 0.4, 0.0))
    elif body == "blob":
        positions, springs = generate_hemisphere(radius=0.4, rings=6, segments=12, center=Vector3(0.0, 0.2, 0.0))
    else:
        raise ValueError(f"unknown body {body!r}, expected one of {BODIES}")
    return positions, SpringNetwork.from_springs(springs)


def run(
    body: str,
    frames: int,
    params: StepParameters,
    settings: ClothSettings | None = None,
    report_every: int = 0,
) -> RunResult:
    """
    Step ``body`` for ``frames`` frames.

    Corner pins are located once on the rest positions and held for the
    whole run. A rejected step restores the last good snapshot and ends the
    run; the error is returned rather than raised.
    """
    positions, network = build_body(body)
    velocities = np.zeros_like(positions)
    settings = settings or ClothSettings()
    if PinMode(settings.pin_mode) is PinMode.CORNERS:
        settings = ClothSettings.from_corners(find_closest_corners(positions), settings.friction, settings.iterations)
        logger.info("pinning located corners %s", settings.pin_indices)

    start = time.perf_counter()
    for frame in range(frames):
        snapshot = (positions.copy(), velocities.copy())
        try:
            if body == "cloth":
                sim_cloth_time_step(
                    params.dt,
                    positions,
                    velocities,
                    network,
                    params.stiffness,
                    params.damping,
                    params.particle_mass,
                    params.gravity,
                    params.restitution,
                    settings=settings,
                )
            else:
                sim_time_step(
                    params.dt,
                    positions,
                    velocities,
                    network,
                    params.stiffness,
                    params.damping,
                    params.particle_mass,
                    params.gravity,
                    params.restitution,
                )
        except SimulationError as exc:
            logger.warning("frame %d rejected: %s", frame, exc)
            positions[:], velocities[:] = snapshot
            return RunResult(positions, velocities, frame, exc)

        if report_every and (frame + 1) % report_every == 0:
            speed = float(np.max(np.linalg.norm(velocities, axis=1))) if len(velocities) else 0.0
            elapsed = time.perf_counter() - start
            print(
                f"[frame {frame + 1:>5}] max speed: {speed:.4f} | "
                f"lowest y: {positions[:, 1].min():.4f} | {(frame + 1) / elapsed:.0f} steps/s"
            )

    return RunResult(positions, velocities, frames)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = StepParameters.defaults()
    parser = argparse.ArgumentParser(description="Run a mass-spring body without a viewer.")
    parser.add_argument("--body", choices=BODIES, default="cloth")
    parser.add_argument("--frames", type=int, default=600)
    parser.add_argument("--dt", type=float, default=defaults.dt)
    parser.add_argument("--stiffness", type=float, default=defaults.stiffness)
    parser.add_argument("--damping", type=float, default=defaults.damping)
    parser.add_argument("--mass", type=float, default=defaults.particle_mass)
    parser.add_argument("--gravity", type=float, nargs=3, default=list(defaults.gravity), metavar=("X", "Y", "Z"))
    parser.add_argument("--restitution", type=float, default=defaults.restitution)
    parser.add_argument("--friction", type=float, default=ClothSettings.friction)
    parser.add_argument("--iterations", type=int, default=ClothSettings.iterations)
    parser.add_argument("--pin-mode", choices=[m.value for m in PinMode], default=PinMode.FIXED.value)
    parser.add_argument("--pins", type=int, nargs="*", default=list(ClothSettings.pin_indices))
    parser.add_argument("--report-every", type=int, default=60)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    params = StepParameters(
        dt=args.dt,
        stiffness=args.stiffness,
        damping=args.damping,
        particle_mass=args.mass,
        gravity=Vector3.from_array(args.gravity),
        restitution=args.restitution,
    )
    settings = ClothSettings(
        friction=args.friction,
        iterations=args.iterations,
        pin_mode=PinMode(args.pin_mode),
        pin_indices=tuple(args.pins),
    )

    print("=" * 60)
    print(f"Body: {args.body} | frames: {args.frames} | dt: {params.dt:.5f}")
    print(f"  Stiffness: {params.stiffness:.4f}  Damping: {params.damping:.4f}  Mass: {params.particle_mass:.4f}")
    print(f"  Gravity: {tuple(params.gravity)}  Restitution: {params.restitution:.2f}")
    if args.body == "cloth":
        print(f"  Friction: {settings.friction:.3f}  Iterations: {settings.iterations}  Pins: {settings.pin_mode.value}")
    print("=" * 60)

    result = run(args.body, args.frames, params, settings, report_every=args.report_every)
    if result.error is not None:
        print(f"Stopped after {result.frames} frames: {result.error}")
        return 1

    print(f"Finished {result.frames} frames")
    return 0


if __name__ == "__main__":
    sys.exit(main())
