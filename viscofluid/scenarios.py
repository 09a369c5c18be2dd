"""
Demo particle layouts.

Each scenario fills a rectangular lattice of particles on the default
200 x 300 domain. ``spacing`` thins the lattice (2.0 keeps every other row
and column), which keeps pure-Python runs interactive.
"""

from __future__ import annotations

import math
from typing import Dict, List, Tuple

from .config import SimConfig
from .solver import FluidSolver

# (x_start, x_stop, y_start, y_stop, vx, vy)
Block = Tuple[float, float, float, float, float, float]

SCENARIOS: Dict[str, Block] = {
    "demo1": (30.0, 70.0, 30.0, 120.0, 0.0, 0.0),
    "demo2": (30.0, 70.0, 30.0, 120.0, 20.0, 0.0),
    "raindrop": (90.0, 110.0, 270.0, 300.0, 0.0, 0.0),
    "flatsplash": (0.0, 200.0, 280.0, 300.0, 0.0, 0.0),
}


def _lattice(start: float, stop: float, spacing: float) -> List[float]:
    count = int(math.ceil((stop - start) / spacing))
    return [start + n * spacing for n in range(max(count, 0))]


def block_particles(block: Block, spacing: float = 1.0) -> List[Tuple[float, float, float, float]]:
    """Return ``(x, y, vx, vy)`` for every lattice point of ``block``."""
    if spacing <= 0.0:
        raise ValueError(f"spacing must be positive, got {spacing}")
    x_start, x_stop, y_start, y_stop, vx, vy = block
    return [
        (x, y, vx, vy)
        for x in _lattice(x_start, x_stop, spacing)
        for y in _lattice(y_start, y_stop, spacing)
    ]


def populate(solver: FluidSolver, name: str, spacing: float = SimConfig.spacing) -> int:
    """Add scenario ``name`` to ``solver``; returns the number of particles added."""
    try:
        block = SCENARIOS[name]
    except KeyError:
        raise KeyError(f"Unknown scenario {name!r}; choose from {sorted(SCENARIOS)}") from None

    particles = block_particles(block, spacing)
    for x, y, vx, vy in particles:
        solver.add_particle_at(x, y, vx, vy)
    return len(particles)


def build_solver(
    name: str,
    width: float = SimConfig.bounds_size[0],
    height: float = SimConfig.bounds_size[1],
    spacing: float = SimConfig.spacing,
    **params: float,
) -> FluidSolver:
    solver = FluidSolver(width, height, **params)
    populate(solver, name, spacing)
    return solver
