"""
Text frame stream shared by the headless app and the render client.

Format (one line per frame):
    F <frame_index> <collisions> <bounds_w> <bounds_h> <particle_count> x0 y0 vx0 vy0 x1 y1 vx1 vy1 ...
"""

from __future__ import annotations

from typing import List, NamedTuple, Sequence

from .config import Vec2
from .solver import FluidSolver


class Frame(NamedTuple):
    index: int
    collisions: int
    bounds_w: float
    bounds_h: float
    positions: List[Vec2]
    velocities: List[Vec2]


def format_frame(
    index: int,
    collisions: int,
    bounds_w: float,
    bounds_h: float,
    positions: Sequence[Vec2],
    velocities: Sequence[Vec2],
) -> str:
    if len(positions) != len(velocities):
        raise ValueError("positions and velocities differ in length")
    parts = ["F", str(index), str(collisions), repr(bounds_w), repr(bounds_h), str(len(positions))]
    for (x, y), (vx, vy) in zip(positions, velocities):
        parts.append(f"{x:.4f} {y:.4f} {vx:.4f} {vy:.4f}")
    return " ".join(parts)


def solver_frame(solver: FluidSolver, index: int) -> str:
    return format_frame(
        index,
        solver.collision_events,
        solver.width,
        solver.height,
        solver.positions(),
        solver.velocities(),
    )


def parse_frame(line: str) -> Frame:
    parts = line.strip().split()
    if len(parts) < 6 or parts[0] != "F":
        raise ValueError("Invalid frame line")

    index = int(parts[1])
    collisions = int(parts[2])
    bounds_w = float(parts[3])
    bounds_h = float(parts[4])
    count = int(parts[5])

    coords = parts[6:]
    if len(coords) < count * 4:  # x, y, vx, vy per particle
        raise ValueError("Not enough coordinate data in frame")

    positions: List[Vec2] = []
    velocities: List[Vec2] = []
    for i in range(count):
        positions.append((float(coords[4 * i]), float(coords[4 * i + 1])))
        velocities.append((float(coords[4 * i + 2]), float(coords[4 * i + 3])))

    return Frame(index, collisions, bounds_w, bounds_h, positions, velocities)
