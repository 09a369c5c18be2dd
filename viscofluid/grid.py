"""
Uniform spatial grid used as the neighbor-search broad phase.

Cells are ``cell_size`` wide (the interaction radius), so every particle
within one radius of a point lies in the 3x3 block of cells around it.
Buckets hold particle indices only; the solver owns the particles.
"""

from __future__ import annotations

import math
from typing import List, Tuple

# Own cell first, then the 8 surrounding cells
OFFSETS_2D: List[Tuple[int, int]] = [
    (0, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
    (-1, 0),
    (1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
]


class SpatialGrid:
    def __init__(self, width: float, height: float, cell_size: float) -> None:
        if cell_size <= 0.0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size: float = cell_size
        self.width: int = max(1, int(math.ceil(width / cell_size)))
        self.height: int = max(1, int(math.ceil(height / cell_size)))

        # buckets[cell_index] = particle indices currently in that cell
        self.buckets: List[List[int]] = [[] for _ in range(self.width * self.height)]

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def cell_coords_for(self, x: float, y: float) -> Tuple[int, int]:
        """Cell containing ``(x, y)``, clamped to the nearest edge cell."""
        cx = int(math.floor(x / self.cell_size))
        cy = int(math.floor(y / self.cell_size))
        cx = min(max(cx, 0), self.width - 1)
        cy = min(max(cy, 0), self.height - 1)
        return cx, cy

    def flat_index(self, cx: int, cy: int) -> int:
        return cx + self.width * cy

    def cell_index_for(self, x: float, y: float) -> int:
        cx, cy = self.cell_coords_for(x, y)
        return self.flat_index(cx, cy)

    def insert(self, particle_index: int, cell_index: int) -> None:
        self.buckets[cell_index].append(particle_index)

    def remove(self, particle_index: int, cell_index: int) -> None:
        self.buckets[cell_index].remove(particle_index)

    def neighbors_of_cell(self, cell_index: int) -> List[int]:
        """Indices in the 3x3 block of cells centred on ``cell_index``."""
        cx = cell_index % self.width
        cy = cell_index // self.width
        candidates: List[int] = []
        for ox, oy in OFFSETS_2D:
            nx = cx + ox
            ny = cy + oy
            if nx < 0 or nx >= self.width or ny < 0 or ny >= self.height:
                continue
            candidates.extend(self.buckets[nx + self.width * ny])
        return candidates

    def find(self, particle_index: int) -> List[int]:
        """Every cell index whose bucket holds ``particle_index``."""
        return [c for c, bucket in enumerate(self.buckets) if particle_index in bucket]

    def __repr__(self) -> str:
        occupied = sum(1 for bucket in self.buckets if bucket)
        return (
            f"SpatialGrid({self.width}x{self.height} cells, "
            f"cell_size={self.cell_size}, occupied={occupied})"
        )
