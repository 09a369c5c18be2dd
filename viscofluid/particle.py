from __future__ import annotations

from .config import Vec2


class Particle:
    """
    State of one fluid particle.

    ``x0``/``y0`` hold the position at the start of the current step; the
    solver recovers velocity from them after density relaxation. The cell
    fields are bookkeeping for the spatial grid and are written by the solver.
    """

    def __init__(self, x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> None:
        self.x: float = x
        self.y: float = y

        self.x0: float = x
        self.y0: float = y

        self.vx: float = vx
        self.vy: float = vy

        self.cell_x: int = 0
        self.cell_y: int = 0
        self.cell_index: int = 0

    @property
    def position(self) -> Vec2:
        return self.x, self.y

    @property
    def velocity(self) -> Vec2:
        return self.vx, self.vy

    def distance_squared_to(self, other: "Particle") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def displacement_from(self, other: "Particle") -> Vec2:
        """Vector from ``other`` to this particle (``self - other``)."""
        return self.x - other.x, self.y - other.y

    def __repr__(self) -> str:
        return (
            f"Particle(x={self.x:.3f}, y={self.y:.3f}, "
            f"vx={self.vx:.3f}, vy={self.vy:.3f}, cell={self.cell_index})"
        )
