"""
Particle-based viscoelastic fluid solver.

Implements the double density relaxation method from "Particle-based
Viscoelastic Fluid Simulation" (Clavet, Beaudoin, Poulin) without springs
between particles.

One call to ``solve(dt)`` runs the whole step:

  1. gravity
  2. neighbor discovery (3x3 grid broad phase + exact distance test)
  3. viscosity impulses
  4. position prediction
  5. double density relaxation
  6. velocity recovery and wall collision
  7. grid re-indexing
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import SimConfig, Vec2
from .grid import SpatialGrid
from .particle import Particle
from .vector import v_dot, v_length, v_unit

logger = logging.getLogger(__name__)


class FluidSolver:
    """
    Owns the particle list and the spatial grid for one fixed domain.

    Particles live in ``[0, width] x [0, height]`` with y pointing up.
    """

    def __init__(
        self,
        width: float,
        height: float,
        particles: Optional[Iterable[Particle]] = None,
        *,
        interaction_radius: float = SimConfig.interaction_radius,
        rest_density: float = SimConfig.rest_density,
        stiffness: float = SimConfig.stiffness,
        near_stiffness: float = SimConfig.near_stiffness,
        linear_viscosity: float = SimConfig.linear_viscosity,
        quadratic_viscosity: float = SimConfig.quadratic_viscosity,
        gravity: float = SimConfig.gravity,
        wall_normal_damping: float = SimConfig.wall_normal_damping,
        wall_tangent_damping: float = SimConfig.wall_tangent_damping,
    ) -> None:
        if not width > 0.0 or not height > 0.0:
            raise ValueError(f"Domain size must be positive, got {width}x{height}")
        if not interaction_radius > 0.0:
            raise ValueError(f"interaction_radius must be positive, got {interaction_radius}")

        self.width: float = width
        self.height: float = height

        self.h: float = interaction_radius
        self.rho0: float = rest_density
        self.k: float = stiffness
        self.k_near: float = near_stiffness
        self.sigma: float = linear_viscosity
        self.beta: float = quadratic_viscosity
        self.gravity: float = gravity
        self.mu1: float = wall_normal_damping
        self.mu2: float = wall_tangent_damping

        self._particles: List[Particle] = []
        self.grid = SpatialGrid(width, height, self.h)

        # _neighbors[i] = indices within h of particle i (rebuilt every step)
        self._neighbors: List[List[int]] = []

        # Wall clamps during the last solve() call
        self.collision_events: int = 0

        logger.debug(
            "FluidSolver %sx%s, h=%s, grid %dx%d",
            width, height, self.h, self.grid.width, self.grid.height,
        )

        if particles is not None:
            for particle in particles:
                self.add_particle(particle)

    # -----------------------------
    # Particle access
    # -----------------------------

    @property
    def particles(self) -> Tuple[Particle, ...]:
        return tuple(self._particles)

    @property
    def particle_count(self) -> int:
        return len(self._particles)

    @property
    def neighbor_map(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(n) for n in self._neighbors)

    def positions(self) -> List[Vec2]:
        return [(p.x, p.y) for p in self._particles]

    def velocities(self) -> List[Vec2]:
        return [(p.vx, p.vy) for p in self._particles]

    def add_particle(self, particle: Particle) -> None:
        self._update_particle_cell(particle)
        self._particles.append(particle)
        self.grid.insert(len(self._particles) - 1, particle.cell_index)

    def add_particle_at(self, x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> None:
        self.add_particle(Particle(x, y, vx, vy))

    # -----------------------------
    # Grid bookkeeping
    # -----------------------------

    def _update_particle_cell(self, particle: Particle) -> None:
        cx, cy = self.grid.cell_coords_for(particle.x, particle.y)
        particle.cell_x = cx
        particle.cell_y = cy
        particle.cell_index = self.grid.flat_index(cx, cy)

    def _reindex(self, index: int) -> None:
        particle = self._particles[index]
        previous = particle.cell_index
        self._update_particle_cell(particle)
        if particle.cell_index != previous:
            self.grid.remove(index, previous)
            self.grid.insert(index, particle.cell_index)

    # -----------------------------
    # Neighbor discovery
    # -----------------------------

    def find_neighbors(self) -> None:
        """Rebuild the neighbor lists; each pair is tested once."""
        particles = self._particles
        max_dist_sq = self.h * self.h
        neighbors: List[List[int]] = [[] for _ in particles]

        for i, particle in enumerate(particles):
            for j in self.grid.neighbors_of_cell(particle.cell_index):
                if j >= i:
                    continue
                if particle.distance_squared_to(particles[j]) <= max_dist_sq:
                    neighbors[i].append(j)
                    neighbors[j].append(i)

        self._neighbors = neighbors

    # -----------------------------
    # Viscosity impulses
    # -----------------------------

    def apply_viscosity(self, dt: float) -> None:
        particles = self._particles
        h = self.h

        for i, particle in enumerate(particles):
            for j in self._neighbors[i]:
                # Pair is handled from its lower index only
                if j < i:
                    continue
                neighbor = particles[j]

                rij = neighbor.displacement_from(particle)
                rij_len = v_length(rij)
                if rij_len == 0.0:
                    continue
                q = rij_len / h
                if q >= 1.0:
                    continue

                dv = (particle.vx - neighbor.vx, particle.vy - neighbor.vy)
                rij_norm = v_unit(rij, rij_len)
                u = v_dot(dv, rij_norm)
                if u <= 0.0:
                    continue

                common = dt * (1.0 - q) * (self.sigma * u + self.beta * u * u)
                ix = rij_norm[0] * common * 0.5
                iy = rij_norm[1] * common * 0.5

                particle.vx -= ix
                particle.vy -= iy
                neighbor.vx += ix
                neighbor.vy += iy

    # -----------------------------
    # Double density relaxation
    # -----------------------------

    def _densities(self, index: int) -> Tuple[float, float]:
        particle = self._particles[index]
        rho = 0.0
        rho_near = 0.0
        for j in self._neighbors[index]:
            q = v_length(self._particles[j].displacement_from(particle)) / self.h
            if q < 1.0:
                coeff = 1.0 - q
                rho += coeff * coeff
                rho_near += coeff * coeff * coeff
        return rho, rho_near

    def double_density_relaxation(self, dt: float) -> None:
        particles = self._particles
        h = self.h
        dt_sq = dt * dt

        for i, particle in enumerate(particles):
            rho, rho_near = self._densities(i)
            pressure = self.k * (rho - self.rho0)
            near_pressure = self.k_near * rho_near

            dx = 0.0
            dy = 0.0
            for j in self._neighbors[i]:
                neighbor = particles[j]
                rij = neighbor.displacement_from(particle)
                q = v_length(rij) / h
                if q >= 1.0:
                    continue

                coeff = 1.0 - q
                d_common = dt_sq * (pressure * coeff + near_pressure * coeff * coeff)
                half_dx = rij[0] * d_common * 0.5
                half_dy = rij[1] * d_common * 0.5

                neighbor.x += half_dx
                neighbor.y += half_dy
                dx -= half_dx
                dy -= half_dy

            particle.x += dx
            particle.y += dy

    # -------------------------
    # Collision handling
    # -------------------------

    def _handle_collisions(self, particle: Particle) -> None:
        """Clamp to the domain; kill normal velocity, damp tangential."""
        collided = False

        if particle.x < 0.0 or particle.x > self.width:
            particle.x = 0.0 if particle.x < 0.0 else self.width
            particle.vx *= self.mu1
            particle.vy *= self.mu2
            collided = True

        if particle.y < 0.0 or particle.y > self.height:
            particle.y = 0.0 if particle.y < 0.0 else self.height
            particle.vx *= self.mu2
            particle.vy *= self.mu1
            collided = True

        if collided:
            self.collision_events += 1

    # -------------------------
    # Simulation step
    # -------------------------

    def solve(self, dt: float) -> None:
        """Advance every particle by ``dt`` (must be positive)."""
        if not dt > 0.0 or math.isinf(dt):
            raise ValueError(f"dt must be a positive finite number, got {dt}")

        particles = self._particles
        self.collision_events = 0

        for particle in particles:
            particle.vy += self.gravity * dt

        self.find_neighbors()
        self.apply_viscosity(dt)

        for particle in particles:
            particle.x0 = particle.x
            particle.y0 = particle.y
            particle.x += dt * particle.vx
            particle.y += dt * particle.vy

        self.double_density_relaxation(dt)

        for i, particle in enumerate(particles):
            particle.vx = (particle.x - particle.x0) / dt
            particle.vy = (particle.y - particle.y0) / dt
            self._handle_collisions(particle)
            self._reindex(i)

    def __repr__(self) -> str:
        return (
            f"FluidSolver({self.width}x{self.height}, particles={len(self._particles)}, "
            f"h={self.h}, rho0={self.rho0}, k={self.k}, k_near={self.k_near})"
        )


def make_solver(
    width: float,
    height: float,
    positions: Sequence[Vec2] = (),
    **params: float,
) -> FluidSolver:
    """Build a solver with particles at rest at ``positions``."""
    solver = FluidSolver(width, height, **params)
    for x, y in positions:
        solver.add_particle_at(x, y)
    return solver
