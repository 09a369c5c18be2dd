"""
Simulation session: the caller-owned lifecycle around one solver.

    session = SimulationSession("raindrop")
    session.init()
    while running:
        session.advance()
        draw(session.solver.positions())
    session.teardown()
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import SimConfig
from .scenarios import build_solver
from .solver import FluidSolver

logger = logging.getLogger(__name__)


class SimulationSession:
    def __init__(
        self,
        scenario: str = SimConfig.scenario,
        width: float = SimConfig.bounds_size[0],
        height: float = SimConfig.bounds_size[1],
        dt: float = SimConfig.dt,
        spacing: float = SimConfig.spacing,
        **solver_params: float,
    ) -> None:
        if not dt > 0.0:
            raise ValueError(f"dt must be positive, got {dt}")
        self.scenario: str = scenario
        self.width: float = width
        self.height: float = height
        self.dt: float = dt
        self.spacing: float = spacing
        self.solver_params = solver_params

        self.time: float = 0.0
        self.frame: int = 0
        self.paused: bool = False
        self._solver: Optional[FluidSolver] = None

    @property
    def solver(self) -> FluidSolver:
        if self._solver is None:
            raise RuntimeError("Session is not initialised; call init() first")
        return self._solver

    @property
    def active(self) -> bool:
        return self._solver is not None

    def init(self, scenario: Optional[str] = None) -> FluidSolver:
        """Start (or restart) from a fresh solver filled with ``scenario``."""
        if scenario is not None:
            self.scenario = scenario
        self._solver = build_solver(
            self.scenario,
            self.width,
            self.height,
            self.spacing,
            **self.solver_params,
        )
        self.time = 0.0
        self.frame = 0
        self.paused = False
        logger.info(
            "Session started: scenario=%s particles=%d dt=%s",
            self.scenario, self._solver.particle_count, self.dt,
        )
        return self._solver

    def step(self) -> None:
        """Advance one step, paused or not."""
        self.solver.solve(self.dt)
        self.time += self.dt
        self.frame += 1

    def advance(self) -> bool:
        """Step unless paused; returns whether a step ran."""
        if self.paused:
            return False
        self.step()
        return True

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def toggle_pause(self) -> None:
        self.paused = not self.paused

    def teardown(self) -> None:
        if self._solver is not None:
            logger.info("Session stopped after %d frames (t=%.2f)", self.frame, self.time)
        self._solver = None
