"""
viscofluid: 2D particle-based viscoelastic fluid (double density relaxation).
"""

from .config import SimConfig
from .grid import SpatialGrid
from .particle import Particle
from .scenarios import SCENARIOS, build_solver, populate
from .session import SimulationSession
from .solver import FluidSolver

__all__ = [
    "FluidSolver",
    "Particle",
    "SCENARIOS",
    "SimConfig",
    "SimulationSession",
    "SpatialGrid",
    "build_solver",
    "populate",
]
