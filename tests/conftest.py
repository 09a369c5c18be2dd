import random

import pytest

from viscofluid import FluidSolver


@pytest.fixture
def still_solver():
    """Gravity-free solver on a 100 x 100 domain."""
    return FluidSolver(100.0, 100.0, gravity=0.0)


@pytest.fixture
def scattered_solver():
    rng = random.Random(7)
    solver = FluidSolver(30.0, 30.0)
    for _ in range(200):
        solver.add_particle_at(rng.uniform(0.0, 30.0), rng.uniform(0.0, 30.0))
    return solver
