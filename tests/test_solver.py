import math

import pytest

from viscofluid import FluidSolver, Particle, build_solver
from viscofluid.solver import make_solver


def _assert_grid_consistent(solver):
    grid = solver.grid
    for i, p in enumerate(solver.particles):
        assert p.cell_index == grid.cell_index_for(p.x, p.y)
        assert (p.cell_x, p.cell_y) == grid.cell_coords_for(p.x, p.y)
        assert grid.find(i) == [p.cell_index]
    assert sum(len(b) for b in grid.buckets) == solver.particle_count


# -----------------------------
# Construction and preconditions
# -----------------------------


@pytest.mark.parametrize("width, height", [(0.0, 10.0), (10.0, -1.0), (float("nan"), 10.0)])
def test_rejects_non_positive_domain(width, height):
    with pytest.raises(ValueError):
        FluidSolver(width, height)


def test_rejects_non_positive_radius():
    with pytest.raises(ValueError):
        FluidSolver(10.0, 10.0, interaction_radius=0.0)


@pytest.mark.parametrize("dt", [0.0, -0.1, float("nan"), float("inf")])
def test_solve_rejects_bad_dt(still_solver, dt):
    still_solver.add_particle_at(10.0, 10.0, 1.0, 1.0)
    with pytest.raises(ValueError):
        still_solver.solve(dt)
    # Nothing was touched
    assert still_solver.particles[0].velocity == (1.0, 1.0)


def test_initial_particles_and_grid_sizing():
    solver = FluidSolver(200.0, 300.0, [Particle(5.0, 7.0), Particle(100.0, 100.0, 2.0, 0.0)])
    assert solver.particle_count == 2
    assert (solver.grid.width, solver.grid.height) == (59, 89)
    assert solver.particles[0].cell_index == 1 + 59 * 2
    _assert_grid_consistent(solver)


def test_particles_is_a_read_only_view(still_solver):
    still_solver.add_particle_at(1.0, 1.0)
    view = still_solver.particles
    assert isinstance(view, tuple)
    assert still_solver.positions() == [(1.0, 1.0)]
    assert still_solver.velocities() == [(0.0, 0.0)]


def test_add_particle_outside_domain_is_clamped_on_first_solve(still_solver):
    still_solver.add_particle_at(-5.0, 150.0)
    _assert_grid_consistent(still_solver)
    still_solver.solve(0.1)
    assert still_solver.positions() == [(0.0, 100.0)]
    _assert_grid_consistent(still_solver)


# -----------------------------
# Neighbor discovery
# -----------------------------


def test_neighbors_are_symmetric_and_exact(scattered_solver):
    solver = scattered_solver
    solver.find_neighbors()
    neighbors = solver.neighbor_map
    particles = solver.particles
    h_sq = solver.h * solver.h

    assert len(neighbors) == len(particles)
    for i in range(len(particles)):
        assert i not in neighbors[i]
        assert len(set(neighbors[i])) == len(neighbors[i])
        for j in range(len(particles)):
            if i == j:
                continue
            within = particles[i].distance_squared_to(particles[j]) <= h_sq
            assert (j in neighbors[i]) == within
            assert (j in neighbors[i]) == (i in neighbors[j])


def test_neighbor_at_exactly_h_is_included(still_solver):
    still_solver.add_particle_at(0.0, 10.0)
    still_solver.add_particle_at(still_solver.h, 10.0)
    still_solver.find_neighbors()
    assert still_solver.neighbor_map == ((1,), (0,))


def test_isolated_particle_has_empty_neighbor_list(still_solver):
    still_solver.add_particle_at(10.0, 10.0)
    still_solver.add_particle_at(50.0, 50.0)
    still_solver.find_neighbors()
    assert still_solver.neighbor_map == ((), ())


# -----------------------------
# Viscosity
# -----------------------------


def test_viscosity_impulse_applied_once_and_conserves_momentum(still_solver):
    solver = still_solver
    solver.add_particle_at(10.0, 10.0, 5.0, 0.0)
    solver.add_particle_at(11.0, 10.0, -5.0, 0.0)
    solver.find_neighbors()
    solver.apply_viscosity(0.1)

    q = 1.0 / solver.h
    u = 10.0
    common = 0.1 * (1.0 - q) * (solver.sigma * u + solver.beta * u * u)
    a, b = solver.particles
    assert a.vx == pytest.approx(5.0 - common / 2)
    assert b.vx == pytest.approx(-5.0 + common / 2)
    assert a.vx + b.vx == pytest.approx(0.0, abs=1e-12)
    assert a.vy == b.vy == 0.0


def test_viscosity_ignores_separating_particles(still_solver):
    solver = still_solver
    solver.add_particle_at(10.0, 10.0, -5.0, 0.0)
    solver.add_particle_at(11.0, 10.0, 5.0, 0.0)
    solver.find_neighbors()
    solver.apply_viscosity(0.1)
    assert solver.velocities() == [(-5.0, 0.0), (5.0, 0.0)]


def test_viscosity_conserves_momentum_in_a_crowd(scattered_solver):
    solver = scattered_solver
    for i, p in enumerate(solver.particles):
        p.vx = math.sin(i)
        p.vy = math.cos(3 * i)
    before = [sum(v) for v in zip(*solver.velocities())]
    solver.find_neighbors()
    solver.apply_viscosity(0.1)
    after = [sum(v) for v in zip(*solver.velocities())]
    assert after == pytest.approx(before, abs=1e-9)


def test_coincident_particles_do_not_blow_up(still_solver):
    solver = still_solver
    solver.add_particle_at(20.0, 20.0, 1.0, 0.0)
    solver.add_particle_at(20.0, 20.0, -1.0, 0.0)
    solver.find_neighbors()
    solver.apply_viscosity(0.1)
    assert solver.velocities() == [(1.0, 0.0), (-1.0, 0.0)]

    solver.solve(0.1)
    for x, y in solver.positions() + solver.velocities():
        assert math.isfinite(x) and math.isfinite(y)


# -----------------------------
# Full steps
# -----------------------------


def test_free_fall():
    solver = FluidSolver(100.0, 100.0)
    solver.add_particle_at(50.0, 50.0)
    solver.solve(0.1)
    p = solver.particles[0]
    assert p.vy == pytest.approx(-0.98)
    assert p.vx == 0.0
    assert p.y == pytest.approx(50.0 - 0.098)
    assert (p.x0, p.y0) == (50.0, 50.0)
    assert solver.collision_events == 0


@pytest.mark.parametrize("dt", [0.01, 0.1, 1.0])
def test_resting_particle_without_gravity_stays_put(still_solver, dt):
    still_solver.add_particle_at(42.0, 17.0)
    still_solver.solve(dt)
    assert still_solver.positions() == [(42.0, 17.0)]
    assert still_solver.velocities() == [(0.0, 0.0)]


def test_wall_clamp_at_floor():
    solver = FluidSolver(100.0, 100.0, gravity=0.0)
    solver.add_particle_at(50.0, 0.5, 10.0, -20.0)
    solver.solve(0.1)
    p = solver.particles[0]
    assert p.y == 0.0
    assert p.vy == 0.0
    assert p.vx == pytest.approx(9.0)
    assert p.x == pytest.approx(51.0)
    assert solver.collision_events == 1


def test_wall_clamp_at_right_wall():
    solver = FluidSolver(100.0, 100.0, gravity=0.0)
    solver.add_particle_at(99.5, 50.0, 20.0, 10.0)
    solver.solve(0.1)
    p = solver.particles[0]
    assert p.x == 100.0
    assert p.vx == 0.0
    assert p.vy == pytest.approx(9.0)
    _assert_grid_consistent(solver)


def test_two_close_particles_do_not_separate_at_default_rest_density(still_solver):
    solver = still_solver
    h = solver.h
    solver.add_particle_at(50.0, 50.0)
    solver.add_particle_at(50.0 + 0.5 * h, 50.0)
    solver.solve(0.01)
    a, b = solver.particles
    assert math.sqrt(a.distance_squared_to(b)) <= 0.5 * h
    # Relaxation moves the pair symmetrically
    assert (a.x + b.x) / 2 == pytest.approx(50.0 + 0.25 * h)
    assert a.y == b.y == 50.0


def test_two_close_particles_are_pushed_apart_without_rest_density():
    solver = FluidSolver(100.0, 100.0, gravity=0.0, rest_density=0.0)
    h = solver.h
    solver.add_particle_at(50.0, 50.0)
    solver.add_particle_at(50.0 + 0.5 * h, 50.0)
    solver.solve(0.01)
    a, b = solver.particles
    assert b.x - a.x > 0.5 * h
    assert (a.x + b.x) / 2 == pytest.approx(50.0 + 0.25 * h)


def test_scenario_steps_keep_invariants():
    solver = build_solver("raindrop", spacing=2.0)
    count = solver.particle_count
    for _ in range(5):
        solver.solve(0.1)
        _assert_grid_consistent(solver)
        for x, y in solver.positions():
            assert 0.0 <= x <= solver.width
            assert 0.0 <= y <= solver.height
    assert solver.particle_count == count


def test_particles_crossing_cells_are_reindexed():
    solver = make_solver(20.0, 20.0, [(1.0, 1.0)], gravity=0.0, interaction_radius=2.0)
    solver.particles[0].vx = 30.0
    solver.solve(0.5)
    p = solver.particles[0]
    assert p.x == 16.0
    assert p.cell_x == 8
    _assert_grid_consistent(solver)


def test_particle_on_far_wall_lands_in_last_cell():
    solver = make_solver(20.0, 20.0, [(19.0, 19.0)], gravity=0.0, interaction_radius=2.0)
    solver.particles[0].vx = 50.0
    solver.particles[0].vy = 50.0
    solver.solve(0.1)
    p = solver.particles[0]
    assert p.position == (20.0, 20.0)
    assert (p.cell_x, p.cell_y) == (9, 9)
    _assert_grid_consistent(solver)


def test_solvers_are_independent():
    a = make_solver(50.0, 50.0, [(10.0, 10.0)])
    b = make_solver(50.0, 50.0, [(10.0, 10.0)])
    a.solve(0.1)
    assert b.positions() == [(10.0, 10.0)]
