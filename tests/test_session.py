import pytest

from viscofluid import SimulationSession


@pytest.fixture
def session():
    s = SimulationSession("raindrop", dt=0.1, spacing=4.0)
    s.init()
    yield s
    s.teardown()


def test_init_builds_populated_solver(session):
    assert session.active
    assert session.solver.particle_count == 5 * 8
    assert (session.time, session.frame) == (0.0, 0)


def test_step_advances_time(session):
    session.step()
    session.step()
    assert session.frame == 2
    assert session.time == pytest.approx(0.2)


def test_advance_respects_pause(session):
    before = session.solver.positions()
    session.pause()
    assert session.advance() is False
    assert session.solver.positions() == before
    # Single step still works while paused
    session.step()
    assert session.frame == 1

    session.resume()
    assert session.advance() is True
    assert session.frame == 2


def test_toggle_pause(session):
    session.toggle_pause()
    assert session.paused
    session.toggle_pause()
    assert not session.paused


def test_init_restarts_and_switches_scenario(session):
    session.step()
    old_solver = session.solver
    session.pause()
    solver = session.init("demo1")
    assert solver is session.solver
    assert solver is not old_solver
    assert session.scenario == "demo1"
    assert session.frame == 0
    assert not session.paused


def test_solver_params_reach_the_solver():
    s = SimulationSession("raindrop", spacing=5.0, gravity=0.0, rest_density=3.0)
    solver = s.init()
    assert solver.gravity == 0.0
    assert solver.rho0 == 3.0


def test_teardown_drops_solver(session):
    session.teardown()
    assert not session.active
    with pytest.raises(RuntimeError):
        session.step()


def test_rejects_bad_dt():
    with pytest.raises(ValueError):
        SimulationSession(dt=0.0)
