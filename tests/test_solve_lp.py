import pulp
import pytest

from markovdp import solve_lp as solve_lp_module
from markovdp.Solver import Solver
from markovdp.TableModel import TableModel
from markovdp.solve_lp import solve_lp
from recycling.RecyclingRobotMDP import RecyclingRobotMDP


def test_lp_matches_policy_iteration():
    robot = RecyclingRobotMDP()
    solver = Solver(robot, 0.95)
    assert solver.policy_iteration_exact()
    values = solve_lp(robot, 0.95)
    for state in robot.states():
        assert values[state] == pytest.approx(solver.value[state], abs=1e-3)


def test_lp_pins_dead_ends_to_zero():
    model = TableModel([
        ('a', 'go', 'b', 1.0, 1.0),
        ('a', 'stay', 'a', 1.0, 0.0),
    ])
    values = solve_lp(model, 0.5)
    assert values['b'] == pytest.approx(0.0)
    assert values['a'] == pytest.approx(1.0)


def test_lp_needs_discount_below_one():
    with pytest.raises(ValueError):
        solve_lp(RecyclingRobotMDP(), 1.0)


def test_lp_uses_installed_pulp(monkeypatch):
    assert solve_lp_module.pulp is pulp
    monkeypatch.setattr(solve_lp_module, 'pulp', None)
    with pytest.raises(RuntimeError):
        solve_lp(RecyclingRobotMDP(), 0.9)
