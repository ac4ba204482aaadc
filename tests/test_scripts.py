from gridworld import solve_grid_world
from recycling import solve_recycling_robot


def test_solve_grid_world(capsys):
    assert solve_grid_world.main(['--log_level', 'WARNING', '--max_iterations', '100']) == 0
    out = capsys.readouterr().out
    assert 'converged=True' in out
    assert '+0.812' in out
    assert '> > > .' in out


def test_solve_grid_world_tabulated_policy_iteration(capsys):
    assert solve_grid_world.main(['--log_level', 'WARNING', '--tabulate',
                                  '--method', 'policy', '--discount', '0.9']) == 0
    assert 'converged=True' in capsys.readouterr().out


def test_solve_recycling_robot(capsys):
    assert solve_recycling_robot.main(['--log_level', 'WARNING']) == 0
    out = capsys.readouterr().out
    assert 'search' in out.splitlines()[2]
    assert 'recharge' in out.splitlines()[3]
