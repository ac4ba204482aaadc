import pytest

from markovdp.DictModel import DictModel
from markovdp.Model import Model, ModelConsistencyError, UsageError
from markovdp.TableModel import TableModel
from gridworld.GridWorldMDP import GridWorldMDP, STOP
from recycling.RecyclingRobotMDP import RecyclingRobotMDP


def test_base_model_is_abstract():
    model = Model()
    with pytest.raises(NotImplementedError):
        model.states()
    with pytest.raises(NotImplementedError):
        model.actions('s')


def test_probabilities_summing_to_one_and_a_half_are_flagged():
    model = TableModel([
        ('s', 'a', 's', 0.5, 0.0),
        ('s', 'a', 't', 1.0, 1.0),
        ('s', 'b', 't', 1.0, 0.0),
        ('t', 'stay', 't', 1.0, 0.0),
    ])
    violations = model.check_transition_probabilities_sum(1e-6)
    assert len(violations) == 1
    state, action, total = violations[0]
    assert (state, action) == ('s', 'a')
    assert total == pytest.approx(1.5)

    with pytest.raises(ModelConsistencyError) as excinfo:
        model.validate()
    assert excinfo.value.violations == violations


def test_consistent_models_pass_validation():
    RecyclingRobotMDP().validate()
    GridWorldMDP().validate()
    assert GridWorldMDP(slip=0.2).check_transition_probabilities_sum() == []


class RandomWalk(Model):
    """Walk on 0..3 that only implements the four required methods."""

    def states(self):
        return [0, 1, 2, 3]

    def actions(self, state):
        if state not in self.states():
            raise UsageError(f"unknown state {state!r}")
        return ['stay'] if state == 3 else ['step']

    def transition_probability(self, state, action, next_state):
        if state == 3:
            return 1.0 if next_state == 3 else 0.0
        return {state: 0.5, state + 1: 0.5}.get(next_state, 0.0)

    def reward(self, state, action, next_state):
        return 1.0 if next_state == 3 and state != 3 else 0.0


def test_default_transitions_enumerate_all_states():
    model = RandomWalk()
    assert model.transitions(1, 'step') == [(0.5, 1, 0.0), (0.5, 2, 0.0)]
    assert model.transitions(2, 'step') == [(0.5, 2, 0.0), (0.5, 3, 1.0)]
    assert model.transitions(3, 'stay') == [(1.0, 3, 0.0)]


def test_grid_world_transitions_match_full_enumeration():
    grid = GridWorldMDP()
    # up and left are both blocked from the top-left corner
    successors = {s: p for p, s, _r in grid.transitions((0, 0), 'up')}
    assert successors == {(0, 0): pytest.approx(0.9), (0, 1): pytest.approx(0.1)}
    assert all(r == -0.04 for _p, _s, r in grid.transitions((0, 0), 'up'))
    for state in grid.states():
        for action in grid.actions(state):
            assert grid.transitions(state, action) == Model.transitions(grid, state, action)


def test_terminal_states():
    assert GridWorldMDP().terminal_states() == {STOP}
    assert RecyclingRobotMDP().terminal_states() == set()
    model = TableModel([
        ('a', 'go', 'b', 1.0, 1.0),
        ('b', 'stay', 'b', 1.0, 0.0),
        ('b', 'also_stay', 'b', 1.0, 0.0),
    ])
    assert model.terminal_states() == {'b'}


def test_grid_world_usage_errors():
    grid = GridWorldMDP()
    with pytest.raises(UsageError):
        grid.actions((1, 1))
    with pytest.raises(UsageError):
        grid.transition_probability((0, 3), 'up', STOP)
    with pytest.raises(UsageError):
        grid.transition_probability((0, 0), 'up', (5, 5))
    with pytest.raises(UsageError):
        grid.reward((0, 0), 'up', (5, 5))
    with pytest.raises(UsageError):
        grid.reward((0, 0), STOP, (0, 0))
    with pytest.raises(UsageError):
        grid.reward((1, 1), 'up', (0, 0))
    assert grid.actions((0, 3)) == [STOP]
    assert grid.reward((0, 3), STOP, STOP) == 1.0
    assert grid.reward(STOP, STOP, STOP) == 0.0


def test_dict_model():
    model = DictModel({
        'high': {
            'search': {'high': (0.1, 2.0), 'low': (0.9, 2.0)},
            'wait': {'high': (1.0, 1.0)},
        },
        'low': {
            'search': {'high': (0.9, -3.0), 'low': (0.1, 2.0)},
            'wait': {'low': (1.0, 1.0)},
            'recharge': {'high': (1.0, 0.0)},
        },
    })
    assert model.states() == ['high', 'low']
    assert model.actions('low') == ['search', 'wait', 'recharge']
    assert model.transition_probability('low', 'search', 'high') == 0.9
    assert model.reward('low', 'search', 'high') == -3.0
    assert model.transition_probability('high', 'wait', 'low') == 0.0
    assert model.check_transition_probabilities_sum() == []

    table = TableModel.from_model(model)
    assert set(table.records()) == set(RecyclingRobotMDP().records())

    with pytest.raises(UsageError):
        model.actions('flat')
    with pytest.raises(UsageError):
        model.transitions('high', 'recharge')
    with pytest.raises(UsageError):
        model.reward('high', 'recharge', 'high')
    with pytest.raises(UsageError):
        model.reward('high', 'wait', 'flat')


def test_dict_model_adds_destination_only_states():
    model = DictModel({'a': {'go': {'b': (1.0, 1.0)}}})
    assert model.states() == ['a', 'b']
    assert model.actions('b') == []
