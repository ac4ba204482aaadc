from markovdp.Model import Model, UsageError


class DictModel(Model):
    """
    MDP backed by nested dicts:

        {state: {action: {next_state: (probability, reward)}}}

    Next states that never appear as keys of the outer dict are added as
    states with no actions.
    """

    def __init__(self, table):
        self.table = table
        self._states = dict.fromkeys(table)
        for actions in table.values():
            for successors in actions.values():
                for next_state in successors:
                    self._states.setdefault(next_state, None)

    def states(self):
        return list(self._states)

    def actions(self, state):
        if state not in self._states:
            raise UsageError(f"unknown state {state!r}")
        return list(self.table.get(state, {}))

    def _successors(self, state, action):
        if state not in self._states:
            raise UsageError(f"unknown state {state!r}")
        try:
            return self.table[state][action]
        except KeyError:
            raise UsageError(f"action {action!r} is not available in state {state!r}") from None

    def transition_probability(self, state, action, next_state):
        if next_state not in self._states:
            raise UsageError(f"unknown state {next_state!r}")
        return float(self._successors(state, action).get(next_state, (0.0, 0.0))[0])

    def reward(self, state, action, next_state):
        if next_state not in self._states:
            raise UsageError(f"unknown state {next_state!r}")
        return float(self._successors(state, action).get(next_state, (0.0, 0.0))[1])

    def transitions(self, state, action):
        return [(float(p), next_state, float(r))
                for next_state, (p, r) in self._successors(state, action).items() if p > 0]
