import logging

log = logging.getLogger(__name__)


class UsageError(ValueError):
    """Raised when a model is queried with a state or action it does not have."""


class ModelConsistencyError(ValueError):
    """
    Raised by Model.validate when the transition probabilities for one or more
    (state, action) pairs do not sum to 1.

    violations: list of (state, action, probability_sum) tuples
    """

    def __init__(self, violations):
        self.violations = list(violations)
        pairs = ", ".join(f"({s!r}, {a!r}): {total:.6g}" for s, a, total in self.violations)
        super().__init__(f"transition probabilities do not sum to 1 for {pairs}")


class Model:
    """
    Finite MDP interface.

    States and actions can be any hashable types. A state that should end the
    process is modelled as a state with a single action that loops back to it
    with probability 1 (and usually reward 0).

    Subclasses implement states, actions, transition_probability and reward.
    Models that can enumerate successors cheaply should also override
    transitions, which is what the solvers use for backups.
    """

    def states(self):
        """Return an iterable of all states in the MDP."""
        raise NotImplementedError

    def actions(self, state):
        """
        Return an iterable of valid actions at state.
        Raise UsageError if state is not one of states().
        """
        raise NotImplementedError

    def transition_probability(self, state, action, next_state):
        """Return P(next_state | state, action); 0 if next_state is unreachable."""
        raise NotImplementedError

    def reward(self, state, action, next_state):
        """Return the reward for the transition state -> next_state under action."""
        raise NotImplementedError

    def transitions(self, state, action):
        """
        Return a list of (probability, next_state, reward) tuples with positive
        probability. The default asks transition_probability for every state.
        """
        result = []
        for next_state in self.states():
            p = self.transition_probability(state, action, next_state)
            if p > 0:
                result.append((p, next_state, self.reward(state, action, next_state)))
        return result

    def transition_probability_sums(self):
        """Return a dict {(state, action): sum over next_state of P(next_state | state, action)}."""
        states = list(self.states())
        sums = {}
        for state in states:
            for action in self.actions(state):
                sums[(state, action)] = sum(
                    self.transition_probability(state, action, next_state)
                    for next_state in states)
        return sums

    def check_transition_probabilities_sum(self, tolerance=1e-6):
        """
        Return a list of (state, action, sum) for every (state, action) whose
        transition probabilities differ from 1 by more than tolerance.
        An empty list means the model is consistent.

        This enumerates states x actions x states, so it can be slow for large
        models; the solvers never call it.
        """
        violations = []
        for (state, action), total in self.transition_probability_sums().items():
            if abs(total - 1.0) > tolerance:
                violations.append((state, action, total))
        if violations:
            log.debug('%d (state, action) pairs violate the probability sum', len(violations))
        return violations

    def validate(self, tolerance=1e-6):
        """Raise ModelConsistencyError if check_transition_probabilities_sum finds violations."""
        violations = self.check_transition_probabilities_sum(tolerance)
        if violations:
            raise ModelConsistencyError(violations)

    def terminal_states(self):
        """
        Return the set of absorbing states: states with at least one action
        where every action loops back to the state with probability 1.
        """
        terminal = set()
        for state in self.states():
            actions = list(self.actions(state))
            if not actions:
                continue
            if all(abs(self.transition_probability(state, a, state) - 1.0) < 1e-9 for a in actions):
                terminal.add(state)
        return terminal
