"""Finite MDP stored as an explicit table of transition records."""

import logging

from markovdp.Model import Model, UsageError

log = logging.getLogger(__name__)


class TableModel(Model):
    """
    MDP built from (state, action, next_state, probability, reward) records.

    The records are indexed on construction:
      _successors: (s, a) -> {s' -> (P(s' | s, a), R(s, a, s'))}
      _actions:    s -> [enabled actions], in the order first recorded
      _states:     every state seen as a source or a destination

    A state that only ever appears as a destination is still listed by
    states(), with no actions. The solvers never back it up, so its value
    stays at 0; give it a self-loop if it is meant to be terminal.
    """

    def __init__(self, records):
        self._records = []
        self._successors = {}
        self._actions = {}
        self._states = {}

        for record in records:
            state, action, next_state, probability, reward = record
            probability = float(probability)
            if not 0.0 <= probability <= 1.0:
                raise ValueError(
                    f"probability {probability!r} for {(state, action, next_state)!r} is not in [0, 1]")

            successors = self._successors.setdefault((state, action), {})
            if next_state in successors:
                raise ValueError(f"duplicate transition record for {(state, action, next_state)!r}")
            successors[next_state] = (probability, float(reward))

            state_actions = self._actions.setdefault(state, [])
            if action not in state_actions:
                state_actions.append(action)
            self._states.setdefault(state, None)
            self._states.setdefault(next_state, None)
            self._records.append((state, action, next_state, probability, float(reward)))

        dead_ends = [s for s in self._states if s not in self._actions]
        if dead_ends:
            log.debug('%d states have no outgoing transitions: %r', len(dead_ends), dead_ends)

    def __len__(self):
        return len(self._records)

    def __repr__(self):
        return f"TableModel({len(self._states)} states, {len(self._records)} records)"

    def records(self):
        """Return the transition records in the order they were given."""
        return list(self._records)

    def states(self):
        return list(self._states)

    def actions(self, state):
        if state not in self._states:
            raise UsageError(f"unknown state {state!r}")
        return list(self._actions.get(state, ()))

    def _successors_of(self, state, action):
        successors = self._successors.get((state, action))
        if successors is None:
            if state not in self._states:
                raise UsageError(f"unknown state {state!r}")
            raise UsageError(f"action {action!r} is not available in state {state!r}")
        return successors

    def _lookup(self, state, action, next_state):
        if next_state not in self._states:
            raise UsageError(f"unknown state {next_state!r}")
        return self._successors_of(state, action).get(next_state)

    def transition_probability(self, state, action, next_state):
        entry = self._lookup(state, action, next_state)
        return 0.0 if entry is None else entry[0]

    def reward(self, state, action, next_state):
        """Unrecorded (state, action, next_state) triples have reward 0."""
        entry = self._lookup(state, action, next_state)
        return 0.0 if entry is None else entry[1]

    def transitions(self, state, action):
        return [(p, next_state, r)
                for next_state, (p, r) in self._successors_of(state, action).items() if p > 0]

    @classmethod
    def from_model(cls, model, sparse=True):
        """
        Build a TableModel snapshot of any Model by enumerating
        states x actions x states. With sparse=True (the default) only
        transitions with positive probability are recorded.

        States are only known to the table through records, so a source
        state with no actions that is never a destination is left out of
        the snapshot's states().
        """
        states = list(model.states())
        records = []
        for state in states:
            for action in model.actions(state):
                for next_state in states:
                    p = model.transition_probability(state, action, next_state)
                    if p > 0 or not sparse:
                        records.append(
                            (state, action, next_state, p, model.reward(state, action, next_state)))
        log.debug('Tabulated %d records from %d states', len(records), len(states))
        return cls(records)
