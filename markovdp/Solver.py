import itertools
import logging

import numpy as np
from tqdm import tqdm

from markovdp.Model import UsageError

log = logging.getLogger(__name__)


class Solver():
    """
    Dynamic programming solver for a finite MDP.

    Holds the model, the discount factor and the working value and policy,
    which are updated in place by value_iteration and policy_iteration. The
    value and policy properties return copies, so callers can keep them
    while the solver carries on.

    Both algorithms use synchronous sweeps: every backup within a sweep reads
    the value as it was before the sweep started.

    States without actions are dead ends. They get no policy entry and their
    value is never backed up, so it stays at its initial value (0 unless the
    caller passed one in). A discount of 1 is allowed, but then every policy
    the solver visits must reach an absorbing zero-reward state or the values
    grow without bound.
    """

    def __init__(self, model, discount, policy=None, value=None):
        discount = float(discount)
        if not 0.0 <= discount <= 1.0:
            raise ValueError(f"discount must be in [0, 1], got {discount!r}")

        self.model = model
        self.discount = discount
        self.states = list(model.states())
        self.state_actions = {s: list(model.actions(s)) for s in self.states}

        dead_ends = [s for s in self.states if not self.state_actions[s]]
        if dead_ends:
            log.warning('%d states have no actions and keep their initial value: %r',
                        len(dead_ends), dead_ends)

        self._value = {s: 0.0 for s in self.states}
        if value is not None:
            for state, v in value.items():
                if state not in self._value:
                    raise UsageError(f"unknown state {state!r}")
                self._value[state] = float(v)

        self._policy = {s: actions[0] for s, actions in self.state_actions.items() if actions}
        if policy is not None:
            for state, action in policy.items():
                if action not in self.state_actions.get(state, ()):
                    raise UsageError(f"action {action!r} is not available in state {state!r}")
                self._policy[state] = action

        self.num_value_iters = 0
        self.num_policy_iters = 0

    @property
    def value(self):
        """Snapshot of the current value: {state: expected discounted return}."""
        return dict(self._value)

    @property
    def policy(self):
        """Snapshot of the current policy: {state: action} for states with actions."""
        return dict(self._policy)

    def _backup(self, state, action, value):
        q = 0.0
        for p, next_state, reward in self.model.transitions(state, action):
            q += p * (reward + self.discount * value[next_state])
        return q

    def state_action_value(self, state, action):
        """Q(state, action) = sum over s' of P(s' | s, a) * (R(s, a, s') + discount * V(s'))."""
        return self._backup(state, action, self._value)

    def _greedy(self, state, value):
        best_action = None
        best_q = None
        # strict > keeps the first maximiser in actions(state) order
        for action in self.state_actions[state]:
            q = self._backup(state, action, value)
            if best_q is None or q > best_q:
                best_action, best_q = action, q
        return best_action, best_q

    def greedy_action(self, state):
        """
        Return (action, q) for the action with the largest Q under the
        current value. Ties go to the action listed first by actions(state).
        """
        if state not in self.state_actions:
            raise UsageError(f"unknown state {state!r}")
        if not self.state_actions[state]:
            raise UsageError(f"state {state!r} has no actions")
        return self._greedy(state, self._value)

    def state_action_values(self):
        """Return {(state, action): Q(state, action)} under the current value."""
        return {(s, a): self.state_action_value(s, a)
                for s in self.states for a in self.state_actions[s]}

    def _commit(self, new_value):
        delta = 0.0
        for state, v in new_value.items():
            delta = max(delta, abs(v - self._value[state]))
        self._value.update(new_value)
        return delta

    def value_iteration_sweep(self):
        """One synchronous Bellman optimality sweep. Returns the largest value change."""
        new_value = {}
        for state in self._policy:
            _action, new_value[state] = self._greedy(state, self._value)
        return self._commit(new_value)

    def _update_policy(self):
        changed = 0
        for state in self._policy:
            action, _q = self._greedy(state, self._value)
            if action != self._policy[state]:
                self._policy[state] = action
                changed += 1
        return changed

    def value_iteration(self, tolerance, max_iterations=None, on_iteration=None, progress=False):
        """
        Run value iteration until the largest change in a sweep is below
        tolerance, or max_iterations sweeps have run.

        on_iteration(num_iters, delta) is called after every sweep.

        Returns True if the value converged, False if the iteration budget ran
        out first. Either way the policy is left greedy with respect to the
        last computed value.
        """
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance!r}")
        if max_iterations is not None and max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations!r}")

        if max_iterations is None:
            sweeps = itertools.count(1)
        else:
            sweeps = range(1, max_iterations + 1)
        loop = tqdm(sweeps, desc='Value Iteration', total=max_iterations) if progress else sweeps

        converged = False
        self.num_value_iters = 0
        delta = None
        for num_iters in loop:
            delta = self.value_iteration_sweep()
            self.num_value_iters = num_iters
            log.debug('value iteration %d: delta=%g', num_iters, delta)
            if on_iteration is not None:
                on_iteration(num_iters, delta)
            if delta < tolerance:
                converged = True
                break
        if progress:
            loop.close()

        self._update_policy()
        if converged:
            log.info('Value iteration converged after %d sweeps', self.num_value_iters)
        else:
            log.warning('Value iteration did not converge in %d sweeps (delta=%g)',
                        self.num_value_iters, delta)
        return converged

    def evaluate_policy(self):
        """
        One synchronous sweep of V(s) = Q(s, policy(s)) for the current
        policy. Returns the largest value change.
        """
        new_value = {state: self._backup(state, action, self._value)
                     for state, action in self._policy.items()}
        return self._commit(new_value)

    def improve_policy(self):
        """
        Make the policy greedy with respect to the current value.
        Returns the number of states whose action changed.
        """
        return self._update_policy()

    def policy_iteration(self, tolerance, max_value_iters=None, max_policy_iters=None,
                         on_iteration=None):
        """
        Alternate iterative policy evaluation and greedy improvement until an
        improvement pass leaves the policy unchanged.

        tolerance: evaluation stops once a sweep changes no value by more
        than this. max_value_iters caps the sweeps per evaluation and
        max_policy_iters caps the number of improvement passes; both default
        to no limit.

        on_iteration(num_policy_iters, num_actions_changed, num_value_iters)
        is called after every improvement pass.

        Returns True when the policy is stable, False if max_policy_iters
        passes ran without it stabilising.
        """
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance!r}")
        if max_value_iters is not None and max_value_iters < 1:
            raise ValueError(f"max_value_iters must be at least 1, got {max_value_iters!r}")

        self.num_policy_iters = 0
        self.num_value_iters = 0
        while True:
            sweeps = 0
            while max_value_iters is None or sweeps < max_value_iters:
                delta = self.evaluate_policy()
                sweeps += 1
                if delta < tolerance:
                    break
            else:
                log.debug('policy evaluation stopped after %d sweeps (delta=%g)', sweeps, delta)
            self.num_value_iters += sweeps

            num_actions_changed = self.improve_policy()
            self.num_policy_iters += 1
            log.debug('policy iteration %d: %d actions changed after %d evaluation sweeps',
                      self.num_policy_iters, num_actions_changed, sweeps)
            if on_iteration is not None:
                on_iteration(self.num_policy_iters, num_actions_changed, self.num_value_iters)

            if num_actions_changed == 0:
                log.info('Policy iteration stable after %d improvement passes', self.num_policy_iters)
                return True
            if max_policy_iters is not None and self.num_policy_iters >= max_policy_iters:
                log.warning('Policy iteration not stable after %d improvement passes',
                            self.num_policy_iters)
                return False

    def evaluate_policy_exact(self):
        """
        Evaluate the current policy exactly by solving
        (I - discount * P_pi) V = r_pi with numpy.

        Dead-end states enter the system as constants. Raises
        numpy.linalg.LinAlgError when the system is singular, e.g. with a
        discount of 1 and an absorbing state.
        """
        controlled = list(self._policy)
        index = {s: i for i, s in enumerate(controlled)}
        n = len(controlled)
        A = np.eye(n)
        b = np.zeros(n)

        for state, action in self._policy.items():
            i = index[state]
            for p, next_state, reward in self.model.transitions(state, action):
                b[i] += p * reward
                j = index.get(next_state)
                if j is None:
                    b[i] += self.discount * p * self._value[next_state]
                else:
                    A[i, j] -= self.discount * p

        solution = np.linalg.solve(A, b)
        for state, v in zip(controlled, solution):
            self._value[state] = float(v)

    def policy_iteration_exact(self, max_iters=None):
        """
        Policy iteration with exact (linear solve) policy evaluation.
        Returns True when the policy is stable, False if max_iters
        improvement passes ran without it stabilising.
        """
        self.num_policy_iters = 0
        while max_iters is None or self.num_policy_iters < max_iters:
            self.evaluate_policy_exact()
            num_actions_changed = self.improve_policy()
            self.num_policy_iters += 1
            log.debug('exact policy iteration %d: %d actions changed',
                      self.num_policy_iters, num_actions_changed)
            if num_actions_changed == 0:
                log.info('Exact policy iteration stable after %d passes', self.num_policy_iters)
                return True
        log.warning('Exact policy iteration not stable after %d passes', self.num_policy_iters)
        return False
