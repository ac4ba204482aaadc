import logging

try:
    import pulp
except ImportError:
    pulp = None

log = logging.getLogger(__name__)


def solve_lp(model, discount):
    """
    Solve for the optimal value of a discounted MDP by linear programming.

    V* is the smallest V satisfying the Bellman optimality inequalities
    V(s) >= sum_s' P(s' | s, a) (R(s, a, s') + discount V(s')) for every
    enabled (s, a), so we minimise sum_s V(s) subject to them. States with no
    actions are fixed at 0.

    Returns {state: value}.
    """
    if pulp is None:
        raise RuntimeError("pulp is not installed. Install with: pip install pulp")

    gamma = float(discount)
    if not 0.0 <= gamma < 1.0:
        raise ValueError(f"the LP is only bounded for discount in [0, 1), got {discount!r}")

    states = list(model.states())
    if not states:
        raise ValueError("MDP has no states")

    prob = pulp.LpProblem("mdp_lp", pulp.LpMinimize)
    state_ids = {s: i for i, s in enumerate(states)}
    V = {s: pulp.LpVariable(f"V_{state_ids[s]}") for s in states}

    num_constraints = 0
    for s in states:
        actions = list(model.actions(s))
        if not actions:
            prob += V[s] == 0.0
            continue
        for a in actions:
            rhs = pulp.lpSum([p * (r + gamma * V[s_next]) for p, s_next, r in model.transitions(s, a)])
            prob += V[s] >= rhs
            num_constraints += 1

    prob += pulp.lpSum([V[s] for s in states])
    log.debug('LP has %d variables and %d Bellman constraints', len(states), num_constraints)

    status = prob.solve(pulp.PULP_CBC_CMD(msg=False))
    if status != pulp.LpStatusOptimal:
        raise RuntimeError(f"LP solver did not find an optimal solution: {pulp.LpStatus[status]}")

    return {s: float(pulp.value(V[s])) for s in states}
