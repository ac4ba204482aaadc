from markovdp.Model import Model, UsageError

# AIMA figure 17.1: 3 rows x 4 columns, row 0 at the top. None is an obstacle.
AIMA_GRID = [
    [-0.04, -0.04, -0.04, +1.0],
    [-0.04, None, -0.04, -1.0],
    [-0.04, -0.04, -0.04, -0.04],
]
AIMA_TERMINALS = [(0, 3), (1, 3)]

MOVES = {
    'up': (-1, 0),
    'down': (1, 0),
    'left': (0, -1),
    'right': (0, 1),
}
SLIPS = {
    'up': ('left', 'right'),
    'down': ('left', 'right'),
    'left': ('up', 'down'),
    'right': ('up', 'down'),
}
ARROWS = {'up': '^', 'down': 'v', 'left': '<', 'right': '>', 'stop': '.'}

STOP = 'stop'


class GridWorldMDP(Model):
    """
    Grid world with noisy moves.

    States are (row, col) cells that are not obstacles, plus the absorbing
    'stop' state. A move goes in the intended direction with probability
    1 - 2 * slip and to each perpendicular direction with probability slip;
    moving into an obstacle or off the grid leaves the agent where it is.

    The reward for leaving a cell is the grid value of that cell. Terminal
    cells have the single action 'stop', which pays the terminal reward and
    moves to 'stop', where the process stays forever with reward 0.
    """

    def __init__(self, grid=None, terminals=None, slip=0.1):
        self.grid = AIMA_GRID if grid is None else grid
        self.terminals = set(AIMA_TERMINALS if terminals is None else terminals)
        self.slip = float(slip)
        self.num_rows = len(self.grid)
        self.num_cols = len(self.grid[0])
        self.cells = [(r, c) for r in range(self.num_rows) for c in range(self.num_cols)
                      if self.grid[r][c] is not None]
        self._cell_set = set(self.cells)
        self._order = {s: i for i, s in enumerate(self.states())}

    def states(self):
        return self.cells + [STOP]

    def actions(self, state):
        if state == STOP or state in self.terminals:
            return [STOP]
        if state not in self._cell_set:
            raise UsageError(f"unknown state {state!r}")
        return list(MOVES)

    def _move(self, cell, direction):
        dr, dc = MOVES[direction]
        target = (cell[0] + dr, cell[1] + dc)
        return target if target in self._cell_set else cell

    def next_state_distribution(self, state, action):
        """Return {next_state: probability} for taking action in state."""
        if action not in self.actions(state):
            raise UsageError(f"action {action!r} is not available in state {state!r}")
        if action == STOP:
            return {STOP: 1.0}
        dist = {}
        outcomes = [(action, 1.0 - 2 * self.slip)] + [(d, self.slip) for d in SLIPS[action]]
        for direction, p in outcomes:
            if p > 0:
                target = self._move(state, direction)
                dist[target] = dist.get(target, 0.0) + p
        return dist

    def _check_next_state(self, next_state):
        if next_state != STOP and next_state not in self._cell_set:
            raise UsageError(f"unknown state {next_state!r}")

    def transition_probability(self, state, action, next_state):
        self._check_next_state(next_state)
        return self.next_state_distribution(state, action).get(next_state, 0.0)

    def reward(self, state, action, next_state):
        self._check_next_state(next_state)
        if action not in self.actions(state):
            raise UsageError(f"action {action!r} is not available in state {state!r}")
        if state == STOP:
            return 0.0
        r, c = state
        return self.grid[r][c]

    def transitions(self, state, action):
        # states() order, same as the default enumeration
        dist = self.next_state_distribution(state, action)
        reward = self.reward(state, action, STOP)
        return [(p, s, reward) for s, p in sorted(dist.items(), key=lambda item: self._order[item[0]])]

    def value_table(self, value, fmt='{:+.3f}'):
        """Render value as rows of text, with '#' for obstacles."""
        width = len(fmt.format(0.0))
        lines = []
        for r in range(self.num_rows):
            row = []
            for c in range(self.num_cols):
                if (r, c) in self._cell_set:
                    row.append(fmt.format(value[(r, c)]))
                else:
                    row.append('#'.center(width))
            lines.append(' '.join(row))
        return '\n'.join(lines)

    def policy_table(self, policy):
        """Render policy as rows of arrows, with '#' for obstacles and '.' for terminals."""
        lines = []
        for r in range(self.num_rows):
            row = []
            for c in range(self.num_cols):
                if (r, c) in self._cell_set:
                    row.append(ARROWS.get(policy.get((r, c)), '?'))
                else:
                    row.append('#')
            lines.append(' '.join(row))
        return '\n'.join(lines)
