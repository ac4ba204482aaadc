import argparse
import logging
import os
import sys

import coloredlogs

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from markovdp.Solver import Solver
from markovdp.solve_lp import solve_lp
from markovdp.utils import solver_defaults
from recycling.RecyclingRobotMDP import RecyclingRobotMDP

log = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Solve the recycling robot MDP.")
    parser.add_argument('--alpha', type=float, default=0.1)
    parser.add_argument('--beta', type=float, default=0.1)
    parser.add_argument('--r_search', type=float, default=2.0)
    parser.add_argument('--r_wait', type=float, default=1.0)
    parser.add_argument('--r_rescue', type=float, default=-3.0)
    parser.add_argument('--discount', type=float, default=solver_defaults.discount)
    parser.add_argument('--tolerance', type=float, default=solver_defaults.tolerance)
    parser.add_argument('--lp', action='store_true', help='Also solve the LP and print its values')
    parser.add_argument('--log_level', default='INFO')
    args = parser.parse_args(argv)

    coloredlogs.install(level=args.log_level)

    model = RecyclingRobotMDP(args.alpha, args.beta, args.r_search, args.r_wait, args.r_rescue)
    violations = model.check_transition_probabilities_sum()
    for state, action, total in violations:
        log.warning('P(. | %s, %s) sums to %g', state, action, total)

    solver = Solver(model, args.discount)
    solver.policy_iteration(args.tolerance)
    lp_values = solve_lp(model, args.discount) if args.lp else {}

    print("state | value     | action")
    print("------+-----------+---------")
    for state in model.states():
        line = f"{state:>5} | {solver.value[state]:+9.4f} | {solver.policy[state]}"
        if state in lp_values:
            line += f"  (lp {lp_values[state]:+.4f})"
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
