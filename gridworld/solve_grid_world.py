import argparse
import logging
import os
import sys

import coloredlogs

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from gridworld.GridWorldMDP import GridWorldMDP
from markovdp.Solver import Solver
from markovdp.TableModel import TableModel
from markovdp.utils import solver_defaults

log = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Solve the AIMA 3x4 grid world.")
    parser.add_argument('--discount', type=float, default=1.0)
    parser.add_argument('--slip', type=float, default=0.1, help='Probability of slipping to each side')
    parser.add_argument('--tolerance', type=float, default=solver_defaults.tolerance)
    parser.add_argument('--max_iterations', type=int, default=solver_defaults.max_iterations)
    parser.add_argument('--method', choices=('value', 'policy'), default='value')
    parser.add_argument('--tabulate', action='store_true', help='Solve a TableModel snapshot of the grid')
    parser.add_argument('--log_level', default='INFO')
    args = parser.parse_args(argv)

    coloredlogs.install(level=args.log_level)

    mdp = GridWorldMDP(slip=args.slip)
    model = TableModel.from_model(mdp) if args.tabulate else mdp
    log.info('Solving %s with discount %s', type(model).__name__, args.discount)

    solver = Solver(model, args.discount)
    if args.method == 'value':
        converged = solver.value_iteration(args.tolerance, args.max_iterations)
    else:
        converged = solver.policy_iteration(args.tolerance, max_value_iters=args.max_iterations)

    print(f"converged={converged} value_sweeps={solver.num_value_iters}")
    print(mdp.value_table(solver.value))
    print()
    print(mdp.policy_table(solver.policy))
    return 0 if converged else 1


if __name__ == '__main__':
    sys.exit(main())
