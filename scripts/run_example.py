#!/usr/bin/env python3
"""
Utility script to run NEAT examples easily.

Usage:
    python scripts/run_example.py xor
    python scripts/run_example.py xor --mode experiment --num-trials 30 --num-jobs 4
"""

import argparse
import logging
from pathlib import Path

from toponeat     import Config, Experiment
from toponeat.run import TrialXOR

ROOT_DIR = Path(__file__).parent.parent

EXAMPLES = {
    'xor': {
        'trial': TrialXOR,
        'config': ROOT_DIR / 'examples' / 'configs' / 'config_xor.ini',
        'description': 'XOR logic problem'
    },
}


def main():
    parser = argparse.ArgumentParser(description='Run NEAT examples')
    parser.add_argument('example', choices=EXAMPLES.keys(),
                        help='Example to run')
    parser.add_argument('--mode', choices=['trial', 'experiment'], default='trial',
                        help='Run single trial or full experiment')
    parser.add_argument('--config', type=str, default=None,
                        help='Configuration file (defaults to the example\'s own)')
    parser.add_argument('--num-trials', type=int, default=30,
                        help='Number of trials for experiment mode')
    parser.add_argument('--num-jobs', type=int, default=4,
                        help='Number of parallel jobs for experiment mode')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random number generator')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')

    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(levelname)-8s %(name)s: %(message)s')
    logger = logging.getLogger('run_example')

    example = EXAMPLES[args.example]
    logger.info("Running %s (mode: %s)", example['description'], args.mode)

    config = Config(args.config or str(example['config']))

    if args.mode == 'trial':
        trial = example['trial'](config, seed=args.seed)
        trial.run()
        if trial.best_fitness is None:
            logger.info("No generation was evaluated")
        else:
            logger.info("Best fitness: %.4f", trial.best_fitness)
    else:
        experiment = Experiment(example['trial'],
                                num_trials = args.num_trials,
                                config     = config,
                                base_seed  = args.seed)
        experiment.run(num_jobs=args.num_jobs)


if __name__ == '__main__':
    main()
