"""
NEAT Run Package

This package implements trial and experiment execution for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm.

A trial represents a complete evolutionary run, managing the population through
generations until a solution is found or maximum generations are reached.

An experiment represents a collection of multiple trials for gathering statistical data.

Modules:
    config:      Configuration management for NEAT parameters
    trial:       Abstract base class for NEAT trials
    trial_xor:   XOR fitness task and trial
    experiment:  Base class for NEAT experiments

Exported Classes:
    Config:      Configuration parameters for NEAT algorithm
    Trial:       Abstract base class for NEAT trials
    TrialXOR:    NEAT trial solving the XOR problem
    Experiment:  Base class for NEAT experiments (multi-trial runs, joblib parallelization)
"""

from toponeat.run.config     import Config
from toponeat.run.trial      import Trial
from toponeat.run.trial_xor  import TrialXOR, evaluate_xor
from toponeat.run.experiment import Experiment

__all__ = ['Config', 'Trial', 'TrialXOR', 'evaluate_xor', 'Experiment']
