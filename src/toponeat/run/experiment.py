"""
NEAT Experiment Module

This module defines the base class for NEAT experiments with built-in
support for CPU-based parallelization using joblib.

An experiment represents a collection of multiple independent trials (runs),
used to gather statistical data about the NEAT algorithm's performance.

Classes:
    Experiment: Runs independent trials and aggregates their results
"""

import logging
from statistics import mean
from typing     import Optional, Type

from joblib import Parallel, delayed

from toponeat.run.config import Config
from toponeat.run.trial  import Trial
from toponeat.phenotype  import compile_genome

logger = logging.getLogger(__name__)

class Experiment:
    """
    Base class for NEAT experiments.

    An experiment represents a collection of multiple independent trials (runs),
    used to gather statistical data about the NEAT algorithm's performance on a
    specific problem across multiple runs.

    Each trial is one complete execution of the NEAT algorithm, with its own
    innovation tracker, so trials share no state and can run in separate processes.
    The experiment aggregates results across all trials: success rate, convergence
    speed, and size of the fittest networks.

    Subclasses can override:
    - _reset():                                    Reset experiment state (must call super()._reset())
    - _prepare_trial(trial, trial_number):         Configure each trial before execution
    - _extract_trial_results(trial, trial_number): Extract results after a trial completes (must call super())
    - _analyze_trial_results(results):             Process the results of each trial (must call super())
    - _final_report():                             Report aggregated statistics

    Public Properties:
        success_rate: Fraction of trials that reached the target fitness

    Public Methods:
        run(num_jobs=1): Execute the complete experiment

    Parallelization (num_jobs):
         1:  Serial trial execution (no parallelization)
        >1:  Use specified number of parallel processes for trials
        -1:  Use all available CPU cores for trials
    """

    def __init__(self,
                 trial_class: Type[Trial],
                 num_trials : int,
                 config     : Config,
                 base_seed  : Optional[int] = None,
                 **kwargs):
        """
        Parameters:
            trial_class: the class describing the trials in this experiment
            num_trials:  number of trials in this experiment
            config:      configuration parameters
            base_seed:   if given, trial 'n' is seeded with 'base_seed + n'
            **kwargs:    keyword arguments to pass to trial class constructor

        Raises:
            ValueError: if 'num_trials' is not positive
        """
        if num_trials < 1:
            raise ValueError(f"num_trials must be at least 1, got {num_trials}")

        self._num_trials  : int           = num_trials
        self._trial_class : Type[Trial]   = trial_class
        self._config      : Config        = config
        self._base_seed   : Optional[int] = base_seed
        self._trial_kwargs                = kwargs

        # progress counters
        self._trial_counter  : int = 0  # how many trials we've run so far
        self._success_counter: int = 0  # how many trials found an acceptable solution

        # for each successful trial, some stats
        self._number_generations: list[int]   = []  # length of trial, in generations
        self._max_fitness       : list[float] = []  # max fitness achieved in trial

        # for each successful trial, the size of the best network
        self._number_nodes      : list[int] = []   # number of nodes
        self._number_connections: list[int] = []   # number of *enabled* connections

        # results of every trial, in trial order
        self.results: list[dict] = []

    @property
    def success_rate(self) -> float:
        return self._success_counter / self._trial_counter if self._trial_counter else 0.0

    def _reset(self):
        """
        Reset experiment state before starting a new run.
        """
        self._trial_counter      = 0
        self._success_counter    = 0
        self._number_generations = []
        self._max_fitness        = []
        self._number_nodes       = []
        self._number_connections = []
        self.results             = []

    def run(self, num_jobs: int = 1) -> list[dict]:
        """
        Run the experiment.

        Resets the experiment state and runs the necessary number of trials.
        Trials can be run serially or in parallel based on the num_jobs parameter.

        Parameters:
            num_jobs: Number of parallel processes for running trials
                       1 = serial trial execution (default)
                      -1 = use all available CPU cores
                      >1 = use specified number of processes

        Returns:
            the results of every trial, in trial order
        """
        # Reset the state at the beginning of each new experiment
        self._reset()

        # Run all trials, gather results
        if num_jobs == 1:
            results = []
            while self._trial_counter < self._num_trials:
                self._trial_counter += 1
                results.append(self._run_trial(self._trial_counter))
        else:
            results = Parallel(num_jobs)(
                delayed(self._run_trial)(n) for n in range(1, self._num_trials + 1)
            )
            self._trial_counter = self._num_trials

        # Analyze the data of each trial, then
        # assemble all the data gathered in a final report
        for r in results:
            self._analyze_trial_results(r)
        self._final_report()

        return self.results

    def _run_trial(self, trial_number: int) -> dict:
        """
        Prepare, run, analyze one trial.
        Returns the relevant data generated by the trial.

        Parameters:
            trial_number: The trial number (1-indexed)
        """
        seed = None if self._base_seed is None else self._base_seed + trial_number

        # create new trial instance
        trial = self._trial_class(config=self._config, suppress_output=True, seed=seed, **self._trial_kwargs)

        # configure the trial we are about to run
        self._prepare_trial(trial, trial_number)

        trial.run()

        # extract and return the relevant data for the trial that just completed
        return self._extract_trial_results(trial, trial_number)

    def _prepare_trial(self, trial: Trial, trial_number: int):
        """
        Configure the experiment in preparation for the next run.
        The default implementation only logs a progress message.
        """
        logger.debug("Starting trial %03d of %d", trial_number, self._num_trials)

    def _extract_trial_results(self, trial: Trial, trial_number: int) -> dict:
        """
        Extract relevant results at the end of a trial.
        Derived implementations MUST call this method.
        """
        results = {"trial_number"      : trial_number,
                   "number_generations": trial.generation,
                   "max_fitness"       : trial.best_fitness,
                   "success"           : not trial.failed}

        # size of the fittest network
        if trial.best_genome is not None:
            network = compile_genome(trial.best_genome)
            results["number_nodes"]       = network.number_nodes
            results["number_connections"] = network.number_connections_enabled
        else:
            results["number_nodes"]       = 0
            results["number_connections"] = 0

        return results

    def _analyze_trial_results(self, results: dict):
        """
        Record the results of one trial and update the statistics.
        Derived implementations MUST call this method.
        """
        self.results.append(results)
        logger.info("Trial %03d: %s after %d generations, max fitness = %.4f",
                    results["trial_number"],
                    "SUCCESS" if results["success"] else "FAILED ",
                    results["number_generations"],
                    results["max_fitness"] if results["max_fitness"] is not None else float("nan"))

        if results["success"]:
            self._success_counter += 1
            self._number_generations.append(results["number_generations"])
            self._max_fitness.append(results["max_fitness"])
            self._number_nodes.append(results["number_nodes"])
            self._number_connections.append(results["number_connections"])

    def _final_report(self):
        """
        Produce the final report, aggregating the data obtained from each trial.
        """
        logger.info("Experiment finished: %d of %d trials successful (%.1f%%)",
                    self._success_counter, self._trial_counter, 100 * self.success_rate)

        if self._success_counter:
            logger.info("Successful trials: mean generations = %.1f, mean max fitness = %.4f, "
                        "mean nodes = %.1f, mean enabled connections = %.1f",
                        mean(self._number_generations),
                        mean(self._max_fitness),
                        mean(self._number_nodes),
                        mean(self._number_connections))
