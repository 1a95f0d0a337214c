"""
Herder Experiment Module

An experiment runs several independent trials with the same configuration,
each with its own TrainingSession, and aggregates their results to show how
reliably the herders learn the course.
"""

from joblib import Parallel, delayed
from sys    import stdout
from typing import Optional, Type

from herdevo.run.config        import Config
from herdevo.run.trial         import Trial
from herdevo.world.world_model import WorldModel

class Experiment:
    """
    A collection of independent trials.

    Subclasses can override:
    - _prepare_trial(trial, trial_number):          Configure each trial before execution
    - _extract_trial_results(trial, trial_number):  Extract results after a trial completes
    - _analyze_trial_results(results):              Process the results of one trial
    - _final_report():                              Aggregated report for the whole experiment

    Public Methods:
        run(num_jobs_trials=1, num_jobs_flocks=1): Execute the complete experiment

    Parallelization:
        num_jobs_trials: Processes running trials side by side (1 = serial, -1 = all cores)
        num_jobs_flocks: Threads moving the flocks within each trial
    """

    def __init__(self,
                 num_trials : int,
                 config     : Config,
                 trial_class: Type[Trial] = Trial,
                 world      : Optional[WorldModel] = None,
                 **kwargs):
        """
        Parameters:
            num_trials:  Number of trials in this experiment
            config:      Configuration parameters
            trial_class: The class of the trials
            world:       The course (defaults to the standard course)
            **kwargs:    Keyword arguments to pass to the trial class constructor
        """
        self._num_trials  : int         = num_trials
        self._config      : Config      = config
        self._trial_class : Type[Trial] = trial_class
        self._world                     = world
        self._trial_kwargs              = kwargs

        self._trial_counter  : int = 0
        self._success_counter: int = 0

        self._number_generations: list[int]   = []
        self._best_fitness      : list[float] = []

    def _reset(self):
        self._trial_counter      = 0
        self._success_counter    = 0
        self._number_generations = []
        self._best_fitness       = []

    @property
    def success_rate(self) -> float:
        return self._success_counter / self._trial_counter if self._trial_counter else 0.0

    def run(self, num_jobs_trials: int = 1, num_jobs_flocks: int = 1) -> list[dict]:
        """
        Run every trial and report.

        Returns:
            The results extracted from each trial
        """
        self._reset()

        if num_jobs_trials == 1:
            results = []
            while self._trial_counter < self._num_trials:
                self._trial_counter += 1
                results.append(self._run_trial(self._trial_counter, num_jobs_flocks))
        else:
            results = Parallel(num_jobs_trials)(
                delayed(self._run_trial)(n, num_jobs_flocks)
                for n in range(1, self._num_trials + 1)
            )
            self._trial_counter = self._num_trials

        for r in results:
            self._analyze_trial_results(r)
        self._final_report()
        return results

    def _run_trial(self, trial_number: int, num_jobs: int = 1) -> dict:
        trial = self._trial_class(config=self._config, world=self._world,
                                  suppress_output=True, **self._trial_kwargs)
        self._prepare_trial(trial, trial_number)
        trial.run(num_jobs)
        return self._extract_trial_results(trial, trial_number)

    def _prepare_trial(self, trial: Trial, trial_number: int):
        s = f"Starting trial {trial_number:03d} of {self._num_trials}..."
        stdout.write(s + '\r')
        stdout.flush()

    def _extract_trial_results(self, trial: Trial, trial_number: int) -> dict:
        return {"trial_number"      : trial_number,
                "number_generations": trial.generation,
                "best_fitness"      : trial.best_fitness(),
                "success"           : not trial.failed}

    def _analyze_trial_results(self, results: dict):
        self._number_generations.append(results["number_generations"])
        self._best_fitness.append(results["best_fitness"])
        if results["success"]:
            self._success_counter += 1

    def _final_report(self):
        print(f"\nTrials: {self._trial_counter}, reached the goal: {self._success_counter} "
              f"({100 * self.success_rate:.0f}%)")
        if self._best_fitness:
            print(f"Best fitness: max {max(self._best_fitness):.2f}, "
                  f"mean {sum(self._best_fitness) / len(self._best_fitness):.2f}")
            print(f"Generations trained: mean "
                  f"{sum(self._number_generations) / len(self._number_generations):.1f}")
