"""
Bayesian tuning of the training parameters.

The BayesianOptimizer wraps an Optuna study. For every configuration Optuna
proposes it runs a few short trials and reports back the best flock fitness
they reached, which the study maximizes.
"""

import warnings
from typing import Any, Callable, Optional, Type

import optuna                                   # type: ignore
from optuna import Study, Trial as OptunaTrial  # type: ignore
from optuna.visualization import plot_optimization_history, plot_param_importances  # type: ignore

from herdevo.optimization.search_space import SearchSpace
from herdevo.run.config                import Config
from herdevo.run.trial                 import Trial

class BayesianOptimizer:
    """
    Subclasses can override:
    - _extract_trial_results(trial):         What to keep from a finished trial
    - _compute_optimization_metric(results): The value to maximize

    Example:
        >>> space = SearchSpace().add_float('escape_multiplier', 1.0, 5.0)
        >>> optimizer = BayesianOptimizer(space, max_ticks=2000)
        >>> optimizer.optimize(num_configs=20)
        >>> best = optimizer.get_best_config()
    """

    def __init__(self,
                 search_space       : SearchSpace,
                 config_path        : Optional[str] = None,
                 trial_class        : Type[Trial] = Trial,
                 num_trials_per_eval: int = 1,
                 num_jobs_flocks    : int = 1,
                 study_name         : Optional[str] = None,
                 storage            : Optional[str] = None,
                 **trial_kwargs):
        """
        Parameters:
            search_space:        Parameters to tune
            config_path:         Base configuration INI file (None = default configuration)
            trial_class:         The Trial class to run
            num_trials_per_eval: Trials run per proposed configuration
            num_jobs_flocks:     Threads moving the flocks within each trial
            study_name:          Name of the Optuna study (for persistence)
            storage:             Database URL for the study (e.g. 'sqlite:///tuning.db')
            **trial_kwargs:      Extra keyword arguments for the trial constructor (e.g. 'max_ticks')
        """
        self.search_space        = search_space
        self.base_config_path    = config_path
        self.trial_class         = trial_class
        self.num_trials_per_eval = num_trials_per_eval
        self.num_jobs_flocks     = num_jobs_flocks
        self.trial_kwargs        = trial_kwargs

        self.study = optuna.create_study(study_name     = study_name,
                                         storage        = storage,
                                         direction      = 'maximize',
                                         sampler        = optuna.samplers.TPESampler(),
                                         load_if_exists = True)

    def _base_config(self) -> Config:
        return Config(self.base_config_path)

    def _apply(self, params: dict[str, Any]) -> Config:
        config = self._base_config()
        for name, value in params.items():
            setattr(config, name, value)
        return config

    def _extract_trial_results(self, trial: Trial) -> dict:
        return {"best_fitness": trial.best_fitness(),
                "generations" : trial.generation,
                "success"     : not trial.failed}

    def _compute_optimization_metric(self, results: list[dict]) -> float:
        """Mean best fitness over the trials of one configuration."""
        return sum(r["best_fitness"] for r in results) / len(results)

    def _objective(self, optuna_trial: OptunaTrial) -> float:
        config = self._apply(self.search_space.suggest(optuna_trial))

        results = []
        for _ in range(self.num_trials_per_eval):
            trial = self.trial_class(config=config, suppress_output=True, **self.trial_kwargs)
            trial.run(num_jobs=self.num_jobs_flocks)
            results.append(self._extract_trial_results(trial))

        return self._compute_optimization_metric(results)

    def optimize(self,
                 num_configs         : Optional[int] = None,
                 timeout             : Optional[float] = None,
                 num_parallel_configs: int = 1,
                 callbacks           : Optional[list[Callable]] = None) -> Study:
        """
        Run the search for 'num_configs' configurations or 'timeout' seconds.
        """
        if num_configs is None and timeout is None:
            raise ValueError("Please specify at least one of 'num_configs' or 'timeout' for optimization.")

        self.study.optimize(self._objective,
                            n_trials       = num_configs,
                            timeout        = timeout,
                            n_jobs         = num_parallel_configs,
                            gc_after_trial = True,
                            callbacks      = callbacks)
        return self.study

    def get_best_params(self) -> dict[str, Any]:
        return self.study.best_params

    def get_best_config(self) -> Config:
        return self._apply(self.study.best_params)

    def save_best_config(self, path: str):
        self.get_best_config().save(path)

    def get_best_value(self) -> float:
        return self.study.best_value

    def plot_optimization_history(self, **kwargs):
        return plot_optimization_history(self.study, **kwargs)

    def plot_param_importances(self, **kwargs):
        if len(self.study.trials) < 10:
            warnings.warn("Need at least 10 trials for parameter importance analysis")
            return None
        return plot_param_importances(self.study, **kwargs)

    def print_summary(self):
        print("\n" + "=" * 60)
        print("OPTIMIZATION SUMMARY")
        print("=" * 60)
        print(f"Number of finished trials: {len(self.study.trials)}")
        print(f"Best fitness (maximize): {self.study.best_value:.6f}")
        print("\nBest parameters:")
        for name, value in self.study.best_params.items():
            print(f"  {name}: {value}")
        print("=" * 60)
