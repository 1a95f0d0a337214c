"""
Search spaces for tuning the herder training parameters.

Each parameter is named after the Config attribute it sets, e.g.
'cohesion_multiplier' or 'hidden_layers'.
"""

from abc    import ABC, abstractmethod
from typing import Any, Optional

import optuna  # type: ignore

class Parameter(ABC):

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def suggest(self, trial: optuna.Trial) -> Any:
        """Ask the Optuna trial for a value of this parameter."""
        pass

class FloatParameter(Parameter):

    def __init__(self, name: str, low: float, high: float, log: bool = False, step: Optional[float] = None):
        super().__init__(name)
        self.low  = low
        self.high = high
        self.log  = log
        self.step = step

    def suggest(self, trial: optuna.Trial) -> float:
        if self.step is not None:
            return trial.suggest_float(self.name, self.low, self.high, step=self.step)
        return trial.suggest_float(self.name, self.low, self.high, log=self.log)

class IntParameter(Parameter):

    def __init__(self, name: str, low: int, high: int, log: bool = False, step: int = 1):
        super().__init__(name)
        self.low  = low
        self.high = high
        self.log  = log
        self.step = step

    def suggest(self, trial: optuna.Trial) -> int:
        return trial.suggest_int(self.name, self.low, self.high, log=self.log, step=self.step)

class CategoricalParameter(Parameter):
    """
    A choice among discrete values. Optuna only stores None, bool, int,
    float and str choices, so list-valued parameters such as
    'hidden_layers' are given as strings ("5, 10").
    """

    def __init__(self, name: str, choices: list[Any]):
        super().__init__(name)
        self.choices = choices

    def suggest(self, trial: optuna.Trial) -> Any:
        return trial.suggest_categorical(self.name, self.choices)

class SearchSpace:
    """
    The parameters to tune, in insertion order.

    Example:
        >>> space = SearchSpace()
        >>> space.add_float('escape_multiplier', 1.0, 5.0)
        >>> space.add_int('flock_size', 10, 30)
        >>> space.add_categorical('steering_mode', ['position', 'heading'])
    """

    def __init__(self):
        self.parameters: list[Parameter] = []

    def _add(self, parameter: Parameter) -> 'SearchSpace':
        if parameter.name in self.get_param_names():
            raise ValueError(f"Parameter '{parameter.name}' is already in the search space")
        self.parameters.append(parameter)
        return self

    def add_float(self, name: str, low: float, high: float,
                  log: bool = False, step: Optional[float] = None) -> 'SearchSpace':
        return self._add(FloatParameter(name, low, high, log, step))

    def add_int(self, name: str, low: int, high: int, log: bool = False, step: int = 1) -> 'SearchSpace':
        return self._add(IntParameter(name, low, high, log, step))

    def add_categorical(self, name: str, choices: list[Any]) -> 'SearchSpace':
        return self._add(CategoricalParameter(name, choices))

    def suggest(self, trial: optuna.Trial) -> dict[str, Any]:
        """Map every parameter name to the value suggested by 'trial'."""
        return {p.name: p.suggest(trial) for p in self.parameters}

    def get_param_names(self) -> list[str]:
        return [p.name for p in self.parameters]

    def __len__(self) -> int:
        return len(self.parameters)

    def __repr__(self) -> str:
        return f"SearchSpace({self.get_param_names()})"
