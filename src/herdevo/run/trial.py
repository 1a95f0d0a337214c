"""
Herder Trial Module

A trial is one independent training run: it builds a TrainingSession, ticks
it until the configured number of generations has been bred (or until it is
stopped), and reports progress after every generation.
"""

from sys    import stdout
from typing import Optional

from herdevo.pool.population   import TransitionOutcome
from herdevo.run.config        import Config
from herdevo.run.session       import TrainingSession
from herdevo.world.world_model import WorldModel

class Trial:
    """
    One independent training run.

    Subclasses can override:
    - _report_progress(): Display progress after each generation
    - _final_report():    Display final results
    - _terminate():       Custom termination logic (default: max generations)

    Public Attributes:
        session: The TrainingSession of the last (or current) run
        failed:  False if any flock reached the goal region during the run

    Public Methods:
        run(num_jobs): Execute a complete trial
        stop():        Stop the run at the next tick

    Parallelization of the flock moves within a tick:
        num_jobs=1:  Serial
        num_jobs>1:  Use specified number of worker threads
        num_jobs=-1: Use one thread per CPU core
    """

    def __init__(self,
                 config         : Config,
                 world          : Optional[WorldModel] = None,
                 suppress_output: bool = False,
                 max_ticks      : Optional[int] = None):
        """
        Parameters:
            config:          Configuration parameters
            world:           The course (defaults to the standard course)
            suppress_output: If True, suppress progress and final reports
                             (useful when running multiple trials in experiments)
            max_ticks:       Optional hard limit on the number of ticks played
        """
        self._config         : Config                    = config
        self._world          : Optional[WorldModel]      = world
        self._suppress_output: bool                      = suppress_output
        self._max_ticks      : Optional[int]             = max_ticks
        self._ticks          : int                       = 0
        self.session         : Optional[TrainingSession] = None
        self.failed          : bool                      = True

    @property
    def generation(self) -> int:
        return self.session.generation if self.session is not None else 0

    def run(self, num_jobs: int = 1):
        """
        Run the trial: create the population and the first flocks, then
        tick until the terminate condition is met or 'stop()' is called.

        Parameters:
            num_jobs: Number of worker threads moving the flocks
        """
        self._reset()
        self.session = TrainingSession(self._config, self._world)
        self.session.start()

        while self.session.running.is_set() and not self._terminate():
            outcome = self.session.tick(num_jobs)
            self._ticks += 1

            if outcome is not None:
                if self.session.stats[-1].flocks_in_goal > 0:
                    self.failed = False
                if not self._suppress_output:
                    self._report_progress(outcome)

        if not self._suppress_output:
            self._final_report()

    def stop(self):
        """Ask the running trial to stop; it finishes the current tick first."""
        if self.session is not None:
            self.session.stop()

    def _reset(self):
        self._ticks = 0
        self.failed = True

    def _terminate(self) -> bool:
        """
        The default implementation stops after 'max_number_generations'
        generations (never, if None) or 'max_ticks' ticks.
        """
        if self._max_ticks is not None and self._ticks >= self._max_ticks:
            return True
        limit = self._config.max_number_generations
        return limit is not None and self.session.generation >= limit

    def best_fitness(self) -> float:
        """Highest flock fitness of any finished generation."""
        if self.session is None or not self.session.stats:
            return 0.0
        return max(s.best_fitness for s in self.session.stats)

    def _report_progress(self, outcome: TransitionOutcome):
        stats = self.session.stats[-1]
        s = (f"generation {stats.generation:4d} | moves {stats.moves_budget:6d} | "
             f"best fitness {stats.best_fitness:7.2f} | mean fitness {stats.mean_fitness:7.2f} | "
             f"in goal {stats.flocks_in_goal:3d} | failed {stats.failed_flocks:3d} | {outcome.value}")
        stdout.write(s + '\n')
        stdout.flush()

    def _final_report(self):
        session = self.session
        waypoints = session.world.waypoint_count

        print(f"\nTrained {session.generation} generations; best flock fitness {self.best_fitness():.2f}")
        print(f"{'rank':>4}  {'id':>4}  {'fitness':>8}  {'score':>10}  {'best':>5}  {'average':>8}")
        for network in sorted(session.population, key=lambda n: n.rank or len(session.population))[:10]:
            print(f"{network.rank:>4}  {network.id:>4}  {network.fitness:>8.2f}  {network.score:>10.2f}  "
                  f"{network.best_fitness(waypoints):>5.0f}  {network.average_fitness():>8.2f}")
