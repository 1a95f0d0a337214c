"""
Run Package

Configuration, the training session, and the trial/experiment drivers.
"""

from herdevo.run.config       import Config
from herdevo.run.session      import TrainingSession, GenerationStats
from herdevo.run.render_state import FlockView, NetworkView
from herdevo.run.trial        import Trial
from herdevo.run.experiment   import Experiment

__all__ = ['Config',
           'TrainingSession',
           'GenerationStats',
           'FlockView',
           'NetworkView',
           'Trial',
           'Experiment']
