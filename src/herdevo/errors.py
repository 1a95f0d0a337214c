"""
Exceptions raised by herdevo.

Configuration and topology problems are fatal and raised at construction time.
Shape mismatches while loading a saved model are recoverable: 'Network.load()'
converts them into a warning and a 'False' return value.
"""

class HerdevoError(Exception):
    """Base class for all herdevo errors."""

class InvalidTopology(HerdevoError, ValueError):
    """The requested layer sizes or activations cannot form a network."""

class TopologyMismatch(HerdevoError, ValueError):
    """Two networks (or a network and its tensors) disagree on layer sizes."""

class ShapeMismatch(HerdevoError, ValueError):
    """A serialized model does not fit the network it is being loaded into."""
