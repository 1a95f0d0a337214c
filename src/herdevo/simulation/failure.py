"""
Failure reasons of a flock.

A failed flock is an ordinary outcome of a generation, not an error, so
failures are recorded as data on the flock rather than raised.
"""

from enum import Enum

class FailureReason(str, Enum):
    RUNNING      = "RUNNING"
    OUT_OF_SIGHT = "OUT OF SIGHT"
    TIME_WASTING = "TIME WASTING"
    TIME_UP      = "TIME UP"
    STRAGGLERS   = "STRAGGLERS"
