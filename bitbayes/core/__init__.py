"""Core module for bitbayes.

This module contains the bit-vector keys, weighted tallies and query
objects shared by networks and samplers, plus the error hierarchy.
"""

from .errors import (
    BitBayesError,
    IncompleteTable,
    NoSamplesAccepted,
    OutOfTopologicalOrder,
    UnknownVariable,
)
from .types import TRUE, BitVector, Query, WeightedSet

__all__ = [
    "BitBayesError",
    "BitVector",
    "IncompleteTable",
    "NoSamplesAccepted",
    "OutOfTopologicalOrder",
    "Query",
    "TRUE",
    "UnknownVariable",
    "WeightedSet",
]
