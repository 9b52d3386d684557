"""bitbayes: approximate inference for boolean Bayesian networks.

This package provides a network of boolean random variables with
conditional probability tables, and three sampling algorithms to
estimate posteriors over it: direct sampling, rejection sampling and
likelihood weighting.
"""

__version__ = "0.1.0"

from .core.errors import (
    BitBayesError,
    IncompleteTable,
    NoSamplesAccepted,
    OutOfTopologicalOrder,
    UnknownVariable,
)
from .core.types import TRUE, BitVector, Query, WeightedSet
from .networks.network import BayesianNetwork
from .networks.node import Node

__all__ = [
    "BayesianNetwork",
    "BitBayesError",
    "BitVector",
    "IncompleteTable",
    "NoSamplesAccepted",
    "Node",
    "OutOfTopologicalOrder",
    "Query",
    "TRUE",
    "UnknownVariable",
    "WeightedSet",
]
