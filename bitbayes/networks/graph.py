"""Network construction utilities for bitbayes."""

from __future__ import annotations

from typing import Optional

import numpy as np

from bitbayes.core.types import BitVector
from bitbayes.networks.network import BayesianNetwork


def _random_cpt(rng: np.random.Generator, num_parents: int) -> dict:
    return {
        cfg: float(rng.uniform(0.05, 0.95))
        for cfg in BitVector.configurations(num_parents)
    }


def build_chain(
    num_nodes: int,
    seed: Optional[int] = None,
) -> BayesianNetwork:
    """Build a chain X0 -> X1 -> ... with random CPTs."""
    rng = np.random.default_rng(seed)
    bn = BayesianNetwork()
    for i in range(num_nodes):
        parents = [f"X{i - 1}"] if i else []
        bn.add_node(f"X{i}", _random_cpt(rng, len(parents)), parents=parents)
    return bn


def build_random_dag(
    num_nodes: int,
    max_parents: int = 2,
    seed: Optional[int] = None,
) -> BayesianNetwork:
    """Build a random DAG over X0..X{n-1} with random CPTs.

    Each node picks up to *max_parents* parents among the nodes before
    it, so insertion order is a valid topological order.
    """
    rng = np.random.default_rng(seed)
    bn = BayesianNetwork()
    for i in range(num_nodes):
        k = int(rng.integers(0, min(i, max_parents) + 1))
        picked = sorted(rng.choice(i, size=k, replace=False).tolist()) if k else []
        parents = [f"X{j}" for j in picked]
        bn.add_node(f"X{i}", _random_cpt(rng, k), parents=parents)
    return bn
