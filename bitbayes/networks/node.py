"""A single boolean random variable in a :class:`BayesianNetwork`.

A :class:`Node` holds only immutable structure: its name, its arena
position, the arena positions of its parents and its CPT.  The value a
node takes in a given sample lives in an *assignment* buffer, a numpy
bool array indexed by arena position, owned by whichever sampler is
running.  Any number of samplers can therefore walk one network at the
same time.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from bitbayes.core.types import TRUE, BitVector, WeightedSet


class Node:
    """One boolean variable with its conditional probability table.

    Parameters
    ----------
    name : str
        Unique name of the variable within its network.
    index : int
        Position of this node in the network arena.
    parents : sequence of int
        Arena positions of the parents, in CPT-key order.  Each must be
        smaller than *index*.
    cpt : WeightedSet
        Maps a parent-configuration :class:`BitVector` to
        P(X = true | configuration).  A root node has the single key
        :data:`~bitbayes.core.types.TRUE`.
    parent_names : sequence of str, optional
        Names matching *parents*, kept for display and serialization.
    """

    __slots__ = ("name", "index", "parents", "parent_names", "cpt")

    def __init__(
        self,
        name: str,
        index: int,
        parents: Sequence[int],
        cpt: WeightedSet,
        parent_names: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.index = index
        self.parents: Tuple[int, ...] = tuple(parents)
        self.parent_names: Tuple[str, ...] = tuple(parent_names)
        self.cpt = cpt

    @property
    def is_root(self) -> bool:
        return not self.parents

    def configuration(self, assignment: np.ndarray) -> BitVector:
        """Return the CPT key for the parents' values in *assignment*."""
        if not self.parents:
            return TRUE
        key = BitVector(len(self.parents))
        for i, parent in enumerate(self.parents):
            if not assignment[parent]:
                key.set(i, False)
        return key

    def get_probability(self, assignment: np.ndarray) -> float:
        """Return P(X = true | parents) for the parents' current values.

        The parents must already be resolved in *assignment*.
        """
        return self.cpt.get_weight(self.configuration(assignment))

    def likelihood(self, assignment: np.ndarray, value: bool) -> float:
        """Return P(X = *value* | parents)."""
        p = self.get_probability(assignment)
        return p if value else 1.0 - p

    def set_value(self, assignment: np.ndarray, value: bool) -> None:
        """Clamp this node's value in *assignment*."""
        assignment[self.index] = value

    def sample_and_set(
        self, assignment: np.ndarray, rng: np.random.Generator
    ) -> bool:
        """Draw a value from P(X | parents), store it and return it."""
        value = bool(rng.random() < self.get_probability(assignment))
        assignment[self.index] = value
        return value

    def __repr__(self) -> str:
        return f"Node(name={self.name!r}, parents={list(self.parent_names)})"
