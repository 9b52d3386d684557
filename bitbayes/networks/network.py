"""Bayesian network of boolean random variables.

Provides :class:`BayesianNetwork`, an ordered arena of
:class:`~bitbayes.networks.node.Node` objects in which every parent
precedes its children.  CPT completeness and topological order are
checked as nodes are added, so the samplers never meet a missing table
entry at query time.

Inference methods (see :mod:`bitbayes.inference.sampling`):

* :meth:`BayesianNetwork.direct_sample` – prior (forward) sampling.
* :meth:`BayesianNetwork.rejection_sampling` – discard samples that
  contradict the evidence.
* :meth:`BayesianNetwork.likelihood_weighting` – clamp evidence and
  weight each sample by its likelihood.

Example
-------
>>> bn = BayesianNetwork()
>>> _ = bn.add_node("A", 0.7)
>>> _ = bn.add_node("B", {(True,): 0.9, (False,): 0.1}, parents=["A"])
>>> result = bn.likelihood_weighting(Query({"B"}, {"A": True}), 10_000)
>>> round(result.marginal("B"), 1)
0.9
"""

from __future__ import annotations

import logging
from numbers import Real
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np

from bitbayes.core.errors import IncompleteTable, OutOfTopologicalOrder, UnknownVariable
from bitbayes.core.types import TRUE, BitVector, Query, WeightedSet
from bitbayes.inference import sampling
from bitbayes.networks.node import Node

log = logging.getLogger(__name__)

CPTLike = Union[float, WeightedSet, Mapping[Any, float]]


def _as_key(key: Any) -> BitVector:
    if isinstance(key, BitVector):
        return key
    if isinstance(key, (bool, np.bool_)):
        return BitVector.from_bools([key])
    return BitVector.from_bools(key)


def build_cpt(name: str, cpt: CPTLike, num_parents: int) -> WeightedSet:
    """Convert *cpt* into a validated :class:`WeightedSet`.

    Parameters
    ----------
    name : str
        Node name, used in error messages.
    cpt : float, WeightedSet or mapping
        A bare probability (root nodes only), or a mapping from a
        parent configuration (``BitVector`` or tuple of bools) to
        P(true | configuration).
    num_parents : int
        Number of parents the table is keyed on.

    Raises
    ------
    IncompleteTable
        If some parent configuration has no entry.
    ValueError
        On wrongly-sized keys or probabilities outside [0, 1].
    """
    if isinstance(cpt, (Real, np.floating)):
        if num_parents:
            raise ValueError(
                f"Node '{name}' has {num_parents} parent(s); a bare "
                "probability is only valid for a root node"
            )
        entries: Iterable[Tuple[Any, float]] = [(TRUE, float(cpt))]
    else:
        # WeightedSet and plain mappings both expose items()
        entries = cpt.items()

    table = WeightedSet(width=num_parents)
    for raw_key, p in entries:
        key = _as_key(raw_key)
        if len(key) != num_parents:
            raise ValueError(
                f"Node '{name}': CPT key {key!r} has {len(key)} bit(s), "
                f"expected {num_parents}"
            )
        p = float(p)
        if not 0.0 <= p <= 1.0:
            raise ValueError(
                f"Node '{name}': probability {p} for {key!r} outside [0, 1]"
            )
        if key in table:
            raise ValueError(f"Node '{name}': duplicate CPT key {key!r}")
        table.increment(key, p)

    missing = [
        cfg for cfg in BitVector.configurations(num_parents) if cfg not in table
    ]
    if missing:
        raise IncompleteTable(name, missing)
    return table


class BayesianNetwork:
    """Ordered collection of boolean nodes, parents before children.

    Nodes are added in topological order with :meth:`add_node` or all
    at once with :meth:`from_specs`.  Once built, the network is only
    read by the samplers; sampled values are kept in per-call buffers.
    """

    def __init__(self) -> None:
        self._nodes: List[Node] = []
        self._index: Dict[str, int] = {}

    # ------------------------------------------------------------------ #
    #  Graph construction
    # ------------------------------------------------------------------ #

    def add_node(
        self,
        name: str,
        cpt: CPTLike,
        parents: Optional[Sequence[str]] = None,
    ) -> Node:
        """Append a node to the network.

        Parameters
        ----------
        name : str
            Unique identifier for this variable.
        cpt : float, WeightedSet or mapping
            See :func:`build_cpt`.
        parents : list of str, optional
            Names of parent nodes.  Must already exist in the network.

        Returns
        -------
        Node
            The newly created node.

        Raises
        ------
        ValueError
            If *name* already exists or a parent is listed twice.
        OutOfTopologicalOrder
            If a parent has not been added yet.
        IncompleteTable
            If *cpt* lacks a parent configuration.
        """
        if name in self._index:
            raise ValueError(f"Node '{name}' already exists")
        parents = list(parents or [])
        if len(set(parents)) != len(parents):
            raise ValueError(f"Node '{name}' lists a parent more than once")
        for p in parents:
            if p not in self._index:
                raise OutOfTopologicalOrder(name, p)

        table = build_cpt(name, cpt, len(parents))
        node = Node(
            name,
            len(self._nodes),
            [self._index[p] for p in parents],
            table,
            parent_names=parents,
        )
        self._nodes.append(node)
        self._index[name] = node.index
        log.debug("Added node %r with parents %s", name, parents)
        return node

    @classmethod
    def from_specs(cls, specs: Iterable[Any]) -> BayesianNetwork:
        """Build a network from an ordered list of node specifications.

        Each spec is either a ``(name, parents, cpt)`` triple or a dict
        with ``name``, ``parents`` and ``cpt`` keys.

        Raises
        ------
        OutOfTopologicalOrder
            If a parent is defined after its child.
        UnknownVariable
            If a parent is never defined.
        """
        normalized: List[Tuple[str, List[str], CPTLike]] = []
        for spec in specs:
            if isinstance(spec, Mapping):
                normalized.append(
                    (spec["name"], list(spec.get("parents") or []), spec["cpt"])
                )
            else:
                name, parents, cpt = spec
                normalized.append((name, list(parents or []), cpt))

        declared = {name for name, _, _ in normalized}
        for name, parents, _ in normalized:
            unknown = [p for p in parents if p not in declared]
            if unknown:
                raise UnknownVariable(unknown)

        bn = cls()
        for name, parents, cpt in normalized:
            bn.add_node(name, cpt, parents=parents)
        log.debug("Built network with %d node(s)", len(bn))
        return bn

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """Nodes in topological (insertion) order."""
        return tuple(self._nodes)

    @property
    def names(self) -> List[str]:
        return [n.name for n in self._nodes]

    def node(self, name: str) -> Node:
        """Return the node called *name*.

        Raises
        ------
        UnknownVariable
            If there is no such node.
        """
        try:
            return self._nodes[self._index[name]]
        except KeyError:
            raise UnknownVariable([name]) from None

    def get_parents(self, name: str) -> List[str]:
        """Return parent names for *name*."""
        return list(self.node(name).parent_names)

    def validate_query(self, query: Query) -> None:
        """Check that every variable *query* names exists in the network.

        Raises
        ------
        UnknownVariable
            Listing every unknown name.
        """
        unknown = [v for v in query.variables if v not in self._index]
        if unknown:
            raise UnknownVariable(unknown)

    def new_assignment(self) -> np.ndarray:
        """Return a fresh per-sample value buffer for this network."""
        return np.zeros(len(self._nodes), dtype=bool)

    def to_networkx(self) -> nx.DiGraph:
        """Return the structure as a :class:`networkx.DiGraph`."""
        graph = nx.DiGraph()
        for node in self._nodes:
            graph.add_node(node.name)
            for parent in node.parent_names:
                graph.add_edge(parent, node.name)
        return graph

    # ------------------------------------------------------------------ #
    #  Approximate inference
    # ------------------------------------------------------------------ #

    def direct_sample(
        self,
        query: Query,
        num_samples: int = sampling.DEFAULT_NUM_SAMPLES,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> WeightedSet:
        """Estimate the prior over the query variables by direct sampling."""
        return sampling.direct_sample(self, query, num_samples, seed=seed, rng=rng)

    def rejection_sampling(
        self,
        query: Query,
        num_samples: int = sampling.DEFAULT_NUM_SAMPLES,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> WeightedSet:
        """Estimate the posterior by discarding inconsistent samples."""
        return sampling.rejection_sampling(
            self, query, num_samples, seed=seed, rng=rng
        )

    def likelihood_weighting(
        self,
        query: Query,
        num_samples: int = sampling.DEFAULT_NUM_SAMPLES,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> WeightedSet:
        """Estimate the posterior by weighting samples with the evidence."""
        return sampling.likelihood_weighting(
            self, query, num_samples, seed=seed, rng=rng
        )

    def infer(
        self,
        query: Query,
        method: str = "likelihood",
        num_samples: int = sampling.DEFAULT_NUM_SAMPLES,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> WeightedSet:
        """Run the sampler named *method* (see :data:`sampling.METHODS`)."""
        try:
            algorithm = sampling.METHODS[method]
        except KeyError:
            raise ValueError(
                f"Unknown method {method!r}; choose from {sorted(sampling.METHODS)}"
            ) from None
        return algorithm(self, query, num_samples, seed=seed, rng=rng)

    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __repr__(self) -> str:
        return f"BayesianNetwork(nodes={self.names})"
