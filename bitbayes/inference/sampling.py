"""Sampling-based approximate inference for boolean Bayesian networks.

Provides:
- direct_sample: prior (forward) sampling, evidence ignored
- rejection_sampling: forward sampling that drops samples contradicting
  the evidence
- likelihood_weighting: evidence is clamped and each sample weighted by
  the likelihood of the clamped values
- iter_prior_samples / iter_rejection_samples / iter_weighted_samples:
  the per-sample generators the three algorithms fold

Every algorithm returns a normalized
:class:`~bitbayes.core.types.WeightedSet` whose bit positions follow the
order in which query variables appear in the network, recorded in the
result's ``variables`` attribute.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional, Tuple

import numpy as np

from bitbayes.core.errors import NoSamplesAccepted
from bitbayes.core.types import BitVector, Query, WeightedSet

if TYPE_CHECKING:
    from bitbayes.networks.network import BayesianNetwork

log = logging.getLogger(__name__)

DEFAULT_NUM_SAMPLES = 10_000

# Acceptance rate below which rejection sampling logs a warning
_LOW_ACCEPTANCE = 0.01

# Node roles in the per-query lookup table
HIDDEN, EVIDENCE, QUERY = 0, 1, 2


# ------------------------------------------------------------------ #
#  Setup helpers
# ------------------------------------------------------------------ #

def _make_rng(
    seed: Optional[int], rng: Optional[np.random.Generator]
) -> np.random.Generator:
    if seed is not None and rng is not None:
        raise ValueError("Pass either seed or rng, not both")
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def _check_num_samples(num_samples: int) -> None:
    if isinstance(num_samples, bool) or not isinstance(num_samples, (int, np.integer)):
        raise ValueError(f"num_samples must be an int, got {num_samples!r}")
    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got {num_samples}")


def _roles(
    network: BayesianNetwork, query: Query
) -> Tuple[np.ndarray, np.ndarray, Tuple[str, ...]]:
    """Precompute the role and evidence value of every arena position.

    Returns
    -------
    roles : numpy.ndarray of int8
        :data:`HIDDEN`, :data:`EVIDENCE` or :data:`QUERY` per node.
    evidence : numpy.ndarray of bool
        Observed value per node (meaningful only where role is EVIDENCE).
    variables : tuple of str
        Query variable names in topological order.
    """
    network.validate_query(query)
    n = len(network)
    roles = np.full(n, HIDDEN, dtype=np.int8)
    evidence = np.zeros(n, dtype=bool)
    variables = []
    for node in network.nodes:
        if node.name in query.evidence:
            roles[node.index] = EVIDENCE
            evidence[node.index] = query.evidence[node.name]
        elif node.name in query.query_variables:
            roles[node.index] = QUERY
            variables.append(node.name)
    return roles, evidence, tuple(variables)


# ------------------------------------------------------------------ #
#  Per-sample generators
# ------------------------------------------------------------------ #

_Lookup = Tuple[np.ndarray, np.ndarray, Tuple[str, ...]]


def _prior_samples(
    network: BayesianNetwork,
    lookup: _Lookup,
    num_samples: int,
    rng: np.random.Generator,
) -> Iterator[Tuple[BitVector, float]]:
    roles, _, variables = lookup
    nodes = network.nodes
    assignment = network.new_assignment()
    width = len(variables)

    for _ in range(num_samples):
        sample = BitVector(width)
        pos = 0
        for node in nodes:
            value = node.sample_and_set(assignment, rng)
            if roles[node.index] == QUERY:
                sample.set(pos, value)
                pos += 1
        yield sample, 1.0


def _rejection_samples(
    network: BayesianNetwork,
    lookup: _Lookup,
    num_samples: int,
    rng: np.random.Generator,
) -> Iterator[Tuple[BitVector, float]]:
    roles, evidence, variables = lookup
    nodes = network.nodes
    assignment = network.new_assignment()
    width = len(variables)

    for _ in range(num_samples):
        sample = BitVector(width)
        pos = 0
        for node in nodes:
            value = node.sample_and_set(assignment, rng)
            role = roles[node.index]
            if role == EVIDENCE:
                if value != evidence[node.index]:
                    break
            elif role == QUERY:
                sample.set(pos, value)
                pos += 1
        else:
            yield sample, 1.0


def _weighted_samples(
    network: BayesianNetwork,
    lookup: _Lookup,
    num_samples: int,
    rng: np.random.Generator,
) -> Iterator[Tuple[BitVector, float]]:
    roles, evidence, variables = lookup
    nodes = network.nodes
    assignment = network.new_assignment()
    width = len(variables)

    for _ in range(num_samples):
        weight = 1.0
        sample = BitVector(width)
        pos = 0
        for node in nodes:
            role = roles[node.index]
            if role == EVIDENCE:
                observed = bool(evidence[node.index])
                node.set_value(assignment, observed)
                weight *= node.likelihood(assignment, observed)
            else:
                value = node.sample_and_set(assignment, rng)
                if role == QUERY:
                    sample.set(pos, value)
                    pos += 1
        yield sample, weight


def iter_prior_samples(
    network: BayesianNetwork,
    query: Query,
    num_samples: int,
    rng: np.random.Generator,
) -> Iterator[Tuple[BitVector, float]]:
    """Yield ``(sample, 1.0)`` for each of *num_samples* forward draws.

    The query is validated before the first draw, so unknown names raise
    here rather than on iteration.
    """
    return _prior_samples(network, _roles(network, query), num_samples, rng)


def iter_rejection_samples(
    network: BayesianNetwork,
    query: Query,
    num_samples: int,
    rng: np.random.Generator,
) -> Iterator[Tuple[BitVector, float]]:
    """Yield ``(sample, 1.0)`` for each forward draw consistent with evidence.

    A draw is abandoned as soon as one evidence node disagrees with its
    observed value, so fewer than *num_samples* pairs may be yielded.
    """
    return _rejection_samples(network, _roles(network, query), num_samples, rng)


def iter_weighted_samples(
    network: BayesianNetwork,
    query: Query,
    num_samples: int,
    rng: np.random.Generator,
) -> Iterator[Tuple[BitVector, float]]:
    """Yield ``(sample, weight)`` for each of *num_samples* weighted draws.

    Evidence nodes are clamped to their observed value and the weight is
    multiplied by P(observed value | parents): P(true | parents) when
    the evidence is true and its complement when it is false.
    """
    return _weighted_samples(network, _roles(network, query), num_samples, rng)


# ------------------------------------------------------------------ #
#  Algorithms
# ------------------------------------------------------------------ #

def _tally(
    samples: Iterator[Tuple[BitVector, float]], variables: Tuple[str, ...]
) -> Tuple[WeightedSet, int]:
    result = WeightedSet(variables=variables)
    count = 0
    for sample, weight in samples:
        result.increment(sample, weight)
        count += 1
    return result, count


def direct_sample(
    network: BayesianNetwork,
    query: Query,
    num_samples: int = DEFAULT_NUM_SAMPLES,
    *,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> WeightedSet:
    """Approximate the prior over the query variables by direct sampling.

    Evidence in *query* is ignored.

    Args:
        network: The network to sample.
        query: Names the query variables.
        num_samples: Number of forward draws.
        seed: Optional random seed for reproducibility.
        rng: Optional generator to draw from instead of *seed*.

    Returns:
        A normalized distribution over the query variables.
    """
    _check_num_samples(num_samples)
    lookup = _roles(network, query)
    gen = _make_rng(seed, rng)
    log.info("Running direct sampling for %s with %d samples",
             sorted(query.query_variables), num_samples)

    result, _ = _tally(
        _prior_samples(network, lookup, num_samples, gen), lookup[2]
    )
    result.normalize_weights()
    return result


def rejection_sampling(
    network: BayesianNetwork,
    query: Query,
    num_samples: int = DEFAULT_NUM_SAMPLES,
    *,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> WeightedSet:
    """Approximate P(query | evidence) by rejection sampling.

    Args:
        network: The network to sample.
        query: Query variables and evidence.
        num_samples: Number of forward draws, accepted or not.
        seed: Optional random seed for reproducibility.
        rng: Optional generator to draw from instead of *seed*.

    Returns:
        A normalized distribution over the query variables.

    Raises:
        NoSamplesAccepted: If no draw was consistent with the evidence.
    """
    _check_num_samples(num_samples)
    lookup = _roles(network, query)
    gen = _make_rng(seed, rng)
    log.info("Running rejection sampling for P(%s | %s) with %d samples",
             sorted(query.query_variables), dict(query.evidence), num_samples)

    result, accepted = _tally(
        _rejection_samples(network, lookup, num_samples, gen), lookup[2]
    )
    rate = accepted / num_samples
    log.info("Accepted %d of %d samples (rate: %.4f)", accepted, num_samples, rate)
    if accepted == 0:
        raise NoSamplesAccepted(num_samples)
    if rate < _LOW_ACCEPTANCE:
        log.warning(
            "Only %d of %d samples accepted; estimate has high variance",
            accepted, num_samples,
        )
    result.normalize_weights()
    return result


def likelihood_weighting(
    network: BayesianNetwork,
    query: Query,
    num_samples: int = DEFAULT_NUM_SAMPLES,
    *,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> WeightedSet:
    """Approximate P(query | evidence) by likelihood weighting.

    Args:
        network: The network to sample.
        query: Query variables and evidence.
        num_samples: Number of weighted draws.
        seed: Optional random seed for reproducibility.
        rng: Optional generator to draw from instead of *seed*.

    Returns:
        A normalized distribution over the query variables.

    Raises:
        NoSamplesAccepted: If every draw had weight 0.
    """
    _check_num_samples(num_samples)
    lookup = _roles(network, query)
    gen = _make_rng(seed, rng)
    log.info("Running likelihood weighting for P(%s | %s) with %d samples",
             sorted(query.query_variables), dict(query.evidence), num_samples)

    result, _ = _tally(
        _weighted_samples(network, lookup, num_samples, gen), lookup[2]
    )
    total = result.total()
    log.info("Total weight: %.6g over %d samples", total, num_samples)
    if total <= 0.0:
        raise NoSamplesAccepted(num_samples)
    result.normalize_weights()
    return result


METHODS: Dict[str, Callable[..., WeightedSet]] = {
    "direct": direct_sample,
    "rejection": rejection_sampling,
    "likelihood": likelihood_weighting,
}
