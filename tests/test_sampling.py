"""Tests for bitbayes/inference/sampling.py.

Covers:
- Direct sampling convergence to the prior
- Rejection sampling convergence and NoSamplesAccepted
- Likelihood weighting: per-sample weights (including false evidence)
  and convergence
- Result layout (topological bit order, normalization)
- Agreement with brute-force enumeration on a random DAG
- Reproducibility (seed control) and argument validation
"""

from __future__ import annotations

import itertools
import logging

import numpy as np
import pytest

from bitbayes.core.errors import NoSamplesAccepted, UnknownVariable
from bitbayes.core.types import BitVector, Query
from bitbayes.inference.sampling import (
    direct_sample,
    iter_prior_samples,
    iter_rejection_samples,
    iter_weighted_samples,
    likelihood_weighting,
    rejection_sampling,
)
from bitbayes.networks.graph import build_random_dag
from bitbayes.networks.network import BayesianNetwork


# ------------------------------------------------------------------ #
#  Helpers
# ------------------------------------------------------------------ #

def _two_node_chain() -> BayesianNetwork:
    """A -> B with P(A)=0.7, P(B|A)=0.9, P(B|~A)=0.1."""
    bn = BayesianNetwork()
    bn.add_node("A", 0.7)
    bn.add_node("B", {(True,): 0.9, (False,): 0.1}, parents=["A"])
    return bn


def _brute_force_marginal(
    network: BayesianNetwork, target: str, evidence: dict
) -> float:
    """P(target = true | evidence) by enumerating every joint assignment."""
    n = len(network)
    idx = network.node(target).index
    numer = denom = 0.0
    for values in itertools.product([True, False], repeat=n):
        assignment = np.array(values, dtype=bool)
        if any(assignment[network.node(k).index] != v for k, v in evidence.items()):
            continue
        prob = 1.0
        for node in network:
            prob *= node.likelihood(assignment, bool(assignment[node.index]))
        denom += prob
        if assignment[idx]:
            numer += prob
    return numer / denom


T = BitVector.from_bools([True])
F = BitVector.from_bools([False])


# ------------------------------------------------------------------ #
#  Direct sampling
# ------------------------------------------------------------------ #

class TestDirectSample:

    def test_converges_to_prior(self) -> None:
        """P(B) = 0.7 * 0.9 + 0.3 * 0.1 = 0.66."""
        result = direct_sample(_two_node_chain(), Query({"B"}), 100_000, seed=42)
        assert result.get_weight(T) == pytest.approx(0.66, abs=0.01)
        assert result.total() == pytest.approx(1.0)

    def test_ignores_evidence(self) -> None:
        bn = _two_node_chain()
        result = bn.direct_sample(Query({"B"}, {"A": False}), 50_000, seed=3)
        assert result.marginal("B") == pytest.approx(0.66, abs=0.015)

    def test_every_sample_has_unit_weight(self) -> None:
        rng = np.random.default_rng(0)
        pairs = list(iter_prior_samples(_two_node_chain(), Query({"A", "B"}), 50, rng))
        assert len(pairs) == 50
        assert all(w == 1.0 and len(s) == 2 for s, w in pairs)

    def test_bits_follow_topological_order(self) -> None:
        """Positions follow network order, not the query's own order."""
        bn = BayesianNetwork()
        bn.add_node("Z", 1.0)
        bn.add_node("A", 0.0)
        result = bn.direct_sample(Query({"A", "Z"}), 100, seed=0)
        assert result.variables == ("Z", "A")
        assert result.as_dict() == {(True, False): pytest.approx(1.0)}

    def test_empty_query(self) -> None:
        result = _two_node_chain().direct_sample(Query(set()), 10, seed=0)
        assert result.variables == ()
        assert result.as_dict() == {(): pytest.approx(1.0)}


# ------------------------------------------------------------------ #
#  Rejection sampling
# ------------------------------------------------------------------ #

class TestRejectionSampling:

    def test_converges_to_posterior(self) -> None:
        result = rejection_sampling(
            _two_node_chain(), Query({"B"}, {"A": True}), 100_000, seed=42
        )
        assert result.get_weight(T) == pytest.approx(0.9, abs=0.02)
        assert result.total() == pytest.approx(1.0)

    def test_accepts_only_consistent_samples(self) -> None:
        """About 30% of draws have A=false and are discarded."""
        rng = np.random.default_rng(5)
        accepted = list(iter_rejection_samples(
            _two_node_chain(), Query({"B"}, {"A": False}), 10_000, rng
        ))
        assert len(accepted) == pytest.approx(3_000, abs=200)

    def test_impossible_evidence_raises(self) -> None:
        bn = BayesianNetwork()
        bn.add_node("A", 0.5)
        bn.add_node("Never", {(True,): 0.0, (False,): 0.0}, parents=["A"])
        with pytest.raises(NoSamplesAccepted) as info:
            bn.rejection_sampling(Query({"A"}, {"Never": True}), 1_000, seed=0)
        assert info.value.num_samples == 1_000

    def test_low_acceptance_warns(self, caplog) -> None:
        bn = BayesianNetwork()
        bn.add_node("Rare", 0.001)
        bn.add_node("B", {(True,): 0.5, (False,): 0.5}, parents=["Rare"])
        with caplog.at_level(logging.WARNING, logger="bitbayes.inference.sampling"):
            bn.rejection_sampling(Query({"B"}, {"Rare": True}), 20_000, seed=1)
        assert any("samples accepted" in r.getMessage() for r in caplog.records)


# ------------------------------------------------------------------ #
#  Likelihood weighting
# ------------------------------------------------------------------ #

class TestLikelihoodWeighting:

    def test_weight_is_probability_of_true_evidence(self) -> None:
        rng = np.random.default_rng(0)
        pairs = list(iter_weighted_samples(
            _two_node_chain(), Query({"B"}, {"A": True}), 200, rng
        ))
        assert len(pairs) == 200
        assert all(w == pytest.approx(0.7) for _, w in pairs)

    def test_weight_uses_complement_for_false_evidence(self) -> None:
        rng = np.random.default_rng(0)
        pairs = list(iter_weighted_samples(
            _two_node_chain(), Query({"B"}, {"A": False}), 200, rng
        ))
        assert all(w == pytest.approx(0.3) for _, w in pairs)

    def test_converges_to_posterior(self) -> None:
        result = likelihood_weighting(
            _two_node_chain(), Query({"B"}, {"A": True}), 100_000, seed=42
        )
        assert result.get_weight(T) == pytest.approx(0.9, abs=0.02)

    def test_false_evidence_posterior(self) -> None:
        result = likelihood_weighting(
            _two_node_chain(), Query({"B"}, {"A": False}), 50_000, seed=7
        )
        assert result.marginal("B") == pytest.approx(0.1, abs=0.02)

    def test_diagnostic_evidence(self) -> None:
        """Evidence on the child: P(A | B=true) = 0.63 / 0.66."""
        result = likelihood_weighting(
            _two_node_chain(), Query({"A"}, {"B": True}), 100_000, seed=11
        )
        assert result.marginal("A") == pytest.approx(0.63 / 0.66, abs=0.02)

    def test_diagnostic_false_evidence(self) -> None:
        """P(A | B=false) = 0.07 / 0.34."""
        result = likelihood_weighting(
            _two_node_chain(), Query({"A"}, {"B": False}), 100_000, seed=12
        )
        assert result.marginal("A") == pytest.approx(0.07 / 0.34, abs=0.02)

    def test_zero_total_weight_raises(self) -> None:
        bn = BayesianNetwork()
        bn.add_node("A", 1.0)
        bn.add_node("B", 0.5)
        with pytest.raises(NoSamplesAccepted):
            bn.likelihood_weighting(Query({"B"}, {"A": False}), 100, seed=0)


# ------------------------------------------------------------------ #
#  Cross-checks
# ------------------------------------------------------------------ #

class TestAgainstEnumeration:

    @pytest.mark.parametrize("method", ["rejection", "likelihood"])
    def test_random_dag(self, method) -> None:
        bn = build_random_dag(7, max_parents=2, seed=21)
        evidence = {"X1": True, "X5": False}
        exact = _brute_force_marginal(bn, "X6", evidence)
        result = bn.infer(Query({"X6"}, evidence), method, 40_000, seed=8)
        assert result.marginal("X6") == pytest.approx(exact, abs=0.03)

    def test_prior_on_random_dag(self) -> None:
        bn = build_random_dag(6, max_parents=2, seed=4)
        exact = _brute_force_marginal(bn, "X5", {})
        result = bn.direct_sample(Query({"X5"}), 40_000, seed=9)
        assert result.marginal("X5") == pytest.approx(exact, abs=0.02)


# ------------------------------------------------------------------ #
#  Reproducibility and validation
# ------------------------------------------------------------------ #

class TestReproducibility:

    @pytest.mark.parametrize(
        "algorithm", [direct_sample, rejection_sampling, likelihood_weighting]
    )
    def test_same_seed_same_result(self, algorithm) -> None:
        bn = build_random_dag(6, seed=2)
        query = Query({"X4", "X5"}, {"X0": True})
        a = algorithm(bn, query, 2_000, seed=123)
        b = algorithm(bn, query, 2_000, seed=123)
        assert a.as_dict() == b.as_dict()

    def test_rng_argument(self) -> None:
        bn = _two_node_chain()
        a = bn.direct_sample(Query({"B"}), 500, rng=np.random.default_rng(9))
        b = bn.direct_sample(Query({"B"}), 500, seed=9)
        assert a.as_dict() == b.as_dict()

    def test_seed_and_rng_are_exclusive(self) -> None:
        with pytest.raises(ValueError, match="either seed or rng"):
            direct_sample(
                _two_node_chain(), Query({"B"}), 10,
                seed=1, rng=np.random.default_rng(1),
            )

    @pytest.mark.parametrize("n", [0, -5, 2.5, True])
    def test_invalid_num_samples(self, n) -> None:
        with pytest.raises(ValueError, match="num_samples"):
            direct_sample(_two_node_chain(), Query({"B"}), n)

    def test_unknown_variable(self) -> None:
        with pytest.raises(UnknownVariable):
            likelihood_weighting(_two_node_chain(), Query({"B"}, {"C": True}), 10)

    def test_network_left_unchanged(self) -> None:
        """Sampling reads node tables but never writes to them."""
        bn = _two_node_chain()
        before = [n.cpt.as_dict() for n in bn]
        bn.likelihood_weighting(Query({"B"}, {"A": True}), 1_000, seed=0)
        assert [n.cpt.as_dict() for n in bn] == before

    def test_query_validated_once_per_call(self, monkeypatch) -> None:
        bn = _two_node_chain()
        calls = []
        original = bn.validate_query

        def counting(query):
            calls.append(query)
            return original(query)

        monkeypatch.setattr(bn, "validate_query", counting)
        for algorithm in (direct_sample, rejection_sampling, likelihood_weighting):
            calls.clear()
            algorithm(bn, Query({"B"}, {"A": True}), 50, seed=0)
            assert len(calls) == 1

    def test_generators_validate_before_iteration(self) -> None:
        rng = np.random.default_rng(0)
        with pytest.raises(UnknownVariable):
            iter_weighted_samples(_two_node_chain(), Query({"Nope"}), 10, rng)
