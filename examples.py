"""Example usage of the bitbayes package.

This example demonstrates the core features of the bitbayes package:
- Building a network of boolean variables node by node
- Direct sampling, rejection sampling and likelihood weighting
- Reading marginals out of the resulting distribution
- Saving and loading a network as JSON
"""

import os
import tempfile

from bitbayes import BayesianNetwork, NoSamplesAccepted, Query
from bitbayes.integration.serialization import load_network, save_network
from bitbayes.viz.distributions import format_weighted_set


def build_alarm_network():
    """The classic burglary / earthquake / alarm network."""
    bn = BayesianNetwork()
    bn.add_node("Burglary", 0.001)
    bn.add_node("Earthquake", 0.002)
    bn.add_node(
        "Alarm",
        {
            (True, True): 0.95,
            (True, False): 0.94,
            (False, True): 0.29,
            (False, False): 0.001,
        },
        parents=["Burglary", "Earthquake"],
    )
    bn.add_node("JohnCalls", {(True,): 0.90, (False,): 0.05}, parents=["Alarm"])
    bn.add_node("MaryCalls", {(True,): 0.70, (False,): 0.01}, parents=["Alarm"])
    return bn


def sampling_example():
    """Compare the three samplers on P(Burglary | JohnCalls, MaryCalls)."""
    print("=" * 60)
    print("Sampling Example")
    print("=" * 60)

    bn = build_alarm_network()
    query = Query({"Burglary"}, {"JohnCalls": True, "MaryCalls": True})

    print("\n1. Direct sampling (prior, evidence ignored)")
    prior = bn.direct_sample(query, 100_000, seed=0)
    print(format_weighted_set(prior))

    print("\n2. Rejection sampling")
    try:
        posterior = bn.rejection_sampling(query, 100_000, seed=0)
        print(format_weighted_set(posterior))
    except NoSamplesAccepted as exc:
        print(f"   {exc}")

    print("\n3. Likelihood weighting")
    posterior = bn.likelihood_weighting(query, 100_000, seed=0)
    print(format_weighted_set(posterior))
    print(f"   P(Burglary | calls) ~ {posterior.marginal('Burglary'):.3f} "
          "(exact: 0.284)")


def serialization_example():
    """Round-trip the network through a JSON file."""
    print("\n" + "=" * 60)
    print("Serialization Example")
    print("=" * 60)

    bn = build_alarm_network()
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "alarm.json")
        save_network(bn, path)
        loaded = load_network(path)
    print(f"\n   Loaded: {loaded}")


if __name__ == "__main__":
    sampling_example()
    serialization_example()
