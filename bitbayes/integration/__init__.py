"""Loading and saving networks."""

from bitbayes.integration.serialization import load_network, save_network

__all__ = [
    "load_network",
    "save_network",
]
