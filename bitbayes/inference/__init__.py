"""Inference algorithms for bitbayes."""

from bitbayes.inference.sampling import (
    DEFAULT_NUM_SAMPLES,
    METHODS,
    direct_sample,
    likelihood_weighting,
    rejection_sampling,
)

__all__ = [
    "DEFAULT_NUM_SAMPLES",
    "METHODS",
    "direct_sample",
    "likelihood_weighting",
    "rejection_sampling",
]
