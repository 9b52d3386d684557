"""Visualization of sampled distributions.

Provides ``plot_weighted_set`` for a bar chart of a normalized
:class:`~bitbayes.core.types.WeightedSet` and ``format_weighted_set``
for the same table as plain text.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from bitbayes.core.types import BitVector, WeightedSet

# ---------------------------------------------------------------------------
# Colorblind-safe palette (Wong 2011, widely recommended for accessibility)
# ---------------------------------------------------------------------------
COLORBLIND_SAFE_PALETTE: List[str] = [
    "#0072B2",  # blue
    "#E69F00",  # orange
    "#009E73",  # green
    "#CC79A7",  # pink
    "#56B4E9",  # sky blue
    "#D55E00",  # vermilion
    "#F0E442",  # yellow
    "#000000",  # black
]


def _get_color(index: int) -> str:
    """Return a color from the colorblind-safe palette (wraps around)."""
    return COLORBLIND_SAFE_PALETTE[index % len(COLORBLIND_SAFE_PALETTE)]


def _label(key: BitVector, variables: Tuple[str, ...]) -> str:
    if not variables:
        return "{}"
    return ", ".join(
        f"{name}={'T' if bit else 'F'}" for name, bit in zip(variables, key)
    )


def _sorted_entries(result: WeightedSet) -> List[Tuple[BitVector, float]]:
    # all-true assignments first, matching BitVector.configurations
    return sorted(result.items(), key=lambda kv: [not b for b in kv[0]])


def format_weighted_set(result: WeightedSet, precision: int = 4) -> str:
    """Render *result* as a two-column text table."""
    rows = [
        (_label(key, result.variables), f"{weight:.{precision}f}")
        for key, weight in _sorted_entries(result)
    ]
    if not rows:
        return "(empty)"
    width = max(len(r[0]) for r in rows)
    return "\n".join(f"{label.ljust(width)}  {value}" for label, value in rows)


def plot_weighted_set(
    result: WeightedSet,
    *,
    title: Optional[str] = None,
    ax: Optional[Any] = None,
    figsize: Tuple[float, float] = (8, 5),
    save_path: Optional[str] = None,
    show: bool = False,
) -> Any:
    """Plot a distribution over query-variable assignments as bars.

    Parameters
    ----------
    result : WeightedSet
        Usually the normalized output of a sampler.
    title : str, optional
        Axes title.
    ax : matplotlib Axes, optional
        Pre-existing axes to draw on.
    figsize : tuple
        Figure size when creating a new figure.
    save_path : str, optional
        If given, save the figure to this path.
    show : bool
        Call ``matplotlib.pyplot.show()`` after drawing.  The Agg backend
        is selected only when this is false, so an interactive backend
        stays available.

    Returns
    -------
    matplotlib Axes
    """
    import matplotlib
    if not show:
        matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    if ax is None:
        _, ax = plt.subplots(figsize=figsize)

    entries = _sorted_entries(result)
    labels = [_label(key, result.variables) for key, _ in entries]
    heights = [weight for _, weight in entries]
    colors = [_get_color(i) for i in range(len(entries))]

    ax.bar(range(len(entries)), heights, color=colors, edgecolor="black")
    ax.set_xticks(range(len(entries)))
    ax.set_xticklabels(labels, rotation=30, ha="right")
    ax.set_ylabel("Probability")
    ax.set_ylim(0.0, max([1.0] + heights))
    ax.set_title(title or "Posterior over " + ", ".join(result.variables))

    if save_path is not None:
        ax.figure.savefig(save_path, bbox_inches="tight")
    if show:
        plt.show()
    return ax
