"""Tests for bitbayes.viz.distributions."""

import os
import tempfile

import pytest

from bitbayes.core.types import BitVector, Query, WeightedSet
from bitbayes.networks.network import BayesianNetwork
from bitbayes.viz.distributions import (
    COLORBLIND_SAFE_PALETTE,
    format_weighted_set,
    plot_weighted_set,
)


# ------------------------------------------------------------------ helpers --

def _result():
    ws = WeightedSet(variables=["A", "B"])
    ws.increment(BitVector.from_bools([False, False]), 0.1)
    ws.increment(BitVector.from_bools([True, True]), 0.6)
    ws.increment(BitVector.from_bools([True, False]), 0.3)
    return ws


# ----------------------------------------------------------- text table --


class TestFormat:

    def test_rows_all_true_first(self):
        lines = format_weighted_set(_result()).splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("A=T, B=T")
        assert lines[0].endswith("0.6000")
        assert lines[-1].startswith("A=F, B=F")

    def test_precision(self):
        assert format_weighted_set(_result(), precision=1).splitlines()[0].endswith("0.6")

    def test_empty(self):
        assert format_weighted_set(WeightedSet()) == "(empty)"

    def test_no_query_variables(self):
        ws = WeightedSet(variables=[])
        ws.increment(BitVector(0), 1.0)
        assert format_weighted_set(ws).startswith("{}")


# ----------------------------------------------------------- smoke tests --


class TestPlotSmoke:
    """Smoke tests: calls must not crash."""

    def test_bars_match_entries(self):
        ax = plot_weighted_set(_result())
        heights = sorted(p.get_height() for p in ax.patches)
        assert heights == pytest.approx([0.1, 0.3, 0.6])
        assert "A" in ax.get_title()

    def test_colors_from_palette(self):
        import matplotlib.colors as mcolors

        ax = plot_weighted_set(_result())
        first = mcolors.to_hex(ax.patches[0].get_facecolor())
        assert first.lower() == COLORBLIND_SAFE_PALETTE[0].lower()

    def test_custom_title_and_axes(self):
        import matplotlib.pyplot as plt

        _, ax = plt.subplots()
        out = plot_weighted_set(_result(), title="posterior", ax=ax)
        assert out is ax
        assert ax.get_title() == "posterior"

    def test_save(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "result.png")
            plot_weighted_set(_result(), save_path=path)
            assert os.path.getsize(path) > 0

    def test_sampler_output(self):
        bn = BayesianNetwork()
        bn.add_node("A", 0.4)
        result = bn.direct_sample(Query({"A"}), 500, seed=0)
        assert plot_weighted_set(result) is not None

    def test_show_calls_pyplot(self, monkeypatch):
        import matplotlib.pyplot as plt

        calls = []
        monkeypatch.setattr(plt, "show", lambda *a, **k: calls.append(a))
        plot_weighted_set(_result(), show=True)
        assert len(calls) == 1

    def test_no_show_by_default(self, monkeypatch):
        import matplotlib.pyplot as plt

        calls = []
        monkeypatch.setattr(plt, "show", lambda *a, **k: calls.append(a))
        plot_weighted_set(_result())
        assert calls == []
