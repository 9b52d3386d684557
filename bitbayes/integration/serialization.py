"""Network serialization and deserialization.

Provides :func:`save_network` and :func:`load_network` for persisting
:class:`~bitbayes.networks.network.BayesianNetwork` instances to disk in
JSON format.  The format includes a version field for backward
compatibility::

    {
      "format_version": 1,
      "nodes": [
        {"name": "A", "parents": [], "cpt": 0.7},
        {"name": "B", "parents": ["A"],
         "cpt": [{"given": [true], "p": 0.9},
                 {"given": [false], "p": 0.1}]}
      ]
    }

Validation on load:

* Field types: every malformed entry raises :class:`ValueError`.
  Probabilities within ``_PROB_TOL`` of [0, 1] are clipped into range.
* DAG acyclicity and known parents (via :mod:`networkx`).
* Topological order: nodes are re-ordered parents-first, keeping the
  file order wherever it is already valid.
* CPT completeness and 0 <= p <= 1, enforced by
  :meth:`BayesianNetwork.from_specs`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import networkx as nx

from bitbayes.core.types import TRUE, BitVector
from bitbayes.networks.network import BayesianNetwork

log = logging.getLogger(__name__)

# Current serialization format version
FORMAT_VERSION = 1

# Probabilities this close outside [0, 1] are clipped on load
_PROB_TOL = 1e-9


# ------------------------------------------------------------------ #
#  Public API
# ------------------------------------------------------------------ #


def save_network(
    network: BayesianNetwork,
    filepath: Union[str, Path],
) -> None:
    """Export a :class:`BayesianNetwork` to a JSON file.

    Parameters
    ----------
    network : BayesianNetwork
        The network to serialize.
    filepath : str or Path
        Destination file path.  Parent directories must exist.

    Raises
    ------
    TypeError
        If *network* is not a :class:`BayesianNetwork`.
    """
    if not isinstance(network, BayesianNetwork):
        raise TypeError(
            f"Expected BayesianNetwork, got {type(network).__name__}"
        )

    payload = network_to_dict(network)
    filepath = Path(filepath)
    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, ensure_ascii=False)


def load_network(
    filepath: Union[str, Path],
) -> BayesianNetwork:
    """Reconstruct a :class:`BayesianNetwork` from a JSON file.

    Parameters
    ----------
    filepath : str or Path
        Path to a JSON network file.

    Returns
    -------
    BayesianNetwork
        The reconstructed network.

    Raises
    ------
    FileNotFoundError
        If *filepath* does not exist.
    ValueError
        If the file is corrupted, has an unsupported version, or
        fails validation (cycles, incomplete or invalid CPTs).
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Network file not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Corrupted network file: {exc}") from exc

    network = network_from_dict(payload)
    log.debug("Loaded %d node(s) from %s", len(network), filepath)
    return network


# ------------------------------------------------------------------ #
#  Serialization helpers
# ------------------------------------------------------------------ #


def network_to_dict(network: BayesianNetwork) -> Dict[str, Any]:
    """Convert a network to a JSON-serializable dictionary."""
    nodes_data: List[Dict[str, Any]] = []

    for node in network.nodes:
        if node.is_root:
            cpt: Any = node.cpt.get_weight(TRUE)
        else:
            cpt = [
                {"given": list(cfg.to_tuple()), "p": node.cpt.get_weight(cfg)}
                for cfg in BitVector.configurations(len(node.parents))
            ]
        nodes_data.append({
            "name": node.name,
            "parents": list(node.parent_names),
            "cpt": cpt,
        })

    return {
        "format_version": FORMAT_VERSION,
        "nodes": nodes_data,
    }


def network_from_dict(payload: Dict[str, Any]) -> BayesianNetwork:
    """Rebuild a network from :func:`network_to_dict` output."""
    if not isinstance(payload, dict):
        raise ValueError("Network document must be a JSON object")

    # ---- version check ------------------------------------------------ #
    version = payload.get("format_version")
    if version is None:
        raise ValueError("Missing 'format_version' in network file")
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError(f"'format_version' must be an integer, got {version!r}")

    if version > FORMAT_VERSION:
        raise ValueError(
            f"Unsupported format version {version} "
            f"(max supported: {FORMAT_VERSION})"
        )

    nodes_data = payload.get("nodes")
    if nodes_data is None:
        raise ValueError("Missing 'nodes' in network file")
    if not isinstance(nodes_data, list):
        raise ValueError("'nodes' must be a list of node entries")

    specs = [_parse_node(entry) for entry in nodes_data]
    specs = _topological_specs(specs)
    return BayesianNetwork.from_specs(specs)


def _parse_probability(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Node '{name}': probability must be a number, got {value!r}")
    p = float(value)
    if -_PROB_TOL <= p < 0.0:
        return 0.0
    if 1.0 < p <= 1.0 + _PROB_TOL:
        return 1.0
    return p


def _parse_node(entry: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"Node entry must be a JSON object, got {entry!r}")

    name = entry.get("name")
    if name is None:
        raise ValueError("Node entry missing 'name' field")
    if not isinstance(name, str):
        raise ValueError(f"Node name must be a string, got {name!r}")

    raw = entry.get("cpt")
    if raw is None:
        raise ValueError(f"Node '{name}': missing 'cpt' field")

    parents = entry.get("parents") or []
    if not isinstance(parents, list) or not all(isinstance(p, str) for p in parents):
        raise ValueError(f"Node '{name}': 'parents' must be a list of names")

    if isinstance(raw, list):
        cpt: Any = {}
        for row in raw:
            if not isinstance(row, dict) or "given" not in row or "p" not in row:
                raise ValueError(
                    f"Node '{name}': CPT rows need 'given' and 'p' fields"
                )
            given = row["given"]
            if not isinstance(given, list) or not all(isinstance(b, bool) for b in given):
                raise ValueError(
                    f"Node '{name}': 'given' must be a list of booleans, got {given!r}"
                )
            key = BitVector.from_bools(given)
            if key in cpt:
                raise ValueError(f"Node '{name}': duplicate CPT row {key!r}")
            cpt[key] = _parse_probability(name, row["p"])
    else:
        cpt = _parse_probability(name, raw)

    return {"name": name, "parents": list(parents), "cpt": cpt}


# ------------------------------------------------------------------ #
#  Validation
# ------------------------------------------------------------------ #


def _topological_specs(specs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return *specs* ordered parents-first.

    Raises
    ------
    ValueError
        If a parent is undeclared, a name is duplicated, or the graph
        contains a cycle.
    """
    position = {}
    for i, spec in enumerate(specs):
        if spec["name"] in position:
            raise ValueError(f"Duplicate node '{spec['name']}'")
        position[spec["name"]] = i

    graph = nx.DiGraph()
    graph.add_nodes_from(position)
    for spec in specs:
        for parent in spec["parents"]:
            if parent not in position:
                raise ValueError(
                    f"Node '{spec['name']}' lists unknown parent '{parent}'"
                )
            graph.add_edge(parent, spec["name"])

    if not nx.is_directed_acyclic_graph(graph):
        raise ValueError(
            "Loaded network contains a cycle and is not a valid DAG"
        )

    order = nx.lexicographical_topological_sort(graph, key=position.__getitem__)
    return [specs[position[name]] for name in order]
