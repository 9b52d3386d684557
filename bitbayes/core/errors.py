"""Exceptions raised by bitbayes.

Construction-time problems (bad tables, bad ordering) derive from
:class:`ValueError` so callers that already guard network building with
``except ValueError`` keep working.  Query-time lookups derive from
:class:`KeyError`; an empty sample set derives from :class:`RuntimeError`.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class BitBayesError(Exception):
    """Base class for all bitbayes errors."""


class IncompleteTable(BitBayesError, ValueError):
    """A node's CPT lacks an entry for one or more parent configurations.

    Args:
        node: Name of the offending node.
        missing: The parent-configuration keys with no entry.
    """

    def __init__(self, node: str, missing: Iterable) -> None:
        self.node = node
        self.missing: List = list(missing)
        shown = ", ".join(str(m) for m in self.missing[:4])
        if len(self.missing) > 4:
            shown += ", ..."
        super().__init__(
            f"CPT of node '{node}' is missing {len(self.missing)} "
            f"parent configuration(s): {shown}"
        )


class OutOfTopologicalOrder(BitBayesError, ValueError):
    """A node refers to a parent that does not precede it."""

    def __init__(self, node: str, parent: str) -> None:
        self.node = node
        self.parent = parent
        super().__init__(
            f"Parent '{parent}' must be added before child '{node}'"
        )


class UnknownVariable(BitBayesError, KeyError):
    """A query or lookup names a variable that is not in the network."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = sorted(names)
        super().__init__(
            f"Unknown variable(s): {', '.join(repr(n) for n in self.names)}"
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class NoSamplesAccepted(BitBayesError, RuntimeError):
    """Normalization found zero total weight.

    For rejection sampling this means every draw contradicted the
    evidence; for likelihood weighting every draw had weight 0.
    """

    def __init__(self, num_samples: Optional[int] = None) -> None:
        self.num_samples = num_samples
        if num_samples is None:
            msg = "Cannot normalize: total weight is 0"
        else:
            msg = (
                f"No samples accepted out of {num_samples}; the evidence "
                "may be impossible under this network"
            )
        super().__init__(msg)
