"""Core types for bitbayes networks and sampling results."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from bitbayes.core.errors import NoSamplesAccepted, UnknownVariable


# ---------------------------------------------------------------------------
# BitVector
# ---------------------------------------------------------------------------

class BitVector:
    """Fixed-length sequence of boolean bits, all true until cleared.

    Used both as a parent-configuration key into a CPT (bit *j* is
    "parent *j* is true") and as a sample record over query variables.
    Equality and hashing are by size and bit pattern, so a vector must
    not be mutated once it has been used as a mapping key.

    Args:
        size: Number of bits.
    """

    __slots__ = ("_size", "_bits")

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        self._size = size
        self._bits = (1 << size) - 1

    @classmethod
    def from_bools(cls, values: Iterable[bool]) -> BitVector:
        """Build a vector whose bits mirror *values* in order."""
        values = [bool(v) for v in values]
        vec = cls(len(values))
        for i, v in enumerate(values):
            if not v:
                vec.set(i, False)
        return vec

    @classmethod
    def configurations(cls, size: int) -> Iterator[BitVector]:
        """Yield all ``2**size`` vectors of the given size, all-true first."""
        full = (1 << size) - 1
        for cleared in range(1 << size):
            vec = cls(size)
            vec._bits = full ^ cleared
            yield vec

    def _check(self, i: int) -> None:
        if not 0 <= i < self._size:
            raise IndexError(
                f"bit index {i} out of range for BitVector of size {self._size}"
            )

    def set(self, i: int, value: bool) -> None:
        """Set bit *i* to *value*."""
        self._check(i)
        if value:
            self._bits |= 1 << i
        else:
            self._bits &= ~(1 << i)

    def get(self, i: int) -> bool:
        """Return bit *i*."""
        self._check(i)
        return bool(self._bits >> i & 1)

    __getitem__ = get

    def to_tuple(self) -> Tuple[bool, ...]:
        return tuple(self.get(i) for i in range(self._size))

    def to_array(self) -> np.ndarray:
        """Return the bits as a numpy bool array."""
        return np.array(self.to_tuple(), dtype=bool)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[bool]:
        return iter(self.to_tuple())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitVector):
            return NotImplemented
        return self._size == other._size and self._bits == other._bits

    def __hash__(self) -> int:
        return hash((self._size, self._bits))

    def __repr__(self) -> str:
        bits = "".join("1" if b else "0" for b in self.to_tuple())
        return f"BitVector('{bits}')"


#: Key of the single CPT entry of a parentless node.
TRUE = BitVector(0)


# ---------------------------------------------------------------------------
# WeightedSet
# ---------------------------------------------------------------------------

class WeightedSet:
    """Mapping from :class:`BitVector` to an accumulated non-negative weight.

    Serves as a CPT (configuration -> P(true)) and as the running tally
    of a sampler, which normalizes it into a distribution at the end.

    Args:
        width: Optional bit width every key must have.
        variables: Optional names for the bit positions of the keys.
    """

    def __init__(
        self,
        width: Optional[int] = None,
        variables: Optional[Iterable[str]] = None,
    ) -> None:
        self._weights: Dict[BitVector, float] = {}
        self.variables: Tuple[str, ...] = tuple(variables or ())
        if width is None and variables is not None:
            width = len(self.variables)
        self.width = width

    def get_weight(self, key: BitVector) -> float:
        """Return the weight stored for *key*, or 0.0 if unseen."""
        return self._weights.get(key, 0.0)

    def increment(self, key: BitVector, amount: float) -> None:
        """Add *amount* to the entry for *key*, creating it if needed.

        Raises:
            ValueError: If *amount* is negative or *key* has the wrong width.
        """
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        if self.width is not None and len(key) != self.width:
            raise ValueError(
                f"key {key!r} has width {len(key)}, expected {self.width}"
            )
        self._weights[key] = self._weights.get(key, 0.0) + float(amount)

    def total(self) -> float:
        """Sum of all weights."""
        return float(sum(self._weights.values()))

    def normalize_weights(self) -> None:
        """Divide every weight by the total, in place.

        Raises:
            NoSamplesAccepted: If the total weight is 0.
        """
        total = self.total()
        if total <= 0.0:
            raise NoSamplesAccepted()
        for key in self._weights:
            self._weights[key] /= total

    # ----- read helpers ---------------------------------------------------

    def _position(self, name: str) -> int:
        try:
            return self.variables.index(name)
        except ValueError:
            raise UnknownVariable([name]) from None

    def marginal(self, name: str) -> float:
        """Probability mass of the keys in which variable *name* is true."""
        pos = self._position(name)
        return float(sum(w for k, w in self._weights.items() if k[pos]))

    def probability(self, **assignment: bool) -> float:
        """Mass of the keys consistent with a partial *assignment*.

        Example::

            result.probability(B=True, C=False)
        """
        checks = [(self._position(n), bool(v)) for n, v in assignment.items()]
        return float(sum(
            w for k, w in self._weights.items()
            if all(k[p] == v for p, v in checks)
        ))

    def items(self) -> Iterator[Tuple[BitVector, float]]:
        return iter(self._weights.items())

    def as_dict(self) -> Dict[Tuple[bool, ...], float]:
        """Return ``{bool tuple: weight}`` for every stored entry."""
        return {k.to_tuple(): w for k, w in self._weights.items()}

    def __len__(self) -> int:
        return len(self._weights)

    def __iter__(self) -> Iterator[BitVector]:
        return iter(self._weights)

    def __contains__(self, key: object) -> bool:
        return key in self._weights

    def __repr__(self) -> str:
        return (
            f"WeightedSet(variables={list(self.variables)}, "
            f"entries={len(self)}, total={self.total():.6g})"
        )


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------

def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in ("1", "t", "true", "yes", "y"):
        return True
    if lowered in ("0", "f", "false", "no", "n"):
        return False
    raise ValueError(f"Cannot interpret {text!r} as a boolean")


@dataclass(frozen=True)
class Query:
    """Query variables plus observed evidence.

    The evidence variables are exactly the keys of :attr:`evidence`, a
    read-only mapping, so a query can key a dict or sit in a set.
    """

    query_variables: FrozenSet[str]
    evidence: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "query_variables", frozenset(self.query_variables))
        object.__setattr__(
            self,
            "evidence",
            MappingProxyType({k: bool(v) for k, v in self.evidence.items()}),
        )
        overlap = self.query_variables & self.evidence.keys()
        if overlap:
            raise ValueError(
                f"Variables cannot be both query and evidence: {sorted(overlap)}"
            )

    def __hash__(self) -> int:
        return hash((self.query_variables, frozenset(self.evidence.items())))

    @property
    def evidence_variables(self) -> FrozenSet[str]:
        return frozenset(self.evidence)

    @property
    def evidence_values(self) -> Mapping[str, bool]:
        return self.evidence

    @property
    def variables(self) -> FrozenSet[str]:
        """All names referenced by this query."""
        return self.query_variables | self.evidence_variables

    @classmethod
    def parse(cls, query: str, evidence: str = "") -> Query:
        """Build a query from ``"A,B"`` and ``"C=true,D=0"`` strings.

        Raises:
            ValueError: On a malformed evidence item.
        """
        names: List[str] = [q.strip() for q in query.split(",") if q.strip()]
        values: Dict[str, bool] = {}
        for item in evidence.split(","):
            if not item.strip():
                continue
            name, sep, raw = item.partition("=")
            if not sep or not name.strip():
                raise ValueError(
                    f"Evidence item {item!r} must look like NAME=true|false"
                )
            values[name.strip()] = _parse_bool(raw)
        return cls(frozenset(names), values)
