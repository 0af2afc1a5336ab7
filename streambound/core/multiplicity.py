"""Multiplicity arithmetic: Exact(n) | Unbounded.

A multiplicity bounds how many times a stage's effect runs for one logical
input. The domain is the naturals extended with an absorbing top element:

  add(Exact(a), Exact(b)) = Exact(a + b)
  mul(Exact(a), Exact(b)) = Exact(a * b)
  mul(Exact(0), Unbounded) = Exact(0)     (zero upstream runs, zero downstream)
  any other Unbounded operand            -> Unbounded
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Exact:
    """A finite, non-negative bound."""

    n: int

    def __post_init__(self) -> None:
        if isinstance(self.n, bool) or not isinstance(self.n, int):
            raise ValueError(f"Exact bound must be an int, got {type(self.n).__name__}")
        if self.n < 0:
            raise ValueError(f"Exact bound must be non-negative, got {self.n}")

    def __str__(self) -> str:
        return str(self.n)


@dataclass(frozen=True)
class Unbounded:
    """No finite bound can be given."""

    def __str__(self) -> str:
        return "∞"


Multiplicity = Exact | Unbounded

ZERO = Exact(0)
ONE = Exact(1)
UNBOUNDED = Unbounded()

_UNBOUNDED_NAMES = {"∞", "inf", "infinity", "unbounded"}


def is_finite(m: Multiplicity) -> bool:
    return isinstance(m, Exact)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def add(a: Multiplicity, b: Multiplicity) -> Multiplicity:
    """Sum of two bounds (fan-out of independent branches)."""
    if isinstance(a, Exact) and isinstance(b, Exact):
        return Exact(a.n + b.n)
    return UNBOUNDED


def mul(a: Multiplicity, b: Multiplicity) -> Multiplicity:
    """Product of two bounds (sequential composition)."""
    if a == ZERO or b == ZERO:
        return ZERO
    if isinstance(a, Exact) and isinstance(b, Exact):
        return Exact(a.n * b.n)
    return UNBOUNDED


def maximum(a: Multiplicity, b: Multiplicity) -> Multiplicity:
    if isinstance(a, Exact) and isinstance(b, Exact):
        return a if a.n >= b.n else b
    return UNBOUNDED


def minimum(a: Multiplicity, b: Multiplicity) -> Multiplicity:
    if isinstance(a, Unbounded):
        return b
    if isinstance(b, Unbounded):
        return a
    return a if a.n <= b.n else b


def product(ms: Iterable[Multiplicity]) -> Multiplicity:
    result: Multiplicity = ONE
    for m in ms:
        result = mul(result, m)
    return result


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------

def leq(a: Multiplicity, b: Multiplicity) -> bool:
    """a <= b in the bound order; Unbounded is the top element."""
    if isinstance(b, Unbounded):
        return True
    if isinstance(a, Unbounded):
        return False
    return a.n <= b.n


def lt(a: Multiplicity, b: Multiplicity) -> bool:
    return leq(a, b) and a != b


# ---------------------------------------------------------------------------
# JSON conversion
# ---------------------------------------------------------------------------

def parse_multiplicity(value: object) -> Multiplicity:
    """Convert an int, a Multiplicity, or an infinity marker into a Multiplicity.

    Accepted infinity markers: None, "∞", "inf", "infinity", "unbounded".
    """
    if isinstance(value, (Exact, Unbounded)):
        return value
    if value is None:
        return UNBOUNDED
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _UNBOUNDED_NAMES:
            return UNBOUNDED
        if text.isdecimal():
            return Exact(int(text))
        raise ValueError(f"Cannot parse multiplicity from {value!r}")
    if isinstance(value, int) and not isinstance(value, bool):
        return Exact(value)
    raise ValueError(f"Cannot parse multiplicity from {value!r}")


def format_multiplicity(m: Multiplicity) -> int | str:
    return m.n if isinstance(m, Exact) else "∞"
