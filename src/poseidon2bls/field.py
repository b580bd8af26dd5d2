"""BLS12-381 scalar field arithmetic and clean/dirty tagged values.

Values in the elided permutation carry a tag saying whether they are known
to be canonical (``Clean``, in ``[0, PRIME)``) or only bounded
(``Dirty``, in ``[0, 2 * PRIME)``). The rule functions below are the only way
to combine tagged values, so a dirty value can never reach a place that needs
a canonical one without an explicit reduction.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

PRIME = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001
PRIME_HEX = "0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001"

WORD_BITS = 256
WORD_LIMIT = 1 << WORD_BITS
DIRTY_BOUND = 2 * PRIME

FieldElement = int


class Poseidon2Error(Exception):
    """Base class for every error raised by this package."""


class InvalidFieldElement(Poseidon2Error, ValueError):
    """Raised when an input cannot be read as a non-negative integer."""


class ReductionInvariantError(Poseidon2Error, ArithmeticError):
    """Raised when a dirty value is used where a canonical one is required."""


# int() refuses longer decimal strings by default (sys.int_info)
_DECIMAL_CHUNK = 4000


def _parse_decimal(text: str) -> int:
    if len(text) <= _DECIMAL_CHUNK:
        return int(text, 10)
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"invalid decimal literal of {len(text)} characters")
    number = 0
    for start in range(0, len(text), _DECIMAL_CHUNK):
        chunk = text[start:start + _DECIMAL_CHUNK]
        number = number * 10 ** len(chunk) + int(chunk)
    return number


def parse_field_input(value: Any) -> int:
    """Return ``value`` as a non-negative integer, without reducing it.

    Accepts ``int`` and decimal or ``0x``-prefixed hexadecimal strings.
    """
    if isinstance(value, bool):
        raise InvalidFieldElement(f"not a field element: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip().replace("_", "")
        try:
            if text.lower().startswith("0x"):
                number = int(text[2:], 16)
            else:
                number = _parse_decimal(text)
        except ValueError as exc:
            raise InvalidFieldElement(f"not a field element: {value!r}") from exc
    else:
        raise InvalidFieldElement(f"unsupported field element type {type(value)!r}")
    if number < 0:
        raise InvalidFieldElement(f"field element must be non-negative: {value!r}")
    return number


def reduce(value: int) -> FieldElement:
    return value % PRIME


def add(a: int, b: int) -> FieldElement:
    return (a + b) % PRIME


def mul(a: int, b: int) -> FieldElement:
    return (a * b) % PRIME


def is_canonical(value: int) -> bool:
    return 0 <= value < PRIME


###############################################################################
# Tagged values


@dataclass(frozen=True)
class Clean:
    """A value known to be in ``[0, PRIME)``."""

    value: int

    def __post_init__(self) -> None:
        if not is_canonical(self.value):
            raise ReductionInvariantError(f"clean value out of range: {self.value:#x}")

    @property
    def tag(self) -> str:
        return "clean"


@dataclass(frozen=True)
class Dirty:
    """A value known only to be in ``[0, 2 * PRIME)``."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < DIRTY_BOUND:
            raise ReductionInvariantError(f"dirty value exceeds 2*PRIME: {self.value:#x}")

    @property
    def tag(self) -> str:
        return "dirty"


Tagged = Union[Clean, Dirty]


def require_clean(value: Tagged) -> Clean:
    if not isinstance(value, Clean):
        raise ReductionInvariantError("canonical value required, got a dirty one")
    return value


def _word(value: Tagged) -> int:
    if not 0 <= value.value < WORD_LIMIT:
        raise ReductionInvariantError(f"value does not fit in {WORD_BITS} bits")
    return value.value


def tagged_add(a: Tagged, b: Tagged) -> Dirty:
    """Unreduced addition; only two clean operands are allowed.

    Clean + Clean < 2 * PRIME < 2**256, so the sum never wraps a machine word.
    """
    left = require_clean(a)
    right = require_clean(b)
    return Dirty(left.value + right.value)


def tagged_addmod(a: Tagged, b: Tagged) -> Clean:
    return Clean((_word(a) + _word(b)) % PRIME)


def tagged_mulmod(a: Tagged, b: Tagged) -> Clean:
    return Clean((_word(a) * _word(b)) % PRIME)


def tagged_reduce(value: int) -> Clean:
    """Reduce any non-negative integer into a clean value."""
    if value < 0:
        raise ReductionInvariantError("cannot reduce a negative value")
    return Clean(value % PRIME)


__all__ = [
    "PRIME",
    "PRIME_HEX",
    "WORD_BITS",
    "WORD_LIMIT",
    "DIRTY_BOUND",
    "FieldElement",
    "Poseidon2Error",
    "InvalidFieldElement",
    "ReductionInvariantError",
    "parse_field_input",
    "reduce",
    "add",
    "mul",
    "is_canonical",
    "Clean",
    "Dirty",
    "Tagged",
    "require_clean",
    "tagged_add",
    "tagged_addmod",
    "tagged_mulmod",
    "tagged_reduce",
]
