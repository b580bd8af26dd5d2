"""Poseidon2 (t=2) permutation and two-to-one compression over BLS12-381.

The round sequence is written once (``permute_with``) and runs over an
arithmetic backend:

* ``reference`` reduces modulo PRIME after every operation.
* ``elided`` works on clean/dirty tagged values and leaves an addition
  unreduced whenever both operands are clean, so the sum is below
  ``2 * PRIME < 2**256``. Every consumer of a dirty value is a modular
  operation, and a dirty value reaching an unreduced addition raises.

Both backends return identical results for every input.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from . import field
from .constants import RoundConstantTable, TableShapeError, default_table
from .field import (
    PRIME,
    Clean,
    Tagged,
    parse_field_input,
    tagged_add,
    tagged_addmod,
    tagged_mulmod,
    tagged_reduce,
)
from .schedule import RoundKind

logger = logging.getLogger(__name__)


class Variant(str, Enum):
    REFERENCE = "reference"
    ELIDED = "elided"


###############################################################################
# Plain field helpers


def sbox(x: int) -> int:
    """x**5 mod PRIME using three modular multiplications."""
    sq = field.mul(x, x)
    quad = field.mul(sq, sq)
    return field.mul(quad, x)


def mix_external(s0: int, s1: int) -> Tuple[int, int]:
    """Apply [[2, 1], [1, 2]]."""
    total = s0 + s1
    return (s0 + total) % PRIME, (s1 + total) % PRIME


def mix_internal(s0: int, s1: int) -> Tuple[int, int]:
    """Apply [[2, 1], [1, 3]]."""
    total = s0 + s1
    return (s0 + total) % PRIME, (s1 + s1 + total) % PRIME


###############################################################################
# Backends


class ArithmeticBackend(Protocol):
    name: str

    def load(self, value: int, slot: int) -> Any:
        """Reduce an input word into state slot ``slot``."""

    def snapshot(self, value: Any) -> Any:
        """Keep a copy of the right input for the feed-forward."""

    def begin_round(self, index: int, kind: RoundKind) -> None:
        ...

    def add_constant(self, value: Any, constant: int) -> Any:
        ...

    def sbox(self, value: Any) -> Any:
        ...

    def mix_external(self, s0: Any, s1: Any) -> Tuple[Any, Any]:
        ...

    def mix_internal(self, s0: Any, s1: Any) -> Tuple[Any, Any]:
        ...

    def feed_forward(self, s1: Any, saved: Any) -> Any:
        ...

    def output(self, value: Any) -> int:
        ...


_BACKENDS: Dict[str, type] = {}


def register_backend(cls: type) -> type:
    _BACKENDS[cls.name] = cls
    return cls


def get_backend(variant: Union[Variant, str]) -> ArithmeticBackend:
    try:
        backend_cls = _BACKENDS[Variant(variant).value]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"unknown permutation variant {variant!r}") from exc
    return backend_cls()


def available_variants() -> List[str]:
    return sorted(_BACKENDS.keys())


@register_backend
class ReducedBackend:
    """Every intermediate is reduced immediately."""

    name = Variant.REFERENCE.value

    def load(self, value: int, slot: int) -> int:
        return value % PRIME

    def snapshot(self, value: int) -> int:
        return value

    def begin_round(self, index: int, kind: RoundKind) -> None:
        pass

    def add_constant(self, value: int, constant: int) -> int:
        return field.add(value, constant)

    def sbox(self, value: int) -> int:
        return sbox(value)

    def mix_external(self, s0: int, s1: int) -> Tuple[int, int]:
        return mix_external(s0, s1)

    def mix_internal(self, s0: int, s1: int) -> Tuple[int, int]:
        return mix_internal(s0, s1)

    def feed_forward(self, s1: int, saved: int) -> int:
        return field.add(s1, saved)

    def output(self, value: int) -> int:
        return value


@register_backend
class ElidedBackend:
    """Tagged arithmetic that skips reductions a bound makes unnecessary."""

    name = Variant.ELIDED.value

    def load(self, value: int, slot: int) -> Clean:
        return tagged_reduce(value)

    def snapshot(self, value: Tagged) -> Tagged:
        return value

    def begin_round(self, index: int, kind: RoundKind) -> None:
        pass

    def add_constant(self, value: Tagged, constant: int) -> Tagged:
        # clean state + clean constant: dirty, consumed by the S-box mulmods
        return tagged_add(value, Clean(constant))

    def sbox(self, value: Tagged) -> Clean:
        sq = tagged_mulmod(value, value)
        quad = tagged_mulmod(sq, sq)
        return tagged_mulmod(quad, value)

    def mix_external(self, s0: Tagged, s1: Tagged) -> Tuple[Clean, Clean]:
        total = tagged_add(s0, s1)
        return tagged_addmod(s0, total), tagged_addmod(s1, total)

    def mix_internal(self, s0: Tagged, s1: Tagged) -> Tuple[Clean, Clean]:
        total = tagged_add(s0, s1)
        new_s0 = tagged_addmod(s0, total)
        doubled = tagged_add(s1, s1)
        return new_s0, tagged_addmod(doubled, total)

    def feed_forward(self, s1: Tagged, saved: Tagged) -> Clean:
        return tagged_addmod(s1, saved)

    def output(self, value: Tagged) -> int:
        return field.require_clean(value).value


###############################################################################
# Round driver


def permute_with(
    backend: ArithmeticBackend,
    table: RoundConstantTable,
    s0: Any,
    s1: Any,
) -> Tuple[Any, Any]:
    """Run the initial mix and every round of ``table`` on loaded state."""
    s0, s1 = backend.mix_external(s0, s1)
    for index, (kind, row) in enumerate(table.kinds()):
        backend.begin_round(index, kind)
        if kind is RoundKind.FULL:
            s0 = backend.add_constant(s0, row[0])
            s1 = backend.add_constant(s1, row[1])
            s0 = backend.sbox(s0)
            s1 = backend.sbox(s1)
            s0, s1 = backend.mix_external(s0, s1)
        elif kind is RoundKind.PARTIAL:
            s0 = backend.add_constant(s0, row[0])
            s0 = backend.sbox(s0)
            s0, s1 = backend.mix_internal(s0, s1)
        else:  # pragma: no cover - RoundKind is closed
            raise AssertionError(f"unexpected round kind {kind!r} at round {index}")
    return s0, s1


def compress_with(
    backend: ArithmeticBackend,
    table: RoundConstantTable,
    left: Any,
    right: Any,
) -> Any:
    s0 = backend.load(left, 0)
    s1 = backend.load(right, 1)
    saved_right = backend.snapshot(s1)
    _, s1 = permute_with(backend, table, s0, s1)
    return backend.feed_forward(s1, saved_right)


class PermutationEngine:
    """Width-2 Poseidon2 over a fixed, read-only constant table.

    The engine holds no per-call state; a single instance can serve any
    number of concurrent callers.
    """

    def __init__(
        self,
        table: Optional[RoundConstantTable] = None,
        variant: Union[Variant, str] = Variant.REFERENCE,
    ) -> None:
        self.table = table if table is not None else default_table()
        if not isinstance(self.table, RoundConstantTable):
            raise TableShapeError(f"expected a RoundConstantTable, got {type(self.table)!r}")
        self.table.schedule.validate()
        self.variant = Variant(variant)
        self._backend = get_backend(self.variant)
        logger.debug("permutation engine ready (variant=%s, domain=%s)", self.variant.value, self.table.domain)

    def permute(self, s0: Any, s1: Any) -> Tuple[int, int]:
        backend = self._backend
        left = parse_field_input(s0)
        right = parse_field_input(s1)
        out0, out1 = permute_with(backend, self.table, backend.load(left, 0), backend.load(right, 1))
        return backend.output(out0), backend.output(out1)

    def compress(self, left: Any, right: Any) -> int:
        backend = self._backend
        result = compress_with(backend, self.table, parse_field_input(left), parse_field_input(right))
        return backend.output(result)

    def __repr__(self) -> str:
        return f"PermutationEngine(variant={self.variant.value!r}, domain={self.table.domain!r})"


_ENGINES: Dict[Variant, PermutationEngine] = {}


def default_engine(variant: Union[Variant, str] = Variant.REFERENCE) -> PermutationEngine:
    key = Variant(variant)
    engine = _ENGINES.get(key)
    if engine is None:
        engine = _ENGINES.setdefault(key, PermutationEngine(variant=key))
    return engine


def compress(left: Any, right: Any, *, variant: Union[Variant, str] = Variant.REFERENCE) -> int:
    """Compress two field elements with the default constant table."""
    return default_engine(variant).compress(left, right)


def permute(s0: Any, s1: Any, *, variant: Union[Variant, str] = Variant.REFERENCE) -> Tuple[int, int]:
    return default_engine(variant).permute(s0, s1)


__all__ = [
    "ArithmeticBackend",
    "ElidedBackend",
    "PermutationEngine",
    "ReducedBackend",
    "Variant",
    "available_variants",
    "compress",
    "compress_with",
    "default_engine",
    "get_backend",
    "mix_external",
    "mix_internal",
    "permute",
    "permute_with",
    "register_backend",
    "sbox",
]
