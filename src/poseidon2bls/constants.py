"""Round constant derivation from a chained Keccak-256 hash.

The derivation is a bit-exact public contract::

    H0  = keccak256(utf8("Poseidon2-BLS12_381[t=2,rF=8,rP=56,d=5]"))
    cur = keccak256(H0)                      # warm-up advance
    c_k = int(cur, big-endian) % PRIME; cur = keccak256(cur)

Rows are filled in round order: ``width`` values per full round and one
value per partial round.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, Sequence, Tuple

from eth_utils import keccak

from .field import PRIME, Poseidon2Error, is_canonical, parse_field_input
from .schedule import DEFAULT_SCHEDULE, DEFAULT_SEED, RoundKind, RoundSchedule

logger = logging.getLogger(__name__)

Row = Tuple[int, ...]


class TableShapeError(Poseidon2Error, ValueError):
    """Raised when a constant table does not fit its schedule."""


class KeccakChain:
    """Iterator over field elements read from a running Keccak-256 hash.

    Each instance owns its own cursor, so independent derivations never
    interfere with one another.
    """

    def __init__(self, domain: str) -> None:
        self.domain = domain
        self._cursor = keccak(keccak(domain.encode("utf-8")))
        self.emitted = 0

    @property
    def cursor(self) -> bytes:
        return self._cursor

    def __iter__(self) -> "KeccakChain":
        return self

    def __next__(self) -> int:
        value = int.from_bytes(self._cursor, "big") % PRIME
        self._cursor = keccak(self._cursor)
        self.emitted += 1
        return value

    def take(self, count: int) -> Row:
        return tuple(next(self) for _ in range(count))


@dataclass(frozen=True)
class RoundConstantTable:
    rows: Tuple[Row, ...]
    schedule: RoundSchedule = DEFAULT_SCHEDULE
    seed: str = DEFAULT_SEED

    def __post_init__(self) -> None:
        self.schedule.validate()
        if len(self.rows) != self.schedule.total_rounds:
            raise TableShapeError(
                f"expected {self.schedule.total_rounds} rows, got {len(self.rows)}"
            )
        for index, row in enumerate(self.rows):
            expected = self.schedule.row_width(index)
            if len(row) != expected:
                raise TableShapeError(f"row {index} has {len(row)} values, expected {expected}")
            for value in row:
                if not isinstance(value, int) or not is_canonical(value):
                    raise TableShapeError(f"row {index} holds a non-canonical value {value!r}")

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> Row:
        return self.rows[index]

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    @property
    def domain(self) -> str:
        return self.schedule.domain_string(self.seed)

    def values(self) -> Iterator[int]:
        for row in self.rows:
            yield from row

    def kinds(self) -> Iterator[Tuple[RoundKind, Row]]:
        for kind, row in zip(self.schedule.round_kinds(), self.rows):
            yield kind, row

    def to_hex_rows(self) -> list[list[str]]:
        return [[hex(value) for value in row] for row in self.rows]

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "domain": self.domain,
            "prime": hex(PRIME),
            "schedule": {
                "t": self.schedule.width,
                "rF": self.schedule.full_rounds,
                "rP": self.schedule.partial_rounds,
                "d": self.schedule.sbox_degree,
            },
            "round_constants": self.to_hex_rows(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundConstantTable":
        try:
            params = data["schedule"]
            schedule = RoundSchedule(
                width=int(params["t"]),
                full_rounds=int(params["rF"]),
                partial_rounds=int(params["rP"]),
                sbox_degree=int(params["d"]),
            )
            raw_rows: Sequence[Sequence[Any]] = data["round_constants"]
        except (KeyError, TypeError, ValueError) as exc:
            raise TableShapeError(f"malformed constant table: {exc}") from exc
        if "prime" in data and parse_field_input(data["prime"]) != PRIME:
            raise TableShapeError("constant table was derived for a different prime")
        rows = tuple(tuple(parse_field_input(v) for v in row) for row in raw_rows)
        return cls(rows=rows, schedule=schedule, seed=data.get("seed", DEFAULT_SEED))


def derive(seed: str = DEFAULT_SEED, schedule: RoundSchedule = DEFAULT_SCHEDULE) -> RoundConstantTable:
    """Derive the round constant table for ``seed`` and ``schedule``."""
    schedule.validate()
    chain = KeccakChain(schedule.domain_string(seed))
    rows = tuple(chain.take(schedule.row_width(index)) for index in range(schedule.total_rounds))
    logger.debug("derived %d round constant rows from %r", len(rows), chain.domain)
    return RoundConstantTable(rows=rows, schedule=schedule, seed=seed)


@lru_cache(maxsize=None)
def default_table() -> RoundConstantTable:
    """The process-wide table for the default seed and schedule."""
    return derive(DEFAULT_SEED, DEFAULT_SCHEDULE)


__all__ = [
    "KeccakChain",
    "RoundConstantTable",
    "TableShapeError",
    "default_table",
    "derive",
]
