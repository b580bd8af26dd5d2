"""Round schedule for the width-2 Poseidon2 instance."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .field import Poseidon2Error

DEFAULT_SEED = "Poseidon2-BLS12_381"


class UnsupportedSchedule(Poseidon2Error, ValueError):
    """Raised for schedules the width-2 permutation cannot run."""


class RoundKind(Enum):
    FULL = "full"
    PARTIAL = "partial"


@dataclass(frozen=True)
class RoundSchedule:
    width: int = 2
    full_rounds: int = 8
    partial_rounds: int = 56
    sbox_degree: int = 5

    def validate(self) -> "RoundSchedule":
        if self.width != 2:
            raise UnsupportedSchedule(f"only width 2 is supported, got t={self.width}")
        if self.sbox_degree != 5:
            raise UnsupportedSchedule(f"only S-box degree 5 is supported, got d={self.sbox_degree}")
        if self.full_rounds <= 0 or self.full_rounds % 2 != 0:
            raise UnsupportedSchedule(f"full rounds must be a positive even number, got rF={self.full_rounds}")
        if self.partial_rounds < 0:
            raise UnsupportedSchedule(f"partial rounds must be non-negative, got rP={self.partial_rounds}")
        return self

    @property
    def half_full_rounds(self) -> int:
        return self.full_rounds // 2

    @property
    def total_rounds(self) -> int:
        return self.full_rounds + self.partial_rounds

    def domain_string(self, seed: str = DEFAULT_SEED) -> str:
        """Return the domain-separated seed, e.g. ``Poseidon2-BLS12_381[t=2,rF=8,rP=56,d=5]``."""
        return (
            f"{seed}[t={self.width},rF={self.full_rounds},"
            f"rP={self.partial_rounds},d={self.sbox_degree}]"
        )

    def round_kind(self, index: int) -> RoundKind:
        if index < 0 or index >= self.total_rounds:
            raise IndexError(f"round index {index} outside 0..{self.total_rounds - 1}")
        half = self.half_full_rounds
        if half <= index < half + self.partial_rounds:
            return RoundKind.PARTIAL
        return RoundKind.FULL

    def round_kinds(self) -> Iterator[RoundKind]:
        for index in range(self.total_rounds):
            yield self.round_kind(index)

    def row_width(self, index: int) -> int:
        return self.width if self.round_kind(index) is RoundKind.FULL else 1


DEFAULT_SCHEDULE = RoundSchedule()


__all__ = [
    "DEFAULT_SEED",
    "DEFAULT_SCHEDULE",
    "RoundKind",
    "RoundSchedule",
    "UnsupportedSchedule",
]
