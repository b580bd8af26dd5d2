"""Cross-check against an external reference implementation.

The reference is any executable that takes two field elements as decimal
arguments and prints the compression result as a decimal integer, e.g. the
gnark-crypto helper that prints ``Compress Result: <n>``.
"""
from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .field import PRIME, Poseidon2Error, parse_field_input
from .permutation import PermutationEngine

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"\d+")

# compress(0, 0), compress(1, 2), compress(PRIME - 1, PRIME - 1)
GOLDEN_INPUTS: Tuple[Tuple[int, int], ...] = (
    (0, 0),
    (1, 2),
    (PRIME - 1, PRIME - 1),
)


class OracleError(Poseidon2Error, RuntimeError):
    """Raised when the reference implementation cannot produce a result."""


@dataclass(frozen=True)
class CrossCheckResult:
    left: int
    right: int
    expected: int
    actual: int

    @property
    def ok(self) -> bool:
        return self.expected == self.actual

    def to_dict(self) -> dict:
        return {
            "left": str(self.left),
            "right": str(self.right),
            "expected": str(self.expected),
            "actual": str(self.actual),
            "ok": self.ok,
        }


class ReferenceOracle:
    def __init__(self, command: Sequence[str], *, timeout_seconds: float = 30) -> None:
        if not command:
            raise OracleError("no reference oracle command configured")
        self.command = list(command)
        self.timeout_seconds = timeout_seconds

    def compress(self, left: Any, right: Any) -> int:
        args = [str(parse_field_input(left)), str(parse_field_input(right))]
        logger.debug("running reference oracle: %s", " ".join(self.command + args))
        try:
            result = subprocess.run(
                self.command + args, capture_output=True, text=True, timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise OracleError(f"reference oracle failed to run: {exc}") from exc
        if result.returncode != 0:
            raise OracleError(
                f"reference oracle exited with {result.returncode}: {result.stderr.strip()}"
            )
        return parse_oracle_output(result.stdout)


def parse_oracle_output(stdout: str) -> int:
    """Return the last decimal integer printed by the oracle."""
    matches = _INTEGER_RE.findall(stdout)
    if not matches:
        raise OracleError(f"no integer in reference output: {stdout.strip()!r}")
    return int(matches[-1])


def cross_check(
    oracle: ReferenceOracle,
    pairs: Optional[Iterable[Tuple[Any, Any]]] = None,
    engine: Optional[PermutationEngine] = None,
) -> List[CrossCheckResult]:
    engine = engine if engine is not None else PermutationEngine()
    results = []
    for left, right in pairs if pairs is not None else GOLDEN_INPUTS:
        left_value = parse_field_input(left)
        right_value = parse_field_input(right)
        check = CrossCheckResult(
            left=left_value,
            right=right_value,
            expected=oracle.compress(left_value, right_value),
            actual=engine.compress(left_value, right_value),
        )
        if not check.ok:
            logger.warning("mismatch for (%d, %d): reference %d, engine %d",
                           left_value, right_value, check.expected, check.actual)
        results.append(check)
    return results


__all__ = [
    "GOLDEN_INPUTS",
    "CrossCheckResult",
    "OracleError",
    "ReferenceOracle",
    "cross_check",
    "parse_oracle_output",
]
