"""Tests for the external reference adapter and cross-check."""
from __future__ import annotations

import sys

import pytest

from poseidon2bls.field import PRIME, InvalidFieldElement
from poseidon2bls.oracle import (
    GOLDEN_INPUTS,
    CrossCheckResult,
    OracleError,
    ReferenceOracle,
    cross_check,
    parse_oracle_output,
)
from poseidon2bls.permutation import PermutationEngine, Variant, compress


def test_golden_inputs() -> None:
    assert GOLDEN_INPUTS == ((0, 0), (1, 2), (PRIME - 1, PRIME - 1))


@pytest.mark.parametrize(
    "stdout, expected",
    [
        ("Compress Result: 123\n", 123),
        ("42", 42),
        ("warming up 2 rounds\nCompress Result: 99\n", 99),
    ],
)
def test_parse_oracle_output(stdout: str, expected: int) -> None:
    assert parse_oracle_output(stdout) == expected


def test_parse_oracle_output_without_number() -> None:
    with pytest.raises(OracleError):
        parse_oracle_output("Compress Result: <nil>")


def test_oracle_requires_command() -> None:
    with pytest.raises(OracleError):
        ReferenceOracle([])


def test_cross_check_passes_with_matching_reference(matching_oracle) -> None:
    oracle = ReferenceOracle(matching_oracle)
    assert oracle.compress(1, 2) == compress(1, 2)
    results = cross_check(oracle, engine=PermutationEngine(variant=Variant.ELIDED))
    assert len(results) == len(GOLDEN_INPUTS)
    assert all(r.ok for r in results)


def test_cross_check_reports_mismatch(constant_oracle) -> None:
    results = cross_check(ReferenceOracle(constant_oracle), [(1, 2), ("0x3", "4")])
    assert [(r.left, r.right) for r in results] == [(1, 2), (3, 4)]
    assert all(r.expected == 7 for r in results)
    assert not any(r.ok for r in results)
    assert results[0].to_dict()["ok"] is False


def test_failing_oracle_raises(failing_oracle) -> None:
    with pytest.raises(OracleError, match="exited with 2"):
        ReferenceOracle(failing_oracle).compress(1, 2)


def test_missing_binary_raises(tmp_path) -> None:
    with pytest.raises(OracleError):
        ReferenceOracle([str(tmp_path / "does-not-exist")]).compress(1, 2)


def test_oracle_timeout(tmp_path) -> None:
    script = tmp_path / "slow.py"
    script.write_text("import time\ntime.sleep(5)\n", encoding="utf-8")
    with pytest.raises(OracleError):
        ReferenceOracle([sys.executable, str(script)], timeout_seconds=0.2).compress(1, 2)


def test_invalid_input_never_reaches_oracle(constant_oracle) -> None:
    with pytest.raises(InvalidFieldElement):
        ReferenceOracle(constant_oracle).compress("-1", 2)


def test_cross_check_result_ok() -> None:
    assert CrossCheckResult(1, 2, 3, 3).ok
    assert not CrossCheckResult(1, 2, 3, 4).ok
