"""Pytest configuration and fixtures for the poseidon2bls tests."""
from __future__ import annotations

import random
import sys
import textwrap
from pathlib import Path

import pytest

from poseidon2bls.constants import default_table
from poseidon2bls.field import PRIME
from poseidon2bls.permutation import PermutationEngine, Variant

SRC = Path(__file__).parent.parent / "src"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep user environment overrides out of every test."""
    for name in (
        "POSEIDON2BLS_VARIANT",
        "POSEIDON2BLS_SEED",
        "POSEIDON2BLS_LOG_LEVEL",
        "POSEIDON2BLS_ORACLE_CMD",
        "POSEIDON2BLS_ORACLE_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def table():
    return default_table()


@pytest.fixture(scope="session")
def reference_engine(table):
    return PermutationEngine(table, Variant.REFERENCE)


@pytest.fixture(scope="session")
def elided_engine(table):
    return PermutationEngine(table, Variant.ELIDED)


@pytest.fixture
def sample_pairs():
    """Deterministic mix of boundary and random input pairs."""
    rng = random.Random(0x5EED)
    boundary = [0, 1, 2, PRIME - 2, PRIME - 1, PRIME, PRIME + 1, 2 * PRIME - 1, (1 << 256) - 1]
    pairs = [(a, b) for a in boundary for b in boundary[:4]]
    pairs += [(rng.randrange(PRIME), rng.randrange(PRIME)) for _ in range(24)]
    pairs += [(rng.randrange(1 << 256), rng.randrange(1 << 256)) for _ in range(8)]
    return pairs


def _write_script(path: Path, body: str) -> list[str]:
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return [sys.executable, str(path)]


@pytest.fixture
def matching_oracle(tmp_path):
    """A reference command that answers with this package's own compress()."""
    return _write_script(
        tmp_path / "oracle_ok.py",
        f"""
        import sys
        sys.path.insert(0, {str(SRC)!r})
        from poseidon2bls import compress
        print("Compress Result: %d" % compress(int(sys.argv[1]), int(sys.argv[2])))
        """,
    )


@pytest.fixture
def constant_oracle(tmp_path):
    """A reference command that always answers 7."""
    return _write_script(
        tmp_path / "oracle_seven.py",
        """
        print("Compress Result: 7")
        """,
    )


@pytest.fixture
def failing_oracle(tmp_path):
    return _write_script(
        tmp_path / "oracle_fail.py",
        """
        import sys
        sys.stderr.write("panic: invalid field element\\n")
        sys.exit(2)
        """,
    )
