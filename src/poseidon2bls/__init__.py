"""Poseidon2 (t=2) compression over the BLS12-381 scalar field.

Usage:
    from poseidon2bls import compress, derive, PermutationEngine, Variant

    digest = compress(1, 2)
    engine = PermutationEngine(derive(), variant=Variant.ELIDED)
    assert engine.compress(1, 2) == digest
"""

__version__ = "0.1.0"

from .constants import KeccakChain, RoundConstantTable, TableShapeError, default_table, derive
from .field import (
    PRIME,
    Clean,
    Dirty,
    InvalidFieldElement,
    Poseidon2Error,
    ReductionInvariantError,
)
from .permutation import PermutationEngine, Variant, compress, permute, sbox
from .program import Instruction, Op, Program, build_program
from .schedule import DEFAULT_SCHEDULE, DEFAULT_SEED, RoundKind, RoundSchedule, UnsupportedSchedule

__all__ = [
    "__version__",
    "PRIME",
    "DEFAULT_SCHEDULE",
    "DEFAULT_SEED",
    "Clean",
    "Dirty",
    "Instruction",
    "InvalidFieldElement",
    "KeccakChain",
    "Op",
    "PermutationEngine",
    "Poseidon2Error",
    "Program",
    "ReductionInvariantError",
    "RoundConstantTable",
    "RoundKind",
    "RoundSchedule",
    "TableShapeError",
    "UnsupportedSchedule",
    "Variant",
    "build_program",
    "compress",
    "default_table",
    "derive",
    "permute",
    "sbox",
]
