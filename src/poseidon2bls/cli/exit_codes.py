"""Stable exit codes for the poseidon2bls CLI."""
from __future__ import annotations

import sys
from typing import NoReturn

import click

from ..constants import TableShapeError
from ..field import InvalidFieldElement, ReductionInvariantError
from ..oracle import OracleError
from ..schedule import UnsupportedSchedule

EXIT_OK = 0
EXIT_MISMATCH = 10
EXIT_INVALID_INPUT = 20
EXIT_ORACLE_FAILED = 30
EXIT_INTERNAL = 40

_DESCRIPTIONS = {
    EXIT_OK: "ok",
    EXIT_MISMATCH: "reference cross-check mismatch",
    EXIT_INVALID_INPUT: "invalid input or configuration",
    EXIT_ORACLE_FAILED: "reference oracle failed",
    EXIT_INTERNAL: "reduction invariant violated",
}


def error_to_exit_code(exc: BaseException) -> int:
    if isinstance(exc, OracleError):
        return EXIT_ORACLE_FAILED
    if isinstance(exc, ReductionInvariantError):
        return EXIT_INTERNAL
    if isinstance(exc, (InvalidFieldElement, UnsupportedSchedule, TableShapeError, ValueError, OSError)):
        return EXIT_INVALID_INPUT
    return EXIT_INTERNAL


def exit_code_description(code: int) -> str:
    return _DESCRIPTIONS.get(code, "unknown")


def abort_with(exc: BaseException) -> NoReturn:
    """Report ``exc`` on stderr and exit with its stable code."""
    code = error_to_exit_code(exc)
    click.echo(f"error: {exc} ({exit_code_description(code)})", err=True)
    sys.exit(code)
