"""poseidon2bls crosscheck - compare against an external reference.

Usage:
    poseidon2bls crosscheck --oracle "go run ./go" [--pair 1 2 ...] [--json]

Exit codes:
    0  - All pairs match
    10 - At least one mismatch
    30 - Oracle missing or failed
"""
from __future__ import annotations

import shlex
from typing import Optional, Tuple

import click

from ..constants import derive
from ..oracle import OracleError, ReferenceOracle, cross_check
from ..permutation import PermutationEngine
from .exit_codes import EXIT_MISMATCH, abort_with
from .utils import VARIANT_CHOICE, echo_json, get_config, resolve_variant

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


@click.command("crosscheck")
@click.option("--oracle", "oracle_cmd", default=None, help="Reference command (default from config)")
@click.option("--pair", "pairs", nargs=2, multiple=True, help="LEFT RIGHT input pair (repeatable)")
@click.option("--variant", type=VARIANT_CHOICE, default=None, help="Arithmetic variant")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_context
def crosscheck_command(
    ctx: click.Context,
    oracle_cmd: Optional[str],
    pairs: Tuple[Tuple[str, str], ...],
    variant: Optional[str],
    output_json: bool,
) -> None:
    """Check compress() against a reference implementation.

    Without --pair the golden inputs (0,0), (1,2) and (PRIME-1,PRIME-1)
    are used.
    """
    config = get_config(ctx)
    command = shlex.split(oracle_cmd) if oracle_cmd else config["oracle"]["command"]
    try:
        oracle = ReferenceOracle(command or [], timeout_seconds=config["oracle"]["timeout_seconds"])
        engine = PermutationEngine(derive(config["seed"]), resolve_variant(ctx, variant))
        results = cross_check(oracle, pairs or None, engine)
    except (OracleError, ValueError) as exc:
        abort_with(exc)

    if output_json:
        echo_json({
            "variant": engine.variant.value,
            "ok": all(r.ok for r in results),
            "results": [r.to_dict() for r in results],
        })
    else:
        for r in results:
            mark = f"{GREEN}✓{RESET}" if r.ok else f"{RED}✗{RESET}"
            click.echo(f"  {mark} compress({r.left}, {r.right}) = {r.actual}")
            if not r.ok:
                click.echo(f"      reference: {r.expected}")

    if not all(r.ok for r in results):
        ctx.exit(EXIT_MISMATCH)
