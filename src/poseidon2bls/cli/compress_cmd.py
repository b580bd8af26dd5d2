"""poseidon2bls compress / permute - evaluate the hash on the command line.

Usage:
    poseidon2bls compress <left> <right> [--variant reference|elided] [--json]
    poseidon2bls permute <s0> <s1> [--variant reference|elided] [--json]

Inputs are decimal or 0x-prefixed hex integers and are reduced mod PRIME.
"""
from __future__ import annotations

from typing import Optional

import click

from ..constants import derive
from ..permutation import PermutationEngine
from .exit_codes import abort_with
from .utils import VARIANT_CHOICE, echo_json, get_config, resolve_variant


def _engine(ctx: click.Context, variant: Optional[str]) -> PermutationEngine:
    config = get_config(ctx)
    return PermutationEngine(derive(config["seed"]), resolve_variant(ctx, variant))


@click.command("compress")
@click.argument("left")
@click.argument("right")
@click.option("--variant", type=VARIANT_CHOICE, default=None, help="Arithmetic variant")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_context
def compress_command(
    ctx: click.Context, left: str, right: str, variant: Optional[str], output_json: bool
) -> None:
    """Compress LEFT and RIGHT into one field element."""
    try:
        engine = _engine(ctx, variant)
        result = engine.compress(left, right)
    except ValueError as exc:
        abort_with(exc)

    if output_json:
        echo_json({
            "variant": engine.variant.value,
            "left": left,
            "right": right,
            "result": str(result),
            "result_hex": hex(result),
        })
    else:
        click.echo(str(result))


@click.command("permute")
@click.argument("s0")
@click.argument("s1")
@click.option("--variant", type=VARIANT_CHOICE, default=None, help="Arithmetic variant")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_context
def permute_command(
    ctx: click.Context, s0: str, s1: str, variant: Optional[str], output_json: bool
) -> None:
    """Apply the permutation to the state (S0, S1), without feed-forward."""
    try:
        engine = _engine(ctx, variant)
        out0, out1 = engine.permute(s0, s1)
    except ValueError as exc:
        abort_with(exc)

    if output_json:
        echo_json({"variant": engine.variant.value, "state": [str(out0), str(out1)]})
    else:
        click.echo(f"{out0}\n{out1}")
