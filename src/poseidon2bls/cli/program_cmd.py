"""poseidon2bls program - export the compression as an instruction program.

Usage:
    poseidon2bls program [--variant reference|elided]
    poseidon2bls program --variant elided --json -o program.json
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..constants import derive
from ..program import build_program
from .exit_codes import abort_with
from .utils import VARIANT_CHOICE, echo_json, get_config, resolve_variant


@click.command("program")
@click.option("--variant", type=VARIANT_CHOICE, default=None, help="Arithmetic variant")
@click.option("--json", "output_json", is_flag=True, help="Output the full instruction list as JSON")
@click.option("-o", "--output", "output_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Write the JSON program to a file")
@click.pass_context
def program_command(
    ctx: click.Context,
    variant: Optional[str],
    output_json: bool,
    output_path: Optional[Path],
) -> None:
    """Trace compress() into add/addmod/mulmod/mod instructions.

    Each operand is tagged raw, clean (< PRIME) or dirty (< 2*PRIME) so an
    emitter can choose unreduced additions safely.
    """
    config = get_config(ctx)
    try:
        program = build_program(derive(config["seed"]), resolve_variant(ctx, variant))
    except ValueError as exc:
        abort_with(exc)

    if output_path is not None:
        output_path.write_text(json.dumps(program.to_dict(), indent=2), encoding="utf-8")
        click.echo(f"wrote {len(program)} instructions to {output_path}")
        return
    if output_json:
        echo_json(program.to_dict())
        return

    console = Console()
    grid = Table(title=f"{program.variant.value} program ({program.domain})")
    grid.add_column("op")
    grid.add_column("count", justify="right")
    for op, count in program.op_counts().items():
        grid.add_row(op, str(count))
    grid.add_row("[bold]reductions[/bold]", f"[bold]{program.reductions}[/bold]")
    console.print(grid)
