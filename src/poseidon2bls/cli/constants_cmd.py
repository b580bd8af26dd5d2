"""poseidon2bls constants - derive and display the round constant table.

Usage:
    poseidon2bls constants
    poseidon2bls constants --json > constants.json
"""
from __future__ import annotations

from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..constants import derive
from ..schedule import DEFAULT_SCHEDULE
from .exit_codes import abort_with
from .utils import echo_json, get_config


@click.command("constants")
@click.option("--seed", default=None, help="Seed label (default from config)")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_context
def constants_command(ctx: click.Context, seed: Optional[str], output_json: bool) -> None:
    """Derive the round constants from the chained Keccak-256 seed.

    \b
    Examples:
        poseidon2bls constants
        poseidon2bls constants --seed Poseidon2-BLS12_381 --json
    """
    seed = seed or get_config(ctx)["seed"]
    try:
        table = derive(seed, DEFAULT_SCHEDULE)
    except ValueError as exc:
        abort_with(exc)

    if output_json:
        echo_json(table.to_dict())
        return

    console = Console()
    grid = Table(title=table.domain, show_lines=False)
    grid.add_column("round", justify="right")
    grid.add_column("kind")
    grid.add_column("constants", overflow="fold")
    for index, (kind, row) in enumerate(table.kinds()):
        grid.add_row(str(index), kind.value, "\n".join(hex(v) for v in row))
    console.print(grid)
    console.print(f"[dim]{len(table)} rows, {sum(1 for _ in table.values())} constants[/dim]")
