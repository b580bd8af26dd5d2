"""poseidon2bls CLI - Poseidon2 (t=2) compression over the BLS12-381 scalar field.

Commands:
    constants   - Derive and print the round constant table
    compress    - Compress two field elements
    permute     - Run the bare permutation on a state pair
    program     - Export the compression as a straight-line instruction program
    crosscheck  - Compare against an external reference implementation
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..config import load_config
from .compress_cmd import compress_command, permute_command
from .constants_cmd import constants_command
from .crosscheck_cmd import crosscheck_command
from .exit_codes import abort_with
from .program_cmd import program_command

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="poseidon2bls")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="JSON config file")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """Poseidon2 (t=2, rF=8, rP=56, d=5) over the BLS12-381 scalar field.

    \b
    Quick Start:
        poseidon2bls constants
        poseidon2bls compress 1 2
        poseidon2bls program --variant elided --json > program.json
    """
    try:
        config = load_config(config_path)
    except (OSError, ValueError) as exc:
        abort_with(exc)
    level = logging.DEBUG if verbose else getattr(logging, config["log_level"])
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("poseidon2bls").setLevel(level)
    ctx.obj = config


cli.add_command(constants_command, name="constants")
cli.add_command(compress_command, name="compress")
cli.add_command(permute_command, name="permute")
cli.add_command(program_command, name="program")
cli.add_command(crosscheck_command, name="crosscheck")


def main() -> None:
    """CLI entry point."""
    cli(prog_name="poseidon2bls")


if __name__ == "__main__":
    main()
