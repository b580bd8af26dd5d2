"""Common CLI utilities - config access, shared options, output."""
from __future__ import annotations

import json
from typing import Any, Optional

import click

from ..config import load_config
from ..permutation import Variant

VARIANT_CHOICE = click.Choice([v.value for v in Variant])


def get_config(ctx: click.Context) -> dict:
    """Return the config loaded by the root group, loading it when run standalone."""
    root = ctx.find_root()
    if root.obj is None:
        root.obj = load_config()
    return root.obj


def resolve_variant(ctx: click.Context, variant: Optional[str]) -> Variant:
    return Variant(variant or get_config(ctx)["variant"])


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))
