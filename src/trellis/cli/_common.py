"""Shared helpers for trellis CLI commands."""

from typing import Optional

import click

from trellis.errors import TrellisError
from trellis.platform import Platform
from trellis.project import Project

PLATFORM_CHOICES = [p.value for p in Platform]


def platform_option(func):
    """``--platform`` option; the host platform when omitted."""
    return click.option(
        "--platform",
        "-p",
        "platform_name",
        type=click.Choice(PLATFORM_CHOICES),
        default=None,
        help="Target platform (default: the current platform)",
    )(func)


def load_project(ctx: click.Context) -> Project:
    """Load the project named by ``--manifest-path``, or discover one."""
    manifest_path = (ctx.obj or {}).get("manifest_path")
    try:
        return Project.load_or_else_discover(manifest_path)
    except TrellisError as e:
        raise click.ClickException(str(e)) from e


def resolve_platform(platform_name: Optional[str]) -> Platform:
    if platform_name is not None:
        return Platform.parse(platform_name)
    try:
        return Platform.current()
    except ValueError as e:
        raise click.ClickException(f"{e}; pass --platform explicitly") from e
