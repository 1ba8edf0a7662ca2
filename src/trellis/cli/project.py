"""Trellis CLI - project inspection commands (info, deps, activation, system-requirements)."""

import json
from typing import Dict, Optional

import click

from trellis.models.dependency import SpecType, format_dependency

from ._common import PLATFORM_CHOICES, load_project, platform_option, resolve_platform

DEPENDENCY_KINDS = ["all", "run", "host", "build", "pypi"]


@click.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def info(ctx: click.Context, output_format: str):
    """Show project metadata."""
    project = load_project(ctx)

    data = {
        "name": project.name,
        "version": project.version,
        "description": project.description,
        "root": str(project.root),
        "manifest": str(project.manifest_path),
        "platforms": [str(p) for p in project.platforms],
        "channels": project.channels,
        "tasks": project.task_names(),
        "pypi": project.has_pypi_dependencies(),
    }

    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Project:   {data['name']}")
    if data["version"]:
        click.echo(f"Version:   {data['version']}")
    if data["description"]:
        click.echo(f"About:     {data['description']}")
    click.echo(f"Root:      {data['root']}")
    click.echo(f"Platforms: {', '.join(data['platforms'])}")
    click.echo(f"Channels:  {', '.join(data['channels'])}")
    if data["tasks"]:
        click.echo(f"Tasks:     {', '.join(data['tasks'])}")


@click.command()
@platform_option
@click.option(
    "--kind",
    "-k",
    type=click.Choice(DEPENDENCY_KINDS),
    default="all",
    help="Dependency kind; 'all' combines run, host and build",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def deps(ctx: click.Context, platform_name: Optional[str], kind: str, output_format: str):
    """Show the effective dependencies for a platform."""
    project = load_project(ctx)
    platform = resolve_platform(platform_name)

    if kind == "all":
        resolved = project.all_dependencies(platform)
    elif kind == "pypi":
        resolved = project.pypi_dependencies(platform)
    else:
        resolved = project.dependencies(platform, SpecType(kind))

    if output_format == "json":
        payload: Dict[str, str] = {str(name): str(spec) for name, spec in resolved.items()}
        click.echo(json.dumps(payload, indent=2))
        return

    for name, spec in resolved.items():
        click.echo(format_dependency(name, spec))


@click.command()
@platform_option
@click.pass_context
def activation(ctx: click.Context, platform_name: Optional[str]):
    """List the activation scripts that apply to a platform."""
    project = load_project(ctx)
    for script in project.activation_scripts(resolve_platform(platform_name)):
        click.echo(str(script))


@click.command()
@click.option(
    "--platform",
    "-p",
    "platform_name",
    type=click.Choice(PLATFORM_CHOICES),
    default=None,
    help="Only show requirements relevant on this platform (default: all declared)",
)
@click.pass_context
def system_requirements(ctx: click.Context, platform_name: Optional[str]):
    """Show system requirements as virtual packages."""
    project = load_project(ctx)
    if platform_name is None:
        packages = project.system_requirements().virtual_packages()
    else:
        packages = project.virtual_packages_for_platform(resolve_platform(platform_name))

    for package in packages:
        click.echo(str(package))
