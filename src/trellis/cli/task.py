"""Trellis CLI - task commands."""

from typing import Optional

import click

from ._common import load_project, platform_option, resolve_platform


@click.group()
def task():
    """Inspect project tasks."""
    pass


@task.command("list")
@platform_option
@click.pass_context
def list_tasks(ctx: click.Context, platform_name: Optional[str]):
    """List the effective tasks for a platform."""
    project = load_project(ctx)
    tasks = project.tasks(resolve_platform(platform_name))
    if not tasks:
        click.echo("No tasks defined")
        return

    width = max(len(name) for name in tasks)
    for name, definition in tasks.items():
        line = f"{name:<{width}}  {definition}"
        if definition.depends_on and not definition.is_alias:
            line += f"  (depends on: {', '.join(definition.depends_on)})"
        click.echo(line)


@task.command("depends-on")
@click.argument("name")
@platform_option
@click.pass_context
def depends_on(ctx: click.Context, name: str, platform_name: Optional[str]):
    """List the tasks that depend on NAME."""
    project = load_project(ctx)
    for dependent in project.task_names_depending_on(name, resolve_platform(platform_name)):
        click.echo(dependent)
