"""
Trellis CLI - Inspect what a project manifest resolves to per platform.

Commands:
    trellis info                 Project metadata
    trellis deps                 Effective dependencies for a platform
    trellis task list            Effective tasks for a platform
    trellis task depends-on      Tasks that depend on a task
    trellis activation           Activation scripts for a platform
    trellis system-requirements  Virtual packages for a platform
"""

from typing import Optional

import click

from trellis import __version__
from trellis.config import get_config
from trellis.logger import configure_logging

from .project import activation, deps, info, system_requirements
from .task import task


@click.group()
@click.version_option(__version__, prog_name="trellis")
@click.option(
    "--manifest-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to trellis.yaml (default: search the current directory and its parents)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Log level (default: TRELLIS_LOG_LEVEL or warning)",
)
@click.pass_context
def main(ctx: click.Context, manifest_path: Optional[str], log_level: Optional[str]):
    """Trellis - per-platform views over a project manifest."""
    config = get_config()
    configure_logging(level=log_level or config.log_level, fmt=config.log_format)

    ctx.ensure_object(dict)
    ctx.obj["manifest_path"] = manifest_path


# Register standalone commands
main.add_command(info)
main.add_command(deps)
main.add_command(activation)
main.add_command(system_requirements, name="system-requirements")

# Register command groups
main.add_command(task)


if __name__ == "__main__":
    main()
