"""Config command group for dotty.

This module provides the configuration commands:
- setup: Run the initial setup wizard
- profile list: Choose the active profile
- profile create: Create a new profile
- profile delete: Delete one or more profiles
- profile update: Change a profile's branch

Every command loads the config once (done by the main group), runs a single
workflow and writes the whole document back.
"""

import logging
import sys
from collections.abc import Callable

import click
from rich.console import Console
from rich.table import Table

from dotty.click_group import DottyGroup
from dotty.config_manager import DottyConfig
from dotty.exceptions import DottyError
from dotty.profile_manager import ProfileManager

logger = logging.getLogger(__name__)
console = Console()

PROFILE_COMMANDS = ("list", "create", "delete", "update")


@click.group(name="config", cls=DottyGroup)
def config_group():
    """Manage dotty settings and profiles.

    A profile is a named set of dotfiles stored on its own git branch.
    Only one profile is active at a time.

    \b
    EXAMPLES:
        # First-time setup
        $ dotty config setup

        # Choose the active profile
        $ dotty config profile

        # Create, update or delete profiles
        $ dotty config profile create
        $ dotty config profile update
        $ dotty config profile delete
    """
    pass


def _manager(ctx: click.Context) -> ProfileManager:
    obj = ctx.obj
    return ProfileManager(obj["fs"], obj["loader"], obj["git"], obj["interaction"])


def _run(
    ctx: click.Context,
    action: str,
    workflow: Callable[[DottyConfig], DottyConfig],
) -> DottyConfig:
    """Run a workflow, turning failures into an error message and exit code."""
    try:
        config = workflow(ctx.obj["config"])
        ctx.obj["config"] = config
        return config
    except DottyError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.error(f"Failed to {action}: {e}")
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("Cancelled")
        logger.info(f"Cancelled: {action}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        sys.exit(1)


def _print_profiles(config: DottyConfig) -> None:
    table = Table(title="dotty Profiles")
    table.add_column("Active", style="cyan", width=8)
    table.add_column("Profile", style="green")
    table.add_column("Branch", style="blue")

    for profile_id in config.profile_ids():
        marker = "*" if profile_id == config.active_profile else ""
        table.add_row(marker, profile_id, config.profiles[profile_id].branch)

    console.print(table)


@config_group.command(name="setup")
@click.pass_context
def setup_command(ctx: click.Context):
    """Run the initial setup wizard.

    Chooses the log level and offers to create a first profile.

    \b
    EXAMPLES:
        $ dotty config setup
    """
    _run(ctx, "run setup", _manager(ctx).setup)


@config_group.command(name="profile")
@click.argument(
    "command",
    type=click.Choice(PROFILE_COMMANDS),
    default="list",
    required=False,
)
@click.pass_context
def profile_command(ctx: click.Context, command: str):
    """Manage profiles.

    COMMAND is one of list (default), create, delete or update.

    \b
    EXAMPLES:
        $ dotty config profile
        $ dotty config profile create
        $ dotty config profile delete
        $ dotty config profile update
    """
    manager = _manager(ctx)
    workflows = {
        "list": manager.activate,
        "create": manager.create,
        "delete": manager.delete,
        "update": manager.update,
    }

    config = _run(ctx, f"{command} profile", workflows[command])

    if command == "list" and config.profiles:
        _print_profiles(config)


__all__ = ["config_group"]
