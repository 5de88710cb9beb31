"""CLI entry point for dotty.

Commands:
    dotty config setup                   # Initial setup wizard
    dotty config profile [list]          # Choose the active profile
    dotty config profile create          # Create a profile
    dotty config profile delete          # Delete profiles
    dotty config profile update          # Change a profile's branch
"""

import logging
import sys

import click
from rich.console import Console

from dotty import __version__
from dotty.click_group import DottyGroup
from dotty.commands import config_group
from dotty.config_manager import ConfigLoaderClient, load_or_default, setup_logging
from dotty.exceptions import DottyError
from dotty.file_system import FileSystemClient
from dotty.git_client import GitClient
from dotty.interaction_handler import CLIInteractionHandler

logger = logging.getLogger(__name__)
console = Console()


@click.group(
    cls=DottyGroup,
    context_settings={"help_option_names": ["--help", "-h"]},
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context) -> None:
    """dotty - manage dotfile profiles backed by git branches.

    \b
    CONFIGURATION:
        Config file: ~/.config/dotty/config.toml
        Log file:    ~/.config/dotty/dotty.log
        Set DOTTY_DEV_MODE=1 to use ./.config/dotty instead.

    For help on any command: dotty <command> --help
    """
    obj = ctx.ensure_object(dict)
    obj.setdefault("fs", FileSystemClient())
    obj.setdefault("loader", ConfigLoaderClient())
    obj.setdefault("git", GitClient())
    obj.setdefault("interaction", CLIInteractionHandler())

    dev_mode = ConfigLoaderClient.is_dev_mode()
    if dev_mode:
        console.print("[bold red]dotty is running in development mode.[/bold red]")

    try:
        config = load_or_default(obj["fs"], obj["loader"])
        setup_logging(config, dev_mode=dev_mode)
    except DottyError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(e.exit_code)

    logger.debug(f"dotty {__version__} started with config at: {config.config_path}")
    obj["config"] = config


main.add_command(config_group)


if __name__ == "__main__":
    main()


__all__ = ["main"]
