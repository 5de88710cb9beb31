"""Command groups for the dotty CLI."""

from dotty.commands.config import config_group

__all__ = ["config_group"]
