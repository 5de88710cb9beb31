"""Click group that shows contextual help on command line mistakes."""

from typing import Any, NoReturn

import click


def _exit_with_help(ctx: click.Context, error: click.UsageError, exit_code: int) -> NoReturn:
    click.echo(f"Error: {error.format_message()}", err=True)
    click.echo("")
    click.echo(ctx.get_help())
    ctx.exit(exit_code)


class DottyGroup(click.Group):
    """Group that prints the failing command's help on usage errors.

    Unknown commands exit 1; bad arguments keep click's exit code (2).
    """

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            # BadParameter and MissingParameter carry the subcommand's context
            _exit_with_help(e.ctx or ctx, e, e.exit_code)

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            _exit_with_help(ctx, e, 1)


# Subgroups created with @group.group() also use DottyGroup
DottyGroup.group_class = DottyGroup
