"""User interaction abstraction for the dotty wizards.

This module provides a protocol-based approach to user interaction, allowing
the profile wizards to run against the terminal (using click) or against a
pre-programmed mock in tests.

Example:
    >>> handler = CLIInteractionHandler()
    >>> items = [("nord", "nord", ""), ("solarized", "solarized", "")]
    >>> profile_id = handler.select("Select a profile:", items, initial="nord")

    Testing example:
    >>> test_handler = MockInteractionHandler(select_responses=["solarized"])
    >>> test_handler.select("Select:", [("nord", "nord", ""), ("solarized", "solarized", "")])
    'solarized'
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import click

# Validator callback: returns an error message, or None when input is accepted
Validator = Callable[[str], str | None]

# (key, label, description)
SelectItem = tuple[str, str, str]


@runtime_checkable
class InteractionHandler(Protocol):
    """Protocol for user interaction.

    All prompts block until the user answers. Cancelling (Ctrl+C) raises
    click.Abort in the CLI implementation.
    """

    def clear_screen(self) -> None: ...

    def intro(self, title: str) -> None: ...

    def outro(self, message: str) -> None: ...

    def show_info(self, message: str) -> None: ...

    def show_warning(self, message: str) -> None: ...

    def prompt_text(
        self,
        message: str,
        default: str | None = None,
        placeholder: str | None = None,
        validate: Validator | None = None,
    ) -> str:
        """Prompt for a single line of text.

        Args:
            message: Prompt message to display
            default: Value used when the user just presses Enter
            placeholder: Example value shown as a hint
            validate: Callback returning an error message for rejected input

        Returns:
            The first input accepted by validate
        """
        ...

    def select(
        self,
        message: str,
        items: list[SelectItem],
        initial: str | None = None,
    ) -> str:
        """Prompt user to pick one item.

        Returns:
            Key of the selected item
        """
        ...

    def multiselect(
        self,
        message: str,
        items: list[SelectItem],
        required: bool = True,
    ) -> list[str]:
        """Prompt user to pick any number of items.

        Returns:
            Keys of the selected items, in item order
        """
        ...

    def confirm(self, message: str, default: bool = True) -> bool: ...


class CLIInteractionHandler:
    """Click-based CLI interaction handler.

    Selections are shown as numbered menus; multi-select takes a
    comma-separated list of numbers.
    """

    def clear_screen(self) -> None:
        click.clear()

    def intro(self, title: str) -> None:
        click.echo()
        click.secho(f" {title} ", fg="black", bg="green", bold=True)
        click.echo()

    def outro(self, message: str) -> None:
        click.echo()
        click.secho(message, fg="green", bold=True)

    def show_info(self, message: str) -> None:
        click.secho(message, fg="cyan")
        click.echo()

    def show_warning(self, message: str) -> None:
        click.secho(f"Warning: {message}", fg="yellow", err=True)

    def prompt_text(
        self,
        message: str,
        default: str | None = None,
        placeholder: str | None = None,
        validate: Validator | None = None,
    ) -> str:
        if placeholder:
            click.secho(f"  e.g. {placeholder}", dim=True)

        while True:
            value = click.prompt(
                click.style(message, bold=True),
                default=default,
                show_default=default is not None,
                type=str,
            )
            error = validate(value) if validate else None
            if error is None:
                return value
            click.secho(error, fg="red")

    def select(
        self,
        message: str,
        items: list[SelectItem],
        initial: str | None = None,
    ) -> str:
        if not items:
            raise ValueError("items cannot be empty")

        keys = [key for key, _, _ in items]
        self._show_items(message, items, marked={initial} if initial else set())
        default = str(keys.index(initial) + 1) if initial in keys else None

        while True:
            choice_str = click.prompt(
                "Enter choice",
                default=default,
                show_default=default is not None,
                type=str,
            )
            try:
                choice_num = int(choice_str)
            except ValueError:
                click.secho("Please enter a valid number", fg="red")
                continue

            if 1 <= choice_num <= len(items):
                return keys[choice_num - 1]
            click.secho(f"Please enter a number between 1 and {len(items)}", fg="red")

    def multiselect(
        self,
        message: str,
        items: list[SelectItem],
        required: bool = True,
    ) -> list[str]:
        if not items:
            raise ValueError("items cannot be empty")

        keys = [key for key, _, _ in items]
        self._show_items(message, items)
        click.echo("Enter numbers separated by commas (e.g. 1,3)")

        while True:
            choice_str = click.prompt(
                "Enter choices",
                default="",
                show_default=False,
                type=str,
            )
            try:
                numbers = sorted({int(part) for part in choice_str.split(",") if part.strip()})
            except ValueError:
                click.secho("Please enter numbers separated by commas", fg="red")
                continue

            if any(not 1 <= number <= len(items) for number in numbers):
                click.secho(f"Please enter numbers between 1 and {len(items)}", fg="red")
                continue
            if required and not numbers:
                click.secho("Please select at least one option", fg="red")
                continue
            return [keys[number - 1] for number in numbers]

    def confirm(self, message: str, default: bool = True) -> bool:
        return click.confirm(click.style(message, bold=True), default=default)

    def _show_items(
        self,
        message: str,
        items: list[SelectItem],
        marked: set[str] | None = None,
    ) -> None:
        marked = marked or set()
        click.secho(message, bold=True)
        click.echo()
        for i, (key, label, description) in enumerate(items, 1):
            marker = click.style(" *", fg="green") if key in marked else ""
            line = f"  {click.style(str(i), fg='cyan')}. {label}{marker}"
            if description:
                line += f" - {description}"
            click.echo(line)
        click.echo()


class MockInteractionHandler:
    """Mock interaction handler for testing with pre-programmed responses.

    Provides deterministic responses for testing without user interaction.
    Tracks all interactions for verification in tests. Text responses
    rejected by a validator are recorded in ``rejections`` and the next
    response is tried, the same way the CLI re-prompts.

    Example:
        >>> handler = MockInteractionHandler(
        ...     text_responses=["bad branch", "good-branch"],
        ...     confirm_responses=[True],
        ... )
    """

    def __init__(
        self,
        text_responses: list[str] | None = None,
        select_responses: list[str] | None = None,
        multiselect_responses: list[list[str]] | None = None,
        confirm_responses: list[bool] | None = None,
    ):
        self.text_responses = list(text_responses or [])
        self.select_responses = list(select_responses or [])
        self.multiselect_responses = list(multiselect_responses or [])
        self.confirm_responses = list(confirm_responses or [])
        self.interactions: list[dict[str, Any]] = []
        self.rejections: list[str] = []

    def _next(self, responses: list, kind: str) -> Any:
        if not responses:
            raise IndexError(f"No more {kind} responses available")
        return responses.pop(0)

    def clear_screen(self) -> None:
        self.interactions.append({"type": "clear"})

    def intro(self, title: str) -> None:
        self.interactions.append({"type": "intro", "message": title})

    def outro(self, message: str) -> None:
        self.interactions.append({"type": "outro", "message": message})

    def show_info(self, message: str) -> None:
        self.interactions.append({"type": "info", "message": message})

    def show_warning(self, message: str) -> None:
        self.interactions.append({"type": "warning", "message": message})

    def prompt_text(
        self,
        message: str,
        default: str | None = None,
        placeholder: str | None = None,
        validate: Validator | None = None,
    ) -> str:
        while True:
            response = self._next(self.text_responses, "text")
            if response == "" and default is not None:
                response = default

            error = validate(response) if validate else None
            self.interactions.append(
                {
                    "type": "text",
                    "message": message,
                    "default": default,
                    "response": response,
                    "error": error,
                }
            )
            if error is None:
                return response
            self.rejections.append(error)

    def select(
        self,
        message: str,
        items: list[SelectItem],
        initial: str | None = None,
    ) -> str:
        if not items:
            raise ValueError("items cannot be empty")

        response = self._next(self.select_responses, "select")
        if response not in [key for key, _, _ in items]:
            raise ValueError(f"Invalid pre-programmed response {response!r}")

        self.interactions.append(
            {
                "type": "select",
                "message": message,
                "items": items,
                "initial": initial,
                "response": response,
            }
        )
        return response

    def multiselect(
        self,
        message: str,
        items: list[SelectItem],
        required: bool = True,
    ) -> list[str]:
        if not items:
            raise ValueError("items cannot be empty")

        response = self._next(self.multiselect_responses, "multiselect")
        keys = [key for key, _, _ in items]
        if any(key not in keys for key in response):
            raise ValueError(f"Invalid pre-programmed response {response!r}")
        if required and not response:
            raise ValueError("At least one selection is required")

        self.interactions.append(
            {
                "type": "multiselect",
                "message": message,
                "items": items,
                "response": response,
            }
        )
        return list(response)

    def confirm(self, message: str, default: bool = True) -> bool:
        response = self._next(self.confirm_responses, "confirm")
        self.interactions.append(
            {
                "type": "confirm",
                "message": message,
                "default": default,
                "response": response,
            }
        )
        return response

    def messages(self, kind: str) -> list[str]:
        """Messages recorded for one interaction type (e.g. "outro")."""
        return [i["message"] for i in self.interactions if i["type"] == kind]


__all__ = [
    "CLIInteractionHandler",
    "InteractionHandler",
    "MockInteractionHandler",
    "SelectItem",
    "Validator",
]
