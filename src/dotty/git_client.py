"""Git branch name validation.

Every dotty profile is stored on its own git branch. Before a profile is
created or updated, the proposed branch name must pass two independent checks:

- Syntax: the name must be a usable git ref name
- Uniqueness: no other profile may already use the branch

Both checks are pure and synchronous, so callers can run the syntax check
before they have collected the list of existing branches.

Example:
    >>> git = GitClient()
    >>> git.is_valid_branch_name("feature/123")
    >>> git.is_branch_unique(["main", "develop"], "release")
"""

import logging
import unicodedata
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from dotty.exceptions import DuplicateNameError, InvalidBranchNameError

logger = logging.getLogger(__name__)

# Characters git refuses in ref names
INVALID_BRANCH_CHARS = frozenset("~^:?*[\\")


@runtime_checkable
class Git(Protocol):
    """Protocol for the git capabilities dotty needs."""

    def is_valid_branch_name(self, name: str) -> None:
        """Raise InvalidBranchNameError if name is not a valid branch name."""
        ...

    def is_branch_unique(self, branches: Iterable[str], name: str) -> None:
        """Raise DuplicateNameError if name is already in branches."""
        ...


class GitClient:
    """Production git client.

    Only validation lives here; branch listing and checkout are handled by
    git itself.
    """

    def is_valid_branch_name(self, name: str) -> None:
        """Validate branch name syntax.

        Args:
            name: Proposed branch name

        Raises:
            InvalidBranchNameError: If the name is empty, starts or ends with
                '/', contains '..', whitespace, control characters or one of
                the reserved characters ~ ^ : ? * [ \\

        Example:
            >>> GitClient().is_valid_branch_name("hotfix-456")
        """
        if not name.strip():
            raise InvalidBranchNameError("Branch name cannot be empty")

        if name.startswith("/") or name.endswith("/"):
            raise InvalidBranchNameError("Branch name cannot start or end with '/'")

        if ".." in name:
            raise InvalidBranchNameError("Branch name cannot contain two consecutive dots '..'")

        for char in name:
            if char.isspace():
                raise InvalidBranchNameError("Branch name cannot contain spaces")
            if char in INVALID_BRANCH_CHARS or unicodedata.category(char) == "Cc":
                raise InvalidBranchNameError(
                    f"Branch name contains invalid character: {char!r}"
                )

    def is_branch_unique(self, branches: Iterable[str], name: str) -> None:
        """Validate that no existing branch has this exact name.

        Comparison is case-sensitive, matching git on case-sensitive
        filesystems.

        Args:
            branches: Branch names already in use
            name: Proposed branch name

        Raises:
            DuplicateNameError: If name is already used
        """
        if name in set(branches):
            logger.debug(f"Branch name already in use: {name}")
            raise DuplicateNameError("This name is already used. Please choose a different one.")


__all__ = ["INVALID_BRANCH_CHARS", "Git", "GitClient"]
