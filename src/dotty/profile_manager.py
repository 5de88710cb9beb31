"""Profile lifecycle workflows.

This module implements the guided workflows that mutate the dotty config
document: create, list/activate, delete and update a profile, plus the
initial setup wizard.

Every workflow:
- Works on a deep copy of the document it receives
- Collects input through an InteractionHandler
- Persists the whole document as its last step (only when something changed)

Validation failures (bad branch name, name already used) never leave a
workflow: they are returned to the prompt as an error message and the user is
asked again. Only I/O failures propagate.

Example:
    >>> manager = ProfileManager(FileSystemClient(), ConfigLoaderClient(),
    ...                          GitClient(), CLIInteractionHandler())
    >>> config = manager.create(load_or_default(manager.fs, manager.loader))
"""

import copy
import logging
from collections.abc import Iterable

from dotty.config_manager import (
    ConfigLoader,
    DottyConfig,
    LogLevel,
    ProfileConfig,
    persist,
)
from dotty.exceptions import DuplicateNameError, ValidationError
from dotty.file_system import FileSystem
from dotty.git_client import Git
from dotty.interaction_handler import InteractionHandler, SelectItem, Validator

logger = logging.getLogger(__name__)

PROFILE_HELP = (
    "A Profile is like a container for a specific look and feel of your "
    "system. You can only use one Profile at a time. When you use dotty, "
    "it will apply the settings from your currently active Profile."
)

BRANCH_HELP = (
    "dotty works with git to keep track of your settings. For each Profile "
    "you create, dotty uses a separate 'branch' in git, so every set of "
    "settings is kept apart from the others."
)

WELCOME = (
    "Welcome! We'll guide you through setting up dotty step by step. "
    "We'll ask you a few simple questions so dotty works best for you."
)

NO_PROFILES = "No profiles configured. Create one with: dotty config profile create"

LOG_LEVEL_ITEMS: list[SelectItem] = [
    (LogLevel.OFF.value, "Off", "Disable logging"),
    (LogLevel.DEBUG.value, "Debug", "Show all possible details"),
    (LogLevel.INFO.value, "Info", "Show general updates and information"),
    (LogLevel.WARN.value, "Warn", "Show potential issues and concerns"),
    (LogLevel.ERROR.value, "Error", "Show serious problems that need attention"),
]


def is_profile_id_unique(existing_ids: Iterable[str], profile_id: str) -> None:
    """Validate a proposed profile ID.

    Raises:
        ValidationError: If the ID is blank
        DuplicateNameError: If a profile with this ID already exists
    """
    if not profile_id.strip():
        raise ValidationError("Profile ID cannot be empty.")
    if profile_id in set(existing_ids):
        raise DuplicateNameError("Profile with this ID already exists.")


def profile_items(config: DottyConfig) -> list[SelectItem]:
    """Selection items for every profile, in sorted order."""
    return [
        (profile_id, profile_id, config.profiles[profile_id].branch)
        for profile_id in config.profile_ids()
    ]


class ProfileManager:
    """Run profile workflows against injected collaborators.

    Args:
        fs: File system used to persist the document
        loader: Config loader used to serialize the document
        git: Branch name validator
        interaction: Prompt collaborator
    """

    def __init__(
        self,
        fs: FileSystem,
        loader: ConfigLoader,
        git: Git,
        interaction: InteractionHandler,
    ):
        self.fs = fs
        self.loader = loader
        self.git = git
        self.interaction = interaction

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    def branch_validator(self, existing_branches: Iterable[str]) -> Validator:
        """Build a prompt validator for branch names.

        The returned callback runs the syntax check then the uniqueness
        check and turns a ValidationError into its message.
        """
        branches = list(existing_branches)

        def validate(name: str) -> str | None:
            try:
                self.git.is_valid_branch_name(name)
                self.git.is_branch_unique(branches, name)
            except ValidationError as e:
                return str(e)
            return None

        return validate

    @staticmethod
    def profile_id_validator(existing_ids: Iterable[str]) -> Validator:
        """Build a prompt validator rejecting blank or taken profile IDs."""
        ids = set(existing_ids)

        def validate(profile_id: str) -> str | None:
            try:
                is_profile_id_unique(ids, profile_id)
            except ValidationError as e:
                return str(e)
            return None

        return validate

    # ------------------------------------------------------------------
    # Wizards (prompt and mutate, no persistence)
    # ------------------------------------------------------------------

    def new_profile_wizard(self, config: DottyConfig) -> DottyConfig:
        """Prompt for a new profile and add it to config."""
        self.interaction.clear_screen()
        self.interaction.intro("Create a dotty Profile")

        profile_id = self.interaction.prompt_text(
            "Assign a unique identifier for this profile",
            placeholder="nord-theme",
            validate=self.profile_id_validator(config.profiles),
        )

        self.interaction.show_info(BRANCH_HELP)
        profile = self._prompt_profile(None, config.branches())
        config.profiles[profile_id] = profile
        logger.info(f"Added profile '{profile_id}' on branch '{profile.branch}'")

        if self.interaction.confirm("Would you like to set this profile as your active profile?"):
            config.active_profile = profile_id
            logger.info(f"Activated profile '{profile_id}'")

        return config

    def list_profiles_wizard(self, config: DottyConfig) -> DottyConfig:
        """Prompt for the profile to activate."""
        self.interaction.clear_screen()
        self.interaction.intro("dotty Profiles")

        initial = config.active_profile if config.active_profile in config.profiles else None
        config.active_profile = self.interaction.select(
            "Select a profile to activate as your default dotty profile",
            profile_items(config),
            initial=initial,
        )
        return config

    def select_profiles_wizard(self, config: DottyConfig) -> list[str]:
        """Prompt for one or more profiles to delete."""
        self.interaction.clear_screen()
        self.interaction.intro("dotty Profiles")

        return self.interaction.multiselect(
            "Select one or more profiles to delete",
            profile_items(config),
            required=True,
        )

    def update_profile_wizard(self, config: DottyConfig) -> DottyConfig:
        """Prompt for a profile and its new branch."""
        self.interaction.clear_screen()
        self.interaction.intro("dotty Profiles")

        profile_id = self.interaction.select("Select a profile to update", profile_items(config))
        current = config.profiles[profile_id]

        profile = self._prompt_profile(current, config.branches(exclude=profile_id))
        config.profiles[profile_id] = profile
        logger.info(f"Profile '{profile_id}' now uses branch '{profile.branch}'")
        return config

    def initial_setup_wizard(self, config: DottyConfig) -> DottyConfig:
        """Prompt for global settings and, when none exist, a first profile."""
        self.interaction.clear_screen()
        self.interaction.intro("Configure dotty")
        self.interaction.show_info(WELCOME)
        self.interaction.show_info(f"dotty keeps its files in: {config.base_path}")

        selected = self.interaction.select(
            "How much detail do you want in dotty's activity reports?",
            LOG_LEVEL_ITEMS,
            initial=config.log_level.value,
        )
        config.log_level = LogLevel(selected)

        if not config.profiles:
            self.interaction.show_info(PROFILE_HELP)
            if self.interaction.confirm("Do you want to create a profile?"):
                config = self.new_profile_wizard(config)

        return config

    def _prompt_profile(
        self, profile: ProfileConfig | None, existing_branches: list[str]
    ) -> ProfileConfig:
        profile = copy.copy(profile) if profile else ProfileConfig()
        profile.branch = self.interaction.prompt_text(
            "Give a unique name for this Profile's storage space in git (a 'branch')",
            default=profile.branch,
            validate=self.branch_validator(existing_branches),
        )
        return profile

    # ------------------------------------------------------------------
    # Workflows (prompt, mutate, persist)
    # ------------------------------------------------------------------

    def create(self, config: DottyConfig) -> DottyConfig:
        """Create a profile and save the document."""
        config = self.new_profile_wizard(copy.deepcopy(config))
        persist(config, self.fs, self.loader)
        self.interaction.outro("A new profile has been created!")
        return config

    def activate(self, config: DottyConfig) -> DottyConfig:
        """Pick the active profile. Saves only if the selection changed."""
        if not config.profiles:
            self.interaction.show_warning(NO_PROFILES)
            return config

        previous = config.active_profile
        config = self.list_profiles_wizard(copy.deepcopy(config))

        if config.active_profile == previous:
            logger.debug(f"Active profile unchanged: '{previous}'")
            return config

        persist(config, self.fs, self.loader)
        logger.info(f"Active profile changed from '{previous}' to '{config.active_profile}'")
        self.interaction.outro(f"Active profile has been changed to: {config.active_profile}")
        return config

    def delete(self, config: DottyConfig) -> DottyConfig:
        """Delete the selected profiles and save the document.

        The active profile reference is left as is, even when it points at a
        deleted profile.
        """
        if not config.profiles:
            self.interaction.show_warning(NO_PROFILES)
            return config

        config = copy.deepcopy(config)
        selected = self.select_profiles_wizard(config)

        deleted = []
        for profile_id in selected:
            if config.profiles.pop(profile_id, None) is not None:
                deleted.append(profile_id)
        if not deleted:
            return config

        persist(config, self.fs, self.loader)
        logger.info(f"Deleted profiles: {', '.join(deleted)}")

        if config.active_profile in deleted:
            self.interaction.show_warning(
                f"Active profile '{config.active_profile}' was deleted. "
                "Choose a new one with: dotty config profile list"
            )
        self.interaction.outro(f"{len(deleted)} profile(s) have been deleted")
        return config

    def update(self, config: DottyConfig) -> DottyConfig:
        """Change a profile's branch and save the document."""
        if not config.profiles:
            self.interaction.show_warning(NO_PROFILES)
            return config

        config = self.update_profile_wizard(copy.deepcopy(config))
        persist(config, self.fs, self.loader)
        self.interaction.outro("Profile has been updated")
        return config

    def setup(self, config: DottyConfig) -> DottyConfig:
        """Run the initial setup wizard and save the document."""
        config = self.initial_setup_wizard(copy.deepcopy(config))
        persist(config, self.fs, self.loader)
        self.interaction.outro("dotty has been configured")
        return config


__all__ = [
    "LOG_LEVEL_ITEMS",
    "ProfileManager",
    "is_profile_id_unique",
    "profile_items",
]
