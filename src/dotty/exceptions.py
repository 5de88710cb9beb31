"""Custom exceptions for dotty."""


class DottyError(Exception):
    """Base exception for dotty errors."""

    exit_code = 1


class StartupError(DottyError):
    """Base path cannot be resolved or created."""

    pass


class ConfigError(DottyError):
    """Base exception for config file errors."""

    pass


class ConfigReadError(ConfigError):
    """Existing config file could not be read."""

    pass


class ConfigParseError(ConfigError):
    """Existing config file could not be parsed."""

    pass


class ConfigWriteError(ConfigError):
    """Config could not be serialized or written."""

    pass


class ValidationError(DottyError):
    """User input was rejected. Recoverable, the prompt asks again."""

    pass


class InvalidBranchNameError(ValidationError):
    """Branch name is not a valid git ref name."""

    pass


class DuplicateNameError(ValidationError):
    """Name is already used."""

    pass


__all__ = [
    "ConfigError",
    "ConfigParseError",
    "ConfigReadError",
    "ConfigWriteError",
    "DottyError",
    "DuplicateNameError",
    "InvalidBranchNameError",
    "StartupError",
    "ValidationError",
]
