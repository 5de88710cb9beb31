"""Pytest configuration and fixtures for dotty tests.

CRITICAL: Protects the real ~/.config/dotty from test modifications.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def isolate_home(tmp_path, monkeypatch):
    """Point HOME and the working directory at a temporary directory.

    Tests should NEVER touch the real ~/.config/dotty/config.toml, so every
    test gets its own home directory and development mode is switched off.
    """
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("DOTTY_DEV_MODE", raising=False)
    monkeypatch.chdir(tmp_path)
    return home_dir


@pytest.fixture(autouse=True)
def reset_dotty_logger():
    """Close file handlers installed by setup_logging after each test."""
    yield
    package_logger = logging.getLogger("dotty")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
