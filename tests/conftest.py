"""
Shared test fixtures and configuration for dotty tests.

This module provides common fixtures used across all test types:
- In-memory file system and config loader doubles
- Recording git client
- Sample config documents
"""

from pathlib import Path

import pytest

from dotty.config_manager import DottyConfig, LogLevel, ProfileConfig
from tests.mocks.file_system_mock import MockConfigLoader, MockFileSystem
from tests.mocks.git_mock import MockGitClient

BASE_PATH = Path("/test/.config/dotty")


# ============================================================================
# COLLABORATOR FIXTURES
# ============================================================================


@pytest.fixture
def mock_fs():
    """Empty in-memory file system."""
    return MockFileSystem()


@pytest.fixture
def mock_loader():
    """Config loader rooted at BASE_PATH."""
    return MockConfigLoader(BASE_PATH)


@pytest.fixture
def mock_git():
    """Git client recording validation calls."""
    return MockGitClient()


# ============================================================================
# CONFIG FIXTURES
# ============================================================================


@pytest.fixture
def empty_config():
    """Default document with no profiles."""
    return DottyConfig.default_with_base_path(BASE_PATH)


@pytest.fixture
def sample_config():
    """Document with two profiles, 'a' active."""
    return DottyConfig(
        base_path=BASE_PATH,
        log_level=LogLevel.INFO,
        profiles={
            "a": ProfileConfig(branch="a"),
            "b": ProfileConfig(branch="b"),
        },
        active_profile="a",
    )
