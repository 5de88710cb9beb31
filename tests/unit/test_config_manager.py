"""Unit tests for config_manager module."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from dotty.config_manager import (
    ConfigLoader,
    ConfigLoaderClient,
    DottyConfig,
    LogLevel,
    ProfileConfig,
    load_or_default,
    persist,
    setup_logging,
)
from dotty.exceptions import (
    ConfigParseError,
    ConfigReadError,
    ConfigWriteError,
    StartupError,
)
from dotty.file_system import FileSystemClient
from tests.mocks.file_system_mock import MockConfigLoader, MockFileSystem

BASE_PATH = Path("/test/.config/dotty")
CONFIG_PATH = BASE_PATH / "config.toml"


class TestLogLevel:
    """Tests for LogLevel parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("off", LogLevel.OFF),
            ("ERROR", LogLevel.ERROR),
            ("Warn", LogLevel.WARN),
            ("info", LogLevel.INFO),
            (" debug ", LogLevel.DEBUG),
        ],
    )
    def test_from_str_case_insensitive(self, value, expected):
        """Level names are parsed case-insensitively."""
        assert LogLevel.from_str(value) is expected

    def test_from_str_invalid(self):
        """Unknown level names are rejected."""
        with pytest.raises(ValueError, match="Invalid log level"):
            LogLevel.from_str("loud")

    def test_logging_levels(self):
        """Levels map onto stdlib logging levels."""
        assert LogLevel.ERROR.logging_level == logging.ERROR
        assert LogLevel.WARN.logging_level == logging.WARNING
        assert LogLevel.INFO.logging_level == logging.INFO
        assert LogLevel.DEBUG.logging_level == logging.DEBUG
        assert LogLevel.OFF.logging_level > logging.CRITICAL


class TestDottyConfig:
    """Tests for the config data model."""

    def test_defaults(self):
        """Default document has warn level, no profiles and no active profile."""
        config = DottyConfig.default_with_base_path(BASE_PATH)
        assert config.base_path == BASE_PATH
        assert config.log_level is LogLevel.WARN
        assert config.profiles == {}
        assert config.active_profile == ""

    def test_profile_default_branch(self):
        """A profile without explicit input uses branch 'main'."""
        assert ProfileConfig().branch == "main"

    def test_profile_ids_sorted(self):
        """Profile IDs are listed in sorted order."""
        config = DottyConfig(
            base_path=BASE_PATH,
            profiles={"zeta": ProfileConfig("z"), "alpha": ProfileConfig("a")},
        )
        assert config.profile_ids() == ["alpha", "zeta"]

    def test_branches_exclude(self, sample_config):
        """branches() can skip one profile by ID."""
        assert sample_config.branches() == ["a", "b"]
        assert sample_config.branches(exclude="a") == ["b"]

    def test_paths(self):
        """Config and log files live in base_path."""
        config = DottyConfig.default_with_base_path(BASE_PATH)
        assert config.config_path == BASE_PATH / "config.toml"
        assert config.log_path == BASE_PATH / "dotty.log"


class TestSerialization:
    """Tests for TOML serialization."""

    @pytest.fixture
    def loader(self):
        return ConfigLoaderClient()

    def test_round_trip_default(self, loader):
        """Default document survives a round trip."""
        config = DottyConfig.default_with_base_path(BASE_PATH)
        assert loader.config_from_str(loader.config_to_string(config)) == config

    def test_round_trip_with_profiles(self, loader, sample_config):
        """Profiles, level and active profile survive a round trip."""
        assert loader.config_from_str(loader.config_to_string(sample_config)) == sample_config

    @pytest.mark.parametrize("level", list(LogLevel))
    def test_round_trip_every_level(self, loader, level):
        """Every log level survives a round trip."""
        config = DottyConfig(base_path=BASE_PATH, log_level=level)
        assert loader.config_from_str(loader.config_to_string(config)).log_level is level

    def test_round_trip_unusual_profile_ids(self, loader):
        """Profile IDs are not branch-restricted and need quoting in TOML."""
        config = DottyConfig(
            base_path=BASE_PATH,
            profiles={
                "my profile.v2": ProfileConfig("v2"),
                "ünïcode": ProfileConfig("u"),
                "nord-theme": ProfileConfig("nord"),
            },
            active_profile="my profile.v2",
        )
        assert loader.config_from_str(loader.config_to_string(config)) == config

    def test_document_layout(self, loader):
        """Serialized document uses the documented keys."""
        config = DottyConfig(
            base_path=BASE_PATH,
            profiles={"nord-theme": ProfileConfig("nord")},
            active_profile="nord-theme",
        )
        text = loader.config_to_string(config)

        assert 'base_path = "/test/.config/dotty"' in text
        assert 'log_level = "WARN"' in text
        assert 'active_profile = "nord-theme"' in text
        assert "[profiles.nord-theme]" in text
        assert 'branch = "nord"' in text

    def test_parse_minimal_document(self, loader):
        """Missing optional fields fall back to defaults."""
        config = loader.config_from_str('base_path = "/x"\n')
        assert config == DottyConfig.default_with_base_path(Path("/x"))

    def test_parse_lowercase_level(self, loader):
        """log_level is read case-insensitively."""
        config = loader.config_from_str('base_path = "/x"\nlog_level = "debug"\n')
        assert config.log_level is LogLevel.DEBUG

    @pytest.mark.parametrize(
        "content",
        [
            "not = = toml",
            'log_level = "WARN"\n',
            "base_path = 3\n",
            'base_path = "/x"\nlog_level = "LOUD"\n',
            'base_path = "/x"\nprofiles = 3\n',
            'base_path = "/x"\n[profiles]\na = "main"\n',
            'base_path = "/x"\n[profiles.a]\nname = "main"\n',
            'base_path = "/x"\n[profiles.a]\nbranch = 1\n',
            'base_path = "/x"\nactive_profile = 1\n',
        ],
    )
    def test_parse_errors(self, loader, content):
        """Malformed documents raise ConfigParseError."""
        with pytest.raises(ConfigParseError):
            loader.config_from_str(content)

    def test_satisfies_protocol(self, loader):
        """ConfigLoaderClient implements ConfigLoader."""
        assert isinstance(loader, ConfigLoader)


class TestGetBasePath:
    """Tests for base path resolution."""

    def test_production_uses_home(self, isolate_home):
        """Without dev mode, files live in ~/.config/dotty."""
        path = ConfigLoaderClient().get_base_path()

        assert path == isolate_home / ".config" / "dotty"
        assert path.is_dir()

    @pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
    def test_dev_mode_uses_cwd(self, monkeypatch, value):
        """In dev mode, files live under the working directory."""
        monkeypatch.setenv("DOTTY_DEV_MODE", value)
        path = ConfigLoaderClient().get_base_path()

        assert path == Path.cwd() / ".config" / "dotty"
        assert path.is_dir()

    def test_dev_mode_falsy_value(self, monkeypatch, isolate_home):
        """A falsy DOTTY_DEV_MODE keeps production placement."""
        monkeypatch.setenv("DOTTY_DEV_MODE", "0")
        assert ConfigLoaderClient().get_base_path() == isolate_home / ".config" / "dotty"

    def test_deterministic(self):
        """Repeated calls resolve the same directory."""
        loader = ConfigLoaderClient()
        assert loader.get_base_path() == loader.get_base_path()

    def test_home_unavailable(self):
        """Unresolvable home directory is a startup error."""
        with patch(
            "dotty.config_manager.Path.home",
            side_effect=RuntimeError("Could not determine home directory"),
        ):
            with pytest.raises(StartupError, match="home directory"):
                ConfigLoaderClient().get_base_path()

    def test_cwd_unavailable(self, monkeypatch):
        """Unresolvable working directory is a startup error in dev mode."""
        monkeypatch.setenv("DOTTY_DEV_MODE", "1")
        with patch("dotty.config_manager.Path.cwd", side_effect=FileNotFoundError("gone")):
            with pytest.raises(StartupError, match="current directory"):
                ConfigLoaderClient().get_base_path()

    def test_mkdir_failure(self):
        """Failure to create the directory is a startup error."""
        with patch("dotty.config_manager.Path.mkdir", side_effect=PermissionError("denied")):
            with pytest.raises(StartupError, match="Unable to create directories"):
                ConfigLoaderClient().get_base_path()


class TestLoadOrDefault:
    """Tests for the load-or-initialize bootstrap."""

    def test_new_file_written(self):
        """First run writes and returns the default document."""
        fs = MockFileSystem()
        loader = MockConfigLoader(BASE_PATH)

        config = load_or_default(fs, loader)

        assert config == DottyConfig.default_with_base_path(BASE_PATH)
        assert [path for path, _ in fs.writes] == [CONFIG_PATH]
        assert loader.config_from_str(fs.files[CONFIG_PATH]) == config

    def test_existing_file_loaded_without_write(self, sample_config):
        """An existing valid file is parsed and never rewritten."""
        loader = MockConfigLoader(BASE_PATH)
        fs = MockFileSystem({CONFIG_PATH: loader.config_to_string(sample_config)})

        config = load_or_default(fs, loader)

        assert config == sample_config
        assert fs.writes == []

    def test_stored_base_path_is_kept(self):
        """base_path is read from the document, not recomputed."""
        loader = MockConfigLoader(BASE_PATH)
        stored = DottyConfig.default_with_base_path(Path("/elsewhere/dotty"))
        fs = MockFileSystem({CONFIG_PATH: loader.config_to_string(stored)})

        assert load_or_default(fs, loader).base_path == Path("/elsewhere/dotty")

    def test_second_load_is_idempotent(self):
        """Loading twice returns the same document with a single write."""
        fs = MockFileSystem()
        loader = MockConfigLoader(BASE_PATH)

        first = load_or_default(fs, loader)
        second = load_or_default(fs, loader)

        assert first == second
        assert len(fs.writes) == 1

    def test_parse_error_not_overwritten(self):
        """A corrupt file raises and is left untouched."""
        fs = MockFileSystem({CONFIG_PATH: "not = = toml"})

        with pytest.raises(ConfigParseError, match="Unable to parse existing config file"):
            load_or_default(fs, MockConfigLoader(BASE_PATH))

        assert fs.writes == []
        assert fs.files[CONFIG_PATH] == "not = = toml"

    def test_read_error_not_overwritten(self):
        """An unreadable file raises and is left untouched."""
        fs = MockFileSystem({CONFIG_PATH: "anything"})
        fs.read_error = PermissionError("denied")

        with pytest.raises(ConfigReadError, match="Unable to read existing config file"):
            load_or_default(fs, MockConfigLoader(BASE_PATH))

        assert fs.writes == []

    def test_undecodable_file_not_overwritten(self, isolate_home):
        """A config file that is not valid UTF-8 is a read error."""
        config_path = isolate_home / ".config" / "dotty" / "config.toml"
        config_path.parent.mkdir(parents=True)
        config_path.write_bytes(b'base_path = "\xff\xfe"\n')
        mtime = config_path.stat().st_mtime_ns

        with pytest.raises(ConfigReadError, match="Unable to read existing config file"):
            load_or_default(FileSystemClient(), ConfigLoaderClient())

        assert config_path.read_bytes() == b'base_path = "\xff\xfe"\n'
        assert config_path.stat().st_mtime_ns == mtime

    def test_default_write_failure(self):
        """Failure to write the default document is reported."""
        fs = MockFileSystem()
        fs.write_error = OSError("disk full")

        with pytest.raises(ConfigWriteError):
            load_or_default(fs, MockConfigLoader(BASE_PATH))

    def test_startup_error_propagates(self):
        """Base path errors propagate unchanged."""
        loader = MockConfigLoader(BASE_PATH)
        with patch.object(loader, "get_base_path", side_effect=StartupError("no home")):
            with pytest.raises(StartupError):
                load_or_default(MockFileSystem(), loader)

    def test_real_disk_no_spurious_writes(self, isolate_home):
        """On disk, a second load leaves content and mtime unchanged."""
        fs = FileSystemClient()
        loader = ConfigLoaderClient()

        first = load_or_default(fs, loader)
        config_path = isolate_home / ".config" / "dotty" / "config.toml"
        content = config_path.read_text()
        mtime = config_path.stat().st_mtime_ns

        second = load_or_default(fs, loader)

        assert second == first
        assert config_path.read_text() == content
        assert config_path.stat().st_mtime_ns == mtime


class TestPersist:
    """Tests for writing the document back."""

    def test_writes_full_document(self, sample_config):
        """persist() writes the whole document to base_path/config.toml."""
        fs = MockFileSystem()
        loader = MockConfigLoader(BASE_PATH)

        path = persist(sample_config, fs, loader)

        assert path == CONFIG_PATH
        assert loader.config_from_str(fs.files[CONFIG_PATH]) == sample_config

    def test_uses_stored_base_path(self):
        """persist() writes under the document's base_path."""
        fs = MockFileSystem()
        config = DottyConfig.default_with_base_path(Path("/elsewhere"))

        assert persist(config, fs, MockConfigLoader(BASE_PATH)) == Path("/elsewhere/config.toml")

    def test_write_failure(self, sample_config):
        """Write failures raise ConfigWriteError."""
        fs = MockFileSystem()
        fs.write_error = PermissionError("read-only")

        with pytest.raises(ConfigWriteError, match="Unable to write config file"):
            persist(sample_config, fs, MockConfigLoader(BASE_PATH))

    def test_creates_directories_on_disk(self, tmp_path, sample_config):
        """persist() creates missing parent directories."""
        sample_config.base_path = tmp_path / "nested" / "dotty"

        persist(sample_config, FileSystemClient(), ConfigLoaderClient())

        assert (tmp_path / "nested" / "dotty" / "config.toml").exists()


class TestSetupLogging:
    """Tests for log file configuration."""

    def test_creates_log_file(self, tmp_path):
        """Log file is created in base_path with the configured level."""
        config = DottyConfig(base_path=tmp_path, log_level=LogLevel.INFO)

        log_path = setup_logging(config)

        assert log_path == tmp_path / "dotty.log"
        assert log_path.exists()
        assert logging.getLogger("dotty").level == logging.INFO

    def test_records_written(self, tmp_path):
        """Records from dotty modules reach the log file."""
        config = DottyConfig(base_path=tmp_path, log_level=LogLevel.DEBUG)
        log_path = setup_logging(config)

        logging.getLogger("dotty.tests").debug("hello from tests")
        for handler in logging.getLogger("dotty").handlers:
            handler.flush()

        assert "hello from tests" in log_path.read_text()

    def test_off_silences(self, tmp_path):
        """OFF still creates the file but drops every record."""
        config = DottyConfig(base_path=tmp_path, log_level=LogLevel.OFF)
        log_path = setup_logging(config)

        logging.getLogger("dotty.tests").critical("should not appear")
        for handler in logging.getLogger("dotty").handlers:
            handler.flush()

        assert log_path.exists()
        assert "should not appear" not in log_path.read_text()

    def test_replaces_previous_handler(self, tmp_path):
        """Calling twice leaves a single handler."""
        config = DottyConfig(base_path=tmp_path)
        setup_logging(config)
        setup_logging(config, dev_mode=True)

        assert len(logging.getLogger("dotty").handlers) == 1

    def test_unopenable_log_file(self, tmp_path):
        """An unopenable log file is a startup error."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        config = DottyConfig(base_path=blocker / "dotty")

        with pytest.raises(StartupError, match="Unable to open log file"):
            setup_logging(config)
