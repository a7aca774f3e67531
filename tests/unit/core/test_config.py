"""Unit tests for scan configuration.

Tests for the config file model, loading and saving, and the merge of
command-line options over file values.
"""

import logging
from pathlib import Path

import pytest
from heft.core.config import (
    DEFAULT_TIMEOUT_SECONDS,
    ConfigParseError,
    ConfigValidationError,
    FileConfig,
    FileDetectorsConfig,
    FileScanConfig,
    ScanOptions,
    config_to_dict,
    default_file_config,
    load_file_config,
    load_file_config_or_default,
    merge_scan_config,
    save_file_config,
)
from heft.core.platform import HostPlatform, Platform


@pytest.fixture
def host(home: Path) -> HostPlatform:
    return HostPlatform(os=Platform.LINUX, home=home)


class TestMergeScanConfig:
    """Tests for merge_scan_config() precedence."""

    def test_defaults(self, host: HostPlatform, home: Path) -> None:
        """With nothing set, the home directory is scanned with defaults."""
        config = merge_scan_config(ScanOptions(), FileConfig(), host)

        assert config.roots == (home,)
        assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert config.disabled_detectors == frozenset()
        assert config.json_output is False
        assert config.verbose is False
        assert config.progressive is False
        assert config.host is host

    def test_no_home_means_no_roots(self) -> None:
        """Without a home and no roots given, nothing is walked."""
        host = HostPlatform(os=Platform.UNKNOWN, home=None)
        assert merge_scan_config(ScanOptions(), FileConfig(), host).roots == ()

    def test_cli_roots_beat_file_roots(self, host: HostPlatform, tmp_path: Path) -> None:
        """Roots from the command line replace those from the file."""
        file_config = FileConfig(scan=FileScanConfig(roots=[tmp_path / "file"]))
        options = ScanOptions(roots=(tmp_path / "a", tmp_path / "b"))

        config = merge_scan_config(options, file_config, host)

        assert config.roots == (tmp_path / "a", tmp_path / "b")

    def test_file_roots_expand_tilde(
        self, host: HostPlatform, home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A leading ~ in file roots is expanded."""
        monkeypatch.setenv("HOME", str(home))
        file_config = FileConfig(scan=FileScanConfig(roots=[Path("~/code")]))

        config = merge_scan_config(ScanOptions(), file_config, host)

        assert config.roots == (home / "code",)

    def test_timeout_precedence(self, host: HostPlatform) -> None:
        """CLI timeout beats the file, which beats the default."""
        file_config = FileConfig(scan=FileScanConfig(timeout=10))

        assert merge_scan_config(ScanOptions(), file_config, host).timeout_seconds == 10
        assert merge_scan_config(ScanOptions(timeout=5), file_config, host).timeout_seconds == 5

    def test_boolean_flags(self, host: HostPlatform) -> None:
        """--flag forces on, --no-flag forces off, otherwise the file decides."""
        file_config = FileConfig(scan=FileScanConfig(json=True, verbose=True))

        from_file = merge_scan_config(ScanOptions(), file_config, host)
        assert from_file.json_output is True
        assert from_file.verbose is True
        assert from_file.progressive is False

        forced = merge_scan_config(
            ScanOptions(no_json=True, no_verbose=True, progressive=True), file_config, host
        )
        assert forced.json_output is False
        assert forced.verbose is False
        assert forced.progressive is True

    def test_disabled_detectors_union(self, host: HostPlatform) -> None:
        """File, --no-docker and --disable all contribute."""
        file_config = FileConfig(detectors=FileDetectorsConfig(xcode=False, caches=True))
        options = ScanOptions(no_docker=True, disable=("projects", " "))

        config = merge_scan_config(options, file_config, host)

        assert config.disabled_detectors == frozenset({"xcode", "docker", "projects"})
        assert config.is_detector_enabled("caches") is True
        assert config.is_detector_enabled("docker") is False


class TestLoadFileConfig:
    """Tests for loading and saving the config file."""

    def test_missing_file_is_default(self, tmp_path: Path) -> None:
        """A missing file means defaults."""
        assert load_file_config(tmp_path / "none.toml") == FileConfig()

    def test_valid_file(self, tmp_path: Path) -> None:
        """A valid file is parsed, including the json alias."""
        path = tmp_path / "config.toml"
        path.write_text(
            '[scan]\nroots = ["/srv/code"]\ntimeout = 12\njson = true\n\n'
            "[detectors]\ndocker = false\n"
        )

        config = load_file_config(path)

        assert config.scan.roots == [Path("/srv/code")]
        assert config.scan.timeout == 12
        assert config.scan.json_output is True
        assert config.detectors.disabled() == {"docker"}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("[scan\n")
        with pytest.raises(ConfigParseError):
            load_file_config(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        """Unknown keys are rejected."""
        path = tmp_path / "config.toml"
        path.write_text("[scan]\nturbo = true\n")
        with pytest.raises(ConfigValidationError):
            load_file_config(path)

    def test_timeout_out_of_range(self, tmp_path: Path) -> None:
        """Timeouts must be between 1 and 3600 seconds."""
        path = tmp_path / "config.toml"
        path.write_text("[scan]\ntimeout = 0\n")
        with pytest.raises(ConfigValidationError):
            load_file_config(path)

    def test_or_default_falls_back(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """A broken file falls back to defaults with a single logged warning."""
        path = tmp_path / "config.toml"
        path.write_text("[scan\n")

        with caplog.at_level(logging.WARNING, logger="heft.core.config"):
            assert load_file_config_or_default(path) == FileConfig()

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Ignoring config file" in warnings[0].getMessage()

    def test_save_and_reload(self, tmp_path: Path) -> None:
        """The default config survives a save/load round trip."""
        path = tmp_path / "sub" / "config.toml"
        saved = save_file_config(default_file_config(), path)

        assert saved == path
        assert load_file_config(path) == default_file_config()
        assert list(path.parent.glob("*.tmp")) == []

    def test_save_to_default_path(self, tmp_path: Path) -> None:
        """Without a path the file goes to the XDG config directory."""
        saved = save_file_config(FileConfig())
        assert saved == tmp_path / "xdg-config" / "heft" / "config.toml"

    def test_config_to_dict_omits_unset(self) -> None:
        """Only values that were set are written."""
        data = config_to_dict(FileConfig(scan=FileScanConfig(roots=[Path("/a")], json=True)))
        assert data == {"scan": {"roots": ["/a"], "json": True}, "detectors": {}}
