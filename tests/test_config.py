"""Tests for UnifierSettings."""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from package_unifier.config import UnifierSettings


class TestDefaults:
    def test_paths_derived_from_install_root(self, tmp_path):
        """Store and scan dirs default to paths under the install root."""
        settings = UnifierSettings(install_root=tmp_path)

        root = tmp_path.resolve()
        assert settings.install_root == root
        assert settings.shared_store_root == root / "vendor"
        assert settings.scan_base_dir == root / "plugins"
        assert settings.shared_index_path == root / "vendor" / "autoload.php"
        assert settings.scan_dirs == [root / "plugins"]
        assert settings.composer_command == ["composer"]
        assert settings.command_timeout == 120
        assert settings.auto_regenerate_index
        assert settings.lock_store

    def test_relative_paths_resolve_against_root(self, tmp_path):
        """Relative paths resolve against the install root."""
        settings = UnifierSettings(
            install_root=tmp_path,
            shared_store_root=Path("shared"),
            scan_base_dir=Path("wp-content/plugins"),
            extra_scan_dirs=[Path("mu-plugins")],
        )
        root = tmp_path.resolve()
        assert settings.shared_store_root == root / "shared"
        assert settings.scan_dirs == [root / "wp-content" / "plugins", root / "mu-plugins"]

    def test_rejects_bad_timeout(self, tmp_path):
        """A non-positive timeout is rejected."""
        with pytest.raises(ValidationError):
            UnifierSettings(install_root=tmp_path, command_timeout=0)

    def test_rejects_empty_command(self, tmp_path):
        """An empty composer command is rejected."""
        with pytest.raises(ValidationError):
            UnifierSettings(install_root=tmp_path, composer_command=[])


class TestFromEnv:
    def test_reads_environment(self, tmp_path):
        """Every UNIFIER_* variable is read."""
        env = {
            "UNIFIER_INSTALL_ROOT": str(tmp_path),
            "UNIFIER_SHARED_STORE": str(tmp_path / "shared"),
            "UNIFIER_SCAN_DIR": "plugins",
            "UNIFIER_EXTRA_SCAN_DIRS": "mu-plugins: extra ",
            "UNIFIER_COMPOSER": f"{sys.executable} 'composer with space.phar'",
            "UNIFIER_COMMAND_TIMEOUT": "45",
            "UNIFIER_AUTO_REGENERATE": "off",
            "UNIFIER_LOCK_STORE": "0",
            "UNIFIER_CONSOLIDATE_ON_STARTUP": "no",
        }

        settings = UnifierSettings.from_env(env)

        root = tmp_path.resolve()
        assert settings.shared_store_root == root / "shared"
        assert settings.scan_dirs == [root / "plugins", root / "mu-plugins", root / "extra"]
        assert settings.composer_command == [sys.executable, "composer with space.phar"]
        assert settings.command_timeout == 45
        assert not settings.auto_regenerate_index
        assert not settings.lock_store
        assert not settings.consolidate_on_startup

    def test_defaults_when_unset(self, tmp_path, monkeypatch):
        """The current directory is the install root when nothing is set."""
        monkeypatch.chdir(tmp_path)
        settings = UnifierSettings.from_env({})
        assert settings.install_root == tmp_path.resolve()
        assert settings.auto_regenerate_index

    def test_unrecognised_flag_keeps_default(self, tmp_path):
        """An unrecognised flag value keeps the default."""
        settings = UnifierSettings.from_env(
            {"UNIFIER_INSTALL_ROOT": str(tmp_path), "UNIFIER_LOCK_STORE": "maybe"}
        )
        assert settings.lock_store
