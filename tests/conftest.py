"""Shared pytest fixtures for Package Unifier tests."""

import json
import sys
from pathlib import Path

import pytest

from package_unifier.config import UnifierSettings

FAKE_COMPOSER = Path(__file__).parent / "fake_composer.py"


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """An installation root with an empty plugins/ and shared vendor/."""
    root = tmp_path.resolve()
    (root / "plugins").mkdir()
    (root / "vendor").mkdir()
    return root


@pytest.fixture
def fake_composer_command():
    return [sys.executable, str(FAKE_COMPOSER)]


@pytest.fixture
def make_settings(install_root, fake_composer_command):
    def factory(**overrides):
        values = {
            "install_root": install_root,
            "composer_command": fake_composer_command,
            "command_timeout": 30,
        }
        values.update(overrides)
        return UnifierSettings(**values)

    return factory


@pytest.fixture
def settings(make_settings) -> UnifierSettings:
    return make_settings()


@pytest.fixture
def make_plugin(install_root):
    """Create plugins/<name> with an optional vendor tree.

    manifest: dict written to vendor/composer.json
    packages: package names created as vendor/<name>/ directories
    vendor:   create vendor/ even when it stays empty
    """

    def factory(name, manifest=None, packages=(), vendor=None):
        root = install_root / "plugins" / name
        root.mkdir(parents=True)
        if vendor or manifest is not None or packages:
            (root / "vendor").mkdir()
        if manifest is not None:
            (root / "vendor" / "composer.json").write_text(json.dumps(manifest))
        for package in packages:
            package_dir = root / "vendor" / package
            package_dir.mkdir(parents=True)
            (package_dir / "composer.json").write_text(json.dumps({"name": package}))
        return root

    return factory


@pytest.fixture
def make_unit(tmp_path):
    """Create a bootable unit with composer.lock, composer.json and vendor/autoload.php."""

    def factory(name="unit", packages=("a/b", "c/d"), lock=None, local_index=True):
        root = tmp_path / "units" / name
        (root / "vendor").mkdir(parents=True)
        (root / "composer.json").write_text(json.dumps({"name": f"acme/{name}"}))
        if lock is None:
            lock = json.dumps({"packages": [{"name": p, "version": "1.0.0"} for p in packages]})
        (root / "composer.lock").write_text(lock)
        if local_index:
            (root / "vendor" / "autoload.php").write_text("<?php // local\n")
        return root

    return factory


def read_calls(store_root: Path):
    """argv lists recorded by fake_composer.py, in call order."""
    calls_file = store_root / ".calls.jsonl"
    if not calls_file.exists():
        return []
    return [json.loads(line) for line in calls_file.read_text().splitlines() if line]


def package_set(store_root: Path):
    """namespace/package directories present in a store."""
    return sorted(
        f"{ns.name}/{pkg.name}"
        for ns in store_root.iterdir()
        if ns.is_dir()
        for pkg in ns.iterdir()
        if pkg.is_dir()
    )


def snapshot(store_root: Path):
    """Relative path → content of every file in the store except the call log."""
    return {
        str(p.relative_to(store_root)): p.read_bytes()
        for p in sorted(store_root.rglob("*"))
        if p.is_file() and p.name not in (".calls.jsonl", ".unifier.lock")
    }
