"""Unifier settings - installation paths and package-manager options.

Environment variables (loaded from .env by the entry points):

    UNIFIER_INSTALL_ROOT            installation root (default: cwd)
    UNIFIER_SHARED_STORE            shared vendor store (default: <root>/vendor)
    UNIFIER_SCAN_DIR                plugin base directory (default: <root>/plugins)
    UNIFIER_EXTRA_SCAN_DIRS         extra plugin base directories, ':'-separated
    UNIFIER_COMPOSER                package-manager command line (default: composer)
    UNIFIER_COMMAND_TIMEOUT         seconds per package-manager call (default: 120)
    UNIFIER_AUTO_REGENERATE         regenerate autoload.php after a pass (default: true)
    UNIFIER_LOCK_STORE              lock the shared store during a pass (default: true)
    UNIFIER_CONSOLIDATE_ON_STARTUP  run a pass when the service starts (default: true)
"""

import logging
import os
import shlex
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from package_unifier.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_COMPOSER_COMMAND,
    DEFAULT_PLUGINS_DIR_NAME,
    INDEX_FILE,
    VENDOR_DIR_NAME,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name, "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    if value:
        logger.warning(f"Ignoring unrecognised value for {name}: {value!r}")
    return default


class UnifierSettings(BaseModel):
    """Explicit configuration passed to every component at construction."""

    install_root: Path = Field(..., description="Root of the multi-plugin installation")
    shared_store_root: Optional[Path] = Field(
        default=None,
        description="Shared vendor store; defaults to <install_root>/vendor",
    )
    scan_base_dir: Optional[Path] = Field(
        default=None,
        description="Directory whose children are plugin units; defaults to <install_root>/plugins",
    )
    extra_scan_dirs: List[Path] = Field(
        default_factory=list,
        description="Additional plugin base directories, searched after scan_base_dir",
    )
    composer_command: List[str] = Field(
        default_factory=lambda: [DEFAULT_COMPOSER_COMMAND],
        description="argv prefix used to start the package manager",
    )
    command_timeout: float = Field(
        default=DEFAULT_COMMAND_TIMEOUT,
        description="Seconds to wait for one package-manager call",
    )
    auto_regenerate_index: bool = Field(
        default=True,
        description="Regenerate the shared autoload index after a pass that changed the store",
    )
    lock_store: bool = Field(
        default=True,
        description="Hold an advisory lock on the shared store during a pass",
    )
    consolidate_on_startup: bool = Field(
        default=True,
        description="Run one consolidation pass when the service starts",
    )

    @field_validator("composer_command")
    @classmethod
    def _check_command(cls, value: List[str]) -> List[str]:
        if not value or not value[0]:
            raise ValueError("composer_command must name an executable")
        return value

    @field_validator("command_timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("command_timeout must be positive")
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "UnifierSettings":
        root = self.install_root.expanduser().resolve()
        self.install_root = root
        self.shared_store_root = self._under_root(self.shared_store_root, root / VENDOR_DIR_NAME)
        self.scan_base_dir = self._under_root(self.scan_base_dir, root / DEFAULT_PLUGINS_DIR_NAME)
        self.extra_scan_dirs = [self._under_root(p, root) for p in self.extra_scan_dirs]
        return self

    def _under_root(self, path: Optional[Path], default: Path) -> Path:
        if path is None:
            return default
        path = path.expanduser()
        if not path.is_absolute():
            path = self.install_root / path
        return path.resolve()

    @property
    def shared_index_path(self) -> Path:
        """Generated autoload index of the shared store."""
        return self.shared_store_root / INDEX_FILE

    @property
    def scan_dirs(self) -> List[Path]:
        """All plugin base directories, in search order."""
        return [self.scan_base_dir, *self.extra_scan_dirs]

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "UnifierSettings":
        """Build settings from environment variables."""
        env = os.environ if env is None else env

        extra_dirs = [
            Path(p.strip())
            for p in env.get("UNIFIER_EXTRA_SCAN_DIRS", "").split(":")
            if p.strip()
        ]
        values = {
            "install_root": Path(env.get("UNIFIER_INSTALL_ROOT") or Path.cwd()),
            "shared_store_root": Path(env["UNIFIER_SHARED_STORE"]) if env.get("UNIFIER_SHARED_STORE") else None,
            "scan_base_dir": Path(env["UNIFIER_SCAN_DIR"]) if env.get("UNIFIER_SCAN_DIR") else None,
            "extra_scan_dirs": extra_dirs,
            "auto_regenerate_index": _env_flag(env, "UNIFIER_AUTO_REGENERATE", True),
            "lock_store": _env_flag(env, "UNIFIER_LOCK_STORE", True),
            "consolidate_on_startup": _env_flag(env, "UNIFIER_CONSOLIDATE_ON_STARTUP", True),
        }
        if env.get("UNIFIER_COMPOSER"):
            values["composer_command"] = shlex.split(env["UNIFIER_COMPOSER"])
        if env.get("UNIFIER_COMMAND_TIMEOUT"):
            values["command_timeout"] = float(env["UNIFIER_COMMAND_TIMEOUT"])

        return cls(**values)
