"""Exceptions raised by Package Unifier.

This module only uses builtins: the bootstrap resolver imports it before any
dependency has been chosen.
"""

from pathlib import Path
from typing import List, Optional


class UnifierError(Exception):
    """Base exception for all Package Unifier errors."""


class DiscoveryError(UnifierError):
    """Raised when a plugin base directory cannot be read."""


class DirectoryCreationError(UnifierError):
    """Raised when the shared store root cannot be created on activation."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        message = f"Failed to create shared vendor directory at {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SharedStoreMissingError(UnifierError):
    """Raised when a pass starts before the shared store root exists."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Shared vendor directory does not exist: {path}. Activate first.")


class StoreLockedError(UnifierError):
    """Raised when another consolidation pass holds the shared store lock."""

    def __init__(self, lock_path: Path):
        self.lock_path = lock_path
        super().__init__(f"Shared vendor store is locked by another process ({lock_path})")


# ---------------------------------------------------------------------------
# Validation (boot time)
# ---------------------------------------------------------------------------


class ValidationError(UnifierError):
    """A lockfile or unit layout could not be trusted."""


class BootstrapError(ValidationError):
    """Fatal boot failure. The unit has to be deactivated.

    ``step`` is the resolver step that failed, ``message`` is meant for the operator.
    """

    step = 0

    def __init__(self, message: str, unit_root: Optional[Path] = None):
        self.message = message
        self.unit_root = unit_root
        super().__init__(message)


class MissingArtifactsError(BootstrapError):
    """composer.lock, composer.json or vendor/ is missing from the unit."""

    step = 1

    def __init__(self, missing: List[str], unit_root: Optional[Path] = None):
        self.missing = list(missing)
        super().__init__(
            f"Composer files or vendor directory missing ({', '.join(self.missing)}). "
            f"Please ensure dependencies are properly installed.",
            unit_root,
        )


class InvalidLockfileError(BootstrapError):
    """composer.lock is not a JSON object with a usable packages list."""

    step = 2

    def __init__(self, lock_path: Path, reason: str, unit_root: Optional[Path] = None):
        self.lock_path = lock_path
        self.reason = reason
        super().__init__(
            f"Invalid composer.lock file at {lock_path}: {reason}. "
            f"Please ensure it is a valid JSON file.",
            unit_root,
        )


class NoIndexError(BootstrapError):
    """Neither the chosen store nor its fallback has an autoload index."""

    step = 5

    def __init__(self, index_path: Path, unit_root: Optional[Path] = None):
        self.index_path = index_path
        super().__init__(
            f"No valid vendor autoload file found at {index_path}. Please install dependencies.",
            unit_root,
        )


# ---------------------------------------------------------------------------
# Package manager
# ---------------------------------------------------------------------------


class GatewayError(UnifierError):
    """Base for failures at the package-manager boundary."""


class PackageManagerNotFoundError(GatewayError):
    """The package-manager executable could not be started."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Package manager not found: {command}")


class CommandFailedError(GatewayError):
    """The package manager exited with a non-zero status."""

    def __init__(self, target: str, exit_code: Optional[int], output: str = ""):
        self.target = target
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"Package manager failed for {target} (exit code {exit_code})")


class CommandTimeoutError(CommandFailedError):
    """The package manager did not exit within the configured timeout."""

    def __init__(self, target: str, timeout: float, output: str = ""):
        self.timeout = timeout
        super().__init__(target, None, output)
        self.args = (f"Package manager timed out after {timeout}s for {target}",)


class MigrationError(GatewayError):
    """One or more packages of a vendor tree could not be migrated.

    Every package is attempted; this is raised once, after the last one.
    """

    def __init__(self, tree_path: Path, failures: List[GatewayError], migrated: List[Path]):
        self.tree_path = tree_path
        self.failures = list(failures)
        self.migrated = list(migrated)
        super().__init__(
            f"Failed to migrate {len(self.failures)} package(s) from {tree_path} "
            f"({len(self.migrated)} migrated)"
        )
