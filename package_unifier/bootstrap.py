"""Bootstrap resolver - picks the shared or the local autoload index for a unit.

This runs before any vendor index is loaded, so it only uses the standard
library and the builtin-only modules ``package_unifier.errors`` and
``package_unifier.vendor.lockfile``. Do not import anything here that the
resolver might be asked to choose an index for.

Decision steps:

    1. composer.lock, composer.json and vendor/ exist in the unit     else fatal
    2. composer.lock is valid JSON with a packages list               else fatal
    3. the shared store has autoload.php                              else local + warning
    4. every locked package is a directory in the shared store        else local + error notice
    5. the chosen autoload.php exists                                 else fatal
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from package_unifier.constants import INDEX_FILE, LOCK_FILE, MANIFEST_FILE, VENDOR_DIR_NAME
from package_unifier.errors import MissingArtifactsError, NoIndexError
from package_unifier.vendor.lockfile import PackageRef, load_lockfile

logger = logging.getLogger(__name__)

SHARED = "shared"
LOCAL = "local"


@dataclass(frozen=True)
class Notice:
    """Non-fatal message for the operator (rendered as an admin notice by the host)."""

    level: str  # "warning" | "error"
    message: str


@dataclass
class BootstrapResolution:
    """Which autoload index a unit should load."""

    unit_root: Path
    store: str  # SHARED | LOCAL
    index_path: Path
    packages: List[PackageRef] = field(default_factory=list)
    notices: List[Notice] = field(default_factory=list)

    @property
    def uses_shared_store(self) -> bool:
        return self.store == SHARED

    def to_dict(self) -> dict:
        return {
            "unit": str(self.unit_root),
            "store": self.store,
            "index_path": str(self.index_path),
            "packages": [p.name for p in self.packages],
            "notices": [{"level": n.level, "message": n.message} for n in self.notices],
        }


class BootstrapResolver:
    """Decides, at process start, which vendor index a unit loads."""

    def __init__(self, unit_root: Path, shared_store_root: Path):
        self.unit_root = Path(unit_root)
        self.shared_store_root = Path(shared_store_root)

    @property
    def lock_path(self) -> Path:
        return self.unit_root / LOCK_FILE

    @property
    def manifest_path(self) -> Path:
        return self.unit_root / MANIFEST_FILE

    @property
    def local_vendor_dir(self) -> Path:
        return self.unit_root / VENDOR_DIR_NAME

    @property
    def local_index_path(self) -> Path:
        return self.local_vendor_dir / INDEX_FILE

    @property
    def shared_index_path(self) -> Path:
        return self.shared_store_root / INDEX_FILE

    def resolve(self) -> BootstrapResolution:
        """Run the decision steps.

        Raises:
            MissingArtifactsError: step 1
            InvalidLockfileError: step 2
            NoIndexError: step 5
        """
        self._check_artifacts()
        packages = load_lockfile(self.lock_path, self.unit_root)

        notices: List[Notice] = []
        store = self._choose_store(packages, notices)
        index_path = self.shared_index_path if store == SHARED else self.local_index_path

        if not os.path.isfile(index_path):
            raise NoIndexError(index_path, self.unit_root)

        for notice in notices:
            logger.warning(f"{self.unit_root.name}: {notice.message}")
        logger.info(f"{self.unit_root.name}: using {store} vendor index {index_path}")

        return BootstrapResolution(
            unit_root=self.unit_root,
            store=store,
            index_path=index_path,
            packages=packages,
            notices=notices,
        )

    def _check_artifacts(self) -> None:
        missing = []
        if not os.path.isfile(self.lock_path):
            missing.append(LOCK_FILE)
        if not os.path.isfile(self.manifest_path):
            missing.append(MANIFEST_FILE)
        if not os.path.isdir(self.local_vendor_dir):
            missing.append(f"{VENDOR_DIR_NAME}/")
        if missing:
            raise MissingArtifactsError(missing, self.unit_root)

    def _choose_store(self, packages: List[PackageRef], notices: List[Notice]) -> str:
        if not os.path.isfile(self.shared_index_path):
            notices.append(Notice("warning", "Global vendor directory not found. Using local vendor."))
            return LOCAL

        missing = self.missing_shared_packages(packages)
        if missing:
            notices.append(
                Notice(
                    "error",
                    f"Global vendor autoload failed: package {missing[0]} is not in the shared "
                    f"store. Falling back to local vendor.",
                )
            )
            return LOCAL

        return SHARED

    def missing_shared_packages(self, packages: List[PackageRef]) -> List[str]:
        """Names of locked packages that have no directory in the shared store."""
        return [
            p.name
            for p in packages
            if not os.path.isdir(os.path.join(self.shared_store_root, *p.name.split("/")))
        ]


def resolve_index(unit_root: Path, shared_store_root: Path) -> BootstrapResolution:
    """Convenience wrapper around BootstrapResolver(...).resolve()."""
    return BootstrapResolver(unit_root, shared_store_root).resolve()


def find_units(base_dir: Path) -> List[Path]:
    """Child directories of base_dir that carry a composer.lock, sorted."""
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        return []
    try:
        return [child for child in sorted(base_dir.iterdir()) if (child / LOCK_FILE).is_file()]
    except OSError as e:
        logger.warning(f"Cannot read {base_dir}: {e}")
        return []
