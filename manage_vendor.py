#!/usr/bin/env python3
"""Vendor consolidation CLI tool."""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables FIRST (before importing project modules)
load_dotenv('.env')

from rich.console import Console
from rich.table import Table

from package_unifier.bootstrap import BootstrapResolver, find_units
from package_unifier.config import UnifierSettings
from package_unifier.constants import LOCK_FILE
from package_unifier.errors import (
    BootstrapError,
    DirectoryCreationError,
    GatewayError,
    SharedStoreMissingError,
    StoreLockedError,
)
from package_unifier.vendor.engine import ConsolidationReport, PluginAction
from package_unifier.vendor.lifecycle import UnifierLifecycle
from package_unifier.vendor.lockfile import load_lockfile

console = Console()

ACTION_STYLES = {
    PluginAction.SKIPPED: "dim",
    PluginAction.INSTALLED: "green",
    PluginAction.MIGRATED: "cyan",
    PluginAction.FAILED: "red",
}


def setup_logging(verbose: bool = False) -> None:
    """Log everything to log/unifier.log, only warnings to the console."""
    log_dir = Path(os.getenv("UNIFIER_LOG_DIR", "log"))
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    file_handler = logging.FileHandler(log_dir / "unifier.log", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)


def get_lifecycle() -> UnifierLifecycle:
    """Create a UnifierLifecycle from the environment."""
    return UnifierLifecycle(UnifierSettings.from_env())


def print_report(report: ConsolidationReport) -> None:
    table = Table(title="Consolidation pass")
    table.add_column("Plugin", style="bold", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Migrated", justify="right")
    table.add_column("Errors", overflow="fold")

    for outcome in report.outcomes:
        style = ACTION_STYLES[outcome.action]
        table.add_row(
            outcome.plugin.name,
            f"[{style}]{outcome.action.value}[/{style}]",
            str(len(outcome.migrated)) if outcome.migrated else "",
            "\n".join(str(e) for e in outcome.errors),
        )
    console.print(table)

    if report.index_regenerated:
        console.print("[green]Shared autoloader regenerated.[/green]")
    elif report.index_error:
        console.print(f"[red]Autoloader regeneration failed: {report.index_error}[/red]")


def cmd_list(args):
    """List discovered plugins and what they carry."""
    lifecycle = get_lifecycle()
    plugins = lifecycle.engine.discovery.discover()

    if not plugins:
        print("No plugins found.")
        return

    table = Table(title="Plugins")
    table.add_column("Plugin", style="bold", no_wrap=True)
    table.add_column("vendor/")
    table.add_column("composer.json")
    table.add_column("Path", style="dim", overflow="fold")
    for p in plugins:
        table.add_row(
            p.name,
            "Yes" if p.has_dependency_tree() else "No",
            "Yes" if p.has_manifest() else "No",
            str(p.root_path),
        )
    console.print(table)


def cmd_consolidate(args):
    """Run one consolidation pass."""
    lifecycle = get_lifecycle()
    if args.no_regenerate:
        lifecycle.settings.auto_regenerate_index = False

    try:
        report = lifecycle.engine.consolidate(Path(args.base_dir) if args.base_dir else None)
    except (StoreLockedError, SharedStoreMissingError) as e:
        print(str(e))
        sys.exit(1)

    if not report.outcomes:
        print("No plugins found.")
        return
    print_report(report)
    if not report.ok:
        print(f"{len(report.failures)} failure(s). See the log for package manager output.")
        sys.exit(1)


def cmd_regenerate(args):
    """Regenerate the shared autoloader."""
    lifecycle = get_lifecycle()
    try:
        lifecycle.engine.regenerate_index()
    except GatewayError as e:
        print(f"Failed to regenerate the autoloader: {e}")
        sys.exit(1)
    print(f"Regenerated {lifecycle.settings.shared_index_path}")


def cmd_resolve(args):
    """Show which vendor index a unit would load."""
    settings = UnifierSettings.from_env()
    unit_root = Path(args.path).resolve()

    try:
        resolution = BootstrapResolver(unit_root, settings.shared_store_root).resolve()
    except BootstrapError as e:
        print(f"Step {e.step} failed: {e.message}")
        sys.exit(1)

    for notice in resolution.notices:
        print(f"[{notice.level}] {notice.message}")
    print(f"{unit_root.name}: {resolution.store} store ({resolution.index_path})")


def cmd_activate(args):
    """Create the shared vendor directory."""
    lifecycle = get_lifecycle()
    try:
        lifecycle.on_activate()
    except DirectoryCreationError as e:
        print(str(e))
        sys.exit(1)
    print(f"Shared vendor directory ready at {lifecycle.settings.shared_store_root}")


def cmd_doctor(args):
    """Run health checks on the installation."""
    settings = UnifierSettings.from_env()
    lifecycle = UnifierLifecycle(settings)
    issues = []

    # Check directories
    if not settings.shared_store_root.is_dir():
        issues.append(f"Shared vendor directory missing: {settings.shared_store_root}")
    elif not settings.shared_index_path.is_file():
        issues.append(f"Shared autoloader missing: {settings.shared_index_path}")
    for scan_dir in settings.scan_dirs:
        if not scan_dir.is_dir():
            issues.append(f"Plugin directory missing: {scan_dir}")

    # Check package manager
    version = lifecycle.engine.gateway.probe()
    if version is None:
        issues.append(f"Package manager not runnable: {' '.join(settings.composer_command)}")

    # Check each unit's lockfile and which store it would use
    units = [u for scan_dir in settings.scan_dirs for u in find_units(scan_dir)]
    for unit_root in units:
        try:
            packages = load_lockfile(unit_root / LOCK_FILE, unit_root)
        except BootstrapError as e:
            issues.append(f"Unit '{unit_root.name}': {e.message}")
            continue
        missing = BootstrapResolver(unit_root, settings.shared_store_root).missing_shared_packages(packages)
        if missing:
            issues.append(
                f"Unit '{unit_root.name}': {len(missing)} package(s) not in the shared store "
                f"({', '.join(missing[:5])})"
            )

    if issues:
        print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        sys.exit(1)
    else:
        print(f"All checks passed. {version}; {len(units)} unit(s) with a lockfile.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Package Unifier - shared vendor manager")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list
    subparsers.add_parser("list", help="List plugins and their vendor trees")

    # consolidate
    consolidate_parser = subparsers.add_parser("consolidate", help="Run one consolidation pass")
    consolidate_parser.add_argument("--base-dir", help="Scan this directory instead of the configured ones")
    consolidate_parser.add_argument(
        "--no-regenerate", action="store_true", help="Do not regenerate the autoloader afterwards"
    )

    # regenerate
    subparsers.add_parser("regenerate", help="Regenerate the shared autoloader")

    # resolve
    resolve_parser = subparsers.add_parser("resolve", help="Show which vendor index a unit loads")
    resolve_parser.add_argument("path", help="Path to the unit directory")

    # activate
    subparsers.add_parser("activate", help="Create the shared vendor directory")

    # doctor
    subparsers.add_parser("doctor", help="Run health checks")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    commands = {
        "list": cmd_list,
        "consolidate": cmd_consolidate,
        "regenerate": cmd_regenerate,
        "resolve": cmd_resolve,
        "activate": cmd_activate,
        "doctor": cmd_doctor,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
