"""Package Unifier - consolidates per-plugin vendor trees into one shared store.

Imports are lazy so that the bootstrap resolver can be imported without pulling in
pydantic, fastapi or anything else it may be asked to choose an index for.
"""

__version__ = "1.0.0"

__all__ = [
    "BootstrapResolver",
    "BootstrapResolution",
    "ConsolidationEngine",
    "ConsolidationReport",
    "PackageManagerGateway",
    "PluginDescriptor",
    "PluginDiscovery",
    "UnifierLifecycle",
    "UnifierSettings",
]


def __getattr__(name):
    if name in ("BootstrapResolver", "BootstrapResolution"):
        from package_unifier import bootstrap
        return getattr(bootstrap, name)
    if name in ("ConsolidationEngine", "ConsolidationReport"):
        from package_unifier.vendor import engine
        return getattr(engine, name)
    if name == "PackageManagerGateway":
        from package_unifier.vendor.gateway import PackageManagerGateway
        return PackageManagerGateway
    if name == "PluginDescriptor":
        from package_unifier.vendor.descriptor import PluginDescriptor
        return PluginDescriptor
    if name == "PluginDiscovery":
        from package_unifier.vendor.discovery import PluginDiscovery
        return PluginDiscovery
    if name == "UnifierLifecycle":
        from package_unifier.vendor.lifecycle import UnifierLifecycle
        return UnifierLifecycle
    if name == "UnifierSettings":
        from package_unifier.config import UnifierSettings
        return UnifierSettings
    raise AttributeError(f"module 'package_unifier' has no attribute {name!r}")
