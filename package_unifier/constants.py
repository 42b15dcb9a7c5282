"""Global constants for Package Unifier."""

PLUGIN_NAME = "Package Unifier"

# File and directory names shared by every unit
VENDOR_DIR_NAME = "vendor"
MANIFEST_FILE = "composer.json"
LOCK_FILE = "composer.lock"
INDEX_FILE = "autoload.php"  # generated by `composer dump-autoload`
STORE_LOCK_FILE = ".unifier.lock"

# Defaults for UnifierSettings
DEFAULT_PLUGINS_DIR_NAME = "plugins"
DEFAULT_COMPOSER_COMMAND = "composer"
DEFAULT_COMMAND_TIMEOUT = 120  # seconds, per package-manager invocation

# How much captured package-manager output is kept on an exception
OUTPUT_TAIL_CHARS = 2000
