"""Default configuration values for singleton registries.

These defaults are overridden by ``config.yaml`` in the working directory,
then by ``SINGLETON_*`` environment variables, then by programmatic overrides.
"""

# Default configuration dictionary
DEFAULT_CONFIG = {
    # -------------------------------------------------------------------------
    # Registry behaviour
    # -------------------------------------------------------------------------
    "STRATEGY": "double_checked",  # Options: double_checked, synchronized, eager, import_holder
    "CONFLICT_POLICY": "warn",     # Options: ignore, warn, error

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    "LOG_LEVEL": "WARNING",
    "LOG_TO_FILE": False,
    "LOG_DIR": "logs",
}

CONFLICT_POLICIES = ("ignore", "warn", "error")

# Environment variables with this prefix override the keys above,
# e.g. SINGLETON_STRATEGY=eager
ENV_PREFIX = "SINGLETON_"
