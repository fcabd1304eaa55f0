"""
Runtime Module

Handles runtime configuration:
- Frozen vs. source detection and bundled resource paths
- User data, configuration and log directories
- Logging bootstrap

Usage:
    from wavshaver.runtime import bootstrap
    bootstrap()

    from wavshaver.runtime import get_runtime_config
    config = get_runtime_config()
"""

from .runtime_config import (
    RuntimeConfig,
    RuntimePaths,
    get_runtime_config,
    get_config_dir,
    get_logs_dir,
)

from .bootstrap import (
    BootstrapError,
    RuntimeBootstrap,
    get_bootstrap,
    bootstrap,
)


__all__ = [
    # Runtime configuration
    "RuntimeConfig",
    "RuntimePaths",
    "get_runtime_config",
    "get_config_dir",
    "get_logs_dir",

    # Bootstrap
    "BootstrapError",
    "RuntimeBootstrap",
    "get_bootstrap",
    "bootstrap",
]
