"""Export configuration loading and validation."""

from plotter_toolpath.configs.loader import (
    AxesConfig,
    CanvasConfig,
    ConfigError,
    Dialect,
    FeedsConfig,
    LoggingConfig,
    PlanningConfig,
    ToolpathConfig,
    ZStatesConfig,
    config_from_dict,
    load_config,
)

__all__ = [
    "AxesConfig",
    "CanvasConfig",
    "ConfigError",
    "Dialect",
    "FeedsConfig",
    "LoggingConfig",
    "PlanningConfig",
    "ToolpathConfig",
    "ZStatesConfig",
    "config_from_dict",
    "load_config",
]
