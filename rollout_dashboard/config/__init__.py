from .loader import ConfigError, DashboardConfig, load_config

__all__ = ["ConfigError", "DashboardConfig", "load_config"]
