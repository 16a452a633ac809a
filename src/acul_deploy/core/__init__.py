from .config import (
    SCREEN_UPDATE_PAUSE_S,
    DeployEnv,
    Settings,
    load_settings,
    missing_deploy_env,
    require_deploy_env,
)
from .errors import (
    ConfigError,
    DeployError,
    ExtractionError,
    InvalidSettingsError,
    ManagementApiError,
    MissingHashesError,
)
from .fs import atomic_write_text, ensure_parent, relpath_posix, safe_unlink
from .json import atomic_write_json, stable_json_dumps
from .logging import ILogger, bind, clear_bindings, configure_logging, get_logger
from .provenance import new_run_id
from .time import monotonic_ms, utc_now_iso

__all__ = [
    "SCREEN_UPDATE_PAUSE_S",
    "DeployEnv",
    "Settings",
    "load_settings",
    "missing_deploy_env",
    "require_deploy_env",
    "ConfigError",
    "DeployError",
    "ExtractionError",
    "InvalidSettingsError",
    "ManagementApiError",
    "MissingHashesError",
    "atomic_write_text",
    "ensure_parent",
    "relpath_posix",
    "safe_unlink",
    "atomic_write_json",
    "stable_json_dumps",
    "ILogger",
    "bind",
    "clear_bindings",
    "configure_logging",
    "get_logger",
    "new_run_id",
    "monotonic_ms",
    "utc_now_iso",
]
