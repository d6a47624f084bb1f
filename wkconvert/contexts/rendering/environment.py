"""
Renderer environment resolution.

Settings come from environment variables (optionally loaded from a .env file)
and may be overlaid by a YAML config file. A process-wide default is built
lazily on first use; every conversion entry point also accepts an explicit
environment that takes precedence.

Variables:
    WKHTMLTOPDF_PATH     Renderer executable
    WKCONVERT_TEMP_PATH  Folder for auto-named output files
    WKCONVERT_TIMEOUT    Seconds before the renderer is killed (default 60)
    WKCONVERT_DEBUG      "true" streams renderer diagnostics to the log
    WKCONVERT_CONFIG     Optional YAML file read by load_environment()
"""

import os
import shutil
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from omegaconf import OmegaConf

from wkconvert.contexts.rendering.exceptions import ConfigurationError
from wkconvert.contexts.rendering.models import PdfConvertEnvironment

load_dotenv()

DEFAULT_TIMEOUT_S = 60.0
FALLBACK_EXECUTABLE = "/usr/local/bin/wkhtmltopdf"

CONFIG_KEYS = {"temp_folder_path", "executable_path", "timeout", "debug"}


def _parse_timeout(value: Any, origin: str) -> float:
    """Seconds as a positive float; `origin` names the variable or key for the error."""
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid timeout in {origin}: {value!r} is not a number") from None
    if timeout <= 0:
        raise ConfigurationError(f"Invalid timeout in {origin}: {value!r} must be positive")
    return timeout


def _parse_flag(value: Any) -> bool:
    """Strings count as true only when they read "true"; YAML booleans pass through."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _env_defaults() -> Dict[str, Any]:
    """Read defaults from the process environment."""
    executable = os.getenv("WKHTMLTOPDF_PATH") or shutil.which("wkhtmltopdf") or FALLBACK_EXECUTABLE
    return {
        "temp_folder_path": os.getenv("WKCONVERT_TEMP_PATH") or tempfile.gettempdir(),
        "executable_path": executable,
        "timeout": _parse_timeout(
            os.getenv("WKCONVERT_TIMEOUT", DEFAULT_TIMEOUT_S), "WKCONVERT_TIMEOUT"
        ),
        "debug": _parse_flag(os.getenv("WKCONVERT_DEBUG", "false")),
    }


def load_environment(config_path: Optional[Union[str, Path]] = None) -> PdfConvertEnvironment:
    """
    Build a renderer environment from environment variables and an optional YAML file.

    Keys present in the YAML file override the environment-variable defaults.

    Args:
        config_path: YAML file with any of temp_folder_path, executable_path,
            timeout, debug (defaults to WKCONVERT_CONFIG, if set)

    Returns:
        PdfConvertEnvironment

    Raises:
        ConfigurationError: If the config file is missing or has unknown keys, or
            the timeout is not a positive number

    Example:
        >>> env = load_environment("config/wkconvert.yaml")
        >>> env.timeout
        30.0
    """
    settings = _env_defaults()

    if config_path is None:
        config_path = os.getenv("WKCONVERT_CONFIG") or None

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        loaded = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True) or {}
        unknown = set(loaded) - CONFIG_KEYS
        if unknown:
            raise ConfigurationError(
                f"Unknown keys in {config_path}: {', '.join(sorted(unknown))}. "
                f"Expected any of: {', '.join(sorted(CONFIG_KEYS))}"
            )
        settings.update({k: v for k, v in loaded.items() if v is not None})
        if loaded.get("timeout") is not None:
            settings["timeout"] = _parse_timeout(loaded["timeout"], f"{config_path}: timeout")

    return PdfConvertEnvironment(
        temp_folder_path=Path(settings["temp_folder_path"]),
        wkhtmltopdf_path=Path(settings["executable_path"]),
        timeout=settings["timeout"],
        debug=_parse_flag(settings["debug"]),
    )


@lru_cache(maxsize=1)
def default_environment() -> PdfConvertEnvironment:
    """Process-wide default environment, built on first call and reused."""
    return load_environment()


def reset_default_environment() -> None:
    """Drop the cached default so the next call re-reads configuration."""
    default_environment.cache_clear()


def resolve_environment(
    environment: Optional[PdfConvertEnvironment] = None,
) -> PdfConvertEnvironment:
    """Explicit environment wins; otherwise fall back to the process-wide default."""
    return environment if environment is not None else default_environment()
