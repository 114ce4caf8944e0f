"""
Common configuration settings used throughout the application.

This module centralizes the parameters for logging, worker concurrency, process
timeouts and output directory naming. It also handles the loading of
user-specific configuration from an external YAML file, allowing for easy
customization without modifying the source code.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger

# --- Built-in Defaults ---

# Number of conversions allowed to run at the same time. 1 keeps the run
# strictly sequential, with at most one encoder process in flight.
BUILTIN_WORKERS = 1

# Seconds an encoder process may run for a single file before it is killed and
# the file is recorded as a failure.
BUILTIN_TIMEOUT = 300.0

# Name of the output directory created inside the input directory when no
# explicit output path is given.
BUILTIN_OUTPUT_DIR_NAME = "converted_webp"


@dataclass(frozen=True)
class UserConfig:
    """Values read from `config.user.yaml`, with built-in defaults for anything missing."""

    tools_dir: Optional[Path] = None
    workers: int = BUILTIN_WORKERS
    timeout: float = BUILTIN_TIMEOUT
    output_dir_name: str = BUILTIN_OUTPUT_DIR_NAME


def _section(user_config: dict, name: str, config_path: Path) -> dict:
    section = user_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logger.warning(f"'{name}' in '{config_path}' is not a mapping. Ignoring it.")
        return {}
    return section


def load_user_config(config_path: Path) -> UserConfig:
    """
    Loads user settings from a YAML file.

    The file is optional. Every section and key inside it is optional too; a
    missing file, a malformed file or an invalid value falls back to the
    built-in default for that value.

    Expected layout:

        paths:
          tools_dir: /opt/image-tools
        conversion:
          workers: 4
          timeout: 120
          output_dir_name: converted_webp

    Args:
        config_path: Path to the YAML file.

    Returns:
        A `UserConfig` instance.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using built-in defaults.")
        return UserConfig()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return UserConfig()

    if not isinstance(user_config, dict):
        logger.warning(f"'{config_path}' does not contain a mapping. Using built-in defaults.")
        return UserConfig()

    paths_config = _section(user_config, "paths", config_path)
    conversion_config = _section(user_config, "conversion", config_path)

    tools_dir: Optional[Path] = None
    tools_dir_str = paths_config.get("tools_dir")
    if isinstance(tools_dir_str, str) and tools_dir_str:
        tools_dir = Path(tools_dir_str).expanduser()
    elif tools_dir_str is not None:
        logger.warning(f"Invalid 'paths.tools_dir' value in '{config_path}': {tools_dir_str!r}")

    workers = BUILTIN_WORKERS
    if "workers" in conversion_config:
        try:
            workers = max(1, int(conversion_config["workers"]))
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid 'conversion.workers' value in '{config_path}': {conversion_config['workers']!r}"
            )

    timeout = BUILTIN_TIMEOUT
    if "timeout" in conversion_config:
        try:
            timeout = float(conversion_config["timeout"])
            if timeout <= 0:
                raise ValueError("timeout must be positive")
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid 'conversion.timeout' value in '{config_path}': {conversion_config['timeout']!r}"
            )
            timeout = BUILTIN_TIMEOUT

    output_dir_name = BUILTIN_OUTPUT_DIR_NAME
    configured_name = conversion_config.get("output_dir_name")
    if isinstance(configured_name, str) and configured_name:
        output_dir_name = configured_name
    elif configured_name is not None:
        logger.warning(f"Invalid 'conversion.output_dir_name' value in '{config_path}': {configured_name!r}")

    return UserConfig(
        tools_dir=tools_dir,
        workers=workers,
        timeout=timeout,
        output_dir_name=output_dir_name,
    )


# --- User-Defined Configuration ---
# Loaded once from 'config.user.yaml' at the project root.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

_user_config = load_user_config(USER_CONFIG_PATH)

# Directory searched for encoder executables before the system PATH.
TOOLS_DIR: Optional[Path] = _user_config.tools_dir

DEFAULT_WORKERS: int = _user_config.workers
DEFAULT_TIMEOUT: float = _user_config.timeout
DEFAULT_OUTPUT_DIR_NAME: str = _user_config.output_dir_name


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{thread.name} - <level>{message}</level>"
)

DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR")


# --- Report Configuration ---

# Options passed to yaml.dump for every YAML file the application writes.
YAML_DUMP_OPTIONS = dict(
    default_flow_style=False,
    sort_keys=False,
    allow_unicode=True,
    indent=4,
    width=220,
)
