from typing import Optional
import logging
import os
import tomllib
from logging.handlers import TimedRotatingFileHandler
from typing import Annotated, Dict

from pydantic import BaseModel, Field

from pushpipe.util import constants

logger = logging.getLogger(__name__)

_config = None
_settings = None


def parse_key_value_str(field_list: str, require_value: bool = False) -> Dict[str, str]:
    """Split the "logger:value,logger:value" strings used by logger_levels and logger_files.

    Only the first colon separates key from value, so file paths may hold
    colons. A key given without a value maps to its last dotted segment, e.g.
    "pushpipe.pipe.core" maps to "core".

    Args:
        field_list (str): Comma-separated "key:value" pairs.
        require_value (bool, optional): Reject keys without a value (logger_files
            needs a path for every logger).

    Raises:
        ValueError: If require_value is True and a key is missing a value.
    """
    result = {}
    for prop in field_list.split(","):
        key, *value = prop.split(":", 1)
        key = key.strip()
        value = value[0].strip() if len(value) > 0 else None

        if value is None:
            if require_value:
                raise ValueError(f"Value required for property '{key}'")
            value = key.rsplit(".", 1)[-1]

        result[key] = value

    return result


def reset_config():
    """Reset the cached configuration and settings.

    The next call to get_config() or get_settings() reloads from disk and
    environment variables.
    """
    global _config, _settings
    _config = None
    _settings = None


def get_config(reload=False, path=constants.DEFAULT_CONFIG_PATH, ignore_env=False):
    """Load the engine configuration: ~/.pushpipe.toml overlaid with PUSHPIPE_* variables.

    Environment names lose the prefix and are lowercased, so
    PUSHPIPE_PARALLEL_WARN_THRESHOLD sets parallel_warn_threshold. Values from
    the environment stay strings; get_settings() coerces the keys it knows.
    The result is cached module-wide until reload=True or reset_config().

    Args:
        reload (bool, optional): Force reload config from disk. Defaults to False.
        path (str, optional): Path to config file. Defaults to "~/.pushpipe.toml".
        ignore_env (bool, optional): Skip the environment variable overrides.

    Returns:
        dict: Configuration dictionary combining file and environment settings.
    """
    global _config
    if _config is None or reload:
        logger.debug("Loading configuration")
        config_path = os.path.expanduser(path)
        if os.path.exists(config_path):
            logger.info(f"Reading config from {config_path}")
            with open(config_path, 'rb') as f:
                _config = tomllib.load(f)
                logger.debug(f"Loaded config: {_config}")
        else:
            logger.warning(f"Config file {config_path} not found, using empty config")
            _config = {}

        if not ignore_env:
            logger.debug("Checking environment variables")
            for env_var in os.environ:
                if env_var.startswith(constants.ENV_PREFIX):
                    config_key = env_var[len(constants.ENV_PREFIX):].lower()
                    _config[config_key] = os.environ[env_var]
                    logger.debug(f"Set {config_key} from environment variable {env_var}")

    return _config


class StreamSettings(BaseModel):
    """Typed view of the configuration keys the evaluation engine reads."""

    parallel_warn_threshold: Annotated[int, Field(ge=1), "Parallel fan-out above which a warning is logged"] = 10000
    thread_name_prefix: Annotated[str, Field(min_length=1), "Name prefix for parallel worker threads"] = "pushpipe"


def get_settings(reload=False) -> StreamSettings:
    """Build (and cache) the StreamSettings from get_config().

    Values coming from environment variables are strings; pydantic coerces
    them. Invalid values raise pydantic.ValidationError.
    """
    global _settings
    if _settings is None or reload:
        config = get_config(reload=reload)
        values = {}
        for key in (constants.PARALLEL_WARN_THRESHOLD, constants.THREAD_NAME_PREFIX):
            if key in config:
                values[key] = config[key]
        _settings = StreamSettings(**values)
        logger.debug(f"Stream settings: {_settings}")
    return _settings


def configure_logger(logger_levels: Optional[str] = None, base_level="WARNING", logger_files: Optional[str] = None):
    """Route the engine's loggers to the console and, optionally, rotating files.

    Typical use is tracing evaluation: "pushpipe.pipe.core:DEBUG" logs every
    pass (stage count, element count, mode), early stops and re-seeding.
    Arguments left empty fall back to the logger_levels and logger_files
    config keys.

    Args:
        logger_levels (str): Logger name and level pairs in the format
            "logger1:LEVEL1,logger2:LEVEL2". Use "root" as logger name for root logger.
        base_level (str, optional): Default logging level. Defaults to "WARNING".
        logger_files (str, optional): Loggers mapped to file paths in "logger:path" format.

    Examples:
        >>> configure_logger("root:INFO,pushpipe.pipe.core:DEBUG")
        >>> configure_logger("pushpipe:INFO", logger_files="pushpipe:/var/log/pushpipe.log")

    Each configured logger has its existing handlers replaced by one console
    handler; file handlers rotate at midnight and keep seven days.
    """

    if not logger_levels:
        logger_levels = get_config().get(constants.LOGGER_LEVELS, None)

    if not logger_files:
        logger_files = get_config().get(constants.LOGGER_FILES, None)

    logging.basicConfig(level=base_level.upper())

    formatter = logging.Formatter('%(asctime)s - %(levelname)s:%(name)s:%(message)s')
    levels = {}

    if logger_levels:
        for logger_name, level in parse_key_value_str(logger_levels).items():
            level = level.upper()
            levels[logger_name] = level
            target = logging.getLogger(logger_name if logger_name != "root" else None)
            target.setLevel(level)

            # Remove existing handlers to prevent duplicate logs
            target.handlers.clear()

            console_handler = logging.StreamHandler()
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            target.addHandler(console_handler)

    if logger_files:
        for logger_name, file_name in parse_key_value_str(logger_files, require_value=True).items():
            target = logging.getLogger(logger_name if logger_name != "root" else None)

            file_handler = TimedRotatingFileHandler(file_name, when='midnight', backupCount=7)
            file_handler.setLevel(levels.get(logger_name, base_level.upper()))
            file_handler.setFormatter(formatter)
            target.addHandler(file_handler)
