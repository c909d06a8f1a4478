"""Config keys for the evaluation engine.

These constants name keys used with get_config(). Set via ~/.pushpipe.toml
or PUSHPIPE_* environment variables.
"""
DEFAULT_CONFIG_PATH = "~/.pushpipe.toml"
ENV_PREFIX = "PUSHPIPE_"

# Fan-out size above which parallel evaluation logs a warning
PARALLEL_WARN_THRESHOLD = "parallel_warn_threshold"

# Name prefix for parallel worker threads
THREAD_NAME_PREFIX = "thread_name_prefix"

# Logging setup (used by configure_logger)
LOGGER_LEVELS = "logger_levels"
LOGGER_FILES = "logger_files"
