import logging

from pushpipe.pipe.core import Stage, Source, create, create_parallel
from pushpipe.pipe.context import EvaluationContext
from pushpipe.util.config import get_config, get_settings, configure_logger

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "Stage",
    "Source",
    "EvaluationContext",
    "create",
    "create_parallel",
    "get_config",
    "get_settings",
    "configure_logger",
]
