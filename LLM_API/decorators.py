import functools
import logging
from typing import Callable, TypeVar

T = TypeVar('T')

LOGGER = logging.getLogger(__name__)


def log_request(func: Callable[..., T]) -> Callable[..., T]:
    """Log provider API requests for debugging"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        provider = args[0].__class__.__name__ if args else "Unknown"
        LOGGER.debug("[%s] Calling %s", provider, func.__name__)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            LOGGER.warning("[%s] %s failed: %s", provider, func.__name__, e)
            raise

        error = getattr(result, "error", None)
        if error:
            LOGGER.warning("[%s] %s returned error: %s", provider, func.__name__, error)
        else:
            LOGGER.debug("[%s] %s succeeded", provider, func.__name__)
        return result

    return wrapper
