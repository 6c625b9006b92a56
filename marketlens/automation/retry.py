import time
import logging
from functools import wraps

logger = logging.getLogger(__name__)


def retry(times: int = 3, delay: float = 1.0, exceptions=(Exception,)):
    """
    Retry decorator with linear backoff.

    The wait before attempt N+1 is ``delay * N`` seconds, so three
    attempts with ``delay=1`` sleep 1s and then 2s. The last exception
    is re-raised once every attempt has failed.

    Args:
        times (int): Total number of attempts
        delay (float): Base delay in seconds
        exceptions (tuple): Exception types that trigger a retry
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None
            for attempt in range(1, times + 1):
                try:
                    logger.debug(
                        "Attempt %s/%s for %s",
                        attempt,
                        times,
                        func.__name__,
                    )
                    return func(*args, **kwargs)
                except exceptions as exc:
                    last_exception = exc
                    logger.info(
                        "Error on attempt %s for %s: %s",
                        attempt,
                        func.__name__,
                        exc,
                    )
                    if attempt < times:
                        time.sleep(delay * attempt)

            logger.warning(
                "All %s attempts failed for %s",
                times,
                func.__name__,
            )
            raise last_exception

        return wrapper

    return decorator
