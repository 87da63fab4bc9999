import asyncio
import logging
from typing import Callable, Any
from functools import wraps

logger = logging.getLogger(__name__)

class RetryConfig:
    MAX_ATTEMPTS = 2
    BASE_DELAY = 0.25
    MAX_DELAY = 2.0
    EXPONENTIAL_BASE = 2

def async_retry(
    max_attempts: int = RetryConfig.MAX_ATTEMPTS,
    base_delay: float = RetryConfig.BASE_DELAY,
    max_delay: float = RetryConfig.MAX_DELAY,
    exponential_base: float = RetryConfig.EXPONENTIAL_BASE,
    exceptions: tuple = (Exception,),
    give_up_on: tuple = ()
):
    """
    Retry an async callable with exponential backoff.

    Only used for embedding and search providers. Verifier calls are never
    retried: a tier's timeout is terminal for the call.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except give_up_on:
                    raise
                except exceptions as e:
                    if attempt == max_attempts - 1:
                        logger.error(
                            f"Function {func.__name__} failed after {max_attempts} attempts: {e}"
                        )
                        raise
                    
                    delay = min(base_delay * (exponential_base ** attempt), max_delay)
                    logger.warning(
                        f"Function {func.__name__} failed (attempt {attempt + 1}/{max_attempts}), "
                        f"retrying in {delay:.2f}s: {e}"
                    )
                    await asyncio.sleep(delay)
        
        return wrapper
    return decorator
