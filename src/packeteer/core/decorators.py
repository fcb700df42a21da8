"""Common decorators for error handling and performance logging."""

from __future__ import annotations

import time
import types
from functools import wraps
from typing import Callable, Type

from ..logging import get_logger
from ..exceptions import PacketeerError


logger = get_logger(__name__)


def _wrap_generator(gen, exc_cls, func_name):
    """Yield from ``gen`` while translating exceptions to ``exc_cls``."""
    try:
        for item in gen:
            yield item
    except PacketeerError:
        raise
    except Exception as exc:  # pragma: no cover - runtime protection
        logger.error("%s failed: %s", func_name, exc, exc_info=True)
        raise exc_cls(str(exc)) from exc


def handle_errors(exc_cls: Type[PacketeerError]) -> Callable:
    """Wrap ``func`` to raise ``exc_cls`` on backend failures.

    Errors that already belong to the :class:`PacketeerError` hierarchy pass
    through untouched so callers see the most specific failure.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except PacketeerError:
                raise
            except Exception as exc:
                logger.error("Error in %s: %s", func.__name__, exc, exc_info=True)
                raise exc_cls(str(exc), context=func.__name__) from exc
            if isinstance(result, types.GeneratorType):
                return _wrap_generator(result, exc_cls, func.__name__)
            return result

        return wrapper

    return decorator


def log_performance(func):
    """Log execution duration for ``func``."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception:
            duration = time.perf_counter() - start_time
            logger.info("%s call failed after %.3f seconds", func.__name__, duration)
            raise

        if isinstance(result, types.GeneratorType):
            def generator_wrapper():
                try:
                    for item in result:
                        yield item
                finally:
                    duration = time.perf_counter() - start_time
                    logger.info(
                        "%s (generator) iteration finished in %.3f seconds (total from initial call)",
                        func.__name__,
                        duration,
                    )

            return generator_wrapper()

        duration = time.perf_counter() - start_time
        logger.info("%s executed in %.3f seconds", func.__name__, duration)
        return result

    return wrapper
