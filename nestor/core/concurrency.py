"""
Concurrency Infrastructure.

Named semaphores limiting concurrent calls against Jenkins.

Semaphores:
    Created per-dependency to limit concurrent access to the server.
    Sizing is configured in config/settings/concurrency.yaml; when no
    project configuration is available the default capacity applies.

    An asyncio.Semaphore belongs to the event loop it first waits on, so
    semaphores are kept per running loop. Each ``asyncio.run`` gets its
    own set, and a closed loop's set goes away with the loop.

Usage:
    from nestor.core.concurrency import get_semaphore

    async with get_semaphore("build_trigger"):
        await client.build(job_name)
"""

import asyncio
import weakref

from nestor.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 10

_semaphores: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Semaphore]]" = (
    weakref.WeakKeyDictionary()
)


def _configured_capacity(name: str) -> int:
    from nestor.core.config import get_app_config

    try:
        semaphore_config = get_app_config().concurrency.semaphores
    except (RuntimeError, FileNotFoundError):
        return DEFAULT_CAPACITY
    return getattr(semaphore_config, name, DEFAULT_CAPACITY)


def get_semaphore(name: str) -> asyncio.Semaphore:
    """Get the running loop's named semaphore for concurrency-limiting Jenkins calls.

    Semaphores are created lazily. The capacity is read from concurrency.yaml
    under `semaphores.<name>`. If the name is not configured, defaults to 10.

    Raises:
        RuntimeError: Called outside a running event loop
    """
    loop = asyncio.get_running_loop()
    loop_semaphores = _semaphores.setdefault(loop, {})
    if name not in loop_semaphores:
        capacity = _configured_capacity(name)
        loop_semaphores[name] = asyncio.Semaphore(capacity)
        logger.debug("Semaphore created", extra={"name": name, "capacity": capacity})
    return loop_semaphores[name]


def reset_semaphores() -> None:
    """Drop all semaphores so capacities are re-read from configuration."""
    _semaphores.clear()
    logger.debug("Semaphores cleared")
