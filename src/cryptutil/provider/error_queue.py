"""Per-thread provider error queue and its drain.

Python providers report failures by raising, not through an error queue
the caller polls. provider_call() bridges the two: when a wrapped native
call raises, the exception (and, for OpenSSL-backed providers, the error
stack it carries) is rendered into records on this thread's queue, and
drain_errors() turns the queue into log lines plus one typed error.

Every failure path in cryptutil ends in drain_errors(), so the provider's
own diagnostics always reach the log while callers only ever see an
exception from cryptutil.exceptions.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager

from ..config import get_config
from ..exceptions import OutOfMemoryError, ProviderError

logger = logging.getLogger(__name__)

_state = threading.local()


def _queue() -> deque[str]:
    queue: deque[str] | None = getattr(_state, "queue", None)
    if queue is None:
        queue = deque()
        _state.queue = queue
    return queue


def push_error(record: str) -> None:
    """Append one error record to this thread's queue."""
    _queue().append(record)


def pop_error() -> str | None:
    """Remove and return the oldest error record, or None if the queue is empty."""
    queue = _queue()
    return queue.popleft() if queue else None


def pending_errors() -> int:
    """Number of records waiting on this thread's queue."""
    return len(_queue())


def clear_errors() -> None:
    """Discard every record on this thread's queue."""
    _queue().clear()


def _render_openssl_error(error: object) -> str:
    lib = getattr(error, "lib", "?")
    reason = getattr(error, "reason", "?")
    text = getattr(error, "reason_text", b"")
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return f"error:{lib}:{reason}:{text}"


def render_exception(exc: BaseException) -> list[str]:
    """Render a provider exception and its causes into error records.

    The OpenSSL error stack attached to cryptography's InternalError
    (its err_code attribute) is expanded into one record per entry.

    Args:
        exc: Exception raised by a provider call

    Returns:
        Records ordered from the outermost exception to the root cause
    """
    records: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        for error in getattr(current, "err_code", None) or ():
            records.append(_render_openssl_error(error))
        message = str(current)
        name = type(current).__name__
        records.append(f"{name}: {message}" if message else name)
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    return records


def drain_errors(
    context: str, error: type[ProviderError] = ProviderError
) -> ProviderError:
    """Log and discard every queued provider error.

    Each record is logged at DEBUG as "<context>: <record>", truncated to
    the configured error buffer size. When the queue is empty a single
    "No provider errors." line is logged instead.

    Args:
        context: Description of the failed operation
        error: ProviderError subclass to return

    Returns:
        Instance of ``error`` carrying the context message, for the caller
        to raise
    """
    limit = get_config().error_buffer_size - 1
    drained = 0
    while (record := pop_error()) is not None:
        logger.debug("%s: %s", context, record[:limit])
        drained += 1

    if drained == 0:
        logger.debug("%s: No provider errors.", context)

    return error(context)


@contextmanager
def provider_call(
    context: str, errors: tuple[type[BaseException], ...]
) -> Iterator[None]:
    """Wrap native provider calls so their failures drain into a ProviderError.

    Args:
        context: Description used as the log prefix and error message
        errors: Exception types the provider raises for failed operations

    Raises:
        ProviderError: If the wrapped block raised one of ``errors``
        OutOfMemoryError: If the wrapped block ran out of memory
    """
    try:
        yield
    except MemoryError:
        logger.debug("%s: Out of memory.", context)
        raise OutOfMemoryError() from None
    except errors as exc:
        for record in render_exception(exc):
            push_error(record)
        raise drain_errors(context) from exc
