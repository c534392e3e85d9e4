"""Cryptographic provider backends.

This package isolates every call into a provider library:
- Backend protocol and shared size helpers (base)
- Per-thread provider error queue and its drain (error_queue)
- pyca/cryptography backend (pyca)
- PyCryptodome backend (cryptodome)

The backend used by default is negotiated on first use: the configured
backend if one is set, otherwise pyca/cryptography when it is importable,
otherwise PyCryptodome. Backends are stateless, so one instance per name
is shared by every call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import get_config
from ..exceptions import UnsupportedError
from .base import Backend, HashContext, ecdsa_der_max_size, first_public_key_block
from .cryptodome import CRYPTODOME_AVAILABLE, CryptodomeBackend
from .error_queue import (
    clear_errors,
    drain_errors,
    pending_errors,
    pop_error,
    provider_call,
    push_error,
)
from .pyca import CRYPTOGRAPHY_AVAILABLE, CryptographyBackend

logger = logging.getLogger(__name__)

_FACTORIES: dict[str, Callable[[], Backend]] = {
    "cryptography": CryptographyBackend,
    "cryptodome": CryptodomeBackend,
}

_backends: dict[str, Backend] = {}


def available_backends() -> tuple[str, ...]:
    """Names of the backends whose provider library is importable, best first."""
    names = []
    if CRYPTOGRAPHY_AVAILABLE:
        names.append("cryptography")
    if CRYPTODOME_AVAILABLE:
        names.append("cryptodome")
    return tuple(names)


def get_backend(name: str | None = None) -> Backend:
    """Return a provider backend.

    Args:
        name: Backend name. Defaults to the configured backend, or the
            best available one if none is configured.

    Returns:
        The shared backend instance for that name

    Raises:
        UnsupportedError: If the backend is unknown or its library is not
            installed, or if no provider library is installed at all
    """
    if name is None:
        name = get_config().backend

    available = available_backends()
    if name is None:
        if not available:
            raise UnsupportedError("No cryptographic provider is available")
        name = available[0]
    elif name not in _FACTORIES:
        raise UnsupportedError(f"Unknown provider backend '{name}'")
    elif name not in available:
        raise UnsupportedError(f"Provider backend '{name}' is not installed")

    backend = _backends.get(name)
    if backend is None:
        backend = _FACTORIES[name]()
        _backends[name] = backend
        logger.debug("Using provider backend %s", name)
    return backend


__all__ = [
    "CRYPTODOME_AVAILABLE",
    "CRYPTOGRAPHY_AVAILABLE",
    "Backend",
    "CryptodomeBackend",
    "CryptographyBackend",
    "HashContext",
    "available_backends",
    "clear_errors",
    "drain_errors",
    "ecdsa_der_max_size",
    "first_public_key_block",
    "get_backend",
    "pending_errors",
    "pop_error",
    "provider_call",
    "push_error",
]
