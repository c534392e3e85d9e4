"""Test utilities for cryptutil.

WARNING: The backend in this module is for TESTING ONLY. It deliberately
breaks cryptographic operations.

FaultyBackend wraps a real backend and makes chosen operations misbehave
the way a broken provider would:

- ``fail``: the named backend methods fail as a provider call, so their
  diagnostics go through the error queue and surface as ProviderError
- ``oversize``: the named methods return one byte more than the provider
  reported; "finalize" applies to digest and HMAC contexts

This makes failure paths, diagnostic logging and the provider defect
checks reachable without a genuinely broken provider.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from cryptutil.provider import Backend, HashContext, provider_call


class _OversizedContext:
    """Hash context whose output is one byte longer than reported."""

    def __init__(self, inner: HashContext) -> None:
        self._inner = inner
        self.digest_size = inner.digest_size

    def update(self, data: bytes | bytearray | memoryview) -> None:
        self._inner.update(data)

    def finalize(self) -> bytes:
        return self._inner.finalize() + b"\x00"


class FaultyBackend:
    """Fault-injecting wrapper around a real backend.

    WARNING: This is for TESTING ONLY. See module docstring for details.

    Example:
        >>> from cryptutil import digest_and_sign, rsa_key_generate
        >>> from cryptutil.provider import get_backend
        >>> backend = FaultyBackend(get_backend(), fail={"sign"})
        >>> key = rsa_key_generate(2048, backend=backend)
        >>> digest_and_sign("sha256", key, b"data")  # raises ProviderError
    """

    def __init__(
        self,
        inner: Backend,
        fail: Iterable[str] = (),
        oversize: Iterable[str] = (),
    ) -> None:
        """Initialize around a real backend.

        Args:
            inner: Backend that does the real work
            fail: Names of backend methods that fail
            oversize: Names of backend methods whose output grows by one
                byte ("finalize" targets digest and HMAC contexts)
        """
        self._inner = inner
        self._fail = frozenset(fail)
        self._oversize = frozenset(oversize)
        self.name = f"faulty-{inner.name}"

    def __getattr__(self, attr: str) -> Any:
        target = getattr(self._inner, attr)
        if not callable(target):
            return target
        return self._wrap(attr, target)

    def _wrap(self, attr: str, target: Callable[..., Any]) -> Callable[..., Any]:
        def call(*args: Any, **kwargs: Any) -> Any:
            if attr in self._fail:
                with provider_call(f"Injected failure in {attr}", (ValueError,)):
                    raise ValueError(f"{attr} failed")

            result = target(*args, **kwargs)
            if attr in ("digest_context", "hmac_context") and "finalize" in self._oversize:
                return _OversizedContext(result)
            if attr in self._oversize:
                return result + b"\x00"
            return result

        return call

    def __repr__(self) -> str:
        """Return string representation."""
        return f"FaultyBackend({self._inner!r}, fail={sorted(self._fail)}, oversize={sorted(self._oversize)})"
