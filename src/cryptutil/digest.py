"""Digest and HMAC computation over scattered input.

Input is any iterable of bytes-like buffers; they are fed to the provider
in order, so the result is the digest of their concatenation. An empty
iterable yields the digest of the empty string.

Only fixed-size algorithms are supported. The size the provider reports
for the algorithm (or for the keyed HMAC context) is checked against the
length of the output; a mismatch is a provider defect, not an error the
caller can handle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TypeAlias

from .algorithms import canonical_digest_name
from .config import get_config
from .exceptions import BadInputError, ProviderDefect, UnsupportedError
from .provider import Backend, drain_errors, get_backend

logger = logging.getLogger(__name__)

BytesLike: TypeAlias = bytes | bytearray | memoryview


def digest_size(algorithm: str, *, backend: Backend | None = None) -> int:
    """Return the output size of a fixed-size digest algorithm.

    Do not use this for variable-length algorithms such as shake128.

    Args:
        algorithm: Digest name (e.g. "sha256")
        backend: Provider backend (defaults to the active one)

    Returns:
        Digest size in bytes

    Raises:
        UnsupportedError: If the provider does not know the algorithm
        BadInputError: If the provider reports a size of zero
    """
    if backend is None:
        backend = get_backend()

    size = backend.digest_size(canonical_digest_name(algorithm))
    if size == 0:
        raise drain_errors("Failed to get Digest size", BadInputError)
    return size


def digest_many(
    algorithm: str,
    data: Iterable[BytesLike],
    *,
    backend: Backend | None = None,
) -> bytes:
    """Compute a digest over a sequence of buffers.

    Args:
        algorithm: Digest name (e.g. "sha256")
        data: Buffers to hash, in order
        backend: Provider backend (defaults to the active one)

    Returns:
        Digest bytes, exactly digest_size(algorithm) long

    Raises:
        UnsupportedError: If the provider does not know the algorithm
        ProviderError: If any provider call fails
    """
    if backend is None:
        backend = get_backend()
    name = canonical_digest_name(algorithm)

    context = backend.digest_context(name)
    for chunk in data:
        context.update(chunk)

    size = digest_size(name, backend=backend)
    result = context.finalize()
    if len(result) != size:
        raise ProviderDefect(f"{name} digest is {len(result)} bytes, expected {size}")
    return result


def hmac_many(
    algorithm: str,
    key: BytesLike,
    data: Iterable[BytesLike],
    *,
    backend: Backend | None = None,
) -> bytes:
    """Compute an HMAC over a sequence of buffers.

    Whether a key is acceptable (including an empty one) is up to the
    provider.

    Args:
        algorithm: Digest name the HMAC is built on (e.g. "sha256")
        key: HMAC key
        data: Buffers to authenticate, in order
        backend: Provider backend (defaults to the active one)

    Returns:
        MAC bytes, as long as the keyed context reports

    Raises:
        UnsupportedError: If the provider does not know the algorithm
        BadInputError: If the keyed context reports a size of zero
        ProviderError: If any provider call fails
    """
    if backend is None:
        backend = get_backend()
    name = canonical_digest_name(algorithm)

    context = backend.hmac_context(name, bytes(key))
    for chunk in data:
        context.update(chunk)

    size = context.digest_size
    if size == 0:
        raise drain_errors("Failed to get HMAC digest size", BadInputError)

    result = context.finalize()
    if len(result) != size:
        raise ProviderDefect(f"HMAC-{name} is {len(result)} bytes, expected {size}")
    return result


def digest(algorithm: str, data: BytesLike, *, backend: Backend | None = None) -> bytes:
    """Compute a digest of a single buffer."""
    return digest_many(algorithm, (data,), backend=backend)


def hmac(
    algorithm: str, key: BytesLike, data: BytesLike, *, backend: Backend | None = None
) -> bytes:
    """Compute an HMAC of a single buffer."""
    return hmac_many(algorithm, key, (data,), backend=backend)


def hex_hash(
    data: BytesLike | str, algorithm: str, *, backend: Backend | None = None
) -> str:
    """Hash data and return the digest as lowercase hex.

    Strings are hashed as UTF-8. Only available while the configuration
    makes this layer the preferred hashing backend.

    Raises:
        UnsupportedError: If provider hashing is not preferred, or the
            provider does not know the algorithm
        ProviderError: If any provider call fails
    """
    if not get_config().prefer_provider_hashing:
        raise UnsupportedError("Provider hashing is not the preferred hashing backend")

    if isinstance(data, str):
        data = data.encode("utf-8")
    return digest(algorithm, data, backend=backend).hex()
