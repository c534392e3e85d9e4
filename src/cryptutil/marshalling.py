"""RSA and elliptic-curve key construction and decomposition.

Numeric key components cross this API as big-endian unsigned byte
strings. On input any length is accepted and leading zero bytes are
ignored; on output the encoding is minimal (no leading zero byte, and
empty only for zero).

A small exponent such as 65537 must be passed already encoded, e.g.
``(65537).to_bytes(4, "big")``.
"""

from __future__ import annotations

import logging

from .algorithms import Curve, KeyFamily
from .digest import BytesLike
from .exceptions import BadInputError, UnsupportedError
from .keys import EcKeyPair, EcPublicKey, KeyHandle, RsaKeyPair, RsaPublicKey, require_family
from .provider import Backend, get_backend

logger = logging.getLogger(__name__)


def bytes_to_int(data: BytesLike) -> int:
    """Interpret a big-endian unsigned byte string as an integer."""
    return int.from_bytes(data, "big")


def int_to_bytes(value: int) -> bytes:
    """Encode a non-negative integer as minimal big-endian bytes.

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError("Cannot encode a negative integer")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def _resolve_curve(curve: Curve | int, backend: Backend) -> Curve:
    resolved = Curve.from_id(int(curve))
    if not backend.supports_curve(resolved):
        logger.debug("ECC curve %s not supported by %s", resolved.short_name, backend.name)
        raise UnsupportedError(f"ECC curve id {int(resolved)} not supported")
    return resolved


def rsa_key_from_components(
    modulus: BytesLike, exponent: BytesLike, *, backend: Backend | None = None
) -> RsaPublicKey:
    """Build a public RSA key from its modulus and public exponent.

    Args:
        modulus: Big-endian modulus n
        exponent: Big-endian public exponent e
        backend: Provider backend (defaults to the active one)

    Raises:
        ProviderError: If the provider rejects the components
    """
    if backend is None:
        backend = get_backend()
    native = backend.rsa_from_numbers(bytes_to_int(modulus), bytes_to_int(exponent))
    return RsaPublicKey(native, backend)


def rsa_key_to_components(key: KeyHandle) -> tuple[bytes, bytes]:
    """Return the (modulus, exponent) of an RSA key as minimal big-endian bytes.

    Raises:
        WrongKeyTypeError: If key is not an RSA key
        ProviderError: If the provider cannot export the components
    """
    require_family(key, KeyFamily.RSA)
    n, e = key.backend.rsa_to_numbers(key.native)
    return int_to_bytes(n), int_to_bytes(e)


def ec_key_from_curve_and_point(
    curve: Curve | int,
    x: BytesLike,
    y: BytesLike,
    *,
    backend: Backend | None = None,
) -> EcPublicKey:
    """Build a public EC key from a curve and the affine point coordinates.

    The provider verifies that the point lies on the curve.

    Args:
        curve: Curve, or its numeric identifier
        x: Big-endian affine X coordinate
        y: Big-endian affine Y coordinate
        backend: Provider backend (defaults to the active one)

    Raises:
        UnsupportedError: If the curve is unknown or not in this provider build
        ProviderError: If the point is not on the curve
    """
    if backend is None:
        backend = get_backend()
    resolved = _resolve_curve(curve, backend)
    native = backend.ec_from_point(resolved, bytes_to_int(x), bytes_to_int(y))
    return EcPublicKey(native, backend)


def ec_key_to_curve_and_point(key: KeyHandle) -> tuple[Curve, bytes, bytes]:
    """Return (curve, x, y) of an EC key, coordinates as minimal big-endian bytes.

    Raises:
        WrongKeyTypeError: If key is not an EC key
        UnsupportedError: If the key is on a curve cryptutil does not know
        ProviderError: If the provider cannot export the point
    """
    require_family(key, KeyFamily.EC)
    curve, x, y = key.backend.ec_to_point(key.native)
    return curve, int_to_bytes(x), int_to_bytes(y)


def rsa_key_generate(bits: int, *, backend: Backend | None = None) -> RsaKeyPair:
    """Generate an RSA key pair (public exponent 65537).

    Generation of large keys can take seconds and cannot be interrupted.

    Raises:
        ProviderError: If the provider rejects the size or generation fails
    """
    if backend is None:
        backend = get_backend()
    return RsaKeyPair(backend.rsa_generate(bits), backend)


def ec_key_generate(curve: Curve | int, *, backend: Backend | None = None) -> EcKeyPair:
    """Generate an EC key pair on the given curve.

    Raises:
        UnsupportedError: If the curve is unknown or not in this provider build
        ProviderError: If generation fails
    """
    if backend is None:
        backend = get_backend()
    resolved = _resolve_curve(curve, backend)
    return EcKeyPair(backend.ec_generate(resolved), backend)


def suitable_symmetric_key_size(key: KeyHandle) -> int:
    """Return a symmetric key size suitable for encrypting with an RSA key.

    PKCS#1 padding needs room inside the modulus, so only half the modulus
    length is used.

    Returns:
        Key size in bytes (bits / 8 / 2)

    Raises:
        WrongKeyTypeError: If key is not an RSA key
        BadInputError: If the RSA key is too short to yield a single byte
    """
    require_family(key, KeyFamily.RSA)

    bits = key.backend.rsa_key_size(key.native)
    logger.debug("Bits in RSA key: %d", bits)

    size = bits // 8 // 2
    if size < 1:
        raise BadInputError("RSA key size too short")
    return size
