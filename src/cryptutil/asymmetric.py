"""PEM parsing, PKCS#1 v1.5 encryption and digest-and-sign.

Outputs follow a size-then-fill protocol: the maximum output size is
obtained from the provider before the operation runs, and an output that
exceeds it is treated as a provider defect.
"""

from __future__ import annotations

import logging

from .algorithms import SIGNATURE_DIGESTS, KeyFamily, canonical_digest_name
from .digest import BytesLike
from .exceptions import ProviderDefect, UnsupportedError
from .keys import (
    EcPublicKey,
    KeyHandle,
    PublicKeyHandle,
    RsaPublicKey,
    require_family,
    require_private,
)
from .provider import Backend, get_backend

logger = logging.getLogger(__name__)


def public_key_from_pem(
    data: bytes | str, *, backend: Backend | None = None
) -> PublicKeyHandle:
    """Parse a PEM-encoded public key (SubjectPublicKeyInfo).

    Args:
        data: PEM text containing a "PUBLIC KEY" block
        backend: Provider backend (defaults to the active one)

    Returns:
        RsaPublicKey or EcPublicKey

    Raises:
        ProviderError: If no public key can be parsed from the data
        UnsupportedError: If the key is neither RSA nor EC
    """
    if backend is None:
        backend = get_backend()
    if isinstance(data, str):
        data = data.encode("ascii")

    family, native = backend.load_pem_public_key(bytes(data))
    if family is KeyFamily.RSA:
        return RsaPublicKey(native, backend)
    return EcPublicKey(native, backend)


def public_key_to_pem(key: KeyHandle) -> bytes:
    """Encode the public half of a key as PEM SubjectPublicKeyInfo."""
    return key.backend.public_key_pem(key.family, key.native)


def rsa_encrypt(key: KeyHandle, secret: BytesLike) -> bytes:
    """Encrypt a short secret with RSA and PKCS#1 v1.5 padding.

    The secret must fit the key; suitable_symmetric_key_size() gives a
    size that always does.

    Returns:
        Ciphertext, exactly as long as the modulus

    Raises:
        WrongKeyTypeError: If key is not an RSA key
        ProviderError: If encryption fails (e.g. the secret is too long)
    """
    require_family(key, KeyFamily.RSA)
    backend = key.backend

    size = backend.rsa_encrypt_size(key.native)
    ciphertext = backend.rsa_encrypt(key.native, bytes(secret))
    if len(ciphertext) > size:
        raise ProviderDefect(f"Ciphertext is {len(ciphertext)} bytes, expected at most {size}")
    return ciphertext


def _signing_input(data: BytesLike | str, size: int | None) -> bytes:
    if isinstance(data, str):
        payload = data.encode("utf-8")
        if size is None:
            # Strings end at their first NUL
            payload = payload.split(b"\0", 1)[0]
    else:
        payload = bytes(data)

    if size is not None:
        if not 0 <= size <= len(payload):
            raise ValueError(f"Size {size} is outside the {len(payload)} byte input")
        payload = payload[:size]
    return payload


def digest_and_sign(
    algorithm: str,
    private_key: KeyHandle,
    data: BytesLike | str,
    size: int | None = None,
) -> bytes:
    """Digest data and sign the digest in one step.

    RSA keys sign with PKCS#1 v1.5 padding, EC keys produce a DER-encoded
    ECDSA signature.

    Args:
        algorithm: Digest name (e.g. "sha256")
        private_key: RsaKeyPair or EcKeyPair
        data: Data to sign. A str is signed as UTF-8.
        size: Number of leading bytes of data to sign. None signs all of
            it; for a str that means up to its first NUL character.

    Returns:
        Signature bytes

    Raises:
        WrongKeyTypeError: If the handle holds no private key
        UnsupportedError: If the algorithm cannot be used with this key
            family (ECDSA takes SHA-2 and SHA-3 only, PKCS#1 v1.5 also MD5
            and SHA-1)
        ProviderError: If signing fails
        ValueError: If size is outside the data
    """
    require_private(private_key)
    backend = private_key.backend
    payload = _signing_input(data, size)

    name = canonical_digest_name(algorithm)
    family = private_key.family.display_name
    if name not in SIGNATURE_DIGESTS[private_key.family]:
        logger.debug("Digest algorithm '%s' not usable for %s signatures", name, family)
        raise UnsupportedError(f"Digest algorithm '{name}' not supported for {family} signatures")

    max_size = backend.signature_size(private_key.family, private_key.native)
    signature = backend.sign(private_key.family, private_key.native, name, payload)
    if len(signature) > max_size:
        raise ProviderDefect(f"Signature is {len(signature)} bytes, expected at most {max_size}")

    logger.debug("Signed %d bytes with %s", len(payload), algorithm)
    return signature
