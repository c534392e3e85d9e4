"""Public key and X.509 certificate fingerprints.

A public key fingerprint is the digest of the provider's DER encoding of
the bare key: the PKCS#1 RSAPublicKey structure for RSA, the uncompressed
X9.62 point for EC. Any fixed-size digest algorithm may be used.

Certificate fingerprints are always SHA-256 over the certificate DER and
are computed with hashlib rather than the provider digest engine.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from .digest import digest_many
from .exceptions import UnsupportedError
from .keys import KeyHandle
from .provider.pyca import CRYPTOGRAPHY_AVAILABLE, certificate_der
from .provider.pyca import load_certificate_pem as _load_certificate_pem

logger = logging.getLogger(__name__)

CERTIFICATE_FINGERPRINT_SIZE = hashlib.sha256().digest_size


def public_key_fingerprint(key: KeyHandle, algorithm: str = "sha256") -> bytes:
    """Digest the DER encoding of a public key.

    Key pairs are fingerprinted by their public half.

    Args:
        key: Any key handle
        algorithm: Fixed-size digest algorithm name

    Returns:
        Fingerprint bytes, as long as the algorithm's digest

    Raises:
        UnsupportedError: If the provider does not know the algorithm
        ProviderError: If DER encoding or digesting fails
    """
    der = key.backend.public_key_der(key.family, key.native)
    return digest_many(algorithm, (der,), backend=key.backend)


def load_certificate_pem(data: bytes | str) -> Any:
    """Parse a PEM-encoded X.509 certificate held in memory.

    Raises:
        UnsupportedError: If pyca/cryptography is not installed
        ProviderError: If the data holds no parseable certificate
    """
    if not CRYPTOGRAPHY_AVAILABLE:
        raise UnsupportedError("cryptography is not installed, cannot parse X.509 certificates")
    if isinstance(data, str):
        data = data.encode("ascii")
    return _load_certificate_pem(data)


def certificate_fingerprint(certificate: Any) -> bytes:
    """Compute the SHA-256 fingerprint of an X.509 certificate.

    Args:
        certificate: cryptography.x509.Certificate

    Returns:
        32-byte SHA-256 digest of the certificate's DER encoding

    Raises:
        UnsupportedError: If pyca/cryptography is not installed
        ProviderError: If the certificate cannot be DER-encoded
    """
    if not CRYPTOGRAPHY_AVAILABLE:
        logger.debug("cryptography is not installed, cannot calculate X.509 fingerprint")
        raise UnsupportedError("cryptography is not installed, cannot calculate X.509 fingerprint")

    return hashlib.sha256(certificate_der(certificate)).digest()
