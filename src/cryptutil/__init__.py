"""cryptutil - Uniform cryptographic primitives over provider libraries.

This library gives callers that need cryptographic correctness, such as
disk-encryption key wrapping or update-image signature checks, a small
API that hides provider bookkeeping:
- Digests and HMACs over scattered buffers
- RSA and EC public keys from and to raw big-endian components
- PKCS#1 v1.5 encryption and digest-and-sign
- Public key and certificate fingerprints

Two provider libraries are supported behind one backend protocol:
pyca/cryptography (preferred) and PyCryptodome.

Example:
    import os

    from cryptutil import (
        digest_many,
        rsa_encrypt,
        rsa_key_from_components,
        suitable_symmetric_key_size,
    )

    digest = digest_many("sha256", [b"header", b"payload"])

    key = rsa_key_from_components(modulus, (65537).to_bytes(4, "big"))
    size = suitable_symmetric_key_size(key)
    wrapped = rsa_encrypt(key, os.urandom(size))
"""

__version__ = "0.1.0"

from .algorithms import Curve, KeyFamily, canonical_digest_name
from .asymmetric import (
    digest_and_sign,
    public_key_from_pem,
    public_key_to_pem,
    rsa_encrypt,
)
from .config import CryptoConfig, get_config, set_config
from .digest import digest, digest_many, digest_size, hex_hash, hmac, hmac_many
from .exceptions import (
    BadInputError,
    CryptUtilError,
    OutOfMemoryError,
    ProviderDefect,
    ProviderError,
    UnsupportedError,
    WrongKeyTypeError,
)
from .fingerprint import (
    CERTIFICATE_FINGERPRINT_SIZE,
    certificate_fingerprint,
    load_certificate_pem,
    public_key_fingerprint,
)
from .keys import EcKeyPair, EcPublicKey, KeyHandle, RsaKeyPair, RsaPublicKey
from .marshalling import (
    ec_key_from_curve_and_point,
    ec_key_generate,
    ec_key_to_curve_and_point,
    rsa_key_from_components,
    rsa_key_generate,
    rsa_key_to_components,
    suitable_symmetric_key_size,
)
from .provider import available_backends, drain_errors, get_backend

__all__ = [
    # Configuration and backends
    "CryptoConfig",
    "available_backends",
    "get_backend",
    "get_config",
    "set_config",
    # Algorithms
    "Curve",
    "KeyFamily",
    "canonical_digest_name",
    # Digests
    "digest",
    "digest_many",
    "digest_size",
    "hex_hash",
    "hmac",
    "hmac_many",
    # Keys
    "EcKeyPair",
    "EcPublicKey",
    "KeyHandle",
    "RsaKeyPair",
    "RsaPublicKey",
    "ec_key_from_curve_and_point",
    "ec_key_generate",
    "ec_key_to_curve_and_point",
    "rsa_key_from_components",
    "rsa_key_generate",
    "rsa_key_to_components",
    "suitable_symmetric_key_size",
    # Asymmetric operations
    "digest_and_sign",
    "public_key_from_pem",
    "public_key_to_pem",
    "rsa_encrypt",
    # Fingerprints
    "CERTIFICATE_FINGERPRINT_SIZE",
    "certificate_fingerprint",
    "load_certificate_pem",
    "public_key_fingerprint",
    # Errors
    "drain_errors",
    "CryptUtilError",
    "UnsupportedError",
    "ProviderError",
    "BadInputError",
    "OutOfMemoryError",
    "WrongKeyTypeError",
    "ProviderDefect",
]
