"""Provider backend protocol.

A backend adapts one cryptographic provider library to the operations
cryptutil needs. Implementations:

- CryptographyBackend: pyca/cryptography (OpenSSL), curves addressed by class
- CryptodomeBackend: PyCryptodome, curves addressed by short name

Backends work on plain integers and provider-native key objects. Byte
encoding of key components, key handle tagging and size contracts are
handled once, above this seam, so both backends produce identical
results for identical inputs.

Every native call inside a backend runs under provider_call(), so a
provider failure surfaces as ProviderError after its diagnostics have
been drained to the log.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..algorithms import Curve, KeyFamily


class HashContext(Protocol):
    """A digest or HMAC computation in progress.

    digest_size is the output size reported by the provider once the
    context is initialized (keyed, for HMAC).
    """

    digest_size: int

    def update(self, data: bytes | bytearray | memoryview) -> None:
        """Feed the next input buffer."""
        ...

    def finalize(self) -> bytes:
        """Finish the computation and return the output."""
        ...


@runtime_checkable
class Backend(Protocol):
    """Protocol for cryptographic provider backends.

    Digest algorithm names passed to a backend are already canonical
    (see cryptutil.algorithms.canonical_digest_name). Unknown names raise
    UnsupportedError; failed provider calls raise ProviderError.
    """

    name: str

    # Digests

    def digest_size(self, algorithm: str) -> int:
        """Output size of a digest algorithm, 0 for variable-length ones."""
        ...

    def digest_context(self, algorithm: str) -> HashContext:
        """Start a digest computation."""
        ...

    def hmac_context(self, algorithm: str, key: bytes) -> HashContext:
        """Start an HMAC computation keyed with ``key``."""
        ...

    # Keys

    def supports_curve(self, curve: Curve) -> bool:
        """Whether the provider build knows this curve."""
        ...

    def rsa_from_numbers(self, n: int, e: int) -> Any:
        """Build a public RSA key from modulus and exponent."""
        ...

    def rsa_to_numbers(self, key: Any) -> tuple[int, int]:
        """Return (n, e) of an RSA key."""
        ...

    def rsa_key_size(self, key: Any) -> int:
        """Modulus size in bits."""
        ...

    def rsa_generate(self, bits: int) -> Any:
        """Generate an RSA key pair with exponent 65537."""
        ...

    def ec_from_point(self, curve: Curve, x: int, y: int) -> Any:
        """Build a public EC key; fails if (x, y) is not on the curve."""
        ...

    def ec_to_point(self, key: Any) -> tuple[Curve, int, int]:
        """Return (curve, x, y) of an EC key."""
        ...

    def ec_generate(self, curve: Curve) -> Any:
        """Generate an EC key pair on ``curve``."""
        ...

    def public_of(self, key: Any) -> Any:
        """Return the public half of a native key (the key itself if public)."""
        ...

    # Encodings

    def load_pem_public_key(self, data: bytes) -> tuple[KeyFamily, Any]:
        """Parse a PEM SubjectPublicKeyInfo block."""
        ...

    def public_key_pem(self, family: KeyFamily, key: Any) -> bytes:
        """Encode a public key as PEM SubjectPublicKeyInfo."""
        ...

    def public_key_der(self, family: KeyFamily, key: Any) -> bytes:
        """Encode the bare public key: PKCS#1 RSAPublicKey or an X9.62 point."""
        ...

    # Operations

    def rsa_encrypt_size(self, key: Any) -> int:
        """Ciphertext size of PKCS#1 v1.5 encryption under ``key``."""
        ...

    def rsa_encrypt(self, key: Any, data: bytes) -> bytes:
        """Encrypt with PKCS#1 v1.5 padding."""
        ...

    def signature_size(self, family: KeyFamily, key: Any) -> int:
        """Maximum signature size for ``key``."""
        ...

    def sign(self, family: KeyFamily, key: Any, algorithm: str, data: bytes) -> bytes:
        """Digest ``data`` and sign it (PKCS#1 v1.5 for RSA, DER ECDSA for EC)."""
        ...


_PUBLIC_KEY_BLOCK = re.compile(
    rb"-----BEGIN PUBLIC KEY-----\r?\n.*?-----END PUBLIC KEY-----", re.DOTALL
)


def first_public_key_block(data: bytes) -> bytes:
    """Return the first PEM "PUBLIC KEY" block in ``data``.

    Text before the block and any blocks after it are ignored, as are
    blocks with other labels (e.g. "RSA PUBLIC KEY" or "PRIVATE KEY").

    Raises:
        ValueError: If ``data`` holds no "PUBLIC KEY" block
    """
    match = _PUBLIC_KEY_BLOCK.search(data)
    if match is None:
        raise ValueError("No PUBLIC KEY block found")
    return match.group(0) + b"\n"


def _der_length_size(length: int) -> int:
    if length < 0x80:
        return 1
    return 1 + (length.bit_length() + 7) // 8


def ecdsa_der_max_size(order_bits: int) -> int:
    """Largest DER-encoded ECDSA signature for a curve order of ``order_bits``.

    Both INTEGERs (r and s) may need a leading zero byte.
    """
    integer = (order_bits + 7) // 8 + 1
    integer_tlv = 1 + _der_length_size(integer) + integer
    body = 2 * integer_tlv
    return 1 + _der_length_size(body) + body
