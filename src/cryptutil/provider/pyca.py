"""pyca/cryptography provider backend.

Wraps the OpenSSL-backed ``cryptography`` package. Curves are addressed
through cryptography's curve classes, keyed directly by curve id, and
failures carry the OpenSSL error stack (InternalError.err_code), which
provider_call() expands into individual error records.

This backend also owns X.509 certificate handling, which only
``cryptography`` provides.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ..algorithms import Curve, KeyFamily
from ..exceptions import BadInputError, UnsupportedError
from .base import ecdsa_der_max_size, first_public_key_block
from .error_queue import provider_call

# Optional pyca/cryptography support
try:
    from cryptography import x509
    from cryptography.exceptions import InternalError, UnsupportedAlgorithm
    from cryptography.hazmat.primitives import hashes, hmac, serialization
    from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

    CRYPTOGRAPHY_AVAILABLE = True
    PROVIDER_ERRORS: tuple[type[BaseException], ...] = (
        ValueError,
        TypeError,
        UnsupportedAlgorithm,
        InternalError,
    )
except ImportError:
    CRYPTOGRAPHY_AVAILABLE = False
    PROVIDER_ERRORS = (ValueError, TypeError)

if TYPE_CHECKING:
    from .base import HashContext

logger = logging.getLogger(__name__)

# Variable-length algorithms map to None: they resolve, but have no fixed size
_DIGESTS: dict[str, Callable[[], Any] | None] = {
    "md5": lambda: hashes.MD5(),
    "sha1": lambda: hashes.SHA1(),
    "sha224": lambda: hashes.SHA224(),
    "sha256": lambda: hashes.SHA256(),
    "sha384": lambda: hashes.SHA384(),
    "sha512": lambda: hashes.SHA512(),
    "sha512-224": lambda: hashes.SHA512_224(),
    "sha512-256": lambda: hashes.SHA512_256(),
    "sha3-224": lambda: hashes.SHA3_224(),
    "sha3-256": lambda: hashes.SHA3_256(),
    "sha3-384": lambda: hashes.SHA3_384(),
    "sha3-512": lambda: hashes.SHA3_512(),
    "blake2b512": lambda: hashes.BLAKE2b(64),
    "blake2s256": lambda: hashes.BLAKE2s(32),
    "sm3": lambda: hashes.SM3(),
    "shake128": None,
    "shake256": None,
}

_CURVE_CLASSES: dict[Curve, str] = {
    Curve.PRIME192V1: "SECP192R1",
    Curve.PRIME256V1: "SECP256R1",
    Curve.SECP224R1: "SECP224R1",
    Curve.SECP256K1: "SECP256K1",
    Curve.SECP384R1: "SECP384R1",
    Curve.SECP521R1: "SECP521R1",
}


@contextmanager
def _rejected_algorithm(algorithm: str) -> Iterator[None]:
    """Report a hash OpenSSL refuses for this operation as unsupported."""
    try:
        yield
    except UnsupportedAlgorithm:
        logger.debug("Digest algorithm '%s' not supported.", algorithm)
        raise UnsupportedError(f"Digest algorithm '{algorithm}' not supported.") from None


class _Context:
    """Digest or HMAC context over a cryptography Hash/HMAC object."""

    def __init__(self, ctx: Any, kind: str) -> None:
        self._ctx = ctx
        self._kind = kind
        self.digest_size: int = ctx.algorithm.digest_size

    def update(self, data: bytes | bytearray | memoryview) -> None:
        with provider_call(f"Failed to update {self._kind}", PROVIDER_ERRORS):
            self._ctx.update(data)

    def finalize(self) -> bytes:
        with provider_call(f"Failed to finalize {self._kind}", PROVIDER_ERRORS):
            return self._ctx.finalize()


class CryptographyBackend:
    """Backend over pyca/cryptography."""

    name = "cryptography"

    def __repr__(self) -> str:
        return "CryptographyBackend()"

    def _hash_algorithm(self, algorithm: str) -> Any:
        if algorithm not in _DIGESTS:
            logger.debug("Digest algorithm '%s' not supported.", algorithm)
            raise UnsupportedError(f"Digest algorithm '{algorithm}' not supported.")
        factory = _DIGESTS[algorithm]
        if factory is None:
            raise BadInputError(f"Digest algorithm '{algorithm}' has no fixed output size")
        return factory()

    def _new_hash(self, algorithm: str) -> Any:
        hash_algorithm = self._hash_algorithm(algorithm)
        with _rejected_algorithm(algorithm):
            return hashes.Hash(hash_algorithm)

    def digest_size(self, algorithm: str) -> int:
        if algorithm in _DIGESTS and _DIGESTS[algorithm] is None:
            return 0
        return self._new_hash(algorithm).algorithm.digest_size

    def digest_context(self, algorithm: str) -> HashContext:
        return _Context(self._new_hash(algorithm), "Digest")

    def hmac_context(self, algorithm: str, key: bytes) -> HashContext:
        hash_algorithm = self._hash_algorithm(algorithm)
        with provider_call("Failed to initialize HMAC context", PROVIDER_ERRORS):
            with _rejected_algorithm(algorithm):
                ctx = hmac.HMAC(key, hash_algorithm)
        return _Context(ctx, "HMAC")

    def supports_curve(self, curve: Curve) -> bool:
        return curve in _CURVE_CLASSES and hasattr(ec, _CURVE_CLASSES[curve])

    def _curve_object(self, curve: Curve) -> Any:
        return getattr(ec, _CURVE_CLASSES[curve])()

    def rsa_from_numbers(self, n: int, e: int) -> Any:
        with provider_call("Failed to create RSA key", PROVIDER_ERRORS):
            return rsa.RSAPublicNumbers(e, n).public_key()

    def rsa_to_numbers(self, key: Any) -> tuple[int, int]:
        with provider_call("Failed to get RSA n/e", PROVIDER_ERRORS):
            numbers = self.public_of(key).public_numbers()
        return numbers.n, numbers.e

    def rsa_key_size(self, key: Any) -> int:
        return key.key_size

    def rsa_generate(self, bits: int) -> Any:
        with provider_call(f"Failed to generate RSA key with {bits} bits", PROVIDER_ERRORS):
            return rsa.generate_private_key(public_exponent=65537, key_size=bits)

    def ec_from_point(self, curve: Curve, x: int, y: int) -> Any:
        with provider_call("Failed to create ECC key", PROVIDER_ERRORS):
            return ec.EllipticCurvePublicNumbers(x, y, self._curve_object(curve)).public_key()

    def ec_to_point(self, key: Any) -> tuple[Curve, int, int]:
        public = self.public_of(key)
        for curve, class_name in _CURVE_CLASSES.items():
            if type(public.curve).__name__ == class_name:
                break
        else:
            raise UnsupportedError(f"ECC curve '{public.curve.name}' not supported")
        with provider_call("Failed to get ECC x/y", PROVIDER_ERRORS):
            numbers = public.public_numbers()
        return curve, numbers.x, numbers.y

    def ec_generate(self, curve: Curve) -> Any:
        with provider_call(f"Failed to generate ECC key on curve {curve.short_name}", PROVIDER_ERRORS):
            return ec.generate_private_key(self._curve_object(curve))

    def public_of(self, key: Any) -> Any:
        if isinstance(key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
            return key.public_key()
        return key

    def load_pem_public_key(self, data: bytes) -> tuple[KeyFamily, Any]:
        with provider_call("Failed to parse PEM", PROVIDER_ERRORS):
            key = serialization.load_pem_public_key(first_public_key_block(data))
        if isinstance(key, rsa.RSAPublicKey):
            return KeyFamily.RSA, key
        if isinstance(key, ec.EllipticCurvePublicKey):
            return KeyFamily.EC, key
        raise UnsupportedError(f"Public key type {type(key).__name__} not supported")

    def public_key_pem(self, family: KeyFamily, key: Any) -> bytes:
        with provider_call("Unable to convert public key to PEM format", PROVIDER_ERRORS):
            return self.public_of(key).public_bytes(
                serialization.Encoding.PEM,
                serialization.PublicFormat.SubjectPublicKeyInfo,
            )

    def public_key_der(self, family: KeyFamily, key: Any) -> bytes:
        public = self.public_of(key)
        with provider_call("Unable to convert public key to DER format", PROVIDER_ERRORS):
            if family is KeyFamily.RSA:
                return public.public_bytes(
                    serialization.Encoding.DER, serialization.PublicFormat.PKCS1
                )
            return public.public_bytes(
                serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
            )

    def rsa_encrypt_size(self, key: Any) -> int:
        return (key.key_size + 7) // 8

    def rsa_encrypt(self, key: Any, data: bytes) -> bytes:
        with provider_call("Failed to encrypt with PKCS#1 padding", PROVIDER_ERRORS):
            return self.public_of(key).encrypt(data, padding.PKCS1v15())

    def signature_size(self, family: KeyFamily, key: Any) -> int:
        if family is KeyFamily.RSA:
            return (key.key_size + 7) // 8
        return ecdsa_der_max_size(key.curve.key_size)

    def sign(self, family: KeyFamily, key: Any, algorithm: str, data: bytes) -> bytes:
        hash_algorithm = self._hash_algorithm(algorithm)
        with provider_call("Failed to sign data", PROVIDER_ERRORS), _rejected_algorithm(algorithm):
            if family is KeyFamily.RSA:
                return key.sign(data, padding.PKCS1v15(), hash_algorithm)
            return key.sign(data, ec.ECDSA(hash_algorithm))


def load_certificate_pem(data: bytes) -> Any:
    """Parse one PEM-encoded X.509 certificate."""
    with provider_call("Failed to parse PEM certificate", PROVIDER_ERRORS):
        return x509.load_pem_x509_certificate(data)


def certificate_der(certificate: Any) -> bytes:
    """DER-encode an X.509 certificate."""
    with provider_call("Unable to convert certificate to DER format", PROVIDER_ERRORS):
        return certificate.public_bytes(serialization.Encoding.DER)
