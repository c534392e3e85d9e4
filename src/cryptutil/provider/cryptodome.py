"""PyCryptodome provider backend.

Wraps the ``pycryptodomex`` package (imported as ``Cryptodome``). Curves
are addressed by short name: keys are built from the canonical short name
and their curve is recovered by looking the provider's curve name up in
cryptutil.algorithms.Curve.

PyCryptodome has no SubjectPublicKeyInfo sniffing of its own, so PEM
parsing reads the algorithm OID from the DER structure first and hands
the block to the matching key importer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..algorithms import Curve, KeyFamily
from ..exceptions import BadInputError, UnsupportedError
from .base import ecdsa_der_max_size, first_public_key_block
from .error_queue import provider_call

# Optional PyCryptodome support
try:
    from Cryptodome.Cipher import PKCS1_v1_5
    from Cryptodome.Hash import (
        BLAKE2b,
        BLAKE2s,
        HMAC,
        MD5,
        RIPEMD160,
        SHA1,
        SHA224,
        SHA256,
        SHA384,
        SHA512,
        SHA3_224,
        SHA3_256,
        SHA3_384,
        SHA3_512,
    )
    from Cryptodome.IO import PEM
    from Cryptodome.PublicKey import ECC, RSA
    from Cryptodome.Signature import DSS, pkcs1_15
    from Cryptodome.Util.asn1 import DerObjectId, DerSequence

    CRYPTODOME_AVAILABLE = True
except ImportError:
    CRYPTODOME_AVAILABLE = False

if TYPE_CHECKING:
    from .base import HashContext

logger = logging.getLogger(__name__)

PROVIDER_ERRORS: tuple[type[BaseException], ...] = (
    ValueError,
    TypeError,
    IndexError,
    KeyError,
)

OID_RSA_ENCRYPTION = "1.2.840.113549.1.1.1"
OID_EC_PUBLIC_KEY = "1.2.840.10045.2.1"

# Variable-length algorithms map to None: they resolve, but have no fixed size
_DIGESTS: dict[str, Callable[[], Any] | None] = {
    "md5": lambda: MD5.new(),
    "sha1": lambda: SHA1.new(),
    "sha224": lambda: SHA224.new(),
    "sha256": lambda: SHA256.new(),
    "sha384": lambda: SHA384.new(),
    "sha512": lambda: SHA512.new(),
    "sha512-224": lambda: SHA512.new(truncate="224"),
    "sha512-256": lambda: SHA512.new(truncate="256"),
    "sha3-224": lambda: SHA3_224.new(),
    "sha3-256": lambda: SHA3_256.new(),
    "sha3-384": lambda: SHA3_384.new(),
    "sha3-512": lambda: SHA3_512.new(),
    "blake2b512": lambda: BLAKE2b.new(digest_bits=512),
    "blake2s256": lambda: BLAKE2s.new(digest_bits=256),
    "ripemd160": lambda: RIPEMD160.new(),
    "shake128": None,
    "shake256": None,
}

# BLAKE2 objects take keyword arguments only and cannot key an HMAC
_NO_HMAC = frozenset({"blake2b512", "blake2s256"})

# PyCryptodome ships the NIST prime curves only
_CURVES = frozenset(
    {Curve.PRIME192V1, Curve.SECP224R1, Curve.PRIME256V1, Curve.SECP384R1, Curve.SECP521R1}
)


class _Context:
    """Digest or HMAC context over a PyCryptodome hash object."""

    def __init__(self, ctx: Any, kind: str) -> None:
        self._ctx = ctx
        self._kind = kind
        self.digest_size: int = ctx.digest_size

    def update(self, data: bytes | bytearray | memoryview) -> None:
        with provider_call(f"Failed to update {self._kind}", PROVIDER_ERRORS):
            self._ctx.update(data)

    def finalize(self) -> bytes:
        with provider_call(f"Failed to finalize {self._kind}", PROVIDER_ERRORS):
            return self._ctx.digest()


class CryptodomeBackend:
    """Backend over PyCryptodome."""

    name = "cryptodome"

    def __repr__(self) -> str:
        return "CryptodomeBackend()"

    def _new_hash(self, algorithm: str) -> Any:
        if algorithm not in _DIGESTS:
            logger.debug("Digest algorithm '%s' not supported.", algorithm)
            raise UnsupportedError(f"Digest algorithm '{algorithm}' not supported.")
        factory = _DIGESTS[algorithm]
        if factory is None:
            raise BadInputError(f"Digest algorithm '{algorithm}' has no fixed output size")
        with provider_call(f"Failed to create {algorithm} context", PROVIDER_ERRORS):
            return factory()

    def digest_size(self, algorithm: str) -> int:
        if algorithm in _DIGESTS and _DIGESTS[algorithm] is None:
            return 0
        return self._new_hash(algorithm).digest_size

    def digest_context(self, algorithm: str) -> HashContext:
        return _Context(self._new_hash(algorithm), "Digest")

    def hmac_context(self, algorithm: str, key: bytes) -> HashContext:
        digestmod = self._new_hash(algorithm)
        if algorithm in _NO_HMAC:
            logger.debug("HMAC with '%s' not supported.", algorithm)
            raise UnsupportedError(f"HMAC with '{algorithm}' not supported.")
        with provider_call("Failed to initialize HMAC context", PROVIDER_ERRORS):
            ctx = HMAC.new(key, digestmod=digestmod)
        return _Context(ctx, "HMAC")

    def supports_curve(self, curve: Curve) -> bool:
        return curve in _CURVES

    def rsa_from_numbers(self, n: int, e: int) -> Any:
        with provider_call("Failed to create RSA key", PROVIDER_ERRORS):
            return RSA.construct((n, e))

    def rsa_to_numbers(self, key: Any) -> tuple[int, int]:
        return int(key.n), int(key.e)

    def rsa_key_size(self, key: Any) -> int:
        return key.size_in_bits()

    def rsa_generate(self, bits: int) -> Any:
        with provider_call(f"Failed to generate RSA key with {bits} bits", PROVIDER_ERRORS):
            return RSA.generate(bits, e=65537)

    def ec_from_point(self, curve: Curve, x: int, y: int) -> Any:
        with provider_call("Failed to create ECC key", PROVIDER_ERRORS):
            return ECC.construct(curve=curve.short_name, point_x=x, point_y=y)

    def ec_to_point(self, key: Any) -> tuple[Curve, int, int]:
        curve = Curve.from_name(key.curve)
        point = key.pointQ
        return curve, int(point.x), int(point.y)

    def ec_generate(self, curve: Curve) -> Any:
        with provider_call(f"Failed to generate ECC key on curve {curve.short_name}", PROVIDER_ERRORS):
            return ECC.generate(curve=curve.short_name)

    def public_of(self, key: Any) -> Any:
        if key.has_private():
            return key.public_key()
        return key

    def load_pem_public_key(self, data: bytes) -> tuple[KeyFamily, Any]:
        with provider_call("Failed to parse PEM", PROVIDER_ERRORS):
            der, _marker, _encrypted = PEM.decode(first_public_key_block(data).decode("ascii"))
            spki = DerSequence().decode(der)
            algorithm = DerSequence().decode(spki[0])
            oid = DerObjectId().decode(algorithm[0]).value

            if oid == OID_RSA_ENCRYPTION:
                return KeyFamily.RSA, RSA.import_key(der)
            if oid == OID_EC_PUBLIC_KEY:
                return KeyFamily.EC, ECC.import_key(der)
        raise UnsupportedError(f"Public key algorithm {oid} not supported")

    def public_key_pem(self, family: KeyFamily, key: Any) -> bytes:
        with provider_call("Unable to convert public key to PEM format", PROVIDER_ERRORS):
            pem = self.public_of(key).export_key(format="PEM")
        if isinstance(pem, str):
            pem = pem.encode("ascii")
        return pem if pem.endswith(b"\n") else pem + b"\n"

    def public_key_der(self, family: KeyFamily, key: Any) -> bytes:
        public = self.public_of(key)
        if family is KeyFamily.RSA:
            with provider_call("Unable to convert public key to DER format", PROVIDER_ERRORS):
                return DerSequence([int(public.n), int(public.e)]).encode()

        with provider_call("Unable to convert public key to DER format", PROVIDER_ERRORS):
            return public.export_key(format="SEC1")

    def rsa_encrypt_size(self, key: Any) -> int:
        return key.size_in_bytes()

    def rsa_encrypt(self, key: Any, data: bytes) -> bytes:
        with provider_call("Failed to encrypt with PKCS#1 padding", PROVIDER_ERRORS):
            return PKCS1_v1_5.new(self.public_of(key)).encrypt(data)

    def signature_size(self, family: KeyFamily, key: Any) -> int:
        if family is KeyFamily.RSA:
            return key.size_in_bytes()
        return ecdsa_der_max_size(Curve.from_name(key.curve).key_size)

    def sign(self, family: KeyFamily, key: Any, algorithm: str, data: bytes) -> bytes:
        digest = self._new_hash(algorithm)
        with provider_call("Failed to sign data", PROVIDER_ERRORS):
            digest.update(data)
            if family is KeyFamily.RSA:
                return pkcs1_15.new(key).sign(digest)
            return DSS.new(key, "fips-186-3", encoding="der").sign(digest)
