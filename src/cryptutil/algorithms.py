"""Algorithm identifiers shared by every provider backend.

Curves are identified by the provider's numeric identifiers (NIDs), which
is the canonical identifier space callers see. One provider generation
addresses curves by short name instead; Curve translates both ways.

Digest algorithms are identified by name. Names are case-insensitive and
a handful of common spellings are folded onto one canonical name before
a backend resolves them.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from .exceptions import UnsupportedError


class KeyFamily(Enum):
    """Asymmetric key algorithm families handled by cryptutil."""

    RSA = "rsa"
    EC = "ec"

    @property
    def display_name(self) -> str:
        """Human-readable family name."""
        return "RSA" if self is KeyFamily.RSA else "EC"


class Curve(IntEnum):
    """Named elliptic curves, valued by their provider NID."""

    PRIME192V1 = 409
    PRIME256V1 = 415
    SECP224R1 = 713
    SECP256K1 = 714
    SECP384R1 = 715
    SECP521R1 = 716

    @property
    def short_name(self) -> str:
        """Canonical provider short name (e.g. "prime256v1")."""
        return _CURVE_NAMES[self][0]

    @property
    def aliases(self) -> tuple[str, ...]:
        """All names this curve is known by, short name first."""
        return _CURVE_NAMES[self]

    @property
    def key_size(self) -> int:
        """Size of the curve order in bits."""
        return _CURVE_BITS[self]

    @classmethod
    def from_id(cls, curve_id: int) -> Curve:
        """Look up a curve by its numeric identifier.

        Raises:
            UnsupportedError: If the identifier names no known curve
        """
        try:
            return cls(curve_id)
        except ValueError:
            raise UnsupportedError(f"ECC curve id {curve_id} not supported") from None

    @classmethod
    def from_name(cls, name: str) -> Curve:
        """Look up a curve by short name or alias.

        Matching ignores case, so "P-256", "secp256r1" and "prime256v1"
        all resolve to PRIME256V1.

        Raises:
            UnsupportedError: If the name matches no known curve
        """
        curve = _CURVE_BY_NAME.get(name.strip().lower())
        if curve is None:
            raise UnsupportedError(f"ECC curve '{name}' not supported")
        return curve


_CURVE_NAMES: dict[Curve, tuple[str, ...]] = {
    Curve.PRIME192V1: ("prime192v1", "secp192r1", "P-192", "NIST P-192", "p192"),
    Curve.PRIME256V1: ("prime256v1", "secp256r1", "P-256", "NIST P-256", "p256"),
    Curve.SECP224R1: ("secp224r1", "prime224v1", "P-224", "NIST P-224", "p224"),
    Curve.SECP256K1: ("secp256k1",),
    Curve.SECP384R1: ("secp384r1", "prime384v1", "P-384", "NIST P-384", "p384"),
    Curve.SECP521R1: ("secp521r1", "prime521v1", "P-521", "NIST P-521", "p521"),
}

_CURVE_BITS: dict[Curve, int] = {
    Curve.PRIME192V1: 192,
    Curve.PRIME256V1: 256,
    Curve.SECP224R1: 224,
    Curve.SECP256K1: 256,
    Curve.SECP384R1: 384,
    Curve.SECP521R1: 521,
}

_CURVE_BY_NAME: dict[str, Curve] = {
    alias.lower(): curve for curve, names in _CURVE_NAMES.items() for alias in names
}


# Digests whose output length is chosen by the caller; digest_size() rejects them
VARIABLE_LENGTH_DIGESTS = frozenset({"shake128", "shake256"})

_SHA2_SHA3 = frozenset(
    {
        "sha224",
        "sha256",
        "sha384",
        "sha512",
        "sha512-224",
        "sha512-256",
        "sha3-224",
        "sha3-256",
        "sha3-384",
        "sha3-512",
    }
)

# Digests each signature scheme accepts in every backend: PKCS#1 v1.5 needs
# a DigestInfo encoding, ECDSA a FIPS 186 approved hash
SIGNATURE_DIGESTS: dict[KeyFamily, frozenset[str]] = {
    KeyFamily.RSA: _SHA2_SHA3 | {"md5", "sha1"},
    KeyFamily.EC: _SHA2_SHA3,
}

_DIGEST_ALIASES: dict[str, str] = {
    "sha-1": "sha1",
    "sha-224": "sha224",
    "sha2-224": "sha224",
    "sha-256": "sha256",
    "sha2-256": "sha256",
    "sha-384": "sha384",
    "sha2-384": "sha384",
    "sha-512": "sha512",
    "sha2-512": "sha512",
    "sha512/224": "sha512-224",
    "sha2-512/224": "sha512-224",
    "sha-512/224": "sha512-224",
    "sha512/256": "sha512-256",
    "sha2-512/256": "sha512-256",
    "sha-512/256": "sha512-256",
    "blake2b-512": "blake2b512",
    "blake2s-256": "blake2s256",
    "ripemd": "ripemd160",
    "ripemd-160": "ripemd160",
    "rmd160": "ripemd160",
    "shake-128": "shake128",
    "shake-256": "shake256",
}


def canonical_digest_name(algorithm: str) -> str:
    """Fold a digest algorithm name onto its canonical spelling.

    Unknown names are returned lower-cased; whether they resolve is up
    to the backend.
    """
    name = algorithm.strip().lower()
    return _DIGEST_ALIASES.get(name, name)
