"""Key handles.

A key handle pairs a provider-native key object with the backend that
created it, tagged by family and by whether it holds a private key:

    RsaPublicKey | EcPublicKey | RsaKeyPair | EcKeyPair

Operations that need a particular family or a private key check the tag
and raise WrongKeyTypeError on mismatch. Handles never expose private
components; a key pair can only be used for signing or be reduced to its
public half.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, TypeAlias

from .algorithms import KeyFamily
from .exceptions import WrongKeyTypeError

if TYPE_CHECKING:
    from .provider import Backend


@dataclass(frozen=True, eq=False)
class KeyHandle:
    """Base class for key handles.

    Attributes:
        native: Provider-native key object
        backend: Backend that created ``native``; every operation on the
            handle goes through it
    """

    native: Any = field(repr=False)
    backend: Backend

    family: ClassVar[KeyFamily]
    has_private_key: ClassVar[bool] = False

    def public_key(self) -> RsaPublicKey | EcPublicKey:
        """Return the public half of this key."""
        public_class = RsaPublicKey if self.family is KeyFamily.RSA else EcPublicKey
        if isinstance(self, public_class):
            return self
        return public_class(self.backend.public_of(self.native), self.backend)


class RsaPublicKey(KeyHandle):
    """Public RSA key."""

    family = KeyFamily.RSA


class EcPublicKey(KeyHandle):
    """Public elliptic-curve key."""

    family = KeyFamily.EC


class RsaKeyPair(KeyHandle):
    """Freshly generated RSA key pair."""

    family = KeyFamily.RSA
    has_private_key = True


class EcKeyPair(KeyHandle):
    """Freshly generated elliptic-curve key pair."""

    family = KeyFamily.EC
    has_private_key = True


PublicKeyHandle: TypeAlias = RsaPublicKey | EcPublicKey
KeyPairHandle: TypeAlias = RsaKeyPair | EcKeyPair
AnyKeyHandle: TypeAlias = RsaPublicKey | EcPublicKey | RsaKeyPair | EcKeyPair


def _describe(key: KeyHandle) -> str:
    kind = "private" if key.has_private_key else "public"
    return f"{key.family.display_name} {kind}"


def require_family(key: KeyHandle, family: KeyFamily) -> None:
    """Check that ``key`` belongs to ``family``.

    Raises:
        TypeError: If ``key`` is not a key handle at all
        WrongKeyTypeError: If the key belongs to another family
    """
    if not isinstance(key, KeyHandle):
        raise TypeError(f"Expected a key handle, got {type(key).__name__}")
    if key.family is not family:
        raise WrongKeyTypeError(family.display_name, _describe(key))


def require_private(key: KeyHandle) -> None:
    """Check that ``key`` holds a private key.

    Raises:
        TypeError: If ``key`` is not a key handle at all
        WrongKeyTypeError: If the handle only holds a public key
    """
    if not isinstance(key, KeyHandle):
        raise TypeError(f"Expected a key handle, got {type(key).__name__}")
    if not key.has_private_key:
        raise WrongKeyTypeError(f"{key.family.display_name} private", _describe(key))
