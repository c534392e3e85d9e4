"""Custom exception hierarchy for cryptutil.

Every failure of a cryptutil operation is reported as one of the typed
exceptions below, so callers can branch on the kind of failure without
parsing messages. Provider diagnostics (the drained provider error queue)
are written to the log, never embedded in the exception.

Exception Hierarchy:
    CryptUtilError (base)
    ├── UnsupportedError
    ├── ProviderError
    │   └── BadInputError
    ├── OutOfMemoryError
    └── WrongKeyTypeError

    ProviderDefect (RuntimeError, outside the hierarchy)

Security Note:
    Messages never include key material, plaintext or digests.
"""

from __future__ import annotations


class CryptUtilError(Exception):
    """Base exception for all cryptutil errors.

    All typed errors raised by cryptutil inherit from this class,
    making it easy to catch all library-specific errors.
    """


class UnsupportedError(CryptUtilError):
    """Requested algorithm, curve or key type is not available.

    Expected under minimal provider builds. Callers should treat this as
    a capability check rather than a failure of the provider.
    """

    def __init__(self, message: str = "Operation not supported by the provider") -> None:
        super().__init__(message)


class ProviderError(CryptUtilError):
    """A provider call failed.

    Covers malformed input, points not on the curve, padding failures and
    internal provider faults. The provider's own error records have been
    drained to the log at DEBUG level before this is raised.
    """

    def __init__(self, message: str = "Provider operation failed") -> None:
        super().__init__(message)


class BadInputError(ProviderError):
    """Cryptographic material with a structurally impossible size.

    Raised for digests reporting a zero size and for RSA keys too short to
    derive a symmetric key from.
    """


class OutOfMemoryError(CryptUtilError):
    """Allocation failed while sizing or filling an output buffer.

    Kept apart from ProviderError so callers can apply a different
    retry policy.
    """

    def __init__(self, message: str = "Out of memory") -> None:
        super().__init__(message)


class WrongKeyTypeError(CryptUtilError):
    """A key handle of the wrong family or kind was passed.

    Raised when an RSA key is required but an EC key was given (or the
    other way around), and when a private key is required but the handle
    only holds a public key.
    """

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} key, got {actual} key")


class ProviderDefect(RuntimeError):
    """The provider broke its own size contract.

    Raised when an output is longer than the size the provider reported
    for it beforehand. This is a defect in the provider or in cryptutil,
    not an error callers are expected to handle.
    """
