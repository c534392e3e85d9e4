"""Runtime configuration for cryptutil.

Configuration is read once from the environment on first use and can be
replaced programmatically with set_config():

    CRYPTUTIL_BACKEND                  "cryptography", "cryptodome" or unset (auto)
    CRYPTUTIL_ERROR_BUFFER_SIZE        bound for one rendered provider error (>= 256)
    CRYPTUTIL_PREFER_PROVIDER_HASHING  "1"/"0"; enables hex_hash()
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

BACKEND_NAMES = ("cryptography", "cryptodome")

# The provider documents 256 bytes as the minimum for a rendered error string
MIN_ERROR_BUFFER_SIZE = 256
DEFAULT_ERROR_BUFFER_SIZE = 512

ENV_BACKEND = "CRYPTUTIL_BACKEND"
ENV_ERROR_BUFFER_SIZE = "CRYPTUTIL_ERROR_BUFFER_SIZE"
ENV_PREFER_PROVIDER_HASHING = "CRYPTUTIL_PREFER_PROVIDER_HASHING"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class CryptoConfig:
    """Configuration for provider selection and diagnostics.

    Attributes:
        backend: Provider backend name, or None to pick the best available
        error_buffer_size: Maximum size of one rendered provider error record
        prefer_provider_hashing: Whether this layer is the preferred hashing
            backend (hex_hash() is only available when it is)
    """

    backend: str | None = None
    error_buffer_size: int = DEFAULT_ERROR_BUFFER_SIZE
    prefer_provider_hashing: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.backend is not None and self.backend not in BACKEND_NAMES:
            raise ValueError(
                f"Unknown backend {self.backend!r}, expected one of {', '.join(BACKEND_NAMES)}"
            )
        if self.error_buffer_size < MIN_ERROR_BUFFER_SIZE:
            raise ValueError(
                f"Error buffer size must be at least {MIN_ERROR_BUFFER_SIZE} bytes, "
                f"got {self.error_buffer_size}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CryptoConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            CryptoConfig with unset variables left at their defaults

        Raises:
            ValueError: If a variable is set to a malformed value
        """
        if environ is None:
            environ = os.environ

        backend = environ.get(ENV_BACKEND, "").strip().lower() or None

        buffer_size = DEFAULT_ERROR_BUFFER_SIZE
        raw_size = environ.get(ENV_ERROR_BUFFER_SIZE, "").strip()
        if raw_size:
            try:
                buffer_size = int(raw_size)
            except ValueError as exc:
                raise ValueError(f"{ENV_ERROR_BUFFER_SIZE} must be an integer") from exc

        prefer_hashing = True
        raw_prefer = environ.get(ENV_PREFER_PROVIDER_HASHING, "").strip().lower()
        if raw_prefer:
            if raw_prefer in _TRUE_VALUES:
                prefer_hashing = True
            elif raw_prefer in _FALSE_VALUES:
                prefer_hashing = False
            else:
                raise ValueError(f"{ENV_PREFER_PROVIDER_HASHING} must be a boolean")

        return cls(
            backend=backend,
            error_buffer_size=buffer_size,
            prefer_provider_hashing=prefer_hashing,
        )


_config: CryptoConfig | None = None


def get_config() -> CryptoConfig:
    """Return the active configuration, loading it from the environment once."""
    global _config
    if _config is None:
        _config = CryptoConfig.from_env()
    return _config


def set_config(config: CryptoConfig | None) -> None:
    """Replace the active configuration.

    Passing None discards it, so the next get_config() call reads the
    environment again.
    """
    global _config
    _config = config
