"""Tests for the digest engine and the hex hash convenience."""

import hashlib
import hmac as stdlib_hmac
import logging

import pytest

from cryptutil import (
    BadInputError,
    CryptoConfig,
    CryptUtilError,
    ProviderDefect,
    ProviderError,
    UnsupportedError,
    available_backends,
    digest,
    digest_many,
    digest_size,
    get_backend,
    hex_hash,
    hmac,
    hmac_many,
    set_config,
)
from cryptutil.provider import CRYPTODOME_AVAILABLE, Backend, pending_errors
from cryptutil.testing import FaultyBackend

SHA256_EMPTY = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
FIXED_SIZE_ALGORITHMS = ["md5", "sha1", "sha224", "sha256", "sha384", "sha512", "sha3-256"]
HMAC_ALGORITHMS = FIXED_SIZE_ALGORITHMS + [
    "sha512-224",
    "sha512-256",
    "sha3-224",
    "sha3-384",
    "sha3-512",
    "blake2b512",
    "blake2s256",
    "ripemd160",
    "sm3",
]


class TestDigestSize:
    """Tests for digest_size()."""

    @pytest.mark.parametrize(
        ("algorithm", "size"),
        [("md5", 16), ("sha1", 20), ("sha256", 32), ("sha384", 48), ("sha512", 64)],
    )
    def test_known_sizes(self, backend: Backend, algorithm: str, size: int) -> None:
        """Test sizes of common fixed-size algorithms."""
        assert digest_size(algorithm, backend=backend) == size

    def test_aliases(self, backend: Backend) -> None:
        """Test that names are case-insensitive and common spellings fold."""
        for name in ("SHA256", "sha-256", "SHA2-256"):
            assert digest_size(name, backend=backend) == 32

    def test_unknown_algorithm(self, backend: Backend) -> None:
        """Test that unknown names fail explicitly."""
        with pytest.raises(UnsupportedError, match="not supported"):
            digest_size("no-such-digest", backend=backend)

    def test_variable_length_algorithm_rejected(self, backend: Backend) -> None:
        """Test that variable-length digests report a zero size as an error."""
        with pytest.raises(BadInputError):
            digest_size("shake128", backend=backend)

    def test_bad_input_is_provider_error(self) -> None:
        """Test that BadInputError is an I/O-kind provider error."""
        assert issubclass(BadInputError, ProviderError)

    def test_default_backend(self) -> None:
        """Test that the active backend is used when none is given."""
        assert digest_size("sha256") == 32


class TestDigestMany:
    """Tests for digest_many()."""

    def test_empty_input(self, backend: Backend) -> None:
        """Test that no buffers yields the digest of the empty string."""
        result = digest_many("sha256", [], backend=backend)
        assert len(result) == 32
        assert result.hex() == SHA256_EMPTY

    def test_empty_buffers(self, backend: Backend) -> None:
        """Test that empty buffers do not change the digest."""
        assert digest_many("sha256", [b"", b""], backend=backend).hex() == SHA256_EMPTY

    def test_scattered_equals_concatenated(self, backend: Backend) -> None:
        """Test that buffers are hashed as their concatenation, in order."""
        parts = [b"disk", b"-", b"encryption", b"-key"]
        assert digest_many("sha256", parts, backend=backend) == hashlib.sha256(
            b"".join(parts)
        ).digest()
        assert digest_many("sha256", list(reversed(parts)), backend=backend) != hashlib.sha256(
            b"".join(parts)
        ).digest()

    @pytest.mark.parametrize("algorithm", FIXED_SIZE_ALGORITHMS)
    def test_size_matches_digest_size(self, backend: Backend, algorithm: str) -> None:
        """Test that output length always equals digest_size()."""
        expected = digest_size(algorithm, backend=backend)
        for data in ([], [b"x"], [b"a" * 1000, b"b" * 3]):
            assert len(digest_many(algorithm, data, backend=backend)) == expected

    @pytest.mark.parametrize("algorithm", FIXED_SIZE_ALGORITHMS)
    def test_matches_hashlib(self, backend: Backend, algorithm: str) -> None:
        """Test results against the standard library."""
        data = [b"update-image", b"\x00\x01\x02"]
        expected = hashlib.new(algorithm.replace("-", "_"), b"".join(data)).digest()
        assert digest_many(algorithm, data, backend=backend) == expected

    def test_accepts_bytes_like_and_generators(self, backend: Backend) -> None:
        """Test bytearray, memoryview and generator input."""
        chunks = (c for c in [bytearray(b"abc"), memoryview(b"def")])
        assert digest_many("sha1", chunks, backend=backend) == hashlib.sha1(b"abcdef").digest()

    def test_unknown_algorithm(self, backend: Backend) -> None:
        """Test that unknown algorithms fail before hashing."""
        with pytest.raises(UnsupportedError):
            digest_many("no-such-digest", [b"data"], backend=backend)

    def test_single_buffer_wrapper(self, backend: Backend) -> None:
        """Test digest() over one buffer."""
        assert digest("sha256", b"", backend=backend).hex() == SHA256_EMPTY

    def test_provider_failure_is_drained(
        self, backend: Backend, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a failing update surfaces as ProviderError with diagnostics logged."""
        caplog.set_level(logging.DEBUG, logger="cryptutil")
        faulty = FaultyBackend(backend, fail={"digest_context"})

        with pytest.raises(ProviderError, match="Injected failure in digest_context"):
            digest_many("sha256", [b"data"], backend=faulty)

        assert "Injected failure in digest_context: ValueError: digest_context failed" in caplog.text

    def test_oversized_output_is_a_defect(self, backend: Backend) -> None:
        """Test that output longer than the reported size is not a typed error."""
        faulty = FaultyBackend(backend, oversize={"finalize"})
        with pytest.raises(ProviderDefect):
            digest_many("sha256", [b"data"], backend=faulty)
        assert not issubclass(ProviderDefect, CryptUtilError)


class TestHmacMany:
    """Tests for hmac_many()."""

    def test_rfc4231_case_2(self, backend: Backend) -> None:
        """Test HMAC-SHA256 against RFC 4231 test case 2."""
        result = hmac_many("sha256", b"Jefe", [b"what do ya want ", b"for nothing?"], backend=backend)
        assert result.hex() == (
            "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"
        )

    @pytest.mark.parametrize("algorithm", ["sha1", "sha256", "sha512"])
    def test_matches_stdlib(self, backend: Backend, algorithm: str) -> None:
        """Test results and sizes against the standard library."""
        key = b"k" * 100
        data = [b"first", b"", b"second"]
        expected = stdlib_hmac.new(key, b"".join(data), algorithm).digest()
        result = hmac_many(algorithm, key, data, backend=backend)
        assert result == expected
        assert len(result) == digest_size(algorithm, backend=backend)

    def test_empty_data(self, backend: Backend) -> None:
        """Test HMAC over no buffers."""
        expected = stdlib_hmac.new(b"key", b"", "sha256").digest()
        assert hmac_many("sha256", b"key", [], backend=backend) == expected

    def test_empty_key_never_returns_empty_result(self, backend: Backend) -> None:
        """Test that an empty key either fails or yields a full-size MAC."""
        try:
            result = hmac_many("sha256", b"", [b"data"], backend=backend)
        except CryptUtilError:
            return
        assert len(result) == 32

    def test_unknown_algorithm(self, backend: Backend) -> None:
        """Test that unknown algorithms fail explicitly."""
        with pytest.raises(UnsupportedError):
            hmac_many("no-such-digest", b"key", [b"data"], backend=backend)

    @pytest.mark.parametrize("algorithm", HMAC_ALGORITHMS)
    def test_every_digest_keys_or_is_unsupported(self, backend: Backend, algorithm: str) -> None:
        """Test that an unusable digest is reported as unsupported, never as a failure."""
        try:
            result = hmac_many(algorithm, b"key", [b"data"], backend=backend)
        except UnsupportedError:
            assert pending_errors() == 0
            return
        assert len(result) == digest_size(algorithm, backend=backend)

    @pytest.mark.skipif(not CRYPTODOME_AVAILABLE, reason="needs PyCryptodome")
    @pytest.mark.parametrize("algorithm", ["blake2b512", "blake2s256"])
    def test_blake2_unsupported_on_cryptodome(self, algorithm: str) -> None:
        """Test that BLAKE2, which PyCryptodome cannot key, is unsupported for HMAC."""
        backend = get_backend("cryptodome")
        assert digest_size(algorithm, backend=backend) > 0

        with pytest.raises(UnsupportedError, match=f"HMAC with '{algorithm}' not supported"):
            hmac_many(algorithm, b"key", [b"data"], backend=backend)

    def test_single_buffer_wrapper(self, backend: Backend) -> None:
        """Test hmac() over one buffer."""
        expected = stdlib_hmac.new(b"key", b"data", "sha256").digest()
        assert hmac("sha256", b"key", b"data", backend=backend) == expected

    def test_oversized_output_is_a_defect(self, backend: Backend) -> None:
        """Test that a MAC longer than the context reported raises ProviderDefect."""
        faulty = FaultyBackend(backend, oversize={"finalize"})
        with pytest.raises(ProviderDefect):
            hmac_many("sha256", b"key", [b"data"], backend=faulty)


class TestHexHash:
    """Tests for hex_hash()."""

    def test_empty_string(self, backend: Backend) -> None:
        """Test the well-known SHA-256 of the empty string."""
        assert hex_hash(b"", "sha256", backend=backend) == SHA256_EMPTY

    def test_str_is_utf8(self, backend: Backend) -> None:
        """Test that strings are hashed as UTF-8 and output is lowercase hex."""
        result = hex_hash("grüße", "sha256", backend=backend)
        assert result == hashlib.sha256("grüße".encode()).hexdigest()
        assert result == result.lower()

    def test_requires_provider_hashing(self) -> None:
        """Test that hex_hash() is unavailable when provider hashing is not preferred."""
        set_config(CryptoConfig(prefer_provider_hashing=False))
        with pytest.raises(UnsupportedError):
            hex_hash(b"data", "sha256")


@pytest.mark.skipif(len(available_backends()) < 2, reason="needs both backends")
class TestBackendsAgree:
    """Tests that both backends produce identical digests."""

    @pytest.mark.parametrize("algorithm", FIXED_SIZE_ALGORITHMS + ["sha512-256", "sha3-512"])
    def test_digests_agree(self, algorithm: str) -> None:
        """Test digest_many() across backends."""
        data = [b"abc", b"\xff" * 200]
        results = {
            digest_many(algorithm, data, backend=get_backend(name)) for name in available_backends()
        }
        assert len(results) == 1

    def test_hmacs_agree(self) -> None:
        """Test hmac_many() across backends."""
        results = {
            hmac_many("sha384", b"secret", [b"a", b"b"], backend=get_backend(name))
            for name in available_backends()
        }
        assert len(results) == 1

    @pytest.mark.parametrize("algorithm", HMAC_ALGORITHMS)
    def test_hmac_outcomes_agree(self, algorithm: str) -> None:
        """Test that backends keying the same digest produce the same MAC."""
        results = set()
        for name in available_backends():
            try:
                results.add(hmac_many(algorithm, b"secret", [b"data"], backend=get_backend(name)))
            except UnsupportedError:
                continue
        assert len(results) <= 1
