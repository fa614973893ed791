"""
AES-GCM encryption for CipherAPI.

The key is generated fresh at process start and never leaves the process.
A new random nonce is drawn for every seal and prepended to the ciphertext;
open splits it back off. Envelope layout:

    nonce (12 bytes) | ciphertext | tag (16 bytes)
"""

import os
import logging

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationFailed, ClientInputError, ConfigurationError, ErrorKind

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZES = (16, 24, 32)


def make_keyphrase(size: int) -> bytes:
    """Return `size` bytes from the OS secure random source."""
    if size <= 0:
        raise ConfigurationError(ErrorKind.INVALID_KEY_LENGTH, f"Keyphrase size must be positive, got {size}")
    return _random_bytes(size)


def _random_bytes(size: int) -> bytes:
    try:
        return os.urandom(size)
    except (NotImplementedError, OSError) as e:
        raise ConfigurationError(ErrorKind.RANDOM_SOURCE, f"Could not read from the secure random source: {e}") from e


class CipherContext:
    """AES-GCM engine bound to a single key.

    Immutable after construction, so one instance is shared by every request.
    """

    def __init__(self, key: bytes):
        if not isinstance(key, (bytes, bytearray)):
            raise ConfigurationError(ErrorKind.INVALID_KEY_LENGTH, "Key must be a byte sequence")
        if len(key) not in KEY_SIZES:
            raise ConfigurationError(
                ErrorKind.INVALID_KEY_LENGTH,
                f"Key must be 16, 24 or 32 bytes, got {len(key)}"
            )

        try:
            self._aesgcm = AESGCM(bytes(key))
        except (ValueError, UnsupportedAlgorithm) as e:
            raise ConfigurationError(ErrorKind.MODE_CONSTRUCTION, f"Could not create AES-GCM engine: {e}") from e

        self.key_size = len(key)

        # Probe the random source now so a broken one fails at startup, not mid-request.
        # The probe is discarded; every seal draws its own nonce.
        self.new_nonce()

    @property
    def nonce_size(self) -> int:
        return NONCE_SIZE

    @property
    def tag_size(self) -> int:
        return TAG_SIZE

    @property
    def algorithm(self) -> str:
        return f"AES-{self.key_size * 8}-GCM"

    @property
    def overhead(self) -> int:
        """Bytes an envelope adds on top of the plaintext."""
        return NONCE_SIZE + TAG_SIZE

    def new_nonce(self) -> bytes:
        return _random_bytes(NONCE_SIZE)

    def seal(self, plaintext: bytes) -> bytes:
        """Encrypt bytes. Returns nonce (12 bytes) + ciphertext + tag (16 bytes)."""
        nonce = self.new_nonce()
        return nonce + self._aesgcm.encrypt(nonce, bytes(plaintext), None)

    def open(self, envelope: bytes) -> bytes:
        """Decrypt a nonce-prefixed envelope back to the original bytes."""
        if len(envelope) < self.overhead:
            raise ClientInputError(
                ErrorKind.MALFORMED_INPUT,
                f"message authentication failed: encrypted text must be at least "
                f"{self.overhead} bytes, got {len(envelope)}"
            )
        nonce = bytes(envelope[:NONCE_SIZE])
        payload = bytes(envelope[NONCE_SIZE:])
        try:
            return self._aesgcm.decrypt(nonce, payload, None)
        except InvalidTag as e:
            raise AuthenticationFailed() from e

    def __repr__(self) -> str:
        return f"<CipherContext {self.algorithm}>"


def new_context(key_size: int = 32) -> CipherContext:
    """Generate a fresh key and wrap it in a CipherContext."""
    context = CipherContext(make_keyphrase(key_size))
    logger.info("Generated a new %s key for this process", context.algorithm)
    return context
