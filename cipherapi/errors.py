"""
Typed errors raised by the cipher layer.

Each error carries an ErrorKind and a human-readable message. Translation to
HTTP status codes and the JSON error body happens only in main.py.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_KEY_LENGTH = "InvalidKeyLength"
    MODE_CONSTRUCTION = "ModeConstructionError"
    RANDOM_SOURCE = "RandomSourceError"
    INVALID_SETTING = "InvalidSetting"
    MISSING_FIELD = "MissingField"
    MALFORMED_INPUT = "MalformedInput"
    AUTHENTICATION_FAILED = "AuthenticationFailed"

    @property
    def status_code(self) -> int:
        if self in _CONFIGURATION_KINDS:
            return 500
        return 400


_CONFIGURATION_KINDS = {
    ErrorKind.INVALID_KEY_LENGTH,
    ErrorKind.MODE_CONSTRUCTION,
    ErrorKind.RANDOM_SOURCE,
    ErrorKind.INVALID_SETTING,
}


class CipherError(Exception):
    """Base error for the cipher layer."""
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class ConfigurationError(CipherError):
    """Bad key or setting, engine construction failure, or no random source. Fatal at startup."""


class ClientInputError(CipherError):
    """Missing field or envelope too short to open."""


class AuthenticationFailed(CipherError):
    def __init__(self, message: str = "message authentication failed"):
        super().__init__(ErrorKind.AUTHENTICATION_FAILED, message)
