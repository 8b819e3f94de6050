# exceptions.py
# -*- coding: utf-8 -*-
"""Custom exception classes for the streamseal application."""

class StreamSealError(Exception):
    """Base class for application-specific errors."""
    pass

class EncryptionError(StreamSealError):
    """An AEAD seal or open failed (tampered data, wrong key, nonce or chunk size)."""
    pass

class FileAccessError(StreamSealError):
    """Error related to file or stream access (not found, permissions, I/O)."""
    pass

class ArgumentError(StreamSealError):
    """Error related to invalid arguments or configuration."""
    pass

class InvalidSizeError(StreamSealError):
    """A persisted secret does not have the exact expected length."""

    def __init__(self, name: str, expected: int, actual: int):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid size for persisted {name}: expected {expected} bytes, got {actual}."
        )
