# crypto_logic.py
# -*- coding: utf-8 -*-
"""Core cryptographic primitives: frame nonce derivation, frame seal/open, secret generation."""

import os
import logging
from Crypto.Cipher import ChaCha20_Poly1305

from ..utils.constants import (
    NONCE_BYTES,
    TAG_BYTES,
    NONCE_PREFIX_BYTES,
    COUNTER_BYTES,
    MAX_FRAMES,
    LAST_FRAME_FLAG,
    INTERIOR_FRAME_FLAG,
)
from ..utils.exceptions import EncryptionError, ArgumentError

logger = logging.getLogger(__name__)

def generate_secret(size: int) -> bytes:
    """Generates `size` cryptographically secure random bytes."""
    return os.urandom(size)

def wipe(buffer: bytearray) -> None:
    """Overwrites a mutable secret buffer with zeros in place."""
    for i in range(len(buffer)):
        buffer[i] = 0

def derive_frame_nonce(base_nonce: bytes, counter: int, is_last: bool) -> bytes:
    """
    Derives the per-frame XChaCha20 nonce.

    Layout: the first 19 bytes of the base nonce, the frame counter as a
    4-byte big-endian integer, then one flag byte (1 for the terminal frame,
    0 otherwise). For a fixed base nonce the mapping is injective in
    (counter, is_last).

    Args:
        base_nonce: The 24-byte base nonce of the key material.
        counter: Zero-based frame index within the session.
        is_last: Whether this is the terminal frame.

    Returns:
        The 24-byte nonce for this frame.

    Raises:
        ArgumentError: If base_nonce is not NONCE_BYTES long.
        EncryptionError: If the counter is outside the 32-bit range.
    """
    if len(base_nonce) != NONCE_BYTES:
        raise ArgumentError(f"Invalid base nonce length. Expected {NONCE_BYTES}, got {len(base_nonce)}.")
    if not 0 <= counter < MAX_FRAMES:
        raise EncryptionError(f"Frame counter {counter} exceeds the {MAX_FRAMES} frame limit of a stream.")
    flag = LAST_FRAME_FLAG if is_last else INTERIOR_FRAME_FLAG
    return bytes(base_nonce[:NONCE_PREFIX_BYTES]) + counter.to_bytes(COUNTER_BYTES, "big") + bytes([flag])

def seal_frame(key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
    """
    Encrypts and authenticates one chunk with XChaCha20-Poly1305.

    Returns:
        The ciphertext followed by the TAG_BYTES authentication tag.

    Raises:
        EncryptionError: If the underlying cipher rejects the key or nonce.
    """
    try:
        cipher = ChaCha20_Poly1305.new(key=key, nonce=nonce)
        ciphertext, tag = cipher.encrypt_and_digest(plaintext)
    except (ValueError, TypeError) as e:
        msg = f"Frame encryption failed: {e}"
        logger.error(msg)
        raise EncryptionError(msg) from e
    return ciphertext + tag

def open_frame(key: bytes, nonce: bytes, frame: bytes) -> bytes:
    """
    Verifies and decrypts one sealed frame (ciphertext + tag).

    Raises:
        EncryptionError: If the frame is too short to hold a tag or the
            tag does not verify (tampering, wrong key, wrong position).
    """
    if len(frame) < TAG_BYTES:
        raise EncryptionError(f"Sealed frame too short: {len(frame)} bytes, need at least {TAG_BYTES}.")
    ciphertext, tag = frame[:-TAG_BYTES], frame[-TAG_BYTES:]
    try:
        cipher = ChaCha20_Poly1305.new(key=key, nonce=nonce)
        return cipher.decrypt_and_verify(ciphertext, tag)
    except (ValueError, TypeError) as e:
        # pycryptodome signals a MAC mismatch with ValueError
        raise EncryptionError("MAC check failed: incorrect key or data corrupted.") from e
