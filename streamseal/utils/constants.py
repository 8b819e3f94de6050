# constants.py
# -*- coding: utf-8 -*-
"""Defines constants used throughout the streamseal application."""

# --- XChaCha20-Poly1305 Parameters ---
KEY_BYTES: int = 32     # XChaCha20 key size in bytes
NONCE_BYTES: int = 24   # Extended nonce size (192 bits)
TAG_BYTES: int = 16     # Poly1305 authentication tag size (128 bits)

# --- Frame Nonce Layout ---
# nonce = base_nonce[:NONCE_PREFIX_BYTES] || counter (big-endian) || last flag
NONCE_PREFIX_BYTES: int = 19
COUNTER_BYTES: int = 4
MAX_FRAMES: int = 2 ** (8 * COUNTER_BYTES)  # Counter width caps a session at 2^32 frames
LAST_FRAME_FLAG: int = 0x01
INTERIOR_FRAME_FLAG: int = 0x00

# --- File I/O ---
DEFAULT_CHUNK_SIZE: int = 64 * 1024  # 64 KB plaintext per interior frame

# --- Persisted Key Material ---
DEFAULT_KEY_DIR: str = ".streamseal"
KEY_LOCATION: str = "key"
NONCE_LOCATION: str = "nonce"
SECRET_FILE_MODE: int = 0o600
KEY_DIR_MODE: int = 0o700

# --- Exit Codes ---
EXIT_SUCCESS: int = 0        # Operation completed successfully
EXIT_GENERIC_ERROR: int = 1  # Generic or unexpected runtime error
EXIT_FILE_ERROR: int = 2     # File access/IO error (e.g., not found, permission denied)
EXIT_AUTH_ERROR: int = 3     # Frame authentication failed (tampered data, wrong key or chunk size)
EXIT_ARG_ERROR: int = 4      # Invalid arguments or malformed key material
EXIT_INTERRUPT: int = 130    # Process interrupted by user (commonly Ctrl+C -> SIGINT)
