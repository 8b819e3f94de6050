# streamseal/core/cipher_engine.py
# -*- coding: utf-8 -*-
"""
Chunked XChaCha20-Poly1305 stream cipher.

A stream is split into `chunk_size` plaintext chunks, each sealed as an
independent frame (ciphertext + 16-byte tag). The frame nonce binds the
frame's position and whether it is the terminal frame. A read shorter than
`chunk_size` (possibly empty) is always sealed as the terminal frame, so a
stream whose length is an exact multiple of `chunk_size` ends with an extra
empty frame. Frames carry no length prefix: the decryptor must use the same
chunk size as the encryptor.
"""

import logging
from typing import BinaryIO, Callable

from .crypto_logic import derive_frame_nonce, seal_frame, open_frame
from .key_material import KeyMaterial
from ..utils.constants import DEFAULT_CHUNK_SIZE, TAG_BYTES
from ..utils.exceptions import ArgumentError, EncryptionError, FileAccessError

logger = logging.getLogger(__name__)


def frame_count(plaintext_len: int, chunk_size: int) -> int:
    """Number of frames `encrypt` emits for `plaintext_len` bytes."""
    return plaintext_len // chunk_size + 1


def sealed_size(plaintext_len: int, chunk_size: int) -> int:
    """Total ciphertext length `encrypt` emits for `plaintext_len` bytes."""
    return plaintext_len + frame_count(plaintext_len, chunk_size) * TAG_BYTES


def _read_up_to(stream: BinaryIO, size: int) -> bytes:
    """Reads until `size` bytes are collected or the stream hits EOF."""
    data = stream.read(size)
    if data is None:
        data = b''
    if len(data) == size or not data:
        return data
    parts = [data]
    remaining = size - len(data)
    while remaining:
        more = stream.read(remaining)
        if not more:
            break
        parts.append(more)
        remaining -= len(more)
    return b''.join(parts)


class StreamCipher:
    """
    Encrypts or decrypts byte streams frame by frame.

    One instance must not be used from several threads at once; each
    `encrypt`/`decrypt` call runs its own frame counter from zero.
    """

    def __init__(self, key_material: KeyMaterial, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ArgumentError(f"Chunk size must be a positive integer, got {chunk_size!r}.")
        self.key_material = key_material
        self.chunk_size = chunk_size

    def __enter__(self) -> "StreamCipher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.key_material.wipe()

    def encrypt(
        self,
        input_stream: BinaryIO,
        output_sink: BinaryIO,
        *,
        progress_callback: Callable[[int], None] | None = None
    ) -> int:
        """
        Seals `input_stream` into `output_sink` as a sequence of frames.

        Args:
            input_stream: Readable binary stream of plaintext.
            output_sink: Writable binary stream receiving sealed frames.
            progress_callback: Called after each frame with the cumulative
                number of plaintext bytes consumed.

        Returns:
            The number of frames written (terminal frame included).

        Raises:
            EncryptionError: If sealing fails or the stream exceeds 2^32 frames.
            FileAccessError: If reading, writing or flushing fails.
        """
        key = self.key_material.key
        base_nonce = self.key_material.base_nonce
        counter = 0
        consumed = 0
        logger.debug(f"Starting frame encryption with chunk size {self.chunk_size}.")

        try:
            while True:
                chunk = _read_up_to(input_stream, self.chunk_size)
                is_last = len(chunk) < self.chunk_size
                nonce = derive_frame_nonce(base_nonce, counter, is_last)
                output_sink.write(seal_frame(key, nonce, chunk))
                counter += 1
                consumed += len(chunk)
                if progress_callback:
                    progress_callback(consumed)
                if is_last:
                    break
            output_sink.flush()
        except OSError as e:
            msg = f"Stream I/O error during encryption after {counter} frames: {e}"
            logger.error(msg, exc_info=True)
            raise FileAccessError(msg) from e

        logger.info(f"Encrypted {consumed} bytes into {counter} frames.")
        return counter

    def decrypt(
        self,
        input_stream: BinaryIO,
        output_sink: BinaryIO,
        *,
        progress_callback: Callable[[int], None] | None = None
    ) -> int:
        """
        Opens the frames in `input_stream` and writes the plaintext to `output_sink`.

        Plaintext of frames that verified before a failure has already been
        written; on any error the caller must discard the whole output.

        Args:
            input_stream: Readable binary stream of sealed frames.
            output_sink: Writable binary stream receiving plaintext.
            progress_callback: Called after each frame with the cumulative
                number of sealed bytes consumed.

        Returns:
            The number of frames opened (terminal frame included).

        Raises:
            EncryptionError: If any frame fails authentication.
            FileAccessError: If reading, writing or flushing fails.
        """
        key = self.key_material.key
        base_nonce = self.key_material.base_nonce
        frame_size = self.chunk_size + TAG_BYTES
        counter = 0
        consumed = 0
        logger.debug(f"Starting frame decryption with chunk size {self.chunk_size}.")

        try:
            while True:
                # An empty read is still a terminal frame to open, never a silent end
                frame = _read_up_to(input_stream, frame_size)
                is_last = len(frame) < frame_size
                nonce = derive_frame_nonce(base_nonce, counter, is_last)
                try:
                    plaintext = open_frame(key, nonce, frame)
                except EncryptionError:
                    logger.error(f"Authentication failed on frame {counter} ({'terminal' if is_last else 'interior'}).")
                    raise
                output_sink.write(plaintext)
                counter += 1
                consumed += len(frame)
                if progress_callback:
                    progress_callback(consumed)
                if is_last:
                    break
            output_sink.flush()
        except OSError as e:
            msg = f"Stream I/O error during decryption after {counter} frames: {e}"
            logger.error(msg, exc_info=True)
            raise FileAccessError(msg) from e

        logger.info(f"Decrypted {counter} frames ({consumed} sealed bytes).")
        return counter
