# streamseal/core/file_handler.py
# -*- coding: utf-8 -*-
"""
Handles file/standard I/O around the stream cipher, including progress
reporting and error handling. Uses context managers for streams.
"""

import sys
import logging
import os
import uuid
from typing import Callable
from contextlib import contextmanager

from .cipher_engine import StreamCipher
from .key_material import KeyMaterial
from ..utils.constants import DEFAULT_CHUNK_SIZE
from ..utils.exceptions import FileAccessError

logger = logging.getLogger(__name__)

# --- Context Manager for Stream Handling ---
@contextmanager
def stream_handler(filepath: str | None, mode: str):
    """
    Context manager to safely handle file paths or standard streams (stdin/stdout).
    Yields the appropriate stream and handles file opening/closing.
    Raises FileAccessError on issues opening files.
    """
    is_std_stream = filepath is None
    log_stream_type = ('stdin' if 'r' in mode else 'stdout') if is_std_stream else filepath
    logger.debug(f"Attempting to access stream: {log_stream_type} in mode '{mode}'.")

    if is_std_stream:
        stream = sys.stdin.buffer if 'r' in mode else sys.stdout.buffer
        yield stream  # standard streams are not closed here
        return

    try:
        if 'r' in mode and not os.path.exists(filepath):
            raise FileNotFoundError(f"Input file not found: {filepath}")
        file_stream = open(filepath, mode)
    except OSError as e:
        msg = f"File access error for '{log_stream_type}': {e}"
        logger.error(msg)
        raise FileAccessError(msg) from e

    with file_stream:
        logger.debug(f"Opened file: {filepath} successfully.")
        yield file_stream
    logger.debug(f"Closed file: {filepath}")


class _ProgressReporter:
    """Turns cumulative byte counts into throttled 0-100 percentages."""

    def __init__(self, callback: Callable[[int], None] | None, total_size: int | None):
        self.callback = callback
        self.total_size = total_size
        self.last_percentage = -1
        if callback and total_size is None:
            callback(-1)  # Signal indeterminate

    def __call__(self, processed: int) -> None:
        if not self.callback or not self.total_size:
            return  # unknown size, or an empty input that finish() reports
        percentage = min(100, int(processed / self.total_size * 100))
        if percentage > self.last_percentage:
            self.callback(percentage)
            self.last_percentage = percentage

    def finish(self) -> None:
        if self.callback and self.total_size is not None and self.last_percentage < 100:
            self.callback(100)


def _input_size(input_path: str | None) -> int | None:
    if input_path is None:
        logger.info("Using stdin for input (size unknown). Progress unavailable.")
        return None
    try:
        total_size = os.path.getsize(input_path)
        logger.debug(f"Input file size: {total_size} bytes.")
        return total_size
    except OSError as e:
        logger.warning(f"Could not get size of input file '{input_path}': {e}")
        return None


# --- Main I/O Processing Functions ---

def process_encryption_io(
    input_path: str | None,
    output_path: str | None,
    key_material: KeyMaterial,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: Callable[[int], None] | None = None
) -> int:
    """
    Encrypts a file (or stdin) into a file (or stdout).

    Args:
        input_path: Path to the input file, or None for stdin.
        output_path: Path to the output file, or None for stdout.
        key_material: Key and base nonce to seal with.
        chunk_size: Plaintext bytes per interior frame.
        progress_callback: Optional function to report progress (0-100, or -1).

    Returns:
        The number of frames written.

    Raises:
        FileAccessError: If input/output files cannot be accessed or written.
        EncryptionError: If sealing fails.
        ArgumentError: If chunk_size is not a positive integer.
    """
    engine = StreamCipher(key_material, chunk_size)
    reporter = _ProgressReporter(progress_callback, _input_size(input_path))

    with stream_handler(input_path, 'rb') as input_stream, \
         stream_handler(output_path, 'wb') as output_stream:
        frames = engine.encrypt(input_stream, output_stream, progress_callback=reporter)

    reporter.finish()
    logger.info(f"Encryption of '{input_path or 'stdin'}' finished ({frames} frames).")
    return frames


def _discard(path: str) -> None:
    try:
        os.remove(path)
        logger.debug(f"Removed incomplete output: {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove incomplete output '{path}': {e}")


def process_decryption_io(
    input_path: str | None,
    output_path: str | None,
    key_material: KeyMaterial,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: Callable[[int], None] | None = None
) -> int:
    """
    Decrypts a file (or stdin) into a file (or stdout).

    File output is written to a uniquely named sibling first and renamed over
    `output_path` only once every frame has authenticated; on failure it is
    removed. Output to stdout cannot be retracted and must be discarded by
    the consumer when this function raises.

    Raises:
        FileAccessError: If input/output files cannot be accessed or written.
        EncryptionError: If any frame fails authentication.
        ArgumentError: If chunk_size is not a positive integer.
    """
    engine = StreamCipher(key_material, chunk_size)
    reporter = _ProgressReporter(progress_callback, _input_size(input_path))
    staging_path = None if output_path is None else f"{output_path}_{uuid.uuid4().hex}"

    finished = False
    try:
        with stream_handler(input_path, 'rb') as input_stream, \
             stream_handler(staging_path, 'wb') as output_stream:
            frames = engine.decrypt(input_stream, output_stream, progress_callback=reporter)
        if staging_path is not None:
            os.replace(staging_path, output_path)
            logger.debug(f"Moved decrypted output into place: {output_path}")
        finished = True
    except OSError as e:
        msg = f"Could not finalize decrypted output '{output_path}': {e}"
        logger.error(msg)
        raise FileAccessError(msg) from e
    finally:
        # unauthenticated plaintext never outlives a failed or interrupted run
        if not finished and staging_path is not None:
            _discard(staging_path)

    reporter.finish()
    logger.info(f"Decryption of '{input_path or 'stdin'}' finished ({frames} frames).")
    return frames
