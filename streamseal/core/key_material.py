# streamseal/core/key_material.py
# -*- coding: utf-8 -*-
"""
Key material lifecycle: loads the persisted symmetric key and base nonce,
or generates and persists fresh ones when absent. Storage access is an
injected capability so tests can run against memory instead of disk.
"""

import os
import logging
from typing import Protocol

from .crypto_logic import generate_secret, wipe
from ..utils.constants import (
    KEY_BYTES, NONCE_BYTES, KEY_LOCATION, NONCE_LOCATION, SECRET_FILE_MODE, KEY_DIR_MODE
)
from ..utils.exceptions import FileAccessError, InvalidSizeError

logger = logging.getLogger(__name__)


class KeyStorage(Protocol):
    """Byte-blob storage addressed by location name."""

    def read(self, name: str) -> bytes | None:
        """Returns the stored blob, or None if nothing is stored under `name`."""
        ...

    def write(self, name: str, data: bytes) -> None:
        ...


class FileKeyStorage:
    """Stores each blob as a raw file named after its location inside `directory`."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, name: str) -> str:
        return os.path.join(self.directory, name)

    def read(self, name: str) -> bytes | None:
        path = self.path_for(name)
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            logger.debug(f"No persisted {name} at {path}.")
            return None
        logger.debug(f"Read {len(data)} bytes from {path}.")
        return data

    def write(self, name: str, data: bytes) -> None:
        os.makedirs(self.directory, mode=KEY_DIR_MODE, exist_ok=True)
        path = self.path_for(name)
        # O_EXCL: never clobber a secret written by a concurrent first run
        flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
        fd = os.open(path, flags, SECRET_FILE_MODE)
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        logger.debug(f"Wrote {len(data)} bytes to {path}.")


class MemoryKeyStorage:
    """Dict-backed storage, for tests and embedding."""

    def __init__(self, blobs: dict[str, bytes] | None = None):
        self.blobs: dict[str, bytes] = dict(blobs or {})

    def read(self, name: str) -> bytes | None:
        return self.blobs.get(name)

    def write(self, name: str, data: bytes) -> None:
        self.blobs[name] = bytes(data)


class KeyMaterial:
    """
    A symmetric key and base nonce pair.

    Both secrets are held in private bytearrays so they can be zeroed with
    `wipe()` (or by leaving a `with` block) once the owning engine is done.
    The `key` and `base_nonce` properties return immutable `bytes` copies,
    which is what pycryptodome and the engine's per-call locals hold; those
    copies are not reached by `wipe()` and live until garbage collected.

    `created` names the locations `load_or_create` had to generate; it is
    empty for material that was loaded or built directly.
    """

    def __init__(self, key: bytes, base_nonce: bytes, created: tuple[str, ...] = ()):
        if len(key) != KEY_BYTES:
            raise InvalidSizeError(KEY_LOCATION, KEY_BYTES, len(key))
        if len(base_nonce) != NONCE_BYTES:
            raise InvalidSizeError(NONCE_LOCATION, NONCE_BYTES, len(base_nonce))
        self._key = bytearray(key)
        self._base_nonce = bytearray(base_nonce)
        self.created = created

    @classmethod
    def generate(cls) -> "KeyMaterial":
        """Creates a fresh, unpersisted key/nonce pair."""
        return cls(generate_secret(KEY_BYTES), generate_secret(NONCE_BYTES))

    @property
    def key(self) -> bytes:
        return bytes(self._key)

    @property
    def base_nonce(self) -> bytes:
        return bytes(self._base_nonce)

    def wipe(self) -> None:
        wipe(self._key)
        wipe(self._base_nonce)

    def __enter__(self) -> "KeyMaterial":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return "KeyMaterial(<redacted>)"


_SECRETS = ((KEY_LOCATION, KEY_BYTES), (NONCE_LOCATION, NONCE_BYTES))


def load_or_create(storage: KeyStorage) -> KeyMaterial:
    """
    Loads the key and base nonce from `storage`, generating and persisting
    whichever is missing. Each secret lives at its own location; a malformed
    blob is rejected, never truncated, padded or overwritten. Both blobs are
    read and validated before anything is generated, so a rejected load
    leaves the storage untouched.

    Args:
        storage: Where the key and nonce blobs live.

    Returns:
        The loaded (or newly created) KeyMaterial, with `created` listing
        the locations that were generated on this call.

    Raises:
        InvalidSizeError: If a persisted blob has the wrong length.
        FileAccessError: If the storage cannot be read or written.
    """
    try:
        secrets = {name: storage.read(name) for name, _ in _SECRETS}
        for name, size in _SECRETS:
            data = secrets[name]
            if data is not None and len(data) != size:
                logger.error(f"Persisted {name} has {len(data)} bytes, expected {size}.")
                raise InvalidSizeError(name, size, len(data))

        created = []
        for name, size in _SECRETS:
            if secrets[name] is None:
                secrets[name] = generate_secret(size)
                storage.write(name, secrets[name])
                created.append(name)
                logger.info(f"Generated and persisted a new {name} ({size} bytes).")
    except OSError as e:
        msg = f"Key material storage error: {e}"
        logger.error(msg, exc_info=True)
        raise FileAccessError(msg) from e

    if not created:
        logger.debug("Loaded existing key material.")
    return KeyMaterial(secrets[KEY_LOCATION], secrets[NONCE_LOCATION], created=tuple(created))
