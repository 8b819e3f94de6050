# tests/test_file_handler.py
# -*- coding: utf-8 -*-
"""Tests for file-level encryption/decryption orchestration."""

import io
import os
import sys
from pathlib import Path

import pytest

from streamseal.core.cipher_engine import StreamCipher, sealed_size
from streamseal.core.file_handler import process_encryption_io, process_decryption_io
from streamseal.core.key_material import KeyMaterial
from streamseal.utils.exceptions import EncryptionError, FileAccessError

PLAINTEXT_CONTENT = os.urandom(5000)
CHUNK_SIZE = 1024


@pytest.fixture
def material() -> KeyMaterial:
    return KeyMaterial.generate()


def test_file_round_trip(tmp_path: Path, material):
    input_file = tmp_path / "input.bin"
    encrypted_file = tmp_path / "input.bin.enc"
    decrypted_file = tmp_path / "decrypted.bin"
    input_file.write_bytes(PLAINTEXT_CONTENT)

    frames = process_encryption_io(str(input_file), str(encrypted_file), material, chunk_size=CHUNK_SIZE)
    assert frames == 5
    assert encrypted_file.stat().st_size == sealed_size(len(PLAINTEXT_CONTENT), CHUNK_SIZE)

    frames = process_decryption_io(str(encrypted_file), str(decrypted_file), material, chunk_size=CHUNK_SIZE)
    assert frames == 5
    assert decrypted_file.read_bytes() == PLAINTEXT_CONTENT
    # no staging files left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ["decrypted.bin", "input.bin", "input.bin.enc"]


def test_progress_reaches_one_hundred(tmp_path: Path, material):
    input_file = tmp_path / "input.bin"
    encrypted_file = tmp_path / "input.enc"
    input_file.write_bytes(PLAINTEXT_CONTENT)

    encrypt_progress, decrypt_progress = [], []
    process_encryption_io(str(input_file), str(encrypted_file), material,
                          chunk_size=CHUNK_SIZE, progress_callback=encrypt_progress.append)
    process_decryption_io(str(encrypted_file), str(tmp_path / "out.bin"), material,
                          chunk_size=CHUNK_SIZE, progress_callback=decrypt_progress.append)

    for progress in (encrypt_progress, decrypt_progress):
        assert progress == sorted(progress)
        assert progress[-1] == 100
        assert all(0 <= p <= 100 for p in progress)


def test_empty_file_progress_is_complete_not_indeterminate(tmp_path: Path, material):
    input_file = tmp_path / "empty.bin"
    input_file.write_bytes(b"")
    progress = []
    process_encryption_io(str(input_file), str(tmp_path / "empty.enc"), material,
                          chunk_size=CHUNK_SIZE, progress_callback=progress.append)
    assert progress == [100]


def test_stdin_progress_is_indeterminate(monkeypatch, tmp_path: Path, material):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"data")))
    progress = []
    process_encryption_io(None, str(tmp_path / "stdin.enc"), material,
                          chunk_size=CHUNK_SIZE, progress_callback=progress.append)
    assert progress == [-1]


def test_failed_decryption_leaves_no_output(tmp_path: Path, material):
    input_file = tmp_path / "input.bin"
    encrypted_file = tmp_path / "input.enc"
    decrypted_file = tmp_path / "decrypted.bin"
    input_file.write_bytes(PLAINTEXT_CONTENT)
    process_encryption_io(str(input_file), str(encrypted_file), material, chunk_size=CHUNK_SIZE)

    tampered = bytearray(encrypted_file.read_bytes())
    tampered[-1] ^= 0x01
    encrypted_file.write_bytes(bytes(tampered))

    with pytest.raises(EncryptionError):
        process_decryption_io(str(encrypted_file), str(decrypted_file), material, chunk_size=CHUNK_SIZE)

    assert not decrypted_file.exists()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["input.bin", "input.enc"]


def test_failed_decryption_keeps_previous_output_file(tmp_path: Path, material):
    encrypted_file = tmp_path / "garbage.enc"
    decrypted_file = tmp_path / "decrypted.bin"
    encrypted_file.write_bytes(os.urandom(300))
    decrypted_file.write_bytes(b"previous contents")

    with pytest.raises(EncryptionError):
        process_decryption_io(str(encrypted_file), str(decrypted_file), material, chunk_size=CHUNK_SIZE)
    assert decrypted_file.read_bytes() == b"previous contents"


def test_missing_input_raises_file_access_error(tmp_path: Path, material):
    with pytest.raises(FileAccessError, match="not found"):
        process_encryption_io(str(tmp_path / "missing.bin"), str(tmp_path / "out.enc"), material)
    with pytest.raises(FileAccessError, match="not found"):
        process_decryption_io(str(tmp_path / "missing.enc"), str(tmp_path / "out.bin"), material)
    assert not (tmp_path / "out.bin").exists()


def test_unwritable_output_raises_file_access_error(tmp_path: Path, material):
    input_file = tmp_path / "input.bin"
    input_file.write_bytes(b"data")
    with pytest.raises(FileAccessError):
        process_encryption_io(str(input_file), str(tmp_path / "no_such_dir" / "out.enc"), material)


def test_interrupted_decryption_leaves_no_output(tmp_path: Path, material, monkeypatch):
    """Partial plaintext must not survive a KeyboardInterrupt mid-stream."""
    encrypted_file = tmp_path / "input.enc"
    encrypted_file.write_bytes(os.urandom(300))

    def write_then_interrupt(self, input_stream, output_sink, *, progress_callback=None):
        output_sink.write(b"partial plaintext")
        raise KeyboardInterrupt

    monkeypatch.setattr(StreamCipher, "decrypt", write_then_interrupt)

    with pytest.raises(KeyboardInterrupt):
        process_decryption_io(str(encrypted_file), str(tmp_path / "out.bin"), material, chunk_size=CHUNK_SIZE)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["input.enc"]
