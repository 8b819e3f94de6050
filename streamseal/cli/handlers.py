# streamseal/cli/handlers.py
# -*- coding: utf-8 -*-
"""Command handlers for the streamseal CLI."""

import logging
import sys

from streamseal.core.file_handler import process_encryption_io, process_decryption_io
from streamseal.core.key_material import FileKeyStorage, load_or_create
from streamseal.utils.constants import (
    EXIT_SUCCESS, EXIT_GENERIC_ERROR, EXIT_FILE_ERROR, EXIT_AUTH_ERROR, EXIT_ARG_ERROR
)
from streamseal.utils.exceptions import (
    EncryptionError, FileAccessError, InvalidSizeError, ArgumentError, StreamSealError
)

logger = logging.getLogger(__name__)


def _run_guarded(command: str, action) -> int:
    """Runs `action()` and maps exceptions to exit codes."""
    try:
        action()
        logger.info(f"{command.capitalize()} process finished successfully.")
        return EXIT_SUCCESS

    # Most specific first
    except EncryptionError as e:
        logger.error(f"Authentication error during {command}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_AUTH_ERROR
    except FileAccessError as e:
        logger.error(f"File access error during {command}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR
    except (InvalidSizeError, ArgumentError) as e:
        logger.error(f"Argument or key material error during {command}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ARG_ERROR
    except StreamSealError as e:
        logger.error(f"Application error during {command}: {e}")
        return EXIT_GENERIC_ERROR


def handle_encrypt(args) -> int:
    """Handles the 'encrypt' command."""
    logger.info("Processing 'encrypt' command...")

    def action():
        with load_or_create(FileKeyStorage(args.key_dir)) as key_material:
            process_encryption_io(args.input, args.output, key_material, chunk_size=args.chunk_size)

    return _run_guarded('encryption', action)


def handle_decrypt(args) -> int:
    """
    Handles the 'decrypt' command. Key material is loaded or created just as
    for encryption; freshly generated material simply fails to authenticate.
    """
    logger.info("Processing 'decrypt' command...")

    def action():
        with load_or_create(FileKeyStorage(args.key_dir)) as key_material:
            process_decryption_io(args.input, args.output, key_material, chunk_size=args.chunk_size)

    return _run_guarded('decryption', action)


def handle_keygen(args) -> int:
    """Handles the 'keygen' command. Existing material is left untouched."""
    logger.info("Processing 'keygen' command...")
    storage = FileKeyStorage(args.key_dir)

    def action():
        with load_or_create(storage) as key_material:
            created = key_material.created
        if created:
            print(f"Key material created in {args.key_dir}: {', '.join(created)}", file=sys.stderr)
        else:
            print(f"Key material already present in {args.key_dir}", file=sys.stderr)

    return _run_guarded('keygen', action)
