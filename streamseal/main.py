# main.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Main entry point for the streamseal CLI application."""

import argparse
import sys
import logging

from .cli.handlers import handle_encrypt, handle_decrypt, handle_keygen
from .utils.constants import (
    DEFAULT_CHUNK_SIZE, DEFAULT_KEY_DIR, EXIT_SUCCESS, EXIT_GENERIC_ERROR, EXIT_INTERRUPT
)


def positive_int(value: str) -> int:
    """argparse type for --chunk-size."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _add_key_dir_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--key-dir', type=str, default=DEFAULT_KEY_DIR, metavar='DIR',
        help=f'Directory holding the key and nonce files (default: {DEFAULT_KEY_DIR}).'
    )


def _add_stream_arguments(parser: argparse.ArgumentParser, input_help: str, output_help: str) -> None:
    parser.add_argument('-i', '--input', type=str, default=None, metavar='FILE', help=input_help)
    parser.add_argument('-o', '--output', type=str, default=None, metavar='FILE', help=output_help)
    _add_key_dir_argument(parser)
    parser.add_argument(
        '--chunk-size', type=positive_int, default=DEFAULT_CHUNK_SIZE, metavar='BYTES',
        help=f'Plaintext bytes per frame; must match between encrypt and decrypt (default: {DEFAULT_CHUNK_SIZE}).'
    )


def create_parser():
    """Creates and configures the argument parser."""
    parser = argparse.ArgumentParser(
        prog="streamseal",
        description="Chunked XChaCha20-Poly1305 stream encryption for files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  streamseal keygen --key-dir ~/.streamseal
  streamseal encrypt -i file.txt -o file.enc
  cat large.zip | streamseal encrypt --chunk-size 1048576 > large.zip.enc
  streamseal decrypt -q --key-dir ~/.streamseal -i file.enc -o file.txt
"""
    )
    parser.add_argument('-V', '--version', action='version', version='%(prog)s 0.1.0')

    # --- Logging Control Group ---
    log_level_group = parser.add_mutually_exclusive_group()
    log_level_group.add_argument(
        '-q', '--quiet',
        action='store_const',
        const=logging.ERROR,
        dest='log_level',
        help='Show only error messages.'
    )
    log_level_group.add_argument(
        '-v', '--verbose',
        action='store_const',
        const=logging.DEBUG,
        dest='log_level',
        help='Show detailed debug messages.'
    )
    parser.set_defaults(log_level=logging.INFO)

    subparsers = parser.add_subparsers(dest='command', help='Available commands', required=True)

    parser_encrypt = subparsers.add_parser('encrypt', help='Encrypt a file or stdin.')
    _add_stream_arguments(
        parser_encrypt,
        'Input file path (default: stdin).',
        'Output file path (default: stdout).'
    )
    parser_encrypt.set_defaults(func=handle_encrypt)

    parser_decrypt = subparsers.add_parser('decrypt', help='Decrypt a file or stdin.')
    _add_stream_arguments(
        parser_decrypt,
        'Input encrypted file path (default: stdin).',
        'Output decrypted file path (default: stdout).'
    )
    parser_decrypt.set_defaults(func=handle_decrypt)

    parser_keygen = subparsers.add_parser('keygen', help='Create the key and nonce files if they do not exist.')
    _add_key_dir_argument(parser_keygen)
    parser_keygen.set_defaults(func=handle_keygen)

    return parser


def main(argv: list[str] | None = None):
    """Parses arguments, sets up logging, and calls the appropriate handler."""
    parser = create_parser()
    exit_code = EXIT_SUCCESS

    try:
        args = parser.parse_args(argv)

        # --- Configure Logging ---
        log_level = args.log_level
        log_format = '%(asctime)s - %(levelname)s - %(message)s'
        if log_level <= logging.DEBUG:
            log_format = '%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s'
        # stdout may carry ciphertext/plaintext, so logs always go to stderr
        logging.basicConfig(level=log_level, format=log_format, stream=sys.stderr, force=True)

        logging.debug(f"Log level set to: {logging.getLevelName(log_level)}")
        logging.debug(f"Command: {args.command}")

        exit_code = args.func(args)

    except SystemExit as e:
        exit_code = e.code or EXIT_SUCCESS
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        exit_code = EXIT_INTERRUPT
    except Exception as e:
        logging.critical(f"An unhandled exception reached main: {e}", exc_info=True)
        print("\nCritical Error: An unexpected error occurred. Use --verbose for more details.", file=sys.stderr)
        exit_code = EXIT_GENERIC_ERROR
    finally:
        logging.debug(f"Exiting with code: {exit_code}")
        sys.exit(exit_code)

if __name__ == "__main__":
    main()
