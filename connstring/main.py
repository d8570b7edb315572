#!/usr/bin/env python3
"""connstring - Command line entry point"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from connstring.core.exceptions import CipherError, ConnectionStringError
from connstring.core.parser import parse_connection_string
from connstring.core.reconstructor import reconstruct_connection_string
from connstring.models.connection_record import ConnectionRecord
from connstring.utils.config import Config, load_config
from connstring.utils.connection_strings import to_sqlalchemy_url
from connstring.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def _build_parser(config: Config) -> argparse.ArgumentParser:
    # Options accepted after any sub-command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--secret',
                        help=f'Encryption secret (default: ${config.secret_env_var})')

    parser = argparse.ArgumentParser(
        prog='connstring',
        description='Convert database connection strings to and from a common record',
    )
    parser.add_argument('--log-level', default=config.log_level,
                        help='Logging level (default: %(default)s)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    parse_cmd = subparsers.add_parser('parse', parents=[common],
                                      help='Parse a connection string into JSON')
    parse_cmd.add_argument('connection_string')
    parse_cmd.add_argument('--no-encrypt', action='store_true',
                           help='Keep the password in plaintext even if a secret is set')

    reconstruct_cmd = subparsers.add_parser('reconstruct', parents=[common],
                                            help='Build a connection string from record JSON')
    reconstruct_cmd.add_argument('file', nargs='?', default='-',
                                 help="Record JSON file, '-' for stdin")
    reconstruct_cmd.add_argument('--strict', action='store_true', default=config.strict_decrypt,
                                 help='Fail if the password cannot be decrypted')

    sqlalchemy_cmd = subparsers.add_parser('sqlalchemy',
                                           help='Print the SQLAlchemy URL for a connection string')
    sqlalchemy_cmd.add_argument('connection_string')
    sqlalchemy_cmd.add_argument('--driver', help='SQLAlchemy drivername override')

    return parser


def _read_record(path: str) -> ConnectionRecord:
    if path == '-':
        data = json.load(sys.stdin)
    else:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    return ConnectionRecord.from_dict(data)


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point"""
    config = load_config()
    args = _build_parser(config).parse_args(argv)

    setup_logging(config.log_dir, args.log_level)
    secret = getattr(args, 'secret', None) or config.secret

    try:
        if args.command == 'parse':
            record = parse_connection_string(
                args.connection_string,
                None if args.no_encrypt else secret,
                config.cipher_algorithm,
                config.hash_algorithm,
            )
            logger.info(f"Detected database type: {record.db_type.value}")
            print(json.dumps(record.to_dict(), indent=2))

        elif args.command == 'reconstruct':
            record = _read_record(args.file)
            print(reconstruct_connection_string(
                record,
                secret,
                strict_decrypt=args.strict,
                cipher_algorithm=config.cipher_algorithm,
                hash_algorithm=config.hash_algorithm,
            ))

        elif args.command == 'sqlalchemy':
            record = parse_connection_string(args.connection_string)
            url = to_sqlalchemy_url(record, args.driver)
            print(url.render_as_string(hide_password=False))

    except (ConnectionStringError, CipherError, OSError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
