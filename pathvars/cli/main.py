"""Main CLI entry point for pathvars."""

import argparse
import sys
from typing import Optional

from .commands import expand_template, list_variables


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the pathvars CLI."""
    parser = argparse.ArgumentParser(
        prog='pathvars',
        description='Expand $(VARIABLE) patterns for export file names'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Expand command
    expand_parser = subparsers.add_parser('expand', help='Expand a pattern')
    expand_parser.add_argument(
        'template',
        type=str,
        help='Pattern containing $(VARIABLE) tokens'
    )
    expand_parser.add_argument(
        '--file',
        type=str,
        metavar='PATH',
        help='Source file path for the FILE_* and ROLL_NAME variables'
    )
    expand_parser.add_argument(
        '--id',
        type=int,
        dest='item_id',
        metavar='N',
        help='Item id to look up in the catalog'
    )
    expand_parser.add_argument(
        '--catalog',
        type=str,
        metavar='FILE',
        help='Path to YAML catalog with item metadata'
    )
    expand_parser.add_argument(
        '--jobcode',
        type=str,
        default='',
        help='Job code for the JOBCODE variable'
    )
    expand_parser.add_argument(
        '--sequence',
        type=int,
        metavar='N',
        help='Use N as the SEQUENCE value'
    )
    expand_parser.add_argument(
        '--count',
        type=int,
        default=1,
        metavar='N',
        help='Expand N times, advancing SEQUENCE from 0'
    )
    expand_parser.add_argument(
        '--time',
        type=str,
        metavar='ISO',
        help='Wall clock time to use instead of now (ISO 8601)'
    )
    expand_parser.add_argument(
        '--capture-time',
        type=str,
        metavar='ISO',
        help='Capture time to use when the item has none (ISO 8601)'
    )
    expand_parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    expand_parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    expand_parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='warn',
        help='Set log level'
    )

    # Variables command
    subparsers.add_parser('variables', help='List known variable names')

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'expand':
        return expand_template(parsed_args)
    elif parsed_args.command == 'variables':
        return list_variables(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
