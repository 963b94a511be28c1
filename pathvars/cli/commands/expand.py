"""Expand command implementation."""

import logging
from argparse import Namespace
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pathvars.catalog import CatalogLoader
from pathvars.context import ExpansionContext
from pathvars.exceptions import CatalogValidationError
from pathvars.variables import VariableExpander


logger = logging.getLogger(__name__)

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
}


def parse_time(value: Optional[str], option: str) -> Optional[datetime]:
    """Parse an ISO 8601 command line time value."""
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid {option} value: {value}. Expected ISO 8601, e.g. 2024-03-05T10:11:12")


def build_context(args: Namespace) -> ExpansionContext:
    """Create the expansion context described by the command line."""
    store = None
    if args.catalog:
        catalog_path = Path(args.catalog)
        logger.info(f"Loading catalog: {catalog_path}")
        store = CatalogLoader().load(catalog_path)
        if args.item_id is not None and args.item_id not in store:
            logger.warning(f"Item {args.item_id} not found in catalog {catalog_path}")

    ctx = ExpansionContext(
        item_id=args.item_id,
        filename=args.file,
        jobcode=args.jobcode,
        store=store,
    )

    wall_time = parse_time(args.time, '--time')
    if wall_time is not None:
        ctx.set_time(wall_time)
    ctx.set_capture_time(parse_time(args.capture_time, '--capture-time'))
    return ctx


def expand_template(args: Namespace) -> int:
    """
    Expand a pattern and print the result.

    With --count N the sequence is reset and the pattern is expanded N
    times, one line per expansion.
    """
    log_level = LOG_LEVELS[args.log_level]
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.count < 1:
            raise ValueError(f"--count must be at least 1, got {args.count}")

        ctx = build_context(args)
        expander = VariableExpander()

        results: List[str] = []
        if args.count == 1:
            results.append(expander.expand(args.template, ctx, sequence=args.sequence))
        else:
            ctx.reset_sequence()
            for _ in range(args.count):
                results.append(expander.expand(args.template, ctx, iterate=True, sequence=args.sequence))

        for line in results:
            print(line)
        ctx.close()
        return 0

    except CatalogValidationError as e:
        for error in e.errors:
            logger.error(str(error))
        return e.exit_code
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 2
