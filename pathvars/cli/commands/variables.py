"""Variables command implementation."""

from argparse import Namespace

from pathvars.variables import VariableResolver


def list_variables(args: Namespace) -> int:
    """Print every known variable name, one per line."""
    for name in VariableResolver().names():
        print(name)
    return 0
