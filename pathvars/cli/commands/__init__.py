"""CLI command handlers."""

from .expand import expand_template
from .variables import list_variables

__all__ = ['expand_template', 'list_variables']
