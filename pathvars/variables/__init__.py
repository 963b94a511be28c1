"""
Variable expansion module.
Resolves $(NAME[modifier]) tokens and applies bash style modifiers.
"""

from .expander import VariableExpander, expand
from .modifiers import apply_modifier, parse_modifier
from .resolver import VariableResolver

__all__ = ['VariableExpander', 'VariableResolver', 'apply_modifier', 'parse_modifier', 'expand']
