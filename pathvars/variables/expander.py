"""
Template expansion.

Replaces $(NAME[modifier]) tokens in a template with their values. A token
ends at the first ')' after '$(' (parentheses are not balanced); text
without a closing ')' is copied as is, as are tokens naming an unknown
variable.
"""

import logging
from typing import List, Optional

from ..context import ExpansionContext, ExpansionSnapshot
from .modifiers import apply_modifier
from .resolver import VariableResolver


logger = logging.getLogger(__name__)

TOKEN_START = '$('
TOKEN_END = ')'


class VariableExpander:
    """Expands variable tokens in templates against an ExpansionContext."""

    def __init__(self, resolver: Optional[VariableResolver] = None):
        self.resolver = resolver or VariableResolver()

    def expand(
        self,
        template: str,
        ctx: ExpansionContext,
        iterate: bool = False,
        sequence: Optional[int] = None
    ) -> str:
        """
        Expand all tokens in a template.

        Args:
            template: Text containing $(...) tokens
            ctx: Expansion context; its result is updated
            iterate: Advance the stored sequence counter before expanding
            sequence: Sequence value for this call only (stored counter untouched)

        Returns:
            Expanded text
        """
        if iterate:
            ctx.advance_sequence()

        snapshot = ctx.snapshot(sequence)

        parts: List[str] = []
        pos = 0
        while True:
            start = template.find(TOKEN_START, pos)
            if start < 0:
                break
            end = template.find(TOKEN_END, start + len(TOKEN_START))
            if end < 0:
                break

            parts.append(template[pos:start])
            parts.append(self._expand_token(template[start:end + 1], ctx, snapshot))
            pos = end + 1

        parts.append(template[pos:])

        result = ''.join(parts)
        ctx.result = result
        logger.debug(f"Expanded {template!r} to {result!r}")
        return result

    def _expand_token(self, token: str, ctx: ExpansionContext, snapshot: ExpansionSnapshot) -> str:
        """
        Expand a single '$(...)' token.

        Args:
            token: Token text including delimiters
            ctx: Expansion context
            snapshot: Derived values for this call

        Returns:
            Replacement text, or the token itself for unknown names
        """
        body = token[len(TOKEN_START):-len(TOKEN_END)]
        if not body:
            return token

        value, consumed = self.resolver.resolve(body, ctx, snapshot)
        if consumed == 0:
            return token

        return apply_modifier(value, body[consumed:])


_default_expander: Optional[VariableExpander] = None


def expand(
    template: str,
    ctx: ExpansionContext,
    iterate: bool = False,
    sequence: Optional[int] = None
) -> str:
    """Expand a template with a shared default VariableExpander."""
    global _default_expander
    if _default_expander is None:
        _default_expander = VariableExpander()
    return _default_expander.expand(template, ctx, iterate=iterate, sequence=sequence)
