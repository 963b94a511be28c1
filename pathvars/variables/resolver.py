"""
Variable name resolution.

Maps the name at the start of a token body to its value. Names are
matched longest first, so FILE_FOLDER wins over FILE_... and HOME_FOLDER
over HOME regardless of table order.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..colorlabels import translated_labels
from ..context import ExpansionContext, ExpansionSnapshot


logger = logging.getLogger(__name__)

Binding = Callable[[ExpansionContext, ExpansionSnapshot], Optional[str]]


def _dirname(path: str) -> str:
    """Directory component, '.' for a bare name and '/' for the root."""
    slash = path.rfind('/')
    if slash < 0:
        return '.'
    return path[:slash].rstrip('/') or '/'


def _basename(path: str) -> str:
    """Last path component, ignoring trailing separators."""
    if not path:
        return '.'
    stripped = path.rstrip('/')
    if not stripped:
        return '/'
    return stripped[stripped.rfind('/') + 1:]


def _file_name(ctx: ExpansionContext, snap: ExpansionSnapshot) -> Optional[str]:
    if ctx.filename is None:
        return None
    name = _basename(ctx.filename)
    dot = name.rfind('.')
    return name[:dot] if dot >= 0 else name


def _roll_name(ctx: ExpansionContext, snap: ExpansionSnapshot) -> Optional[str]:
    if ctx.filename is None:
        return None
    return _basename(_dirname(ctx.filename))


def _file_directory(ctx: ExpansionContext, snap: ExpansionSnapshot) -> Optional[str]:
    if ctx.filename is None:
        return None
    return _dirname(ctx.filename)


def _labels(ctx: ExpansionContext, snap: ExpansionSnapshot) -> Optional[str]:
    names = translated_labels(snap.metadata.color_labels)
    return ','.join(names) if names else None


def _tag(key: str) -> Binding:
    return lambda ctx, snap: snap.metadata.first_tag(key)


def _optional_int(value: Optional[int]) -> Optional[str]:
    return str(value) if value is not None else None


class VariableResolver:
    """
    Resolves variable names against an expansion context.

    Bindings:
    - date: YEAR MONTH DAY HOUR MINUTE SECOND, EXIF_* variants
    - item: EXIF_ISO MAKER MODEL ID VERSION STARS LABELS
      TITLE CREATOR PUBLISHER RIGHTS
    - file: ROLL_NAME FILE_DIRECTORY FILE_FOLDER FILE_NAME FILE_EXTENSION
    - session: JOBCODE SEQUENCE USERNAME
    - locations: HOME HOME_FOLDER PICTURES_FOLDER DESKTOP DESKTOP_FOLDER
    """

    def __init__(self):
        """Initialize resolver with the built-in bindings."""
        bindings = self._builtin_bindings()
        # Longest first; sorted() is stable so equal lengths keep table order
        self._bindings: List[Tuple[str, Binding]] = sorted(
            bindings.items(), key=lambda item: len(item[0]), reverse=True
        )

    def _builtin_bindings(self) -> Dict[str, Binding]:
        """
        Build the name to binding table.

        Returns:
            Mapping of variable name to value function
        """
        return {
            "YEAR": lambda ctx, snap: f"{snap.time.year:04d}",
            "MONTH": lambda ctx, snap: f"{snap.time.month:02d}",
            "DAY": lambda ctx, snap: f"{snap.time.day:02d}",
            "HOUR": lambda ctx, snap: f"{snap.time.hour:02d}",
            "MINUTE": lambda ctx, snap: f"{snap.time.minute:02d}",
            "SECOND": lambda ctx, snap: f"{snap.time.second:02d}",

            "EXIF_YEAR": lambda ctx, snap: f"{snap.exif_time.year:04d}",
            "EXIF_MONTH": lambda ctx, snap: f"{snap.exif_time.month:02d}",
            "EXIF_DAY": lambda ctx, snap: f"{snap.exif_time.day:02d}",
            "EXIF_HOUR": lambda ctx, snap: f"{snap.exif_time.hour:02d}",
            "EXIF_MINUTE": lambda ctx, snap: f"{snap.exif_time.minute:02d}",
            "EXIF_SECOND": lambda ctx, snap: f"{snap.exif_time.second:02d}",
            "EXIF_ISO": lambda ctx, snap: str(snap.metadata.iso),

            "MAKER": lambda ctx, snap: snap.metadata.camera_maker,
            "MODEL": lambda ctx, snap: snap.metadata.camera_alias,
            "ID": lambda ctx, snap: _optional_int(ctx.item_id),
            "VERSION": lambda ctx, snap: str(snap.metadata.version),
            "JOBCODE": lambda ctx, snap: ctx.jobcode or "",

            "ROLL_NAME": _roll_name,
            "FILE_DIRECTORY": _file_directory,
            # undocumented, kept for older patterns
            "FILE_FOLDER": _file_directory,
            "FILE_NAME": _file_name,
            "FILE_EXTENSION": lambda ctx, snap: snap.file_extension,

            "SEQUENCE": lambda ctx, snap: f"{snap.sequence:04d}",
            "USERNAME": lambda ctx, snap: ctx.user_name(),
            "HOME": lambda ctx, snap: snap.home_dir,
            "HOME_FOLDER": lambda ctx, snap: snap.home_dir,
            "PICTURES_FOLDER": lambda ctx, snap: snap.pictures_dir,
            "DESKTOP": lambda ctx, snap: ctx.desktop_dir(),
            "DESKTOP_FOLDER": lambda ctx, snap: ctx.desktop_dir(),

            "STARS": lambda ctx, snap: str(snap.metadata.stars),
            "LABELS": _labels,
            "TITLE": _tag("title"),
            "CREATOR": _tag("creator"),
            "PUBLISHER": _tag("publisher"),
            "RIGHTS": _tag("rights"),
        }

    def names(self) -> List[str]:
        """Return all known variable names in alphabetical order."""
        return sorted(name for name, _ in self._bindings)

    def match(self, body: str) -> Optional[Tuple[str, Binding]]:
        """Return the longest binding whose name prefixes body, if any."""
        for name, binding in self._bindings:
            if body.startswith(name):
                return name, binding
        return None

    def resolve(
        self,
        body: str,
        ctx: ExpansionContext,
        snapshot: ExpansionSnapshot
    ) -> Tuple[Optional[str], int]:
        """
        Resolve the variable name at the start of a token body.

        Args:
            body: Token text between '$(' and ')'
            ctx: Expansion context
            snapshot: Derived values of the current expansion call

        Returns:
            Tuple of (value or None when unset, length of the matched name).
            A length of 0 means no known name matched.
        """
        found = self.match(body)
        if found is None:
            logger.debug(f"Unknown variable in token: $({body})")
            return None, 0

        name, binding = found
        try:
            value = binding(ctx, snapshot)
        except Exception as e:
            logger.warning(f"Failed to resolve $({name}): {e}")
            value = None
        return value, len(name)
