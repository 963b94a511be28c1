"""Color label names and their translated display strings."""

import gettext
from typing import Iterable, List, Optional


COLOR_LABELS = ("red", "yellow", "green", "blue", "purple")

_translation = gettext.translation("pathvars", fallback=True)


def label_to_string(index: int) -> Optional[str]:
    """Return the untranslated name for a label index, or None if unknown."""
    if 0 <= index < len(COLOR_LABELS):
        return COLOR_LABELS[index]
    return None


def label_from_string(name: str) -> Optional[int]:
    """Return the label index for a name (case-insensitive), or None."""
    try:
        return COLOR_LABELS.index(name.strip().lower())
    except ValueError:
        return None


def translated_labels(indices: Iterable[int]) -> List[str]:
    """Translate label indices to display names, skipping unknown ones."""
    names = []
    for index in indices:
        name = label_to_string(index)
        if name is not None:
            names.append(_translation.gettext(name))
    return names
