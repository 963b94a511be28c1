"""
Collaborator type definitions for variable expansion.

Defines the item record, time fields and the read-only capabilities the
expander consumes: clock, metadata store, location and identity providers.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import ContextManager, Dict, List, Optional, Protocol


TAG_KEYS = ("title", "creator", "publisher", "rights")

# Raw rating bits that mark an item as rejected
REJECTED_RATING = 6

_CAPTURE_TIME_PATTERN = re.compile(
    r'^\s*([+-]?\d+):\s*([+-]?\d+):\s*([+-]?\d+)\s+([+-]?\d+):\s*([+-]?\d+):\s*([+-]?\d+)'
)


@dataclass(frozen=True)
class TimeFields:
    """Broken-down local time as used by the date bindings."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    @classmethod
    def from_datetime(cls, value: datetime) -> "TimeFields":
        """Build time fields from a datetime."""
        return cls(value.year, value.month, value.day,
                   value.hour, value.minute, value.second)

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["TimeFields"]:
        """
        Parse an EXIF style "YYYY:MM:DD HH:MM:SS" timestamp.

        Fields are not range checked, only all six must be present.

        Args:
            text: Timestamp text, may be None or empty

        Returns:
            Parsed fields or None if the text does not hold six fields
        """
        if not text:
            return None
        match = _CAPTURE_TIME_PATTERN.match(text)
        if not match:
            return None
        return cls(*(int(group) for group in match.groups()))


@dataclass
class ImageRecord:
    """
    Metadata for a single item as handed out by a metadata store.

    Attributes:
        id: Item identifier
        datetime_taken: Capture timestamp text ("YYYY:MM:DD HH:MM:SS")
        iso: Capture ISO
        camera_maker: Camera maker name
        camera_alias: Camera model alias
        version: Item version (duplicate number)
        flags: Raw flag bits, the low three bits hold the star rating
        tags: Textual tag lists keyed by title/creator/publisher/rights
        color_labels: Color label indices attached to the item
    """
    id: int
    datetime_taken: str = ""
    iso: int = 100
    camera_maker: str = ""
    camera_alias: str = ""
    version: int = 0
    flags: int = 0
    tags: Dict[str, List[str]] = field(default_factory=dict)
    color_labels: List[int] = field(default_factory=list)

    @property
    def stars(self) -> int:
        """Star rating 0-5, or -1 when the item is rejected."""
        stars = self.flags & 0x7
        if stars == REJECTED_RATING:
            return -1
        return stars

    @property
    def capture_time(self) -> Optional[TimeFields]:
        return TimeFields.parse(self.datetime_taken)


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime:
        ...


class MetadataStore(Protocol):
    """
    Read access to item metadata.

    checkout() is a scoped acquisition: the record is only valid inside
    the with block and the store releases it when the block exits.
    """

    def checkout(self, item_id: int) -> ContextManager[Optional[ImageRecord]]:
        ...


class LocationProvider(Protocol):
    """Resolves per-user filesystem locations."""

    def home_dir(self) -> Optional[str]:
        ...

    def pictures_dir(self) -> Optional[str]:
        ...

    def desktop_dir(self) -> Optional[str]:
        ...


class IdentityProvider(Protocol):
    """Resolves the current user's name."""

    def user_name(self) -> Optional[str]:
        ...
