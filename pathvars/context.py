"""Expansion context for pathvars.

Holds caller-owned state across expansions (clock reading, item, source
path, job code, sequence counter, last result) and produces the immutable
per-call snapshot of derived values.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from .providers.types import (
    TAG_KEYS,
    Clock,
    IdentityProvider,
    ImageRecord,
    LocationProvider,
    MetadataStore,
    TimeFields,
)
from .providers.system import NullMetadataStore, SystemClock, SystemIdentity, SystemLocations


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemMetadata:
    """Item metadata as seen by one expansion call."""
    capture_time: Optional[TimeFields] = None
    iso: int = 100
    camera_maker: str = ""
    camera_alias: str = ""
    version: int = 0
    stars: int = 0
    tags: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    color_labels: Tuple[int, ...] = ()

    @classmethod
    def from_record(cls, record: ImageRecord) -> "ItemMetadata":
        """Copy what expansion needs out of a checked out record."""
        return cls(
            capture_time=record.capture_time,
            iso=record.iso,
            camera_maker=record.camera_maker or "",
            camera_alias=record.camera_alias or "",
            version=record.version,
            stars=record.stars,
            tags={key: tuple(record.tags.get(key) or ()) for key in TAG_KEYS},
            color_labels=tuple(record.color_labels),
        )

    def first_tag(self, key: str) -> Optional[str]:
        values = self.tags.get(key) or ()
        return values[0] if values else None


@dataclass(frozen=True)
class ExpansionSnapshot:
    """Derived values computed at the start of one expand call."""
    time: TimeFields
    capture_time: Optional[TimeFields]
    sequence: int
    home_dir: Optional[str]
    pictures_dir: Optional[str]
    file_extension: Optional[str]
    metadata: ItemMetadata

    @property
    def exif_time(self) -> TimeFields:
        """Capture time, or the wall clock time when none is known."""
        return self.capture_time if self.capture_time is not None else self.time


def file_extension(filename: Optional[str]) -> Optional[str]:
    """Return the text after the last '.' of a path ('' if there is none)."""
    if filename is None:
        return None
    dot = filename.rfind('.')
    if dot < 0:
        return ''
    return filename[dot + 1:]


class ExpansionContext:
    """
    Caller-owned state driving one or more expansions.

    The wall clock is read once when the context is created, so every
    expansion within one session sees the same date and time unless
    set_time() is called.

    The sequence counter starts fresh: the first advance after creation
    or reset_sequence() yields 0, each later advance adds one.
    """

    def __init__(
        self,
        item_id: Optional[int] = None,
        filename: Optional[str] = None,
        jobcode: Optional[str] = None,
        clock: Optional[Clock] = None,
        store: Optional[MetadataStore] = None,
        locations: Optional[LocationProvider] = None,
        identity: Optional[IdentityProvider] = None,
    ):
        """Initialize expansion context.

        Args:
            item_id: Item whose metadata feeds the item bindings
            filename: Source file path
            jobcode: Free text job code
            clock: Clock to read the wall time from (defaults to local time)
            store: Metadata store for item lookups (defaults to an empty store)
            locations: Directory provider (defaults to the platform's)
            identity: User name provider (defaults to the login user)
        """
        self.item_id = item_id
        self.filename = filename
        self.jobcode = jobcode
        self.clock = clock or SystemClock()
        self.store = store if store is not None else NullMetadataStore()
        self.locations = locations or SystemLocations()
        self.identity = identity or SystemIdentity()

        self.time = TimeFields.from_datetime(self.clock.now())
        self.capture_time: Optional[TimeFields] = None

        self._sequence = 0
        self._sequence_started = False

        self.result: Optional[str] = None

    def set_time(self, value: datetime) -> None:
        """Replace the wall clock reading."""
        self.time = TimeFields.from_datetime(value)

    def set_capture_time(self, value: Optional[datetime]) -> None:
        """Set an explicit capture time, used when the item provides none."""
        self.capture_time = TimeFields.from_datetime(value) if value is not None else None

    @property
    def sequence(self) -> int:
        return self._sequence

    def reset_sequence(self) -> None:
        self._sequence = 0
        self._sequence_started = False

    def advance_sequence(self) -> int:
        """Advance the stored counter and return its new value."""
        if self._sequence_started:
            self._sequence += 1
        else:
            self._sequence_started = True
        return self._sequence

    def get_result(self) -> str:
        """Return the last expansion result ('' before the first call)."""
        return self.result or ''

    def close(self) -> None:
        self.result = None

    def user_name(self) -> Optional[str]:
        return self._lookup("user name", self.identity.user_name)

    def desktop_dir(self) -> Optional[str]:
        return self._lookup("desktop directory", self.locations.desktop_dir)

    def snapshot(self, sequence: Optional[int] = None) -> ExpansionSnapshot:
        """
        Compute the derived values for one expansion call.

        Args:
            sequence: Per-call sequence override; negative or None uses
                the stored counter

        Returns:
            Immutable snapshot of the call-scoped values
        """
        home_dir = self._lookup("home directory", self.locations.home_dir)
        pictures_dir = self._lookup("pictures directory", self.locations.pictures_dir)
        if not pictures_dir and home_dir:
            pictures_dir = os.path.join(home_dir, 'Pictures')

        metadata = self._read_metadata()
        capture_time = metadata.capture_time
        if capture_time is None:
            capture_time = self.capture_time

        return ExpansionSnapshot(
            time=self.time,
            capture_time=capture_time,
            sequence=sequence if sequence is not None and sequence >= 0 else self._sequence,
            home_dir=home_dir,
            pictures_dir=pictures_dir,
            file_extension=file_extension(self.filename),
            metadata=metadata,
        )

    def _read_metadata(self) -> ItemMetadata:
        if not self.item_id:
            return ItemMetadata()

        try:
            with self.store.checkout(self.item_id) as record:
                if record is None:
                    logger.debug(f"No metadata for item {self.item_id}")
                    return ItemMetadata()
                return ItemMetadata.from_record(record)
        except Exception as e:
            logger.warning(f"Metadata lookup failed for item {self.item_id}: {e}")
            return ItemMetadata()

    def _lookup(self, what: str, getter: Callable[[], Any]) -> Optional[Any]:
        try:
            return getter()
        except Exception as e:
            logger.warning(f"Could not resolve {what}: {e}")
            return None
