"""
Collaborators consumed by variable expansion.

Provides the protocols the expander depends on and system backed
implementations of each.
"""

from .types import (
    TAG_KEYS,
    TimeFields,
    ImageRecord,
    Clock,
    MetadataStore,
    LocationProvider,
    IdentityProvider,
)
from .system import SystemClock, SystemIdentity, SystemLocations, NullMetadataStore


__all__ = [
    "TAG_KEYS",
    "TimeFields",
    "ImageRecord",
    "Clock",
    "MetadataStore",
    "LocationProvider",
    "IdentityProvider",
    "SystemClock",
    "SystemIdentity",
    "SystemLocations",
    "NullMetadataStore",
]
