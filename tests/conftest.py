"""Shared fixtures and fake collaborators for pathvars tests."""

from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Optional

import pytest

from pathvars.catalog import Catalog
from pathvars.context import ExpansionContext
from pathvars.providers.types import ImageRecord


class FixedClock:
    """Clock returning a fixed time."""

    def __init__(self, value: datetime):
        self.value = value
        self.calls = 0

    def now(self) -> datetime:
        self.calls += 1
        return self.value


class FakeLocations:
    """Location provider with preset directories."""

    def __init__(self, home: Optional[str] = "/home/tester",
                 pictures: Optional[str] = "/home/tester/Pictures",
                 desktop: Optional[str] = "/home/tester/Desktop"):
        self.home = home
        self.pictures = pictures
        self.desktop = desktop

    def home_dir(self) -> Optional[str]:
        return self.home

    def pictures_dir(self) -> Optional[str]:
        return self.pictures

    def desktop_dir(self) -> Optional[str]:
        return self.desktop


class FakeIdentity:
    def __init__(self, name: Optional[str] = "tester"):
        self.name = name

    def user_name(self) -> Optional[str]:
        return self.name


class FailingStore:
    """Metadata store whose checkout always fails."""

    @contextmanager
    def checkout(self, item_id: int):
        raise RuntimeError("store unavailable")
        yield


def make_context(records: Optional[Dict[int, ImageRecord]] = None, **kwargs) -> ExpansionContext:
    """Create a context wired to fake collaborators."""
    kwargs.setdefault('clock', FixedClock(datetime(2024, 3, 5, 14, 7, 9)))
    kwargs.setdefault('locations', FakeLocations())
    kwargs.setdefault('identity', FakeIdentity())
    if records is not None:
        kwargs.setdefault('store', Catalog(records))
    return ExpansionContext(**kwargs)


@pytest.fixture
def nikon_record():
    return ImageRecord(
        id=42,
        datetime_taken="2023:07:14 09:30:05",
        iso=400,
        camera_maker="nikon",
        camera_alias="D750",
        version=2,
        flags=3,
        tags={
            "title": ["Harbour at dawn", "Second title"],
            "creator": ["Jo Doe"],
            "publisher": [],
            "rights": ["CC-BY"],
        },
        color_labels=[0, 3],
    )


@pytest.fixture
def ctx():
    """Context with a source file and no item."""
    return make_context(filename="/photos/2024/roll_one/img0001.cr2")


@pytest.fixture
def item_ctx(nikon_record):
    """Context with a source file and a catalog item."""
    return make_context(
        records={nikon_record.id: nikon_record},
        item_id=nikon_record.id,
        filename="/photos/2024/roll_one/img0001.cr2",
        jobcode="shoot1",
    )
