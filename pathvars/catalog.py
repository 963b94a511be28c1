"""Metadata catalog loading and strict validation.

A catalog is a YAML file listing items and their metadata. The loaded
Catalog serves as the MetadataStore for expansion.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import yaml

from pathvars.colorlabels import COLOR_LABELS, label_from_string
from pathvars.exceptions import CatalogValidationError, ValidationError
from pathvars.providers.types import TAG_KEYS, ImageRecord


logger = logging.getLogger(__name__)


class CatalogYamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps values like 'on'/'off'/'yes'/'no' as strings."""
    pass


# Tag values such as a title of "No" must stay strings, drop the YAML 1.1 bool resolvers
CatalogYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != 'tag:yaml.org,2002:bool']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class Catalog:
    """In-memory metadata store built from a validated catalog file."""

    def __init__(self, records: Optional[Dict[int, ImageRecord]] = None):
        self.records: Dict[int, ImageRecord] = dict(records or {})
        self.active_checkouts = 0

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.records

    @contextmanager
    def checkout(self, item_id: int) -> Iterator[Optional[ImageRecord]]:
        """
        Check out an item's record for reading.

        Args:
            item_id: Item identifier

        Yields:
            The record, or None if the catalog has no such item
        """
        self.active_checkouts += 1
        logger.debug(f"Checked out item {item_id}")
        try:
            yield self.records.get(item_id)
        finally:
            self.active_checkouts -= 1
            logger.debug(f"Released item {item_id}")


class CatalogLoader:
    """Loads and validates catalog YAML."""

    SUPPORTED_VERSIONS = {"1"}
    ITEM_FIELDS = {
        'id', 'datetime_taken', 'iso', 'maker', 'model', 'version', 'flags',
        'color_labels', *TAG_KEYS
    }
    INT_FIELDS = ('iso', 'version', 'flags')
    STR_FIELDS = ('datetime_taken', 'maker', 'model')

    def __init__(self):
        """Initialize loader."""
        self.errors: List[ValidationError] = []

    def load(self, catalog_path: Path) -> Catalog:
        """Load and validate a catalog file.

        Raises:
            FileNotFoundError: If the file does not exist
            CatalogValidationError: If the content is invalid
        """
        self.errors = []
        catalog_path = Path(catalog_path)
        if not catalog_path.exists():
            raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

        try:
            with open(catalog_path, 'r', encoding='utf-8') as f:
                data = yaml.load(f, Loader=CatalogYamlLoader)
        except yaml.YAMLError as e:
            self._add_error(f"Failed to parse catalog: {e}")
            self._raise_validation_errors()

        logger.debug(f"Loaded catalog file: {catalog_path}")
        return self.load_data(data)

    def load_data(self, data: Any) -> Catalog:
        """Validate already parsed catalog data and build a Catalog."""
        self.errors = []
        if not isinstance(data, dict):
            self._add_error("Catalog must be a YAML object/dictionary")
            self._raise_validation_errors()

        version = data.get('version')
        if version is None:
            self._add_error("'version' field is required")
        elif str(version) not in self.SUPPORTED_VERSIONS:
            self._add_error(f"Unsupported version '{version}'. Supported: {sorted(self.SUPPORTED_VERSIONS)}")

        for key in data:
            if key not in ('version', 'items'):
                self._add_error(f"Unknown field '{key}'")

        records: Dict[int, ImageRecord] = {}
        items = data.get('items', [])
        if items is None:
            items = []
        if not isinstance(items, list):
            self._add_error("'items' must be a list")
            items = []

        for i, item in enumerate(items):
            record = self._validate_item(item, f"items[{i}]")
            if record is None:
                continue
            if record.id in records:
                self._add_error(f"Duplicate item id {record.id}", f"items[{i}]")
                continue
            records[record.id] = record

        if self.errors:
            self._raise_validation_errors()

        logger.debug(f"Catalog holds {len(records)} items")
        return Catalog(records)

    def _validate_item(self, item: Any, path: str) -> Optional[ImageRecord]:
        """Validate one item mapping, returning a record when it is valid."""
        if not isinstance(item, dict):
            self._add_error("Item must be a dictionary", path)
            return None

        error_count = len(self.errors)

        for key in item:
            if key not in self.ITEM_FIELDS:
                self._add_error(f"Unknown item field '{key}'", path)

        item_id = item.get('id')
        if item_id is None:
            self._add_error("Item missing required 'id' field", path)
        elif not self._is_int(item_id) or item_id <= 0:
            self._add_error(f"'id' must be a positive integer, got {item_id!r}", path)

        for key in self.INT_FIELDS:
            if key in item and not self._is_int(item[key]):
                self._add_error(f"'{key}' must be an integer, got {type(item[key]).__name__}", path)

        for key in self.STR_FIELDS:
            if key in item and item[key] is not None and not isinstance(item[key], (str, int, float, datetime)):
                self._add_error(f"'{key}' must be a string, got {type(item[key]).__name__}", path)

        tags = {key: self._validate_tag_values(item.get(key), f"{path}.{key}") for key in TAG_KEYS}
        labels = self._validate_color_labels(item.get('color_labels'), f"{path}.color_labels")

        if len(self.errors) > error_count:
            return None

        return ImageRecord(
            id=item_id,
            datetime_taken=self._capture_text(item.get('datetime_taken')),
            iso=item.get('iso', 100),
            camera_maker=self._text(item.get('maker')),
            camera_alias=self._text(item.get('model')),
            version=item.get('version', 0),
            flags=item.get('flags', 0),
            tags=tags,
            color_labels=labels,
        )

    def _validate_tag_values(self, value: Any, path: str) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            self._add_error("Tag values must be a string or a list of strings", path)
            return []

        values = []
        for i, entry in enumerate(value):
            if isinstance(entry, (str, int, float)) and not isinstance(entry, bool):
                values.append(str(entry))
            else:
                self._add_error(f"Tag value {i} must be a string", path)
        return values

    def _validate_color_labels(self, value: Any, path: str) -> List[int]:
        if value is None:
            return []
        if not isinstance(value, list):
            value = [value]

        labels = []
        for entry in value:
            if self._is_int(entry) and 0 <= entry < len(COLOR_LABELS):
                labels.append(entry)
            elif isinstance(entry, str) and label_from_string(entry) is not None:
                labels.append(label_from_string(entry))
            else:
                self._add_error(
                    f"Unknown color label {entry!r}. Supported: {list(COLOR_LABELS)} or 0-{len(COLOR_LABELS) - 1}",
                    path
                )
        return labels

    @staticmethod
    def _is_int(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    @staticmethod
    def _capture_text(value: Any) -> str:
        # Unquoted ISO timestamps arrive as datetime objects
        if isinstance(value, datetime):
            return value.strftime("%Y:%m:%d %H:%M:%S")
        return CatalogLoader._text(value)

    @staticmethod
    def _text(value: Any) -> str:
        return '' if value is None else str(value)

    def _add_error(self, message: str, path: str = ""):
        """Add validation error."""
        self.errors.append(ValidationError(message, path))

    def _raise_validation_errors(self):
        """Raise CatalogValidationError with accumulated errors."""
        raise CatalogValidationError(self.errors)
