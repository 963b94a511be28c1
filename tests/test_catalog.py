"""Tests for catalog loading and validation."""

import tempfile
from pathlib import Path

import pytest
import yaml

from pathvars.catalog import Catalog, CatalogLoader
from pathvars.exceptions import CatalogValidationError


class TestCatalogLoader:
    """Strict validation of catalog YAML."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.workspace = Path(self.temp_dir)
        self.loader = CatalogLoader()

    def write_catalog(self, content) -> Path:
        """Helper to write catalog YAML."""
        path = self.workspace / "catalog.yaml"
        with open(path, 'w') as f:
            if isinstance(content, str):
                f.write(content)
            else:
                yaml.dump(content, f)
        return path

    def test_load_valid_catalog(self):
        path = self.write_catalog("""
version: "1"
items:
  - id: 42
    datetime_taken: "2023:07:14 09:30:05"
    iso: 400
    maker: Nikon
    model: D750
    version: 1
    flags: 3
    title: Harbour
    creator: ["Jo Doe", "Sam Roe"]
    rights: [CC-BY]
    color_labels: [red, 3]
  - id: 7
""")
        catalog = self.loader.load(path)

        assert len(catalog) == 2
        assert 42 in catalog
        record = catalog.records[42]
        assert record.datetime_taken == "2023:07:14 09:30:05"
        assert record.iso == 400
        assert record.camera_maker == "Nikon"
        assert record.camera_alias == "D750"
        assert record.version == 1
        assert record.stars == 3
        assert record.tags["title"] == ["Harbour"]
        assert record.tags["creator"] == ["Jo Doe", "Sam Roe"]
        assert record.tags["publisher"] == []
        assert record.color_labels == [0, 3]

        minimal = catalog.records[7]
        assert minimal.iso == 100
        assert minimal.version == 0
        assert minimal.capture_time is None

    def test_yes_no_values_stay_strings(self):
        path = self.write_catalog("""
version: "1"
items:
  - id: 1
    title: no
    maker: on
""")
        record = self.loader.load(path).records[1]
        assert record.tags["title"] == ["no"]
        assert record.camera_maker == "on"

    def test_unquoted_timestamp_accepted(self):
        path = self.write_catalog("""
version: "1"
items:
  - id: 1
    datetime_taken: 2023-07-14 09:30:05
""")
        record = self.loader.load(path).records[1]
        assert record.datetime_taken == "2023:07:14 09:30:05"

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            self.loader.load(self.workspace / "missing.yaml")

    def test_invalid_yaml(self):
        path = self.write_catalog("version: [unclosed\n")
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        assert exc_info.value.exit_code == 2
        assert "Failed to parse catalog" in exc_info.value.errors[0].message

    def test_not_a_mapping(self):
        path = self.write_catalog("- 1\n- 2\n")
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        assert "must be a YAML object" in exc_info.value.errors[0].message

    def test_version_required(self):
        path = self.write_catalog({"items": []})
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        assert any("'version' field is required" in e.message for e in exc_info.value.errors)

    def test_unsupported_version(self):
        path = self.write_catalog({"version": "9", "items": []})
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        assert any("Unsupported version" in e.message for e in exc_info.value.errors)

    def test_unknown_fields_rejected(self):
        path = self.write_catalog({
            "version": "1",
            "extra": True,
            "items": [{"id": 1, "lens": "50mm"}],
        })
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        messages = [e.message for e in exc_info.value.errors]
        assert "Unknown field 'extra'" in messages
        assert "Unknown item field 'lens'" in messages

    def test_all_errors_collected(self):
        path = self.write_catalog({
            "version": "1",
            "items": [
                {"iso": "fast"},
                {"id": -3},
                {"id": 2, "color_labels": ["magenta"]},
                {"id": 4, "title": {"nested": "map"}},
                "not a mapping",
            ],
        })
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)

        errors = exc_info.value.errors
        paths = {e.path for e in errors}
        assert {"items[0]", "items[1]", "items[2].color_labels", "items[3].title", "items[4]"} <= paths
        assert any("missing required 'id'" in e.message for e in errors)
        assert any("'iso' must be an integer" in e.message for e in errors)
        assert any("positive integer" in e.message for e in errors)
        assert "items[2].color_labels" in str(exc_info.value)

    def test_duplicate_ids(self):
        path = self.write_catalog({"version": "1", "items": [{"id": 1}, {"id": 1}]})
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        assert exc_info.value.errors[0].message == "Duplicate item id 1"
        assert exc_info.value.errors[0].path == "items[1]"

    def test_error_messages_name_their_location(self):
        path = self.write_catalog({"items": [{"id": 0}]})
        with pytest.raises(CatalogValidationError) as exc_info:
            self.loader.load(path)
        lines = str(exc_info.value).splitlines()
        assert "Validation error: 'version' field is required" in lines
        assert any(line.startswith("Validation error at items[0]: ") for line in lines)
        assert exc_info.value.exit_code == 2

    def test_empty_items(self):
        path = self.write_catalog({"version": "1", "items": None})
        assert len(self.loader.load(path)) == 0

    def test_loader_reusable_after_error(self):
        bad = self.write_catalog({"version": "1", "items": [{"id": "x"}]})
        with pytest.raises(CatalogValidationError):
            self.loader.load(bad)
        good = self.write_catalog({"version": "1", "items": [{"id": 1}]})
        assert len(self.loader.load(good)) == 1


class TestCatalogCheckout:
    def test_checkout_known_item(self):
        loader = CatalogLoader()
        catalog = loader.load_data({"version": "1", "items": [{"id": 5, "maker": "Fuji"}]})
        with catalog.checkout(5) as record:
            assert catalog.active_checkouts == 1
            assert record.camera_maker == "Fuji"
        assert catalog.active_checkouts == 0

    def test_checkout_unknown_item(self):
        catalog = Catalog()
        with catalog.checkout(1) as record:
            assert record is None
        assert catalog.active_checkouts == 0

    def test_checkout_released_on_error(self):
        catalog = Catalog()
        with pytest.raises(RuntimeError):
            with catalog.checkout(1):
                raise RuntimeError("boom")
        assert catalog.active_checkouts == 0
