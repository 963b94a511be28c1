"""Tests for the pathvars command line interface."""

import logging

import pytest

from pathvars.cli.main import create_parser, main
from pathvars.cli.commands.expand import build_context, parse_time


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("""
version: "1"
items:
  - id: 42
    datetime_taken: "2023:07:14 09:30:05"
    maker: nikon
    title: [Harbour]
""")
    return path


class TestExpandCommand:
    def test_expand_file_variables(self, capsys):
        code = main(["expand", "$(FILE_NAME^^)_$(FILE_EXTENSION)", "--file", "/p/roll/img0001.cr2"])
        assert code == 0
        assert capsys.readouterr().out == "IMG0001_cr2\n"

    def test_expand_with_time(self, capsys):
        code = main(["expand", "$(YEAR)-$(MONTH)-$(DAY)", "--time", "2024-03-05T10:11:12"])
        assert code == 0
        assert capsys.readouterr().out == "2024-03-05\n"

    def test_expand_with_catalog(self, capsys, catalog_file):
        code = main([
            "expand", "$(EXIF_YEAR)/$(MAKER^)/$(TITLE)_$(ID)",
            "--catalog", str(catalog_file), "--id", "42",
        ])
        assert code == 0
        assert capsys.readouterr().out == "2023/Nikon/Harbour_42\n"

    def test_count_numbers_lines(self, capsys):
        code = main(["expand", "img_$(SEQUENCE)", "--count", "3"])
        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["img_0000", "img_0001", "img_0002"]

    def test_sequence_override(self, capsys):
        code = main(["expand", "$(SEQUENCE)", "--sequence", "12"])
        assert code == 0
        assert capsys.readouterr().out == "0012\n"

    def test_jobcode(self, capsys):
        assert main(["expand", "$(JOBCODE-none)"]) == 0
        assert main(["expand", "$(JOBCODE-none)", "--jobcode", "wedding"]) == 0
        assert capsys.readouterr().out.splitlines() == ["none", "wedding"]

    def test_invalid_time(self, capsys):
        assert main(["expand", "$(YEAR)", "--time", "yesterday"]) == 2
        assert capsys.readouterr().out == ""

    def test_invalid_count(self):
        assert main(["expand", "x", "--count", "0"]) == 2

    def test_missing_catalog(self, tmp_path):
        assert main(["expand", "x", "--catalog", str(tmp_path / "nope.yaml")]) == 1

    def test_invalid_catalog(self, tmp_path, caplog):
        path = tmp_path / "bad.yaml"
        path.write_text('version: "1"\nitems:\n  - id: zero\n')
        with caplog.at_level(logging.ERROR):
            assert main(["expand", "x", "--catalog", str(path)]) == 2
        assert "Validation error at items[0]: " in caplog.text
        assert "positive integer" in caplog.text


class TestVariablesCommand:
    def test_lists_names(self, capsys):
        assert main(["variables"]) == 0
        names = capsys.readouterr().out.splitlines()
        assert "FILE_NAME" in names
        assert "EXIF_ISO" in names
        assert names == sorted(names)


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_build_context(catalog_file):
    args = create_parser().parse_args([
        "expand", "x", "--catalog", str(catalog_file), "--id", "42",
        "--file", "/a/b.jpg", "--capture-time", "2001-02-03T04:05:06",
    ])
    ctx = build_context(args)
    assert ctx.item_id == 42
    assert ctx.filename == "/a/b.jpg"
    assert ctx.capture_time is not None
    assert ctx.capture_time.year == 2001
    assert 42 in ctx.store


def test_parse_time():
    assert parse_time(None, "--time") is None
    assert parse_time("2020-01-02T03:04:05", "--time").hour == 3
    with pytest.raises(ValueError, match="--time"):
        parse_time("soon", "--time")
