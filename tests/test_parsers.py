"""Tests for CLI output and installer-registry parsers."""

import json

from verscan.parsers.cli_output import CliOutputParser, CliOutputSchema
from verscan.parsers.install_entries import InstallEntryParser
from verscan.parsers.version_normalizer import UNKNOWN

SCHEMA = CliOutputSchema(version=1, fields=("cli_service_version", "cli_apps_version"))


def test_cli_parser_maps_lines_to_schema_fields() -> None:
    output = (
        "Service version: 2.9.7838.44263\n"
        "\n"
        "FSLogix Apps version:   2.9.7838.44263  \n"
        "Operation completed successfully!\n"
    )
    parser = CliOutputParser(SCHEMA)

    result = parser.parse(output)

    assert result == {
        "cli_service_version": "2.9.7838.44263",
        "cli_apps_version": "2.9.7838.44263",
    }
    assert parser.get_errors() == []


def test_cli_parser_short_output_marks_missing_fields_unknown() -> None:
    parser = CliOutputParser(SCHEMA)

    result = parser.parse("Service version: 2.9.7838.44263")

    assert result["cli_service_version"] == "2.9.7838.44263"
    assert result["cli_apps_version"] == UNKNOWN
    assert len(parser.get_errors()) == 1


def test_cli_parser_line_without_delimiter_is_unknown() -> None:
    parser = CliOutputParser(SCHEMA)

    result = parser.parse("frx.exe: not found\nsomething went wrong")

    assert result == {"cli_service_version": "not found", "cli_apps_version": UNKNOWN}


def test_cli_parser_empty_output() -> None:
    parser = CliOutputParser(SCHEMA)

    assert parser.parse("") == {"cli_service_version": UNKNOWN, "cli_apps_version": UNKNOWN}
    assert parser.get_errors() == ["Empty CLI output"]


def test_cli_parser_keeps_colons_inside_values() -> None:
    schema = CliOutputSchema(version=1, fields=("path",))

    assert CliOutputParser(schema).parse(r"Install path: C:\Program Files")["path"] == r"C:\Program Files"


def test_install_parser_accepts_single_object() -> None:
    raw = json.dumps({
        "DisplayName": "Microsoft FSLogix Apps",
        "DisplayVersion": "2.9.7838.44263",
        "EstimatedSize": 65536,
        "PSChildName": "{A}",
    })

    entries = InstallEntryParser().parse(raw)

    assert len(entries) == 1
    assert entries[0].display_name == "Microsoft FSLogix Apps"
    assert entries[0].estimated_size == 65536
    assert entries[0].key_name == "{A}"


def test_install_parser_accepts_array_and_null_sizes() -> None:
    raw = json.dumps([
        {"DisplayName": "Microsoft FSLogix Apps", "DisplayVersion": "2.9.1", "EstimatedSize": None},
        {"DisplayName": "Microsoft FSLogix Apps RuleEditor", "DisplayVersion": None, "EstimatedSize": "12"},
    ])

    entries = InstallEntryParser().parse(raw)

    assert [e.estimated_size for e in entries] == [0, 12]
    assert entries[1].display_version == ""


def test_install_parser_empty_output_means_no_entries() -> None:
    parser = InstallEntryParser()

    assert parser.parse("") == []
    assert parser.parse("   \r\n") == []
    assert parser.get_errors() == []


def test_install_parser_reports_invalid_json() -> None:
    parser = InstallEntryParser()

    assert parser.parse("Get-ItemProperty : access denied") == []
    assert parser.get_errors()[0].startswith("Invalid JSON")


def test_install_parser_skips_entries_without_display_name() -> None:
    parser = InstallEntryParser()

    entries = parser.parse(json.dumps([{"DisplayVersion": "1.0"}, {"DisplayName": "FSLogix Apps"}]))

    assert [e.display_name for e in entries] == ["FSLogix Apps"]
    assert len(parser.get_errors()) == 1
