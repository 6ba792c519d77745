"""Tests for HostProbe source reconciliation."""

import asyncio

import pytest

from verscan.collectors.probe import HostProbe, select_primary_entry
from verscan.config import FSLOGIX_PROFILE
from verscan.errors import AmbiguousInstallError, NotInstalledError, SubSourceReadError, TransportError
from verscan.parsers.install_entries import InstallEntry
from verscan.parsers.version_normalizer import UNKNOWN
from verscan.schemas.record import InstallCheck

from tests.fakes import GOOD_VERSION, MINIMUM, FakeHostFacilities, two_entries

PROFILE = FSLOGIX_PROFILE


def _probe(facilities: FakeHostFacilities, host: str = "vdi-01"):
    return asyncio.run(HostProbe(facilities, PROFILE).probe(host, MINIMUM))


def test_no_install_entries_yields_not_installed_record() -> None:
    facilities = FakeHostFacilities(entries=[])

    record = _probe(facilities)

    assert record.install_check == InstallCheck.NOT_INSTALLED
    assert record.validation_passed is False
    assert list(record.versions) == PROFILE.source_names
    assert set(record.versions.values()) == {UNKNOWN}
    # no sub-source reads without a confirmed install
    assert facilities.calls == ["install"]


def test_two_entries_all_sources_above_minimum_passes() -> None:
    record = _probe(FakeHostFacilities.healthy())

    assert record.install_check == InstallCheck.INSTALLED
    assert record.validation_passed is True
    assert set(record.versions.values()) == {GOOD_VERSION}
    assert record.host_identifier == "vdi-01"
    assert record.confidence == "high"


def test_missing_driver_file_fails_validation_but_keeps_other_findings() -> None:
    facilities = FakeHostFacilities.healthy()
    del facilities.file_versions[PROFILE.drivers[0].path]

    record = _probe(facilities)

    assert record.validation_passed is False
    assert record.versions[PROFILE.drivers[0].name] == UNKNOWN
    known = {k: v for k, v in record.versions.items() if k != PROFILE.drivers[0].name}
    assert set(known.values()) == {GOOD_VERSION}


def test_single_entry_is_ambiguous_and_not_resolved() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.entries = facilities.entries[:1]

    record = _probe(facilities)

    assert record.install_check == InstallCheck.INSTALLED
    assert record.validation_passed is False
    assert set(record.versions.values()) == {UNKNOWN}
    assert record.confidence == "low"
    assert len(record.warnings) == 1
    assert facilities.calls == ["install"]


def test_primary_entry_version_comes_from_largest_install() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.entries = [
        InstallEntry("FSLogix Apps RuleEditor", "1.0.0.0", estimated_size=10),
        InstallEntry("FSLogix Apps", GOOD_VERSION, estimated_size=900),
    ]

    record = _probe(facilities)

    assert record.versions["install_version"] == GOOD_VERSION
    assert record.validation_passed is True


def test_old_auxiliary_binary_fails_validation() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.file_versions[PROFILE.services[1].path] = "2.9.7000.1"

    record = _probe(facilities)

    assert record.versions[PROFILE.services[1].name] == "2.9.7000.1"
    assert record.validation_passed is False


def test_cli_failure_only_downgrades_cli_fields() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.cli_output = None

    record = _probe(facilities)

    for field in PROFILE.cli_schema.fields:
        assert record.versions[field] == UNKNOWN
    assert record.versions["registry_version"] == GOOD_VERSION
    assert record.validation_passed is False


def test_short_cli_output_does_not_crash_probe() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.cli_output = f"Service version: {GOOD_VERSION}"

    record = _probe(facilities)

    assert record.versions["cli_service_version"] == GOOD_VERSION
    assert record.versions["cli_apps_version"] == UNKNOWN


def test_unparseable_file_version_is_unknown() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.file_versions[PROFILE.services[0].path] = "not a version"

    record = _probe(facilities)

    assert record.versions[PROFILE.services[0].name] == UNKNOWN
    assert record.validation_passed is False


@pytest.mark.parametrize("garbage", ["3..0", "9x", "3.0.0.0-rc"])
def test_malformed_file_version_with_numeric_prefix_fails_validation(garbage: str) -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.file_versions[PROFILE.drivers[0].path] = garbage

    record = _probe(facilities)

    assert record.versions[PROFILE.drivers[0].name] == UNKNOWN
    assert record.validation_passed is False


def test_malformed_cli_value_is_unknown() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.cli_output = f"Service version: 3.0b\nFSLogix Apps version: {GOOD_VERSION}\n"

    record = _probe(facilities)

    assert record.versions["cli_service_version"] == UNKNOWN
    assert record.validation_passed is False


def test_windows_file_version_format_is_normalized() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.file_versions[PROFILE.drivers[2].path] = "2, 9, 7838, 44263"

    record = _probe(facilities)

    assert record.versions[PROFILE.drivers[2].name] == GOOD_VERSION
    assert record.validation_passed is True


def test_installer_query_failure_yields_unknown_install() -> None:
    facilities = FakeHostFacilities(install_error=SubSourceReadError("installer_registry", "access denied"))

    record = _probe(facilities)

    assert record.install_check == InstallCheck.UNKNOWN
    assert record.validation_passed is False
    assert record.confidence == "low"


def test_transport_error_propagates_to_caller() -> None:
    facilities = FakeHostFacilities.healthy()
    facilities.transport_error_on = "file"

    with pytest.raises(TransportError):
        _probe(facilities)


def test_select_primary_entry_breaks_ties_by_first_seen() -> None:
    first = InstallEntry("FSLogix Apps", "1", estimated_size=100, key_name="first")
    second = InstallEntry("FSLogix Apps", "2", estimated_size=100, key_name="second")

    assert select_primary_entry([first, second]).key_name == "first"


def test_select_primary_entry_classifies_missing_and_ambiguous() -> None:
    with pytest.raises(NotInstalledError):
        select_primary_entry([])
    with pytest.raises(AmbiguousInstallError):
        select_primary_entry(two_entries()[:1])
