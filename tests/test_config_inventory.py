"""Tests for settings, profiles and host list resolution."""

from pathlib import Path

import pytest

from verscan.config import FSLOGIX_PROFILE, AuditSettings, get_profile
from verscan.inventory import read_hosts_file, resolve_host_list


def test_fslogix_profile_declares_nine_sources_in_column_order() -> None:
    assert FSLOGIX_PROFILE.source_names == [
        "install_version",
        "registry_version",
        "cli_service_version",
        "cli_apps_version",
        "frxsvc_version",
        "frxccds_version",
        "frxdrv_version",
        "frxdrvvt_version",
        "frxccd_version",
    ]


def test_get_profile_is_case_insensitive_and_rejects_unknown() -> None:
    assert get_profile("FSLogix") is FSLOGIX_PROFILE
    with pytest.raises(ValueError):
        get_profile("does-not-exist")


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VERSCAN_MINIMUM_VERSION", "2.9.8000.1")
    monkeypatch.setenv("VERSCAN_MAX_CONCURRENT", "8")
    monkeypatch.setenv("VERSCAN_HOST_TIMEOUT", "30.5")
    monkeypatch.setenv("VERSCAN_PLACEHOLDER_ON_TRANSPORT_ERROR", "yes")
    monkeypatch.setenv("VERSCAN_HOSTS", "vdi-01, vdi-02,,")

    settings = AuditSettings.from_env()

    assert settings.effective_minimum_version == "2.9.8000.1"
    assert settings.max_concurrent == 8
    assert settings.host_timeout == 30.5
    assert settings.placeholder_on_transport_error is True
    assert settings.extra_hosts == ["vdi-01", "vdi-02"]


def test_settings_default_minimum_comes_from_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VERSCAN_MINIMUM_VERSION", raising=False)

    assert AuditSettings.from_env().effective_minimum_version == "2.9.7653.47581"


def test_settings_reject_non_numeric_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VERSCAN_SSH_PORT", "twenty-two")

    with pytest.raises(ValueError):
        AuditSettings.from_env()


def test_hosts_file_skips_comments_and_blank_lines(tmp_path: Path) -> None:
    hosts_file = tmp_path / "hosts.txt"
    hosts_file.write_text("# pool A\nvdi-01\n\nvdi-02  # session host\n", encoding="utf-8")

    assert read_hosts_file(str(hosts_file)) == ["vdi-01", "vdi-02"]


def test_resolve_host_list_dedupes_preserving_order(tmp_path: Path) -> None:
    hosts_file = tmp_path / "hosts.txt"
    hosts_file.write_text("vdi-03\nVDI-01\n", encoding="utf-8")

    assert resolve_host_list(["vdi-01", " vdi-02 "], str(hosts_file)) == ["vdi-01", "vdi-02", "vdi-03"]


def test_resolve_host_list_defaults_to_local_host(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("verscan.inventory.local_host_identifier", lambda: "this-host")

    assert resolve_host_list() == ["this-host"]
    assert resolve_host_list([]) == ["this-host"]
