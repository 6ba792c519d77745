from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, field_serializer, field_validator, model_validator

from ..parsers.version_normalizer import UNKNOWN, VersionComparator


class InstallCheck(str, Enum):
    INSTALLED = "Installed"
    NOT_INSTALLED = "NotInstalled"
    UNKNOWN = "Unknown"


def compute_validation(
    install_check: InstallCheck,
    versions: Mapping[str, str],
    minimum_version: str
) -> bool:
    """모든 소스가 확인되었고 모두 최소 버전 이상일 때만 True"""
    if install_check != InstallCheck.INSTALLED or not versions:
        return False

    collected = set(versions.values())
    if UNKNOWN in collected:
        return False

    return all(VersionComparator.meets_minimum(v, minimum_version) for v in collected)


class VersionRecord(BaseModel):
    """호스트별 버전 감사 결과 (필드 순서는 내보내기 컬럼 순서와 동일)"""
    host_identifier: str
    validation_passed: bool
    minimum_version: str
    install_check: InstallCheck
    versions: Mapping[str, str]
    confidence: str = "high"  # high, medium, low
    warnings: Tuple[str, ...] = ()

    class Config:
        frozen = True

    @field_validator("versions", mode="after")
    @classmethod
    def _freeze_versions(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        # 생성 이후에는 소스별 버전도 변경 불가
        return MappingProxyType(dict(value))

    @field_serializer("versions")
    def _serialize_versions(self, value: Mapping[str, str]) -> Dict[str, str]:
        return dict(value)

    @model_validator(mode="after")
    def _check_consistency(self):
        for source, value in self.versions.items():
            if value != UNKNOWN and not VersionComparator.is_valid(value):
                raise ValueError(f"Source '{source}' holds an invalid version: {value!r}")

        if self.install_check != InstallCheck.INSTALLED:
            known = [s for s, v in self.versions.items() if v != UNKNOWN]
            if known:
                raise ValueError(
                    f"install_check={self.install_check.value} but sources are populated: {known}"
                )

        expected = compute_validation(self.install_check, self.versions, self.minimum_version)
        if self.validation_passed != expected:
            raise ValueError(
                f"validation_passed={self.validation_passed} is inconsistent with collected versions"
            )
        return self

    @classmethod
    def build(
        cls,
        host_identifier: str,
        minimum_version: str,
        install_check: InstallCheck,
        versions: Dict[str, str],
        confidence: str = "high",
        warnings: Optional[List[str]] = None
    ) -> "VersionRecord":
        """수집된 버전으로 레코드 생성 (validation_passed 자동 계산)"""
        if install_check != InstallCheck.INSTALLED:
            versions = {name: UNKNOWN for name in versions}

        return cls(
            host_identifier=host_identifier,
            validation_passed=compute_validation(install_check, versions, minimum_version),
            minimum_version=minimum_version,
            install_check=install_check,
            versions=dict(versions),
            confidence=confidence,
            warnings=tuple(warnings or ()),
        )

    @classmethod
    def placeholder(
        cls,
        host_identifier: str,
        minimum_version: str,
        source_names: Iterable[str],
        install_check: InstallCheck = InstallCheck.UNKNOWN,
        warning: str = ""
    ) -> "VersionRecord":
        """수집 불가 호스트용 레코드 (모든 소스 Unknown)"""
        return cls.build(
            host_identifier=host_identifier,
            minimum_version=minimum_version,
            install_check=install_check,
            versions={name: UNKNOWN for name in source_names},
            confidence="low",
            warnings=[warning] if warning else [],
        )

    def recompute_validation(self) -> bool:
        return compute_validation(self.install_check, self.versions, self.minimum_version)

    def to_row(self) -> Dict[str, str]:
        """CSV/테이블 내보내기용 평탄화 (고정 필드 → 소스별 컬럼 순)"""
        row = {
            "host_identifier": self.host_identifier,
            "validation_passed": str(self.validation_passed),
            "minimum_version": self.minimum_version,
            "install_check": self.install_check.value,
        }
        row.update(self.versions)
        row["confidence"] = self.confidence
        row["warnings"] = "; ".join(self.warnings)
        return row
