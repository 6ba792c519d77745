"""
Host Probe - 호스트 단위 버전 수집 및 검증

여러 소스(설치 레지스트리, 제품 레지스트리, CLI, 서비스/드라이버 바이너리)의
버전을 하나의 VersionRecord 로 조합합니다.

실행 흐름:
1. 설치 엔트리 조회 (없으면 NotInstalled 로 종료)
2. 엔트리 1건이면 모호한 설치로 보고 나머지 수집 생략
3. 2건 이상이면 EstimatedSize 가 가장 큰 엔트리를 주 패키지로 선택 후 모든 소스 수집
4. 모든 소스가 확인되고 최소 버전 이상일 때만 validation_passed
"""

import logging
from typing import Awaitable, Dict, List, Optional

from ..config import ProductProfile
from ..errors import AmbiguousInstallError, NotInstalledError, TransportError
from ..parsers.cli_output import CliOutputParser
from ..parsers.install_entries import InstallEntry
from ..parsers.version_normalizer import UNKNOWN, VersionComparator
from ..schemas.record import InstallCheck, VersionRecord
from .facilities import HostFacilities

logger = logging.getLogger(__name__)


def select_primary_entry(entries: List[InstallEntry]) -> InstallEntry:
    """
    주 패키지 엔트리 선택

    Raises:
        NotInstalledError: 엔트리 없음
        AmbiguousInstallError: 엔트리 1건 (보조 패키지 누락)
    """
    if not entries:
        raise NotInstalledError("No matching installer entries")
    if len(entries) == 1:
        raise AmbiguousInstallError(
            f"Only one installer entry found ({entries[0].display_name}); expected primary and auxiliary packages"
        )

    # max()는 동률일 때 먼저 나온 엔트리를 반환
    return max(entries, key=lambda e: e.estimated_size)


class HostProbe:
    """호스트 버전 프로브 (호스트 상태를 변경하지 않고 레코드만 반환)"""

    def __init__(self, facilities: HostFacilities, profile: ProductProfile):
        self.facilities = facilities
        self.profile = profile
        self._cli_parser = CliOutputParser(profile.cli_schema)

    async def probe(self, host_identifier: str, minimum_version: str) -> VersionRecord:
        """
        호스트 버전 수집

        Args:
            host_identifier: 레코드에 기록할 호스트명/주소
            minimum_version: 요구 최소 버전

        Returns:
            VersionRecord (호스트 로컬 오류로는 예외를 던지지 않음)

        Raises:
            TransportError: 수집 도중 연결이 끊긴 경우
        """
        source_names = self.profile.source_names

        try:
            entries = await self.facilities.query_install_entries(self.profile.display_name_pattern)
        except TransportError:
            raise
        except Exception as e:
            logger.warning(f"[{host_identifier}] Installer query failed: {e}")
            return VersionRecord.placeholder(
                host_identifier, minimum_version, source_names,
                warning=f"Installer query failed: {e}"
            )

        try:
            primary = select_primary_entry(entries)
        except NotInstalledError:
            logger.info(f"[{host_identifier}] {self.profile.name} is not installed")
            return VersionRecord.build(
                host_identifier=host_identifier,
                minimum_version=minimum_version,
                install_check=InstallCheck.NOT_INSTALLED,
                versions={name: UNKNOWN for name in source_names},
            )
        except AmbiguousInstallError as e:
            logger.warning(f"[{host_identifier}] {e}")
            return VersionRecord.build(
                host_identifier=host_identifier,
                minimum_version=minimum_version,
                install_check=InstallCheck.INSTALLED,
                versions={name: UNKNOWN for name in source_names},
                confidence="low",
                warnings=[str(e)],
            )

        versions = await self._collect_versions(host_identifier, primary)

        record = VersionRecord.build(
            host_identifier=host_identifier,
            minimum_version=minimum_version,
            install_check=InstallCheck.INSTALLED,
            versions=versions,
        )

        unknown = [name for name, value in versions.items() if value == UNKNOWN]
        if unknown:
            logger.info(f"[{host_identifier}] Unresolved sources: {', '.join(unknown)}")
        logger.info(
            f"[{host_identifier}] Probe completed: validation_passed={record.validation_passed}"
        )
        return record

    async def _collect_versions(self, host: str, primary: InstallEntry) -> Dict[str, str]:
        """소스별 버전 수집 (프로파일 소스 순서 유지)"""
        profile = self.profile
        versions: Dict[str, str] = {}

        versions[profile.INSTALL_SOURCE] = VersionComparator.normalize(primary.display_version)

        versions[profile.REGISTRY_SOURCE] = await self._read_source(
            host, profile.REGISTRY_SOURCE,
            self.facilities.read_registry_value(profile.registry_path, profile.registry_value)
        )

        versions.update(await self._read_cli_versions(host))

        for binary in profile.services + profile.drivers:
            versions[binary.name] = await self._read_source(
                host, binary.name, self.facilities.read_file_version(binary.path)
            )

        return versions

    async def _read_source(self, host: str, source: str, reader: Awaitable[Optional[str]]) -> str:
        """단일 소스 읽기 - 실패는 해당 필드만 Unknown 으로 격하"""
        try:
            raw = await reader
        except TransportError:
            raise
        except Exception as e:
            logger.warning(f"[{host}] Failed to read {source}: {e}")
            return UNKNOWN

        version = VersionComparator.normalize(raw)
        if version == UNKNOWN and raw:
            logger.warning(f"[{host}] Unparseable version for {source}: {raw!r}")
        return version

    async def _read_cli_versions(self, host: str) -> Dict[str, str]:
        """CLI 버전 리포트 실행 및 스키마 기반 파싱"""
        fields = self.profile.cli_schema.fields

        try:
            output = await self.facilities.run_command(self.profile.cli_path, self.profile.cli_args)
        except TransportError:
            raise
        except Exception as e:
            logger.warning(f"[{host}] CLI version report failed: {e}")
            return {name: UNKNOWN for name in fields}

        parsed = self._cli_parser.parse(output)
        for error in self._cli_parser.get_errors():
            logger.warning(f"[{host}] CLI output (schema v{self.profile.cli_schema.version}): {error}")

        return {name: VersionComparator.normalize(value) for name, value in parsed.items()}
