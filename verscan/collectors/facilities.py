"""
Host Facilities - 대상 호스트의 버전 증거 조회 기능

HostProbe 는 이 인터페이스만 사용하므로 전송 방식(SSH, 로컬, 테스트용 fake)과 무관합니다.
"""

import logging
from typing import List, Optional, Protocol, Sequence

from ..errors import SubSourceReadError, TransportError
from ..parsers.install_entries import InstallEntry, InstallEntryParser
from .ssh_exec import CommandResult, SSHExecutor

logger = logging.getLogger(__name__)


class HostFacilities(Protocol):
    """호스트 로컬 조회 기능 (실패 시 SubSourceReadError, 연결 문제는 TransportError)"""

    async def query_install_entries(self, display_name_pattern: str) -> List[InstallEntry]:
        """Uninstall 레지스트리에서 DisplayName 이 패턴과 일치하는 엔트리 조회"""
        ...

    async def read_registry_value(self, path: str, name: str) -> Optional[str]:
        """레지스트리 값 조회"""
        ...

    async def run_command(self, path: str, args: Sequence[str]) -> str:
        """CLI 실행 후 stdout 반환"""
        ...

    async def read_file_version(self, path: str) -> Optional[str]:
        """바이너리 FileVersion 메타데이터 조회"""
        ...


def ps_quote(value: str) -> str:
    """PowerShell 단일 인용 문자열 리터럴"""
    return "'" + value.replace("'", "''") + "'"


UNINSTALL_ROOTS = (
    r"HKLM:\SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall\*",
    r"HKLM:\SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall\*",
)


class SSHHostFacilities:
    """SSH + PowerShell 기반 HostFacilities 구현"""

    def __init__(self, ssh: SSHExecutor):
        self.ssh = ssh
        self._entry_parser = InstallEntryParser()

    @property
    def host(self) -> str:
        return self.ssh.config.host

    async def _run(self, source: str, script: str) -> str:
        result: CommandResult = await self.ssh.execute_powershell(script)

        if result.is_transport_failure:
            raise TransportError(self.host, result.error_message or result.stderr or "connection lost")
        if not result.success:
            raise SubSourceReadError(
                source,
                result.stderr or result.error_message or f"exit code {result.return_code}"
            )
        return result.stdout

    async def query_install_entries(self, display_name_pattern: str) -> List[InstallEntry]:
        roots = ", ".join(ps_quote(root) for root in UNINSTALL_ROOTS)
        script = (
            f"$entries = foreach ($root in @({roots})) {{ "
            "if (Test-Path $root) { Get-ItemProperty $root -ErrorAction SilentlyContinue } }; "
            f"$entries | Where-Object {{ $_.DisplayName -like {ps_quote(display_name_pattern)} }} | "
            "Select-Object DisplayName, DisplayVersion, EstimatedSize, PSChildName | "
            "ConvertTo-Json -Compress"
        )
        output = await self._run(InstallEntryParser.SOURCE, script)

        entries = self._entry_parser.parse(output)
        for error in self._entry_parser.get_errors():
            logger.warning(f"[{self.host}] {error}")
        return entries

    async def read_registry_value(self, path: str, name: str) -> Optional[str]:
        script = (
            f"Get-ItemPropertyValue -LiteralPath {ps_quote(path)} -Name {ps_quote(name)} "
            "-ErrorAction Stop"
        )
        output = await self._run(f"registry:{path}\\{name}", script)
        return output or None

    async def run_command(self, path: str, args: Sequence[str]) -> str:
        quoted_args = " ".join(ps_quote(a) for a in args)
        script = f"& {ps_quote(path)} {quoted_args}".rstrip()
        return await self._run(f"command:{path}", script)

    async def read_file_version(self, path: str) -> Optional[str]:
        script = f"(Get-Item -LiteralPath {ps_quote(path)} -ErrorAction Stop).VersionInfo.FileVersion"
        output = await self._run(f"file:{path}", script)
        return output or None
