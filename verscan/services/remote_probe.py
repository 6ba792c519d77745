"""
Remote Probe - 원격 호스트에서 HostProbe 실행

SSH 연결 확인 → SSHHostFacilities 구성 → HostProbe 실행
"""

import logging
from typing import Protocol

from ..collectors.facilities import SSHHostFacilities
from ..collectors.probe import HostProbe
from ..collectors.ssh_exec import SSHExecutor, create_ssh_executor
from ..config import AuditSettings, ProductProfile
from ..errors import TransportError
from ..schemas.record import VersionRecord

logger = logging.getLogger(__name__)


class RemoteExecutor(Protocol):
    """호스트에서 프로브를 실행하고 레코드를 반환 (실패 시 TransportError)"""

    async def execute(self, host: str, minimum_version: str) -> VersionRecord:
        ...


class SSHRemoteExecutor:
    """SSH 기반 RemoteExecutor 구현"""

    def __init__(self, settings: AuditSettings, profile: ProductProfile):
        self.settings = settings
        self.profile = profile

    def _create_ssh(self, host: str) -> SSHExecutor:
        return create_ssh_executor(
            host=host,
            port=self.settings.ssh_port,
            username=self.settings.ssh_username,
            auth_method=self.settings.auth_method,
            key_path=self.settings.ssh_key_path,
            password=self.settings.ssh_password,
            timeout=self.settings.connect_timeout,
        )

    async def execute(self, host: str, minimum_version: str) -> VersionRecord:
        ssh = self._create_ssh(host)

        connected, message = await ssh.test_connection()
        if not connected:
            raise TransportError(host, message)

        logger.debug(f"[{host}] {message}")

        probe = HostProbe(SSHHostFacilities(ssh), self.profile)
        return await probe.probe(host, minimum_version)
