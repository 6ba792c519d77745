"""
SSH Executor - 원격 명령 실행 추상화

Windows OpenSSH 서버에 접속해 PowerShell 명령을 실행하고 결과를 수집합니다.
시스템 ssh subprocess 우선 사용, 없으면 asyncssh 사용
"""

import asyncio
import base64
import shutil
from typing import List, Optional, Tuple
from dataclasses import dataclass
from datetime import datetime
import logging

import asyncssh

logger = logging.getLogger(__name__)

# ssh 클라이언트가 연결 실패 시 반환하는 코드
SSH_CONNECTION_FAILURE = 255

# 로컬 타임아웃/실행 불가 표시값
LOCAL_FAILURE = -1

CONNECTION_PROBE = "connection_test"


@dataclass
class SSHConfig:
    """SSH 연결 설정"""
    host: str
    port: int = 22
    username: str = "Administrator"
    auth_method: str = "key"  # key, password
    key_path: Optional[str] = None
    password: Optional[str] = None
    timeout: int = 15  # 연결 타임아웃 (초)
    command_timeout: int = 60  # 명령 실행 타임아웃 (초)


@dataclass
class CommandResult:
    """명령 실행 결과"""
    command: str
    stdout: str = ""
    stderr: str = ""
    return_code: int = LOCAL_FAILURE
    success: bool = False
    duration_ms: float = 0.0
    error_message: str = ""

    def __bool__(self):
        return self.success

    @property
    def is_transport_failure(self) -> bool:
        """명령 자체가 아닌 연결/타임아웃 문제로 실패했는지 여부"""
        return self.return_code in (LOCAL_FAILURE, SSH_CONNECTION_FAILURE)


def encode_powershell(script: str) -> str:
    """powershell -EncodedCommand 용 UTF-16LE base64 인코딩"""
    return base64.b64encode(script.encode("utf-16-le")).decode("ascii")


def _elapsed_ms(start_time: datetime) -> float:
    return (datetime.now() - start_time).total_seconds() * 1000


class SSHExecutor:
    """
    SSH 원격 명령 실행기

    시스템 ssh 명령을 우선 사용하고, 없으면 asyncssh 로 실행합니다.
    실패는 예외 대신 CommandResult 로 돌려주며, 재시도는 상위(FleetCollector)
    정책에 맡깁니다.
    """

    def __init__(self, config: SSHConfig):
        self.config = config
        self.use_system_ssh = shutil.which("ssh") is not None

    @property
    def backend(self) -> str:
        return "system_ssh" if self.use_system_ssh else "asyncssh"

    def _build_ssh_command(self, remote_command: str) -> List[str]:
        """시스템 ssh 명령 빌드"""
        cfg = self.config
        cmd = []

        if cfg.auth_method == "password" and cfg.password:
            if shutil.which("sshpass"):
                cmd.extend(["sshpass", "-p", cfg.password])
            else:
                logger.warning("sshpass not installed, password auth may fail")

        cmd.append("ssh")

        if cfg.auth_method == "password":
            cmd.extend([
                "-o", "BatchMode=no",
                "-o", "PreferredAuthentications=password",
                "-o", "PubkeyAuthentication=no",
            ])
        else:
            cmd.extend(["-o", "BatchMode=yes"])

        cmd.extend([
            "-o", "StrictHostKeyChecking=accept-new",
            "-o", f"ConnectTimeout={cfg.timeout}",
            "-o", "ServerAliveInterval=10",
            "-o", "ServerAliveCountMax=3",
        ])

        if cfg.port != 22:
            cmd.extend(["-p", str(cfg.port)])

        if cfg.auth_method == "key" and cfg.key_path:
            cmd.extend(["-i", cfg.key_path])

        cmd.append(f"{cfg.username}@{cfg.host}")
        cmd.append(remote_command)

        return cmd

    async def execute(self, command: str, timeout: Optional[int] = None) -> CommandResult:
        """
        원격 명령 실행

        Args:
            command: 실행할 명령
            timeout: 타임아웃 (초), None이면 config.command_timeout 사용

        Returns:
            CommandResult: 실행 결과 (예외를 던지지 않음)
        """
        timeout = timeout or self.config.command_timeout

        if self.use_system_ssh:
            return await self._execute_system_ssh(command, timeout)
        return await self._execute_asyncssh(command, timeout)

    async def execute_powershell(self, script: str, timeout: Optional[int] = None) -> CommandResult:
        """PowerShell 스크립트 실행 (EncodedCommand 로 원격 셸 따옴표 처리 회피)"""
        command = (
            "powershell.exe -NoProfile -NonInteractive -ExecutionPolicy Bypass "
            f"-EncodedCommand {encode_powershell(script)}"
        )
        result = await self.execute(command, timeout)
        # 로그/에러 메시지에는 인코딩 전 스크립트를 남김
        result.command = script
        return result

    async def _execute_system_ssh(self, command: str, timeout: int) -> CommandResult:
        """시스템 ssh subprocess 실행"""
        start_time = datetime.now()

        try:
            process = await asyncio.create_subprocess_exec(
                *self._build_ssh_command(command),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            return CommandResult(command=command, error_message=str(e), duration_ms=_elapsed_ms(start_time))

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return CommandResult(
                command=command,
                error_message=f"Command timed out after {timeout}s",
                duration_ms=_elapsed_ms(start_time)
            )

        if process.returncode == SSH_CONNECTION_FAILURE:
            logger.warning(f"SSH connection to {self.config.host} failed")

        return CommandResult(
            command=command,
            stdout=stdout.decode("utf-8", errors="replace").strip(),
            stderr=stderr.decode("utf-8", errors="replace").strip(),
            return_code=process.returncode,
            success=process.returncode == 0,
            duration_ms=_elapsed_ms(start_time)
        )

    async def _execute_asyncssh(self, command: str, timeout: int) -> CommandResult:
        """asyncssh 연결 1회로 명령 실행"""
        cfg = self.config
        start_time = datetime.now()

        options = {
            "host": cfg.host,
            "port": cfg.port,
            "username": cfg.username,
            "known_hosts": None,  # 내부망 전제
            "connect_timeout": cfg.timeout,
        }
        if cfg.auth_method == "key" and cfg.key_path:
            options["client_keys"] = [cfg.key_path]
        elif cfg.auth_method == "password" and cfg.password:
            options["password"] = cfg.password

        try:
            async with asyncssh.connect(**options) as conn:
                result = await asyncio.wait_for(conn.run(command, check=False), timeout=timeout)
        except asyncio.TimeoutError:
            return CommandResult(
                command=command,
                error_message=f"Command timed out after {timeout}s",
                duration_ms=_elapsed_ms(start_time)
            )
        except (OSError, asyncssh.Error) as e:
            logger.warning(f"SSH connection to {cfg.host} failed: {e}")
            return CommandResult(
                command=command,
                error_message=str(e),
                return_code=SSH_CONNECTION_FAILURE,
                duration_ms=_elapsed_ms(start_time)
            )

        # exit_status 는 원격 프로세스가 시그널로 끝나면 None
        return_code = result.exit_status if result.exit_status is not None else LOCAL_FAILURE
        return CommandResult(
            command=command,
            stdout=result.stdout.strip() if result.stdout else "",
            stderr=result.stderr.strip() if result.stderr else "",
            return_code=return_code,
            success=return_code == 0,
            duration_ms=_elapsed_ms(start_time)
        )

    async def test_connection(self) -> Tuple[bool, str]:
        """
        SSH 연결 테스트

        Returns:
            (성공여부, 메시지)
        """
        result = await self.execute(f"echo {CONNECTION_PROBE}", timeout=self.config.timeout + 5)

        if result.success and CONNECTION_PROBE in result.stdout:
            return True, f"Connected successfully (backend: {self.backend})"
        return False, f"Connection failed: {result.error_message or result.stderr or 'no output'}"


def create_ssh_executor(
    host: str,
    port: int = 22,
    username: str = "Administrator",
    auth_method: str = "key",
    key_path: Optional[str] = None,
    password: Optional[str] = None,
    timeout: int = 15
) -> SSHExecutor:
    """SSH Executor 팩토리 함수"""
    return SSHExecutor(SSHConfig(
        host=host,
        port=port,
        username=username,
        auth_method=auth_method,
        key_path=key_path,
        password=password,
        timeout=timeout
    ))
