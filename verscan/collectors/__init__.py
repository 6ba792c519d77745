"""
Collectors 패키지

원격 호스트 버전 증거 수집 모듈:
- ssh_exec: SSH 명령 실행 추상화
- facilities: 호스트 조회 기능 (SSH + PowerShell 구현)
- probe: 소스별 버전 수집 및 레코드 조합
- reachability: 디스패치 전 도달성 점검
"""

from .ssh_exec import SSHExecutor, SSHConfig, CommandResult, create_ssh_executor
from .facilities import HostFacilities, SSHHostFacilities
from .probe import HostProbe, select_primary_entry
from .reachability import is_reachable, local_host_identifier

__all__ = [
    "SSHExecutor",
    "SSHConfig",
    "CommandResult",
    "create_ssh_executor",
    "HostFacilities",
    "SSHHostFacilities",
    "HostProbe",
    "select_primary_entry",
    "is_reachable",
    "local_host_identifier",
]
