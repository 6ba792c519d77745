"""
Services 패키지

원격 프로브 실행 및 다중 호스트 수집 서비스
"""

from .fleet_collector import FleetCollector, FleetSummary, HostOutcome
from .remote_probe import RemoteExecutor, SSHRemoteExecutor

__all__ = [
    "FleetCollector",
    "FleetSummary",
    "HostOutcome",
    "RemoteExecutor",
    "SSHRemoteExecutor",
]
