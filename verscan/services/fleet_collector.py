"""
Fleet Collector - 다수 호스트 버전 수집 오케스트레이션

기능:
- 전체 동시 실행 제한 (기본 3)
- 호스트당 타임아웃
- 호스트 단위 실패 격리 (한 호스트 오류가 배치를 중단하지 않음)
- 입력 순서 유지 결과 병합
- 진행상황 콜백 / 호스트 간 취소 체크포인트
"""

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass, field
from datetime import datetime
import logging

from ..collectors.reachability import is_reachable
from ..config import AuditSettings
from ..errors import TransportError
from ..parsers.version_normalizer import VersionComparator
from ..schemas.record import InstallCheck, VersionRecord
from .remote_probe import RemoteExecutor, SSHRemoteExecutor

logger = logging.getLogger(__name__)

ReachabilityCheck = Callable[[str], Awaitable[bool]]


@dataclass
class HostOutcome:
    """호스트별 처리 결과"""
    host: str
    status: str = "pending"  # completed, unreachable, failed, cancelled
    record: Optional[VersionRecord] = None
    error: Optional[str] = None


@dataclass
class FleetSummary:
    """배치 요약"""
    total: int = 0
    processed: int = 0
    passed: int = 0
    not_installed: int = 0
    unreachable: int = 0
    failed: int = 0
    cancelled: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    failed_hosts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "total": self.total,
            "processed": self.processed,
            "passed": self.passed,
            "not_installed": self.not_installed,
            "unreachable": self.unreachable,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "failed_hosts": list(self.failed_hosts),
        }


class FleetCollector:
    """
    호스트 목록 전체에 대한 버전 수집기

    사용 예시:
    ```python
    collector = FleetCollector.from_settings(settings)
    collector.set_on_progress(lambda host, done, total, percent: print(percent))
    records = await collector.collect_all(["vdi-01", "vdi-02"], "2.9.7653.47581")
    print(collector.last_summary.to_dict())
    ```
    """

    def __init__(
        self,
        executor: RemoteExecutor,
        source_names: Sequence[str],
        reachability: ReachabilityCheck = is_reachable,
        max_concurrent: int = 3,
        host_timeout: Optional[float] = 120.0,
        placeholder_on_transport_error: bool = False
    ):
        """
        Args:
            executor: 원격 프로브 실행기
            source_names: placeholder 레코드에 채울 소스 목록
            reachability: 도달성 사전 점검 함수
            max_concurrent: 동시 실행 가능 호스트 수
            host_timeout: 호스트당 프로브 타임아웃 (초), None이면 무제한
            placeholder_on_transport_error: 전송 오류 호스트도 placeholder 레코드로 남길지 여부
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")

        self.executor = executor
        self.source_names = list(source_names)
        self.reachability = reachability
        self.max_concurrent = max_concurrent
        self.host_timeout = host_timeout
        self.placeholder_on_transport_error = placeholder_on_transport_error

        self._cancelled = asyncio.Event()
        self._completed = 0
        self._progress_lock: Optional[asyncio.Lock] = None
        self._on_progress: Optional[Callable] = None

        self.last_summary: Optional[FleetSummary] = None
        self.last_outcomes: List[HostOutcome] = []

    @classmethod
    def from_settings(cls, settings: AuditSettings) -> "FleetCollector":
        """설정에서 SSH 기반 수집기 생성"""
        profile = settings.profile

        async def reachability(host: str) -> bool:
            return await is_reachable(host, settings.ssh_port, settings.reachability_timeout)

        return cls(
            executor=SSHRemoteExecutor(settings, profile),
            source_names=profile.source_names,
            reachability=reachability,
            max_concurrent=settings.max_concurrent,
            host_timeout=settings.host_timeout,
            placeholder_on_transport_error=settings.placeholder_on_transport_error,
        )

    def set_on_progress(self, callback: Callable[[str, int, int, int], None]):
        """
        진행상황 콜백 설정 (host, completed, total, percent) - 동기/비동기 모두 가능

        취소로 건너뛴 호스트도 한 번씩 보고되므로 배치 종료 시 항상 100% 에 도달합니다.
        """
        self._on_progress = callback

    def cancel(self):
        """
        아직 디스패치되지 않은 호스트 처리 중단 (진행 중인 프로브는 완료됨)

        배치 시작 전에 호출하면 다음 collect_all 의 모든 호스트가 취소됩니다.
        취소 상태는 해당 배치가 끝날 때 해제됩니다.
        """
        if not self._cancelled.is_set():
            logger.info("Fleet collection cancellation requested")
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def collect_all(self, hosts: Iterable[str], minimum_version: str) -> List[VersionRecord]:
        """
        전체 호스트 수집

        Args:
            hosts: 호스트 목록
            minimum_version: 요구 최소 버전

        Returns:
            입력 순서대로 정렬된 레코드 목록
            (도달 불가 호스트는 placeholder 포함, 전송 오류 호스트는 설정에 따라 제외)

        Raises:
            MalformedVersionError: minimum_version 이 올바른 버전이 아닐 때
        """
        minimum_version = VersionComparator.validate_minimum(minimum_version)
        hosts = list(hosts)

        self._completed = 0
        self._progress_lock = asyncio.Lock()

        summary = FleetSummary(total=len(hosts), started_at=datetime.now())
        logger.info(
            f"Collecting versions from {len(hosts)} hosts "
            f"(minimum={minimum_version}, concurrency={self.max_concurrent})"
        )

        semaphore = asyncio.Semaphore(self.max_concurrent)
        try:
            outcomes = await asyncio.gather(*(
                self._run_host(host, minimum_version, len(hosts), semaphore)
                for host in hosts
            ))
        finally:
            self._cancelled.clear()

        records = [o.record for o in outcomes if o.record is not None]

        self.last_outcomes = list(outcomes)
        self.last_summary = self._summarize(summary, outcomes, records)
        logger.info(
            f"Fleet collection completed: {summary.processed}/{summary.total} processed, "
            f"{summary.passed} passed, {summary.not_installed} not installed, "
            f"{summary.unreachable} unreachable, {summary.failed} failed"
            + (f", {summary.cancelled} cancelled" if summary.cancelled else "")
        )
        return records

    async def _run_host(
        self,
        host: str,
        minimum_version: str,
        total: int,
        semaphore: asyncio.Semaphore
    ) -> HostOutcome:
        """세마포어 안에서 호스트 하나 처리"""
        async with semaphore:
            # 취소 체크포인트 (디스패치 직전)
            if self._cancelled.is_set():
                outcome = HostOutcome(host=host, status="cancelled")
            else:
                outcome = await self._process_host(host, minimum_version)

        await self._report_progress(host, total)
        return outcome

    async def _process_host(self, host: str, minimum_version: str) -> HostOutcome:
        try:
            reachable = await self.reachability(host)
        except Exception as e:
            logger.warning(f"[{host}] Reachability check failed: {e}")
            reachable = False

        if not reachable:
            logger.warning(f"[{host}] Host unreachable, recording placeholder")
            return HostOutcome(
                host=host,
                status="unreachable",
                record=self._placeholder(host, minimum_version, "Host unreachable"),
                error="unreachable",
            )

        try:
            record = await asyncio.wait_for(
                self.executor.execute(host, minimum_version),
                timeout=self.host_timeout
            )
        except asyncio.TimeoutError:
            error = f"Probe timed out after {self.host_timeout}s"
        except TransportError as e:
            error = str(e)
        except Exception as e:
            logger.exception(f"[{host}] Unexpected probe failure")
            error = f"Probe failed: {e}"
        else:
            return HostOutcome(host=host, status="completed", record=record)

        if self.placeholder_on_transport_error:
            logger.warning(f"[{host}] {error} - recording placeholder")
            record = self._placeholder(host, minimum_version, error)
        else:
            logger.warning(f"[{host}] {error} - host skipped")
            record = None

        return HostOutcome(host=host, status="failed", record=record, error=error)

    def _placeholder(self, host: str, minimum_version: str, reason: str) -> VersionRecord:
        return VersionRecord.placeholder(
            host, minimum_version, self.source_names,
            install_check=InstallCheck.UNKNOWN,
            warning=reason,
        )

    async def _report_progress(self, host: str, total: int):
        """진행상황 보고 (콜백 오류는 로그만 남김)"""
        async with self._progress_lock:
            self._completed += 1
            completed = self._completed

        percent = int(completed * 100 / total) if total else 100
        logger.debug(f"[{host}] done ({completed}/{total}, {percent}%)")

        if not self._on_progress:
            return

        try:
            result = self._on_progress(host, completed, total, percent)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"[Progress Callback Error] {e}")

    def _summarize(
        self,
        summary: FleetSummary,
        outcomes: List[HostOutcome],
        records: List[VersionRecord]
    ) -> FleetSummary:
        for outcome in outcomes:
            if outcome.status == "cancelled":
                summary.cancelled += 1
            elif outcome.status == "unreachable":
                summary.unreachable += 1
            elif outcome.status == "failed":
                summary.failed += 1
                summary.failed_hosts.append(outcome.host)

        summary.processed = summary.total - summary.cancelled
        summary.passed = sum(1 for r in records if r.validation_passed)
        summary.not_installed = sum(1 for r in records if r.install_check == InstallCheck.NOT_INSTALLED)
        summary.completed_at = datetime.now()
        return summary
