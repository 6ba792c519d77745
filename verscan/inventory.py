"""
Inventory - 감사 대상 호스트 목록 구성
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .collectors.reachability import local_host_identifier

logger = logging.getLogger(__name__)


def read_hosts_file(path: str) -> List[str]:
    """
    호스트 파일 읽기

    한 줄에 호스트 하나, '#' 이후는 주석으로 무시합니다.
    """
    hosts = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        host = line.split('#', 1)[0].strip()
        if host:
            hosts.append(host)
    return hosts


def resolve_host_list(
    hosts: Optional[Iterable[str]] = None,
    hosts_file: Optional[str] = None
) -> List[str]:
    """
    호스트 목록 확정 (중복 제거, 입력 순서 유지)

    아무 것도 지정되지 않으면 현재 호스트 하나만 대상으로 합니다.
    """
    candidates = [h.strip() for h in (hosts or []) if h and h.strip()]
    if hosts_file:
        candidates.extend(read_hosts_file(hosts_file))

    resolved = []
    seen = set()
    for host in candidates:
        key = host.lower()
        if key in seen:
            logger.debug(f"Duplicate host ignored: {host}")
            continue
        seen.add(key)
        resolved.append(host)

    if not resolved:
        resolved = [local_host_identifier()]
        logger.info(f"No hosts given, auditing local host: {resolved[0]}")

    return resolved
