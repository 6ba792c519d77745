"""
Reachability - 디스패치 전 네트워크 도달성 사전 점검
"""

import asyncio
import logging
import socket

logger = logging.getLogger(__name__)


async def is_reachable(host: str, port: int = 22, timeout: float = 3.0) -> bool:
    """
    TCP 연결 가능 여부 확인 (SSH 포트 기준)

    Args:
        host: 호스트명/주소
        port: 확인할 포트
        timeout: 연결 타임아웃 (초)
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.debug(f"[{host}] TCP {port} connect timed out after {timeout}s")
        return False
    except OSError as e:
        # DNS 실패(socket.gaierror)도 OSError
        logger.debug(f"[{host}] TCP {port} unreachable: {e}")
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


def local_host_identifier() -> str:
    """현재 호스트 식별자"""
    return socket.gethostname()
