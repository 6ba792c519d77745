"""
Errors - 버전 감사 예외 계층

호스트 단위 오류는 호스트 경계에서 모두 흡수되며,
배치 설정 오류(잘못된 최소 버전 등)만 호출자에게 전파됩니다.
"""


class VerscanError(Exception):
    """verscan 기본 예외"""


class NotInstalledError(VerscanError):
    """대상 제품이 호스트에 설치되어 있지 않음 (정보성, 실패 아님)"""


class AmbiguousInstallError(VerscanError):
    """설치 엔트리가 하나만 발견됨 (주 패키지 + 보조 패키지 중 하나 누락)"""


class SubSourceReadError(VerscanError):
    """개별 버전 소스 읽기 실패 - 해당 필드만 Unknown 처리"""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class MalformedVersionError(VerscanError, ValueError):
    """버전 문자열 파싱 불가"""

    def __init__(self, version: str, reason: str = ""):
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Malformed version string: {version!r}{detail}")
        self.version = version


class TransportError(VerscanError):
    """원격 실행 실패 (연결 끊김, 인증 실패, 타임아웃)"""

    def __init__(self, host: str, message: str):
        super().__init__(f"[{host}] {message}")
        self.host = host
