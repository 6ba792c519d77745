"""
Version Normalizer - 버전 정규화 및 비교 유틸리티
"""

import re
import logging
from enum import IntEnum
from typing import Tuple

from ..errors import MalformedVersionError

logger = logging.getLogger(__name__)

# 값을 확인할 수 없는 소스의 표시값 (파싱 대상 아님)
UNKNOWN = "Unknown"

VersionTuple = Tuple[int, int, int, int]


class Ordering(IntEnum):
    """버전 비교 결과"""
    LESS = -1
    EQUAL = 0
    GREATER = 1


class VersionComparator:
    """
    Dotted-numeric 버전 파싱/비교 유틸리티

    major.minor.build.revision 4개 컴포넌트를 숫자로 비교합니다:
    - "2.9" → (2, 9, 0, 0)
    - "2.10" > "2.9" (문자열 비교가 아닌 숫자 비교)
    - "Unknown" 은 파싱하지 않고 항상 최소 버전 미달로 판정
    """

    COMPONENTS = 4

    # Windows FileVersion 형식: "10.0.19041.1 (WinBuild.160101.0800)", "2, 9, 7653, 47581"
    LEADING_VERSION = re.compile(r'^\s*v?(\d+(?:\s*[.,]\s*\d+){0,3})')
    # 버전 뒤에 허용되는 꼬리: 공백뿐이거나 공백 + 괄호 주석
    TRAILER = re.compile(r'^(\s*|\s+\(.*)$', re.DOTALL)

    @classmethod
    def is_unknown(cls, version: str) -> bool:
        return version is None or version.strip().lower() == UNKNOWN.lower()

    @classmethod
    def parse(cls, version: str) -> VersionTuple:
        """
        버전 문자열을 4-튜플로 변환

        Args:
            version: "2.9.7653.47581" 형식 문자열

        Returns:
            (major, minor, build, revision)

        Raises:
            MalformedVersionError: 숫자/점 이외의 토큰, 빈 컴포넌트, 5개 이상 컴포넌트
        """
        if cls.is_unknown(version):
            raise MalformedVersionError(str(version), "sentinel is not a version")

        text = version.strip()
        if not text:
            raise MalformedVersionError(version, "empty")

        parts = text.split('.')
        if len(parts) > cls.COMPONENTS:
            raise MalformedVersionError(version, f"more than {cls.COMPONENTS} components")

        numbers = []
        for part in parts:
            # int()는 "+1", " 1", "١" 등을 허용하므로 ASCII 숫자만 직접 검사
            if not part or not all('0' <= ch <= '9' for ch in part):
                raise MalformedVersionError(version, f"non-numeric component {part!r}")
            numbers.append(int(part))

        numbers.extend([0] * (cls.COMPONENTS - len(numbers)))
        return tuple(numbers)

    @classmethod
    def compare(cls, v1: str, v2: str) -> Ordering:
        """
        버전 비교

        Returns:
            Ordering.LESS (v1 < v2), Ordering.EQUAL, Ordering.GREATER
        """
        t1, t2 = cls.parse(v1), cls.parse(v2)

        if t1 < t2:
            return Ordering.LESS
        elif t1 > t2:
            return Ordering.GREATER
        return Ordering.EQUAL

    @classmethod
    def meets_minimum(cls, candidate: str, minimum: str) -> bool:
        """candidate >= minimum 여부 (Unknown / 파싱 실패 시 False)"""
        if cls.is_unknown(candidate) or cls.is_unknown(minimum):
            return False

        try:
            return cls.compare(candidate, minimum) != Ordering.LESS
        except MalformedVersionError as e:
            logger.debug(f"Version comparison failed closed: {e}")
            return False

    @classmethod
    def is_valid(cls, version: str) -> bool:
        try:
            cls.parse(version)
        except MalformedVersionError:
            return False
        return True

    @classmethod
    def validate_minimum(cls, minimum: str) -> str:
        """배치 입력용 최소 버전 검증 (실패 시 예외 전파)"""
        cls.parse(minimum)
        return minimum.strip()

    @classmethod
    def normalize(cls, raw: str) -> str:
        """
        수집된 원본 문자열을 비교 가능한 버전으로 정규화

        예시:
            " 2.9.7653.47581 " → 2.9.7653.47581
            "2, 9, 7653, 47581" → 2.9.7653.47581
            "10.0.19041.1 (WinBuild.160101.0800)" → 10.0.19041.1
            "", None, "n/a" → Unknown
            "3..0", "2.10b", "3.0.0.0-rc", "1.2.3.4.5" → Unknown
        """
        if raw is None or cls.is_unknown(raw):
            return UNKNOWN

        match = cls.LEADING_VERSION.match(raw)
        if not match:
            return UNKNOWN

        # 숫자 토큰 뒤에 다른 문자가 붙어 있으면 잘라내지 않고 Unknown 처리
        if not cls.TRAILER.match(raw[match.end():]):
            return UNKNOWN

        version = re.sub(r'\s*[.,]\s*', '.', match.group(1))
        return version if cls.is_valid(version) else UNKNOWN
