"""
Base Parser - 파서 기본 클래스
"""

from typing import Any, List
from abc import ABC, abstractmethod


class BaseParser(ABC):
    """원격 명령 출력 파서 기본 클래스"""

    # 파싱 대상 식별자 (서브클래스에서 정의)
    SOURCE = "unknown"

    def __init__(self):
        self._errors: List[str] = []

    @abstractmethod
    def parse(self, raw_output: str) -> Any:
        """
        원시 출력 파싱

        짧거나 깨진 입력에서도 예외 없이 결과를 반환해야 하며,
        문제는 get_errors()로 확인합니다.

        Args:
            raw_output: 원격 명령 출력
        """
        pass

    def get_errors(self) -> List[str]:
        """파싱 중 발생한 에러 반환"""
        return self._errors.copy()

    def clear_errors(self):
        """에러 목록 초기화"""
        self._errors = []
