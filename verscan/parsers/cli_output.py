"""
CLI Output Parser - 제품 CLI 버전 리포트 파서

`frx.exe version` 처럼 "라벨: 값" 형태로 한 줄씩 출력되는 결과를
스키마(줄 순서 → 필드명)에 따라 필드별 버전으로 변환합니다.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from .base import BaseParser
from .version_normalizer import UNKNOWN


@dataclass(frozen=True)
class CliOutputSchema:
    """
    CLI 출력 스키마

    fields[i] 는 i 번째 비어있지 않은 줄에 대응합니다.
    출력 형식이 바뀌면 version 을 올리고 새 스키마를 정의합니다.
    """
    version: int
    fields: Tuple[str, ...]
    delimiter: str = ":"


class CliOutputParser(BaseParser):
    """
    위치 기반 CLI 출력 파서

    출력 예시 (schema v1, fslogix):
        Service version: 2.9.7653.47581
        FSLogix Apps version: 2.9.7653.47581
        Operation completed successfully!

    누락된 줄이나 구분자가 없는 줄은 Unknown 으로 처리합니다.
    """

    SOURCE = "cli"

    def __init__(self, schema: CliOutputSchema):
        super().__init__()
        self.schema = schema

    def parse(self, raw_output: str) -> Dict[str, str]:
        self.clear_errors()
        result = {name: UNKNOWN for name in self.schema.fields}

        if not raw_output:
            self._errors.append("Empty CLI output")
            return result

        lines = [line.strip() for line in raw_output.splitlines() if line.strip()]

        for index, name in enumerate(self.schema.fields):
            if index >= len(lines):
                self._errors.append(f"Line {index} missing for field '{name}'")
                continue

            label, sep, value = lines[index].partition(self.schema.delimiter)
            value = value.strip()
            if not sep or not value:
                self._errors.append(f"Line {index} has no value: {lines[index]!r}")
                continue

            result[name] = value

        return result
