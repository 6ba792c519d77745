"""
Install Entry Parser - 설치 레지스트리(Uninstall 키) 조회 결과 파서
"""

import json
from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from .base import BaseParser


@dataclass
class InstallEntry:
    """Uninstall 레지스트리 엔트리"""
    display_name: str
    display_version: str = ""
    estimated_size: int = 0  # KB
    key_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class InstallEntryParser(BaseParser):
    """
    ConvertTo-Json 출력 파서

    PowerShell 은 결과가 1건이면 객체, 여러 건이면 배열, 0건이면 빈 문자열을 출력합니다.
    필드: DisplayName, DisplayVersion, EstimatedSize, PSChildName
    """

    SOURCE = "installer_registry"

    def parse(self, raw_output: str) -> List[InstallEntry]:
        entries = []
        self.clear_errors()

        if not raw_output or not raw_output.strip():
            return entries

        try:
            data = json.loads(raw_output)
        except json.JSONDecodeError as e:
            self._errors.append(f"Invalid JSON from installer query: {e}")
            return entries

        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            self._errors.append(f"Unexpected JSON type: {type(data).__name__}")
            return entries

        for item in data:
            if not isinstance(item, dict) or not item.get("DisplayName"):
                self._errors.append(f"Skipped entry without DisplayName: {item!r}")
                continue

            entries.append(InstallEntry(
                display_name=str(item["DisplayName"]),
                display_version=str(item.get("DisplayVersion") or ""),
                estimated_size=self._to_int(item.get("EstimatedSize")),
                key_name=str(item.get("PSChildName") or ""),
            ))

        return entries

    @staticmethod
    def _to_int(value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0
