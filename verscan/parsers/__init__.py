"""
Parsers 패키지

원격 명령 출력 파싱 및 버전 비교
"""

from .base import BaseParser
from .cli_output import CliOutputParser, CliOutputSchema
from .install_entries import InstallEntry, InstallEntryParser
from .version_normalizer import UNKNOWN, Ordering, VersionComparator

__all__ = [
    "BaseParser",
    "CliOutputParser",
    "CliOutputSchema",
    "InstallEntry",
    "InstallEntryParser",
    "UNKNOWN",
    "Ordering",
    "VersionComparator",
]
