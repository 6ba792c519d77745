"""
Config - 감사 대상 제품 프로파일 및 실행 설정

.env 파일(load_dotenv)과 환경변수에서 설정을 읽습니다.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .parsers.cli_output import CliOutputSchema


@dataclass(frozen=True)
class BinarySource:
    """파일 메타데이터(FileVersion)로 버전을 읽는 바이너리"""
    name: str  # 소스명 (레코드 컬럼)
    path: str


@dataclass(frozen=True)
class ProductProfile:
    """
    감사 대상 제품 정의

    소스 순서 = 레코드 컬럼 순서:
    install_version → registry_version → CLI 필드 → 서비스 → 드라이버
    """
    name: str
    display_name_pattern: str  # Uninstall DisplayName -like 패턴
    registry_path: str
    registry_value: str
    cli_path: str
    cli_args: Tuple[str, ...]
    cli_schema: CliOutputSchema
    services: Tuple[BinarySource, ...] = ()
    drivers: Tuple[BinarySource, ...] = ()
    default_minimum_version: str = ""

    INSTALL_SOURCE = "install_version"
    REGISTRY_SOURCE = "registry_version"

    @property
    def source_names(self) -> List[str]:
        names = [self.INSTALL_SOURCE, self.REGISTRY_SOURCE]
        names.extend(self.cli_schema.fields)
        names.extend(s.name for s in self.services)
        names.extend(d.name for d in self.drivers)
        return names


FSLOGIX_APPS_DIR = r"C:\Program Files\FSLogix\Apps"
WINDOWS_DRIVERS_DIR = r"C:\Windows\System32\drivers"

FSLOGIX_PROFILE = ProductProfile(
    name="fslogix",
    display_name_pattern="*FSLogix Apps*",
    registry_path=r"HKLM:\SOFTWARE\FSLogix\Apps",
    registry_value="InstallVersion",
    cli_path=FSLOGIX_APPS_DIR + r"\frx.exe",
    cli_args=("version",),
    cli_schema=CliOutputSchema(
        version=1,
        fields=("cli_service_version", "cli_apps_version"),
    ),
    services=(
        BinarySource("frxsvc_version", FSLOGIX_APPS_DIR + r"\frxsvc.exe"),
        BinarySource("frxccds_version", FSLOGIX_APPS_DIR + r"\frxccds.exe"),
    ),
    drivers=(
        BinarySource("frxdrv_version", WINDOWS_DRIVERS_DIR + r"\frxdrv.sys"),
        BinarySource("frxdrvvt_version", WINDOWS_DRIVERS_DIR + r"\frxdrvvt.sys"),
        BinarySource("frxccd_version", WINDOWS_DRIVERS_DIR + r"\frxccd.sys"),
    ),
    default_minimum_version="2.9.7653.47581",
)

PROFILES: Dict[str, ProductProfile] = {
    FSLOGIX_PROFILE.name: FSLOGIX_PROFILE,
}


def get_profile(name: str) -> ProductProfile:
    """이름으로 제품 프로파일 조회"""
    profile = PROFILES.get(name.lower())
    if profile:
        return profile

    raise ValueError(f"Unknown product profile: {name} (available: {', '.join(sorted(PROFILES))})")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AuditSettings:
    """감사 실행 설정"""
    profile_name: str = FSLOGIX_PROFILE.name
    minimum_version: str = ""  # 비어있으면 프로파일 기본값 사용

    # SSH 옵션
    ssh_username: str = "Administrator"
    ssh_port: int = 22
    auth_method: str = "key"  # key, password
    ssh_key_path: Optional[str] = None
    ssh_password: Optional[str] = None
    connect_timeout: int = 15

    # 수집 옵션
    max_concurrent: int = 3
    host_timeout: float = 120.0  # 호스트당 타임아웃 (초)
    reachability_timeout: float = 3.0

    # 전송 오류 호스트도 placeholder 레코드로 남길지 여부
    placeholder_on_transport_error: bool = False

    extra_hosts: List[str] = field(default_factory=list)

    @property
    def profile(self) -> ProductProfile:
        return get_profile(self.profile_name)

    @property
    def effective_minimum_version(self) -> str:
        return self.minimum_version or self.profile.default_minimum_version

    @classmethod
    def from_env(cls) -> "AuditSettings":
        """환경변수(VERSCAN_*)에서 설정 생성"""
        hosts = os.getenv("VERSCAN_HOSTS", "")
        return cls(
            profile_name=os.getenv("VERSCAN_PROFILE", FSLOGIX_PROFILE.name),
            minimum_version=os.getenv("VERSCAN_MINIMUM_VERSION", ""),
            ssh_username=os.getenv("VERSCAN_SSH_USERNAME", "Administrator"),
            ssh_port=_env_int("VERSCAN_SSH_PORT", 22),
            auth_method=os.getenv("VERSCAN_AUTH_METHOD", "key"),
            ssh_key_path=os.getenv("VERSCAN_SSH_KEY_PATH") or None,
            ssh_password=os.getenv("VERSCAN_SSH_PASSWORD") or None,
            connect_timeout=_env_int("VERSCAN_CONNECT_TIMEOUT", 15),
            max_concurrent=_env_int("VERSCAN_MAX_CONCURRENT", 3),
            host_timeout=_env_float("VERSCAN_HOST_TIMEOUT", 120.0),
            reachability_timeout=_env_float("VERSCAN_REACHABILITY_TIMEOUT", 3.0),
            placeholder_on_transport_error=_env_bool("VERSCAN_PLACEHOLDER_ON_TRANSPORT_ERROR", False),
            extra_hosts=[h.strip() for h in hosts.split(",") if h.strip()],
        )
