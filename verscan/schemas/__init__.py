from .record import InstallCheck, VersionRecord, compute_validation

__all__ = ["InstallCheck", "VersionRecord", "compute_validation"]
