"""Type definitions for kdbg."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PodInfo:
    name: str
    namespace: str
    status: str
    restart_count: int
    created_at: datetime | None  # None when metadata.creationTimestamp is missing or invalid


@dataclass(frozen=True)
class PodTarget:
    name: str
    namespace: str
