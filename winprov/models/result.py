"""
Result record for a completed artifact fetch.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FetchResult:
    """What was written, from where, and how long it took."""

    path: Path
    url: str
    bytes_written: int
    sha256: str
    duration_s: float = 0.0
    attempts: int = 1

    @property
    def speed_bps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return self.bytes_written / self.duration_s
