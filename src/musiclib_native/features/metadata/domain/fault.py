"""
Summary: ResolutionFault describing why a file produced no metadata.
Why: Keep the failure visible to tests while the public API degrades to an empty record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

FaultStage = Literal["open", "read"]


@dataclass(frozen=True, slots=True)
class ResolutionFault:
    """A resolution attempt that failed at ``stage``."""

    location: str
    stage: FaultStage
    error: BaseException

    @property
    def message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


__all__ = ["FaultStage", "ResolutionFault"]
