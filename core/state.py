"""Explicit status values for the reading session.

Each flag of the session is a single value drawn from a small closed set,
so combinations such as "loading and failed" cannot be represented.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoadPhase(str, Enum):
    LOADING = "LOADING"
    READY = "READY"
    FAILED = "FAILED"


class RequestPhase(str, Enum):
    IDLE = "IDLE"
    IN_FLIGHT = "IN_FLIGHT"
    FAILED = "FAILED"


class SubmissionPhase(str, Enum):
    IDLE = "IDLE"
    IN_FLIGHT = "IN_FLIGHT"


@dataclass(frozen=True)
class LoadStatus:
    phase: LoadPhase
    reason: Optional[str] = None

    @classmethod
    def loading(cls) -> "LoadStatus":
        return cls(LoadPhase.LOADING)

    @classmethod
    def ready(cls) -> "LoadStatus":
        return cls(LoadPhase.READY)

    @classmethod
    def failed(cls, reason: str) -> "LoadStatus":
        return cls(LoadPhase.FAILED, reason)


@dataclass(frozen=True)
class SummaryRequest:
    phase: RequestPhase = RequestPhase.IDLE
    reason: Optional[str] = None

    @classmethod
    def idle(cls) -> "SummaryRequest":
        return cls(RequestPhase.IDLE)

    @classmethod
    def in_flight(cls) -> "SummaryRequest":
        return cls(RequestPhase.IN_FLIGHT)

    @classmethod
    def failed(cls, reason: str) -> "SummaryRequest":
        return cls(RequestPhase.FAILED, reason)
