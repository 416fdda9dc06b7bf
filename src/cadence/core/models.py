"""Verification event value types."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = [
    "VerificationKind",
    "VerificationMethod",
    "VerificationRecord",
]


class VerificationKind(str, Enum):
    """Rule type that produced a verification record."""

    SCHEDULE = "schedule"
    FREQUENCY = "frequency"


class VerificationMethod(str, Enum):
    """Evidence method behind a verification record."""

    MANUAL = "manual"
    CAMERA = "camera"
    SCREENSHOT = "screenshot"
    COMBO = "combo"


@dataclass(frozen=True)
class VerificationRecord:
    """An attempt at a goal, as reported by the verification pipeline.

    Attributes
    ----------
    goal_id : str
        Opaque goal identifier
    timestamp_ms : int
        Attempt instant in epoch milliseconds
    passed : bool
        Whether the attempt met its own pass criteria
    kind : VerificationKind
        Rule type (schedule or frequency)
    method : VerificationMethod
        Evidence method
    """

    goal_id: str
    timestamp_ms: int
    passed: bool
    kind: VerificationKind = VerificationKind.FREQUENCY
    method: VerificationMethod = VerificationMethod.MANUAL

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VerificationRecord:
        """Build a record from a JSON-shaped mapping.

        Accepts ``goal_id``/``goalId`` and ``timestamp_ms``/``ts``.

        Raises
        ------
        ValueError
            If a required field is missing, ``passed`` is not a boolean, or an
            enum value is unknown
        """
        goal_id = data.get("goal_id", data.get("goalId"))
        timestamp_ms = data.get("timestamp_ms", data.get("ts"))
        if goal_id is None:
            raise ValueError("Verification record is missing 'goal_id'")
        if (
            timestamp_ms is None
            or isinstance(timestamp_ms, bool)
            or not isinstance(timestamp_ms, (int, float))
            or not math.isfinite(timestamp_ms)
        ):
            raise ValueError(f"Verification record for {goal_id!r} has no numeric 'timestamp_ms'")
        if "passed" not in data:
            raise ValueError(f"Verification record for {goal_id!r} is missing 'passed'")
        passed = data["passed"]
        # 0/1 are accepted; strings such as "false" are not
        if not isinstance(passed, int) or passed not in (0, 1):
            raise ValueError(f"Verification record for {goal_id!r} has non-boolean 'passed': {passed!r}")

        return cls(
            goal_id=str(goal_id),
            timestamp_ms=int(timestamp_ms),
            passed=bool(passed),
            kind=VerificationKind(data.get("kind", VerificationKind.FREQUENCY.value)),
            method=VerificationMethod(data.get("method", VerificationMethod.MANUAL.value)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "goal_id": self.goal_id,
            "timestamp_ms": self.timestamp_ms,
            "passed": self.passed,
            "kind": self.kind.value,
            "method": self.method.value,
        }
