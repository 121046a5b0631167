"""
Generation Trace

Structured record of the computation steps behind a generated program:
which evidence tier was used and why others were skipped, the phase split,
each week's interpolated pace. Returned with the result so callers can show
or store it; it never writes to a stream.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class TraceStep:
    stage: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"stage": self.stage, "message": self.message, "data": self.data}


@dataclass
class GenerationTrace:
    """Append-only list of steps, owned by a single generation call."""
    steps: List[TraceStep] = field(default_factory=list)

    def record(self, stage: str, message: str, **data: Any) -> None:
        self.steps.append(TraceStep(stage=stage, message=message, data=data))

    def for_stage(self, stage: str) -> List[TraceStep]:
        return [s for s in self.steps if s.stage == stage]

    def __len__(self) -> int:
        return len(self.steps)

    def to_list(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.steps]


class NullTrace(GenerationTrace):
    """Trace that drops everything; for callers that don't want one."""

    def record(self, stage: str, message: str, **data: Any) -> None:
        return None
